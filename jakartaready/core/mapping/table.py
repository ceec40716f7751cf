"""javax -> jakarta mapping table.

Loaded once from a declarative YAML resource and read-only afterwards. The
table is handed to its consumers (classifier, analysis engine, scanners)
by reference; nothing looks it up through module state.

Resource layout::

    mappings:
      - javax:   {groupId: javax.servlet,   artifactId: javax.servlet-api}
        jakarta: {groupId: jakarta.servlet, artifactId: jakarta.servlet-api}
        versionMapping: {"4.0.1": "5.0.0"}
        compatibility: MINOR_CHANGES          # optional
    frameworks:
      - {groupId: org.springframework.boot, minMajorVersion: 3}
    packages:
      - javax.servlet
"""

import logging
import re
from importlib import resources
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..constants import BUNDLED_MAPPING_RESOURCE, DEFAULT_JAKARTA_VERSION
from ..dependency.models import Artifact
from ..exceptions import InputNotFoundError, MappingTableError
from .models import CompatibilityLevel, FrameworkRule, JakartaEquivalent

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


# =============================================================================
# Resource schema
# =============================================================================


class CoordinateSpec(BaseModel):
    """groupId/artifactId pair in the mapping resource."""
    model_config = ConfigDict(populate_by_name=True)

    group_id: str = Field(..., alias="groupId", min_length=1)
    artifact_id: str = Field(..., alias="artifactId", min_length=1)


class MappingEntrySpec(BaseModel):
    """One javax -> jakarta row."""
    model_config = ConfigDict(populate_by_name=True)

    javax: CoordinateSpec
    jakarta: CoordinateSpec
    version_mapping: Dict[str, str] = Field(default_factory=dict, alias="versionMapping")
    compatibility: CompatibilityLevel = CompatibilityLevel.MINOR_CHANGES

    @field_validator("version_mapping", mode="before")
    @classmethod
    def _stringify_versions(cls, value: Any) -> Any:
        # YAML reads unquoted 2.0 as a float
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(k): str(v) for k, v in value.items()}
        return value


class FrameworkRuleSpec(BaseModel):
    """A Jakarta-compatible framework and its minimum major version."""
    model_config = ConfigDict(populate_by_name=True)

    group_id: str = Field(..., alias="groupId", min_length=1)
    min_major_version: Optional[int] = Field(None, alias="minMajorVersion", ge=0)
    description: str = ""


class MappingDocument(BaseModel):
    """Top-level mapping resource."""
    mappings: List[MappingEntrySpec] = Field(default_factory=list)
    frameworks: List[FrameworkRuleSpec] = Field(default_factory=list)
    packages: List[str] = Field(default_factory=list)


# =============================================================================
# Version helpers
# =============================================================================


def major_version(version: Optional[str]) -> Optional[int]:
    """Leading integer of a version string ('3.2.1' -> 3, '26.1.3.Final' -> 26)."""
    if not version:
        return None
    match = _LEADING_DIGITS.match(version)
    return int(match.group(1)) if match else None


def version_sort_key(version: str) -> Tuple:
    """Natural ordering key: numeric parts compare as numbers, others as text."""
    parts = re.split(r"[.\-_+]", version)
    return tuple(
        (0, int(part), "") if part.isdigit() else (1, 0, part)
        for part in parts
    )


# =============================================================================
# Mapping table
# =============================================================================


class _MappingRow:
    __slots__ = ("group_id", "artifact_id", "versions", "compatibility")

    def __init__(self, spec: MappingEntrySpec) -> None:
        self.group_id = spec.jakarta.group_id
        self.artifact_id = spec.jakarta.artifact_id
        # Canonical order makes the fallback version reproducible
        self.versions: Tuple[Tuple[str, str], ...] = tuple(
            sorted(spec.version_mapping.items(), key=lambda kv: version_sort_key(kv[0]))
        )
        self.compatibility = spec.compatibility


class MappingTable:
    """Immutable javax <-> jakarta coordinate and framework-compatibility table.

    Safe for unlimited concurrent readers once constructed.
    """

    def __init__(self, document: MappingDocument, source: str = "<memory>") -> None:
        rows: Dict[Tuple[str, str], _MappingRow] = {}
        for spec in document.mappings:
            key = (spec.javax.group_id, spec.javax.artifact_id)
            if key in rows:
                logger.warning(f"Duplicate mapping for {key[0]}:{key[1]} in {source}; keeping first")
                continue
            rows[key] = _MappingRow(spec)

        self._rows: Mapping[Tuple[str, str], _MappingRow] = MappingProxyType(rows)
        self._frameworks: Tuple[FrameworkRule, ...] = tuple(
            FrameworkRule(
                group_id=f.group_id,
                min_major_version=f.min_major_version,
                description=f.description,
            )
            for f in document.frameworks
        )
        # Longest prefix first so nested packages win
        self._packages: Tuple[str, ...] = tuple(
            sorted({p.strip().rstrip(".") for p in document.packages if p.strip()}, key=len, reverse=True)
        )
        self.source = source

        logger.info(
            f"Loaded {len(self._rows)} Jakarta mappings, {len(self._frameworks)} framework rules "
            f"and {len(self._packages)} migrated packages from {source}"
        )

    # ── Construction ────────────────────────────────────────────────────

    @classmethod
    def from_document(cls, data: Any, source: str = "<memory>") -> "MappingTable":
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise MappingTableError(f"Mapping resource {source} must be a mapping at top level")
        try:
            document = MappingDocument.model_validate(data)
        except ValidationError as e:
            raise MappingTableError(f"Invalid mapping resource {source}: {e}") from e
        return cls(document, source=source)

    @classmethod
    def from_bytes(cls, data: Union[bytes, str], source: str = "<bytes>") -> "MappingTable":
        try:
            parsed = yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise MappingTableError(f"Failed to parse mapping resource {source}: {e}") from e
        return cls.from_document(parsed, source=source)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "MappingTable":
        path = Path(path)
        if not path.is_file():
            raise InputNotFoundError(f"Mapping resource not found: {path}")
        return cls.from_bytes(path.read_bytes(), source=str(path))

    # ── Lookups ─────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._rows)

    @property
    def frameworks(self) -> Tuple[FrameworkRule, ...]:
        return self._frameworks

    @property
    def packages(self) -> Tuple[str, ...]:
        return self._packages

    def has_mapping(self, group_id: str, artifact_id: str) -> bool:
        return (group_id, artifact_id) in self._rows

    def find_mapping(self, artifact: Artifact) -> Optional[JakartaEquivalent]:
        row = self._rows.get((artifact.group_id, artifact.artifact_id))
        if row is None:
            return None
        version = self.get_jakarta_version(
            artifact.group_id, artifact.artifact_id, artifact.version
        ) or DEFAULT_JAKARTA_VERSION
        return JakartaEquivalent(
            group_id=row.group_id,
            artifact_id=row.artifact_id,
            version=version,
            compatibility=row.compatibility,
        )

    def get_jakarta_version(self, group_id: str, artifact_id: str, javax_version: str) -> Optional[str]:
        """Jakarta version for a javax version.

        Exact match first; otherwise the first row of the version table in
        natural version order. None when the row has no version table.
        """
        row = self._rows.get((group_id, artifact_id))
        if row is None or not row.versions:
            return None
        for javax, jakarta in row.versions:
            if javax == javax_version:
                return jakarta
        return row.versions[0][1]

    def is_jakarta_compatible(self, group_id: str, artifact_id: str, version: Optional[str]) -> bool:
        """True if the artifact already ships on the Jakarta namespace."""
        if group_id.startswith("jakarta."):
            return True
        for rule in self._frameworks:
            if rule.group_id != group_id:
                continue
            if rule.min_major_version is None:
                return True
            major = major_version(version)
            return major is not None and major >= rule.min_major_version
        return False

    # ── Packages ────────────────────────────────────────────────────────

    def migrated_package_for(self, qualified_name: str) -> Optional[str]:
        """The javax package prefix of ``qualified_name`` that moved to jakarta, if any."""
        for package in self._packages:
            if qualified_name == package or qualified_name.startswith(package + "."):
                return package
        return None

    def is_migrated_package(self, qualified_name: str) -> bool:
        return self.migrated_package_for(qualified_name) is not None

    def jakarta_name_for(self, qualified_name: str) -> Optional[str]:
        """'javax.servlet.http.HttpServlet' -> 'jakarta.servlet.http.HttpServlet'."""
        if not self.is_migrated_package(qualified_name):
            return None
        return "jakarta." + qualified_name[len("javax."):]


def load_bundled_mapping_table() -> MappingTable:
    """Load the mapping table shipped with the package."""
    resource = resources.files("jakartaready.core.mapping").joinpath("data", BUNDLED_MAPPING_RESOURCE)
    return MappingTable.from_bytes(resource.read_bytes(), source=f"bundled:{BUNDLED_MAPPING_RESOURCE}")


def load_mapping_table(path: Optional[Union[str, Path]] = None) -> MappingTable:
    """Load from ``path`` when given, else the bundled resource."""
    if path is not None:
        return MappingTable.from_path(path)
    return load_bundled_mapping_table()
