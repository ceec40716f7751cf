"""Namespace and mapping data contracts."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Namespace(str, Enum):
    """Package root of an artifact's API.

    Closed set: classification maps every artifact to exactly one value.
    """
    JAVAX = "JAVAX"
    JAKARTA = "JAKARTA"
    UNKNOWN = "UNKNOWN"


class CompatibilityLevel(str, Enum):
    """Effort class of moving from a javax artifact to its Jakarta equivalent."""
    DROP_IN_REPLACEMENT = "DROP_IN_REPLACEMENT"
    MINOR_CHANGES = "MINOR_CHANGES"
    MAJOR_REFACTOR = "MAJOR_REFACTOR"
    NO_EQUIVALENT = "NO_EQUIVALENT"


@dataclass(frozen=True)
class JakartaEquivalent:
    """Jakarta coordinate recommended for a javax artifact."""
    group_id: str
    artifact_id: str
    version: str
    compatibility: CompatibilityLevel = CompatibilityLevel.MINOR_CHANGES

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "compatibility": self.compatibility.value,
        }


@dataclass(frozen=True)
class FrameworkRule:
    """A framework whose releases ship on the Jakarta namespace.

    ``min_major_version`` of None means every version is compatible.
    """
    group_id: str
    min_major_version: Optional[int] = None
    description: str = ""
