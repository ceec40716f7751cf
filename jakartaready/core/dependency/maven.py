"""Maven pom.xml parser built on ElementTree.

Extracts the project coordinate and its declared dependencies. Lookups are
namespace-agnostic so both namespaced (``xmlns="http://maven.apache.org/POM/4.0.0"``)
and bare POMs parse the same way.

Version resolution for a dependency without ``<version>``:
1. ``<dependencyManagement>`` entry with the same groupId + artifactId
2. ``${property}`` substitution from ``<properties>`` (and project built-ins)
3. the ``"unknown"`` sentinel, never an error
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from ..constants import DEFAULT_SCOPE, UNKNOWN_COORDINATE, UNKNOWN_VERSION
from ..exceptions import InputNotFoundError, ParseFailureError
from .models import Artifact, DependencyGraph, GraphAccumulator

logger = logging.getLogger(__name__)

_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")

# Guards against self-referencing property chains
_MAX_PROPERTY_DEPTH = 10


def _strip_namespace(tag: str) -> str:
    """Remove XML namespace prefix from a tag.

    '{http://maven.apache.org/POM/4.0.0}dependency' -> 'dependency'
    """
    if tag.startswith("{"):
        return tag.split("}", 1)[1]
    return tag


def _local_find(element: ET.Element, local_name: str) -> Optional[ET.Element]:
    """Find a child element by local name, ignoring namespaces."""
    for child in element:
        if isinstance(child.tag, str) and _strip_namespace(child.tag) == local_name:
            return child
    return None


def _local_findall(element: ET.Element, local_name: str) -> List[ET.Element]:
    """Find all child elements by local name, ignoring namespaces."""
    return [
        child for child in element
        if isinstance(child.tag, str) and _strip_namespace(child.tag) == local_name
    ]


def _get_text(element: Optional[ET.Element], child_name: str) -> Optional[str]:
    """Get the stripped text of a named child element, or None when absent/blank."""
    if element is None:
        return None
    child = _local_find(element, child_name)
    if child is not None and child.text and child.text.strip():
        return child.text.strip()
    return None


class MavenPomParser:
    """Parse a pom.xml into a DependencyGraph rooted at the project artifact."""

    def parse_file(self, pom_path: Path) -> DependencyGraph:
        pom_path = Path(pom_path)
        if not pom_path.is_file():
            raise InputNotFoundError(f"pom.xml not found at: {pom_path}")

        try:
            tree = ET.parse(pom_path)
        except (ET.ParseError, OSError) as e:
            raise ParseFailureError(f"Failed to parse pom.xml {pom_path}: {e}") from e

        return self.parse_root(tree.getroot(), str(pom_path))

    def parse_source(self, source_text: str, file_path: str = "pom.xml") -> DependencyGraph:
        try:
            root = ET.fromstring(source_text)
        except ET.ParseError as e:
            raise ParseFailureError(f"Failed to parse pom.xml {file_path}: {e}") from e
        return self.parse_root(root, file_path)

    def parse_root(self, project: ET.Element, file_path: str) -> DependencyGraph:
        if _strip_namespace(project.tag) != "project":
            raise ParseFailureError(
                f"Failed to parse pom.xml {file_path}: root element is <{_strip_namespace(project.tag)}>, not <project>"
            )

        parent = _local_find(project, "parent")
        properties = self._collect_properties(project, parent)
        managed = self._collect_managed_versions(project, properties)

        group_id = _get_text(project, "groupId") or _get_text(parent, "groupId")
        artifact_id = _get_text(project, "artifactId")
        version = _get_text(project, "version") or _get_text(parent, "version")

        project_artifact = Artifact(
            group_id=self._resolve(group_id, properties) or UNKNOWN_COORDINATE,
            artifact_id=artifact_id or UNKNOWN_COORDINATE,
            version=self._resolve(version, properties) or UNKNOWN_VERSION,
            scope=DEFAULT_SCOPE,
            is_transitive=False,
        )

        acc = GraphAccumulator()
        acc.add_node(project_artifact)

        dependencies = _local_find(project, "dependencies")
        declared = _local_findall(dependencies, "dependency") if dependencies is not None else []

        for dep in declared:
            dep_group = self._resolve(_get_text(dep, "groupId"), properties)
            dep_artifact = self._resolve(_get_text(dep, "artifactId"), properties)
            if not dep_group or not dep_artifact:
                logger.debug(f"Skipping dependency without coordinates in {file_path}")
                continue

            dep_version = _get_text(dep, "version")
            if dep_version is None:
                dep_version = managed.get((dep_group, dep_artifact))
            dep_version = self._resolve(dep_version, properties)
            if not dep_version or _PROPERTY_REF.search(dep_version):
                logger.debug(f"Unresolved version for {dep_group}:{dep_artifact} in {file_path}")
                dep_version = UNKNOWN_VERSION

            scope = _get_text(dep, "scope") or DEFAULT_SCOPE
            optional = (_get_text(dep, "optional") or "").lower() == "true"

            artifact = Artifact(
                group_id=dep_group,
                artifact_id=dep_artifact,
                version=dep_version,
                scope=scope,
                is_transitive=True,
            )
            if not acc.add_edge(project_artifact, artifact, scope, optional):
                logger.debug(f"Duplicate dependency {artifact.key} in {file_path}; keeping first declaration")

        graph = acc.build()
        logger.info(f"Parsed {file_path}: {graph.node_count} artifacts, {len(graph.edges)} dependencies")
        return graph

    # =========================================================================
    # Version resolution
    # =========================================================================

    def _collect_properties(self, project: ET.Element, parent: Optional[ET.Element]) -> Dict[str, str]:
        properties: Dict[str, str] = {}
        props_element = _local_find(project, "properties")
        if props_element is not None:
            for prop in props_element:
                if isinstance(prop.tag, str) and prop.text and prop.text.strip():
                    properties[_strip_namespace(prop.tag)] = prop.text.strip()

        builtins = {
            "project.groupId": _get_text(project, "groupId") or _get_text(parent, "groupId"),
            "project.artifactId": _get_text(project, "artifactId"),
            "project.version": _get_text(project, "version") or _get_text(parent, "version"),
            "project.parent.groupId": _get_text(parent, "groupId"),
            "project.parent.version": _get_text(parent, "version"),
        }
        for name, value in builtins.items():
            if value:
                properties.setdefault(name, value)
        return properties

    def _collect_managed_versions(
        self, project: ET.Element, properties: Dict[str, str]
    ) -> Dict[tuple, str]:
        """Managed versions keyed by property-resolved groupId and artifactId."""
        managed: Dict[tuple, str] = {}
        management = _local_find(project, "dependencyManagement")
        if management is None:
            return managed
        deps = _local_find(management, "dependencies")
        if deps is None:
            return managed
        for dep in _local_findall(deps, "dependency"):
            group_id = self._resolve(_get_text(dep, "groupId"), properties)
            artifact_id = self._resolve(_get_text(dep, "artifactId"), properties)
            version = _get_text(dep, "version")
            if group_id and artifact_id and version:
                managed.setdefault((group_id, artifact_id), version)
        return managed

    def _resolve(self, value: Optional[str], properties: Dict[str, str]) -> Optional[str]:
        """Substitute ``${name}`` references; unknown references are left in place."""
        if value is None:
            return None
        for _ in range(_MAX_PROPERTY_DEPTH):
            if "${" not in value:
                break
            substituted = _PROPERTY_REF.sub(
                lambda m: properties.get(m.group(1), m.group(0)), value
            )
            if substituted == value:
                break
            value = substituted
        return value
