"""Regex-based Gradle build script parser.

There is no build-script evaluation here: declarations are recognized by
pattern only, so the result is necessarily approximate. Lines that match
no pattern are ignored rather than treated as errors.

Recognized forms (Groovy and Kotlin DSL):
    implementation 'org.example:foo:1.2.3'
    testImplementation("org.example:bar:4.5.6")
    runtimeOnly 'org.example:baz:7.8.9:sources'   (classifier dropped)
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from ..constants import DEFAULT_SCOPE, GRADLE_SCOPE_MAP, UNKNOWN_COORDINATE, UNKNOWN_VERSION
from ..exceptions import InputNotFoundError, ParseFailureError
from .models import Artifact, DependencyGraph, GraphAccumulator

logger = logging.getLogger(__name__)

# Longest keywords first so "testImplementation" is not read as "implementation"
_CONFIGURATIONS = sorted(GRADLE_SCOPE_MAP, key=len, reverse=True)

_DEPENDENCY_PATTERN = re.compile(
    r"\b(" + "|".join(_CONFIGURATIONS) + r")\b"
    r"\s*\(?\s*"
    r"(['\"])([^:'\"\s]+):([^:'\"\s]+):([^:'\"\s]+)(?::[^'\"\s]+)?\2"
    r"\s*\)?"
)

_PROJECT_NAME_PATTERN = re.compile(
    r"(?:baseName|archivesBaseName|rootProject\.name)\s*=\s*['\"]([^'\"]+)['\"]"
)

_MAIN_CLASS_PATTERN = re.compile(
    r"application\s*\{[^}]*mainClass(?:Name)?(?:\.set\()?\s*=?\s*['\"]([^'\"]+)['\"]",
    re.DOTALL,
)

_GROUP_PATTERN = re.compile(r"^\s*group\s*=\s*['\"]([^'\"]+)['\"]", re.MULTILINE)
_VERSION_PATTERN = re.compile(r"^\s*version\s*=\s*['\"]([^'\"]+)['\"]", re.MULTILINE)


def scope_for(configuration: str) -> str:
    """Map a Gradle configuration keyword to a Maven-style scope."""
    return GRADLE_SCOPE_MAP.get(configuration, DEFAULT_SCOPE)


class GradleBuildParser:
    """Parse build.gradle / build.gradle.kts into a DependencyGraph."""

    def parse_file(self, build_file_path: Path) -> DependencyGraph:
        build_file_path = Path(build_file_path)
        if not build_file_path.is_file():
            raise InputNotFoundError(f"Gradle build file does not exist: {build_file_path}")

        try:
            content = build_file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ParseFailureError(f"Failed to read Gradle build file {build_file_path}: {e}") from e

        return self.parse_source(content, str(build_file_path))

    def parse_source(self, content: str, file_path: str = "build.gradle") -> DependencyGraph:
        project_artifact = Artifact(
            group_id=self._first_match(_GROUP_PATTERN, content) or UNKNOWN_COORDINATE,
            artifact_id=self._extract_project_name(content) or UNKNOWN_COORDINATE,
            version=self._first_match(_VERSION_PATTERN, content) or UNKNOWN_VERSION,
            scope=DEFAULT_SCOPE,
            is_transitive=False,
        )

        acc = GraphAccumulator()
        acc.add_node(project_artifact)

        for artifact in self.extract_dependencies(content):
            if not acc.add_edge(project_artifact, artifact, artifact.scope):
                logger.debug(f"Duplicate dependency {artifact.key} in {file_path}; keeping first declaration")

        graph = acc.build()
        logger.info(f"Parsed {file_path}: {graph.node_count} artifacts, {len(graph.edges)} dependencies")
        return graph

    def extract_dependencies(self, content: str) -> List[Artifact]:
        """Return every recognized dependency declaration, in source order."""
        artifacts: List[Artifact] = []
        for match in _DEPENDENCY_PATTERN.finditer(content):
            configuration, _, group_id, artifact_id, version = match.groups()
            if "$" in version:
                # Interpolated versions are not evaluated
                version = UNKNOWN_VERSION
            artifacts.append(Artifact(
                group_id=group_id,
                artifact_id=artifact_id,
                version=version,
                scope=scope_for(configuration),
                is_transitive=True,
            ))
        return artifacts

    def _extract_project_name(self, content: str) -> Optional[str]:
        name = self._first_match(_PROJECT_NAME_PATTERN, content)
        if name:
            return name

        main_class = self._first_match(_MAIN_CLASS_PATTERN, content)
        if main_class:
            # Simple name of the fully qualified main class
            return main_class.rsplit(".", 1)[-1]
        return None

    @staticmethod
    def _first_match(pattern: re.Pattern, content: str) -> Optional[str]:
        match = pattern.search(content)
        return match.group(1) if match else None
