"""Dependency graph builder that picks the right parser for a project root."""

import logging
from pathlib import Path
from typing import Optional

from ..constants import BUILD_FILE_CANDIDATES
from ..exceptions import InputNotFoundError
from .gradle import GradleBuildParser
from .maven import MavenPomParser
from .models import DependencyGraph

logger = logging.getLogger(__name__)


def find_build_file(project_root: Path) -> Optional[Path]:
    """Return the first of pom.xml, build.gradle, build.gradle.kts present in ``project_root``."""
    for name in BUILD_FILE_CANDIDATES:
        candidate = Path(project_root) / name
        if candidate.is_file():
            return candidate
    return None


class DependencyGraphBuilder:
    """Builds dependency graphs from Maven or Gradle build files."""

    def __init__(
        self,
        maven_parser: Optional[MavenPomParser] = None,
        gradle_parser: Optional[GradleBuildParser] = None,
    ) -> None:
        self._maven = maven_parser or MavenPomParser()
        self._gradle = gradle_parser or GradleBuildParser()

    def build_from_maven(self, pom_path: Path) -> DependencyGraph:
        return self._maven.parse_file(Path(pom_path))

    def build_from_gradle(self, build_file_path: Path) -> DependencyGraph:
        return self._gradle.parse_file(Path(build_file_path))

    def build_from_project(self, project_root: Path) -> DependencyGraph:
        """Build from the first recognized build file in ``project_root``.

        Raises:
            InputNotFoundError: no pom.xml, build.gradle or build.gradle.kts
            ParseFailureError: the build file exists but cannot be parsed
        """
        project_root = Path(project_root)
        build_file = find_build_file(project_root)
        if build_file is None:
            raise InputNotFoundError(f"No build file found in project root: {project_root}")

        logger.debug(f"Using build file {build_file}")
        if build_file.name == "pom.xml":
            return self.build_from_maven(build_file)
        return self.build_from_gradle(build_file)
