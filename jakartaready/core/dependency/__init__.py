"""Dependency graph construction from Maven and Gradle build files.

Public API:
    DependencyGraphBuilder — build_from_maven / build_from_gradle / build_from_project
    Artifact, Dependency, DependencyGraph — immutable graph model
"""

from .builder import DependencyGraphBuilder, find_build_file
from .gradle import GradleBuildParser
from .maven import MavenPomParser
from .models import Artifact, Dependency, DependencyGraph, GraphAccumulator, graph_from

__all__ = [
    "DependencyGraphBuilder",
    "find_build_file",
    "GradleBuildParser",
    "MavenPomParser",
    "Artifact",
    "Dependency",
    "DependencyGraph",
    "GraphAccumulator",
    "graph_from",
]
