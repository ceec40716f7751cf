"""Dependency graph data models.

Pure data containers for artifacts and the directed graph between them.
Graphs are built once per analysis request and never mutated afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..constants import DEFAULT_SCOPE


@dataclass(frozen=True)
class Artifact:
    """A versioned library coordinate.

    Identity is ``(group_id, artifact_id)``: two artifacts with the same
    coordinates but different versions or scopes compare equal.
    """

    group_id: str
    artifact_id: str
    version: str = field(compare=False)
    scope: str = field(default=DEFAULT_SCOPE, compare=False)
    is_transitive: bool = field(default=False, compare=False)

    @property
    def key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    @property
    def coordinate(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "scope": self.scope,
            "transitive": self.is_transitive,
        }


@dataclass(frozen=True)
class Dependency:
    """A directed edge: ``source`` depends on ``target``."""

    source: Artifact
    target: Artifact
    scope: str = DEFAULT_SCOPE
    optional: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.source.key,
            "to": self.target.key,
            "scope": self.scope,
            "optional": self.optional,
        }


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable directed dependency graph.

    Nodes and edges keep insertion order so that every downstream
    computation (conflict representatives, report ordering) is deterministic.

    Raises:
        ValueError: if two nodes share identity or an edge endpoint is not a node
    """

    nodes: Tuple[Artifact, ...] = ()
    edges: Tuple[Dependency, ...] = ()

    def __post_init__(self):
        seen = set()
        for node in self.nodes:
            if node in seen:
                raise ValueError(f"Duplicate node in dependency graph: {node.key}")
            seen.add(node)
        for edge in self.edges:
            if edge.source not in seen or edge.target not in seen:
                raise ValueError(
                    f"Edge {edge.source.key} -> {edge.target.key} references a node outside the graph"
                )

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    def is_empty(self) -> bool:
        return not self.nodes

    def dependencies_of(self, artifact: Artifact) -> List[Artifact]:
        """Direct out-edge targets of ``artifact``, in edge order."""
        return [edge.target for edge in self.edges if edge.source == artifact]

    def find(self, group_id: str, artifact_id: str) -> Optional[Artifact]:
        for node in self.nodes:
            if node.group_id == group_id and node.artifact_id == artifact_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


class GraphAccumulator:
    """Mutable staging area used by the builders before freezing a graph.

    Re-declared coordinates keep their first occurrence; later duplicates
    are dropped (edges to them are remapped onto the stored node).
    """

    def __init__(self) -> None:
        self._nodes: Dict[Artifact, Artifact] = {}
        self._edges: List[Dependency] = []
        self._edge_keys = set()

    def add_node(self, artifact: Artifact) -> Artifact:
        existing = self._nodes.get(artifact)
        if existing is not None:
            return existing
        self._nodes[artifact] = artifact
        return artifact

    def add_edge(self, source: Artifact, target: Artifact, scope: str, optional: bool = False) -> bool:
        """Add an edge, registering endpoints as needed.

        Returns:
            False if an edge between the same endpoints already existed
        """
        source = self.add_node(source)
        target = self.add_node(target)
        edge_key = (source, target)
        if edge_key in self._edge_keys:
            return False
        self._edge_keys.add(edge_key)
        self._edges.append(Dependency(source=source, target=target, scope=scope, optional=optional))
        return True

    def build(self) -> DependencyGraph:
        return DependencyGraph(nodes=tuple(self._nodes.values()), edges=tuple(self._edges))


def graph_from(artifacts: Iterable[Artifact], root: Optional[Artifact] = None) -> DependencyGraph:
    """Convenience builder: ``root`` (if given) depends on every artifact."""
    acc = GraphAccumulator()
    if root is not None:
        acc.add_node(root)
    for artifact in artifacts:
        if root is None:
            acc.add_node(artifact)
        else:
            acc.add_edge(root, artifact, artifact.scope)
    return acc.build()
