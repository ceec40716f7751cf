"""Data contracts for dependency analysis.

Every report is built fresh per ``analyze_project`` call and never mutated.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from ..constants import CONFLICT_KIND_MIXED
from ..dependency.models import Artifact, DependencyGraph
from ..mapping.models import Namespace


class BlockerType(str, Enum):
    """Why an artifact blocks migration."""
    NO_JAKARTA_EQUIVALENT = "NO_JAKARTA_EQUIVALENT"


class NamespaceCompatibilityMap:
    """Read-only Artifact -> Namespace mapping for one graph."""

    def __init__(self, namespaces: Mapping[Artifact, Namespace]):
        self._namespaces = MappingProxyType(dict(namespaces))
        self._counts = Counter(self._namespaces.values())

    def get(self, artifact: Artifact) -> Optional[Namespace]:
        return self._namespaces.get(artifact)

    def __getitem__(self, artifact: Artifact) -> Namespace:
        return self._namespaces[artifact]

    def __contains__(self, artifact: object) -> bool:
        return artifact in self._namespaces

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._namespaces)

    def __len__(self) -> int:
        return len(self._namespaces)

    def items(self):
        return self._namespaces.items()

    def count(self, namespace: Namespace) -> int:
        return self._counts.get(namespace, 0)

    def to_dict(self) -> Dict[str, str]:
        return {artifact.key: namespace.value for artifact, namespace in self._namespaces.items()}


@dataclass(frozen=True)
class Blocker:
    """A dependency that prevents migration."""
    artifact: Artifact
    blocker_type: BlockerType
    rationale: str
    suggested_actions: Tuple[str, ...] = ()
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": self.artifact.to_dict(),
            "type": self.blocker_type.value,
            "reason": self.rationale,
            "mitigationStrategies": list(self.suggested_actions),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class TransitiveConflict:
    """A node whose direct dependencies mix javax and jakarta artifacts."""
    dependent_artifact: Artifact
    conflicting_artifact: Artifact
    kind: str = CONFLICT_KIND_MIXED
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact": self.dependent_artifact.to_dict(),
            "conflictingArtifact": self.conflicting_artifact.to_dict(),
            "conflictType": self.kind,
            "description": self.explanation,
        }


@dataclass(frozen=True)
class RiskAssessment:
    level: float
    factors: Tuple[str, ...] = ()
    mitigations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "riskScore": self.level,
            "riskFactors": list(self.factors),
            "mitigationSuggestions": list(self.mitigations),
        }


@dataclass(frozen=True)
class MigrationReadinessScore:
    score: float
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "explanation": self.message}


@dataclass(frozen=True)
class VersionRecommendation:
    """Suggested move from a javax artifact to its Jakarta coordinate."""
    current: Artifact
    recommended: Artifact
    rationale: str
    actions: Tuple[str, ...] = ()
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "currentArtifact": self.current.to_dict(),
            "recommendedArtifact": self.recommended.to_dict(),
            "migrationPath": self.rationale,
            "breakingChanges": list(self.actions),
            "compatibilityScore": self.confidence,
        }


@dataclass(frozen=True)
class DependencyAnalysisReport:
    """Complete analysis output for one project."""
    graph: DependencyGraph
    namespace_map: NamespaceCompatibilityMap
    blockers: Tuple[Blocker, ...] = ()
    recommendations: Tuple[VersionRecommendation, ...] = ()
    conflicts: Tuple[TransitiveConflict, ...] = ()
    risk: RiskAssessment = field(default_factory=lambda: RiskAssessment(level=0.0))
    readiness: MigrationReadinessScore = field(
        default_factory=lambda: MigrationReadinessScore(score=0.0, message="")
    )

    @property
    def conflict_summary(self) -> str:
        if not self.conflicts:
            return "No transitive conflicts found"
        return f"Found {len(self.conflicts)} transitive dependency conflict(s)"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencyGraph": self.graph.to_dict(),
            "namespaceMap": self.namespace_map.to_dict(),
            "blockers": [b.to_dict() for b in self.blockers],
            "recommendations": [r.to_dict() for r in self.recommendations],
            "transitiveConflicts": {
                "conflicts": [c.to_dict() for c in self.conflicts],
                "totalConflicts": len(self.conflicts),
                "summary": self.conflict_summary,
            },
            "riskAssessment": self.risk.to_dict(),
            "readinessScore": self.readiness.to_dict(),
        }
