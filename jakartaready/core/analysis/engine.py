"""Dependency analysis engine.

Turns a project's dependency graph into a migration-readiness report:
namespace classification, blockers, Jakarta version recommendations,
transitive namespace conflicts, risk and readiness scoring.

The engine holds no per-request state; every call builds its own graph
and report.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from ..constants import (
    BLOCKER_ACTIONS,
    BLOCKER_CONFIDENCE,
    BLOCKER_READINESS_PENALTY,
    CONFLICT_KIND_MIXED,
    LARGE_GRAPH_NODE_THRESHOLD,
    READINESS_BANDS,
    READINESS_EMPTY_GRAPH,
    READINESS_NOT_READY,
    RECOMMENDATION_ACTIONS,
    RECOMMENDATION_CONFIDENCE,
    RISK_BLOCKER_WEIGHT,
    RISK_CONFLICT_WEIGHT,
    RISK_LARGE_GRAPH_WEIGHT,
)
from ..dependency.builder import DependencyGraphBuilder
from ..dependency.models import Artifact, DependencyGraph
from ..mapping.classifier import NamespaceClassifier
from ..mapping.models import Namespace
from ..mapping.table import MappingTable
from .models import (
    Blocker,
    BlockerType,
    DependencyAnalysisReport,
    MigrationReadinessScore,
    NamespaceCompatibilityMap,
    RiskAssessment,
    TransitiveConflict,
    VersionRecommendation,
)

logger = logging.getLogger(__name__)


class DependencyAnalysisEngine:
    """Analyzes a Java project's dependencies for Jakarta migration readiness."""

    def __init__(
        self,
        builder: DependencyGraphBuilder,
        classifier: NamespaceClassifier,
        mapping_table: MappingTable,
    ):
        self._builder = builder
        self._classifier = classifier
        self._table = mapping_table

    def analyze_project(self, project_path: Path) -> DependencyAnalysisReport:
        """Full analysis of the project rooted at ``project_path``.

        Raises:
            InputNotFoundError: no build file in ``project_path``
            ParseFailureError: the build file cannot be parsed
        """
        logger.info(f"Analyzing project at: {project_path}")
        graph = self._builder.build_from_project(Path(project_path))
        return self.analyze_graph(graph)

    def analyze_graph(self, graph: DependencyGraph) -> DependencyAnalysisReport:
        namespace_map = self.identify_namespaces(graph)
        blockers = self._detect_blockers(graph, namespace_map)
        recommendations = self.recommend_versions(graph.nodes)
        conflicts = self._analyze_conflicts(graph, namespace_map)
        risk = self.assess_risk(graph, blockers, conflicts)
        readiness = self.readiness_score(graph, blockers)

        logger.info(
            f"Analysis complete: {graph.node_count} artifacts, {len(blockers)} blockers, "
            f"{len(recommendations)} recommendations, {len(conflicts)} conflicts, "
            f"readiness={readiness.score:.2f}"
        )
        return DependencyAnalysisReport(
            graph=graph,
            namespace_map=namespace_map,
            blockers=tuple(blockers),
            recommendations=tuple(recommendations),
            conflicts=tuple(conflicts),
            risk=risk,
            readiness=readiness,
        )

    # ── Namespaces ──────────────────────────────────────────────────────

    def identify_namespaces(self, graph: DependencyGraph) -> NamespaceCompatibilityMap:
        return NamespaceCompatibilityMap(
            {artifact: self._classifier.classify(artifact) for artifact in graph.nodes}
        )

    # ── Blockers ────────────────────────────────────────────────────────

    def detect_blockers(self, graph: DependencyGraph) -> List[Blocker]:
        return self._detect_blockers(graph, self.identify_namespaces(graph))

    def _detect_blockers(
        self, graph: DependencyGraph, namespace_map: NamespaceCompatibilityMap
    ) -> List[Blocker]:
        blockers: List[Blocker] = []
        for artifact in graph.nodes:
            namespace = namespace_map[artifact]
            if namespace == Namespace.JAVAX:
                if not self._has_jakarta_equivalent(artifact):
                    blockers.append(Blocker(
                        artifact=artifact,
                        blocker_type=BlockerType.NO_JAKARTA_EQUIVALENT,
                        rationale=f"No Jakarta equivalent found for {artifact.key}",
                        suggested_actions=BLOCKER_ACTIONS,
                        confidence=BLOCKER_CONFIDENCE,
                    ))
            elif namespace == Namespace.UNKNOWN and not self._classifier.is_jakarta_compatible(artifact):
                logger.debug(f"Unknown namespace artifact: {artifact.coordinate}")
        return blockers

    def _has_jakarta_equivalent(self, artifact: Artifact) -> bool:
        if self._classifier.is_jakarta_compatible(artifact):
            return True
        return self._table.has_mapping(artifact.group_id, artifact.artifact_id)

    # ── Recommendations ─────────────────────────────────────────────────

    def recommend_versions(self, artifacts: Iterable[Artifact]) -> List[VersionRecommendation]:
        """Jakarta coordinates for javax artifacts (and any other mapped coordinate)."""
        recommendations: List[VersionRecommendation] = []
        for artifact in artifacts:
            is_javax = self._classifier.classify(artifact) == Namespace.JAVAX
            if not is_javax and not self._table.has_mapping(artifact.group_id, artifact.artifact_id):
                continue

            equivalent = self._table.find_mapping(artifact)
            if equivalent is None:
                continue

            recommended = Artifact(
                group_id=equivalent.group_id,
                artifact_id=equivalent.artifact_id,
                version=equivalent.version,
                scope=artifact.scope,
                is_transitive=artifact.is_transitive,
            )
            recommendations.append(VersionRecommendation(
                current=artifact,
                recommended=recommended,
                rationale=f"Migrate to Jakarta namespace: {equivalent.group_id}:{equivalent.artifact_id}",
                actions=RECOMMENDATION_ACTIONS,
                confidence=RECOMMENDATION_CONFIDENCE,
            ))
        return recommendations

    # ── Conflicts ───────────────────────────────────────────────────────

    def analyze_transitive_conflicts(self, graph: DependencyGraph) -> List[TransitiveConflict]:
        return self._analyze_conflicts(graph, self.identify_namespaces(graph))

    def _analyze_conflicts(
        self, graph: DependencyGraph, namespace_map: NamespaceCompatibilityMap
    ) -> List[TransitiveConflict]:
        conflicts: List[TransitiveConflict] = []
        for artifact in graph.nodes:
            dependencies = graph.dependencies_of(artifact)
            first_javax: Optional[Artifact] = None
            has_jakarta = False
            for dep in dependencies:
                namespace = namespace_map[dep]
                if namespace == Namespace.JAVAX and first_javax is None:
                    first_javax = dep
                elif namespace == Namespace.JAKARTA:
                    has_jakarta = True

            if first_javax is not None and has_jakarta:
                conflicts.append(TransitiveConflict(
                    dependent_artifact=artifact,
                    conflicting_artifact=first_javax,
                    kind=CONFLICT_KIND_MIXED,
                    explanation="Mixed javax and jakarta namespaces in transitive dependencies",
                ))
        return conflicts

    # ── Scoring ─────────────────────────────────────────────────────────

    def assess_risk(
        self,
        graph: DependencyGraph,
        blockers: Sequence[Blocker],
        conflicts: Sequence[TransitiveConflict],
    ) -> RiskAssessment:
        level = 0.0
        factors: List[str] = []
        mitigations: List[str] = []

        if blockers:
            level += RISK_BLOCKER_WEIGHT
            factors.append(f"{len(blockers)} dependency blockers found")
            mitigations.append("Review blockers")

        if conflicts:
            level += RISK_CONFLICT_WEIGHT
            factors.append(f"{len(conflicts)} transitive conflicts detected")
            mitigations.append("Resolve transitive conflicts")

        if graph.node_count > LARGE_GRAPH_NODE_THRESHOLD:
            level += RISK_LARGE_GRAPH_WEIGHT
            factors.append(f"Large dependency graph ({graph.node_count} dependencies)")
            mitigations.append("Migrate incrementally, module by module")

        return RiskAssessment(
            level=min(max(level, 0.0), 1.0),
            factors=tuple(factors),
            mitigations=tuple(mitigations),
        )

    def readiness_score(
        self,
        graph: DependencyGraph,
        blockers: Sequence[Blocker],
    ) -> MigrationReadinessScore:
        """Share of Jakarta-ready nodes, halved when any blocker exists."""
        if graph.is_empty():
            return MigrationReadinessScore(score=0.0, message=READINESS_EMPTY_GRAPH)

        ready = sum(1 for artifact in graph.nodes if self._classifier.is_jakarta_ready(artifact))
        score = ready / graph.node_count
        if blockers:
            score *= BLOCKER_READINESS_PENALTY

        return MigrationReadinessScore(score=score, message=readiness_message(score))


def readiness_message(score: float) -> str:
    for bound, message in READINESS_BANDS:
        if score >= bound:
            return message
    return READINESS_NOT_READY
