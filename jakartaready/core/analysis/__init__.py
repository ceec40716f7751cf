"""Dependency analysis: blockers, recommendations, conflicts, risk and readiness."""

from .engine import DependencyAnalysisEngine, readiness_message
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

__all__ = [
    "DependencyAnalysisEngine",
    "readiness_message",
    "Blocker",
    "BlockerType",
    "DependencyAnalysisReport",
    "MigrationReadinessScore",
    "NamespaceCompatibilityMap",
    "RiskAssessment",
    "TransitiveConflict",
    "VersionRecommendation",
]
