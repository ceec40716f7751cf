"""Migration service: composition root for the analysis and verification components.

Wires the mapping table, graph builder, classifier, analysis engine, source
scanner, planner and runtime verifier together from one Settings instance
and exposes the public operations as plain methods.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from ..setting import Settings, get_settings
from .analysis.engine import DependencyAnalysisEngine
from .analysis.models import (
    Blocker,
    DependencyAnalysisReport,
    TransitiveConflict,
    VersionRecommendation,
)
from .dependency.builder import DependencyGraphBuilder
from .dependency.models import Artifact, DependencyGraph
from .mapping.classifier import NamespaceClassifier
from .mapping.table import MappingTable, load_mapping_table
from .migration.impact import summarize_impact
from .migration.models import MigrationImpactSummary, MigrationPlan
from .migration.planner import MigrationPlanner
from .migration.recipes import RecipeLibrary
from .scanning.java_scanner import SourceScanner
from .scanning.models import SourceScanResult
from .utils.logging_setup import setup_logging
from .verification.bytecode import BytecodeScanner
from .verification.health import HealthChecker
from .verification.models import (
    HealthCheckOptions,
    HealthCheckResult,
    VerificationOptions,
    VerificationResult,
)
from .verification.verifier import RuntimeVerifier

logger = logging.getLogger(__name__)


class MigrationService:
    """Facade over the javax -> jakarta migration toolkit.

    All collaborators share one read-only MappingTable. The service keeps no
    per-request state, so one instance can serve concurrent callers.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        mapping_table: Optional[MappingTable] = None,
        health_checker: Optional[HealthChecker] = None,
        configure_logging: bool = False,
    ):
        """Initialize the service.

        Args:
            settings: Runtime settings (process-wide settings when omitted)
            mapping_table: Preloaded mapping table; loaded from
                ``settings.mapping_table_path`` or the bundled table when omitted
            health_checker: Optional HealthChecker (e.g. with a mock transport)
            configure_logging: Install console logging at ``settings.log_level``
        """
        self._settings = settings or get_settings()
        if configure_logging:
            setup_logging(self._settings.log_level)
        self._table = mapping_table or load_mapping_table(self._settings.mapping_table_path)

        self._builder = DependencyGraphBuilder()
        self._classifier = NamespaceClassifier(self._table)
        self._engine = DependencyAnalysisEngine(self._builder, self._classifier, self._table)
        self._scanner = SourceScanner(self._table)
        self._recipes = RecipeLibrary()
        self._planner = MigrationPlanner(
            self._recipes,
            scanner=self._scanner,
            batch_size=self._settings.batch_size,
            minutes_per_file=self._settings.minutes_per_file,
        )
        self._verifier = RuntimeVerifier(
            BytecodeScanner(self._table),
            java_executable=self._settings.java_executable,
            drain_timeout=self._settings.drain_timeout,
        )
        self._health = health_checker or HealthChecker()

        logger.info(f"MigrationService ready ({len(self._table)} mapping entries)")

    @property
    def mapping_table(self) -> MappingTable:
        return self._table

    @property
    def recipe_library(self) -> RecipeLibrary:
        return self._recipes

    # ── Analysis ────────────────────────────────────────────────────────

    def analyze_project(self, project_path: Path) -> DependencyAnalysisReport:
        return self._engine.analyze_project(Path(project_path))

    def detect_blockers(self, graph: DependencyGraph) -> List[Blocker]:
        return self._engine.detect_blockers(graph)

    def recommend_versions(self, artifacts: Iterable[Artifact]) -> List[VersionRecommendation]:
        return self._engine.recommend_versions(artifacts)

    def analyze_transitive_conflicts(self, graph: DependencyGraph) -> List[TransitiveConflict]:
        return self._engine.analyze_transitive_conflicts(graph)

    # ── Sources and planning ────────────────────────────────────────────

    def scan_sources(self, project_path: Path) -> SourceScanResult:
        return self._scanner.scan_project(Path(project_path))

    def create_plan(self, project_path: Path, report: DependencyAnalysisReport) -> MigrationPlan:
        return self._planner.create_plan(Path(project_path), report)

    def summarize_impact(self, project_path: Path, report: DependencyAnalysisReport) -> MigrationImpactSummary:
        """Effort and complexity estimate from ``report`` plus a source scan of ``project_path``."""
        return summarize_impact(report, self.scan_sources(project_path))

    # ── Verification ────────────────────────────────────────────────────

    def verify_runtime(
        self,
        artifact_path: Path,
        options: Optional[VerificationOptions] = None,
    ) -> VerificationResult:
        if options is None:
            options = VerificationOptions(
                timeout=self._settings.verify_timeout,
                max_output_lines=self._settings.max_output_lines,
            )
        return self._verifier.verify_runtime(Path(artifact_path), options)

    def check_health(self, url: str, options: Optional[HealthCheckOptions] = None) -> HealthCheckResult:
        return self._health.check(url, options)
