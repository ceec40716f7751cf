"""Migration impact summary: dependency report plus source scan."""

from datetime import timedelta

from ..analysis.models import DependencyAnalysisReport
from ..constants import IMPACT_MINUTES_PER_BLOCKER, IMPACT_MINUTES_PER_FILE, IMPACT_MINUTES_PER_IMPORT
from ..scanning.models import SourceScanResult
from .models import MigrationComplexity, MigrationImpactSummary


def summarize_impact(report: DependencyAnalysisReport, scan_result: SourceScanResult) -> MigrationImpactSummary:
    files = scan_result.files_with_javax_usage
    imports = scan_result.total_javax_imports
    blockers = len(report.blockers)

    effort = timedelta(minutes=(
        files * IMPACT_MINUTES_PER_FILE
        + imports * IMPACT_MINUTES_PER_IMPORT
        + blockers * IMPACT_MINUTES_PER_BLOCKER
    ))

    return MigrationImpactSummary(
        total_files_to_migrate=files,
        total_javax_imports=imports,
        total_blockers=blockers,
        total_recommendations=len(report.recommendations),
        estimated_effort=effort,
        risk=report.risk,
        complexity=determine_complexity(files, imports, blockers, report.risk.level),
    )


def determine_complexity(file_count: int, import_count: int, blocker_count: int, risk: float) -> MigrationComplexity:
    if blocker_count > 5 or risk > 0.8:
        return MigrationComplexity.HIGH
    if file_count > 50 or import_count > 100 or blocker_count > 2 or risk > 0.5:
        return MigrationComplexity.MEDIUM
    return MigrationComplexity.LOW
