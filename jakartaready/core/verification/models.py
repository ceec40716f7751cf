"""Data contracts for runtime verification."""

from dataclasses import dataclass, field
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..constants import DEFAULT_HEALTH_ENDPOINT, DEFAULT_HEALTH_TIMEOUT, DEFAULT_MAX_OUTPUT_LINES, DEFAULT_VERIFY_TIMEOUT


class VerificationStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    TIMEOUT = "TIMEOUT"
    ERROR = "ERROR"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({
    VerificationStatus.SUCCESS,
    VerificationStatus.FAILURE,
    VerificationStatus.TIMEOUT,
    VerificationStatus.ERROR,
})

# Valid transitions: from_status -> (to_statuses)
TRANSITIONS: Dict[VerificationStatus, Tuple[VerificationStatus, ...]] = {
    VerificationStatus.NOT_STARTED: (VerificationStatus.RUNNING, VerificationStatus.ERROR),
    VerificationStatus.RUNNING: (
        VerificationStatus.SUCCESS, VerificationStatus.FAILURE,
        VerificationStatus.TIMEOUT, VerificationStatus.ERROR,
    ),
    VerificationStatus.SUCCESS: (),
    VerificationStatus.FAILURE: (),
    VerificationStatus.TIMEOUT: (),
    VerificationStatus.ERROR: (),
}


class ErrorCategory(str, Enum):
    """Root-cause class of a failed run."""
    NAMESPACE_MISMATCH = "NAMESPACE_MISMATCH"
    MISSING_JAKARTA_DEPENDENCY = "MISSING_JAKARTA_DEPENDENCY"
    BINARY_INCOMPATIBILITY = "BINARY_INCOMPATIBILITY"
    MIXED_NAMESPACE = "MIXED_NAMESPACE"
    CLASSPATH = "CLASSPATH"
    CONFIGURATION = "CONFIGURATION"
    JAVA_VERSION = "JAVA_VERSION"
    UNKNOWN = "UNKNOWN"


class VerificationStrategy(str, Enum):
    PROCESS_ONLY = "PROCESS_ONLY"
    BYTECODE_ONLY = "BYTECODE_ONLY"
    BYTECODE_THEN_PROCESS = "BYTECODE_THEN_PROCESS"


@dataclass(frozen=True)
class VerificationOptions:
    """How to launch and judge one verification run.

    ``launcher`` prefixes the command for non-jar artifacts, e.g.
    ``("/usr/bin/python3",)`` for a script.
    """
    timeout: float = DEFAULT_VERIFY_TIMEOUT
    jvm_args: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()
    launcher: Tuple[str, ...] = ()
    working_dir: Optional[Path] = None
    env: Optional[Mapping[str, str]] = None
    strategy: VerificationStrategy = VerificationStrategy.PROCESS_ONLY
    max_output_lines: int = DEFAULT_MAX_OUTPUT_LINES

    def __post_init__(self):
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        if self.max_output_lines < 1:
            raise ValueError(f"max_output_lines must be >= 1, got {self.max_output_lines}")


@dataclass(frozen=True)
class ExecutionMetrics:
    duration: timedelta = timedelta()
    exit_code: Optional[int] = None
    timed_out: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "durationSeconds": self.duration.total_seconds(),
            "exitCode": self.exit_code,
            "timedOut": self.timed_out,
        }


@dataclass(frozen=True)
class ErrorAnalysis:
    category: ErrorCategory
    message: str
    matched_patterns: Tuple[str, ...] = ()
    suggested_fixes: Tuple[str, ...] = ()
    confidence: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.value,
            "message": self.message,
            "matchedPatterns": list(self.matched_patterns),
            "suggestedFixes": list(self.suggested_fixes),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class VerificationResult:
    status: VerificationStatus
    stdout_lines: Tuple[str, ...] = ()
    stderr_lines: Tuple[str, ...] = ()
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)
    error_analysis: Optional[ErrorAnalysis] = None
    recommendations: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.status.is_terminal:
            raise ValueError(f"VerificationResult needs a terminal status, got {self.status.value}")

    @property
    def succeeded(self) -> bool:
        return self.status == VerificationStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "stdout": list(self.stdout_lines),
            "stderr": list(self.stderr_lines),
            "metrics": self.metrics.to_dict(),
            "errorAnalysis": self.error_analysis.to_dict() if self.error_analysis else None,
            "recommendations": list(self.recommendations),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class BytecodeAnalysisResult:
    """Namespace references found in the .class entries of an archive."""
    javax_classes: Tuple[str, ...] = ()
    jakarta_classes: Tuple[str, ...] = ()
    mixed_namespace_classes: Tuple[str, ...] = ()
    classes_analyzed: int = 0
    duration: timedelta = timedelta()

    @property
    def has_issues(self) -> bool:
        return bool(self.javax_classes or self.mixed_namespace_classes)

    @property
    def is_mixed(self) -> bool:
        """The archive as a whole references both namespaces."""
        return bool(self.javax_classes) and bool(self.jakarta_classes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "javaxClasses": list(self.javax_classes),
            "jakartaClasses": list(self.jakarta_classes),
            "mixedNamespaceClasses": list(self.mixed_namespace_classes),
            "classesAnalyzed": self.classes_analyzed,
            "durationSeconds": self.duration.total_seconds(),
        }


@dataclass(frozen=True)
class HealthCheckOptions:
    health_endpoint: str = DEFAULT_HEALTH_ENDPOINT
    timeout: float = DEFAULT_HEALTH_TIMEOUT
    expected_status_code: int = 200


@dataclass(frozen=True)
class HealthCheckResult:
    healthy: bool
    status_code: int
    response_time: timedelta
    body: str = ""
    issues: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "statusCode": self.status_code,
            "responseTimeSeconds": self.response_time.total_seconds(),
            "body": self.body,
            "issues": list(self.issues),
        }


def merge_warnings(*groups: Sequence[str]) -> Tuple[str, ...]:
    """Concatenate warning lists, dropping exact repeats."""
    seen: List[str] = []
    for group in groups:
        for warning in group:
            if warning not in seen:
                seen.append(warning)
    return tuple(seen)
