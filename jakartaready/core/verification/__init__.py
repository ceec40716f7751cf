"""Runtime verification of migrated artifacts.

Public API:
    RuntimeVerifier   — verify_runtime(artifact_path, options)
    BytecodeScanner   — analyze_jar(path)
    HealthChecker     — check(url, options)
"""

from .bytecode import BytecodeScanner
from .health import HealthChecker
from .models import (
    BytecodeAnalysisResult,
    ErrorAnalysis,
    ErrorCategory,
    ExecutionMetrics,
    HealthCheckOptions,
    HealthCheckResult,
    TERMINAL_STATUSES,
    VerificationOptions,
    VerificationResult,
    VerificationStatus,
    VerificationStrategy,
)
from .process import ProcessOutcome, run_process
from .signatures import FAILURE_SIGNATURES, FailureSignature, classify_failure
from .state import VerificationStateMachine
from .verifier import RuntimeVerifier, runtime_warnings

__all__ = [
    "BytecodeScanner",
    "HealthChecker",
    "BytecodeAnalysisResult",
    "ErrorAnalysis",
    "ErrorCategory",
    "ExecutionMetrics",
    "HealthCheckOptions",
    "HealthCheckResult",
    "TERMINAL_STATUSES",
    "VerificationOptions",
    "VerificationResult",
    "VerificationStatus",
    "VerificationStrategy",
    "ProcessOutcome",
    "run_process",
    "FAILURE_SIGNATURES",
    "FailureSignature",
    "classify_failure",
    "VerificationStateMachine",
    "RuntimeVerifier",
    "runtime_warnings",
]
