"""Runtime verifier: runs a migrated artifact and classifies how it fails.

Expected operational failures (missing artifact, launch failure, timeout,
non-zero exit) are reported as VerificationResult statuses; nothing here
raises for them.
"""

import logging
from datetime import timedelta
from pathlib import Path
from typing import List, Optional, Sequence

from ..constants import DEFAULT_DRAIN_TIMEOUT, DEFAULT_JAVA_EXECUTABLE
from ..exceptions import JakartaReadyError
from .bytecode import BytecodeScanner
from .models import (
    BytecodeAnalysisResult,
    ErrorAnalysis,
    ErrorCategory,
    ExecutionMetrics,
    VerificationOptions,
    VerificationResult,
    VerificationStatus,
    VerificationStrategy,
    merge_warnings,
)
from .process import run_process
from .signatures import EXACT_CONFIDENCE, classify_failure
from .state import VerificationStateMachine

logger = logging.getLogger(__name__)

_RUNNABLE_ARCHIVES = (".jar", ".war")


def runtime_warnings(stderr_lines: Sequence[str]) -> List[str]:
    """stderr lines that mention a warning or a deprecation."""
    return [
        line for line in stderr_lines
        if "warning" in line.lower() or "deprecated" in line.lower()
    ]


class RuntimeVerifier:
    """Verifies a packaged artifact by bytecode scan, by execution, or both."""

    def __init__(
        self,
        bytecode_scanner: Optional[BytecodeScanner] = None,
        java_executable: str = DEFAULT_JAVA_EXECUTABLE,
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ):
        self._bytecode = bytecode_scanner
        self._java = java_executable
        self._drain_timeout = drain_timeout

    def verify_runtime(
        self,
        artifact_path: Path,
        options: Optional[VerificationOptions] = None,
    ) -> VerificationResult:
        options = options or VerificationOptions()
        path = Path(artifact_path)
        machine = VerificationStateMachine(label=path.name)

        if not path.is_file():
            logger.warning(f"Artifact does not exist: {path}")
            machine.transition(VerificationStatus.ERROR)
            return _error_result(f"Artifact does not exist: {path}")

        logger.info(f"Verifying {path} ({options.strategy.value})")
        machine.transition(VerificationStatus.RUNNING)

        if options.strategy == VerificationStrategy.PROCESS_ONLY:
            result = self._verify_process(path, options)
        elif options.strategy == VerificationStrategy.BYTECODE_ONLY:
            result = self._verify_bytecode(path)
        else:
            result = self._verify_bytecode_then_process(path, options)

        machine.transition(result.status)
        logger.info(f"Verification of {path.name} finished: {result.status.value}")
        return result

    def build_command(self, path: Path, options: VerificationOptions) -> List[str]:
        if path.suffix.lower() in _RUNNABLE_ARCHIVES:
            return [self._java, *options.jvm_args, "-jar", str(path), *options.args]
        if options.launcher:
            return [*options.launcher, str(path), *options.args]
        return [str(path), *options.args]

    # ── Process execution ───────────────────────────────────────────────

    def _verify_process(self, path: Path, options: VerificationOptions) -> VerificationResult:
        command = self.build_command(path, options)
        try:
            outcome = run_process(
                command,
                timeout=options.timeout,
                drain_timeout=self._drain_timeout,
                max_output_lines=options.max_output_lines,
                cwd=options.working_dir,
                env=options.env,
            )
        except OSError as e:
            logger.error(f"Failed to launch {command[0]}: {e}")
            return _error_result(f"Failed to launch {command[0]}: {e}")

        metrics = ExecutionMetrics(
            duration=outcome.duration,
            exit_code=outcome.exit_code,
            timed_out=outcome.timed_out,
        )
        warnings = tuple(runtime_warnings(outcome.stderr_lines))

        if outcome.timed_out:
            return VerificationResult(
                status=VerificationStatus.TIMEOUT,
                stdout_lines=outcome.stdout_lines,
                stderr_lines=outcome.stderr_lines,
                metrics=metrics,
                recommendations=(
                    f"Application did not exit within {options.timeout}s; raise the timeout "
                    "or make the application exit after startup checks",
                ),
                warnings=warnings,
            )

        if outcome.exit_code == 0:
            return VerificationResult(
                status=VerificationStatus.SUCCESS,
                stdout_lines=outcome.stdout_lines,
                stderr_lines=outcome.stderr_lines,
                metrics=metrics,
                warnings=warnings,
            )

        analysis = classify_failure(outcome.stdout_lines, outcome.stderr_lines, outcome.exit_code)
        logger.info(
            f"{path.name} exited with {outcome.exit_code}: {analysis.category.value} "
            f"(confidence {analysis.confidence:.1f})"
        )
        return VerificationResult(
            status=VerificationStatus.FAILURE,
            stdout_lines=outcome.stdout_lines,
            stderr_lines=outcome.stderr_lines,
            metrics=metrics,
            error_analysis=analysis,
            recommendations=analysis.suggested_fixes,
            warnings=warnings,
        )

    # ── Bytecode ────────────────────────────────────────────────────────

    def _analyze_bytecode(self, path: Path) -> BytecodeAnalysisResult:
        if self._bytecode is None:
            raise JakartaReadyError("Bytecode verification needs a BytecodeScanner")
        return self._bytecode.analyze_jar(path)

    def _verify_bytecode(self, path: Path) -> VerificationResult:
        try:
            analysis = self._analyze_bytecode(path)
        except JakartaReadyError as e:
            logger.error(f"Bytecode scan of {path} failed: {e}")
            return _error_result(str(e))
        return _bytecode_result(analysis)

    def _verify_bytecode_then_process(self, path: Path, options: VerificationOptions) -> VerificationResult:
        try:
            analysis = self._analyze_bytecode(path)
        except JakartaReadyError as e:
            logger.error(f"Bytecode scan of {path} failed: {e}")
            return _error_result(str(e))

        bytecode_result = _bytecode_result(analysis)
        if not analysis.has_issues:
            return bytecode_result

        logger.info(f"Bytecode scan of {path.name} found javax references; running the artifact")
        process_result = self._verify_process(path, options)
        return VerificationResult(
            status=process_result.status,
            stdout_lines=process_result.stdout_lines,
            stderr_lines=process_result.stderr_lines,
            metrics=process_result.metrics,
            error_analysis=process_result.error_analysis or bytecode_result.error_analysis,
            recommendations=merge_warnings(bytecode_result.recommendations, process_result.recommendations),
            warnings=merge_warnings(bytecode_result.warnings, process_result.warnings),
        )


def _bytecode_result(analysis: BytecodeAnalysisResult) -> VerificationResult:
    warnings = tuple(f"javax class found in bytecode: {name}" for name in analysis.javax_classes)
    metrics = ExecutionMetrics(duration=analysis.duration)

    if not analysis.is_mixed:
        return VerificationResult(status=VerificationStatus.SUCCESS, metrics=metrics, warnings=warnings)

    fixes = (
        "Migrate the remaining javax references to jakarta.*",
        "Replace libraries still compiled against javax with Jakarta-compatible releases",
    )
    error = ErrorAnalysis(
        category=ErrorCategory.MIXED_NAMESPACE,
        message="Mixed javax and jakarta namespaces detected in bytecode",
        matched_patterns=tuple(f"mixed-namespace-class:{name}" for name in analysis.mixed_namespace_classes),
        suggested_fixes=fixes,
        confidence=EXACT_CONFIDENCE,
    )
    return VerificationResult(
        status=VerificationStatus.FAILURE,
        metrics=metrics,
        error_analysis=error,
        recommendations=fixes,
        warnings=warnings,
    )


def _error_result(message: str) -> VerificationResult:
    return VerificationResult(
        status=VerificationStatus.ERROR,
        metrics=ExecutionMetrics(duration=timedelta(), exit_code=None, timed_out=False),
        error_analysis=ErrorAnalysis(
            category=ErrorCategory.UNKNOWN,
            message=message,
            confidence=1.0,
        ),
    )
