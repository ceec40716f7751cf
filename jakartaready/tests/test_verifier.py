"""Tests for runtime verification.

Processes are real: short Python scripts run through ``sys.executable``
as the launcher, so no JVM is needed.

Tests cover:
- State machine transitions
- Failure signature classification
- Process execution: success, failure, timeout, output caps, launch errors
- Bytecode scanning of jar archives
- Verification strategies
"""

import os
import sys
import time
import zipfile
from pathlib import Path

import pytest

from jakartaready.core.exceptions import InputNotFoundError, ParseFailureError
from jakartaready.core.mapping import load_bundled_mapping_table
from jakartaready.core.verification import (
    BytecodeScanner,
    ErrorCategory,
    RuntimeVerifier,
    VerificationOptions,
    VerificationStateMachine,
    VerificationStatus,
    VerificationStrategy,
    classify_failure,
    run_process,
    runtime_warnings,
)
from jakartaready.core.verification.models import VerificationResult

posix_only = pytest.mark.skipif(os.name != "posix", reason="process groups are POSIX-only")


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture(scope="module")
def bytecode_scanner():
    return BytecodeScanner(load_bundled_mapping_table())


@pytest.fixture
def verifier(bytecode_scanner):
    return RuntimeVerifier(bytecode_scanner, java_executable="/nonexistent/bin/java", drain_timeout=2.0)


def _script(tmp_path: Path, body: str, name: str = "app.py") -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def _options(**kwargs) -> VerificationOptions:
    kwargs.setdefault("launcher", (sys.executable,))
    kwargs.setdefault("timeout", 15.0)
    return VerificationOptions(**kwargs)


def _jar(tmp_path: Path, entries: dict, name: str = "app.jar") -> Path:
    path = tmp_path / name
    with zipfile.ZipFile(path, "w") as archive:
        for entry_name, data in entries.items():
            archive.writestr(entry_name, data)
    return path


JAVAX_CLASS = b"\xca\xfe\xba\xbe....javax/servlet/http/HttpServlet...."
JAKARTA_CLASS = b"\xca\xfe\xba\xbe....jakarta/servlet/Filter...."
MIXED_CLASS = b"\xca\xfe\xba\xbe..javax/persistence/Entity..jakarta/servlet/Filter.."
JDK_JAVAX_CLASS = b"\xca\xfe\xba\xbe....javax/crypto/Cipher...."


# ── Tests: State machine ──────────────────────────────────────────────────


class TestStateMachine:

    def test_happy_path(self):
        machine = VerificationStateMachine("app.jar")
        assert machine.status == VerificationStatus.NOT_STARTED
        machine.transition(VerificationStatus.RUNNING)
        machine.transition(VerificationStatus.SUCCESS)
        assert machine.is_terminal
        assert [(a, b) for a, b, _ in machine.history] == [
            (VerificationStatus.NOT_STARTED, VerificationStatus.RUNNING),
            (VerificationStatus.RUNNING, VerificationStatus.SUCCESS),
        ]

    def test_error_without_running(self):
        machine = VerificationStateMachine()
        machine.transition(VerificationStatus.ERROR)
        assert machine.is_terminal

    def test_cannot_skip_running(self):
        machine = VerificationStateMachine()
        with pytest.raises(ValueError, match="NOT_STARTED -> SUCCESS"):
            machine.transition(VerificationStatus.SUCCESS)

    @pytest.mark.parametrize("terminal", [
        VerificationStatus.SUCCESS,
        VerificationStatus.FAILURE,
        VerificationStatus.TIMEOUT,
        VerificationStatus.ERROR,
    ])
    def test_terminal_states_are_final(self, terminal):
        machine = VerificationStateMachine()
        machine.transition(VerificationStatus.RUNNING)
        machine.transition(terminal)
        for status in VerificationStatus:
            assert not machine.can_transition(status)
        with pytest.raises(ValueError):
            machine.transition(VerificationStatus.RUNNING)

    def test_result_requires_terminal_status(self):
        with pytest.raises(ValueError):
            VerificationResult(status=VerificationStatus.RUNNING)


# ── Tests: Failure classification ─────────────────────────────────────────


class TestClassifyFailure:

    def test_javax_class_not_found(self):
        analysis = classify_failure(
            [],
            ["Exception in thread \"main\" java.lang.NoClassDefFoundError: javax/servlet/http/HttpServlet"],
            1,
        )
        assert analysis.category == ErrorCategory.NAMESPACE_MISMATCH
        assert analysis.confidence == pytest.approx(0.9)
        assert analysis.matched_patterns == ("javax-class-not-found", "class-not-found")
        assert "NoClassDefFoundError" in analysis.message
        assert analysis.suggested_fixes

    def test_jakarta_class_not_found(self):
        analysis = classify_failure(
            ["Caused by: java.lang.ClassNotFoundException: jakarta.servlet.Filter"], [], 1
        )
        assert analysis.category == ErrorCategory.MISSING_JAKARTA_DEPENDENCY

    def test_mixed_namespace_cast(self):
        analysis = classify_failure([], [
            "java.lang.ClassCastException: class jakarta.servlet.http.HttpServletRequest "
            "cannot be cast to class javax.servlet.http.HttpServletRequest",
        ])
        assert analysis.category == ErrorCategory.MIXED_NAMESPACE

    def test_binary_incompatibility(self):
        exact = classify_failure([], ["java.lang.NoSuchMethodError: 'void jakarta.servlet.Filter.init()'"])
        assert exact.category == ErrorCategory.BINARY_INCOMPATIBILITY
        assert exact.confidence == pytest.approx(0.9)

        generic = classify_failure([], ["java.lang.NoSuchMethodError: 'void com.acme.Thing.go()'"])
        assert generic.category == ErrorCategory.BINARY_INCOMPATIBILITY
        assert generic.confidence == pytest.approx(0.6)

    def test_java_version(self):
        analysis = classify_failure([], [
            "Error: LinkageError occurred while loading main class com.example.App",
            "java.lang.UnsupportedClassVersionError: com/example/App has been compiled by a more recent "
            "version of the Java Runtime (class file version 61.0)",
        ])
        assert analysis.category == ErrorCategory.JAVA_VERSION

    def test_classpath(self):
        analysis = classify_failure([], ["Error: Unable to access jarfile missing.jar"])
        assert analysis.category == ErrorCategory.CLASSPATH
        assert analysis.confidence == pytest.approx(0.6)

    def test_configuration(self):
        analysis = classify_failure(["***************************", "APPLICATION FAILED TO START"], [])
        assert analysis.category == ErrorCategory.CONFIGURATION

    def test_unknown_uses_last_line(self):
        analysis = classify_failure(["starting", "boom", ""], [], 3)
        assert analysis.category == ErrorCategory.UNKNOWN
        assert analysis.confidence == pytest.approx(0.3)
        assert analysis.message == "boom"
        assert analysis.matched_patterns == ()

    def test_unknown_without_output(self):
        analysis = classify_failure([], [], 7)
        assert analysis.message == "Process exited with code 7"

    def test_stderr_searched_first(self):
        analysis = classify_failure(
            ["APPLICATION FAILED TO START"],
            ["java.lang.ClassNotFoundException: javax.persistence.Entity"],
        )
        assert analysis.category == ErrorCategory.NAMESPACE_MISMATCH
        assert "configuration-error" in analysis.matched_patterns

    def test_runtime_warnings(self):
        lines = ["WARNING: An illegal reflective access", "plain", "Method foo is Deprecated"]
        assert runtime_warnings(lines) == [lines[0], lines[2]]


# ── Tests: Process execution ──────────────────────────────────────────────


class TestRunProcess:

    def test_captures_output(self):
        outcome = run_process(
            [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr)"],
            timeout=15.0,
        )
        assert outcome.exit_code == 0
        assert outcome.stdout_lines == ("out",)
        assert outcome.stderr_lines == ("err",)
        assert not outcome.timed_out

    def test_output_cap(self):
        outcome = run_process(
            [sys.executable, "-c", "for i in range(100): print(i)"],
            timeout=15.0,
            max_output_lines=10,
        )
        assert len(outcome.stdout_lines) == 10
        assert outcome.stdout_lines[0] == "0"
        assert outcome.dropped_lines == 90

    def test_spawn_failure_raises(self):
        with pytest.raises(OSError):
            run_process(["/nonexistent/bin/tool"], timeout=5.0)

    @posix_only
    def test_lingering_descendant_does_not_block(self):
        script = (
            "import subprocess, sys\n"
            "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(60)'])\n"
            "print('parent done')\n"
        )
        start = time.monotonic()
        outcome = run_process([sys.executable, "-c", script], timeout=15.0, drain_timeout=1.0)
        assert time.monotonic() - start < 10.0
        assert outcome.exit_code == 0
        assert outcome.stdout_lines == ("parent done",)


class TestVerifyProcess:

    def test_success(self, verifier, tmp_path):
        app = _script(tmp_path, "print('Started Application in 1.2 seconds')\n")
        result = verifier.verify_runtime(app, _options())
        assert result.status == VerificationStatus.SUCCESS
        assert result.succeeded
        assert result.stdout_lines == ("Started Application in 1.2 seconds",)
        assert result.metrics.exit_code == 0
        assert result.error_analysis is None

    def test_failure_is_classified(self, verifier, tmp_path):
        app = _script(tmp_path, (
            "import sys\n"
            "print('WARNING: sun.misc.Unsafe is deprecated', file=sys.stderr)\n"
            "print('Exception in thread \"main\" java.lang.NoClassDefFoundError: "
            "javax/servlet/http/HttpServlet', file=sys.stderr)\n"
            "sys.exit(1)\n"
        ))
        result = verifier.verify_runtime(app, _options())
        assert result.status == VerificationStatus.FAILURE
        assert result.metrics.exit_code == 1
        assert result.error_analysis.category == ErrorCategory.NAMESPACE_MISMATCH
        assert result.recommendations == result.error_analysis.suggested_fixes
        assert result.warnings == ("WARNING: sun.misc.Unsafe is deprecated",)

    def test_args_are_passed(self, verifier, tmp_path):
        app = _script(tmp_path, "import sys\nprint(' '.join(sys.argv[1:]))\n")
        result = verifier.verify_runtime(app, _options(args=("--server.port=0", "--debug")))
        assert result.stdout_lines == ("--server.port=0 --debug",)

    def test_env_and_working_dir(self, verifier, tmp_path):
        app = _script(tmp_path, "import os\nprint(os.environ['APP_MODE'])\nprint(os.getcwd())\n")
        env = dict(os.environ, APP_MODE="verify")
        result = verifier.verify_runtime(app, _options(env=env, working_dir=tmp_path))
        assert result.stdout_lines[0] == "verify"
        assert Path(result.stdout_lines[1]).resolve() == tmp_path.resolve()

    @posix_only
    def test_timeout_kills_process(self, verifier, tmp_path):
        app = _script(tmp_path, (
            "import os, time\n"
            "print(os.getpid(), flush=True)\n"
            "time.sleep(60)\n"
        ))
        start = time.monotonic()
        result = verifier.verify_runtime(app, _options(timeout=1.0))
        elapsed = time.monotonic() - start

        assert result.status == VerificationStatus.TIMEOUT
        assert result.metrics.timed_out
        assert elapsed < 1.0 + 5.0
        pid = int(result.stdout_lines[0])
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)

    def test_missing_artifact(self, verifier, tmp_path):
        result = verifier.verify_runtime(tmp_path / "missing.jar")
        assert result.status == VerificationStatus.ERROR
        assert "does not exist" in result.error_analysis.message

    def test_launch_failure(self, verifier, tmp_path):
        app = _script(tmp_path, "print('never')\n")
        result = verifier.verify_runtime(app, _options(launcher=("/nonexistent/bin/python",)))
        assert result.status == VerificationStatus.ERROR
        assert "Failed to launch" in result.error_analysis.message

    def test_jar_uses_java_executable(self, verifier, tmp_path):
        jar = _jar(tmp_path, {"META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n"})
        result = verifier.verify_runtime(jar, _options())
        assert result.status == VerificationStatus.ERROR
        assert "/nonexistent/bin/java" in result.error_analysis.message

    def test_build_command(self, verifier):
        options = VerificationOptions(jvm_args=("-Xmx256m",), args=("--check",), launcher=("sh",))
        assert verifier.build_command(Path("app.jar"), options) == [
            "/nonexistent/bin/java", "-Xmx256m", "-jar", "app.jar", "--check",
        ]
        assert verifier.build_command(Path("run.sh"), options) == ["sh", "run.sh", "--check"]
        assert verifier.build_command(Path("run"), VerificationOptions()) == ["run"]

    def test_options_validation(self):
        with pytest.raises(ValueError):
            VerificationOptions(timeout=0)
        with pytest.raises(ValueError):
            VerificationOptions(max_output_lines=0)

    def test_to_dict(self, verifier, tmp_path):
        app = _script(tmp_path, "print('ok')\n")
        data = verifier.verify_runtime(app, _options()).to_dict()
        assert data["status"] == "SUCCESS"
        assert data["metrics"]["exitCode"] == 0
        assert data["errorAnalysis"] is None


# ── Tests: Bytecode ───────────────────────────────────────────────────────


class TestBytecodeScanner:

    def test_classifies_classes(self, bytecode_scanner, tmp_path):
        jar = _jar(tmp_path, {
            "com/example/Web.class": JAVAX_CLASS,
            "com/example/Filter.class": JAKARTA_CLASS,
            "BOOT-INF/classes/com/example/Both.class": MIXED_CLASS,
            "com/example/Crypto.class": JDK_JAVAX_CLASS,
            "module-info.class": JAVAX_CLASS,
            "application.properties": b"javax/servlet",
        })
        result = bytecode_scanner.analyze_jar(jar)
        assert result.classes_analyzed == 4
        assert result.javax_classes == ("com.example.Both", "com.example.Web")
        assert result.jakarta_classes == ("com.example.Both", "com.example.Filter")
        assert result.mixed_namespace_classes == ("com.example.Both",)
        assert result.is_mixed
        assert result.has_issues

    def test_clean_jar(self, bytecode_scanner, tmp_path):
        result = bytecode_scanner.analyze_jar(_jar(tmp_path, {"a/B.class": JAKARTA_CLASS}))
        assert not result.has_issues
        assert not result.is_mixed

    def test_missing_jar(self, bytecode_scanner, tmp_path):
        with pytest.raises(InputNotFoundError):
            bytecode_scanner.analyze_jar(tmp_path / "none.jar")

    def test_not_a_zip(self, bytecode_scanner, tmp_path):
        path = tmp_path / "broken.jar"
        path.write_bytes(b"not a zip archive")
        with pytest.raises(ParseFailureError):
            bytecode_scanner.analyze_jar(path)


class TestStrategies:

    def test_bytecode_only_mixed_fails(self, verifier, tmp_path):
        jar = _jar(tmp_path, {"a/Web.class": JAVAX_CLASS, "a/Filter.class": JAKARTA_CLASS})
        result = verifier.verify_runtime(jar, _options(strategy=VerificationStrategy.BYTECODE_ONLY))
        assert result.status == VerificationStatus.FAILURE
        assert result.error_analysis.category == ErrorCategory.MIXED_NAMESPACE
        assert result.warnings == ("javax class found in bytecode: a.Web",)

    def test_bytecode_only_javax_warns(self, verifier, tmp_path):
        jar = _jar(tmp_path, {"a/Web.class": JAVAX_CLASS})
        result = verifier.verify_runtime(jar, _options(strategy=VerificationStrategy.BYTECODE_ONLY))
        assert result.status == VerificationStatus.SUCCESS
        assert result.warnings == ("javax class found in bytecode: a.Web",)

    def test_bytecode_only_unreadable_archive(self, verifier, tmp_path):
        path = tmp_path / "broken.jar"
        path.write_bytes(b"garbage")
        result = verifier.verify_runtime(path, _options(strategy=VerificationStrategy.BYTECODE_ONLY))
        assert result.status == VerificationStatus.ERROR

    def test_bytecode_only_without_scanner(self, tmp_path):
        jar = _jar(tmp_path, {"a/Web.class": JAVAX_CLASS})
        result = RuntimeVerifier().verify_runtime(jar, _options(strategy=VerificationStrategy.BYTECODE_ONLY))
        assert result.status == VerificationStatus.ERROR

    def test_bytecode_then_process_skips_clean_archive(self, verifier, tmp_path):
        # The java executable does not exist, so launching would yield ERROR
        jar = _jar(tmp_path, {"a/Filter.class": JAKARTA_CLASS})
        result = verifier.verify_runtime(jar, _options(strategy=VerificationStrategy.BYTECODE_THEN_PROCESS))
        assert result.status == VerificationStatus.SUCCESS

    def test_bytecode_then_process_runs_on_issues(self, verifier, tmp_path):
        jar = _jar(tmp_path, {"a/Web.class": JAVAX_CLASS})
        result = verifier.verify_runtime(jar, _options(strategy=VerificationStrategy.BYTECODE_THEN_PROCESS))
        assert result.status == VerificationStatus.ERROR
        assert "javax class found in bytecode: a.Web" in result.warnings
