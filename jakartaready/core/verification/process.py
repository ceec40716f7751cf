"""Child process execution with bounded output draining.

stdout and stderr are read by two dedicated threads while the caller
waits on process exit. The wait timeout is the only cancellation
mechanism: on expiry the child's whole process group is killed and the
readers get a bounded grace period to reach EOF.
"""

import logging
import os
import signal
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import IO, List, Mapping, Optional, Sequence, Tuple

from ..constants import DEFAULT_DRAIN_TIMEOUT, DEFAULT_MAX_OUTPUT_LINES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutcome:
    stdout_lines: Tuple[str, ...]
    stderr_lines: Tuple[str, ...]
    exit_code: Optional[int]
    timed_out: bool
    duration: timedelta
    dropped_lines: int = 0


def _drain(stream: IO[str], sink: List[str], max_lines: int) -> int:
    """Read ``stream`` to EOF, keeping the first ``max_lines`` lines.

    Returns:
        Number of lines discarded past the cap
    """
    dropped = 0
    try:
        for line in stream:
            if len(sink) < max_lines:
                sink.append(line.rstrip("\r\n"))
            else:
                dropped += 1
    except (OSError, ValueError) as e:
        # Stream closed underneath the reader
        logger.debug(f"Output drain stopped early: {e}")
    return dropped


def _kill_process_group(proc: subprocess.Popen) -> None:
    try:
        if hasattr(os, "killpg"):
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except ProcessLookupError:
        logger.debug(f"Process group {proc.pid} already gone")
    except PermissionError as e:
        logger.warning(f"Could not kill process group {proc.pid}: {e}; killing leader only")
        proc.kill()


def run_process(
    command: Sequence[str],
    timeout: float,
    drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    max_output_lines: int = DEFAULT_MAX_OUTPUT_LINES,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> ProcessOutcome:
    """Run ``command`` to completion or until ``timeout`` seconds elapse.

    Raises:
        OSError: the process could not be started
    """
    start = time.monotonic()
    proc = subprocess.Popen(
        list(command),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=str(cwd) if cwd is not None else None,
        env=dict(env) if env is not None else None,
        start_new_session=True,
    )
    logger.debug(f"Started pid {proc.pid}: {' '.join(command)}")

    stdout: List[str] = []
    stderr: List[str] = []
    timed_out = False
    executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="output-drain")
    futures = []
    try:
        futures = [
            executor.submit(_drain, proc.stdout, stdout, max_output_lines),
            executor.submit(_drain, proc.stderr, stderr, max_output_lines),
        ]
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            logger.warning(f"Process {proc.pid} exceeded {timeout}s timeout; killing process group")
            _kill_process_group(proc)
            proc.wait()

        _, pending = wait(futures, timeout=drain_timeout)
        if pending:
            # Descendants outlived the child and still hold the pipes
            logger.warning(
                f"Output readers for pid {proc.pid} did not finish within {drain_timeout}s; "
                "killing process group"
            )
            _kill_process_group(proc)
            _, pending = wait(pending, timeout=drain_timeout)
            if pending:
                logger.warning(f"Abandoning {len(pending)} output reader(s) for pid {proc.pid}")
    finally:
        if proc.poll() is None:
            _kill_process_group(proc)
            proc.wait()
        # Streams with an unfinished reader stay open
        for stream, future in zip((proc.stdout, proc.stderr), futures or (None, None)):
            if stream is not None and (future is None or future.done()):
                stream.close()
        executor.shutdown(wait=False)

    dropped = sum(f.result() for f in futures if f.done())
    if dropped:
        logger.debug(f"Discarded {dropped} output lines past the {max_output_lines}-line cap")

    return ProcessOutcome(
        stdout_lines=tuple(stdout),
        stderr_lines=tuple(stderr),
        exit_code=proc.returncode,
        timed_out=timed_out,
        duration=timedelta(seconds=time.monotonic() - start),
        dropped_lines=dropped,
    )
