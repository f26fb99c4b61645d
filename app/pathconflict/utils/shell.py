"""Shell execution utilities.

Provides the single place where external binaries are executed: a
bounded, windowless, input-less subprocess call that always terminates.
"""

import logging
import os
import signal
import subprocess
import sys
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import IO, Any

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 3.0
DEFAULT_MAX_BYTES = 4096
DEFAULT_MAX_LINES = 5

_POLL_INTERVAL = 0.05
_REAP_TIMEOUT = 1.0
_CHUNK_SIZE = 65536


class SpawnStatus(str, Enum):
    """Terminal state of a spawned process."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class SpawnOutcome:
    """Result of a spawn() call.

    Attributes:
        status: Terminal state.
        output: Combined stdout/stderr, truncated to the capture limits.
        returncode: Exit code, when the process completed.
        error: Error text when spawning failed.
    """

    status: SpawnStatus
    output: str = ""
    returncode: int | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the process completed with exit code 0."""
        return self.status == SpawnStatus.COMPLETED and self.returncode == 0


class _OutputCollector:
    """Drains a child's output pipe in the background.

    At most ``limit`` bytes are kept; everything after that is read and
    discarded so the child never blocks on a full pipe.
    """

    def __init__(self, pipe: IO[bytes], limit: int) -> None:
        self._pipe = pipe
        self._limit = limit
        self._chunks: list[bytes] = []
        self._kept = 0
        self._thread = threading.Thread(target=self._drain, daemon=True)
        self._thread.start()

    def _drain(self) -> None:
        fd = self._pipe.fileno()
        while True:
            try:
                chunk = os.read(fd, _CHUNK_SIZE)
            except OSError:
                return
            if not chunk:
                return
            room = self._limit - self._kept
            if room > 0:
                self._chunks.append(chunk[:room])
                self._kept += min(room, len(chunk))

    def finish(self, timeout: float = _REAP_TIMEOUT) -> bytes:
        """Wait for the pipe to reach EOF and return the kept bytes."""
        self._thread.join(timeout)
        if not self._thread.is_alive():
            self._pipe.close()
        else:
            # A grandchild outside the process group still holds the pipe
            logger.debug("Output pipe still open after exit; leaving it to drain")
        return b"".join(list(self._chunks))


def _platform_kwargs() -> dict[str, Any]:
    if sys.platform == "win32":
        startupinfo = subprocess.STARTUPINFO()
        startupinfo.dwFlags |= subprocess.STARTF_USESHOWWINDOW
        startupinfo.wShowWindow = 0  # SW_HIDE
        return {"creationflags": subprocess.CREATE_NO_WINDOW, "startupinfo": startupinfo}
    # Own process group so the whole tree can be killed on timeout
    return {"start_new_session": True}


def _kill(proc: subprocess.Popen[bytes], collector: _OutputCollector) -> None:
    """Kill a process (and its process group on POSIX) and reap it."""
    if sys.platform != "win32":
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            proc.kill()
    else:
        proc.kill()

    try:
        proc.wait(timeout=_REAP_TIMEOUT)
    except subprocess.TimeoutExpired:
        logger.debug("Process %d did not exit after kill", proc.pid)
    collector.finish()


def truncate_output(data: bytes, max_bytes: int, max_lines: int) -> str:
    """Decode captured output and cut it to the capture limits.

    Args:
        data: Raw captured bytes.
        max_bytes: Maximum number of bytes kept.
        max_lines: Maximum number of lines kept.

    Returns:
        Decoded text (invalid bytes replaced).
    """
    text = data[:max_bytes].decode("utf-8", errors="replace")
    return "\n".join(text.splitlines()[:max_lines])


def spawn(
    args: list[str],
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_lines: int = DEFAULT_MAX_LINES,
    cancel: threading.Event | None = None,
) -> SpawnOutcome:
    """Run a binary safely and capture the start of its output.

    The child gets a closed stdin, no console window and a hard timeout.
    It is killed when the timeout elapses or ``cancel`` is set. Output is
    read while the child runs and never more than ``max_bytes`` of it is
    held in memory. This function never raises for process-level failures.

    Args:
        args: Binary path followed by its arguments.
        timeout: Maximum run time in seconds.
        max_bytes: Maximum number of output bytes kept.
        max_lines: Maximum number of output lines kept.
        cancel: Event signalling cancellation.

    Returns:
        SpawnOutcome describing how the process ended.
    """
    try:
        proc = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            **_platform_kwargs(),
        )
    except (OSError, ValueError) as e:
        logger.debug("Failed to spawn %s: %s", args[0] if args else "?", e)
        return SpawnOutcome(status=SpawnStatus.FAILED, error=str(e))

    collector = _OutputCollector(proc.stdout, max_bytes)  # type: ignore[arg-type]

    deadline = time.monotonic() + timeout
    while True:
        if cancel is not None and cancel.is_set():
            _kill(proc, collector)
            return SpawnOutcome(status=SpawnStatus.CANCELLED)

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            _kill(proc, collector)
            logger.warning("Timed out after %.1fs: %s", timeout, " ".join(args))
            return SpawnOutcome(status=SpawnStatus.TIMED_OUT)

        try:
            proc.wait(timeout=min(_POLL_INTERVAL, remaining))
        except subprocess.TimeoutExpired:
            continue
        break

    return SpawnOutcome(
        status=SpawnStatus.COMPLETED,
        output=truncate_output(collector.finish(), max_bytes, max_lines),
        returncode=proc.returncode,
    )
