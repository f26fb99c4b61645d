"""Unit tests for the safe spawn helper."""

import os
import sys
import threading
import time
import tracemalloc
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from pathconflict.utils.shell import SpawnStatus, spawn, truncate_output

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh scripts")


def _script(path: Path, body: str) -> str:
    path.write_text(f"#!/bin/sh\n{body}\n")
    os.chmod(path, 0o755)
    return str(path)


class TestTruncateOutput:
    """Tests for truncate_output function."""

    def test_line_limit(self) -> None:
        """Only the first lines are kept."""
        assert truncate_output(b"a\nb\nc\nd\n", 4096, 2) == "a\nb"

    def test_byte_limit(self) -> None:
        """Output is cut at the byte limit."""
        assert truncate_output(b"x" * 100, 10, 5) == "x" * 10

    def test_invalid_utf8_replaced(self) -> None:
        """Undecodable bytes do not raise."""
        assert "\ufffd" in truncate_output(b"v1.0 \xff\xfe", 4096, 5)


@posix_only
class TestSpawn:
    """Tests for spawn function."""

    def test_captures_output(self, tmp_path: Path) -> None:
        """stdout and stderr are captured together."""
        script = _script(tmp_path / "tool", 'echo "tool 1.2.3"; echo "warn" >&2')

        outcome = spawn([script, "--version"])

        assert outcome.success
        assert outcome.returncode == 0
        assert "tool 1.2.3" in outcome.output
        assert "warn" in outcome.output

    def test_nonzero_exit(self, tmp_path: Path) -> None:
        """A non-zero exit completes with its return code."""
        script = _script(tmp_path / "tool", "exit 3")

        outcome = spawn([script])

        assert outcome.status == SpawnStatus.COMPLETED
        assert outcome.returncode == 3
        assert not outcome.success

    def test_stdin_is_closed(self, tmp_path: Path) -> None:
        """Binaries waiting for input see EOF instead of blocking."""
        script = _script(tmp_path / "tool", "read line; echo done")

        outcome = spawn([script], timeout=2.0)

        assert outcome.status == SpawnStatus.COMPLETED
        assert outcome.output == "done"

    def test_timeout_kills(self, tmp_path: Path) -> None:
        """A hanging binary is killed at the timeout."""
        script = _script(tmp_path / "hang", "sleep 30")

        start = time.monotonic()
        outcome = spawn([script], timeout=0.2)

        assert outcome.status == SpawnStatus.TIMED_OUT
        assert time.monotonic() - start < 5

    def test_cancel(self, tmp_path: Path) -> None:
        """Setting the cancel event stops the binary."""
        script = _script(tmp_path / "hang", "sleep 30")
        cancel = threading.Event()
        threading.Timer(0.1, cancel.set).start()

        outcome = spawn([script], timeout=10.0, cancel=cancel)

        assert outcome.status == SpawnStatus.CANCELLED

    def test_missing_binary(self, tmp_path: Path) -> None:
        """Spawn errors are reported, not raised."""
        outcome = spawn([str(tmp_path / "missing")])

        assert outcome.status == SpawnStatus.FAILED
        assert outcome.error

    def test_large_output_is_not_buffered(self, tmp_path: Path) -> None:
        """A binary flooding stdout keeps only max_bytes in memory."""
        script = _script(tmp_path / "flood", "head -c 67108864 /dev/zero; echo tail")

        tracemalloc.start()
        try:
            outcome = spawn([script], timeout=60.0, max_bytes=4096)
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert outcome.status == SpawnStatus.COMPLETED
        assert len(outcome.output.encode()) <= 4096
        assert peak < 8 * 1024 * 1024

    def test_endless_output_times_out(self, tmp_path: Path) -> None:
        """A binary that never stops writing is still killed at the timeout."""
        script = _script(tmp_path / "flood", "yes 'tool 1.0'")

        outcome = spawn([script], timeout=0.3, max_bytes=64)

        assert outcome.status == SpawnStatus.TIMED_OUT

    @patch("pathconflict.utils.shell._OutputCollector")
    @patch("pathconflict.utils.shell.subprocess.Popen")
    def test_popen_arguments(self, mock_popen: MagicMock, mock_collector: MagicMock) -> None:
        """The child gets no stdin and its own session."""
        proc = mock_popen.return_value
        proc.returncode = 0
        mock_collector.return_value.finish.return_value = b"1.0\n"

        outcome = spawn(["/bin/tool", "--version"])

        kwargs = mock_popen.call_args.kwargs
        assert kwargs["stdin"] is not None
        assert kwargs["start_new_session"] is True
        assert outcome.output == "1.0"
