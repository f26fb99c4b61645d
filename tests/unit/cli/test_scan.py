"""Unit tests for scan command.

Tests for the CLI scan command implementation.
"""

import json
import os
import signal
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from pathconflict.cli.commands.scan import cancel_on_interrupt
from pathconflict.cli.main import app
from pathconflict.models.conflict import Conflict, ConflictCategory, Severity
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance, VersionInfo
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.models.path_entry import OriginTag, PathEntry, SkippedEntry, SkipReason
from pathconflict.models.result import AnalysisResult, Summary
from typer.testing import CliRunner

runner = CliRunner()


def _result(with_conflict: bool = True, cancelled: bool = False) -> AnalysisResult:
    """Create an analysis result with an optional python conflict."""
    entries = (
        PathEntry(index=0, directory="/usr/local/bin", origin_tag=OriginTag.UNIX),
        PathEntry(index=1, directory="/usr/bin", origin_tag=OriginTag.UNIX),
    )
    skipped = (SkippedEntry(index=2, raw="", reason=SkipReason.MALFORMED, detail="empty"),)
    if not with_conflict:
        return AnalysisResult(
            entries=entries,
            groups=(),
            conflicts=(),
            skipped_entries=skipped,
            summary=Summary.build(entries, (), (), skipped),
            cancelled=cancelled,
        )

    active = ExecutableInstance(
        binary_name="python",
        raw_path="/usr/local/bin/python",
        entry_index=0,
        version=VersionInfo(raw="Python 3.12.1", major=3, minor=12, patch=1),
    )
    shadowed = ExecutableInstance(
        binary_name="python",
        raw_path="/usr/bin/python",
        entry_index=1,
        version=VersionInfo(raw="Python 3.10.12", major=3, minor=10, patch=12),
    )
    groups = (ExecutableGroup(binary_name="python", instances=(active, shadowed)),)
    conflicts = (
        Conflict(
            binary_name="python",
            category=ConflictCategory.DUPLICATE_VERSIONS,
            severity=Severity.HIGH,
            active=active,
            shadowed=(shadowed,),
            recommendation="Remove the older python.",
            description="2 instances with different versions",
        ),
    )
    return AnalysisResult(
        entries=entries,
        groups=groups,
        conflicts=conflicts,
        skipped_entries=skipped,
        summary=Summary.build(entries, groups, conflicts, skipped),
        cancelled=cancelled,
    )


class TestScanCommand:
    """Tests for pathconflict scan command."""

    def test_scan_help(self) -> None:
        """Scan command shows help."""
        result = runner.invoke(app, ["scan", "--help"])
        assert result.exit_code == 0
        assert "--severity" in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_conflicts_exit_1(self, mock_analyze: MagicMock) -> None:
        """Reported conflicts exit with code 1 and show the table."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 1
        assert "PATH Conflicts" in result.stdout
        assert "python" in result.stdout
        assert "HIGH" in result.stdout
        assert "1 conflicts" in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_no_conflicts_exit_0(self, mock_analyze: MagicMock) -> None:
        """A clean PATH exits with code 0."""
        mock_analyze.return_value = _result(with_conflict=False)

        result = runner.invoke(app, ["scan"])

        assert result.exit_code == 0
        assert "No PATH conflicts found." in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_quiet_always_exits_0(self, mock_analyze: MagicMock) -> None:
        """--quiet suppresses output and the conflict exit code."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan", "--quiet"])

        assert result.exit_code == 0
        assert result.stdout == ""

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_global_quiet(self, mock_analyze: MagicMock) -> None:
        """The global --quiet flag applies to scan."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["--quiet", "scan"])

        assert result.exit_code == 0

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_fatal_config_exit_2(self, mock_analyze: MagicMock) -> None:
        """Invalid options exit with code 2."""
        mock_analyze.side_effect = FatalConfigError("Custom PATH is empty")

        result = runner.invoke(app, ["scan", "--path", " "])

        assert result.exit_code == 2
        assert "Custom PATH is empty" in result.output

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_options_are_forwarded(self, mock_analyze: MagicMock) -> None:
        """Command-line flags become analysis options."""
        mock_analyze.return_value = _result(with_conflict=False)

        runner.invoke(
            app,
            [
                "scan",
                "--binary",
                "python",
                "--severity",
                "high",
                "--category",
                "duplicate_versions",
                "--no-versions",
                "--no-symlinks",
                "--hashes",
                "--conflicts-only",
                "--path",
                "/usr/bin:/bin",
                "-r",
            ],
        )

        options = mock_analyze.call_args.args[0]
        assert isinstance(options, AnalysisOptions)
        assert options.binary_filter == "python"
        assert options.severity_filter == Severity.HIGH
        assert options.category_filter == ConflictCategory.DUPLICATE_VERSIONS
        assert not options.extract_versions
        assert not options.resolve_symlinks
        assert options.include_hashes
        assert options.conflicts_only
        assert options.custom_path == "/usr/bin:/bin"
        assert options.recommendations
        assert mock_analyze.call_args.kwargs["cancel"] is not None

    def test_invalid_severity_rejected(self) -> None:
        """Unknown severity values are rejected by the parser."""
        result = runner.invoke(app, ["scan", "--severity", "extreme"])

        assert result.exit_code == 2

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_json_output(self, mock_analyze: MagicMock) -> None:
        """--format json prints the serialized result."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan", "--format", "json"])

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["conflicts"][0]["binary_name"] == "python"
        assert data["conflicts"][0]["severity"] == "high"
        assert data["summary"]["total_conflicts"] == 1

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_recommendations_shown(self, mock_analyze: MagicMock) -> None:
        """--recommendations prints the advisory text."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan", "-r"])

        assert "Remove the older python." in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_recommendations_hidden_by_default(self, mock_analyze: MagicMock) -> None:
        """Without --recommendations no advisory text is printed."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan"])

        assert "Remove the older python." not in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_verbose_lists_skipped(self, mock_analyze: MagicMock) -> None:
        """Global --verbose lists skipped PATH entries."""
        mock_analyze.return_value = _result(with_conflict=False)

        result = runner.invoke(app, ["--verbose", "scan"])

        assert "Skipped PATH entries" in result.stdout
        assert "malformed_path_entry" in result.stdout

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_cancelled_warning(self, mock_analyze: MagicMock) -> None:
        """A cancelled run warns that results are partial."""
        mock_analyze.return_value = _result(with_conflict=False, cancelled=True)

        result = runner.invoke(app, ["scan"])

        assert "results are partial" in result.output

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_export(self, mock_analyze: MagicMock, tmp_path: Path) -> None:
        """--export writes the result as JSON."""
        mock_analyze.return_value = _result()
        export_file = tmp_path / "out" / "result.json"

        result = runner.invoke(app, ["scan", "--export", str(export_file)])

        assert result.exit_code == 1
        assert "Analysis exported to" in result.stdout
        data = json.loads(export_file.read_text())
        assert data["conflicts"][0]["category"] == "duplicate_versions"

    @patch("pathconflict.cli.commands.scan.analyze")
    def test_export_to_directory_fails(self, mock_analyze: MagicMock, tmp_path: Path) -> None:
        """Exporting onto a directory exits with code 2."""
        mock_analyze.return_value = _result()

        result = runner.invoke(app, ["scan", "--export", str(tmp_path)])

        assert result.exit_code == 2
        assert "is a directory" in result.output


class TestCancelOnInterrupt:
    """Tests for cancel_on_interrupt context manager."""

    def test_event_starts_clear(self) -> None:
        """The cancellation event is not set on entry."""
        with cancel_on_interrupt() as cancel:
            assert not cancel.is_set()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signal delivery")
    def test_sigint_sets_event(self) -> None:
        """SIGINT inside the block sets the event instead of raising."""
        with cancel_on_interrupt() as cancel:
            os.kill(os.getpid(), signal.SIGINT)
            assert cancel.wait(timeout=1.0)
