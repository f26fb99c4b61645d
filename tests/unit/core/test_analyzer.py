"""Unit tests for the conflict detection pipeline.

These tests build real PATH directories under tmp_path with small shell
scripts standing in for executables.
"""

import os
import threading
from collections.abc import Callable
from pathlib import Path

import pytest
from pathconflict.core.analyzer import analyze, check_binary, describe
from pathconflict.core.config import EngineConfig
from pathconflict.core.context import AnalysisContext, build_context
from pathconflict.models.conflict import ConflictCategory, Severity
from pathconflict.models.executable import ProbeStatus, ResolutionState
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.models.path_entry import OriginTag, SkipReason
from pathconflict.platform.profile import PlatformProfile

WriteScript = Callable[..., Path]


@pytest.fixture
def context(linux_profile: PlatformProfile) -> AnalysisContext:
    """Default context for the Linux profile."""
    return build_context(EngineConfig(), linux_profile)


@pytest.fixture
def python_path(tmp_path: Path, write_script: WriteScript) -> str:
    """PATH with python 3.11 in usr/local/bin ahead of python 3.10 in usr/bin."""
    local = tmp_path / "usr" / "local" / "bin"
    system = tmp_path / "usr" / "bin"
    write_script(local / "python", "Python 3.11.0")
    write_script(system / "python", "Python 3.10.0")
    write_script(system / "ls", "ls (GNU coreutils) 9.4")
    return f"{local}:{system}"


class TestAnalyzeScenarios:
    """End-to-end scenarios through analyze()."""

    def test_duplicate_versions(self, context: AnalysisContext, python_path: str) -> None:
        """Two pythons with a minor gap are a HIGH duplicate-versions conflict."""
        result = analyze(context=context, env={"PATH": python_path})

        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.binary_name == "python"
        assert conflict.category == ConflictCategory.DUPLICATE_VERSIONS
        assert conflict.severity == Severity.HIGH
        assert conflict.active.raw_path.endswith(os.path.join("local", "bin", "python"))
        assert conflict.active.version is not None
        assert conflict.active.version.key == (3, 11, 0)
        assert conflict.shadowed[0].version is not None
        assert conflict.shadowed[0].version.key == (3, 10, 0)
        assert "python has 1 shadowed instance" in conflict.description

    def test_wsl_vs_windows(
        self,
        tmp_path: Path,
        wsl_profile: PlatformProfile,
        wsl_mount: Path,
        write_script: WriteScript,
    ) -> None:
        """A WSL python ahead of a mounted Windows python.exe is WSL_VS_WINDOWS."""
        linux_bin = tmp_path / "usr" / "bin"
        windows_dir = wsl_mount / "c" / "Python311"
        write_script(linux_bin / "python", "Python 3.11.4")
        write_script(windows_dir / "python.exe", "Python 3.11.4")
        context = build_context(EngineConfig(), wsl_profile)

        result = analyze(context=context, env={"PATH": f"{linux_bin}:{windows_dir}"})

        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.category == ConflictCategory.WSL_VS_WINDOWS
        assert conflict.severity == Severity.HIGH
        assert conflict.active.origin_tag == OriginTag.WSL
        assert conflict.shadowed[0].origin_tag == OriginTag.WINDOWS_SYSTEM
        assert result.platform is not None
        assert result.platform.is_wsl

    def test_wsl_binary_filter_with_extension(
        self,
        tmp_path: Path,
        wsl_profile: PlatformProfile,
        wsl_mount: Path,
        write_script: WriteScript,
    ) -> None:
        """On WSL, filtering for python.exe finds the python group."""
        linux_bin = tmp_path / "usr" / "bin"
        windows_dir = wsl_mount / "c" / "Python311"
        write_script(linux_bin / "python", "Python 3.11.4")
        write_script(windows_dir / "python.exe", "Python 3.11.4")
        context = build_context(EngineConfig(), wsl_profile)

        result = analyze(
            AnalysisOptions(binary_filter="python.exe", extract_versions=False),
            context=context,
            env={"PATH": f"{linux_bin}:{windows_dir}"},
        )

        group = result.group("python")
        assert group is not None
        assert len(group.instances) == 2

    def test_symlink_cycle(self, tmp_path: Path, context: AnalysisContext) -> None:
        """Looping symlinks are reported as unresolved, not raised."""
        first, second = tmp_path / "a", tmp_path / "b"
        first.mkdir()
        second.mkdir()
        os.symlink(second / "tool", first / "tool")
        os.symlink(first / "tool", second / "tool")

        result = analyze(
            AnalysisOptions(extract_versions=False),
            context=context,
            env={"PATH": f"{first}:{second}"},
        )

        group = result.group("tool")
        assert group is not None
        assert [i.resolution_state for i in group.instances] == [ResolutionState.CYCLE] * 2
        assert all(i.resolved_path is None for i in group.instances)
        assert result.conflicts[0].category == ConflictCategory.SHADOWED_BINARY

    def test_case_insensitive_dedup(
        self, tmp_path: Path, macos_profile: PlatformProfile, write_script: WriteScript
    ) -> None:
        """Case variants of one directory are scanned once."""
        tools = tmp_path / "Tools"
        write_script(tools / "tool", "tool 1.0.0")
        context = build_context(EngineConfig(), macos_profile)

        result = analyze(
            context=context, env={"PATH": f"{tools}:{tmp_path / 'tools'}"}
        )

        assert len(result.entries) == 1
        assert result.conflicts == ()
        assert result.skipped_entries[0].reason == SkipReason.DUPLICATE
        assert result.summary.duplicate_entries == 1
        assert len(result.notes) == 1

    def test_missing_directory(
        self, tmp_path: Path, context: AnalysisContext, python_path: str
    ) -> None:
        """A missing directory is recorded and the rest is analyzed."""
        missing = tmp_path / "missing"

        result = analyze(context=context, env={"PATH": f"{missing}:{python_path}"})

        assert result.skipped_entries[0].reason == SkipReason.IO_ERROR
        assert result.skipped_entries[0].index == 0
        assert not result.entries[0].accessible
        assert [c.binary_name for c in result.conflicts] == ["python"]


class TestAnalyzeOptions:
    """Tests for option handling in analyze()."""

    def test_binary_filter(self, context: AnalysisContext, python_path: str) -> None:
        """Only the requested binary is analyzed."""
        result = analyze(
            AnalysisOptions(binary_filter="ls"), context=context, env={"PATH": python_path}
        )

        assert [g.binary_name for g in result.groups] == ["ls"]
        ls = result.groups[0].active
        assert ls.version is not None
        assert ls.version.key == (9, 4, 0)

    def test_single_instances_not_probed(
        self, context: AnalysisContext, python_path: str
    ) -> None:
        """Binaries without a conflict are not executed by default."""
        result = analyze(context=context, env={"PATH": python_path})

        ls = result.group("ls")
        assert ls is not None
        assert ls.active.probe is None

    def test_conflicts_only(self, context: AnalysisContext, python_path: str) -> None:
        """Groups without a conflict are dropped."""
        result = analyze(
            AnalysisOptions(conflicts_only=True), context=context, env={"PATH": python_path}
        )

        assert [g.binary_name for g in result.groups] == ["python"]

    def test_severity_filter(self, context: AnalysisContext, python_path: str) -> None:
        """Conflicts below the minimum severity are filtered out."""
        result = analyze(
            AnalysisOptions(severity_filter=Severity.CRITICAL),
            context=context,
            env={"PATH": python_path},
        )

        assert result.conflicts == ()
        assert result.summary.total_conflicts == 0

    def test_category_filter(self, context: AnalysisContext, python_path: str) -> None:
        """Only conflicts of the requested category are kept."""
        result = analyze(
            AnalysisOptions(category_filter=ConflictCategory.SHADOWED_BINARY),
            context=context,
            env={"PATH": python_path},
        )

        assert result.conflicts == ()

    def test_recommendations_and_hashes(
        self, context: AnalysisContext, python_path: str
    ) -> None:
        """Recommendations and hashes are attached when requested."""
        result = analyze(
            AnalysisOptions(recommendations=True, include_hashes=True),
            context=context,
            env={"PATH": python_path},
        )

        conflict = result.conflicts[0]
        assert conflict.recommendation is not None
        assert conflict.active.hash is not None
        assert len(conflict.active.hash) == 32

    def test_no_versions(self, context: AnalysisContext, python_path: str) -> None:
        """With version extraction off nothing is executed."""
        result = analyze(
            AnalysisOptions(extract_versions=False), context=context, env={"PATH": python_path}
        )

        conflict = result.conflicts[0]
        assert conflict.active.probe is None
        assert conflict.category == ConflictCategory.SHADOWED_BINARY

    def test_custom_path(self, context: AnalysisContext, python_path: str) -> None:
        """A custom PATH replaces the environment's."""
        result = analyze(
            AnalysisOptions(custom_path=python_path), context=context, env={"PATH": "/nonexistent"}
        )

        assert len(result.entries) == 2

    def test_skip_system_enrichment(
        self, tmp_path: Path, linux_profile: PlatformProfile, python_path: str
    ) -> None:
        """Executables in system directories are not probed under the skip policy."""
        system = str(tmp_path / "usr" / "bin")
        config = EngineConfig(skip_system_enrichment=True, extra_system_directories=[system])
        context = build_context(config, linux_profile)

        result = analyze(context=context, env={"PATH": python_path})

        conflict = result.conflicts[0]
        assert conflict.active.probe is not None
        assert conflict.active.probe.status == ProbeStatus.COMPLETED
        assert conflict.shadowed[0].probe is None

    def test_timeout_is_a_soft_failure(
        self, tmp_path: Path, linux_profile: PlatformProfile
    ) -> None:
        """A hanging binary times out and the analysis still completes."""
        first, second = tmp_path / "a", tmp_path / "b"
        for directory in (first, second):
            directory.mkdir()
            script = directory / "hang"
            script.write_text("#!/bin/sh\nsleep 30\n")
            os.chmod(script, 0o755)
        context = build_context(EngineConfig(version_timeout_seconds=0.2), linux_profile)

        result = analyze(context=context, env={"PATH": f"{first}:{second}"})

        group = result.group("hang")
        assert group is not None
        assert all(i.probe is not None for i in group.instances)
        assert {i.probe.status for i in group.instances if i.probe} == {ProbeStatus.TIMED_OUT}
        assert result.summary.soft_failures == 2


class TestAnalyzeEdgeCases:
    """Tests for fatal errors, empty input, cancellation and determinism."""

    def test_custom_path_without_entries(self, context: AnalysisContext) -> None:
        """A custom PATH with nothing usable is fatal."""
        with pytest.raises(FatalConfigError, match="no usable entries"):
            analyze(AnalysisOptions(custom_path="relative:also/relative"), context=context)

    def test_invalid_binary_filter(self, context: AnalysisContext) -> None:
        """A path-like binary filter is fatal."""
        with pytest.raises(FatalConfigError, match="bare name"):
            analyze(AnalysisOptions(binary_filter="/usr/bin/python"), context=context)

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        """A broken configuration file is fatal."""
        config_path = tmp_path / "config.toml"
        config_path.write_text("max_workers = 0\n")

        with pytest.raises(FatalConfigError, match="configuration"):
            analyze(config_path=config_path, env={"PATH": ""})

    def test_empty_path(self, context: AnalysisContext) -> None:
        """An empty PATH gives an empty result."""
        result = analyze(context=context, env={"PATH": ""})

        assert result.entries == ()
        assert result.groups == ()
        assert not result.has_conflicts

    def test_cancelled_before_start(self, context: AnalysisContext, python_path: str) -> None:
        """A pre-set cancel event yields a partial, flagged result."""
        cancel = threading.Event()
        cancel.set()

        result = analyze(context=context, env={"PATH": python_path}, cancel=cancel)

        assert result.cancelled
        assert result.groups == ()
        assert {s.reason for s in result.skipped_entries} == {SkipReason.CANCELLED}

    def test_idempotent(self, context: AnalysisContext, python_path: str) -> None:
        """Two runs over the same PATH give the same result."""
        env = {"PATH": python_path}

        first = analyze(context=context, env=env)
        second = analyze(context=context, env=env)

        assert first.entries == second.entries
        assert first.groups == second.groups
        assert first.conflicts == second.conflicts
        assert first.summary == second.summary

    def test_conflicts_sorted_by_severity(
        self, tmp_path: Path, context: AnalysisContext, write_script: WriteScript
    ) -> None:
        """Conflicts are ordered most severe first."""
        first, second = tmp_path / "a", tmp_path / "b"
        write_script(first / "aaa", "aaa 1.0.0")
        write_script(second / "aaa", "aaa 1.0.0")
        write_script(first / "zzz", "zzz 2.0.0")
        write_script(second / "zzz", "zzz 1.0.0")

        result = analyze(context=context, env={"PATH": f"{first}:{second}"})

        assert [c.binary_name for c in result.conflicts] == ["zzz", "aaa"]
        assert result.conflicts[0].severity == Severity.CRITICAL

    def test_json_ready(self, context: AnalysisContext, python_path: str) -> None:
        """to_dict output carries metadata and summary counts."""
        data = analyze(context=context, env={"PATH": python_path}).to_dict()

        assert data["metadata"]["platform"]["os"] == "linux"
        assert data["summary"]["total_conflicts"] == 1
        assert data["summary"]["by_category"]["duplicate_versions"] == 1
        assert data["conflicts"][0]["active"]["version"]["major"] == 3


class TestCheckBinary:
    """Tests for check_binary function."""

    def test_returns_single_instance_group(
        self, context: AnalysisContext, python_path: str
    ) -> None:
        """A binary without a conflict is still returned."""
        group = check_binary("ls", context=context, env={"PATH": python_path})

        assert group is not None
        assert not group.has_conflict

    def test_missing_binary(self, context: AnalysisContext, python_path: str) -> None:
        """An unknown binary gives None."""
        assert check_binary("nope", context=context, env={"PATH": python_path}) is None

    def test_describe(self, context: AnalysisContext, python_path: str) -> None:
        """describe names the active path and its version."""
        group = check_binary("python", context=context, env={"PATH": python_path})

        assert group is not None
        assert describe(group).endswith("python (3.11.0)")
