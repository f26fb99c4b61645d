"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import os
import stat
from collections.abc import Callable
from pathlib import Path

import pytest
from pathconflict.models.executable import (
    ExecutableInstance,
    ManagerInfo,
    ManagerKind,
    ResolutionState,
    VersionInfo,
)
from pathconflict.models.path_entry import OriginTag
from pathconflict.platform.profile import PlatformKind, PlatformProfile


@pytest.fixture
def linux_profile() -> PlatformProfile:
    """Standard Linux profile."""
    return PlatformProfile.for_kind(PlatformKind.LINUX)


@pytest.fixture
def macos_profile() -> PlatformProfile:
    """Case-insensitive macOS profile."""
    return PlatformProfile.for_kind(PlatformKind.MACOS)


@pytest.fixture
def windows_profile() -> PlatformProfile:
    """Native Windows profile."""
    return PlatformProfile.for_kind(PlatformKind.WINDOWS)


@pytest.fixture
def wsl_mount(tmp_path: Path) -> Path:
    """Directory standing in for /mnt inside WSL."""
    mount = tmp_path / "mnt"
    mount.mkdir()
    return mount


@pytest.fixture
def wsl_profile(wsl_mount: Path) -> PlatformProfile:
    """WSL2 profile whose Windows drives live under a temporary mount root."""
    return PlatformProfile.for_kind(
        PlatformKind.WSL,
        wsl_version="WSL2",
        wsl_distro="Ubuntu",
        wsl_mount_root=str(wsl_mount),
    )


@pytest.fixture
def write_script() -> Callable[..., Path]:
    """Factory writing executable shell scripts that print a fixed text."""

    def _write(path: Path, output: str = "", *, exit_code: int = 0) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"#!/bin/sh\necho '{output}'\nexit {exit_code}\n")
        os.chmod(path, path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    return _write


@pytest.fixture
def make_instance() -> Callable[..., ExecutableInstance]:
    """Factory for enriched executable instances.

    ``version`` accepts a dotted string, ``manager`` a "name:kind" pair
    where kind is "vm" or "pm".
    """

    def _make(
        path: str,
        index: int,
        *,
        name: str | None = None,
        version: str | None = None,
        manager: str | None = None,
        origin: OriginTag = OriginTag.UNIX,
        resolved: str | None = None,
        state: ResolutionState = ResolutionState.RESOLVED,
    ) -> ExecutableInstance:
        info = None
        if version is not None:
            parts = [int(p) for p in version.split(".")]
            parts += [None] * (3 - len(parts))  # type: ignore[list-item]
            info = VersionInfo(raw=version, major=parts[0], minor=parts[1], patch=parts[2])
        owner = None
        if manager is not None:
            manager_name, kind = manager.split(":")
            owner = ManagerInfo(
                name=manager_name,
                kind=ManagerKind.VERSION_MANAGER if kind == "vm" else ManagerKind.PACKAGE_MANAGER,
            )
        return ExecutableInstance(
            binary_name=name or path.rsplit("/", 1)[-1],
            raw_path=path,
            entry_index=index,
            origin_tag=origin,
            resolved_path=resolved if resolved is not None else path,
            resolution_state=state,
            version=info,
            manager=owner,
        )

    return _make
