"""Runtime platform detection.

Selects the PlatformProfile for the running system, including WSL
detection from ``/proc/version`` and ``WSL_DISTRO_NAME``.
"""

import logging
import os
import platform
import sys
from collections.abc import Mapping
from pathlib import Path

from pathconflict.models.result import PlatformInfo
from pathconflict.platform.profile import PlatformKind, PlatformProfile

logger = logging.getLogger(__name__)

PROC_VERSION_PATH = Path("/proc/version")


def _read_proc_version(path: Path = PROC_VERSION_PATH) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None


def detect_wsl(
    env: Mapping[str, str] | None = None,
    proc_version: str | None = None,
) -> tuple[bool, str | None]:
    """Detect whether the process runs inside WSL.

    Args:
        env: Environment to inspect. Defaults to os.environ.
        proc_version: Contents of /proc/version. Read from disk when None.

    Returns:
        Tuple of (is_wsl, version) where version is "WSL1", "WSL2" or None.
    """
    env = os.environ if env is None else env
    if proc_version is None:
        proc_version = _read_proc_version() or ""

    lowered = proc_version.lower()
    is_wsl = "microsoft" in lowered or "wsl" in lowered or bool(env.get("WSL_DISTRO_NAME"))
    if not is_wsl:
        return False, None

    if "wsl2" in lowered:
        version = "WSL2"
    elif "microsoft" in lowered:
        version = "WSL1"
    else:
        version = None
    logger.debug("Detected WSL (version=%s)", version)
    return True, version


def detect_platform(
    env: Mapping[str, str] | None = None,
    proc_version: str | None = None,
) -> PlatformProfile:
    """Select the PlatformProfile for the running system.

    Args:
        env: Environment to inspect. Defaults to os.environ.
        proc_version: Contents of /proc/version, for testing.

    Returns:
        Profile for the current platform.
    """
    env = os.environ if env is None else env

    if sys.platform == "win32":
        pathext = env.get("PATHEXT")
        extensions = tuple(e for e in pathext.split(";") if e) if pathext else None
        return PlatformProfile.for_kind(PlatformKind.WINDOWS, executable_extensions=extensions)

    if sys.platform == "darwin":
        return PlatformProfile.for_kind(PlatformKind.MACOS)

    is_wsl, version = detect_wsl(env, proc_version)
    if is_wsl:
        return PlatformProfile.for_kind(
            PlatformKind.WSL,
            wsl_version=version,
            wsl_distro=env.get("WSL_DISTRO_NAME") or None,
        )
    return PlatformProfile.for_kind(PlatformKind.LINUX)


def platform_info(profile: PlatformProfile) -> PlatformInfo:
    """Describe the platform a profile was selected for."""
    return PlatformInfo(
        os=profile.kind.value,
        arch=platform.machine() or "unknown",
        is_wsl=profile.is_wsl,
        wsl_version=profile.wsl_version,
        wsl_distro=profile.wsl_distro,
    )
