"""Version extraction.

Runs executables with a version flag through the safe spawn helper and
parses the reported version. When execution yields nothing, the version
is inferred from the executable's path where possible.
"""

import logging
import re
import threading
from dataclasses import replace

from pathconflict.models.executable import (
    ExecutableInstance,
    ProbeStatus,
    VersionInfo,
    VersionProbe,
)
from pathconflict.utils.shell import (
    DEFAULT_MAX_BYTES,
    DEFAULT_MAX_LINES,
    DEFAULT_TIMEOUT,
    SpawnStatus,
    spawn,
)

logger = logging.getLogger(__name__)

DEFAULT_VERSION_FLAGS: tuple[str, ...] = ("--version",)

# Binaries whose version flag is not reliably honored
FAMILY_FLAGS: dict[str, tuple[str, ...]] = {
    "java": ("-version",),
    "javac": ("-version",),
    "go": ("version",),
    "gofmt": (),
    "ssh": ("-V",),
}

# Never executed, whatever flag is passed
UNSAFE_BINARIES: frozenset[str] = frozenset(
    {
        "reboot",
        "shutdown",
        "halt",
        "poweroff",
        "init",
        "telinit",
        "suspend",
        "hibernate",
        "logout",
        "format",
    }
)

_MAX_RAW_LENGTH = 200

_JAVA_RE = re.compile(r'(?:version\s+"?|openjdk\s+)(\d+)(?:\.(\d+))?(?:\.(\d+))?', re.IGNORECASE)
_GO_RE = re.compile(r"\bgo(\d+)\.(\d+)(?:\.(\d+))?")
_TRIPLE_RE = re.compile(r"(?<![\d.])v?(\d+)\.(\d+)\.(\d+)")
_PAIR_RE = re.compile(r"(?<![\d.])v?(\d+)\.(\d+)(?![\d])")
_SINGLE_RE = re.compile(r"\bversion\s+v?(\d+)\b", re.IGNORECASE)
_PATH_SEMVER_RE = re.compile(r"(?:^|/)v(\d+)\.(\d+)\.(\d+)(?:/|$)")
_PATH_DIR_RE = re.compile(r"/(\d+)\.(\d+)(?:\.(\d+))?/")
_TRAILING_DIGITS_RE = re.compile(r"[\d.]+$")


def _int(value: str | None) -> int | None:
    return int(value) if value is not None else None


def _first_line(text: str) -> str | None:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped[:_MAX_RAW_LENGTH]
    return None


def _family(name: str) -> str:
    return name.lower().removesuffix(".exe")


def parse_version(text: str, binary_name: str = "") -> VersionInfo | None:
    """Parse version output into a VersionInfo.

    Java and Go get dedicated patterns (legacy ``1.x`` Java versions
    are mapped to ``x``); everything else is searched for ``X.Y.Z``,
    then ``X.Y``, then ``version N``.

    Args:
        text: Captured output of a version probe.
        binary_name: Name of the probed binary, selecting family rules.

    Returns:
        Parsed version, a raw-only version when nothing numeric was
        found, or None when the output was empty.
    """
    raw = _first_line(text)
    if raw is None:
        return None

    family = _family(binary_name)
    if family in ("java", "javac"):
        match = _JAVA_RE.search(text)
        if match:
            major, minor, patch = (_int(g) for g in match.groups())
            if major == 1 and minor is not None:
                major, minor, patch = minor, patch, None
            return VersionInfo(raw=raw, major=major, minor=minor, patch=patch)
    elif family == "go":
        match = _GO_RE.search(text)
        if match:
            major, minor, patch = (_int(g) for g in match.groups())
            return VersionInfo(raw=raw, major=major, minor=minor, patch=patch)

    match = _TRIPLE_RE.search(text)
    if match:
        major, minor, patch = (int(g) for g in match.groups())
        return VersionInfo(raw=raw, major=major, minor=minor, patch=patch)

    match = _PAIR_RE.search(text)
    if match:
        return VersionInfo(raw=raw, major=int(match.group(1)), minor=int(match.group(2)))

    match = _SINGLE_RE.search(text)
    if match:
        return VersionInfo(raw=raw, major=int(match.group(1)))

    return VersionInfo(raw=raw)


def version_from_path(path: str, binary_name: str) -> VersionInfo | None:
    """Infer a version from an executable's path.

    Recognizes ``python3.11``-style names, ``/v18.0.0/`` directories
    (nvm, fnm) and bare ``/3.11.2/`` directories (pyenv, asdf).

    Args:
        path: Path of the executable (resolved target preferred).
        binary_name: Name of the executable.

    Returns:
        VersionInfo with method "path", or None if nothing matched.
    """
    normalized = path.replace("\\", "/")
    names = {binary_name, _TRAILING_DIGITS_RE.sub("", binary_name)} - {""}
    for name in sorted(names, key=len, reverse=True):
        match = re.search(rf"{re.escape(name)}-?(\d+)\.(\d+)(?:\.(\d+))?", normalized)
        if match:
            return VersionInfo(
                raw=match.group(0),
                major=int(match.group(1)),
                minor=int(match.group(2)),
                patch=_int(match.group(3)),
                method="path",
            )

    match = _PATH_SEMVER_RE.search(normalized)
    if match:
        major, minor, patch = (int(g) for g in match.groups())
        return VersionInfo(
            raw=match.group(0).strip("/"), major=major, minor=minor, patch=patch, method="path"
        )

    match = _PATH_DIR_RE.search(normalized)
    if match:
        return VersionInfo(
            raw=match.group(0).strip("/"),
            major=int(match.group(1)),
            minor=int(match.group(2)),
            patch=_int(match.group(3)),
            method="path",
        )
    return None


class VersionExtractor:
    """Detects versions of executables by running them safely."""

    def __init__(
        self,
        *,
        enabled: bool = True,
        timeout: float = DEFAULT_TIMEOUT,
        flags: tuple[str, ...] = DEFAULT_VERSION_FLAGS,
        max_bytes: int = DEFAULT_MAX_BYTES,
        max_lines: int = DEFAULT_MAX_LINES,
    ) -> None:
        """Initialize the extractor.

        Args:
            enabled: When False, binaries are never executed and only the
                path-based fallback applies.
            timeout: Per-invocation timeout in seconds.
            flags: Version flags tried in order for binaries without a
                family-specific flag.
            max_bytes: Output capture limit in bytes.
            max_lines: Output capture limit in lines.
        """
        self.enabled = enabled
        self._timeout = timeout
        self._flags = flags or DEFAULT_VERSION_FLAGS
        self._max_bytes = max_bytes
        self._max_lines = max_lines

    def flags_for(self, binary_name: str) -> tuple[str, ...]:
        """Return the version flags to try for a binary."""
        family = _family(binary_name)
        if family in FAMILY_FLAGS:
            return FAMILY_FLAGS[family] or self._flags
        return self._flags

    def probe(
        self,
        instance: ExecutableInstance,
        cancel: threading.Event | None = None,
    ) -> tuple[VersionInfo | None, VersionProbe]:
        """Run an executable to learn its version.

        Flags are tried in order until one yields a parsed version. A
        timeout or cancellation ends probing at once; a timed-out binary
        is not retried.

        Args:
            instance: Executable to probe.
            cancel: Event signalling cancellation.

        Returns:
            Tuple of (version or None, probe record).
        """
        if _family(instance.binary_name) in UNSAFE_BINARIES:
            return None, VersionProbe(status=ProbeStatus.SKIPPED, detail="unsafe to execute")

        best: VersionInfo | None = None
        last = VersionProbe(status=ProbeStatus.SKIPPED)
        for flag in self.flags_for(instance.binary_name):
            outcome = spawn(
                [instance.raw_path, flag],
                timeout=self._timeout,
                max_bytes=self._max_bytes,
                max_lines=self._max_lines,
                cancel=cancel,
            )
            if outcome.status == SpawnStatus.CANCELLED:
                return None, VersionProbe(status=ProbeStatus.CANCELLED)
            if outcome.status == SpawnStatus.TIMED_OUT:
                return None, VersionProbe(
                    status=ProbeStatus.TIMED_OUT, detail=f"no exit after {self._timeout:g}s"
                )
            if outcome.status == SpawnStatus.FAILED:
                last = VersionProbe(status=ProbeStatus.FAILED, detail=outcome.error)
                break
            if outcome.returncode != 0:
                last = VersionProbe(
                    status=ProbeStatus.FAILED, detail=f"exit code {outcome.returncode}"
                )
                continue

            last = VersionProbe(status=ProbeStatus.COMPLETED)
            version = parse_version(outcome.output, instance.binary_name)
            if version is not None and version.is_parsed:
                return version, last
            best = best or version

        if best is not None:
            return best, VersionProbe(status=ProbeStatus.COMPLETED)
        if last.status.is_soft_failure:
            logger.warning(
                "Version probe failed for %s: %s", instance.raw_path, last.detail
            )
        return None, last

    def extract(
        self,
        instance: ExecutableInstance,
        cancel: threading.Event | None = None,
        *,
        execute: bool = True,
    ) -> ExecutableInstance:
        """Return a copy of the instance with its version filled in.

        The execution result wins; the path-based fallback only applies
        when execution produced no parsed version.

        Args:
            instance: Executable to inspect.
            cancel: Event signalling cancellation.
            execute: When False, skip execution for this instance.

        Returns:
            Updated instance.
        """
        version: VersionInfo | None = None
        probe: VersionProbe | None = None
        if self.enabled and execute:
            version, probe = self.probe(instance, cancel)

        if version is None or not version.is_parsed:
            inferred = version_from_path(instance.effective_path, instance.binary_name)
            if inferred is None and instance.resolved_path:
                inferred = version_from_path(instance.raw_path, instance.binary_name)
            if inferred is not None:
                version = inferred

        if version is not None:
            logger.debug("Version of %s: %s (%s)", instance.raw_path, version, version.method)
        return replace(instance, version=version, probe=probe)
