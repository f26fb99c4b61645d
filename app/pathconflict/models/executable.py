"""Executable models for discovery and enrichment.

This module defines executables found on the search path, the
information gathered about them (resolved target, version, owning
manager, content hash) and the per-name groups they are collected in.
"""

from dataclasses import dataclass, field
from enum import Enum

from pathconflict.models.path_entry import OriginTag


class ResolutionState(str, Enum):
    """Outcome of following an executable's symlink chain.

    Attributes:
        RESOLVED: A non-symlink target was reached.
        CYCLE: The chain revisited a path it had already passed through.
        DEPTH_EXCEEDED: The chain was longer than the hop limit.
        SKIPPED: Resolution was disabled for this run.
    """

    RESOLVED = "resolved"
    CYCLE = "cycle"
    DEPTH_EXCEEDED = "depth_exceeded"
    SKIPPED = "skipped"


class ManagerKind(str, Enum):
    """Kind of tooling that installed an executable."""

    VERSION_MANAGER = "version_manager"
    PACKAGE_MANAGER = "package_manager"


class ProbeStatus(str, Enum):
    """Terminal state of a version probe.

    Attributes:
        COMPLETED: The binary ran and exited successfully.
        TIMED_OUT: The binary was killed after the timeout.
        FAILED: Spawning failed or the binary exited non-zero.
        CANCELLED: The run was cancelled while the binary was running.
        SKIPPED: The binary was not invoked (policy or disabled).
    """

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    FAILED = "failed"
    CANCELLED = "cancelled"
    SKIPPED = "skipped"

    @property
    def is_soft_failure(self) -> bool:
        """Check if the probe ended in a recoverable failure."""
        return self in (ProbeStatus.TIMED_OUT, ProbeStatus.FAILED)


@dataclass(frozen=True, slots=True)
class VersionInfo:
    """Version reported by (or inferred for) an executable.

    Attributes:
        raw: First meaningful line of output, or the matched path fragment.
        major: Parsed major version (None if unparsable).
        minor: Parsed minor version.
        patch: Parsed patch version.
        method: How the version was obtained ("execution" or "path").
    """

    raw: str
    major: int | None = field(default=None)
    minor: int | None = field(default=None)
    patch: int | None = field(default=None)
    method: str = field(default="execution")

    @property
    def is_parsed(self) -> bool:
        """Check if at least a major version could be parsed."""
        return self.major is not None

    @property
    def number(self) -> str | None:
        """Return the dotted version number, or None if unparsed."""
        if self.major is None:
            return None
        parts = [self.major, self.minor, self.patch]
        return ".".join(str(p) for p in parts if p is not None)

    @property
    def key(self) -> tuple[int, int, int] | str:
        """Return a comparable identity for this version.

        Parsed versions compare by numbers (missing parts count as 0),
        unparsed ones by their raw text.
        """
        if self.major is None:
            return self.raw
        return (self.major, self.minor or 0, self.patch or 0)

    def __str__(self) -> str:
        return self.number or self.raw


@dataclass(frozen=True, slots=True)
class ManagerInfo:
    """Version manager or package manager owning an executable."""

    name: str
    kind: ManagerKind
    description: str = field(default="")

    @property
    def is_version_manager(self) -> bool:
        """Check if this is a version manager (nvm, pyenv, ...)."""
        return self.kind == ManagerKind.VERSION_MANAGER

    @property
    def is_package_manager(self) -> bool:
        """Check if this is a package manager (Homebrew, Scoop, ...)."""
        return self.kind == ManagerKind.PACKAGE_MANAGER


@dataclass(frozen=True, slots=True)
class VersionProbe:
    """Record of a single version probe.

    Attributes:
        status: Terminal state of the probe.
        detail: Exit code or error text for failed probes.
    """

    status: ProbeStatus
    detail: str | None = field(default=None)


@dataclass(frozen=True, slots=True)
class ExecutableInstance:
    """One executable file found in one PATH directory.

    Instances are immutable; enrichment phases produce updated copies
    with ``dataclasses.replace``.

    Attributes:
        binary_name: Name the executable is invoked by (extension-less on Windows).
        raw_path: Path as found in the PATH directory.
        entry_index: Index of the owning PathEntry.
        origin_tag: Origin tag of the owning PathEntry.
        resolved_path: Canonical target after symlink resolution.
        symlink_chain: Paths visited while resolving, starting at raw_path.
        resolution_state: Outcome of symlink resolution.
        version: Detected version, if any.
        probe: Record of the version probe, if one was attempted.
        manager: Owning version/package manager (None = plain system install).
        hash: SHA-256 digest of the file content, if requested.
    """

    binary_name: str
    raw_path: str
    entry_index: int
    origin_tag: OriginTag = field(default=OriginTag.UNKNOWN)
    resolved_path: str | None = field(default=None)
    symlink_chain: tuple[str, ...] = field(default=())
    resolution_state: ResolutionState = field(default=ResolutionState.SKIPPED)
    version: VersionInfo | None = field(default=None)
    probe: VersionProbe | None = field(default=None)
    manager: ManagerInfo | None = field(default=None)
    hash: bytes | None = field(default=None)

    def __post_init__(self) -> None:
        """Validate instance data after initialization."""
        if not self.binary_name:
            msg = "Binary name cannot be empty"
            raise ValueError(msg)
        if not self.raw_path:
            msg = "Executable path cannot be empty"
            raise ValueError(msg)

    @property
    def effective_path(self) -> str:
        """Return the resolved path when known, the raw path otherwise."""
        return self.resolved_path or self.raw_path

    @property
    def is_unresolved(self) -> bool:
        """Check if symlink resolution stopped on a cycle or the depth limit."""
        return self.resolution_state in (
            ResolutionState.CYCLE,
            ResolutionState.DEPTH_EXCEEDED,
        )

    @property
    def manager_name(self) -> str | None:
        """Return the owning manager's name, if any."""
        return self.manager.name if self.manager else None


@dataclass(frozen=True, slots=True)
class ExecutableGroup:
    """All instances sharing one binary name, in PATH precedence order.

    ``instances[0]`` is the active instance: the one that actually runs.
    Every other instance is shadowed by it.

    Attributes:
        binary_name: Name of the active instance.
        instances: Instances ordered by owning entry index, ascending.
        incomplete: True when scanning or enrichment was cancelled and
            the group may be missing instances or data.
    """

    binary_name: str
    instances: tuple[ExecutableInstance, ...]
    incomplete: bool = field(default=False)

    def __post_init__(self) -> None:
        """Validate group ordering after initialization."""
        if not self.instances:
            msg = f"Group '{self.binary_name}' must contain at least one instance"
            raise ValueError(msg)
        indices = [i.entry_index for i in self.instances]
        if indices != sorted(indices):
            msg = f"Instances of '{self.binary_name}' are not in PATH order: {indices}"
            raise ValueError(msg)

    @property
    def active(self) -> ExecutableInstance:
        """Return the highest-precedence instance."""
        return self.instances[0]

    @property
    def shadowed(self) -> tuple[ExecutableInstance, ...]:
        """Return every instance hidden by the active one."""
        return self.instances[1:]

    @property
    def has_conflict(self) -> bool:
        """Check if more than one instance shares this name."""
        return len(self.instances) > 1
