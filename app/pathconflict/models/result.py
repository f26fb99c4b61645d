"""Analysis result model.

This module defines the aggregate returned by ``analyze()`` together with
its metadata, summary counts and JSON-ready serialization.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from pathconflict.models.conflict import Conflict, ConflictCategory, Severity
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance
from pathconflict.models.path_entry import PathEntry, SkippedEntry, SkipReason


@dataclass(frozen=True, slots=True)
class PlatformInfo:
    """Platform the analysis ran on.

    Attributes:
        os: Operating system kind ("linux", "macos", "windows", "wsl").
        arch: Machine architecture (e.g. "x86_64").
        is_wsl: Whether running inside Windows Subsystem for Linux.
        wsl_version: "WSL1" or "WSL2" when known.
        wsl_distro: Distribution name from WSL_DISTRO_NAME.
    """

    os: str
    arch: str
    is_wsl: bool = False
    wsl_version: str | None = None
    wsl_distro: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "os": self.os,
            "arch": self.arch,
            "is_wsl": self.is_wsl,
            "wsl_version": self.wsl_version,
            "wsl_distro": self.wsl_distro,
        }


@dataclass(frozen=True, slots=True)
class Note:
    """Informational finding that is not a conflict.

    Attributes:
        severity: Always INFO for notes.
        message: Human-readable text.
        index: PATH index the note refers to.
    """

    message: str
    index: int
    severity: Severity = Severity.INFO


@dataclass(frozen=True, slots=True)
class Summary:
    """Counts describing an analysis result."""

    total_entries: int = 0
    total_executables: int = 0
    unique_executables: int = 0
    total_conflicts: int = 0
    skipped: int = 0
    duplicate_entries: int = 0
    soft_failures: int = 0
    by_category: dict[str, int] = field(default_factory=dict)
    by_severity: dict[str, int] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        entries: tuple[PathEntry, ...],
        groups: tuple[ExecutableGroup, ...],
        conflicts: tuple[Conflict, ...],
        skipped: tuple[SkippedEntry, ...],
    ) -> "Summary":
        """Compute summary counts for a result.

        Args:
            entries: Scanned PATH entries.
            groups: Executable groups in the result.
            conflicts: Conflicts in the result.
            skipped: Skipped PATH segments.

        Returns:
            Summary with every count populated.
        """
        by_category = {c.value: 0 for c in ConflictCategory}
        by_severity = {s.value: 0 for s in Severity}
        for conflict in conflicts:
            by_category[conflict.category.value] += 1
            by_severity[conflict.severity.value] += 1

        instances = [inst for group in groups for inst in group.instances]
        soft_failures = sum(
            1 for inst in instances if inst.probe is not None and inst.probe.status.is_soft_failure
        )

        return cls(
            total_entries=len(entries),
            total_executables=len(instances),
            unique_executables=len(groups),
            total_conflicts=len(conflicts),
            skipped=len(skipped),
            duplicate_entries=sum(1 for s in skipped if s.reason == SkipReason.DUPLICATE),
            soft_failures=soft_failures,
            by_category=by_category,
            by_severity=by_severity,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_entries": self.total_entries,
            "total_executables": self.total_executables,
            "unique_executables": self.unique_executables,
            "total_conflicts": self.total_conflicts,
            "skipped": self.skipped,
            "duplicate_entries": self.duplicate_entries,
            "soft_failures": self.soft_failures,
            "by_category": dict(self.by_category),
            "by_severity": dict(self.by_severity),
        }


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    """Complete result of one analysis run.

    Attributes:
        entries: Deduplicated PATH entries in precedence order.
        groups: Executable groups, ordered by binary name.
        conflicts: Conflicts, most severe first.
        skipped_entries: PATH segments that were not scanned.
        summary: Count summary.
        notes: Informational findings (duplicate PATH entries).
        platform: Platform the analysis ran on.
        scan_time: UTC ISO timestamp of the run.
        cancelled: True when the run was cancelled and is partial.
    """

    entries: tuple[PathEntry, ...]
    groups: tuple[ExecutableGroup, ...]
    conflicts: tuple[Conflict, ...]
    skipped_entries: tuple[SkippedEntry, ...]
    summary: Summary
    notes: tuple[Note, ...] = ()
    platform: PlatformInfo | None = None
    scan_time: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    cancelled: bool = False

    @property
    def has_conflicts(self) -> bool:
        """Check if any conflict survived filtering."""
        return bool(self.conflicts)

    def group(self, name: str) -> ExecutableGroup | None:
        """Look up a group by binary name (exact match)."""
        for group in self.groups:
            if group.binary_name == name:
                return group
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        from pathconflict import __version__

        return {
            "metadata": {
                "scan_time": self.scan_time,
                "pathconflict_version": __version__,
                "platform": self.platform.to_dict() if self.platform else None,
                "cancelled": self.cancelled,
            },
            "entries": [_entry_to_dict(e) for e in self.entries],
            "groups": [_group_to_dict(g) for g in self.groups],
            "conflicts": [_conflict_to_dict(c) for c in self.conflicts],
            "skipped_entries": [_skipped_to_dict(s) for s in self.skipped_entries],
            "notes": [
                {"severity": n.severity.value, "message": n.message, "index": n.index}
                for n in self.notes
            ],
            "summary": self.summary.to_dict(),
        }


def _entry_to_dict(entry: PathEntry) -> dict[str, Any]:
    return {
        "index": entry.index,
        "directory": entry.directory,
        "origin_tag": entry.origin_tag.value,
        "accessible": entry.accessible,
    }


def _skipped_to_dict(skipped: SkippedEntry) -> dict[str, Any]:
    return {
        "index": skipped.index,
        "raw": skipped.raw,
        "reason": skipped.reason.value,
        "detail": skipped.detail,
        "duplicate_of": skipped.duplicate_of,
    }


def _instance_to_dict(instance: ExecutableInstance) -> dict[str, Any]:
    """Convert an ExecutableInstance to a dictionary.

    Args:
        instance: The instance to convert.

    Returns:
        Dictionary representation with the hash hex-encoded.
    """
    version = instance.version
    return {
        "binary_name": instance.binary_name,
        "raw_path": instance.raw_path,
        "resolved_path": instance.resolved_path,
        "symlink_chain": list(instance.symlink_chain),
        "resolution_state": instance.resolution_state.value,
        "entry_index": instance.entry_index,
        "origin_tag": instance.origin_tag.value,
        "version": (
            {
                "raw": version.raw,
                "major": version.major,
                "minor": version.minor,
                "patch": version.patch,
                "method": version.method,
            }
            if version
            else None
        ),
        "probe": (
            {"status": instance.probe.status.value, "detail": instance.probe.detail}
            if instance.probe
            else None
        ),
        "manager": (
            {"name": instance.manager.name, "kind": instance.manager.kind.value}
            if instance.manager
            else None
        ),
        "hash": instance.hash.hex() if instance.hash else None,
    }


def _group_to_dict(group: ExecutableGroup) -> dict[str, Any]:
    return {
        "binary_name": group.binary_name,
        "incomplete": group.incomplete,
        "instances": [_instance_to_dict(i) for i in group.instances],
    }


def _conflict_to_dict(conflict: Conflict) -> dict[str, Any]:
    return {
        "binary_name": conflict.binary_name,
        "category": conflict.category.value,
        "severity": conflict.severity.value,
        "description": conflict.description,
        "recommendation": conflict.recommendation,
        "incomplete": conflict.incomplete,
        "active": _instance_to_dict(conflict.active),
        "shadowed": [_instance_to_dict(i) for i in conflict.shadowed],
    }
