"""Executable scanner.

Lists every PATH directory, keeps the files the platform treats as
executables and groups them by binary name in PATH precedence order.
"""

import errno
import logging
import os
import threading
from dataclasses import dataclass, replace

from pathconflict.core.workers import run_indexed
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance
from pathconflict.models.path_entry import PathEntry, SkippedEntry, SkipReason
from pathconflict.platform.profile import PlatformProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ScanOutcome:
    """Result of scanning a set of PATH entries.

    Attributes:
        entries: Entries in input order, with ``accessible`` updated.
        groups: Executable groups ordered by grouping key.
        skipped: Entries that could not be listed or were abandoned.
        cancelled: True if scanning was cancelled before finishing.
    """

    entries: tuple[PathEntry, ...]
    groups: tuple[ExecutableGroup, ...]
    skipped: tuple[SkippedEntry, ...]
    cancelled: bool = False


@dataclass(frozen=True, slots=True)
class _DirectoryScan:
    instances: tuple[ExecutableInstance, ...] = ()
    error: str | None = None


class ExecutableScanner:
    """Scanner for the executables in PATH directories."""

    def __init__(self, profile: PlatformProfile, *, max_workers: int | None = None) -> None:
        self._profile = profile
        self._max_workers = max_workers

    def _extension_rank(self, filename: str) -> int:
        _, ext = self._profile.pathmod.splitext(filename)
        try:
            return self._profile.executable_extensions.index(ext.lower())
        except ValueError:
            return len(self._profile.executable_extensions)

    def scan_directory(self, entry: PathEntry) -> list[ExecutableInstance]:
        """List the executables of one PATH directory.

        Hidden files are ignored. When several files map to the same
        binary name (``node.cmd`` and ``node.exe``), the one with the
        earliest extension in the platform's extension list wins.

        Args:
            entry: PATH entry to list.

        Returns:
            Instances found in the directory, ordered by file name.

        Raises:
            OSError: If the directory cannot be listed.
        """
        profile = self._profile
        candidates: dict[str, tuple[tuple[int, str], ExecutableInstance]] = {}

        with os.scandir(entry.directory) as it:
            for dirent in it:
                name = dirent.name
                if name.startswith("."):
                    continue

                path = profile.pathmod.join(entry.directory, name)
                try:
                    st = os.stat(path)
                except OSError as e:
                    # Symlink loops are kept so resolution can report them
                    if e.errno != errno.ELOOP or not dirent.is_symlink():
                        logger.debug("Skipping unreadable file %s: %s", path, e)
                        continue
                else:
                    if not profile.is_executable(path, st):
                        continue

                binary = profile.binary_name(name, entry.directory)
                key = profile.group_key(binary)
                rank = (self._extension_rank(name), name)
                current = candidates.get(key)
                if current is not None and current[0] <= rank:
                    continue
                candidates[key] = (
                    rank,
                    ExecutableInstance(
                        binary_name=binary,
                        raw_path=path,
                        entry_index=entry.index,
                        origin_tag=entry.origin_tag,
                    ),
                )

        return sorted((inst for _, inst in candidates.values()), key=lambda i: i.raw_path)

    def _scan_one(self, entry: PathEntry) -> _DirectoryScan:
        try:
            return _DirectoryScan(instances=tuple(self.scan_directory(entry)))
        except OSError as e:
            logger.warning("Cannot read PATH directory %s: %s", entry.directory, e)
            return _DirectoryScan(error=str(e))

    def scan(
        self,
        entries: tuple[PathEntry, ...] | list[PathEntry],
        cancel: threading.Event | None = None,
    ) -> ScanOutcome:
        """Scan PATH entries and group their executables.

        Directories are listed concurrently; results are merged in entry
        order so every group lists its instances in PATH precedence.

        Args:
            entries: Entries to scan, in precedence order.
            cancel: Event signalling cancellation.

        Returns:
            ScanOutcome with updated entries, groups and skipped entries.
        """
        results = run_indexed(
            self._scan_one, list(entries), max_workers=self._max_workers, cancel=cancel
        )

        scanned: list[PathEntry] = []
        skipped: list[SkippedEntry] = []
        buckets: dict[str, list[ExecutableInstance]] = {}
        cancelled = False

        for entry, result in zip(entries, results, strict=True):
            if result is None:
                cancelled = True
                scanned.append(entry)
                skipped.append(
                    SkippedEntry(
                        index=entry.index,
                        raw=entry.directory,
                        reason=SkipReason.CANCELLED,
                        detail="Scan cancelled",
                        entry=entry,
                    )
                )
                continue

            if result.error is not None:
                failed = replace(entry, accessible=False)
                scanned.append(failed)
                skipped.append(
                    SkippedEntry(
                        index=entry.index,
                        raw=entry.directory,
                        reason=SkipReason.IO_ERROR,
                        detail=result.error,
                        entry=failed,
                    )
                )
                continue

            scanned.append(entry)
            for instance in result.instances:
                buckets.setdefault(self._profile.group_key(instance.binary_name), []).append(
                    instance
                )

        groups = tuple(
            ExecutableGroup(
                binary_name=instances[0].binary_name,
                instances=tuple(instances),
                incomplete=cancelled,
            )
            for _, instances in sorted(buckets.items())
        )
        logger.debug(
            "Scanned %d directories: %d executables in %d groups",
            len(entries),
            sum(len(g.instances) for g in groups),
            len(groups),
        )
        return ScanOutcome(
            entries=tuple(scanned),
            groups=groups,
            skipped=tuple(skipped),
            cancelled=cancelled,
        )
