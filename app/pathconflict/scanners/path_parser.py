"""PATH string parser.

Splits a raw PATH value into ordered, deduplicated PathEntry records.
Malformed and duplicate segments are recorded rather than raised.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from pathconflict.models.path_entry import PathEntry, SkippedEntry, SkipReason
from pathconflict.models.result import Note
from pathconflict.platform.profile import PlatformProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParsedPath:
    """Outcome of parsing one PATH string.

    Attributes:
        entries: Accepted entries, ordered by index.
        skipped: Malformed and duplicate segments, ordered by index.
        notes: Informational "duplicate PATH entry" notes.
    """

    entries: tuple[PathEntry, ...]
    skipped: tuple[SkippedEntry, ...]
    notes: tuple[Note, ...]


class PathParser:
    """Parser turning PATH strings into entries for one platform."""

    def __init__(self, profile: PlatformProfile, env: Mapping[str, str] | None = None) -> None:
        """Initialize the parser.

        Args:
            profile: Platform profile deciding separators and normalization.
            env: Environment used for variable expansion. Defaults to os.environ.
        """
        self._profile = profile
        self._env = dict(os.environ if env is None else env)

    def parse(self, raw: str) -> ParsedPath:
        """Parse a PATH string.

        Each segment keeps its position in the split as its index, so
        indices of accepted entries may have gaps where segments were
        skipped. Parsing the same string twice yields identical output.

        Args:
            raw: PATH value to parse.

        Returns:
            ParsedPath with entries, skipped segments and notes.
        """
        profile = self._profile
        entries: list[PathEntry] = []
        skipped: list[SkippedEntry] = []
        notes: list[Note] = []
        seen: dict[str, int] = {}

        for index, segment in enumerate(raw.split(profile.list_separator)):
            directory = segment.strip()
            if profile.is_windows and len(directory) >= 2 and directory[0] == directory[-1] == '"':
                directory = directory[1:-1].strip()

            if not directory:
                skipped.append(
                    SkippedEntry(
                        index=index,
                        raw=segment,
                        reason=SkipReason.MALFORMED,
                        detail="Empty PATH segment",
                    )
                )
                continue

            directory = profile.expand_vars(directory, self._env)
            if not profile.is_absolute(directory):
                logger.debug("Skipping relative PATH segment %d: %s", index, segment)
                skipped.append(
                    SkippedEntry(
                        index=index,
                        raw=segment,
                        reason=SkipReason.MALFORMED,
                        detail=f"Not an absolute path: {directory}",
                    )
                )
                continue

            normalized = profile.normalize_directory(directory)
            entry = PathEntry(
                index=index,
                directory=normalized,
                origin_tag=profile.origin_tag(normalized),
            )

            key = profile.directory_key(normalized)
            first = seen.get(key)
            if first is not None:
                skipped.append(
                    SkippedEntry(
                        index=index,
                        raw=segment,
                        reason=SkipReason.DUPLICATE,
                        detail=f"Duplicate of PATH entry {first}",
                        entry=entry,
                        duplicate_of=first,
                    )
                )
                notes.append(
                    Note(
                        message=f"duplicate PATH entry: {normalized} (first seen at index {first})",
                        index=index,
                    )
                )
                continue

            seen[key] = index
            entries.append(entry)

        logger.debug(
            "Parsed PATH into %d entries (%d skipped)",
            len(entries),
            len(skipped),
        )
        return ParsedPath(entries=tuple(entries), skipped=tuple(skipped), notes=tuple(notes))
