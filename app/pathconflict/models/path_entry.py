"""PATH entry models.

This module defines the data structures produced by PATH parsing:
the accepted directory entries, their origin classification, and the
segments that were skipped along the way.
"""

from dataclasses import dataclass, field
from enum import Enum


class OriginTag(str, Enum):
    """Convention a PATH directory belongs to.

    Attributes:
        WSL: Native Linux directory inside a WSL distribution.
        WINDOWS_SYSTEM: Windows system or program directory (also when
            mounted into WSL under /mnt/<drive>).
        WINDOWS_USER: Windows per-user directory (e.g. C:\\Users\\...).
        UNIX: Regular Unix/Linux/macOS directory.
        HOMEBREW: Homebrew prefix directory.
        UNKNOWN: Directory whose convention could not be determined.
    """

    WSL = "wsl"
    WINDOWS_SYSTEM = "windows_system"
    WINDOWS_USER = "windows_user"
    UNIX = "unix"
    HOMEBREW = "homebrew"
    UNKNOWN = "unknown"

    @property
    def is_windows(self) -> bool:
        """Check if the tag denotes a Windows-side directory."""
        return self in (OriginTag.WINDOWS_SYSTEM, OriginTag.WINDOWS_USER)


class SkipReason(str, Enum):
    """Reason a PATH segment did not take part in scanning.

    Attributes:
        MALFORMED: Empty or relative segment, dropped before scanning.
        DUPLICATE: Same normalized directory as an earlier segment.
        IO_ERROR: Directory could not be listed.
        CANCELLED: Directory scan was abandoned after cancellation.
    """

    MALFORMED = "malformed_path_entry"
    DUPLICATE = "duplicate_entry"
    IO_ERROR = "io_error"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class PathEntry:
    """A single directory of the search path.

    Attributes:
        index: Position of the segment in the raw PATH string. Lower index
            means higher precedence.
        directory: Normalized directory path.
        origin_tag: Convention the directory belongs to.
        accessible: False once listing the directory has failed.
    """

    index: int
    directory: str
    origin_tag: OriginTag
    accessible: bool = True

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if self.index < 0:
            msg = f"PATH index cannot be negative, got {self.index}"
            raise ValueError(msg)
        if not self.directory:
            msg = "PATH entry directory cannot be empty"
            raise ValueError(msg)


@dataclass(frozen=True, slots=True)
class SkippedEntry:
    """A PATH segment that was recorded instead of scanned.

    Attributes:
        index: Position of the segment in the raw PATH string.
        raw: Segment text as it appeared in PATH.
        reason: Why the segment was skipped.
        detail: Human-readable explanation (error message, etc.).
        entry: The parsed entry, when the segment was well-formed.
        duplicate_of: Index of the entry this one duplicates.
    """

    index: int
    raw: str
    reason: SkipReason
    detail: str | None = field(default=None)
    entry: PathEntry | None = field(default=None)
    duplicate_of: int | None = field(default=None)
