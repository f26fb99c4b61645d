"""Platform capability profile.

A PlatformProfile bundles every platform-dependent decision the engine
makes: how PATH is split, how directories are normalized and compared,
which files count as executables and which origin a directory belongs to.
Exactly one profile is selected at startup and passed around explicitly.
"""

import ntpath
import os
import posixpath
import re
import stat
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import ModuleType

from pathconflict.models.path_entry import OriginTag


class PlatformKind(str, Enum):
    """Operating system family a profile describes."""

    LINUX = "linux"
    MACOS = "macos"
    WINDOWS = "windows"
    WSL = "wsl"


WINDOWS_EXECUTABLE_EXTENSIONS: tuple[str, ...] = (".com", ".exe", ".bat", ".cmd", ".ps1")

UNIX_SYSTEM_DIRECTORIES: tuple[str, ...] = (
    "/usr/bin",
    "/usr/sbin",
    "/usr/local/bin",
    "/bin",
    "/sbin",
)

MACOS_SYSTEM_DIRECTORIES: tuple[str, ...] = (
    *UNIX_SYSTEM_DIRECTORIES,
    "/System",
    "/Library/Apple",
)

WINDOWS_SYSTEM_DIRECTORIES: tuple[str, ...] = (
    "C:\\Windows",
    "C:\\Program Files",
    "C:\\Program Files (x86)",
    "C:\\ProgramData",
)

HOMEBREW_PREFIXES: tuple[str, ...] = (
    "/opt/homebrew",
    "/usr/local/Cellar",
    "/usr/local/Homebrew",
    "/home/linuxbrew/.linuxbrew",
)

# Windows directories whose contents belong to the OS or to machine-wide installs
_WINDOWS_SYSTEM_RE = re.compile(
    r"^[a-z]:\\(windows|program files|program files \(x86\)|programdata)(\\|$)"
)
_WINDOWS_ABSOLUTE_RE = re.compile(r"^([A-Za-z]:[\\/]|\\\\)")
_POSIX_VAR_RE = re.compile(
    r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))"
)
_WINDOWS_VAR_RE = re.compile(r"%(?P<name>[^%]+)%")


@dataclass(frozen=True, slots=True)
class PlatformProfile:
    """Capability set of one platform.

    Attributes:
        kind: Platform family.
        list_separator: Character separating PATH segments.
        case_insensitive: Whether file names compare case-insensitively.
        executable_extensions: Extensions that make a file executable on
            Windows (and on Windows mounts inside WSL).
        system_directories: Directories treated as OS-owned.
        homebrew_prefixes: Directory prefixes owned by Homebrew.
        wsl_mount_root: Directory under which WSL mounts Windows drives.
        wsl_version: "WSL1" or "WSL2" when running inside WSL.
        wsl_distro: WSL distribution name, if known.
    """

    kind: PlatformKind
    list_separator: str
    case_insensitive: bool
    executable_extensions: tuple[str, ...] = field(default=())
    system_directories: tuple[str, ...] = field(default=())
    homebrew_prefixes: tuple[str, ...] = field(default=HOMEBREW_PREFIXES)
    wsl_mount_root: str = field(default="/mnt")
    wsl_version: str | None = field(default=None)
    wsl_distro: str | None = field(default=None)

    @classmethod
    def for_kind(
        cls,
        kind: PlatformKind,
        *,
        executable_extensions: tuple[str, ...] | None = None,
        wsl_version: str | None = None,
        wsl_distro: str | None = None,
        wsl_mount_root: str = "/mnt",
    ) -> "PlatformProfile":
        """Build the standard profile for a platform family.

        Args:
            kind: Platform family.
            executable_extensions: Override for the Windows extension list
                (e.g. parsed from PATHEXT).
            wsl_version: WSL version label, for WSL profiles.
            wsl_distro: WSL distribution name, for WSL profiles.
            wsl_mount_root: Windows drive mount root, for WSL profiles.

        Returns:
            Profile for the given platform.
        """
        extensions = tuple(
            e.lower() for e in (executable_extensions or WINDOWS_EXECUTABLE_EXTENSIONS)
        )
        if kind == PlatformKind.WINDOWS:
            return cls(
                kind=kind,
                list_separator=";",
                case_insensitive=True,
                executable_extensions=extensions,
                system_directories=WINDOWS_SYSTEM_DIRECTORIES,
                homebrew_prefixes=(),
            )
        if kind == PlatformKind.WSL:
            mount_root = wsl_mount_root.rstrip("/") or "/mnt"
            return cls(
                kind=kind,
                list_separator=":",
                case_insensitive=False,
                executable_extensions=extensions,
                system_directories=(*UNIX_SYSTEM_DIRECTORIES, f"{mount_root}/c/Windows"),
                wsl_mount_root=mount_root,
                wsl_version=wsl_version,
                wsl_distro=wsl_distro,
            )
        if kind == PlatformKind.MACOS:
            # Default APFS volumes are case-insensitive
            return cls(
                kind=kind,
                list_separator=":",
                case_insensitive=True,
                system_directories=MACOS_SYSTEM_DIRECTORIES,
            )
        return cls(
            kind=PlatformKind.LINUX,
            list_separator=":",
            case_insensitive=False,
            system_directories=UNIX_SYSTEM_DIRECTORIES,
        )

    @property
    def is_windows(self) -> bool:
        """Check if this is a native Windows profile."""
        return self.kind == PlatformKind.WINDOWS

    @property
    def is_wsl(self) -> bool:
        """Check if this is a WSL profile."""
        return self.kind == PlatformKind.WSL

    @property
    def pathmod(self) -> ModuleType:
        """Return the path module matching this platform's path syntax."""
        return ntpath if self.is_windows else posixpath

    # -- PATH segments ---------------------------------------------------------

    def expand_vars(self, segment: str, env: Mapping[str, str]) -> str:
        """Expand environment variable references in a PATH segment.

        POSIX profiles expand ``$VAR``, ``${VAR}`` and a leading ``~``;
        Windows profiles expand ``%VAR%`` with case-insensitive lookup.
        Unset variables are left as written.

        Args:
            segment: Raw PATH segment.
            env: Environment to look variables up in.

        Returns:
            Segment with known variables substituted.
        """
        if self.is_windows:
            folded = {k.upper(): v for k, v in env.items()}

            def _win(match: re.Match[str]) -> str:
                return folded.get(match.group("name").upper(), match.group(0))

            return _WINDOWS_VAR_RE.sub(_win, segment)

        if segment == "~" or segment.startswith("~/"):
            home = env.get("HOME")
            if home:
                segment = home + segment[1:]

        def _posix(match: re.Match[str]) -> str:
            name = match.group("braced") or match.group("bare")
            return env.get(name, match.group(0))

        return _POSIX_VAR_RE.sub(_posix, segment)

    def is_absolute(self, directory: str) -> bool:
        """Check if a directory is an absolute path on this platform."""
        if self.is_windows:
            return bool(_WINDOWS_ABSOLUTE_RE.match(directory))
        return directory.startswith("/")

    def normalize_directory(self, directory: str) -> str:
        """Normalize separators, redundant components and trailing separators.

        Casing is preserved for display; use ``directory_key`` to compare.
        """
        normalized = self.pathmod.normpath(directory)
        if not self.is_windows and normalized.startswith("//"):
            normalized = "/" + normalized.lstrip("/")
        return normalized

    def directory_key(self, directory: str) -> str:
        """Return the comparison key of a normalized directory."""
        return directory.casefold() if self.case_insensitive else directory

    # -- classification --------------------------------------------------------

    def is_system_directory(
        self, directory: str, extra: tuple[str, ...] | frozenset[str] = ()
    ) -> bool:
        """Check if a directory is, or lies under, an OS-owned directory.

        Args:
            directory: Normalized directory to test.
            extra: Additional system directories from configuration.

        Returns:
            True if the directory matches a system directory on component
            boundaries.
        """
        sep = "\\" if self.is_windows else "/"
        key = self.directory_key(directory)
        for candidate in (*self.system_directories, *extra):
            prefix = self.directory_key(self.normalize_directory(candidate))
            if key == prefix or key.startswith(prefix.rstrip(sep) + sep):
                return True
        return False

    def windows_drive(self, path: str) -> str | None:
        """Return the drive letter of a WSL Windows mount path, if any."""
        if not self.is_wsl:
            return None
        root = self.wsl_mount_root + "/"
        if not path.startswith(root):
            return None
        rest = path[len(root) :]
        if len(rest) >= 1 and rest[0].isalpha() and (len(rest) == 1 or rest[1] == "/"):
            return rest[0].upper()
        return None

    def to_windows_path(self, path: str) -> str | None:
        """Convert a WSL mount path like /mnt/c/Tools to C:\\Tools.

        Returns:
            The Windows form, or None if the path is not on a mounted drive.
        """
        drive = self.windows_drive(path)
        if drive is None:
            return None
        rest = path[len(self.wsl_mount_root) + 2 :].lstrip("/")
        return f"{drive}:\\" + rest.replace("/", "\\")

    def origin_tag(self, directory: str) -> OriginTag:
        """Classify a normalized directory by the convention it belongs to."""
        if self.is_wsl:
            windows_path = self.to_windows_path(directory)
            if windows_path is None:
                return OriginTag.WSL
            if windows_path.casefold()[3:].startswith("users\\"):
                return OriginTag.WINDOWS_USER
            return OriginTag.WINDOWS_SYSTEM

        if self.is_windows:
            if directory.startswith("\\\\"):
                return OriginTag.UNKNOWN
            if _WINDOWS_SYSTEM_RE.match(directory.casefold()):
                return OriginTag.WINDOWS_SYSTEM
            return OriginTag.WINDOWS_USER

        key = self.directory_key(directory)
        for prefix in self.homebrew_prefixes:
            prefix_key = self.directory_key(prefix)
            if key == prefix_key or key.startswith(prefix_key + "/"):
                return OriginTag.HOMEBREW
        return OriginTag.UNIX

    # -- executables -----------------------------------------------------------

    def _uses_extensions(self, directory: str) -> bool:
        return self.is_windows or self.windows_drive(directory) is not None

    def is_executable(self, path: str, st: os.stat_result) -> bool:
        """Check if a file counts as an executable.

        Native Windows and Windows mounts inside WSL use the extension
        whitelist; everything else needs a regular file with any execute bit.

        Args:
            path: Full path of the file.
            st: Result of stat() on the file (symlinks followed).

        Returns:
            True if the file is an executable.
        """
        if not stat.S_ISREG(st.st_mode):
            return False
        directory = self.pathmod.dirname(path)
        if self._uses_extensions(directory):
            _, ext = self.pathmod.splitext(path)
            return ext.lower() in self.executable_extensions
        return bool(st.st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))

    def binary_name(self, filename: str, directory: str) -> str:
        """Return the name an executable is invoked by.

        Whitelisted extensions are dropped where Windows lookup rules
        apply, so ``python.exe`` is invoked (and grouped) as ``python``.
        """
        if self._uses_extensions(directory):
            stem, ext = self.pathmod.splitext(filename)
            if stem and ext.lower() in self.executable_extensions:
                return stem
        return filename

    def lookup_name(self, name: str) -> str:
        """Return the group name a user-supplied binary name refers to.

        Wherever Windows executables can show up (native Windows and WSL),
        ``python.exe`` names the ``python`` group.
        """
        if self.is_windows or self.is_wsl:
            stem, ext = self.pathmod.splitext(name)
            if stem and ext.lower() in self.executable_extensions:
                return stem
        return name

    def group_key(self, binary_name: str) -> str:
        """Return the grouping key of a binary name."""
        return binary_name.casefold() if self.case_insensitive else binary_name
