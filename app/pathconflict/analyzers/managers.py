"""Version manager and package manager attribution.

Executables are attributed to the tooling that installed them by matching
their paths against an ordered table of directory signatures. The first
matching signature wins; no match means a plain system install.
"""

import logging
import re
from dataclasses import dataclass, field, replace

from pathconflict.models.executable import ExecutableInstance, ManagerInfo, ManagerKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ManagerSignature:
    """Path signature identifying one manager.

    Attributes:
        name: Manager name reported in results.
        kind: Version manager or package manager.
        description: Short human-readable description.
        patterns: Regular expressions matched against "/"-separated paths.
    """

    name: str
    kind: ManagerKind
    description: str = ""
    patterns: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate signature data after initialization."""
        if not self.name:
            msg = "Manager signature name cannot be empty"
            raise ValueError(msg)
        if not self.patterns:
            msg = f"Manager signature '{self.name}' has no patterns"
            raise ValueError(msg)
        for pattern in self.patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                msg = f"Invalid pattern for manager '{self.name}': {pattern!r} ({e})"
                raise ValueError(msg) from e

    def to_info(self) -> ManagerInfo:
        """Return the ManagerInfo attached to matching executables."""
        return ManagerInfo(name=self.name, kind=self.kind, description=self.description)


_VM = ManagerKind.VERSION_MANAGER
_PM = ManagerKind.PACKAGE_MANAGER

BUILTIN_SIGNATURES: tuple[ManagerSignature, ...] = (
    # Version managers
    ManagerSignature(
        "nvm", _VM, "Node Version Manager", (r"/\.nvm/", r"/nvm/versions/", r"/nvm4w/")
    ),
    ManagerSignature(
        "fnm",
        _VM,
        "Fast Node Manager",
        (r"/\.fnm/", r"/fnm_multishells/", r"/fnm/node-versions/"),
    ),
    ManagerSignature("volta", _VM, "Volta JavaScript Tool Manager", (r"/\.volta/", r"/volta/bin")),
    ManagerSignature("nodenv", _VM, "Node Version Manager (nodenv)", (r"/\.nodenv/",)),
    ManagerSignature("pyenv", _VM, "Python Version Manager", (r"/\.pyenv/", r"/pyenv-win/")),
    ManagerSignature("rbenv", _VM, "Ruby Version Manager", (r"/\.rbenv/",)),
    ManagerSignature("rvm", _VM, "Ruby Version Manager (RVM)", (r"/\.rvm/", r"^/usr/local/rvm/")),
    ManagerSignature("chruby", _VM, "Ruby Version Switcher", (r"/\.rubies/", r"^/opt/rubies/")),
    ManagerSignature("goenv", _VM, "Go Version Manager", (r"/\.goenv/",)),
    ManagerSignature("jenv", _VM, "Java Environment Manager", (r"/\.jenv/",)),
    ManagerSignature("rustup", _VM, "Rust Toolchain Manager", (r"/\.cargo/bin", r"/\.rustup/")),
    ManagerSignature("asdf", _VM, "Multiple Runtime Version Manager", (r"/\.asdf/",)),
    ManagerSignature(
        "mise",
        _VM,
        "Polyglot Runtime Manager",
        (r"/mise/installs/", r"/mise/shims", r"/\.local/share/rtx/"),
    ),
    ManagerSignature("sdkman", _VM, "Software Development Kit Manager", (r"/\.sdkman/",)),
    # Package managers
    ManagerSignature(
        "Homebrew",
        _PM,
        "Package Manager for macOS and Linux",
        (r"^/opt/homebrew/", r"^/usr/local/Cellar/", r"/Homebrew/", r"/\.linuxbrew/"),
    ),
    ManagerSignature("MacPorts", _PM, "Package Manager for macOS", (r"^/opt/local/",)),
    ManagerSignature(
        "Nix",
        _PM,
        "Nix Package Manager",
        (r"^/nix/store/", r"/\.nix-profile/", r"^/run/current-system/"),
    ),
    ManagerSignature("Snap", _PM, "Snap Package Manager", (r"^/snap/",)),
    ManagerSignature("Flatpak", _PM, "Flatpak Package Manager", (r"/flatpak/exports/bin",)),
    ManagerSignature("pipx", _PM, "Python Application Installer", (r"/pipx/venvs/",)),
    ManagerSignature(
        "conda",
        _PM,
        "Conda Package Manager",
        (r"/(ana|mini)conda\d?/", r"/miniforge\d?/", r"/mambaforge/"),
    ),
    ManagerSignature("Chocolatey", _PM, "Package Manager for Windows", (r"/chocolatey/",)),
    ManagerSignature("Scoop", _PM, "Package Manager for Windows", (r"/scoop/",)),
    ManagerSignature("WinGet", _PM, "Windows Package Manager", (r"/Microsoft/WinGet/",)),
)


class ManagerDetector:
    """First-match attribution of paths to managers."""

    def __init__(
        self, signatures: tuple[ManagerSignature, ...], *, ignore_case: bool = False
    ) -> None:
        """Initialize the detector.

        Args:
            signatures: Signatures in priority order.
            ignore_case: Match case-insensitively (Windows profiles).
        """
        flags = re.IGNORECASE if ignore_case else 0
        self._compiled = tuple(
            (sig, tuple(re.compile(p, flags) for p in sig.patterns)) for sig in signatures
        )

    def detect(self, path: str) -> ManagerInfo | None:
        """Attribute a path to a manager.

        Args:
            path: Executable path (either separator style).

        Returns:
            ManagerInfo of the first matching signature, or None.
        """
        normalized = path.replace("\\", "/")
        for sig, patterns in self._compiled:
            if any(p.search(normalized) for p in patterns):
                logger.debug("Matched %s to %s", path, sig.name)
                return sig.to_info()
        return None

    def detect_instance(self, instance: ExecutableInstance) -> ExecutableInstance:
        """Return a copy of the instance with its manager filled in.

        The resolved target is tried first so symlinked installs (for
        example /usr/local/bin/node into a Cellar) are attributed to the
        manager that owns the file.
        """
        manager = None
        if instance.resolved_path:
            manager = self.detect(instance.resolved_path)
        if manager is None:
            manager = self.detect(instance.raw_path)
        return replace(instance, manager=manager)
