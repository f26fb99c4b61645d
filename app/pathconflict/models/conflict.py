"""Conflict models.

This module defines the conflict record produced for every binary name
with more than one instance on the search path, along with its category
and severity enumerations.
"""

from dataclasses import dataclass, field
from enum import Enum

from pathconflict.models.executable import ExecutableInstance


class ConflictCategory(str, Enum):
    """Classification of a conflict, in evaluation order."""

    WSL_VS_WINDOWS = "wsl_vs_windows"
    MULTIPLE_VERSION_MANAGERS = "multiple_version_managers"
    VERSION_MANAGER_VS_SYSTEM = "version_manager_vs_system"
    PACKAGE_MANAGER_VS_SYSTEM = "package_manager_vs_system"
    DUPLICATE_VERSIONS = "duplicate_versions"
    SHADOWED_BINARY = "shadowed_binary"

    @property
    def label(self) -> str:
        """Return a human-readable label."""
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS: dict[ConflictCategory, str] = {
    ConflictCategory.WSL_VS_WINDOWS: "WSL vs Windows",
    ConflictCategory.MULTIPLE_VERSION_MANAGERS: "Multiple Version Managers",
    ConflictCategory.VERSION_MANAGER_VS_SYSTEM: "Version Manager vs System",
    ConflictCategory.PACKAGE_MANAGER_VS_SYSTEM: "Package Manager vs System",
    ConflictCategory.DUPLICATE_VERSIONS: "Duplicate Versions",
    ConflictCategory.SHADOWED_BINARY: "Shadowed Binary",
}


class Severity(str, Enum):
    """How much a conflict is likely to hurt, most severe first."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @property
    def rank(self) -> int:
        """Return a sortable rank (INFO=0 ... CRITICAL=4)."""
        return _SEVERITY_RANKS[self]

    def at_least(self, other: "Severity") -> bool:
        """Check if this severity is equal to or above ``other``."""
        return self.rank >= other.rank


_SEVERITY_RANKS: dict[Severity, int] = {
    Severity.INFO: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


@dataclass(frozen=True, slots=True)
class Conflict:
    """A binary name provided by more than one PATH directory.

    Attributes:
        binary_name: Conflicting binary name.
        category: First matching conflict category.
        severity: Scored severity.
        active: Instance that actually runs.
        shadowed: Instances hidden by the active one, in PATH order.
        recommendation: Advisory text, when recommendations were requested.
        description: One-line summary of the conflict.
        incomplete: True when the underlying group was only partially analyzed.
    """

    binary_name: str
    category: ConflictCategory
    severity: Severity
    active: ExecutableInstance
    shadowed: tuple[ExecutableInstance, ...]
    recommendation: str | None = field(default=None)
    description: str = field(default="")
    incomplete: bool = field(default=False)

    def __post_init__(self) -> None:
        """Validate conflict data after initialization."""
        if not self.shadowed:
            msg = f"Conflict for '{self.binary_name}' needs at least one shadowed instance"
            raise ValueError(msg)

    @property
    def instances(self) -> tuple[ExecutableInstance, ...]:
        """Return all instances, active first."""
        return (self.active, *self.shadowed)
