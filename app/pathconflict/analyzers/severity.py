"""Severity scoring of conflicts.

Severity depends on the category and on the version distance between
the active instance and each shadowed instance it does not share a
resolved file with. The rules are evaluated top-down; the first match wins:

1. CRITICAL: a MAJOR version gap.
2. HIGH: WSL_VS_WINDOWS.
3. INFO: every instance resolves to one canonical target.
4. HIGH: a MINOR version gap.
5. MEDIUM: MULTIPLE_VERSION_MANAGERS.
6. MEDIUM: manager-vs-system with a PATCH gap.
7. LOW: different manager attributions, same version.
8. INFO: SHADOWED_BINARY with the same version and one attribution.
9. Per-category fallback (see FALLBACK_SEVERITY).

Because rules 1 and 2 come first, WSL_VS_WINDOWS never scores below
DUPLICATE_VERSIONS for the same version distance.
"""

import os
from dataclasses import dataclass
from enum import Enum

from pathconflict.models.conflict import ConflictCategory, Severity
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance, VersionInfo

# A major-number difference of at least this much is a MAJOR gap
DEFAULT_MAJOR_GAP = 1
# A minor-number difference of at least this much is a MINOR gap
DEFAULT_MINOR_GAP = 1


class VersionGap(str, Enum):
    """Distance between two versions, smallest first."""

    UNKNOWN = "unknown"
    NONE = "none"
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"

    @property
    def rank(self) -> int:
        """Return a sortable rank (UNKNOWN lowest)."""
        return _GAP_RANKS[self]


_GAP_RANKS: dict[VersionGap, int] = {
    VersionGap.UNKNOWN: -1,
    VersionGap.NONE: 0,
    VersionGap.PATCH: 1,
    VersionGap.MINOR: 2,
    VersionGap.MAJOR: 3,
}

FALLBACK_SEVERITY: dict[ConflictCategory, Severity] = {
    ConflictCategory.WSL_VS_WINDOWS: Severity.HIGH,
    ConflictCategory.MULTIPLE_VERSION_MANAGERS: Severity.MEDIUM,
    ConflictCategory.VERSION_MANAGER_VS_SYSTEM: Severity.MEDIUM,
    ConflictCategory.PACKAGE_MANAGER_VS_SYSTEM: Severity.LOW,
    ConflictCategory.DUPLICATE_VERSIONS: Severity.LOW,
    ConflictCategory.SHADOWED_BINARY: Severity.LOW,
}

_MANAGER_VS_SYSTEM = (
    ConflictCategory.VERSION_MANAGER_VS_SYSTEM,
    ConflictCategory.PACKAGE_MANAGER_VS_SYSTEM,
)


@dataclass(frozen=True, slots=True)
class SeverityThresholds:
    """Tunable cutoffs for version-distance scoring.

    Attributes:
        major_gap: Minimum major-number difference counted as MAJOR;
            smaller non-zero differences count as MINOR.
        minor_gap: Minimum minor-number difference counted as MINOR;
            smaller non-zero differences count as PATCH.
    """

    major_gap: int = DEFAULT_MAJOR_GAP
    minor_gap: int = DEFAULT_MINOR_GAP

    def __post_init__(self) -> None:
        """Validate thresholds after initialization."""
        if self.major_gap < 1 or self.minor_gap < 1:
            msg = f"Severity thresholds must be >= 1, got {self.major_gap}/{self.minor_gap}"
            raise ValueError(msg)


def version_distance(
    a: VersionInfo | None,
    b: VersionInfo | None,
    thresholds: SeverityThresholds | None = None,
) -> VersionGap:
    """Compute the gap between two versions.

    Missing minor and patch numbers count as 0. Two unparsed versions
    with the same raw text are treated as equal.

    Args:
        a: First version.
        b: Second version.
        thresholds: Cutoffs to apply. Defaults to SeverityThresholds().

    Returns:
        The version gap.
    """
    thresholds = thresholds or SeverityThresholds()
    if a is None or b is None:
        return VersionGap.UNKNOWN
    if not a.is_parsed or not b.is_parsed:
        if not a.is_parsed and not b.is_parsed and a.raw == b.raw:
            return VersionGap.NONE
        return VersionGap.UNKNOWN

    a_major, a_minor, a_patch = a.key  # type: ignore[misc]
    b_major, b_minor, b_patch = b.key  # type: ignore[misc]
    major_diff = abs(a_major - b_major)
    if major_diff >= thresholds.major_gap:
        return VersionGap.MAJOR
    if major_diff > 0:
        return VersionGap.MINOR
    minor_diff = abs(a_minor - b_minor)
    if minor_diff >= thresholds.minor_gap:
        return VersionGap.MINOR
    if minor_diff > 0 or a_patch != b_patch:
        return VersionGap.PATCH
    return VersionGap.NONE


def _target(instance: ExecutableInstance) -> str | None:
    if instance.resolved_path is None:
        return None
    return os.path.normcase(instance.resolved_path)


def _independent(a: ExecutableInstance, b: ExecutableInstance) -> bool:
    ta, tb = _target(a), _target(b)
    return ta is None or tb is None or ta != tb


def same_target(group: ExecutableGroup) -> bool:
    """Check if every instance resolves to one canonical file."""
    targets = {_target(i) for i in group.instances}
    return len(targets) == 1 and None not in targets


class SeverityScorer:
    """Scores conflicts from their category and version distance."""

    def __init__(self, thresholds: SeverityThresholds | None = None) -> None:
        self.thresholds = thresholds or SeverityThresholds()

    def group_gap(self, group: ExecutableGroup) -> VersionGap:
        """Return the largest version gap between the active instance and what it shadows.

        Only shadowed instances reachable independently of the active one
        count. Pairs with an unknown distance are ignored unless no pair
        has a known one.
        """
        active = group.active
        best: VersionGap | None = None
        for shadowed in group.shadowed:
            if not _independent(active, shadowed):
                continue
            gap = version_distance(active.version, shadowed.version, self.thresholds)
            if best is None or gap.rank > best.rank:
                best = gap
        return best or VersionGap.NONE

    def score(self, category: ConflictCategory, group: ExecutableGroup) -> Severity:
        """Score one classified group.

        Args:
            category: Category assigned by the classifier.
            group: Group the category was assigned to.

        Returns:
            Severity of the conflict.
        """
        gap = self.group_gap(group)
        attributions = {i.manager_name for i in group.instances}

        if gap == VersionGap.MAJOR:
            return Severity.CRITICAL
        if category == ConflictCategory.WSL_VS_WINDOWS:
            return Severity.HIGH
        if same_target(group):
            return Severity.INFO
        if gap == VersionGap.MINOR:
            return Severity.HIGH
        if category == ConflictCategory.MULTIPLE_VERSION_MANAGERS:
            return Severity.MEDIUM
        if category in _MANAGER_VS_SYSTEM and gap == VersionGap.PATCH:
            return Severity.MEDIUM
        if len(attributions) > 1 and gap == VersionGap.NONE:
            return Severity.LOW
        if category == ConflictCategory.SHADOWED_BINARY and gap == VersionGap.NONE:
            return Severity.INFO
        return FALLBACK_SEVERITY[category]
