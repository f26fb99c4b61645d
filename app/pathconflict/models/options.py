"""Analysis options.

Options control which analyses run and how results are filtered. They are
validated up front; invalid combinations raise FatalConfigError before any
directory is touched.
"""

from dataclasses import dataclass, field

from pathconflict.models.conflict import ConflictCategory, Severity


class FatalConfigError(Exception):
    """Raised when an analysis cannot start because its inputs are invalid."""


@dataclass(frozen=True, slots=True)
class AnalysisOptions:
    """Options for a single analysis run.

    Attributes:
        binary_filter: Only analyze executables with this name.
        category_filter: Only report conflicts of this category.
        severity_filter: Only report conflicts at or above this severity.
        conflicts_only: Drop groups without a conflict from the result.
        extract_versions: Run binaries to detect their versions.
        resolve_symlinks: Follow symlink chains to their targets.
        include_hashes: Compute SHA-256 hashes of executables.
        custom_path: Analyze this PATH string instead of the environment's.
        recommendations: Attach advisory text to conflicts.
    """

    binary_filter: str | None = field(default=None)
    category_filter: ConflictCategory | None = field(default=None)
    severity_filter: Severity | None = field(default=None)
    conflicts_only: bool = field(default=False)
    extract_versions: bool = field(default=True)
    resolve_symlinks: bool = field(default=True)
    include_hashes: bool = field(default=False)
    custom_path: str | None = field(default=None)
    recommendations: bool = field(default=False)

    def validate(self) -> None:
        """Check the options for values no analysis could satisfy.

        Raises:
            FatalConfigError: If the custom path is malformed, the binary
                filter is not a bare name, or a filter is not a known value.
        """
        if self.custom_path is not None:
            if not self.custom_path.strip():
                msg = "Custom PATH is empty"
                raise FatalConfigError(msg)
            if "\x00" in self.custom_path:
                msg = "Custom PATH contains a NUL character"
                raise FatalConfigError(msg)

        if self.binary_filter is not None:
            name = self.binary_filter.strip()
            if not name:
                msg = "Binary filter is empty"
                raise FatalConfigError(msg)
            if "/" in name or "\\" in name:
                msg = f"Binary filter must be a bare name, got '{self.binary_filter}'"
                raise FatalConfigError(msg)

        if self.category_filter is not None and not isinstance(
            self.category_filter, ConflictCategory
        ):
            try:
                ConflictCategory(self.category_filter)
            except ValueError as e:
                msg = f"Unknown conflict category: {self.category_filter!r}"
                raise FatalConfigError(msg) from e

        if self.severity_filter is not None and not isinstance(self.severity_filter, Severity):
            try:
                Severity(self.severity_filter)
            except ValueError as e:
                msg = f"Unknown severity: {self.severity_filter!r}"
                raise FatalConfigError(msg) from e

    @property
    def category(self) -> ConflictCategory | None:
        """Return the category filter as an enum member."""
        if self.category_filter is None:
            return None
        return ConflictCategory(self.category_filter)

    @property
    def min_severity(self) -> Severity | None:
        """Return the severity filter as an enum member."""
        if self.severity_filter is None:
            return None
        return Severity(self.severity_filter)
