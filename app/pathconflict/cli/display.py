"""Shared Rich display functions for analysis results.

Provides reusable table builders and printers for conflicts, executable
groups, skipped PATH entries and summaries.
"""

from rich.table import Table

from pathconflict.models.conflict import Conflict
from pathconflict.models.executable import ExecutableGroup, ExecutableInstance
from pathconflict.models.result import AnalysisResult
from pathconflict.utils.formatting import (
    console,
    format_severity,
    format_version,
    print_warning,
)


def _manager_label(instance: ExecutableInstance) -> str:
    if instance.manager is None:
        return "[muted]system[/]"
    return instance.manager.name


def create_conflicts_table(conflicts: tuple[Conflict, ...] | list[Conflict]) -> Table:
    """Create a Rich table listing conflicts, most severe first.

    Args:
        conflicts: Conflicts to display.

    Returns:
        Rich Table configured for conflict display.
    """
    table = Table(
        title="PATH Conflicts",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Severity", width=8)
    table.add_column("Binary", no_wrap=True)
    table.add_column("Category")
    table.add_column("Active", overflow="fold")
    table.add_column("Version")
    table.add_column("Shadowed", justify="right")

    for conflict in conflicts:
        name = conflict.binary_name
        if conflict.incomplete:
            name += " [warning]*[/]"
        table.add_row(
            format_severity(conflict.severity),
            name,
            conflict.category.label,
            f"[instance.active]{conflict.active.raw_path}[/]",
            format_version(conflict.active),
            str(len(conflict.shadowed)),
        )
    return table


def create_instances_table(group: ExecutableGroup) -> Table:
    """Create a Rich table listing every instance of one binary.

    The first row is the active instance; the rest are shadowed.

    Args:
        group: Group to display.

    Returns:
        Rich Table configured for instance display.
    """
    table = Table(
        title=f"Instances of {group.binary_name}",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", width=3)
    table.add_column("Path", overflow="fold")
    table.add_column("Resolved", overflow="fold")
    table.add_column("Origin")
    table.add_column("Manager")
    table.add_column("Version")

    for position, instance in enumerate(group.instances):
        style = "instance.active" if position == 0 else "instance.shadowed"
        if instance.is_unresolved:
            resolved = f"[warning]{instance.resolution_state.value}[/]"
        else:
            resolved = f"[muted]{instance.resolved_path or '-'}[/]"
        table.add_row(
            str(instance.entry_index),
            f"[{style}]{instance.raw_path}[/]",
            resolved,
            instance.origin_tag.value,
            _manager_label(instance),
            format_version(instance),
        )
    return table


def print_conflict_details(conflict: Conflict, show_recommendation: bool = False) -> None:
    """Print the description, shadowed paths and recommendation of a conflict."""
    console.print(
        f"\n{format_severity(conflict.severity)} [bold]{conflict.binary_name}[/] "
        f"[muted]({conflict.category.label})[/]"
    )
    console.print(f"  {conflict.description}")
    for instance in conflict.shadowed:
        console.print(
            f"  [instance.shadowed]shadowed:[/] {instance.raw_path} "
            f"[muted]({_manager_label(instance)}, {format_version(instance)})[/]"
        )
    if show_recommendation and conflict.recommendation:
        console.print(f"  [info]Recommendation:[/] {conflict.recommendation}")


def print_skipped_entries(result: AnalysisResult) -> None:
    """Print skipped PATH entries and informational notes."""
    if result.skipped_entries:
        console.print("\n[dim]Skipped PATH entries:[/]")
        for skipped in result.skipped_entries:
            detail = f" ({skipped.detail})" if skipped.detail else ""
            console.print(
                f"  [muted]{skipped.index}:[/] {skipped.raw or '<empty>'} "
                f"[warning]{skipped.reason.value}[/]{detail}"
            )
    for note in result.notes:
        console.print(f"  [severity.info]INFO[/] {note.message}")


def print_summary(result: AnalysisResult) -> None:
    """Print the summary line of an analysis."""
    summary = result.summary
    parts = [
        f"{summary.total_entries} PATH entries",
        f"{summary.total_executables} executables",
        f"{summary.unique_executables} unique",
        f"{summary.total_conflicts} conflicts",
    ]
    if summary.skipped:
        parts.append(f"{summary.skipped} skipped")
    if summary.soft_failures:
        parts.append(f"{summary.soft_failures} version probes failed")
    console.print(f"\n[dim]{', '.join(parts)}[/]")
    if result.cancelled:
        print_warning("Analysis was cancelled; results are partial.")
