"""Scan command implementation.

Analyzes the executable search path and reports conflicts.
"""

import json
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer

from pathconflict.cli.display import (
    create_conflicts_table,
    print_conflict_details,
    print_skipped_entries,
    print_summary,
)
from pathconflict.cli.types import EXIT_FATAL, OutputFormat, exit_code_for, is_quiet, is_verbose
from pathconflict.core.analyzer import analyze
from pathconflict.models.conflict import ConflictCategory, Severity
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.models.result import AnalysisResult
from pathconflict.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Scan PATH for conflicting executables.",
    invoke_without_command=True,
)


@contextmanager
def cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn Ctrl+C into a cancellation event for the duration of a scan.

    Outside the main thread no handler can be installed and the event is
    simply never set.
    """
    cancel = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel
        return

    previous = signal.signal(signal.SIGINT, lambda _sig, _frame: cancel.set())
    try:
        yield cancel
    finally:
        signal.signal(signal.SIGINT, previous)


def export_result(result: AnalysisResult, export_path: Path) -> None:
    """Write a result as JSON, exiting with an error on failure."""
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=EXIT_FATAL)
    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(result.to_dict(), indent=2))
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=EXIT_FATAL) from e


@app.callback(invoke_without_command=True)
def scan_path(
    ctx: typer.Context,
    binary: Annotated[
        str | None,
        typer.Option("--binary", "-b", help="Only analyze this binary."),
    ] = None,
    category: Annotated[
        ConflictCategory | None,
        typer.Option(
            "--category",
            "-c",
            help="Only report conflicts of this category.",
            case_sensitive=False,
        ),
    ] = None,
    severity: Annotated[
        Severity | None,
        typer.Option(
            "--severity",
            "-s",
            help="Only report conflicts at or above this severity.",
            case_sensitive=False,
        ),
    ] = None,
    conflicts_only: Annotated[
        bool,
        typer.Option("--conflicts-only", help="Only include binaries with conflicts."),
    ] = False,
    no_versions: Annotated[
        bool,
        typer.Option("--no-versions", help="Do not run binaries to detect versions."),
    ] = False,
    no_symlinks: Annotated[
        bool,
        typer.Option("--no-symlinks", help="Do not resolve symlinks."),
    ] = False,
    hashes: Annotated[
        bool,
        typer.Option("--hashes", help="Compute SHA-256 hashes of executables."),
    ] = False,
    custom_path: Annotated[
        str | None,
        typer.Option("--path", "-p", help="Analyze this PATH string instead of $PATH."),
    ] = None,
    recommendations: Annotated[
        bool,
        typer.Option("--recommendations", "-r", help="Show recommendations."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Export the full result to a JSON file."),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress output and always exit 0."),
    ] = False,
) -> None:
    """Scan PATH and report shadowed and conflicting executables.

    Exits with code 1 when conflicts are reported (unless --quiet) and
    with code 2 when the options are invalid.

    Examples:
        pathconflict scan                          # Full analysis, show table
        pathconflict scan --severity high          # Only high and critical
        pathconflict scan --binary python          # Only python
        pathconflict scan --path "/usr/bin:/bin"   # Analyze a custom PATH
        pathconflict scan --format json            # Output as JSON
        pathconflict scan --export result.json     # Export to JSON file
    """
    if ctx.invoked_subcommand is not None:
        return

    quiet = is_quiet(ctx, quiet)
    options = AnalysisOptions(
        binary_filter=binary,
        category_filter=category,
        severity_filter=severity,
        conflicts_only=conflicts_only,
        extract_versions=not no_versions,
        resolve_symlinks=not no_symlinks,
        include_hashes=hashes,
        custom_path=custom_path,
        recommendations=recommendations,
    )

    try:
        with cancel_on_interrupt() as cancel:
            result = analyze(options, cancel=cancel)
    except FatalConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e

    if export_path is not None:
        export_result(result, export_path)
        if not quiet and output_format == OutputFormat.TABLE:
            print_info(f"Analysis exported to {export_path}")

    exit_code = exit_code_for(result, quiet)
    if quiet:
        raise typer.Exit(code=exit_code)

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
        raise typer.Exit(code=exit_code)

    if not result.conflicts:
        print_success("No PATH conflicts found.")
    else:
        console.print(create_conflicts_table(result.conflicts))
        for conflict in result.conflicts:
            print_conflict_details(conflict, show_recommendation=recommendations)

    if is_verbose(ctx):
        print_skipped_entries(result)
    print_summary(result)
    raise typer.Exit(code=exit_code)
