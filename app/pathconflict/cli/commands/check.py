"""Check command implementation.

Shows every instance of a single binary on the search path.
"""

import json
from typing import Annotated

import typer

from pathconflict.cli.commands.scan import cancel_on_interrupt
from pathconflict.cli.display import create_instances_table, print_conflict_details
from pathconflict.cli.types import EXIT_FATAL, OutputFormat, exit_code_for, is_quiet
from pathconflict.core.analyzer import analyze
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.utils.formatting import console, print_error, print_info


def check(
    ctx: typer.Context,
    binary: Annotated[str, typer.Argument(help="Binary name to look up.")],
    custom_path: Annotated[
        str | None,
        typer.Option("--path", "-p", help="Search this PATH string instead of $PATH."),
    ] = None,
    no_versions: Annotated[
        bool,
        typer.Option("--no-versions", help="Do not run the binary to detect versions."),
    ] = False,
    hashes: Annotated[
        bool,
        typer.Option("--hashes", help="Compute SHA-256 hashes."),
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
) -> None:
    """Show every instance of BINARY in PATH precedence order.

    Examples:
        pathconflict check python
        pathconflict check node --format json
    """
    options = AnalysisOptions(
        binary_filter=binary,
        extract_versions=not no_versions,
        include_hashes=hashes,
        custom_path=custom_path,
        recommendations=True,
    )
    try:
        with cancel_on_interrupt() as cancel:
            result = analyze(options, cancel=cancel)
    except FatalConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e

    exit_code = exit_code_for(result, is_quiet(ctx))

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
        raise typer.Exit(code=exit_code)

    if not result.groups:
        print_info(f"{binary} was not found in PATH.")
        raise typer.Exit(code=exit_code)

    for group in result.groups:
        console.print(create_instances_table(group))
    for conflict in result.conflicts:
        print_conflict_details(conflict, show_recommendation=True)
    raise typer.Exit(code=exit_code)
