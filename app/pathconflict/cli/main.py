"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from typing import Annotated

import typer

from pathconflict import __version__
from pathconflict.cli.commands import check, config, scan

# Create main Typer app
app = typer.Typer(
    name="pathconflict",
    help="Find shadowed and conflicting executables in PATH.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pathconflict version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show skipped PATH entries and notes.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress output; conflicts do not change the exit code.",
        ),
    ] = False,
) -> None:
    """pathconflict - find shadowed and conflicting executables in PATH.

    Detects duplicate binaries, version-manager and package-manager
    clashes and WSL/Windows mixing, and scores each conflict.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(scan.app, name="scan")
app.command(name="check")(check.check)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
