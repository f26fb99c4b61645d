"""Config command implementation.

Shows and initializes the engine configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from pathconflict.cli.types import EXIT_FATAL
from pathconflict.core.config import (
    EngineConfig,
    EngineConfigError,
    config_to_dict,
    load_engine_config,
    save_engine_config,
)
from pathconflict.core.paths import ensure_config_dir, get_config_path
from pathconflict.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or create the configuration file.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(
    config_file: Annotated[
        Path | None,
        typer.Option("--file", help="Configuration file to read."),
    ] = None,
) -> None:
    """Show the effective configuration as TOML."""
    path = config_file or get_config_path()
    try:
        config = load_engine_config(path)
    except EngineConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e

    source = str(path) if path.exists() else "built-in defaults"
    console.print(f"[dim]# Source: {source}[/]")
    console.print(tomli_w.dumps(config_to_dict(config)), markup=False, highlight=False)


@app.command()
def init(
    config_file: Annotated[
        Path | None,
        typer.Option("--file", help="Configuration file to create."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a configuration file with the default settings."""
    if config_file is None:
        try:
            ensure_config_dir()
        except RuntimeError as e:
            print_error(str(e))
            raise typer.Exit(code=EXIT_FATAL) from e
    path = config_file or get_config_path()
    if path.exists() and not force:
        print_info(f"Configuration already exists: {path} (use --force to overwrite)")
        return

    try:
        saved = save_engine_config(EngineConfig(), path)
    except EngineConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_FATAL) from e
    print_success(f"Configuration written to {saved}")
