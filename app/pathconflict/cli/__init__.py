"""CLI package for pathconflict.

This package contains the Typer application and all subcommands.
"""

from pathconflict.cli.main import app

__all__ = ["app"]
