"""Shared types and utilities for CLI commands.

This module provides common enums and helper functions used across
multiple CLI command modules to avoid code duplication.
"""

from enum import Enum

import typer

from pathconflict.models.result import AnalysisResult

# Exit codes
EXIT_OK = 0
EXIT_CONFLICTS = 1
EXIT_FATAL = 2


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


def is_quiet(ctx: typer.Context, local_quiet: bool = False) -> bool:
    """Check if quiet mode was requested globally or on the command."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return local_quiet or bool(obj.get("quiet", False))


def is_verbose(ctx: typer.Context) -> bool:
    """Check if verbose mode was requested globally."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return bool(obj.get("verbose", False))


def exit_code_for(result: AnalysisResult, quiet: bool) -> int:
    """Return the process exit code for an analysis result.

    Args:
        result: Result of the analysis.
        quiet: Quiet mode never signals conflicts through the exit code.

    Returns:
        EXIT_CONFLICTS when conflicts were reported, EXIT_OK otherwise.
    """
    if result.has_conflicts and not quiet:
        return EXIT_CONFLICTS
    return EXIT_OK
