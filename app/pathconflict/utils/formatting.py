"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import sys

from rich.console import Console

from pathconflict.core.theme import get_theme
from pathconflict.models.conflict import Severity
from pathconflict.models.executable import ExecutableInstance


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def format_severity(severity: Severity) -> str:
    """Format a severity label with its color markup."""
    return f"[severity.{severity.value}]{severity.value.upper()}[/]"


def format_version(instance: ExecutableInstance) -> str:
    """Format an instance's version, marking path-inferred ones."""
    version = instance.version
    if version is None:
        if instance.probe is not None and instance.probe.status.is_soft_failure:
            return f"[warning]{instance.probe.status.value}[/]"
        return "[muted]-[/]"
    suffix = " [muted](path)[/]" if version.method == "path" else ""
    return f"{version}{suffix}"


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
