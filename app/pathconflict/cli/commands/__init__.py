"""CLI commands for pathconflict.

This package contains all subcommand implementations.
"""

from pathconflict.cli.commands import check, config, scan

__all__ = ["check", "config", "scan"]
