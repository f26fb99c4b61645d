"""Utility modules for pathconflict.

Console helpers live in pathconflict.utils.formatting and are imported
from there, so library use never loads the CLI theme.
"""

from pathconflict.utils.shell import SpawnOutcome, SpawnStatus, spawn

__all__ = ["SpawnOutcome", "SpawnStatus", "spawn"]
