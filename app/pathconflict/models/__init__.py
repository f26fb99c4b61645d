"""Data models for pathconflict.

This module exports the core data structures used throughout the application.
"""

from pathconflict.models.conflict import Conflict, ConflictCategory, Severity
from pathconflict.models.executable import (
    ExecutableGroup,
    ExecutableInstance,
    ManagerInfo,
    ManagerKind,
    ProbeStatus,
    ResolutionState,
    VersionInfo,
    VersionProbe,
)
from pathconflict.models.options import AnalysisOptions, FatalConfigError
from pathconflict.models.path_entry import OriginTag, PathEntry, SkippedEntry, SkipReason
from pathconflict.models.result import AnalysisResult, Note, PlatformInfo, Summary

__all__ = [
    "AnalysisOptions",
    "AnalysisResult",
    "Conflict",
    "ConflictCategory",
    "ExecutableGroup",
    "ExecutableInstance",
    "FatalConfigError",
    "ManagerInfo",
    "ManagerKind",
    "Note",
    "OriginTag",
    "PathEntry",
    "PlatformInfo",
    "ProbeStatus",
    "ResolutionState",
    "Severity",
    "SkippedEntry",
    "SkipReason",
    "Summary",
    "VersionInfo",
    "VersionProbe",
]
