"""PATH parsing and executable discovery."""

from pathconflict.scanners.executables import ExecutableScanner, ScanOutcome
from pathconflict.scanners.path_parser import ParsedPath, PathParser

__all__ = ["ExecutableScanner", "ParsedPath", "PathParser", "ScanOutcome"]
