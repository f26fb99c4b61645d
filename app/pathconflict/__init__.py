"""pathconflict - conflict detection for the executable search path."""

__version__ = "0.1.0"

from pathconflict.core.analyzer import analyze, check_binary  # noqa: E402
from pathconflict.core.context import AnalysisContext, build_context  # noqa: E402
from pathconflict.models.options import AnalysisOptions, FatalConfigError  # noqa: E402
from pathconflict.models.result import AnalysisResult  # noqa: E402

__all__ = [
    "AnalysisContext",
    "AnalysisOptions",
    "AnalysisResult",
    "FatalConfigError",
    "__version__",
    "analyze",
    "build_context",
    "check_binary",
]
