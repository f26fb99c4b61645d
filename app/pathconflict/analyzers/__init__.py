"""Enrichment and classification of executables."""

from pathconflict.analyzers.classifier import ConflictClassifier
from pathconflict.analyzers.hashing import compute_hash
from pathconflict.analyzers.managers import BUILTIN_SIGNATURES, ManagerDetector, ManagerSignature
from pathconflict.analyzers.recommendations import RecommendationEngine
from pathconflict.analyzers.severity import SeverityScorer, SeverityThresholds, VersionGap
from pathconflict.analyzers.symlinks import MAX_SYMLINK_DEPTH, SymlinkResolver
from pathconflict.analyzers.versions import VersionExtractor, parse_version, version_from_path

__all__ = [
    "BUILTIN_SIGNATURES",
    "MAX_SYMLINK_DEPTH",
    "ConflictClassifier",
    "ManagerDetector",
    "ManagerSignature",
    "RecommendationEngine",
    "SeverityScorer",
    "SeverityThresholds",
    "SymlinkResolver",
    "VersionExtractor",
    "VersionGap",
    "compute_hash",
    "parse_version",
    "version_from_path",
]
