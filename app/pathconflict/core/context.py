"""Immutable analysis context.

The context is built once per run from the engine configuration and the
selected platform profile, then handed to every component explicitly.
It holds no mutable state and is shared between worker threads as is.
"""

import logging
from dataclasses import dataclass, field

from pathconflict.analyzers.managers import BUILTIN_SIGNATURES, ManagerSignature
from pathconflict.analyzers.severity import SeverityThresholds
from pathconflict.core.config import EngineConfig
from pathconflict.models.executable import ManagerKind
from pathconflict.platform.detect import detect_platform
from pathconflict.platform.profile import PlatformProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AnalysisContext:
    """Everything an analysis run needs besides its options.

    Attributes:
        profile: Selected platform profile.
        signatures: Manager signatures in priority order.
        system_directories: Extra system directories from configuration
            (the profile's own list always applies).
        thresholds: Severity scoring thresholds.
        version_timeout: Per-binary version probe timeout in seconds.
        version_flags: Version flags tried in order.
        max_output_bytes: Version output capture limit in bytes.
        max_output_lines: Version output capture limit in lines.
        max_symlink_depth: Symlink hop limit.
        max_workers: Worker pool size (None = CPU count).
        skip_system_enrichment: Skip probes and hashing in system directories.
        probe_single_instances: Probe binaries without a conflict too.
    """

    profile: PlatformProfile
    signatures: tuple[ManagerSignature, ...] = BUILTIN_SIGNATURES
    system_directories: frozenset[str] = field(default_factory=frozenset)
    thresholds: SeverityThresholds = field(default_factory=SeverityThresholds)
    version_timeout: float = 3.0
    version_flags: tuple[str, ...] = ("--version",)
    max_output_bytes: int = 4096
    max_output_lines: int = 5
    max_symlink_depth: int = 40
    max_workers: int | None = None
    skip_system_enrichment: bool = False
    probe_single_instances: bool = False

    def is_blacklisted(self, directory: str) -> bool:
        """Check if enrichment should skip executables in a directory.

        Only true when the scan policy asks to skip system directories.
        """
        if not self.skip_system_enrichment:
            return False
        return self.profile.is_system_directory(directory, tuple(self.system_directories))


def build_context(
    config: EngineConfig | None = None,
    profile: PlatformProfile | None = None,
) -> AnalysisContext:
    """Build the analysis context from configuration and platform.

    Args:
        config: Engine configuration. Defaults to EngineConfig().
        profile: Platform profile. Detected when None.

    Returns:
        Frozen AnalysisContext.

    Raises:
        ValueError: If a configured manager signature is invalid.
    """
    config = config or EngineConfig()
    profile = profile or detect_platform()

    extra = tuple(
        ManagerSignature(
            name=sig.name,
            kind=ManagerKind(sig.kind),
            description=sig.description,
            patterns=tuple(sig.patterns),
        )
        for sig in config.extra_manager_signatures
    )
    if extra:
        logger.debug("Using %d extra manager signatures", len(extra))

    return AnalysisContext(
        profile=profile,
        signatures=(*extra, *BUILTIN_SIGNATURES),
        system_directories=frozenset(config.extra_system_directories),
        thresholds=SeverityThresholds(
            major_gap=config.severity.major_gap,
            minor_gap=config.severity.minor_gap,
        ),
        version_timeout=config.version_timeout_seconds,
        version_flags=tuple(config.version_flags),
        max_output_bytes=config.max_output_bytes,
        max_output_lines=config.max_output_lines,
        max_symlink_depth=config.max_symlink_depth,
        max_workers=config.max_workers,
        skip_system_enrichment=config.skip_system_enrichment,
        probe_single_instances=config.probe_single_instances,
    )
