"""Engine configuration and settings.

This module provides the configuration model and I/O functions for the
conflict detection engine: per-run limits, version probing, the scan
policy for system directories, extra manager signatures and the severity
thresholds.

Configuration is stored in ~/.config/pathconflict/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pathconflict.core.paths import get_config_path

logger = logging.getLogger(__name__)


class ManagerSignatureConfig(BaseModel):
    """User-defined manager signature.

    Attributes:
        name: Manager name reported in results.
        kind: "version_manager" or "package_manager".
        description: Optional description.
        patterns: Regular expressions matched against "/"-separated paths.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(min_length=1, description="Manager name")]
    kind: Annotated[
        Literal["version_manager", "package_manager"],
        Field(description="Kind of manager"),
    ]
    description: Annotated[str, Field(description="Short description")] = ""
    patterns: Annotated[list[str], Field(min_length=1, description="Path regexes")]


class SeverityConfig(BaseModel):
    """Version-distance cutoffs used by severity scoring."""

    model_config = ConfigDict(extra="forbid")

    major_gap: Annotated[
        int,
        Field(ge=1, le=100, description="Major difference counted as a major gap"),
    ] = 1
    minor_gap: Annotated[
        int,
        Field(ge=1, le=100, description="Minor difference counted as a minor gap"),
    ] = 1


class EngineConfig(BaseModel):
    """Configuration for the conflict detection engine.

    Attributes:
        version_timeout_seconds: Per-binary version probe timeout.
        max_workers: Worker pool size (None = number of CPUs).
        max_symlink_depth: Maximum symlink hops before giving up.
        max_output_bytes: Version output capture limit in bytes.
        max_output_lines: Version output capture limit in lines.
        version_flags: Flags tried in order when probing versions.
        probe_single_instances: Also probe binaries without a conflict.
        skip_system_enrichment: Do not probe or hash executables in
            system directories.
        extra_system_directories: Directories added to the system list.
        extra_manager_signatures: Signatures checked before the built-in ones.
        severity: Severity scoring thresholds.
    """

    model_config = ConfigDict(extra="forbid")

    version_timeout_seconds: Annotated[
        float,
        Field(ge=0.1, le=60.0, description="Version probe timeout in seconds (0.1-60)"),
    ] = 3.0
    max_workers: Annotated[
        int | None,
        Field(ge=1, le=64, description="Worker pool size (None = CPU count)"),
    ] = None
    max_symlink_depth: Annotated[
        int,
        Field(ge=1, le=255, description="Maximum symlink hops"),
    ] = 40
    max_output_bytes: Annotated[
        int,
        Field(ge=64, le=1_048_576, description="Captured output limit in bytes"),
    ] = 4096
    max_output_lines: Annotated[
        int,
        Field(ge=1, le=100, description="Captured output limit in lines"),
    ] = 5
    version_flags: Annotated[
        list[str],
        Field(
            default_factory=lambda: ["--version"],
            min_length=1,
            description="Version flags tried in order",
        ),
    ]
    probe_single_instances: Annotated[
        bool,
        Field(description="Probe versions of binaries without a conflict"),
    ] = False
    skip_system_enrichment: Annotated[
        bool,
        Field(description="Skip version probes and hashing in system directories"),
    ] = False
    extra_system_directories: Annotated[
        list[str],
        Field(default_factory=list, description="Additional system directories"),
    ]
    extra_manager_signatures: Annotated[
        list[ManagerSignatureConfig],
        Field(
            default_factory=list,
            description="Manager signatures checked before the built-in table",
        ),
    ]
    severity: SeverityConfig = Field(default_factory=SeverityConfig)

    @field_validator("version_flags")
    @classmethod
    def validate_flags(cls, v: list[str]) -> list[str]:
        """Reject blank version flags."""
        if any(not flag.strip() for flag in v):
            msg = "version_flags must not contain empty flags"
            raise ValueError(msg)
        return v


class EngineConfigError(Exception):
    """Base exception for engine configuration errors."""


class EngineConfigParseError(EngineConfigError):
    """Raised when the config file cannot be parsed."""


def load_engine_config(path: Path | None = None) -> EngineConfig:
    """Load engine configuration from a TOML file.

    A missing file is not an error: defaults are returned.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated EngineConfig object.

    Raises:
        EngineConfigParseError: If the TOML syntax is invalid.
        EngineConfigError: If the file cannot be read or doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config file at %s, using defaults", config_path)
        return EngineConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML syntax in {config_path}: {e}"
        raise EngineConfigParseError(msg) from e
    except OSError as e:
        msg = f"Failed to read config {config_path}: {e}"
        raise EngineConfigError(msg) from e

    try:
        return EngineConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        msg = f"Invalid config content in {config_path}: {e}"
        raise EngineConfigError(msg) from e


def save_engine_config(config: EngineConfig, path: Path | None = None) -> Path:
    """Save engine configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The EngineConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        EngineConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        msg = f"Failed to write config {config_path}: {e}"
        raise EngineConfigError(msg) from e

    return config_path


def config_to_dict(config: EngineConfig) -> dict[str, Any]:
    """Convert EngineConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are omitted.

    Args:
        config: The EngineConfig to convert.

    Returns:
        Dictionary ready for TOML serialization.
    """
    return config.model_dump(exclude_none=True)
