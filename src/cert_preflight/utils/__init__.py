"""Utility functions for cert-preflight."""

from cert_preflight.utils.hashing import compute_hash, hash_file
from cert_preflight.utils.logging import configure_logging, get_logger, get_logger_with_context
from cert_preflight.utils.errors import (
    AcquisitionError,
    ConfigurationError,
    ExtractionError,
    OperatorMetadataError,
    PollTimeoutError,
    PreflightError,
    ProbeError,
    PullFailedError,
    TempDirCreateError,
    safe_get,
    validate_image_reference,
)
from cert_preflight.utils.config import (
    ArtifactsConfig,
    LoggingConfig,
    OperatorConfig,
    OutputConfig,
    PreflightConfig,
    load_config,
    save_config,
)

__all__ = [
    # Hashing
    "compute_hash",
    "hash_file",
    # Logging
    "configure_logging",
    "get_logger",
    "get_logger_with_context",
    # Errors
    "AcquisitionError",
    "ConfigurationError",
    "ExtractionError",
    "OperatorMetadataError",
    "PollTimeoutError",
    "PreflightError",
    "ProbeError",
    "PullFailedError",
    "TempDirCreateError",
    "safe_get",
    "validate_image_reference",
    # Config
    "ArtifactsConfig",
    "LoggingConfig",
    "OperatorConfig",
    "OutputConfig",
    "PreflightConfig",
    "load_config",
    "save_config",
]
