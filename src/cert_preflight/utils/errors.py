"""Error hierarchy for cert-preflight.

Errors fall in three groups:

- acquisition errors (pull, scratch directory, extraction) abort a run
- cluster and polling errors surface from the operator deployment check
  and are contained by the check runner
- configuration errors are raised while loading settings
"""

from __future__ import annotations

from typing import Any

from cert_preflight.models.common import AuditError


class PreflightError(Exception):
    """Base exception for cert-preflight."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_audit_error(self) -> AuditError:
        """Convert to AuditError model."""
        return AuditError(code=self.code, message=self.message, details=self.details)


class AcquisitionError(PreflightError):
    """An image could not be acquired. Fatal to the whole run."""


class PullFailedError(AcquisitionError):
    """The image could not be pulled."""

    def __init__(self, reference: str, reason: str):
        super().__init__(
            f"failed to pull remote container {reference}: {reason}",
            code="PULL_FAILED",
            details={"reference": reference},
        )


class TempDirCreateError(AcquisitionError):
    """The scratch directory could not be created."""

    def __init__(self, reason: str):
        super().__init__(
            f"failed to create temporary directory: {reason}",
            code="TEMPDIR_CREATE_FAILED",
        )


class ExtractionError(AcquisitionError):
    """The exported image filesystem could not be materialized."""

    def __init__(self, message: str, path: str | None = None):
        details = {"path": path} if path else {}
        super().__init__(message, code="EXTRACTION_FAILED", details=details)


class ConfigurationError(PreflightError):
    """Configuration error."""

    def __init__(self, message: str, config_key: str | None = None):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, code="CONFIG_ERROR", details=details)


class OperatorMetadataError(PreflightError):
    """Operator data could not be derived from a bundle."""

    def __init__(self, message: str, key: str | None = None):
        details = {"key": key} if key else {}
        super().__init__(message, code="OPERATOR_METADATA_ERROR", details=details)


class PollTimeoutError(PreflightError):
    """A readiness poll did not converge within its timeout."""

    def __init__(self, message: str = "Operation timed out", timeout: float | None = None):
        details = {"timeout": timeout} if timeout is not None else {}
        super().__init__(message, code="TIMEOUT_ERROR", details=details)


class ProbeError(PreflightError):
    """A readiness probe raised instead of reporting a status."""

    def __init__(self, message: str):
        super().__init__(message, code="PROBE_ERROR")


def validate_image_reference(reference: str) -> None:
    """Validate an image reference string.

    Args:
        reference: Image reference to validate

    Raises:
        ConfigurationError: If reference is invalid
    """
    if not reference:
        raise ConfigurationError("Image reference cannot be empty", config_key="image")

    if reference.startswith("-"):
        raise ConfigurationError("Image reference cannot start with '-'", config_key="image")

    invalid_chars = set("<>|\"'\\ ")
    for char in invalid_chars:
        if char in reference:
            raise ConfigurationError(
                f"Image reference contains invalid character: {char!r}",
                config_key="image",
            )


def safe_get(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Safely get a nested value from a dictionary.

    Args:
        data: Dictionary to get value from
        *keys: Keys to traverse
        default: Default value if key not found

    Returns:
        Value at the nested key path, or default
    """
    current = data
    for key in keys:
        if isinstance(current, dict):
            current = current.get(key)
            if current is None:
                return default
        else:
            return default
    return current
