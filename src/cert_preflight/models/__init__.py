"""Data models for cert-preflight.

All models are Pydantic BaseModel with frozen=True for immutability.
"""

from cert_preflight.models.check import (
    CheckLevel,
    CheckMetadata,
    HelpText,
    Outcome,
    Result,
    Results,
)
from cert_preflight.models.common import AuditError
from cert_preflight.models.image import ImageMetadata, ImageReference, ReadOnlyFilesystem
from cert_preflight.models.operator import (
    CatalogSourceData,
    OperatorData,
    OperatorGroupData,
    ReadinessOutcome,
    SubscriptionData,
)

__all__ = [
    # Check
    "CheckLevel",
    "CheckMetadata",
    "HelpText",
    "Outcome",
    "Result",
    "Results",
    # Common
    "AuditError",
    # Image
    "ImageMetadata",
    "ImageReference",
    "ReadOnlyFilesystem",
    # Operator
    "CatalogSourceData",
    "OperatorData",
    "OperatorGroupData",
    "ReadinessOutcome",
    "SubscriptionData",
]
