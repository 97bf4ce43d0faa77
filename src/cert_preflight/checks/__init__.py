"""Certification checks and the check registry."""

from cert_preflight.checks.base import Check, GenericCheck
from cert_preflight.checks.registry import CheckRegistry, get_default_registry

__all__ = [
    "Check",
    "CheckRegistry",
    "GenericCheck",
    "get_default_registry",
]
