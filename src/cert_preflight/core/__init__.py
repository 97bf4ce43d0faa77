"""Core engine components."""

from cert_preflight.core.bundle import BundleAnnotations, bundle_hash, load_annotations, parse_annotations
from cert_preflight.core.engine import Engine
from cert_preflight.core.extract import Extractor, ScratchDirectory, untar
from cert_preflight.core.olm import DeployableByOlmCheck, OlmDeploymentOrchestrator
from cert_preflight.core.poll import ReadinessPoller, wait_until_ready
from cert_preflight.core.runner import CheckRunner, ResultAggregator

__all__ = [
    "BundleAnnotations",
    "CheckRunner",
    "DeployableByOlmCheck",
    "Engine",
    "Extractor",
    "OlmDeploymentOrchestrator",
    "ReadinessPoller",
    "ResultAggregator",
    "ScratchDirectory",
    "bundle_hash",
    "load_annotations",
    "parse_annotations",
    "untar",
    "wait_until_ready",
]
