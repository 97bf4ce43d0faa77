"""cert-preflight: certification checks for container images and operator bundles.

An engine pulls an image, unpacks its filesystem into a private scratch
directory and runs a battery of checks against it:

- **Container checks**: any check registered with the check registry
- **Operator checks**: deploys a bundle through OLM on a live cluster and
  waits for its ClusterServiceVersion to succeed

Usage:
    from cert_preflight import Engine, DockerImageSource, GenericCheck

    check = GenericCheck("HasLicense", lambda ref: ref.filesystem.exists("licenses"))
    results = Engine(DockerImageSource(), [check]).execute("quay.io/example/app:1.0")
    print(results.passed_overall)

CLI:
    cert-preflight check container <image>
    cert-preflight check operator <bundle-image>
    cert-preflight list-checks
"""

__version__ = "0.1.0"

# Core classes
from cert_preflight.core.engine import Engine
from cert_preflight.core.runner import CheckRunner, ResultAggregator
from cert_preflight.core.extract import Extractor, ScratchDirectory
from cert_preflight.core.poll import ReadinessPoller, wait_until_ready
from cert_preflight.core.olm import DeployableByOlmCheck, OlmDeploymentOrchestrator

# Models (commonly used)
from cert_preflight.models.check import CheckLevel, CheckMetadata, HelpText, Result, Results
from cert_preflight.models.image import ImageMetadata, ImageReference
from cert_preflight.models.operator import OperatorData

# Checks
from cert_preflight.checks.base import Check, GenericCheck
from cert_preflight.checks.registry import CheckRegistry, get_default_registry

# Collaborators
from cert_preflight.sources.base import ImageSource
from cert_preflight.sources.docker import DockerImageSource
from cert_preflight.cluster.kubectl import KubectlClusterClient
from cert_preflight.cluster.memory import InMemoryClusterClient
from cert_preflight.artifacts.writer import FilesystemArtifactWriter, MemoryArtifactWriter

# Renderers
from cert_preflight.renderers.base import Renderer, RenderContext, OutputFormat

__all__ = [
    # Version
    "__version__",
    # Core
    "Engine",
    "CheckRunner",
    "ResultAggregator",
    "Extractor",
    "ScratchDirectory",
    "ReadinessPoller",
    "wait_until_ready",
    "DeployableByOlmCheck",
    "OlmDeploymentOrchestrator",
    # Models
    "CheckLevel",
    "CheckMetadata",
    "HelpText",
    "Result",
    "Results",
    "ImageMetadata",
    "ImageReference",
    "OperatorData",
    # Checks
    "Check",
    "GenericCheck",
    "CheckRegistry",
    "get_default_registry",
    # Collaborators
    "ImageSource",
    "DockerImageSource",
    "KubectlClusterClient",
    "InMemoryClusterClient",
    "FilesystemArtifactWriter",
    "MemoryArtifactWriter",
    # Renderers
    "Renderer",
    "RenderContext",
    "OutputFormat",
]
