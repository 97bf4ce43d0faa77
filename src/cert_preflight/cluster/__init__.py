"""Cluster access for operator deployment checks."""

from cert_preflight.cluster.base import (
    CATALOG_SOURCE,
    CLUSTER_SERVICE_VERSION,
    NAMESPACE,
    OPERATOR_GROUP,
    SUBSCRIPTION,
    ClusterError,
    ClusterResourceClient,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from cert_preflight.cluster.kubectl import KubectlClusterClient
from cert_preflight.cluster.memory import InMemoryClusterClient

__all__ = [
    "CATALOG_SOURCE",
    "CLUSTER_SERVICE_VERSION",
    "NAMESPACE",
    "OPERATOR_GROUP",
    "SUBSCRIPTION",
    "ClusterError",
    "ClusterResourceClient",
    "InMemoryClusterClient",
    "KubectlClusterClient",
    "ResourceAlreadyExistsError",
    "ResourceNotFoundError",
]
