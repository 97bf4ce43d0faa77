"""Cluster resource client protocol and errors."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from cert_preflight.models.operator import CatalogSourceData, OperatorGroupData, SubscriptionData
from cert_preflight.utils.errors import PreflightError

# Kinds handled by the cluster clients
NAMESPACE = "Namespace"
CATALOG_SOURCE = "CatalogSource"
OPERATOR_GROUP = "OperatorGroup"
SUBSCRIPTION = "Subscription"
CLUSTER_SERVICE_VERSION = "ClusterServiceVersion"


class ClusterError(PreflightError):
    """Base exception for cluster operations."""

    def __init__(self, message: str, code: str = "CLUSTER_ERROR", details: dict[str, Any] | None = None):
        super().__init__(message, code=code, details=details)


class ResourceNotFoundError(ClusterError):
    """The requested object does not exist."""

    def __init__(self, kind: str, name: str, namespace: str | None = None):
        location = f"{namespace}/{name}" if namespace else name
        super().__init__(
            f"{kind} {location} not found",
            code="NOT_FOUND",
            details={"kind": kind, "name": name, "namespace": namespace},
        )
        self.kind = kind
        self.name = name
        self.namespace = namespace


class ResourceAlreadyExistsError(ClusterError):
    """An object with the same name already exists."""

    def __init__(self, kind: str, name: str, namespace: str | None = None):
        location = f"{namespace}/{name}" if namespace else name
        super().__init__(
            f"{kind} {location} already exists",
            code="ALREADY_EXISTS",
            details={"kind": kind, "name": name, "namespace": namespace},
        )
        self.kind = kind
        self.name = name
        self.namespace = namespace


@runtime_checkable
class ClusterResourceClient(Protocol):
    """Protocol for creating, reading and deleting OLM resources.

    Objects are exchanged as plain dicts in their Kubernetes JSON form.
    ``get_*`` raises ResourceNotFoundError for a missing object, and
    ``create_*`` raises ResourceAlreadyExistsError when the name is taken.
    """

    def create_namespace(self, name: str) -> dict[str, Any]: ...

    def get_namespace(self, name: str) -> dict[str, Any]: ...

    def delete_namespace(self, name: str) -> None: ...

    def create_catalog_source(self, data: CatalogSourceData, namespace: str) -> dict[str, Any]: ...

    def get_catalog_source(self, name: str, namespace: str) -> dict[str, Any]: ...

    def delete_catalog_source(self, name: str, namespace: str) -> None: ...

    def create_operator_group(self, data: OperatorGroupData, namespace: str) -> dict[str, Any]: ...

    def get_operator_group(self, name: str, namespace: str) -> dict[str, Any]: ...

    def delete_operator_group(self, name: str, namespace: str) -> None: ...

    def create_subscription(self, data: SubscriptionData, namespace: str) -> dict[str, Any]: ...

    def get_subscription(self, name: str, namespace: str) -> dict[str, Any]: ...

    def delete_subscription(self, name: str, namespace: str) -> None: ...

    def get_csv(self, name: str, namespace: str) -> dict[str, Any]: ...
