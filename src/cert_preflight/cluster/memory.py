"""In-memory cluster resource client for tests and dry runs."""

from __future__ import annotations

import copy
import threading
from typing import Any

from cert_preflight.cluster.base import (
    CATALOG_SOURCE,
    CLUSTER_SERVICE_VERSION,
    NAMESPACE,
    OPERATOR_GROUP,
    SUBSCRIPTION,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from cert_preflight.cluster.manifests import (
    catalog_source_manifest,
    namespace_manifest,
    operator_group_manifest,
    subscription_manifest,
)
from cert_preflight.models.operator import CatalogSourceData, OperatorGroupData, SubscriptionData

_Key = tuple[str, str, str]


class InMemoryClusterClient:
    """Dict-backed cluster that follows the same error contract as a real one.

    Nothing reconciles here: statuses only change through the ``set_*``
    helpers. Every call is recorded in ``calls`` as ``(operation, kind, name)``.

    Example:
        cluster = InMemoryClusterClient()
        cluster.set_subscription_installed_csv("etcd", "etcd", "etcdoperator.v0.9.4")
        cluster.set_csv_phase("etcdoperator.v0.9.4", "etcd", "Succeeded")
    """

    def __init__(self) -> None:
        self._objects: dict[_Key, dict[str, Any]] = {}
        self._errors: dict[tuple[str, str], Exception] = {}
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str, str]] = []

    def inject_error(self, operation: str, kind: str, error: Exception) -> None:
        """Make every ``operation`` ("create", "get", "delete") on kind raise error."""
        with self._lock:
            self._errors[(operation, kind)] = error

    def set_status(self, kind: str, name: str, namespace: str, status: dict[str, Any]) -> None:
        """Merge status into an object, creating a bare object if missing."""
        key = (kind, namespace or "", name)
        with self._lock:
            obj = self._objects.setdefault(
                key,
                {"kind": kind, "metadata": {"name": name, "namespace": namespace}},
            )
            obj.setdefault("status", {}).update(status)

    def set_subscription_installed_csv(self, name: str, namespace: str, csv_name: str) -> None:
        self.set_status(SUBSCRIPTION, name, namespace, {"installedCSV": csv_name})

    def set_csv_phase(self, name: str, namespace: str, phase: str) -> None:
        self.set_status(CLUSTER_SERVICE_VERSION, name, namespace, {"phase": phase})

    def exists(self, kind: str, name: str, namespace: str | None = None) -> bool:
        with self._lock:
            return (kind, namespace or "", name) in self._objects

    @property
    def objects(self) -> list[tuple[str, str, str]]:
        """Keys of stored objects as (kind, namespace, name)."""
        with self._lock:
            return sorted(self._objects)

    def _record(self, operation: str, kind: str, name: str) -> None:
        self.calls.append((operation, kind, name))
        error = self._errors.get((operation, kind))
        if error is not None:
            raise error

    def _create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        kind = manifest["kind"]
        name = manifest["metadata"]["name"]
        namespace = manifest["metadata"].get("namespace")
        key = (kind, namespace or "", name)
        with self._lock:
            self._record("create", kind, name)
            if key in self._objects:
                raise ResourceAlreadyExistsError(kind, name, namespace)
            self._objects[key] = copy.deepcopy(manifest)
            return copy.deepcopy(manifest)

    def _get(self, kind: str, name: str, namespace: str | None = None) -> dict[str, Any]:
        key = (kind, namespace or "", name)
        with self._lock:
            self._record("get", kind, name)
            if key not in self._objects:
                raise ResourceNotFoundError(kind, name, namespace)
            return copy.deepcopy(self._objects[key])

    def _delete(self, kind: str, name: str, namespace: str | None = None) -> None:
        key = (kind, namespace or "", name)
        with self._lock:
            self._record("delete", kind, name)
            if key not in self._objects:
                raise ResourceNotFoundError(kind, name, namespace)
            del self._objects[key]
            if kind == NAMESPACE:
                # Namespace deletion removes everything inside it
                for other in [k for k in self._objects if k[1] == name]:
                    del self._objects[other]

    def create_namespace(self, name: str) -> dict[str, Any]:
        return self._create(namespace_manifest(name))

    def get_namespace(self, name: str) -> dict[str, Any]:
        return self._get(NAMESPACE, name)

    def delete_namespace(self, name: str) -> None:
        self._delete(NAMESPACE, name)

    def create_catalog_source(self, data: CatalogSourceData, namespace: str) -> dict[str, Any]:
        return self._create(catalog_source_manifest(data, namespace))

    def get_catalog_source(self, name: str, namespace: str) -> dict[str, Any]:
        return self._get(CATALOG_SOURCE, name, namespace)

    def delete_catalog_source(self, name: str, namespace: str) -> None:
        self._delete(CATALOG_SOURCE, name, namespace)

    def create_operator_group(self, data: OperatorGroupData, namespace: str) -> dict[str, Any]:
        return self._create(operator_group_manifest(data, namespace))

    def get_operator_group(self, name: str, namespace: str) -> dict[str, Any]:
        return self._get(OPERATOR_GROUP, name, namespace)

    def delete_operator_group(self, name: str, namespace: str) -> None:
        self._delete(OPERATOR_GROUP, name, namespace)

    def create_subscription(self, data: SubscriptionData, namespace: str) -> dict[str, Any]:
        return self._create(subscription_manifest(data, namespace))

    def get_subscription(self, name: str, namespace: str) -> dict[str, Any]:
        return self._get(SUBSCRIPTION, name, namespace)

    def delete_subscription(self, name: str, namespace: str) -> None:
        self._delete(SUBSCRIPTION, name, namespace)

    def get_csv(self, name: str, namespace: str) -> dict[str, Any]:
        return self._get(CLUSTER_SERVICE_VERSION, name, namespace)
