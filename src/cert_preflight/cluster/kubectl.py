"""Cluster resource client backed by the kubectl binary."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

from cert_preflight.cluster.base import (
    CATALOG_SOURCE,
    CLUSTER_SERVICE_VERSION,
    NAMESPACE,
    OPERATOR_GROUP,
    SUBSCRIPTION,
    ClusterError,
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
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)

# kind -> fully qualified kubectl resource name
RESOURCES = {
    NAMESPACE: "namespace",
    CATALOG_SOURCE: "catalogsources.operators.coreos.com",
    OPERATOR_GROUP: "operatorgroups.operators.coreos.com",
    SUBSCRIPTION: "subscriptions.operators.coreos.com",
    CLUSTER_SERVICE_VERSION: "clusterserviceversions.operators.coreos.com",
}


class KubectlClusterClient:
    """Talks to the cluster by running kubectl with JSON output.

    Example:
        client = KubectlClusterClient(kubeconfig=Path("~/.kube/config").expanduser())
        client.create_namespace("my-operator")
        sub = client.get_subscription("my-operator", "my-operator")
    """

    def __init__(
        self,
        kubeconfig: Path | str | None = None,
        context: str | None = None,
        kubectl: str = "kubectl",
        timeout: float | None = 60.0,
    ) -> None:
        self._kubeconfig = kubeconfig
        self._context = context
        self._kubectl = kubectl
        self._timeout = timeout

    def _command(self, args: list[str]) -> list[str]:
        cmd = [self._kubectl, *args]
        if self._kubeconfig:
            cmd.extend(["--kubeconfig", str(self._kubeconfig)])
        if self._context:
            cmd.extend(["--context", self._context])
        return cmd

    def _run(
        self,
        args: list[str],
        kind: str,
        name: str,
        namespace: str | None,
        stdin: str | None = None,
    ) -> str:
        cmd = self._command(args)
        logger.debug("running kubectl", extra={"extra_fields": {"args": " ".join(args)}})
        try:
            result = subprocess.run(
                cmd,
                input=stdin,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise ClusterError(
                f"{self._kubectl} not found. Please install kubectl.",
                code="MISSING_DEPENDENCY",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ClusterError(f"kubectl {args[0]} timed out after {self._timeout}s") from e

        if result.returncode != 0:
            stderr = result.stderr.strip()
            if "AlreadyExists" in stderr or "already exists" in stderr:
                raise ResourceAlreadyExistsError(kind, name, namespace)
            if "NotFound" in stderr or "not found" in stderr:
                raise ResourceNotFoundError(kind, name, namespace)
            raise ClusterError(
                f"kubectl {args[0]} {kind} {name} failed: {stderr}",
                details={"kind": kind, "name": name, "namespace": namespace},
            )
        return result.stdout

    def _create(self, manifest: dict[str, Any]) -> dict[str, Any]:
        metadata = manifest["metadata"]
        out = self._run(
            ["create", "-f", "-", "-o", "json"],
            manifest["kind"],
            metadata["name"],
            metadata.get("namespace"),
            stdin=json.dumps(manifest),
        )
        return self._decode(out)

    def _get(self, kind: str, name: str, namespace: str | None = None) -> dict[str, Any]:
        args = ["get", RESOURCES[kind], name, "-o", "json"]
        if namespace:
            args.extend(["--namespace", namespace])
        return self._decode(self._run(args, kind, name, namespace))

    def _delete(self, kind: str, name: str, namespace: str | None = None) -> None:
        args = ["delete", RESOURCES[kind], name]
        if namespace:
            args.extend(["--namespace", namespace])
        self._run(args, kind, name, namespace)

    @staticmethod
    def _decode(out: str) -> dict[str, Any]:
        try:
            return json.loads(out)
        except json.JSONDecodeError as e:
            raise ClusterError(f"kubectl returned invalid JSON: {e}") from e

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
