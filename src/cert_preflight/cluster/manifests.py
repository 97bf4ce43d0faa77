"""Render OLM request data as Kubernetes manifests."""

from typing import Any

from cert_preflight.cluster.base import CATALOG_SOURCE, NAMESPACE, OPERATOR_GROUP, SUBSCRIPTION
from cert_preflight.models.operator import CatalogSourceData, OperatorGroupData, SubscriptionData

OPERATORS_V1ALPHA1 = "operators.coreos.com/v1alpha1"
OPERATORS_V1 = "operators.coreos.com/v1"


def namespace_manifest(name: str) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": NAMESPACE,
        "metadata": {"name": name},
    }


def catalog_source_manifest(data: CatalogSourceData, namespace: str) -> dict[str, Any]:
    return {
        "apiVersion": OPERATORS_V1ALPHA1,
        "kind": CATALOG_SOURCE,
        "metadata": {"name": data.name, "namespace": namespace},
        "spec": {
            "sourceType": "grpc",
            "image": data.image,
            "displayName": data.name,
        },
    }


def operator_group_manifest(data: OperatorGroupData, namespace: str) -> dict[str, Any]:
    return {
        "apiVersion": OPERATORS_V1,
        "kind": OPERATOR_GROUP,
        "metadata": {"name": data.name, "namespace": namespace},
        "spec": {"targetNamespaces": list(data.target_namespaces)},
    }


def subscription_manifest(data: SubscriptionData, namespace: str) -> dict[str, Any]:
    return {
        "apiVersion": OPERATORS_V1ALPHA1,
        "kind": SUBSCRIPTION,
        "metadata": {"name": data.name, "namespace": namespace},
        "spec": {
            "channel": data.channel,
            "installPlanApproval": "Automatic",
            "name": data.package,
            "source": data.catalog_source,
            "sourceNamespace": data.catalog_source_namespace,
        },
    }
