"""Deploy an operator bundle through OLM and wait for it to come up.

The deployment creates a namespace, a catalog source serving the index
image, an operator group and a subscription, then waits for the
subscription to report its installed CSV and for that CSV to reach the
Succeeded phase. Whatever happens, the created objects are dumped to the
artifact writer and deleted again.
"""

from __future__ import annotations

import json
from typing import Any, Callable

from cert_preflight.artifacts.writer import ArtifactWriter
from cert_preflight.cluster.base import (
    CATALOG_SOURCE,
    NAMESPACE,
    OPERATOR_GROUP,
    SUBSCRIPTION,
    ClusterError,
    ClusterResourceClient,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from cert_preflight.core.bundle import DEFAULT_CHANNEL_KEY, PACKAGE_KEY, load_annotations
from cert_preflight.core.poll import DEFAULT_INTERVAL, ReadinessPoller
from cert_preflight.models.check import CheckLevel, CheckMetadata, HelpText
from cert_preflight.models.image import ImageReference
from cert_preflight.models.operator import (
    CatalogSourceData,
    OperatorData,
    OperatorGroupData,
    SubscriptionData,
)
from cert_preflight.utils.config import OperatorConfig
from cert_preflight.utils.errors import OperatorMetadataError, safe_get
from cert_preflight.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)

DEFAULT_SUBSCRIPTION_TIMEOUT = 180.0
DEFAULT_CSV_TIMEOUT = 180.0
CSV_PHASE_SUCCEEDED = "Succeeded"


class OlmDeploymentOrchestrator:
    """Runs the OLM deployment steps against a cluster client.

    Each step can be called on its own; ``deploy`` runs them all and always
    finishes with capture and teardown.

    Example:
        orchestrator = OlmDeploymentOrchestrator(KubectlClusterClient(), FilesystemArtifactWriter("artifacts"))
        orchestrator.deploy(operator_data)
    """

    def __init__(
        self,
        client: ClusterResourceClient,
        artifacts: ArtifactWriter | None = None,
        subscription_timeout: float = DEFAULT_SUBSCRIPTION_TIMEOUT,
        csv_timeout: float = DEFAULT_CSV_TIMEOUT,
        poll_interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self._client = client
        self._artifacts = artifacts
        self.subscription_timeout = subscription_timeout
        self.csv_timeout = csv_timeout
        self.poll_interval = poll_interval

    def provision(self, data: OperatorData) -> None:
        """Create the namespace, catalog source, operator group and subscription.

        Objects that already exist are left as they are.

        Raises:
            ClusterError: If any object cannot be created
        """
        log = get_logger_with_context(__name__, app=data.app, namespace=data.install_namespace)
        steps: list[tuple[str, Callable[[], Any]]] = [
            (NAMESPACE, lambda: self._client.create_namespace(data.install_namespace)),
            (
                CATALOG_SOURCE,
                lambda: self._client.create_catalog_source(
                    CatalogSourceData(name=data.app, image=data.catalog_image),
                    data.install_namespace,
                ),
            ),
            (
                OPERATOR_GROUP,
                lambda: self._client.create_operator_group(
                    OperatorGroupData(name=data.app, target_namespaces=[data.install_namespace]),
                    data.install_namespace,
                ),
            ),
            (
                SUBSCRIPTION,
                lambda: self._client.create_subscription(
                    SubscriptionData(
                        name=data.app,
                        channel=data.channel,
                        catalog_source=data.app,
                        catalog_source_namespace=data.install_namespace,
                        package=data.package_name,
                    ),
                    data.install_namespace,
                ),
            ),
        ]
        for kind, create in steps:
            try:
                create()
                log.debug(f"created {kind}")
            except ResourceAlreadyExistsError:
                log.debug(f"{kind} already exists, reusing it")

    def resolve_installed_csv(self, data: OperatorData) -> str:
        """Wait for the subscription to name its installed CSV.

        Raises:
            PollTimeoutError: If no CSV is installed within the subscription timeout
            ProbeError: If reading the subscription fails
        """

        def probe() -> tuple[str | None, bool]:
            try:
                subscription = self._client.get_subscription(data.app, data.install_namespace)
            except ResourceNotFoundError:
                return None, False
            installed = safe_get(subscription, "status", "installedCSV")
            return installed, bool(installed)

        poller = ReadinessPoller(self.subscription_timeout, self.poll_interval, name=f"subscription {data.app}")
        installed_csv = poller.wait(probe)
        logger.debug("subscription installed csv", extra={"extra_fields": {"csv": installed_csv}})
        return installed_csv

    def wait_for_csv(self, data: OperatorData, csv_name: str) -> dict[str, Any]:
        """Wait for a CSV in the install namespace to reach the Succeeded phase.

        Returns:
            The CSV object as last read

        Raises:
            PollTimeoutError: If the CSV does not succeed within the CSV timeout
            ProbeError: If reading the CSV fails
        """

        def probe() -> tuple[dict[str, Any] | None, bool]:
            try:
                csv = self._client.get_csv(csv_name, data.install_namespace)
            except ResourceNotFoundError:
                return None, False
            return csv, safe_get(csv, "status", "phase") == CSV_PHASE_SUCCEEDED

        poller = ReadinessPoller(self.csv_timeout, self.poll_interval, name=f"csv {csv_name}")
        csv = poller.wait(probe)
        logger.debug(
            "csv succeeded",
            extra={"extra_fields": {"csv": csv_name, "namespace": data.install_namespace}},
        )
        return csv

    def capture(self, data: OperatorData) -> list[str]:
        """Dump the created objects to the artifact writer.

        Objects that cannot be read or written are skipped.

        Returns:
            Locations of the written artifacts
        """
        if self._artifacts is None:
            return []

        readers: list[tuple[str, str, Callable[[], dict[str, Any]]]] = [
            (SUBSCRIPTION, data.app, lambda: self._client.get_subscription(data.app, data.install_namespace)),
            (CATALOG_SOURCE, data.app, lambda: self._client.get_catalog_source(data.app, data.install_namespace)),
            (OPERATOR_GROUP, data.app, lambda: self._client.get_operator_group(data.app, data.install_namespace)),
            (NAMESPACE, data.install_namespace, lambda: self._client.get_namespace(data.install_namespace)),
        ]
        written = []
        for kind, name, read in readers:
            try:
                obj = read()
            except ClusterError as e:
                logger.warning(f"unable to retrieve the {kind}", extra={"extra_fields": {"err": e}})
                continue
            try:
                written.append(
                    self._artifacts.write_file(
                        f"{name}-{kind}.json",
                        json.dumps(obj, indent=2, sort_keys=True).encode(),
                    )
                )
            except OSError as e:
                logger.error(f"could not write {kind} to storage", extra={"extra_fields": {"err": e}})
        return written

    def teardown(self, data: OperatorData) -> None:
        """Delete the subscription, catalog source, operator group and namespace.

        Errors are logged; teardown never raises for cluster failures.
        """
        deletions: list[tuple[str, Callable[[], None]]] = [
            (SUBSCRIPTION, lambda: self._client.delete_subscription(data.app, data.install_namespace)),
            (CATALOG_SOURCE, lambda: self._client.delete_catalog_source(data.app, data.install_namespace)),
            (OPERATOR_GROUP, lambda: self._client.delete_operator_group(data.app, data.install_namespace)),
            (NAMESPACE, lambda: self._client.delete_namespace(data.install_namespace)),
        ]
        for kind, delete in deletions:
            try:
                delete()
            except ResourceNotFoundError:
                logger.debug(f"{kind} already gone", extra={"extra_fields": {"app": data.app}})
            except ClusterError as e:
                logger.error(f"unable to delete the {kind}", extra={"extra_fields": {"err": e}})

    def deploy(self, data: OperatorData) -> bool:
        """Provision, wait for convergence, then capture and tear down.

        Returns:
            True once the installed CSV has succeeded

        Raises:
            ClusterError: If provisioning fails
            PollTimeoutError: If a wait times out
            ProbeError: If a readiness probe fails
        """
        try:
            self.provision(data)
            csv_name = self.resolve_installed_csv(data)
            self.wait_for_csv(data, csv_name)
            return True
        finally:
            self.capture(data)
            self.teardown(data)


class DeployableByOlmCheck:
    """Checks that an operator bundle installs through OLM.

    Example:
        check = DeployableByOlmCheck(
            KubectlClusterClient(),
            FilesystemArtifactWriter("artifacts"),
            index_image="quay.io/example/index:v1",
        )
        results = Engine(source, [check], is_bundle=True).execute("quay.io/example/bundle:v1")
    """

    def __init__(
        self,
        client: ClusterResourceClient,
        artifacts: ArtifactWriter | None = None,
        index_image: str | None = None,
        channel: str | None = None,
        subscription_timeout: float = DEFAULT_SUBSCRIPTION_TIMEOUT,
        csv_timeout: float = DEFAULT_CSV_TIMEOUT,
        poll_interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self._index_image = index_image
        self._channel = channel
        self._orchestrator = OlmDeploymentOrchestrator(
            client,
            artifacts,
            subscription_timeout=subscription_timeout,
            csv_timeout=csv_timeout,
            poll_interval=poll_interval,
        )

    @classmethod
    def from_config(
        cls,
        config: OperatorConfig,
        client: ClusterResourceClient,
        artifacts: ArtifactWriter | None = None,
    ) -> "DeployableByOlmCheck":
        """Build the check from the operator section of the configuration."""
        return cls(
            client,
            artifacts,
            index_image=config.index_image,
            channel=config.channel,
            subscription_timeout=config.subscription_timeout,
            csv_timeout=config.csv_timeout,
            poll_interval=config.poll_interval,
        )

    @property
    def name(self) -> str:
        return "DeployableByOLM"

    @property
    def metadata(self) -> CheckMetadata:
        return CheckMetadata(
            description="Checking if the operator could be deployed by OLM",
            level=CheckLevel.BEST,
            knowledge_base_url="https://sdk.operatorframework.io/docs/olm-integration/testing-deployment/",
            check_url="https://sdk.operatorframework.io/docs/olm-integration/testing-deployment/",
        )

    @property
    def help_text(self) -> HelpText:
        return HelpText(
            message="It is required that your operator could be deployed by OLM",
            suggestion=(
                "Follow the guidelines on the operator-sdk website to learn how to package your "
                "operator https://sdk.operatorframework.io/docs/olm-integration/cli-overview/"
            ),
        )

    @property
    def orchestrator(self) -> OlmDeploymentOrchestrator:
        return self._orchestrator

    def operator_data(self, image_ref: ImageReference) -> OperatorData:
        """Derive what is needed to deploy the bundle.

        The package name doubles as the resource name and install namespace.
        An explicit channel beats the bundle's default channel.

        Raises:
            OperatorMetadataError: If no index image is configured or the
                bundle lacks the required annotations
        """
        if not self._index_image:
            raise OperatorMetadataError(
                "no index image configured; set operator.index_image or PFLT_INDEXIMAGE",
                key="index_image",
            )

        annotations = load_annotations(image_ref.filesystem)
        package_name = annotations.require(PACKAGE_KEY)
        channel = self._channel or annotations.require(DEFAULT_CHANNEL_KEY)

        return OperatorData(
            catalog_image=self._index_image,
            channel=channel,
            package_name=package_name,
            app=package_name,
            install_namespace=package_name,
        )

    def validate(self, image_ref: ImageReference) -> bool:
        data = self.operator_data(image_ref)
        logger.debug(
            "operator metadata",
            extra={"extra_fields": {"package": data.package_name, "channel": data.channel}},
        )
        return self._orchestrator.deploy(data)
