"""Shared test fixtures for cert-preflight tests."""

import io
import logging
import tarfile
from typing import Any, Callable

import pytest

from cert_preflight.checks.base import GenericCheck
from cert_preflight.cluster.memory import InMemoryClusterClient
from cert_preflight.models.check import CheckLevel, CheckMetadata, HelpText
from cert_preflight.models.image import ImageMetadata, ImageReference
from cert_preflight.models.operator import SubscriptionData
from cert_preflight.sources.base import ImageHandle, ImageNotFoundError

ANNOTATIONS_YAML = """\
annotations:
  operators.operatorframework.io.bundle.mediatype.v1: registry+v1
  operators.operatorframework.io.bundle.manifests.v1: manifests/
  operators.operatorframework.io.bundle.metadata.v1: metadata/
  operators.operatorframework.io.bundle.package.v1: etcd
  operators.operatorframework.io.bundle.channels.v1: alpha,stable
  operators.operatorframework.io.bundle.channel.default.v1: stable
"""


def build_tar(
    files: dict[str, bytes] | None = None,
    symlinks: dict[str, str] | None = None,
    hardlinks: dict[str, str] | None = None,
    dirs: list[str] | None = None,
    modes: dict[str, int] | None = None,
) -> bytes:
    """Build an uncompressed tar archive in memory, entries in the given order."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        for name in dirs or []:
            info = tarfile.TarInfo(name)
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, content in (files or {}).items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            info.mode = (modes or {}).get(name, 0o644)
            tar.addfile(info, io.BytesIO(content))
        for name, target in (symlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.SYMTYPE
            info.linkname = target
            tar.addfile(info)
        for name, target in (hardlinks or {}).items():
            info = tarfile.TarInfo(name)
            info.type = tarfile.LNKTYPE
            info.linkname = target
            tar.addfile(info)
    return buffer.getvalue()


class FakeImageSource:
    """Image source serving prebuilt tar archives."""

    def __init__(
        self,
        archives: dict[str, bytes],
        pull_error: Exception | None = None,
        export_error: Exception | None = None,
        labels: dict[str, str] | None = None,
    ) -> None:
        self.archives = archives
        self.pull_error = pull_error
        self.export_error = export_error
        self.labels = labels or {}
        self.pulled: list[str] = []

    def pull(self, reference: str) -> ImageHandle:
        if self.pull_error is not None:
            raise self.pull_error
        if reference not in self.archives:
            raise ImageNotFoundError(reference)
        self.pulled.append(reference)
        return ImageHandle(reference=reference, image_id=f"sha256:{len(self.pulled):064d}")

    def export(self, handle: ImageHandle, sink: Any) -> None:
        sink.write(self.archives[handle.reference])
        if self.export_error is not None:
            raise self.export_error

    def metadata(self, handle: ImageHandle) -> ImageMetadata:
        return ImageMetadata(
            reference=handle.reference,
            repository=handle.reference.split(":")[0],
            image_id=handle.image_id,
            labels=self.labels,
            user="1001",
        )


class ReconcilingCluster(InMemoryClusterClient):
    """In-memory cluster that installs and succeeds a CSV once subscribed."""

    def __init__(self, csv_name: str = "etcdoperator.v0.9.4", phase: str = "Succeeded") -> None:
        super().__init__()
        self.csv_name = csv_name
        self.phase = phase

    def create_subscription(self, data: SubscriptionData, namespace: str) -> dict[str, Any]:
        created = super().create_subscription(data, namespace)
        self.set_subscription_installed_csv(data.name, namespace, self.csv_name)
        self.set_csv_phase(self.csv_name, namespace, self.phase)
        return created


@pytest.fixture
def make_tar() -> Callable[..., bytes]:
    """Factory for in-memory tar archives."""
    return build_tar


@pytest.fixture
def fake_source() -> Callable[..., FakeImageSource]:
    """Factory for image sources serving prebuilt archives."""
    return FakeImageSource


@pytest.fixture
def reconciling_cluster() -> ReconcilingCluster:
    """Cluster that reports the operator as installed right after subscription."""
    return ReconcilingCluster()


@pytest.fixture
def sample_rootfs() -> bytes:
    """A small image filesystem as exported by a container runtime."""
    return build_tar(
        dirs=["./", "./etc/", "./licenses/"],
        files={
            "./etc/os-release": b'NAME="Red Hat Enterprise Linux"\n',
            "./licenses/LICENSE": b"Apache-2.0\n",
            "./usr/bin/app": b"#!/bin/sh\necho app\n",
        },
        modes={"./usr/bin/app": 0o755},
        symlinks={"./bin": "usr/bin"},
    )


@pytest.fixture
def sample_bundle() -> bytes:
    """A minimal operator bundle image filesystem."""
    return build_tar(
        files={
            "metadata/annotations.yaml": ANNOTATIONS_YAML.encode(),
            "manifests/etcdoperator.clusterserviceversion.yaml": b"kind: ClusterServiceVersion\n",
            "manifests/etcdclusters.crd.yaml": b"kind: CustomResourceDefinition\n",
            "Dockerfile": b"FROM scratch\n",
        },
    )


@pytest.fixture
def bundle_dir(tmp_path):
    """A materialized operator bundle on disk."""
    root = tmp_path / "bundle"
    (root / "metadata").mkdir(parents=True)
    (root / "manifests").mkdir()
    (root / "metadata" / "annotations.yaml").write_text(ANNOTATIONS_YAML)
    (root / "manifests" / "etcdoperator.clusterserviceversion.yaml").write_text("kind: ClusterServiceVersion\n")
    return root


@pytest.fixture
def bundle_ref(bundle_dir) -> ImageReference:
    """Image reference pointing at the materialized bundle."""
    return ImageReference(
        uri="quay.io/example/etcd-bundle:0.9.4",
        filesystem_path=str(bundle_dir),
    )


@pytest.fixture
def image_ref(tmp_path) -> ImageReference:
    """Image reference over an empty filesystem."""
    root = tmp_path / "fs"
    root.mkdir()
    return ImageReference(uri="quay.io/example/app:1.0", filesystem_path=str(root))


def _raise(ref: ImageReference) -> bool:
    raise RuntimeError("could not inspect image")


@pytest.fixture
def always_pass() -> GenericCheck:
    return GenericCheck(
        "AlwaysPass",
        lambda ref: True,
        metadata=CheckMetadata(description="Always passes", level=CheckLevel.GOOD),
        help_text=HelpText(message="Nothing to do"),
    )


@pytest.fixture
def always_fail() -> GenericCheck:
    return GenericCheck(
        "AlwaysFail",
        lambda ref: False,
        metadata=CheckMetadata(
            description="Always fails",
            level=CheckLevel.GOOD,
            knowledge_base_url="https://example.com/kb",
            check_url="https://example.com/check",
        ),
        help_text=HelpText(message="This check always fails", suggestion="Nothing will help"),
    )


@pytest.fixture
def always_error() -> GenericCheck:
    return GenericCheck(
        "AlwaysError",
        _raise,
        metadata=CheckMetadata(description="Always errors", level=CheckLevel.GOOD),
        help_text=HelpText(message="This check always errors"),
    )


@pytest.fixture
def preflight_logs(caplog, monkeypatch):
    """Capture cert_preflight log records regardless of logging configuration."""
    logger = logging.getLogger("cert_preflight")
    monkeypatch.setattr(logger, "propagate", False)
    logger.addHandler(caplog.handler)
    caplog.set_level(logging.DEBUG, logger="cert_preflight")
    yield caplog
    logger.removeHandler(caplog.handler)


@pytest.fixture(autouse=True)
def reset_preflight_logger():
    """Undo logging configuration done by CLI invocations."""
    logger = logging.getLogger("cert_preflight")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate
