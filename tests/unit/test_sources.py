"""Unit tests for image sources."""

import io
from unittest.mock import MagicMock

import pytest

from cert_preflight.sources import (
    DockerImageSource,
    ImageHandle,
    ImageNotFoundError,
    ImageSource,
    ImageSourceAuthError,
    ImageSourceError,
    RegistryAuth,
    parse_reference,
)


class TestParseReference:
    """Tests for parse_reference."""

    def test_simple_image(self):
        assert parse_reference("nginx") == {
            "registry": None,
            "repository": "nginx",
            "tag": None,
            "digest": None,
        }

    def test_with_registry_and_tag(self):
        result = parse_reference("quay.io/example/app:1.0")
        assert result["registry"] == "quay.io"
        assert result["repository"] == "example/app"
        assert result["tag"] == "1.0"

    def test_with_port_and_digest(self):
        digest = "sha256:" + "a" * 64
        result = parse_reference(f"localhost:5000/app@{digest}")
        assert result["registry"] == "localhost:5000"
        assert result["repository"] == "app"
        assert result["tag"] is None
        assert result["digest"] == digest

    def test_docker_hub_namespace(self):
        result = parse_reference("library/nginx:latest")
        assert result["registry"] is None
        assert result["repository"] == "library/nginx"


class TestRegistryAuth:
    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("REGISTRY_USERNAME", "robot")
        monkeypatch.setenv("REGISTRY_PASSWORD", "secret")
        auth = RegistryAuth.from_env()
        assert auth is not None
        assert auth.username == "robot"

    def test_from_env_incomplete(self, monkeypatch):
        monkeypatch.setenv("REGISTRY_USERNAME", "robot")
        monkeypatch.delenv("REGISTRY_PASSWORD", raising=False)
        assert RegistryAuth.from_env() is None


class TestDockerImageSource:
    """Tests for DockerImageSource with a mocked docker client."""

    @pytest.fixture
    def client(self):
        client = MagicMock()
        image = MagicMock()
        image.id = "sha256:abc"
        image.attrs = {
            "Architecture": "amd64",
            "Os": "linux",
            "RepoDigests": ["quay.io/example/app@sha256:def"],
            "RootFS": {"Layers": ["sha256:l1", "sha256:l2"]},
            "Config": {"Labels": {"name": "app"}, "User": "1001"},
        }
        client.images.pull.return_value = image
        return client

    def test_satisfies_protocol(self, client):
        assert isinstance(DockerImageSource(client=client), ImageSource)

    def test_pull_with_auth(self, client):
        source = DockerImageSource(auth=RegistryAuth(username="u", password="p"), client=client)
        handle = source.pull("quay.io/example/app:1.0")

        client.images.pull.assert_called_once_with(
            "quay.io/example/app:1.0", auth_config={"username": "u", "password": "p"}
        )
        assert handle.image_id == "sha256:abc"
        assert handle.reference == "quay.io/example/app:1.0"

    def test_pull_list_result(self, client):
        client.images.pull.return_value = [client.images.pull.return_value]
        handle = DockerImageSource(client=client).pull("quay.io/example/app")
        assert handle.image_id == "sha256:abc"

    @pytest.mark.parametrize(
        "message,error_type",
        [
            ("401 Unauthorized", ImageSourceAuthError),
            ("manifest unknown", ImageNotFoundError),
            ("connection reset by peer", ImageSourceError),
        ],
    )
    def test_pull_error_mapping(self, client, message, error_type):
        client.images.pull.side_effect = Exception(message)
        with pytest.raises(error_type):
            DockerImageSource(client=client).pull("quay.io/example/app:1.0")

    def test_export_streams_and_removes_container(self, client):
        container = MagicMock()
        container.export.return_value = iter([b"abc", b"def"])
        client.containers.create.return_value = container

        sink = io.BytesIO()
        handle = ImageHandle(reference="app:1.0", image_id="sha256:abc")
        DockerImageSource(client=client).export(handle, sink)

        assert sink.getvalue() == b"abcdef"
        client.containers.create.assert_called_once_with("sha256:abc", command="true")
        container.remove.assert_called_once_with(force=True)

    def test_export_failure_still_removes_container(self, client):
        container = MagicMock()
        container.export.side_effect = Exception("daemon went away")
        client.containers.create.return_value = container

        handle = ImageHandle(reference="app:1.0", image_id="sha256:abc")
        with pytest.raises(ImageSourceError, match="Failed to export"):
            DockerImageSource(client=client).export(handle, io.BytesIO())
        container.remove.assert_called_once_with(force=True)

    def test_metadata(self, client):
        source = DockerImageSource(client=client)
        metadata = source.metadata(source.pull("quay.io/example/app:1.0"))

        assert metadata.registry == "quay.io"
        assert metadata.repository == "example/app"
        assert metadata.tag == "1.0"
        assert metadata.digest == "sha256:def"
        assert metadata.labels == {"name": "app"}
        assert metadata.user == "1001"
        assert metadata.layers == ["sha256:l1", "sha256:l2"]
        assert metadata.architecture == "amd64"

    def test_metadata_without_native_image(self, client):
        client.images.get.side_effect = Exception("No such image: app:1.0")
        with pytest.raises(ImageNotFoundError):
            DockerImageSource(client=client).metadata(ImageHandle(reference="app:1.0"))
