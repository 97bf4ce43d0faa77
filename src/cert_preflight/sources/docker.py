"""Docker daemon image source implementation."""

from __future__ import annotations

from typing import Any, BinaryIO

from cert_preflight.models.image import ImageMetadata
from cert_preflight.sources.base import (
    ImageHandle,
    ImageNotFoundError,
    ImageSourceAuthError,
    ImageSourceError,
    RegistryAuth,
    parse_reference,
)
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)


class DockerImageSource:
    """Image source backed by the local Docker daemon.

    Images are pulled through the daemon and flattened by exporting a
    stopped container created from the image.

    Example:
        source = DockerImageSource()
        handle = source.pull("registry.example.com/team/app:1.0")
        with open("fs.tar", "wb") as f:
            source.export(handle, f)
    """

    def __init__(self, auth: RegistryAuth | None = None, client: Any = None) -> None:
        """Initialize the Docker image source.

        Args:
            auth: Optional registry credentials used when pulling
            client: Pre-built docker client, created from the environment if None
        """
        self._auth = auth
        self._client = client

    @property
    def client(self) -> Any:
        """Get the Docker client, creating it if necessary."""
        if self._client is None:
            try:
                import docker

                self._client = docker.from_env()
            except ImportError:
                raise ImageSourceError(
                    "Docker SDK not available. Install with: pip install docker",
                    code="MISSING_DEPENDENCY",
                )
            except Exception as e:
                raise ImageSourceError(
                    f"Failed to connect to Docker daemon: {e}",
                    code="CONNECTION_ERROR",
                ) from e
        return self._client

    def pull(self, reference: str) -> ImageHandle:
        """Pull an image through the daemon.

        Raises:
            ImageNotFoundError: If the image does not exist
            ImageSourceAuthError: If authentication fails
            ImageSourceError: For other errors
        """
        auth_config = None
        if self._auth:
            auth_config = {
                "username": self._auth.username,
                "password": self._auth.password,
            }

        try:
            image = self.client.images.pull(reference, auth_config=auth_config)
        except ImageSourceError:
            raise
        except Exception as e:
            err_str = str(e).lower()
            if "unauthorized" in err_str or "authentication" in err_str:
                raise ImageSourceAuthError(f"Authentication failed for {reference}") from e
            if "not found" in err_str or "manifest unknown" in err_str:
                raise ImageNotFoundError(reference) from e
            raise ImageSourceError(f"Failed to pull image: {e}") from e

        # images.pull returns a list when no tag is given
        if isinstance(image, list):
            image = image[0]

        logger.debug("pulled image", extra={"extra_fields": {"image": reference, "id": image.id}})
        return ImageHandle(reference=reference, image_id=image.id, native=image)

    def export(self, handle: ImageHandle, sink: BinaryIO) -> None:
        """Stream the flattened filesystem of the image into sink.

        The temporary container is removed whether or not the export
        succeeds.

        Raises:
            ImageSourceError: If the container cannot be created or exported
        """
        image = handle.native if handle.native is not None else handle.image_id or handle.reference

        try:
            container = self.client.containers.create(image, command="true")
        except ImageSourceError:
            raise
        except Exception as e:
            raise ImageSourceError(f"Failed to create container: {e}") from e

        try:
            for chunk in container.export():
                sink.write(chunk)
        except OSError:
            raise
        except Exception as e:
            raise ImageSourceError(f"Failed to export container: {e}") from e
        finally:
            try:
                container.remove(force=True)
            except Exception as e:
                logger.warning(
                    "could not remove export container",
                    extra={"extra_fields": {"container": container.id, "err": e}},
                )

    def metadata(self, handle: ImageHandle) -> ImageMetadata:
        """Read image attributes from the daemon."""
        image = handle.native
        if image is None:
            try:
                image = self.client.images.get(handle.image_id or handle.reference)
            except Exception as e:
                if "not found" in str(e).lower() or "no such image" in str(e).lower():
                    raise ImageNotFoundError(handle.reference) from e
                raise ImageSourceError(f"Failed to get metadata: {e}") from e

        attrs = image.attrs
        config = attrs.get("Config", {}) or {}
        parsed = parse_reference(handle.reference)

        digest = None
        for repo_digest in attrs.get("RepoDigests", []) or []:
            if "@" in repo_digest:
                digest = repo_digest.rsplit("@", 1)[1]
                break

        return ImageMetadata(
            reference=handle.reference,
            registry=parsed.get("registry"),
            repository=parsed.get("repository") or handle.reference,
            tag=parsed.get("tag"),
            digest=parsed.get("digest") or digest,
            image_id=image.id,
            labels=config.get("Labels", {}) or {},
            architecture=attrs.get("Architecture"),
            os=attrs.get("Os"),
            user=config.get("User") or None,
            layers=attrs.get("RootFS", {}).get("Layers", []) or [],
            raw_config=attrs,
        )
