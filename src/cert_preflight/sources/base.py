"""Base image source protocol and types."""

from __future__ import annotations

import os
from typing import Any, BinaryIO, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from cert_preflight.models.image import ImageMetadata


class RegistryAuth(BaseModel):
    """Authentication credentials for a container registry."""

    model_config = {"frozen": True}

    username: str | None = Field(default=None, description="Registry username")
    password: str | None = Field(default=None, description="Registry password or token")

    @classmethod
    def from_env(cls) -> "RegistryAuth | None":
        """Create auth from REGISTRY_USERNAME and REGISTRY_PASSWORD."""
        username = os.environ.get("REGISTRY_USERNAME")
        password = os.environ.get("REGISTRY_PASSWORD")

        if username and password:
            return cls(username=username, password=password)
        return None


class ImageHandle(BaseModel):
    """A pulled image, as returned by an image source."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    reference: str = Field(description="Image reference that was pulled")
    image_id: str | None = Field(default=None, description="Local image id")
    native: Any = Field(default=None, description="Source-specific image object")


class ImageSourceError(Exception):
    """Base exception for image source operations."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ImageSourceAuthError(ImageSourceError):
    """Authentication failed."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message, code="AUTH_ERROR")


class ImageNotFoundError(ImageSourceError):
    """Image not found."""

    def __init__(self, reference: str) -> None:
        super().__init__(f"Image not found: {reference}", code="NOT_FOUND")
        self.reference = reference


@runtime_checkable
class ImageSource(Protocol):
    """Protocol for services that can pull and export images.

    Example:
        class TarballSource:
            def pull(self, reference: str) -> ImageHandle:
                return ImageHandle(reference=reference)

            def export(self, handle: ImageHandle, sink: BinaryIO) -> None:
                with open(self.tarballs[handle.reference], "rb") as f:
                    shutil.copyfileobj(f, sink)

            def metadata(self, handle: ImageHandle) -> ImageMetadata:
                return ImageMetadata(reference=handle.reference, repository="x")
    """

    def pull(self, reference: str) -> ImageHandle:
        """Pull an image.

        Raises:
            ImageNotFoundError: If the image does not exist
            ImageSourceAuthError: If authentication fails
            ImageSourceError: For other errors
        """
        ...

    def export(self, handle: ImageHandle, sink: BinaryIO) -> None:
        """Write the flattened image filesystem to sink as a tar stream.

        Raises:
            ImageSourceError: If the export fails
        """
        ...

    def metadata(self, handle: ImageHandle) -> ImageMetadata:
        """Describe a pulled image."""
        ...


def parse_reference(reference: str) -> dict[str, str | None]:
    """Parse an image reference into registry, repository, tag and digest."""
    result: dict[str, str | None] = {
        "registry": None,
        "repository": None,
        "tag": None,
        "digest": None,
    }

    # Handle digest
    if "@" in reference:
        reference, digest = reference.rsplit("@", 1)
        result["digest"] = digest

    # Handle tag; a colon followed by a path or a bare number is a registry port
    if ":" in reference:
        parts = reference.rsplit(":", 1)
        if "/" not in parts[1] and not parts[1].isdigit():
            reference = parts[0]
            result["tag"] = parts[1]

    parts = reference.split("/")
    if len(parts) == 1:
        result["repository"] = parts[0]
    elif "." in parts[0] or ":" in parts[0] or parts[0] == "localhost":
        result["registry"] = parts[0]
        result["repository"] = "/".join(parts[1:])
    else:
        result["repository"] = reference

    return result
