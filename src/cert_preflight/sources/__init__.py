"""Image sources: where the image under test comes from."""

from cert_preflight.sources.base import (
    ImageHandle,
    ImageNotFoundError,
    ImageSource,
    ImageSourceAuthError,
    ImageSourceError,
    RegistryAuth,
    parse_reference,
)
from cert_preflight.sources.docker import DockerImageSource

__all__ = [
    "DockerImageSource",
    "ImageHandle",
    "ImageNotFoundError",
    "ImageSource",
    "ImageSourceAuthError",
    "ImageSourceError",
    "RegistryAuth",
    "parse_reference",
]
