"""Operator bundle metadata and content hashing."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from cert_preflight.artifacts.writer import ArtifactWriter
from cert_preflight.models.image import ReadOnlyFilesystem
from cert_preflight.utils.errors import OperatorMetadataError
from cert_preflight.utils.hashing import compute_hash, hash_file
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)

ANNOTATIONS_PATH = "metadata/annotations.yaml"

PACKAGE_KEY = "operators.operatorframework.io.bundle.package.v1"
DEFAULT_CHANNEL_KEY = "operators.operatorframework.io.bundle.channel.default.v1"
CHANNELS_KEY = "operators.operatorframework.io.bundle.channels.v1"
OPENSHIFT_VERSIONS_KEY = "com.redhat.openshift.versions"

HASHES_FILENAME = "hashes.txt"


class BundleAnnotations(BaseModel):
    """The annotations an operator bundle declares in metadata/annotations.yaml."""

    model_config = {"frozen": True}

    annotations: dict[str, str] = Field(default_factory=dict, description="All annotations")

    @property
    def package_name(self) -> str | None:
        return self.annotations.get(PACKAGE_KEY) or None

    @property
    def default_channel(self) -> str | None:
        return self.annotations.get(DEFAULT_CHANNEL_KEY) or None

    @property
    def channels(self) -> list[str]:
        raw = self.annotations.get(CHANNELS_KEY, "")
        return [c.strip() for c in raw.split(",") if c.strip()]

    @property
    def openshift_versions(self) -> str | None:
        return self.annotations.get(OPENSHIFT_VERSIONS_KEY) or None

    def require(self, key: str) -> str:
        """Get an annotation that must be present.

        Raises:
            OperatorMetadataError: If the key is missing or empty
        """
        value = self.annotations.get(key)
        if not value:
            raise OperatorMetadataError(
                f"did not find value at the key {key} in the annotations.yaml", key=key
            )
        return value


def parse_annotations(content: bytes | str) -> BundleAnnotations:
    """Parse the contents of an annotations.yaml file.

    Raises:
        OperatorMetadataError: If the content is empty or malformed
    """
    if not content:
        raise OperatorMetadataError("the annotations file was empty")

    try:
        data: Any = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise OperatorMetadataError(f"metadata/annotations.yaml found but is malformed: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("annotations"), dict):
        raise OperatorMetadataError("metadata/annotations.yaml has no annotations map")

    return BundleAnnotations(
        annotations={str(k): str(v) for k, v in data["annotations"].items() if v is not None}
    )


def load_annotations(source: ReadOnlyFilesystem | Path | str) -> BundleAnnotations:
    """Read metadata/annotations.yaml from a bundle filesystem.

    Args:
        source: Bundle filesystem or the directory holding it

    Raises:
        OperatorMetadataError: If the file is missing, empty or malformed
    """
    fs = source if isinstance(source, ReadOnlyFilesystem) else ReadOnlyFilesystem(source)
    try:
        content = fs.read_bytes(ANNOTATIONS_PATH)
    except OSError as e:
        raise OperatorMetadataError(f"could not open annotations.yaml: {e}") from e
    return parse_annotations(content)


def bundle_hash(root: Path | str, artifacts: ArtifactWriter | None = None) -> str:
    """Compute the certification hash of a bundle.

    Every file except ``Dockerfile`` is md5-summed. The listing of
    ``<md5>  ./<path>`` lines, ordered by checksum, is written to
    hashes.txt and its own md5 is the bundle hash. Files with identical
    content appear once.

    Returns:
        Hex md5 of the listing
    """
    fs = ReadOnlyFilesystem(root)
    files: dict[str, str] = {}
    for path in fs.walk():
        if Path(path).name == "Dockerfile":
            continue
        try:
            files[hash_file(fs.resolve(path), "md5")] = f"./{path}"
        except (PermissionError, FileNotFoundError, IsADirectoryError, NotADirectoryError):
            # Dangling links and links leaving the bundle are not content
            logger.debug("skipping unreadable bundle entry", extra={"extra_fields": {"path": path}})

    listing = "".join(f"{digest}  {files[digest]}\n" for digest in sorted(files)).encode()

    if artifacts is not None:
        artifacts.write_file(HASHES_FILENAME, listing)

    digest = compute_hash(listing, "md5")
    logger.debug("md5 sum", extra={"extra_fields": {"hash": digest}})
    return digest
