"""Artifact writers: where run artifacts end up."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Protocol, runtime_checkable

from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)


@runtime_checkable
class ArtifactWriter(Protocol):
    """Protocol for artifact sinks."""

    def write_file(self, filename: str, contents: bytes) -> str:
        """Store contents under filename.

        Returns:
            Location of the stored artifact
        """
        ...


class FilesystemArtifactWriter:
    """Writes artifacts into a directory, created on first write."""

    def __init__(self, directory: Path | str) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def write_file(self, filename: str, contents: bytes) -> str:
        path = self._directory / Path(filename).name
        self._directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(contents)
        logger.debug("wrote artifact", extra={"extra_fields": {"path": path, "bytes": len(contents)}})
        return str(path)


class MemoryArtifactWriter:
    """Keeps artifacts in a dict keyed by filename."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self._lock = threading.Lock()

    def write_file(self, filename: str, contents: bytes) -> str:
        with self._lock:
            self.files[filename] = contents
        return filename
