"""Image-related data models."""

from __future__ import annotations

import errno
import os
from pathlib import Path
from typing import IO, Any, Iterator

from pydantic import BaseModel, Field

MAX_SYMLINKS = 40


class ImageMetadata(BaseModel):
    """Metadata about a pulled container image."""

    model_config = {"frozen": True}

    # Identity
    reference: str = Field(description="Image reference as given by the user")
    registry: str | None = Field(default=None, description="Registry hostname")
    repository: str = Field(description="Repository name")
    tag: str | None = Field(default=None, description="Image tag")
    digest: str | None = Field(default=None, description="Resolved image digest")
    image_id: str | None = Field(default=None, description="Image config digest")

    # Config
    labels: dict[str, str] = Field(default_factory=dict, description="Container labels")
    architecture: str | None = Field(default=None, description="Target architecture")
    os: str | None = Field(default=None, description="Target operating system")
    user: str | None = Field(default=None, description="Configured container user")
    layers: list[str] = Field(default_factory=list, description="Layer diff ids, base first")

    # Raw config for extensibility
    raw_config: dict[str, Any] = Field(
        default_factory=dict,
        description="Raw image config for additional inspection",
    )


class ReadOnlyFilesystem:
    """Read-only view of a materialized image filesystem.

    Every path is interpreted relative to the root. Paths that resolve
    outside the root are rejected, and files can only be opened for reading.

    Example:
        fs = image_ref.filesystem
        if fs.exists("licenses"):
            names = fs.listdir("licenses")
        release = fs.read_text("etc/os-release")
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        """The filesystem root."""
        return self._root

    def resolve(self, path: str | Path) -> Path:
        """Map an image path to a host path inside the root.

        Symlinks are followed one component at a time the way they would
        be inside the running image: absolute targets start again at the
        image root, never at the host's.

        Raises:
            PermissionError: If the path escapes the root
            OSError: If symlinks nest deeper than MAX_SYMLINKS
        """
        pending = [part for part in reversed(str(path).split("/")) if part]
        resolved: list[str] = []
        followed = 0
        while pending:
            part = pending.pop()
            if part == ".":
                continue
            if part == "..":
                if not resolved:
                    raise PermissionError(f"path escapes the image filesystem: {path}")
                resolved.pop()
                continue

            current = self._root.joinpath(*resolved, part)
            if not current.is_symlink():
                resolved.append(part)
                continue

            followed += 1
            if followed > MAX_SYMLINKS:
                raise OSError(errno.ELOOP, f"too many levels of symbolic links: {path}")
            target = os.readlink(current)
            if target.startswith("/"):
                resolved = []
            pending.extend(part for part in reversed(target.split("/")) if part)

        return self._root.joinpath(*resolved)

    def open(self, path: str | Path, mode: str = "r", **kwargs: Any) -> IO[Any]:
        """Open a file for reading."""
        if any(flag in mode for flag in "wax+"):
            raise PermissionError(f"image filesystem is read-only, refusing mode {mode!r}")
        return open(self.resolve(path), mode, **kwargs)

    def read_bytes(self, path: str | Path) -> bytes:
        return self.resolve(path).read_bytes()

    def read_text(self, path: str | Path, encoding: str = "utf-8") -> str:
        return self.resolve(path).read_text(encoding=encoding)

    def exists(self, path: str | Path) -> bool:
        try:
            return self.resolve(path).exists()
        except OSError:
            return False

    def is_file(self, path: str | Path) -> bool:
        try:
            return self.resolve(path).is_file()
        except OSError:
            return False

    def listdir(self, path: str | Path = "") -> list[str]:
        return sorted(os.listdir(self.resolve(path)))

    def walk(self) -> Iterator[str]:
        """Yield the relative path of every regular file, sorted."""
        for dirpath, dirnames, filenames in os.walk(self._root):
            dirnames.sort()
            for filename in sorted(filenames):
                full = Path(dirpath) / filename
                yield full.relative_to(self._root).as_posix()

    def __repr__(self) -> str:
        return f"ReadOnlyFilesystem(root='{self._root}')"


class ImageReference(BaseModel):
    """Everything a check needs to know about the image under test.

    Produced once per engine run after the filesystem is materialized.
    Checks receive it read-only; the filesystem behind ``filesystem_path``
    is removed when the run ends.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    uri: str = Field(description="Image reference as given by the user")
    filesystem_path: str = Field(description="Root of the materialized image filesystem")
    image_metadata: ImageMetadata | None = Field(default=None, description="Image metadata")
    image_handle: Any = Field(default=None, description="Opaque image source handle")

    registry: str | None = Field(default=None, description="Registry hostname")
    repository: str | None = Field(default=None, description="Repository name")
    tag_or_digest: str | None = Field(default=None, description="Tag or digest identifier")

    @property
    def filesystem(self) -> ReadOnlyFilesystem:
        """Read-only handle on the materialized filesystem."""
        return ReadOnlyFilesystem(self.filesystem_path)
