"""Materialize an image's flattened filesystem on local disk.

The image source writes a tar stream into one end of an OS pipe from a
background thread while the calling thread unpacks the other end, so the
export is never buffered in memory or written to disk as an archive.
"""

from __future__ import annotations

import os
import posixpath
import shutil
import tarfile
import tempfile
import threading
from pathlib import Path
from typing import BinaryIO

from cert_preflight.sources.base import ImageHandle, ImageSource
from cert_preflight.utils.errors import ExtractionError, TempDirCreateError
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)

SCRATCH_PREFIX = "preflight-"
FILESYSTEM_DIR = "fs"
_DRAIN_CHUNK = 64 * 1024


class ScratchDirectory:
    """Private temporary directory that is removed on every exit path.

    Example:
        with ScratchDirectory() as scratch:
            extractor.materialize(handle, scratch / "fs")
    """

    def __init__(self, prefix: str = SCRATCH_PREFIX, base_dir: Path | str | None = None) -> None:
        self._prefix = prefix
        self._base_dir = base_dir
        self._path: Path | None = None

    @property
    def path(self) -> Path:
        if self._path is None:
            raise RuntimeError("scratch directory has not been created")
        return self._path

    @property
    def filesystem_root(self) -> Path:
        """Directory the image filesystem is unpacked into."""
        return self.path / FILESYSTEM_DIR

    def create(self) -> Path:
        """Create the directory.

        Raises:
            TempDirCreateError: If the directory cannot be created
        """
        try:
            self._path = Path(tempfile.mkdtemp(prefix=self._prefix, dir=self._base_dir))
        except OSError as e:
            raise TempDirCreateError(str(e)) from e
        logger.debug("created scratch directory", extra={"extra_fields": {"path": self._path}})
        return self._path

    def cleanup(self) -> None:
        """Remove the directory and everything below it."""
        if self._path is None:
            return
        try:
            shutil.rmtree(self._path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(
                "unable to clean up scratch directory",
                extra={"extra_fields": {"path": self._path, "err": e}},
            )
        self._path = None

    def __enter__(self) -> Path:
        return self.create()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()


def clean_member_name(name: str) -> str:
    """Normalize an archive entry name to a path relative to the root.

    Leading ``./`` and ``/`` are stripped. Returns an empty string for the
    root entry itself.

    Raises:
        ExtractionError: If the name escapes the root
    """
    normalized = posixpath.normpath(name.lstrip("/"))
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if normalized == ".":
        return ""
    if normalized == ".." or normalized.startswith("../"):
        raise ExtractionError(f"archive entry escapes the extraction root: {name}", path=name)
    return normalized


def _link_escapes(name: str, linkname: str) -> bool:
    """Whether a symlink at name pointing to linkname leaves the image root."""
    if linkname.startswith("/"):
        return False
    target = posixpath.normpath(posixpath.join(posixpath.dirname(name), linkname))
    return target == ".." or target.startswith("../")


def _within(root: Path, path: Path) -> bool:
    return path == root or root in path.parents


def _target_path(root: Path, name: str) -> Path:
    target = root / name
    # Parent directories may be symlinks created earlier in the stream
    if not _within(root, target.parent.resolve()):
        raise ExtractionError(f"archive entry escapes the extraction root: {name}", path=name)
    return target


def _replace(target: Path) -> None:
    if target.is_symlink() or target.is_file():
        target.unlink()


def untar(dst: Path | str, stream: BinaryIO) -> list[str]:
    """Unpack a tar stream into dst.

    Directories are not created explicitly; they appear as parents of the
    files below them. Regular files keep their permission bits, symlinks
    are recreated verbatim, hard links are copied from their already
    extracted target. Other entry types are ignored.

    Args:
        dst: Destination root, created if missing
        stream: Readable binary stream holding a tar archive

    Returns:
        Relative paths of the files and links written, in archive order

    Raises:
        ExtractionError: If the archive is malformed, an entry escapes the
            root, or a file cannot be written
    """
    root = Path(dst)
    written: list[str] = []
    # Names currently holding a regular file written from this stream
    regular: set[str] = set()
    try:
        root.mkdir(parents=True, exist_ok=True)
        root = root.resolve()
        with tarfile.open(fileobj=stream, mode="r|*") as tar:
            for member in tar:
                name = clean_member_name(member.name)
                if not name or member.isdir():
                    continue

                if member.isreg():
                    target = _target_path(root, name)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    _replace(target)
                    source = tar.extractfile(member)
                    with open(target, "wb") as f:
                        if source is not None:
                            shutil.copyfileobj(source, f)
                    os.chmod(target, member.mode & 0o777)
                    written.append(name)
                    regular.add(name)

                elif member.issym():
                    if _link_escapes(name, member.linkname):
                        logger.debug(
                            "skipping symlink that leaves the image root",
                            extra={"extra_fields": {"name": name, "target": member.linkname}},
                        )
                        continue
                    target = _target_path(root, name)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    _replace(target)
                    os.symlink(member.linkname, target)
                    written.append(name)
                    regular.discard(name)

                elif member.islnk():
                    source_name = clean_member_name(member.linkname)
                    link_source = root / source_name
                    if source_name not in regular or not _within(root, link_source.resolve()):
                        logger.debug(
                            "skipping hard link to a file that was not extracted",
                            extra={"extra_fields": {"name": name, "target": member.linkname}},
                        )
                        continue
                    target = _target_path(root, name)
                    target.parent.mkdir(parents=True, exist_ok=True)
                    _replace(target)
                    shutil.copy2(link_source, target)
                    written.append(name)
                    regular.add(name)

                else:
                    logger.debug(
                        "skipping unsupported archive entry",
                        extra={"extra_fields": {"name": name, "type": member.type}},
                    )
    except ExtractionError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ExtractionError(f"failed to extract image filesystem: {e}", path=str(dst)) from e

    return written


def _drain(stream: BinaryIO, dst: Path | str) -> None:
    try:
        while stream.read(_DRAIN_CHUNK):
            pass
    except OSError as e:
        raise ExtractionError(f"failed to extract image filesystem: {e}", path=str(dst)) from e


class Extractor:
    """Streams an image export from a source into a local directory.

    Example:
        extractor = Extractor(DockerImageSource())
        with ScratchDirectory() as scratch:
            extractor.materialize(handle, scratch / "fs")
    """

    def __init__(self, source: ImageSource) -> None:
        self._source = source

    def materialize(self, handle: ImageHandle, dst: Path | str) -> list[str]:
        """Export handle's filesystem into dst.

        Returns:
            Relative paths written, as returned by untar

        Raises:
            ExtractionError: If the export or the unpacking fails
        """
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "rb")
        writer = os.fdopen(write_fd, "wb")
        producer_errors: list[Exception] = []

        def produce() -> None:
            try:
                self._source.export(handle, writer)
            except Exception as e:
                producer_errors.append(e)
            finally:
                # Closing the write end is the end-of-input signal
                try:
                    writer.close()
                except OSError as e:
                    if not producer_errors:
                        producer_errors.append(e)

        producer = threading.Thread(target=produce, name="image-export", daemon=True)
        producer.start()

        written: list[str] = []
        consumer_error: ExtractionError | None = None
        try:
            written = untar(dst, reader)
            # Trailing archive padding must be consumed so the producer can finish
            _drain(reader, dst)
        except ExtractionError as e:
            consumer_error = e
        finally:
            reader.close()
            producer.join()

        # A broken pipe on the producer side is a symptom of the consumer failing
        producer_error = next(
            (e for e in producer_errors if not isinstance(e, BrokenPipeError)),
            None,
        )
        if producer_error is not None:
            raise ExtractionError(
                f"failed to export image filesystem: {producer_error}", path=str(dst)
            ) from producer_error
        if consumer_error is not None:
            raise consumer_error
        if producer_errors:
            raise ExtractionError(
                f"failed to export image filesystem: {producer_errors[0]}", path=str(dst)
            ) from producer_errors[0]

        logger.debug(
            "materialized image filesystem",
            extra={"extra_fields": {"image": handle.reference, "files": len(written)}},
        )
        return written
