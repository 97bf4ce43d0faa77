"""Digest helpers for bundle content."""

import hashlib
from pathlib import Path

CHUNK_SIZE = 64 * 1024


def compute_hash(data: bytes, algorithm: str = "md5") -> str:
    """Hex digest of an in-memory buffer."""
    return hashlib.new(algorithm, data).hexdigest()


def hash_file(path: Path | str, algorithm: str = "md5") -> str:
    """Hex digest of a file, read in chunks.

    Raises:
        OSError: If the file cannot be opened or read
    """
    digest = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()
