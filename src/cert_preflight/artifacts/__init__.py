"""Artifact storage."""

from cert_preflight.artifacts.writer import ArtifactWriter, FilesystemArtifactWriter, MemoryArtifactWriter

__all__ = ["ArtifactWriter", "FilesystemArtifactWriter", "MemoryArtifactWriter"]
