"""Unit tests for bundle annotations and the bundle hash."""

import hashlib
import os

import pytest

from cert_preflight.artifacts import MemoryArtifactWriter
from cert_preflight.core.bundle import (
    HASHES_FILENAME,
    PACKAGE_KEY,
    bundle_hash,
    load_annotations,
    parse_annotations,
)
from cert_preflight.utils.errors import OperatorMetadataError
from cert_preflight.utils.hashing import compute_hash, hash_file


def _md5(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


class TestAnnotations:
    """Tests for reading annotations.yaml."""

    def test_load(self, bundle_dir):
        annotations = load_annotations(bundle_dir)
        assert annotations.package_name == "etcd"
        assert annotations.default_channel == "stable"
        assert annotations.channels == ["alpha", "stable"]
        assert annotations.openshift_versions is None

    def test_require_missing(self):
        annotations = parse_annotations("annotations:\n  foo: bar\n")
        with pytest.raises(OperatorMetadataError, match=f"did not find value at the key {PACKAGE_KEY}"):
            annotations.require(PACKAGE_KEY)

    def test_empty_file(self):
        with pytest.raises(OperatorMetadataError, match="empty"):
            parse_annotations(b"")

    def test_malformed(self):
        with pytest.raises(OperatorMetadataError, match="malformed"):
            parse_annotations("annotations: [unclosed")

    def test_no_annotations_map(self):
        with pytest.raises(OperatorMetadataError, match="no annotations map"):
            parse_annotations("metadata: {}\n")

    def test_missing_file(self, tmp_path):
        with pytest.raises(OperatorMetadataError, match="could not open annotations.yaml"):
            load_annotations(tmp_path)


class TestBundleHash:
    """Tests for bundle_hash."""

    def test_listing_and_digest(self, bundle_dir):
        artifacts = MemoryArtifactWriter()
        digest = bundle_hash(bundle_dir, artifacts)

        annotations = (bundle_dir / "metadata" / "annotations.yaml").read_bytes()
        csv = (bundle_dir / "manifests" / "etcdoperator.clusterserviceversion.yaml").read_bytes()
        entries = sorted(
            [
                (_md5(annotations), "./metadata/annotations.yaml"),
                (_md5(csv), "./manifests/etcdoperator.clusterserviceversion.yaml"),
            ]
        )
        expected = "".join(f"{d}  {p}\n" for d, p in entries).encode()

        assert artifacts.files[HASHES_FILENAME] == expected
        assert digest == _md5(expected)

    def test_dockerfile_excluded(self, bundle_dir):
        before = bundle_hash(bundle_dir)
        (bundle_dir / "Dockerfile").write_text("FROM scratch\n")
        assert bundle_hash(bundle_dir) == before

    def test_content_change_changes_hash(self, bundle_dir):
        before = bundle_hash(bundle_dir)
        (bundle_dir / "manifests" / "etcdoperator.clusterserviceversion.yaml").write_text("kind: Changed\n")
        assert bundle_hash(bundle_dir) != before

    def test_duplicate_contents_listed_once(self, bundle_dir):
        artifacts = MemoryArtifactWriter()
        (bundle_dir / "manifests" / "copy.yaml").write_text("kind: ClusterServiceVersion\n")
        bundle_hash(bundle_dir, artifacts)
        assert artifacts.files[HASHES_FILENAME].count(b"\n") == 2

    def test_dangling_link_skipped(self, bundle_dir):
        before = bundle_hash(bundle_dir)
        os.symlink("missing.yaml", bundle_dir / "manifests" / "dangling.yaml")
        assert bundle_hash(bundle_dir) == before

    def test_absolute_link_hashed_from_bundle(self, bundle_dir):
        """An absolute link is read through the bundle root, not the host."""
        (bundle_dir / "common").mkdir()
        (bundle_dir / "common" / "crd.yaml").write_text("kind: CustomResourceDefinition\n")
        os.symlink("/common/crd.yaml", bundle_dir / "manifests" / "z-crd.yaml")
        artifacts = MemoryArtifactWriter()

        bundle_hash(bundle_dir, artifacts)

        # Identical content is listed under the last path walked, which is the link
        digest = _md5(b"kind: CustomResourceDefinition\n")
        listing = artifacts.files[HASHES_FILENAME].decode()
        assert f"{digest}  ./manifests/z-crd.yaml\n" in listing
        assert listing.count("\n") == 3


class TestHashing:
    """Tests for the digest helpers."""

    def test_hash_file_matches_buffer(self, tmp_path):
        path = tmp_path / "blob"
        path.write_bytes(b"x" * 200_000)
        assert hash_file(path) == compute_hash(b"x" * 200_000) == _md5(b"x" * 200_000)
        assert hash_file(path, "sha256") == hashlib.sha256(b"x" * 200_000).hexdigest()
