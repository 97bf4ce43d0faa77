"""Certification engine: acquire an image, run checks, aggregate results."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from cert_preflight.artifacts.writer import ArtifactWriter
from cert_preflight.checks.base import Check
from cert_preflight.core.bundle import bundle_hash
from cert_preflight.core.extract import FILESYSTEM_DIR, Extractor, ScratchDirectory
from cert_preflight.core.runner import CheckRunner
from cert_preflight.models.check import Results
from cert_preflight.models.image import ImageMetadata, ImageReference
from cert_preflight.sources.base import ImageHandle, ImageSource, parse_reference
from cert_preflight.utils.errors import PreflightError, PullFailedError
from cert_preflight.utils.logging import get_logger_with_context


class Engine:
    """Runs one certification pass over one image.

    The image is pulled, its filesystem is unpacked into a private scratch
    directory, every check runs against it, and the scratch directory is
    removed before ``execute`` returns or raises. Pull and extraction
    failures abort the run; check failures never do.

    Example:
        engine = Engine(DockerImageSource(), [HasLicenseCheck()])
        results = engine.execute("registry.example.com/team/app:1.0")
        if not results.passed_overall:
            ...
    """

    def __init__(
        self,
        source: ImageSource,
        checks: Sequence[Check],
        runner: CheckRunner | None = None,
        artifacts: ArtifactWriter | None = None,
        is_bundle: bool = False,
        scratch_dir: Path | str | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            source: Where images are pulled and exported from
            checks: Checks to run, in order
            runner: Check runner, a default CheckRunner if None
            artifacts: Writer for run artifacts such as the bundle hash listing
            is_bundle: Compute the certification hash of an operator bundle
            scratch_dir: Parent directory for scratch directories
        """
        self._source = source
        self._checks = list(checks)
        self._runner = runner or CheckRunner()
        self._artifacts = artifacts
        self._is_bundle = is_bundle
        self._scratch_dir = scratch_dir

    @property
    def checks(self) -> list[Check]:
        return list(self._checks)

    def execute(self, image: str) -> Results:
        """Certify one image.

        Returns:
            Results holding every check exactly once

        Raises:
            PullFailedError: If the image cannot be pulled
            TempDirCreateError: If the scratch directory cannot be created
            ExtractionError: If the image filesystem cannot be unpacked
        """
        log = get_logger_with_context(__name__, image=image)

        try:
            handle = self._source.pull(image)
        except PreflightError:
            raise
        except Exception as e:
            raise PullFailedError(image, str(e)) from e

        with ScratchDirectory(base_dir=self._scratch_dir) as scratch:
            fs_root = scratch / FILESYSTEM_DIR
            Extractor(self._source).materialize(handle, fs_root)

            parsed = parse_reference(image)
            image_ref = ImageReference(
                uri=image,
                filesystem_path=str(fs_root),
                image_metadata=self._metadata(handle),
                image_handle=handle,
                registry=parsed["registry"],
                repository=parsed["repository"],
                tag_or_digest=parsed["digest"] or parsed["tag"],
            )

            log.info(f"running {len(self._checks)} checks")
            aggregator = self._runner.collect(image_ref, self._checks)

            certification_hash = None
            if self._is_bundle:
                try:
                    certification_hash = bundle_hash(fs_root, self._artifacts)
                except OSError as e:
                    log.error("could not generate bundle hash", extra={"extra_fields": {"err": e}})

            return aggregator.finalize(certification_hash=certification_hash)

    def _metadata(self, handle: ImageHandle) -> ImageMetadata | None:
        try:
            return self._source.metadata(handle)
        except Exception as e:
            get_logger_with_context(__name__, image=handle.reference).warning(
                "could not read image metadata", extra={"extra_fields": {"err": e}}
            )
            return None
