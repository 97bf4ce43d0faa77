"""Sequential check execution and result aggregation."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Iterable

from cert_preflight.checks.base import Check
from cert_preflight.models.check import CheckLevel, Outcome, Result, Results
from cert_preflight.models.image import ImageReference
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)


class ResultAggregator:
    """Collects check results into passed, failed and errored buckets.

    The overall verdict is computed once, by ``finalize``; the aggregator
    refuses further results after that.
    """

    def __init__(self, tested_image: str) -> None:
        self.tested_image = tested_image
        self._passed: list[Result] = []
        self._failed: list[Result] = []
        self._errored: list[Result] = []
        self._finalized = False

    def add_passed(self, result: Result) -> None:
        self._bucket(self._passed).append(result)

    def add_failed(self, result: Result) -> None:
        self._bucket(self._failed).append(result)

    def add_errored(self, result: Result) -> None:
        self._bucket(self._errored).append(result)

    def add(self, outcome: Outcome, result: Result) -> None:
        """Add a result to the bucket for outcome."""
        {
            Outcome.PASSED: self.add_passed,
            Outcome.FAILED: self.add_failed,
            Outcome.ERRORED: self.add_errored,
        }[outcome](result)

    def finalize(self, certification_hash: str | None = None) -> Results:
        """Compute the overall verdict and freeze the results.

        Raises:
            RuntimeError: If called twice
        """
        if self._finalized:
            raise RuntimeError("results have already been finalized")
        self._finalized = True
        return Results(
            tested_image=self.tested_image,
            passed=list(self._passed),
            failed=list(self._failed),
            errored=list(self._errored),
            passed_overall=not self._failed and not self._errored,
            certification_hash=certification_hash,
        )

    def _bucket(self, bucket: list[Result]) -> list[Result]:
        if self._finalized:
            raise RuntimeError("cannot add results after finalize")
        return bucket


class CheckRunner:
    """Runs checks one after another and classifies each outcome.

    A check that raises is recorded as errored and the run continues with
    the next check. Non-boolean return values are judged by truthiness.

    Example:
        runner = CheckRunner()
        results = runner.run(image_ref, [HasLicenseCheck(), RunAsNonRootCheck()])
        print(results.passed_overall)
    """

    def run(self, image_ref: ImageReference, checks: Iterable[Check]) -> Results:
        """Run checks in order against image_ref.

        Returns:
            Finalized results holding every check exactly once
        """
        return self.collect(image_ref, checks).finalize()

    def collect(self, image_ref: ImageReference, checks: Iterable[Check]) -> ResultAggregator:
        """Run checks in order, leaving the aggregator open for finalize."""
        aggregator = ResultAggregator(image_ref.uri)
        for check in checks:
            outcome, result = self.run_check(image_ref, check)
            aggregator.add(outcome, result)
        return aggregator

    def run_check(self, image_ref: ImageReference, check: Check) -> tuple[Outcome, Result]:
        """Run a single check and classify it."""
        if check.metadata.level == CheckLevel.OPTIONAL:
            logger.info(
                f"check {check.name} is not currently being enforced",
                extra={"extra_fields": {"check": check.name}},
            )

        start = time.perf_counter()
        error: Exception | None = None
        passed = False
        try:
            passed = bool(check.validate(image_ref))
        except Exception as e:
            error = e
        elapsed = timedelta(seconds=time.perf_counter() - start)

        fields: dict[str, object] = {"elapsed": f"{elapsed.total_seconds():.3f}s"}
        if error is not None:
            outcome = Outcome.ERRORED
            result = Result(check=check, elapsed=elapsed, error=str(error) or type(error).__name__)
            fields["err"] = result.error
            logger.debug("check raised", exc_info=error)
        elif passed:
            outcome = Outcome.PASSED
            result = Result(check=check, elapsed=elapsed)
        else:
            outcome = Outcome.FAILED
            result = Result(check=check, elapsed=elapsed)

        fields["result"] = outcome.value
        logger.info(f"check completed: {check.name}", extra={"extra_fields": fields})
        return outcome, result
