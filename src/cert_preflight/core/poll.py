"""Bounded readiness polling.

A probe is a zero-argument callable returning ``(value, ready)``. It is
called on a background thread until it reports ready, raises, or the
caller's timeout expires. On timeout the background thread is told to stop
and exits after the probe call in flight returns.
"""

from __future__ import annotations

import queue
import threading
import time
from typing import Any, Callable, Tuple

from cert_preflight.models.operator import ReadinessOutcome
from cert_preflight.utils.errors import PollTimeoutError, ProbeError
from cert_preflight.utils.logging import get_logger

logger = get_logger(__name__)

Probe = Callable[[], Tuple[Any, bool]]

DEFAULT_INTERVAL = 2.0


class ReadinessPoller:
    """Waits for a probe to report ready within a timeout.

    Every call to ``wait`` owns its own deadline, result queue and
    cancellation event, so one poller can be reused.

    Example:
        poller = ReadinessPoller(timeout=180, interval=2)
        csv_name = poller.wait(lambda: (name, bool(name)))
    """

    def __init__(self, timeout: float, interval: float = DEFAULT_INTERVAL, name: str = "readiness") -> None:
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.timeout = timeout
        self.interval = interval
        self.name = name

    def wait(self, probe: Probe) -> Any:
        """Poll until the probe is ready.

        Returns:
            The value reported together with ``ready=True``

        Raises:
            PollTimeoutError: If the timeout expires first
            ProbeError: If the probe raises
        """
        results: queue.Queue[ReadinessOutcome[Any]] = queue.Queue(maxsize=1)
        cancel = threading.Event()

        worker = threading.Thread(
            target=self._loop,
            args=(probe, results, cancel),
            name=f"poll-{self.name}",
            daemon=True,
        )
        started = time.monotonic()
        worker.start()

        try:
            outcome = results.get(timeout=self.timeout)
        except queue.Empty:
            cancel.set()
            logger.debug(
                "readiness poll timed out",
                extra={"extra_fields": {"poll": self.name, "timeout": self.timeout}},
            )
            raise PollTimeoutError(
                f"timed out waiting for {self.name} after {self.timeout}s",
                timeout=self.timeout,
            ) from None

        if not outcome.ok:
            error = outcome.error
            raise ProbeError(f"{self.name} probe failed: {error}") from error

        logger.debug(
            "readiness poll finished",
            extra={"extra_fields": {"poll": self.name, "elapsed": f"{time.monotonic() - started:.3f}s"}},
        )
        return outcome.value

    def _loop(
        self,
        probe: Probe,
        results: "queue.Queue[ReadinessOutcome[Any]]",
        cancel: threading.Event,
    ) -> None:
        while not cancel.is_set():
            try:
                value, ready = probe()
            except Exception as e:
                self._publish(results, ReadinessOutcome.failed(e))
                return

            if ready:
                self._publish(results, ReadinessOutcome.ready(value))
                return

            if cancel.wait(self.interval):
                return

    @staticmethod
    def _publish(results: "queue.Queue[ReadinessOutcome[Any]]", outcome: ReadinessOutcome[Any]) -> None:
        # Nobody reads the queue after a timeout; the slot is never contended
        try:
            results.put_nowait(outcome)
        except queue.Full:
            pass


def wait_until_ready(probe: Probe, timeout: float, interval: float = DEFAULT_INTERVAL, name: str = "readiness") -> Any:
    """Poll a probe once with a fresh poller. See ReadinessPoller.wait."""
    return ReadinessPoller(timeout=timeout, interval=interval, name=name).wait(probe)
