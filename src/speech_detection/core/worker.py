"""Reusable worker thread utilities."""

from __future__ import annotations

import logging
import threading

from .shutdown import StopSignal

logger = logging.getLogger(__name__)


class PeriodicWorker(threading.Thread):
    """
    Base class for a fixed-delay polling worker thread.

    Each iteration sleeps `interval_s` on the stop signal, then runs `tick()`.
    Stop is cooperative: a tick already in flight always runs to completion,
    stop only prevents the next one from being scheduled.
    Subclasses only implement `tick()`.
    """

    def __init__(
        self,
        *,
        name: str,
        stop_signal: StopSignal,
        interval_s: float,
        daemon: bool = True,
    ):
        super().__init__(name=name, daemon=daemon)
        self._stop_signal = stop_signal
        self._interval_s = interval_s

    def run(self) -> None:
        logger.debug(f"{self.name}: started (interval={self._interval_s:.3f}s)")
        try:
            while not self._stop_signal.is_set():
                if self._stop_signal.wait(self._interval_s):
                    break
                self.tick()
        finally:
            self.cleanup()
            logger.debug(f"{self.name}: stopped")

    def tick(self) -> None:
        raise NotImplementedError

    def cleanup(self) -> None:
        """Hook called once when the loop exits."""
