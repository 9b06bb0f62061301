"""RMS volume meter with fast-attack / slow-release smoothing and clip detection."""

from __future__ import annotations

import logging
import time
from typing import Callable

import numpy as np

from .types import MeterConfig

logger = logging.getLogger(__name__)


class VolumeMeter:
    """
    Turns raw audio blocks into a smoothed loudness value.

    `process_block` runs in the audio callback thread; `volume` and
    `check_clipping()` are read from the polling thread. Both attributes are
    plain floats/bools rebound once per block, so readers always see a
    complete, non-negative value.
    """

    def __init__(
        self,
        cfg: MeterConfig = MeterConfig(),
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            cfg: Clip level, averaging factor and clip lag
            clock: Monotonic time source in seconds
        """
        self._cfg = cfg
        self._clock = clock
        self._clip_lag_s = cfg.clip_lag_ms / 1000.0
        self._closed = False

        self.volume = 0.0
        self.clipping = False
        self.last_clip = 0.0

    @property
    def config(self) -> MeterConfig:
        return self._cfg

    def process_block(self, samples) -> None:
        """
        Update the volume from one block of float samples in [-1, 1].

        An empty block counts as zero RMS.
        """
        if self._closed:
            return

        pcm = np.asarray(samples, dtype=np.float64).reshape(-1)
        n = pcm.size

        if n == 0:
            rms = 0.0
        else:
            if float(np.max(np.abs(pcm))) >= self._cfg.clip_level:
                self.clipping = True
                self.last_clip = self._clock()
            rms = float(np.sqrt(np.dot(pcm, pcm) / n))

        # fast attack, slow release
        self.volume = max(rms, self.volume * self._cfg.averaging)

    def check_clipping(self) -> bool:
        """True while a clipped sample was seen within the last clip_lag_ms."""
        if not self.clipping:
            return False
        if self._clock() > self.last_clip + self._clip_lag_s:
            self.clipping = False
        return self.clipping

    def shutdown(self) -> None:
        """Detach from the audio source: further blocks are ignored."""
        self._closed = True
        logger.debug("VolumeMeter shut down")

    def reopen(self) -> None:
        """Accept blocks again after `shutdown()`; the smoothed volume carries over."""
        self._closed = False
        logger.debug("VolumeMeter reopened")

    @property
    def is_closed(self) -> bool:
        return self._closed
