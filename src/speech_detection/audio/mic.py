"""Microphone audio capture feeding the volume meter."""

from __future__ import annotations

import threading
import time
import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from ..core.shutdown import StopSignal

from .meter import VolumeMeter
from .types import AudioFormat

logger = logging.getLogger(__name__)


class Mic(threading.Thread):
    """
    Opens a sounddevice input stream and pushes every block into the meter.

    Important: the callback runs at audio-hardware rate; keep it lightweight
    (no queues, no classification here).
    """

    def __init__(
        self,
        stop_signal: StopSignal,
        audio_format: AudioFormat,
        meter: VolumeMeter,
        device: Optional[int] = None,
    ):
        super().__init__(name="MicThread", daemon=True)
        self._stop_signal = stop_signal
        self._audio_format = audio_format
        self._meter = meter
        self._device = device

    def run(self) -> None:
        """Start microphone capture loop."""
        dtype_map = {
            "float32": np.float32,
            "int16": np.int16,
            "int32": np.int32,
        }
        dtype = dtype_map.get(self._audio_format.dtype, np.float32)
        scale = float(np.iinfo(dtype).max) if dtype is not np.float32 else 1.0

        def audio_callback(indata, frames, time_info, status):
            """Callback function for sounddevice audio stream."""
            if status:
                logger.warning(f"Audio callback status: {status}")

            # indata shape is (frames, channels), only the first channel is measured
            if indata.ndim > 1 and indata.shape[1] > 0:
                pcm = indata[:, 0]
            else:
                pcm = indata.reshape(-1)

            if scale != 1.0:
                pcm = pcm.astype(np.float32) / scale

            self._meter.process_block(pcm)

        try:
            with sd.InputStream(
                callback=audio_callback,
                samplerate=self._audio_format.sample_rate,
                channels=self._audio_format.channels,
                blocksize=self._audio_format.block_size,
                dtype=dtype,
                device=self._device,
            ):
                logger.info(
                    f"Microphone capture started (device={self._device}, "
                    f"rate={self._audio_format.sample_rate}, block={self._audio_format.block_size})"
                )
                while not self._stop_signal.is_set():
                    time.sleep(0.1)
        except Exception as e:
            logger.error(f"Error in microphone capture: {e}", exc_info=True)
        finally:
            self._meter.shutdown()
            logger.info("Microphone capture stopped")
