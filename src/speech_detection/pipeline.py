"""Microphone -> volume meter -> speech detection wiring."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, Optional

from .audio.meter import VolumeMeter
from .audio.mic import Mic
from .audio.types import AudioFormat, MeterConfig
from .config.settings import DetectionConfig
from .core.dispatcher import EventDispatcher
from .core.events import EventKind, EventListener
from .core.shutdown import GracefulShutdown
from .detection.detector import AudioDetection

logger = logging.getLogger(__name__)


class SpeechDetectionPipeline:
    """
    Speech detection subsystem facade.

    Responsibilities:
    - Microphone capture feeding the volume meter (Mic thread, audio rate)
    - Loudness classification and event emission (AudioDetection thread, tick rate)

    The two threads share nothing but the meter's latest volume. The pipeline
    can be stopped and started again: each start opens a new microphone
    stream, while the meter level and the classification state carry over.
    """

    def __init__(
        self,
        cfg: Optional[DetectionConfig] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ):
        self._cfg = cfg or DetectionConfig()
        self._shutdown_signal = GracefulShutdown()
        self._lock = threading.Lock()

        self.meter = VolumeMeter(
            cfg=MeterConfig(
                clip_level=self._cfg.clip_level,
                averaging=self._cfg.averaging,
                clip_lag_ms=self._cfg.clip_lag_ms,
            )
        )
        self.mic = self._create_mic()
        self.detection = AudioDetection(
            meter=self.meter,
            cfg=self._cfg,
            dispatcher=dispatcher,
        )

    @property
    def config(self) -> DetectionConfig:
        return self._cfg

    def subscribe(
        self,
        listener: EventListener,
        kinds: Optional[Iterable[EventKind]] = None,
    ) -> Callable[[], None]:
        return self.detection.subscribe(listener, kinds)

    def _create_mic(self) -> Mic:
        return Mic(
            stop_signal=self._shutdown_signal,
            audio_format=AudioFormat(
                sample_rate=self._cfg.sample_rate,
                block_size=self._cfg.block_size,
            ),
            meter=self.meter,
            device=self._cfg.input_device,
        )

    def start(self) -> None:
        """Start microphone capture and the detection loop. No-op if already capturing."""
        with self._lock:
            if self.mic.is_alive() and not self._shutdown_signal.is_set():
                logger.debug("Speech detection pipeline already running")
                return
            if self.mic.ident is not None:
                # a Thread runs once; the previous mic shuts the meter down on exit
                self.mic.join()
                self._shutdown_signal = GracefulShutdown()
                self.meter.reopen()
                self.mic = self._create_mic()
            self.mic.start()
        self.detection.start()

    def stop(self) -> None:
        """Stop detection first, then release the microphone."""
        self.detection.stop()
        with self._lock:
            self._shutdown_signal.stop()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for both threads to finish."""
        self.detection.join(timeout)
        self.mic.join(timeout)


def connect_audio_detection(
    cfg: Optional[DetectionConfig] = None,
    dispatcher: Optional[EventDispatcher] = None,
) -> SpeechDetectionPipeline:
    """Build a microphone-backed detector; call `start()` on the result to run it."""
    pipeline = SpeechDetectionPipeline(cfg=cfg, dispatcher=dispatcher)
    logger.debug(f"Speech detection pipeline created: {pipeline.config}")
    return pipeline
