"""Fixed-interval scheduling of the speech classifier."""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable, Iterable, Optional

from ..config.settings import DetectionConfig
from ..core.dispatcher import EventDispatcher
from ..core.events import EventKind, EventListener
from ..core.shutdown import GracefulShutdown, StopSignal
from ..core.worker import PeriodicWorker
from .classifier import SpeechClassifier, VolumeSource

logger = logging.getLogger(__name__)


class _TickWorker(PeriodicWorker):
    def __init__(
        self,
        stop_signal: StopSignal,
        interval_s: float,
        classifier: SpeechClassifier,
        predecessor: Optional[threading.Thread] = None,
    ):
        super().__init__(
            name="AudioDetectionThread",
            stop_signal=stop_signal,
            interval_s=interval_s,
        )
        self._classifier = classifier
        self._predecessor = predecessor

    def run(self) -> None:
        # ticks never overlap: wait until the previous worker has finished its last one
        if self._predecessor is not None:
            self._predecessor.join()
            self._predecessor = None
        super().run()

    def tick(self) -> None:
        self._classifier.tick()

    def cleanup(self) -> None:
        state = self._classifier.state
        logger.debug(
            f"Tick loop exited (mic={state.mic_state.name}, speech_active={state.speech_active}, "
            f"silence_ticks={state.silence_ticks}, signal_ticks={state.signal_ticks})"
        )


class AudioDetection:
    """
    Speech detection on top of a volume source.

    Emits, through its dispatcher:

     AUDIO SAMPLING:
       'signal'   -> volume is high, probably the user is speaking
       'silence'  -> volume is low, mic is on but there is no speech
       'mute'     -> volume is almost zero, mic is off

     MICROPHONE:
       'unmutedmic' -> mic passed from OFF to ON
       'mutedmic'   -> mic passed from ON to OFF

     RECORDING:
       'prespeechstart' -> speech prerecording START
       'speechstart'    -> speech START
       'speechstop'     -> speech STOP (segment looks like valid speech)
       'speechabort'    -> speech ABORTED (too short or too quiet)

    Ticks run on a dedicated thread, one every `tick_interval_ms`. `stop()`
    is cooperative: a tick already running completes (and may still emit),
    no further tick is scheduled. `start()` after `stop()` resumes with the
    same classification state; the new loop only ticks once the previous one
    has exited, even when the restart is requested from a listener.
    """

    def __init__(
        self,
        meter: VolumeSource,
        cfg: Optional[DetectionConfig] = None,
        dispatcher: Optional[EventDispatcher] = None,
        clock: Callable[[], float] = time.time,
        monotonic_clock: Callable[[], float] = time.monotonic,
    ):
        self._cfg = cfg or DetectionConfig()
        self._classifier = SpeechClassifier(
            cfg=self._cfg,
            meter=meter,
            dispatcher=dispatcher,
            clock=clock,
            monotonic_clock=monotonic_clock,
        )
        self._stop_signal: Optional[GracefulShutdown] = None
        self._worker: Optional[_TickWorker] = None
        self._lock = threading.Lock()

    @property
    def config(self) -> DetectionConfig:
        return self._cfg

    @property
    def classifier(self) -> SpeechClassifier:
        return self._classifier

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._classifier.dispatcher

    @property
    def is_running(self) -> bool:
        worker = self._worker
        return worker is not None and worker.is_alive() and not self._stop_signal.is_set()

    def subscribe(
        self,
        listener: EventListener,
        kinds: Optional[Iterable[EventKind]] = None,
    ) -> Callable[[], None]:
        return self._classifier.dispatcher.subscribe(listener, kinds)

    def start(self) -> None:
        """Start the polling loop. No-op if it is already running."""
        with self._lock:
            if self.is_running:
                logger.debug("AudioDetection already running")
                return
            # a stopping worker may still be finishing its last tick, possibly the
            # one calling us; the new worker joins it before its first tick
            previous = self._worker
            if previous is not None and not previous.is_alive():
                previous = None
            self._stop_signal = GracefulShutdown()
            self._worker = _TickWorker(
                stop_signal=self._stop_signal,
                interval_s=self._cfg.tick_interval_ms / 1000.0,
                classifier=self._classifier,
                predecessor=previous,
            )
            self._worker.start()
        logger.info(f"AudioDetection started (tick={self._cfg.tick_interval_ms}ms)")

    def stop(self) -> None:
        """Request the polling loop to stop after the current tick."""
        with self._lock:
            if self._stop_signal is None or self._stop_signal.is_set():
                return
            self._stop_signal.stop()
        logger.info("AudioDetection stop requested")

    def join(self, timeout: Optional[float] = None) -> None:
        worker = self._worker
        if worker is not None:
            worker.join(timeout)
