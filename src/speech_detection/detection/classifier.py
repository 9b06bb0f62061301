"""Threshold-based speech segment classification."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Protocol

from ..config.settings import DetectionConfig
from ..core.dispatcher import EventDispatcher
from ..core.events import (
    DetectionEvent,
    MuteEvent,
    MutedMicEvent,
    SignalEvent,
    SilenceEvent,
    SpeechAbortEvent,
    SpeechStartEvent,
    SpeechStopEvent,
    UnmutedMicEvent,
)
from .heartbeat import PreSpeechHeartbeat
from .state import ClassificationState, MicState

logger = logging.getLogger(__name__)


class VolumeSource(Protocol):
    """Anything exposing the latest smoothed loudness, e.g. VolumeMeter."""
    volume: float


def classify_sample(
    state: ClassificationState,
    cfg: DetectionConfig,
    volume: float,
    now_s: float,
    mono_s: Optional[float] = None,
) -> List[DetectionEvent]:
    """
    Classify one loudness sample and advance the segment state machine.

        volume level
        0.0 .---->-.----->--.-------->--.-------->--.------> 1.0
                   ^        ^           ^           ^
                   |        |           |           |
                   mute     unmute      silence     speaking

    Returns the events to emit, in order: the sample event (mute, signal or
    silence) always comes first, then segment and microphone transitions.

    `now_s` stamps the events; segment durations are measured on `mono_s`,
    a monotonic reading taken at the same instant (defaults to `now_s`).
    """
    if mono_s is None:
        mono_s = now_s
    duration_ms = state.elapsed_ms(mono_s)

    if volume < cfg.mute_volume:
        return _mute(state, volume, now_s, duration_ms)
    if volume > cfg.speaking_min_volume:
        return _signal(state, volume, now_s, mono_s, duration_ms)
    return _silence(state, cfg, volume, now_s, duration_ms)


def _mute(state: ClassificationState, volume: float, now_s: float, duration_ms: int) -> List[DetectionEvent]:
    events: List[DetectionEvent] = [MuteEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms)]

    # mic is muted (closed), trigger on transition only
    if state.mic_state != MicState.MUTE:
        events.append(MutedMicEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms))
        state.mic_state = MicState.MUTE

    return events


def _signal(
    state: ClassificationState,
    volume: float,
    now_s: float,
    mono_s: float,
    duration_ms: int,
) -> List[DetectionEvent]:
    state.silence_ticks = 0
    state.signal_ticks += 1
    items = state.signal_ticks

    events: List[DetectionEvent] = [
        SignalEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items)
    ]

    if not state.speech_active:
        events.append(SpeechStartEvent(volume=volume, timestamp_s=now_s, duration_ms=0, items=items))
        state.speech_active = True
        state.speech_start_s = mono_s
        state.segment_volumes = []
        logger.info(f"Speech started (volume={volume:.4f})")

    state.segment_volumes.append(volume)

    # mic is unmuted (open), trigger on transition only
    if state.mic_state == MicState.MUTE:
        events.append(UnmutedMicEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items))
        state.mic_state = MicState.SIGNAL

    return events


def _silence(
    state: ClassificationState,
    cfg: DetectionConfig,
    volume: float,
    now_s: float,
    duration_ms: int,
) -> List[DetectionEvent]:
    state.signal_ticks = 0
    state.silence_ticks += 1
    items = state.silence_ticks

    events: List[DetectionEvent] = [
        SilenceEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items)
    ]

    if state.mic_state == MicState.MUTE:
        events.append(UnmutedMicEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items))
        state.mic_state = MicState.SILENCE

    # exact equality: a segment resolves once, on the tick that completes
    # the trailing silence run
    if state.speech_active and state.silence_ticks == cfg.max_silence_ticks:
        events.append(_resolve_segment(state, cfg, volume, now_s, duration_ms, items))
        state.speech_active = False

    return events


def _resolve_segment(
    state: ClassificationState,
    cfg: DetectionConfig,
    volume: float,
    now_s: float,
    duration_ms: int,
    items: int,
) -> DetectionEvent:
    signal_duration = duration_ms - cfg.max_interspeech_silence_ms
    average_volume = state.average_segment_volume()

    abort: Optional[str] = None
    if signal_duration < cfg.min_signal_duration_ms:
        abort = f"signal duration ({signal_duration}) < MIN ({cfg.min_signal_duration_ms})"
    elif average_volume < cfg.min_average_signal_volume:
        abort = f"signal average volume ({average_volume}) < MIN ({cfg.min_average_signal_volume})"

    if abort is not None:
        logger.info(f"Speech aborted: {abort}")
        return SpeechAbortEvent(
            volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items, abort=abort
        )

    logger.info(f"Speech stopped: {signal_duration}ms of signal, average volume {average_volume:.4f}")
    return SpeechStopEvent(volume=volume, timestamp_s=now_s, duration_ms=duration_ms, items=items)


class SpeechClassifier:
    """
    Polls the meter once per tick, classifies the loudness and dispatches events.

    The heartbeat runs first on every tick; classification is skipped
    entirely while recording is disabled.
    """

    def __init__(
        self,
        cfg: DetectionConfig,
        meter: VolumeSource,
        dispatcher: Optional[EventDispatcher] = None,
        clock: Callable[[], float] = time.time,
        monotonic_clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            cfg: Detection thresholds
            meter: Source of the smoothed volume
            dispatcher: Event dispatcher, a private one is created if omitted
            clock: Wall clock for event timestamps, in seconds
            monotonic_clock: Clock for segment durations, in seconds
        """
        self._cfg = cfg
        self._meter = meter
        self._dispatcher = dispatcher or EventDispatcher()
        self._clock = clock
        self._monotonic_clock = monotonic_clock
        self._heartbeat = PreSpeechHeartbeat(
            tick_interval_ms=cfg.tick_interval_ms,
            prespeech_start_ms=cfg.prespeech_start_ms,
        )
        self.state = ClassificationState()

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    @property
    def mic_state(self) -> MicState:
        return self.state.mic_state

    @property
    def speech_active(self) -> bool:
        return self.state.speech_active

    def tick(self) -> List[DetectionEvent]:
        """Run one polling step and return the events it dispatched."""
        volume = self._meter.volume
        now_s = self._clock()
        mono_s = self._monotonic_clock()

        events: List[DetectionEvent] = []
        heartbeat = self._heartbeat.tick(self.state, volume, now_s)
        if heartbeat is not None:
            events.append(heartbeat)

        # recording can be suspended, e.g. while the system plays audio on loudspeakers
        if self._cfg.recording_enabled:
            events.extend(classify_sample(self.state, self._cfg, volume, now_s, mono_s))

        for event in events:
            logger.debug(f"{event.kind.value}: {event}")
            self._dispatcher.emit(event)

        return events
