"""Periodic prespeechstart signal, in sync with the classification ticks."""

from __future__ import annotations

from typing import Optional

from ..core.events import PreSpeechStartEvent
from .state import ClassificationState


class PreSpeechHeartbeat:
    """
    Emits prespeechstart every `prespeech_start_ms`, counted in ticks.

    The counter advances on every tick whatever the classification outcome,
    but the event is suppressed while a speech segment is open. When
    `prespeech_start_ms` is not a multiple of `tick_interval_ms` the event
    fires on the first tick past the window, so the cadence is approximate.
    """

    def __init__(self, tick_interval_ms: int, prespeech_start_ms: int):
        self._tick_interval_ms = tick_interval_ms
        self._prespeech_start_ms = prespeech_start_ms

    def tick(
        self,
        state: ClassificationState,
        volume: float,
        now_s: float,
    ) -> Optional[PreSpeechStartEvent]:
        state.prespeech_ticks += 1

        if state.prespeech_ticks * self._tick_interval_ms < self._prespeech_start_ms:
            return None

        event = None
        if not state.speech_active:
            event = PreSpeechStartEvent(
                volume=volume,
                timestamp_s=now_s,
                items=state.prespeech_ticks,
            )
        state.prespeech_ticks = 0
        return event
