"""Mutable state of the speech classification loop."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List


class MicState(Enum):
    """Last reported microphone-level classification."""
    MUTE = auto()       # mic is off (volume ~0)
    SILENCE = auto()    # mic is on, background noise only
    SIGNAL = auto()     # mic is on, probably speech


@dataclass
class ClassificationState:
    """
    Single-writer state owned by the polling loop.

    `silence_ticks` and `signal_ticks` are run lengths: each one is reset
    whenever the other increments. `speech_start_s` and `segment_volumes`
    describe the open segment and are only meaningful while `speech_active`.
    `speech_start_s` is a monotonic clock reading, not a wall timestamp.
    """
    mic_state: MicState = MicState.SILENCE
    speech_active: bool = False
    silence_ticks: int = 0
    signal_ticks: int = 0
    speech_start_s: float = 0.0
    segment_volumes: List[float] = field(default_factory=list)
    prespeech_ticks: int = 0

    def elapsed_ms(self, mono_s: float) -> int:
        """Milliseconds since the open segment started, 0 when none is open."""
        if not self.speech_active:
            return 0
        return int(round((mono_s - self.speech_start_s) * 1000.0))

    def average_segment_volume(self) -> float:
        if not self.segment_volumes:
            return 0.0
        return sum(self.segment_volumes) / len(self.segment_volumes)
