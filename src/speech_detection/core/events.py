"""Typed events emitted by the speech detector."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Optional, Union


class EventKind(str, Enum):
    # audio sampling
    MUTE = "mute"
    SILENCE = "silence"
    SIGNAL = "signal"
    # microphone
    MUTED_MIC = "mutedmic"
    UNMUTED_MIC = "unmutedmic"
    # recording
    PRE_SPEECH_START = "prespeechstart"
    SPEECH_START = "speechstart"
    SPEECH_STOP = "speechstop"
    SPEECH_ABORT = "speechabort"


@dataclass(frozen=True)
class MuteEvent:
    """Volume is almost zero: the mic is off."""
    kind: ClassVar[EventKind] = EventKind.MUTE
    volume: float
    timestamp_s: float
    duration_ms: int


@dataclass(frozen=True)
class MutedMicEvent:
    """Microphone passed from ON to OFF."""
    kind: ClassVar[EventKind] = EventKind.MUTED_MIC
    volume: float
    timestamp_s: float
    duration_ms: int


@dataclass(frozen=True)
class SignalEvent:
    """Volume is high: probably the user is speaking."""
    kind: ClassVar[EventKind] = EventKind.SIGNAL
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int


@dataclass(frozen=True)
class SilenceEvent:
    """Mic is on but the level is only background noise."""
    kind: ClassVar[EventKind] = EventKind.SILENCE
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int
    abort: Optional[str] = None


@dataclass(frozen=True)
class UnmutedMicEvent:
    """Microphone passed from OFF to ON."""
    kind: ClassVar[EventKind] = EventKind.UNMUTED_MIC
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int


@dataclass(frozen=True)
class SpeechStartEvent:
    kind: ClassVar[EventKind] = EventKind.SPEECH_START
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int


@dataclass(frozen=True)
class SpeechStopEvent:
    """Segment accepted as a valid speech."""
    kind: ClassVar[EventKind] = EventKind.SPEECH_STOP
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int


@dataclass(frozen=True)
class SpeechAbortEvent:
    """Segment discarded: too short or too quiet. `abort` holds the reason."""
    kind: ClassVar[EventKind] = EventKind.SPEECH_ABORT
    volume: float
    timestamp_s: float
    duration_ms: int
    items: int
    abort: str


@dataclass(frozen=True)
class PreSpeechStartEvent:
    """Periodic heartbeat while no speech segment is open."""
    kind: ClassVar[EventKind] = EventKind.PRE_SPEECH_START
    volume: float
    timestamp_s: float
    items: int


# Type alias for everything the detector can emit
DetectionEvent = Union[
    MuteEvent,
    MutedMicEvent,
    SignalEvent,
    SilenceEvent,
    UnmutedMicEvent,
    SpeechStartEvent,
    SpeechStopEvent,
    SpeechAbortEvent,
    PreSpeechStartEvent,
]

EventListener = Callable[[DetectionEvent], None]
