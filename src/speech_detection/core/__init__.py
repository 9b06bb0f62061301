from .shutdown import GracefulShutdown, StopSignal
from .worker import PeriodicWorker
from .dispatcher import EventDispatcher
from .events import (
    DetectionEvent,
    EventKind,
    EventListener,
    MuteEvent,
    MutedMicEvent,
    PreSpeechStartEvent,
    SignalEvent,
    SilenceEvent,
    SpeechAbortEvent,
    SpeechStartEvent,
    SpeechStopEvent,
    UnmutedMicEvent,
)

__all__ = [
    "GracefulShutdown",
    "StopSignal",
    "PeriodicWorker",
    "EventDispatcher",
    "DetectionEvent",
    "EventKind",
    "EventListener",
    "MuteEvent",
    "MutedMicEvent",
    "PreSpeechStartEvent",
    "SignalEvent",
    "SilenceEvent",
    "SpeechAbortEvent",
    "SpeechStartEvent",
    "SpeechStopEvent",
    "UnmutedMicEvent",
]
