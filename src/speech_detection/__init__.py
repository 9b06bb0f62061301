"""Voice activity detection events from a live audio volume stream."""

from .audio import VolumeMeter, MeterConfig, AudioFormat
from .config import DetectionConfig, load_config
from .core import (
    DetectionEvent,
    EventDispatcher,
    EventKind,
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
from .detection import AudioDetection, MicState, SpeechClassifier

__version__ = "0.1.0"

__all__ = [
    "VolumeMeter",
    "MeterConfig",
    "AudioFormat",
    "DetectionConfig",
    "load_config",
    "DetectionEvent",
    "EventDispatcher",
    "EventKind",
    "MuteEvent",
    "MutedMicEvent",
    "PreSpeechStartEvent",
    "SignalEvent",
    "SilenceEvent",
    "SpeechAbortEvent",
    "SpeechStartEvent",
    "SpeechStopEvent",
    "UnmutedMicEvent",
    "AudioDetection",
    "MicState",
    "SpeechClassifier",
]
