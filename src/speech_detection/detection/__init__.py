"""Speech detection: loudness classification, segment tracking, scheduling."""

from .state import ClassificationState, MicState
from .heartbeat import PreSpeechHeartbeat
from .classifier import SpeechClassifier, VolumeSource, classify_sample
from .detector import AudioDetection

__all__ = [
    "ClassificationState",
    "MicState",
    "PreSpeechHeartbeat",
    "SpeechClassifier",
    "VolumeSource",
    "classify_sample",
    "AudioDetection",
]
