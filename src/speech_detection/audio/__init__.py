"""Audio input: volume metering of raw blocks.

`Mic` lives in `speech_detection.audio.mic` and is imported explicitly, since
it needs the PortAudio runtime behind sounddevice.
"""

from .meter import VolumeMeter
from .types import AudioFormat, MeterConfig

__all__ = ["VolumeMeter", "AudioFormat", "MeterConfig"]
