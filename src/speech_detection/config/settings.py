import math
import os
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, model_validator
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class DetectionConfig(BaseModel):
    # classifier / scheduler
    tick_interval_ms: int = Field(default=50, gt=0, description="Polling interval of the classification loop")
    prespeech_start_ms: int = Field(default=600, gt=0, description="Cadence of the prespeechstart heartbeat, ideally a multiple of tick_interval_ms")
    speaking_min_volume: float = Field(default=0.02, ge=0.0, description="Volume above which a sample is classified as signal")
    silence_volume: float = Field(default=0.001, ge=0.0, description="Documented silence level; silence is anything between mute and signal")
    mute_volume: float = Field(default=0.0001, ge=0.0, description="Volume below which the mic is considered muted")
    recording_enabled: bool = Field(default=True, description="When False only the heartbeat runs, no classification events are emitted")
    max_interspeech_silence_ms: int = Field(default=600, gt=0, description="Trailing silence that closes a speech segment")
    min_signal_duration_ms: int = Field(default=400, ge=0, description="Shorter segments are aborted")
    min_average_signal_volume: float = Field(default=0.04, ge=0.0, description="Quieter segments are aborted")
    # volume meter
    clip_level: float = Field(default=0.98, gt=0.0, le=1.0, description="Absolute sample level considered clipping")
    averaging: float = Field(default=0.95, ge=0.0, lt=1.0, description="Release factor applied to the previous volume per block")
    clip_lag_ms: int = Field(default=750, ge=0, description="How long the clipping indicator stays lit after the last clipped sample")
    # audio source
    block_size: int = Field(default=512, gt=0, description="Samples per audio block fed to the meter")
    sample_rate: int = Field(default=16000, gt=0, description="Microphone sample rate")
    input_device: Optional[int] = Field(default=None, description="sounddevice input device index, None for the default device")
    log_level: str = Field(default="INFO", description="Logging level")

    model_config = ConfigDict(frozen=True)

    @property
    def max_silence_ticks(self) -> int:
        """Number of consecutive silence ticks that resolves an open segment."""
        return round_half_up(self.max_interspeech_silence_ms / self.tick_interval_ms)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "DetectionConfig":
        if self.mute_volume >= self.speaking_min_volume:
            raise ValueError(
                f"mute_volume ({self.mute_volume}) must be lower than "
                f"speaking_min_volume ({self.speaking_min_volume})"
            )
        if self.max_silence_ticks < 1:
            raise ValueError(
                f"max_interspeech_silence_ms ({self.max_interspeech_silence_ms}) rounds to zero ticks "
                f"at tick_interval_ms={self.tick_interval_ms}"
            )
        if self.prespeech_start_ms % self.tick_interval_ms:
            logger.warning(
                f"prespeech_start_ms ({self.prespeech_start_ms}) is not a multiple of "
                f"tick_interval_ms ({self.tick_interval_ms}); heartbeat cadence will drift"
            )
        return self


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


def _env_optional_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


def load_config(config_path: Optional[Path] = None) -> DetectionConfig:
    if config_path is None:
        config_path = Path(".env")

    if config_path.exists():
        load_dotenv(config_path)
        logger.info(f"Loaded environment variables from {config_path}")
    else:
        logger.warning(f"Config file {config_path} not found, using environment variables only")

    try:
        return DetectionConfig(
            tick_interval_ms=int(os.getenv("TICK_INTERVAL_MS", "50")),
            prespeech_start_ms=int(os.getenv("PRESPEECH_START_MS", "600")),
            speaking_min_volume=float(os.getenv("SPEAKING_MIN_VOLUME", "0.02")),
            silence_volume=float(os.getenv("SILENCE_VOLUME", "0.001")),
            mute_volume=float(os.getenv("MUTE_VOLUME", "0.0001")),
            recording_enabled=_env_bool("RECORDING_ENABLED", "true"),
            max_interspeech_silence_ms=int(os.getenv("MAX_INTERSPEECH_SILENCE_MS", "600")),
            min_signal_duration_ms=int(os.getenv("MIN_SIGNAL_DURATION_MS", "400")),
            min_average_signal_volume=float(os.getenv("MIN_AVERAGE_SIGNAL_VOLUME", "0.04")),
            clip_level=float(os.getenv("CLIP_LEVEL", "0.98")),
            averaging=float(os.getenv("AVERAGING", "0.95")),
            clip_lag_ms=int(os.getenv("CLIP_LAG_MS", "750")),
            block_size=int(os.getenv("BLOCK_SIZE", "512")),
            sample_rate=int(os.getenv("SAMPLE_RATE", "16000")),
            input_device=_env_optional_int("INPUT_DEVICE"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

def create_example_env_file(path: Path = Path(".env.example")):
    example_content = """# Polling interval of the classification loop (ms)
TICK_INTERVAL_MS=50

# prespeechstart heartbeat cadence (ms), ideally a multiple of TICK_INTERVAL_MS
PRESPEECH_START_MS=600

# Volume thresholds: mute < silence < speaking
SPEAKING_MIN_VOLUME=0.02
SILENCE_VOLUME=0.001
MUTE_VOLUME=0.0001

# When false only the heartbeat runs (e.g. while playing audio on loudspeakers)
RECORDING_ENABLED=true

# Speech segment resolution
MAX_INTERSPEECH_SILENCE_MS=600
MIN_SIGNAL_DURATION_MS=400
MIN_AVERAGE_SIGNAL_VOLUME=0.04

# Volume meter
CLIP_LEVEL=0.98
AVERAGING=0.95
CLIP_LAG_MS=750

# Audio source
BLOCK_SIZE=512
SAMPLE_RATE=16000
# INPUT_DEVICE=

# Logging level
LOG_LEVEL=INFO
"""

    with open(path, "w") as f:
        f.write(example_content)

    logger.info(f"Created example environment file at {path}")

def setup_logging(log_level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
