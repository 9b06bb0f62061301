"""Audio input data types and configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioFormat:
    """Audio format specification."""
    sample_rate: int = 16000
    channels: int = 1
    dtype: str = "float32"  # sounddevice dtype name
    block_size: int = 512   # samples per block pushed to the meter


@dataclass(frozen=True)
class MeterConfig:
    """Volume meter smoothing and clip detection configuration."""
    clip_level: float = 0.98
    averaging: float = 0.95
    clip_lag_ms: int = 750
