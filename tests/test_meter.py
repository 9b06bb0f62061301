"""Tests for VolumeMeter smoothing and clip detection."""

import math

import numpy as np
import pytest

from speech_detection.audio.meter import VolumeMeter
from speech_detection.audio.types import MeterConfig


def generate_tone_block(amplitude=0.5, block_size=512, frequency=440, sample_rate=16000):
    """Generate a sine block with the given peak amplitude."""
    t = np.arange(block_size) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def generate_silence_block(block_size=512):
    return np.zeros(block_size, dtype=np.float32)


class TestVolumeSmoothing:
    """Fast attack, slow release."""

    @pytest.fixture
    def meter(self, clock):
        return VolumeMeter(cfg=MeterConfig(averaging=0.95), clock=clock)

    def test_initial_volume_is_zero(self, meter):
        assert meter.volume == 0.0
        assert meter.clipping is False

    def test_constant_block_rms(self, meter):
        meter.process_block(np.full(512, 0.5, dtype=np.float32))
        assert meter.volume == pytest.approx(0.5)

    def test_attack_is_immediate(self, meter):
        meter.process_block(generate_silence_block())
        meter.process_block(np.full(512, 0.25, dtype=np.float32))
        assert meter.volume == pytest.approx(0.25)

    def test_release_is_gradual(self, meter):
        meter.process_block(np.full(512, 0.4, dtype=np.float32))
        meter.process_block(generate_silence_block())
        assert meter.volume == pytest.approx(0.4 * 0.95)
        meter.process_block(generate_silence_block())
        assert meter.volume == pytest.approx(0.4 * 0.95 * 0.95)

    def test_volume_never_drops_faster_than_averaging(self, meter):
        rng = np.random.default_rng(7)
        for _ in range(200):
            previous = meter.volume
            block = rng.uniform(-1, 1, 512).astype(np.float32) * rng.uniform(0, 1)
            meter.process_block(block)
            assert meter.volume >= previous * 0.95
            assert meter.volume >= 0.0

    def test_tone_rms(self, meter):
        # exact number of periods: rms of a sine is amplitude / sqrt(2)
        meter.process_block(generate_tone_block(amplitude=0.5, block_size=1600, frequency=100))
        assert meter.volume == pytest.approx(0.5 / math.sqrt(2), rel=1e-3)

    def test_empty_block_counts_as_zero_rms(self, meter):
        meter.process_block(np.full(512, 0.2, dtype=np.float32))
        meter.process_block(np.array([], dtype=np.float32))
        assert meter.volume == pytest.approx(0.2 * 0.95)
        assert not math.isnan(meter.volume)

    def test_empty_block_on_fresh_meter(self, meter):
        meter.process_block([])
        assert meter.volume == 0.0

    def test_accepts_plain_sequences_and_2d_blocks(self, meter):
        meter.process_block([0.1, -0.1, 0.1, -0.1])
        assert meter.volume == pytest.approx(0.1)
        meter.process_block(np.full((512, 1), 0.3, dtype=np.float32))
        assert meter.volume == pytest.approx(0.3)


class TestClipping:
    """Clip indicator stays lit for clip_lag_ms after the last clipped sample."""

    @pytest.fixture
    def meter(self, clock):
        return VolumeMeter(cfg=MeterConfig(clip_level=0.98, clip_lag_ms=750), clock=clock)

    def test_clipped_sample_sets_clipping(self, meter):
        block = generate_silence_block()
        block[100] = -0.99
        meter.process_block(block)
        assert meter.clipping is True
        assert meter.check_clipping() is True

    def test_sample_at_clip_level_counts(self, meter):
        block = generate_silence_block()
        block[0] = 0.98
        meter.process_block(block)
        assert meter.check_clipping() is True

    def test_below_clip_level_does_not_clip(self, meter):
        meter.process_block(np.full(512, 0.9, dtype=np.float32))
        assert meter.check_clipping() is False

    def test_clipping_decays_after_lag(self, meter, clock):
        block = generate_silence_block()
        block[0] = 1.0
        meter.process_block(block)

        clock.advance_ms(500)
        assert meter.check_clipping() is True
        clock.advance_ms(250)
        assert meter.check_clipping() is True
        clock.advance_ms(1)
        assert meter.check_clipping() is False
        assert meter.clipping is False

    def test_new_clip_extends_indicator(self, meter, clock):
        block = generate_silence_block()
        block[0] = 1.0
        meter.process_block(block)
        clock.advance_ms(600)
        meter.process_block(block)
        clock.advance_ms(600)
        assert meter.check_clipping() is True
        clock.advance_ms(200)
        assert meter.check_clipping() is False

    def test_check_clipping_independent_of_clean_blocks(self, meter, clock):
        block = generate_silence_block()
        block[0] = 1.0
        meter.process_block(block)
        for _ in range(5):
            clock.advance_ms(100)
            meter.process_block(generate_silence_block())
        assert meter.check_clipping() is True


class TestShutdown:

    def test_blocks_ignored_after_shutdown(self, clock):
        meter = VolumeMeter(clock=clock)
        meter.process_block(np.full(512, 0.5, dtype=np.float32))
        meter.shutdown()
        meter.process_block(np.full(512, 0.9, dtype=np.float32))
        assert meter.is_closed
        assert meter.volume == pytest.approx(0.5)

    def test_reopen_accepts_blocks_again(self, clock):
        meter = VolumeMeter(clock=clock)
        meter.process_block(np.full(512, 0.5, dtype=np.float32))
        meter.shutdown()
        meter.reopen()
        meter.process_block(np.full(512, 0.9, dtype=np.float32))
        assert not meter.is_closed
        assert meter.volume == pytest.approx(0.9)
