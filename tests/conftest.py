import sys
from unittest.mock import MagicMock

import pytest

try:
    import sounddevice  # noqa: F401
except OSError:
    # no PortAudio on this machine; Mic tests patch sd.InputStream, a mock module is enough
    sys.modules["sounddevice"] = MagicMock()


from speech_detection.config.settings import DetectionConfig
from speech_detection.core.dispatcher import EventDispatcher
from speech_detection.detection.classifier import SpeechClassifier


class FakeClock:
    """Manually advanced clock, in seconds."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


class StubMeter:
    """Stands in for VolumeMeter: the test sets the volume directly."""

    def __init__(self, volume: float = 0.0):
        self.volume = volume


class Recorder:
    """Collects every dispatched event."""

    def __init__(self):
        self.events = []

    def __call__(self, event):
        self.events.append(event)

    def kinds(self):
        return [e.kind.value for e in self.events]

    def of(self, kind):
        return [e for e in self.events if e.kind.value == kind]

    def clear(self):
        self.events.clear()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    """Separate wall clock for tests that step it independently of `clock`."""
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def meter():
    return StubMeter()


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def config():
    """Thresholds used across classifier tests: 10 silence ticks close a segment."""
    return DetectionConfig(
        tick_interval_ms=100,
        prespeech_start_ms=600,
        mute_volume=0.01,
        speaking_min_volume=0.3,
        max_interspeech_silence_ms=1000,
        min_signal_duration_ms=300,
        min_average_signal_volume=0.4,
    )


@pytest.fixture
def make_classifier(clock, meter, recorder):
    def factory(cfg: DetectionConfig) -> SpeechClassifier:
        dispatcher = EventDispatcher()
        dispatcher.subscribe(recorder)
        return SpeechClassifier(
            cfg=cfg, meter=meter, dispatcher=dispatcher, clock=clock, monotonic_clock=clock
        )

    return factory


@pytest.fixture
def classifier(make_classifier, config):
    return make_classifier(config)


@pytest.fixture
def run_ticks(clock, meter):
    """Advance the clock by one tick and classify each volume in turn."""

    def run(classifier: SpeechClassifier, volumes, tick_ms: int = 100) -> None:
        for volume in volumes:
            clock.advance_ms(tick_ms)
            meter.volume = volume
            classifier.tick()

    return run
