"""Command line entry point: print speech detection events from the microphone."""

import argparse
import time
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError

from .config.settings import create_example_env_file, load_config, setup_logging
from .core.events import DetectionEvent, EventKind

SAMPLE_KINDS = {EventKind.MUTE, EventKind.SILENCE, EventKind.SIGNAL}


def format_event(event: DetectionEvent) -> str:
    fields = ", ".join(
        f"{name}={value:.4f}" if isinstance(value, float) else f"{name}={value}"
        for name, value in vars(event).items()
        if value is not None
    )
    return f"{event.kind.value:<15} {fields}"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Voice activity detection on the default microphone")
    parser.add_argument("--config", type=str, help="Path to config file", default=".env")
    parser.add_argument("--create-config", action="store_true", help="Create example config file")
    parser.add_argument(
        "--samples",
        action="store_true",
        help="Also print per-tick mute/silence/signal events",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    if args.create_config:
        create_example_env_file()
        print("Example configuration file created at .env.example")
        print("Copy it to .env and adjust the thresholds for your microphone.")
        return 0

    try:
        config = load_config(Path(args.config) if args.config else None)
    except (ValidationError, ValueError) as e:
        print(f"Configuration error: {e}")
        return 1

    setup_logging(config.log_level)

    # sounddevice needs PortAudio, only load it once we are going to record
    from .pipeline import connect_audio_detection

    pipeline = connect_audio_detection(config)
    kinds = None if args.samples else [kind for kind in EventKind if kind not in SAMPLE_KINDS]
    pipeline.subscribe(lambda event: print(format_event(event), flush=True), kinds)

    pipeline.start()
    try:
        while True:
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    finally:
        pipeline.stop()
        pipeline.join(timeout=2.0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
