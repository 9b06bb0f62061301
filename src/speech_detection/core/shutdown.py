"""Cooperative stop signal shared by worker threads."""

import threading
from typing import Protocol


class StopSignal(Protocol):
    def is_set(self) -> bool: ...

    def wait(self, timeout: float) -> bool: ...


class GracefulShutdown:
    def __init__(self):
        self.stop_event = threading.Event()

    def stop(self):
        self.stop_event.set()

    def is_set(self):
        return self.stop_event.is_set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to `timeout` seconds; True if stop was requested meanwhile."""
        return self.stop_event.wait(timeout)
