"""Synchronous fan-out of detection events to registered listeners."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional

from .events import DetectionEvent, EventKind, EventListener

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class _Subscription:
    listener: EventListener
    kinds: Optional[FrozenSet[EventKind]]

    def accepts(self, event: DetectionEvent) -> bool:
        return self.kinds is None or event.kind in self.kinds


class EventDispatcher:
    """
    Delivers each emitted event to every matching listener, in the emitting thread.

    Fire-and-forget: no acknowledgment, no backpressure. A failing listener is
    logged and does not prevent delivery to the others.
    """

    def __init__(self):
        self._subscriptions: List[_Subscription] = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        listener: EventListener,
        kinds: Optional[Iterable[EventKind]] = None,
    ) -> Callable[[], None]:
        """
        Register `listener` for all events, or only for `kinds` when given.

        Returns:
            A callable that removes this subscription.
        """
        subscription = _Subscription(
            listener=listener,
            kinds=frozenset(EventKind(k) for k in kinds) if kinds is not None else None,
        )
        with self._lock:
            self._subscriptions.append(subscription)

        def unsubscribe() -> None:
            with self._lock:
                if subscription in self._subscriptions:
                    self._subscriptions.remove(subscription)

        return unsubscribe

    def emit(self, event: DetectionEvent) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)

        for subscription in subscriptions:
            if not subscription.accepts(event):
                continue
            try:
                subscription.listener(event)
            except Exception as e:
                logger.error(f"Listener failed on '{event.kind.value}' event: {e}", exc_info=True)

    def __len__(self) -> int:
        return len(self._subscriptions)
