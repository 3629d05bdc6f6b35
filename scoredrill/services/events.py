"""Change notifications for consumers of the due queue.

Writers publish a :class:`SpotChanged` event after every committed change.
Consumers either register a callback with :meth:`QueueEvents.subscribe` or
poll with :meth:`QueueEvents.events_since` using the last version they saw.
"""
from __future__ import annotations

import itertools
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from loguru import logger

from scoredrill.config import settings
from scoredrill.core.srs.models import utcnow


@dataclass(frozen=True, slots=True)
class SpotChanged:
    """A spot was created, edited, reviewed or deactivated."""

    version: int
    spot_id: str
    piece_id: str
    reason: str
    at: datetime


Subscriber = Callable[[SpotChanged], None]


class QueueEvents:
    """Thread-safe publish/subscribe hub with a bounded replay buffer."""

    def __init__(self, buffer_size: int = 256) -> None:
        self._lock = threading.Lock()
        self._subscribers: dict[int, Subscriber] = {}
        self._ids = itertools.count(1)
        self._buffer: deque[SpotChanged] = deque(maxlen=buffer_size)
        self._version = 0

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` and return a function that removes it."""

        with self._lock:
            token = next(self._ids)
            self._subscribers[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._subscribers.pop(token, None)

        return unsubscribe

    def publish(self, *, spot_id: str, piece_id: str, reason: str) -> SpotChanged:
        """Record a change and deliver it to every subscriber."""

        with self._lock:
            self._version += 1
            event = SpotChanged(
                version=self._version,
                spot_id=spot_id,
                piece_id=piece_id,
                reason=reason,
                at=utcnow(),
            )
            self._buffer.append(event)
            targets = list(self._subscribers.values())

        logger.debug("Queue invalidated", spot_id=spot_id, reason=reason, version=event.version)
        for callback in targets:
            try:
                callback(event)
            except Exception as exc:
                logger.warning("Queue subscriber failed", error=str(exc), version=event.version)
        return event

    def events_since(self, version: int) -> tuple[int, list[SpotChanged]]:
        """Return the current version and buffered events newer than ``version``.

        When ``version`` is older than the buffer, the oldest retained events are
        returned; callers should then rebuild their queue from scratch.
        """

        with self._lock:
            return self._version, [event for event in self._buffer if event.version > version]

    def clear(self) -> None:
        """Reset subscribers and history (test environments)."""

        with self._lock:
            self._subscribers.clear()
            self._buffer.clear()
            self._version = 0


queue_events = QueueEvents(buffer_size=settings.EVENT_BUFFER_SIZE)


__all__ = ["QueueEvents", "SpotChanged", "queue_events"]
