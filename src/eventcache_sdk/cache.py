"""Event cache interface and the in-memory implementation."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Iterator, Optional

from .errors import InvalidEventError
from .models import CachedEvent


class EventCache:
    def add(self, event: CachedEvent) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def take(self) -> Optional[CachedEvent]:  # pragma: no cover - interface
        """Remove and return the oldest event, or ``None`` when the cache is empty."""
        raise NotImplementedError

    def clear(self) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def __len__(self) -> int:  # pragma: no cover - interface
        raise NotImplementedError

    def drain(self) -> Iterator[CachedEvent]:
        while True:
            event = self.take()
            if event is None:
                return
            yield event


def ensure_event(event: object) -> CachedEvent:
    if event is None:
        raise InvalidEventError("Cached events may not be None")
    if not isinstance(event, CachedEvent):
        raise InvalidEventError(f"Expected CachedEvent, got {type(event).__name__}")
    return event


class MemoryEventCache(EventCache):
    """Process-local FIFO with no persistence; contents are lost on exit."""

    def __init__(self) -> None:
        self._events: Deque[CachedEvent] = deque()
        self._lock = threading.Lock()

    def add(self, event: CachedEvent) -> None:
        event = ensure_event(event)
        with self._lock:
            self._events.append(event)

    def take(self) -> Optional[CachedEvent]:
        with self._lock:
            if not self._events:
                return None
            return self._events.popleft()

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


__all__ = ["EventCache", "MemoryEventCache", "ensure_event"]
