"""Exception types raised by the event cache."""

from __future__ import annotations

from typing import Optional


class EventCacheError(Exception):
    """Base class for event cache failures."""


class InvalidEventError(EventCacheError, ValueError):
    """The event handed to the cache is missing or malformed."""


class PersistentStorageError(EventCacheError):
    """Storage kept failing; the cache gave up instead of degrading silently."""

    def __init__(self, message: str, *, attempts: Optional[int] = None) -> None:
        super().__init__(message)
        self.attempts = attempts


class CorruptRecordError(EventCacheError):
    """A persisted record could not be parsed back into an event."""


__all__ = [
    "CorruptRecordError",
    "EventCacheError",
    "InvalidEventError",
    "PersistentStorageError",
]
