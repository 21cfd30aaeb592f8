"""Durable local event cache and telemetry client."""

from .cache import EventCache, MemoryEventCache
from .client import FlushResult, TelemetryClient
from .config import ClientConfig
from .errors import CorruptRecordError, EventCacheError, InvalidEventError, PersistentStorageError
from .file_cache import FileEventCache
from .models import CachedEvent, ErrorInfo

__all__ = [
    "CachedEvent",
    "ClientConfig",
    "CorruptRecordError",
    "ErrorInfo",
    "EventCache",
    "EventCacheError",
    "FileEventCache",
    "FlushResult",
    "InvalidEventError",
    "MemoryEventCache",
    "PersistentStorageError",
    "TelemetryClient",
]
