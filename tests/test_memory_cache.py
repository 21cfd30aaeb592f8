from __future__ import annotations

import pytest

from eventcache_sdk.cache import MemoryEventCache
from eventcache_sdk.errors import InvalidEventError
from eventcache_sdk.models import CachedEvent


def test_memory_cache_is_fifo() -> None:
    cache = MemoryEventCache()
    for i in range(3):
        cache.add(CachedEvent(collection="clicks", payload={"n": i}))

    assert len(cache) == 3
    assert [e.payload["n"] for e in cache.drain()] == [0, 1, 2]
    assert cache.take() is None


def test_memory_cache_clear() -> None:
    cache = MemoryEventCache()
    cache.add(CachedEvent(collection="clicks", payload={}))
    cache.clear()
    assert cache.take() is None


def test_memory_cache_rejects_none() -> None:
    with pytest.raises(InvalidEventError):
        MemoryEventCache().add(None)  # type: ignore[arg-type]
