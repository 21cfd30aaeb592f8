"""HTTP telemetry client that can defer events into a local cache."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import quote
from uuid import uuid4

import httpx
from pydantic import ValidationError

from .cache import EventCache
from .config import ClientConfig
from .errors import EventCacheError, InvalidEventError, PersistentStorageError
from .file_cache import FileEventCache
from .models import CachedEvent, ErrorInfo

logger = logging.getLogger("eventcache_sdk.client")


@dataclass
class FlushResult:
    sent: int = 0
    failed: List[CachedEvent] = field(default_factory=list)


class TelemetryClient:
    def __init__(
        self,
        config: ClientConfig,
        *,
        cache: Optional[EventCache] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout, transport=transport)
        if cache is None and config.cache_dir:
            cache = FileEventCache(config.cache_dir)
        self._cache = cache

    def __enter__(self) -> "TelemetryClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def cache(self) -> Optional[EventCache]:
        return self._cache

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "User-Agent": self._config.user_agent,
            "Content-Type": "application/json",
        }
        headers.update(self._config.headers)
        return headers

    def _prepare_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        outgoing = dict(payload)
        if not outgoing.get("idempotency_key") and self._config.auto_idempotency:
            outgoing["idempotency_key"] = uuid4().hex
        return outgoing

    def add_event(self, collection: str, event: Dict[str, Any]) -> None:
        """Queue the event in the cache, or send it right away when no cache is set."""
        outgoing = self._prepare_payload(event)
        if self._cache is None:
            self.send_event(collection, outgoing)
            return
        try:
            cached = CachedEvent(collection=collection, payload=outgoing)
        except ValidationError as exc:
            raise InvalidEventError(f"Invalid event for collection {collection!r}") from exc
        self._cache.add(cached)

    def send_event(self, collection: str, event: Dict[str, Any]) -> None:
        outgoing = self._prepare_payload(event)
        headers = self._headers()
        idempotency_key = outgoing.get("idempotency_key")
        if idempotency_key:
            headers["Idempotency-Key"] = idempotency_key
        path = f"/v1/events/{quote(collection, safe='')}"
        body = json.dumps(outgoing, separators=(",", ":"))
        attempt = 0
        while attempt <= self._config.max_retries:
            try:
                response = self._client.post(path, content=body, headers=headers)
                response.raise_for_status()
                return
            except httpx.HTTPError as exc:
                attempt += 1
                if attempt > self._config.max_retries:
                    logger.warning("Event delivery failed collection=%s error=%s", collection, exc)
                    raise
                sleep_for = self._config.backoff_seconds * (2 ** (attempt - 1))
                time.sleep(sleep_for)

    def send_cached_events(self) -> FlushResult:
        result = FlushResult()
        if self._cache is None:
            return result

        # Take one event at a time, bounded by the size at start, so an
        # unexpected error leaves the untaken events in the cache.
        retries: List[CachedEvent] = []
        try:
            for _ in range(len(self._cache)):
                cached = self._cache.take()
                if cached is None:
                    break
                try:
                    self.send_event(cached.collection, cached.payload)
                except Exception as exc:
                    retries.append(
                        CachedEvent(
                            collection=cached.collection,
                            payload=cached.payload,
                            error=ErrorInfo.from_exception(exc),
                        )
                    )
                    if not isinstance(exc, httpx.HTTPError):
                        raise
                else:
                    result.sent += 1
        finally:
            self._requeue(retries)

        result.failed.extend(retries)
        logger.info("Flushed cached events sent=%d failed=%d", result.sent, len(result.failed))
        return result

    def _requeue(self, events: List[CachedEvent]) -> None:
        assert self._cache is not None  # for type checking
        last_error: Optional[EventCacheError] = None
        for event in events:
            try:
                self._cache.add(event)
            except EventCacheError as exc:
                logger.error("Lost cached event collection=%s: %s", event.collection, exc)
                last_error = exc
        if last_error is not None:
            raise PersistentStorageError("Unable to re-queue failed cached events") from last_error

    def close(self) -> None:
        self._client.close()


__all__ = ["FlushResult", "TelemetryClient"]
