"""Prometheus instruments for cache activity."""

from __future__ import annotations

from prometheus_client import Counter, Gauge

EVENTS_ADDED = Counter("eventcache_events_added_total", "Events persisted to the cache", ["collection"])
EVENTS_TAKEN = Counter("eventcache_events_taken_total", "Events handed out by the cache", ["collection"])
RECORDS_DROPPED = Counter(
    "eventcache_records_dropped_total",
    "Index entries skipped because their record was missing or unusable",
    ["reason"],
)
WRITE_FAILURES = Counter("eventcache_write_failures_total", "Failed attempts to write a cache record")
PENDING_EVENTS = Gauge(
    "eventcache_pending_events",
    "Names currently held in a file cache index",
    ["directory"],
)


__all__ = ["EVENTS_ADDED", "EVENTS_TAKEN", "RECORDS_DROPPED", "WRITE_FAILURES", "PENDING_EVENTS"]
