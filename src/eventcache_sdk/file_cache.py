"""File-backed event cache that survives process restarts.

Each cached event lives in its own file under a dedicated directory. An
in-memory index of file names holds the delivery order; the directory is only
listed once, when the cache is opened, to adopt records left behind by a
previous run.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
import os
import re
import shutil
import threading
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional, Set, Union

from .cache import EventCache, ensure_event
from .errors import CorruptRecordError, PersistentStorageError
from .metrics import EVENTS_ADDED, EVENTS_TAKEN, PENDING_EVENTS, RECORDS_DROPPED, WRITE_FAILURES
from .models import CachedEvent

logger = logging.getLogger("eventcache_sdk.cache")

CACHE_DIR_NAME = "event-cache"
DEFAULT_MAX_ATTEMPTS = 100

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_MAX_STEM_LENGTH = 100


def default_storage_root() -> Path:
    explicit = os.environ.get("EVENTCACHE_HOME")
    if explicit:
        return Path(explicit)
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home) if data_home else Path.home() / ".local" / "share"
    return base / "eventcache-sdk"


def _name_stem(collection: str) -> str:
    stem = _UNSAFE_NAME_CHARS.sub("_", collection)
    if len(stem) > _MAX_STEM_LENGTH:
        # Keep file names well under NAME_MAX; the hash keeps long names apart.
        digest = hashlib.sha1(collection.encode("utf-8")).hexdigest()[:12]
        stem = f"{stem[:_MAX_STEM_LENGTH]}-{digest}-"
    return stem


class FileEventCache(EventCache):
    """Durable FIFO of cached events, one file per event.

    Safe for concurrent producers and consumers inside one process. Other
    processes sharing the directory are only kept apart by exclusive file
    creation.
    """

    def __init__(
        self,
        root: Union[str, Path, None] = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._root = Path(root) if root else default_storage_root()
        self._folder = self._root / CACHE_DIR_NAME
        self._max_attempts = max_attempts
        self._lock = threading.Lock()
        self._changed = threading.Condition(self._lock)
        self._index: Deque[str] = deque()
        self._names: Set[str] = set()
        # Reserved names whose record is still being written.
        self._writing: Set[str] = set()
        self._pending = PENDING_EVENTS.labels(directory=str(self._folder))

        self._ensure_folder()
        adopted = self._list_records()
        with self._lock:
            for name in adopted:
                if name not in self._names:
                    self._index.append(name)
                    self._names.add(name)
            self._pending.set(len(self._index))
        logger.info("Opened event cache at %s (adopted=%d)", self._folder, len(adopted))

    @classmethod
    def open(cls, root: Union[str, Path, None] = None, **kwargs) -> "FileEventCache":
        return cls(root, **kwargs)

    @property
    def directory(self) -> Path:
        return self._folder

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def __len__(self) -> int:
        with self._lock:
            return len(self._index)

    def add(self, event: CachedEvent) -> None:
        event = ensure_event(event)
        body = event.to_record()
        stem = _name_stem(event.collection)
        last_error: Optional[BaseException] = None

        for attempt in range(1, self._max_attempts + 1):
            name = self._reserve(stem)
            try:
                self._write_record(self._folder / name, body)
            except OSError as exc:
                # The reservation stays in the index; take() skips it.
                last_error = exc
                WRITE_FAILURES.inc()
                logger.debug(
                    "Cache write attempt %d/%d failed name=%s error=%s",
                    attempt,
                    self._max_attempts,
                    name,
                    exc,
                )
            else:
                EVENTS_ADDED.labels(collection=event.collection).inc()
                return
            finally:
                self._finish_write(name)

        logger.error(
            "Giving up on cached event collection=%s after %d attempts",
            event.collection,
            self._max_attempts,
        )
        raise PersistentStorageError(
            "Persistent failure while saving cached event, aborting",
            attempts=self._max_attempts,
        ) from last_error

    def take(self) -> Optional[CachedEvent]:
        while True:
            with self._lock:
                if not self._index:
                    return None
                self._changed.wait_for(lambda: not self._index or self._index[0] not in self._writing)
                if not self._index:
                    return None
                name = self._index.popleft()
                self._names.discard(name)
                self._pending.set(len(self._index))

            event = self._read_record(name)
            if event is not None:
                EVENTS_TAKEN.labels(collection=event.collection).inc()
                return event

    def clear(self) -> None:
        with self._lock:
            self._changed.wait_for(lambda: not self._writing)
            self._index.clear()
            self._names.clear()
            self._pending.set(0)
            try:
                shutil.rmtree(self._folder)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.error("Failed to remove cache directory %s: %s", self._folder, exc)
                raise PersistentStorageError(f"Unable to clear cache directory {self._folder}") from exc
            self._ensure_folder()
        logger.info("Cleared event cache at %s", self._folder)

    def _reserve(self, stem: str) -> str:
        with self._lock:
            for suffix in itertools.count():
                name = f"{stem}{suffix}"
                if name not in self._names:
                    break
            self._index.append(name)
            self._names.add(name)
            self._writing.add(name)
            self._pending.set(len(self._index))
            return name

    def _finish_write(self, name: str) -> None:
        with self._lock:
            self._writing.discard(name)
            self._changed.notify_all()

    def _write_record(self, path: Path, body: str) -> None:
        # "x" fails when the file already exists.
        handle = path.open("x", encoding="utf-8")
        try:
            with handle:
                handle.write(body)
                handle.flush()
                os.fsync(handle.fileno())
        except BaseException:
            # The next attempt uses a fresh name; a leftover file would be a duplicate.
            self._discard(path)
            raise

    def _read_record(self, name: str) -> Optional[CachedEvent]:
        path = self._folder / name
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.warning("Skipping cache entry %s: record file is missing", name)
            RECORDS_DROPPED.labels(reason="missing").inc()
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Dropping cache entry %s: record is unreadable (%s)", name, exc)
            RECORDS_DROPPED.labels(reason="unreadable").inc()
            self._discard(path)
            return None

        try:
            event = CachedEvent.from_record(content)
        except CorruptRecordError as exc:
            logger.warning("Dropping cache entry %s: %s", name, exc)
            RECORDS_DROPPED.labels(reason="corrupt").inc()
            self._discard(path)
            return None

        self._discard(path)
        return event

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete cache record %s: %s", path, exc)

    def _ensure_folder(self) -> None:
        try:
            self._folder.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Unable to create cache directory %s: %s", self._folder, exc)
            raise PersistentStorageError(f"Unable to create cache directory {self._folder}") from exc

    def _list_records(self) -> List[str]:
        try:
            records = [entry for entry in self._folder.iterdir() if entry.is_file()]
        except OSError as exc:
            raise PersistentStorageError(f"Unable to list cache directory {self._folder}") from exc

        def sort_key(entry: Path) -> tuple[int, str]:
            try:
                return entry.stat().st_mtime_ns, entry.name
            except OSError:
                return 0, entry.name

        return [entry.name for entry in sorted(records, key=sort_key)]


__all__ = ["CACHE_DIR_NAME", "DEFAULT_MAX_ATTEMPTS", "FileEventCache", "default_storage_root"]
