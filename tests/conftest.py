from __future__ import annotations

from pathlib import Path

import pytest

from eventcache_sdk.file_cache import FileEventCache


@pytest.fixture()
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "storage"


@pytest.fixture()
def cache(cache_root: Path) -> FileEventCache:
    return FileEventCache(cache_root)
