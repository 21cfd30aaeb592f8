from __future__ import annotations

import pytest

from eventcache_sdk.config import ClientConfig


def test_from_env_reads_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENTCACHE_BASE_URL", "https://ingest.example.com")
    monkeypatch.setenv("EVENTCACHE_API_KEY", "secret")
    monkeypatch.setenv("EVENTCACHE_MAX_RETRIES", "5")
    monkeypatch.setenv("EVENTCACHE_CACHE_DIR", "/var/tmp/events")
    monkeypatch.setenv("EVENTCACHE_AUTO_IDEMPOTENCY", "false")

    cfg = ClientConfig.from_env()

    assert cfg.base_url == "https://ingest.example.com"
    assert cfg.api_key == "secret"
    assert cfg.max_retries == 5
    assert cfg.timeout == 5.0
    assert cfg.cache_dir == "/var/tmp/events"
    assert cfg.auto_idempotency is False


def test_from_env_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EVENTCACHE_BASE_URL", "https://ingest.example.com")
    monkeypatch.delenv("EVENTCACHE_API_KEY", raising=False)

    with pytest.raises(ValueError):
        ClientConfig.from_env()
