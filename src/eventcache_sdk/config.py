"""Configuration objects for the event cache SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    api_key: str
    timeout: float = 5.0
    max_retries: int = 3
    backoff_seconds: float = 0.5
    user_agent: str = "eventcache-sdk-python/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)
    cache_dir: Optional[str] = None
    auto_idempotency: bool = True

    @classmethod
    def from_env(cls) -> "ClientConfig":
        base_url = os.environ.get("EVENTCACHE_BASE_URL")
        api_key = os.environ.get("EVENTCACHE_API_KEY")
        if not base_url:
            raise ValueError("EVENTCACHE_BASE_URL must be configured")
        if not api_key:
            raise ValueError("EVENTCACHE_API_KEY must be configured")

        return cls(
            base_url=base_url,
            api_key=api_key,
            timeout=float(os.environ.get("EVENTCACHE_TIMEOUT", "5.0")),
            max_retries=int(os.environ.get("EVENTCACHE_MAX_RETRIES", "3")),
            backoff_seconds=float(os.environ.get("EVENTCACHE_BACKOFF_SECONDS", "0.5")),
            cache_dir=os.environ.get("EVENTCACHE_CACHE_DIR") or None,
            auto_idempotency=os.environ.get("EVENTCACHE_AUTO_IDEMPOTENCY", "true").lower() == "true",
        )


__all__ = ["ClientConfig"]
