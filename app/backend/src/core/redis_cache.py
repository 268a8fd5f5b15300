"""Optional Redis cache for catalog reads."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

import structlog
from redis import Redis

from .config import get_settings

LOGGER = structlog.get_logger(__name__)


class RedisProductCache:
    """JSON cache for product listings; errors degrade to cache misses."""

    def __init__(self, client: Redis, *, key_prefix: str = "products", ttl_seconds: int = 600):
        self.client = client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, suffix: str) -> str:
        return f"{self.key_prefix}:{suffix}"

    def get(self, suffix: str) -> Any | None:
        key = self._key(suffix)
        try:
            raw = self.client.get(key)
            if not raw:
                return None
            return json.loads(raw)
        except Exception as exc:
            LOGGER.warning("redis_cache_read_failed", key=key, error=str(exc))
            return None

    def set(self, suffix: str, value: Any) -> None:
        key = self._key(suffix)
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(value, default=str))
        except Exception as exc:
            LOGGER.warning("redis_cache_write_failed", key=key, error=str(exc))

    def evict(self, *suffixes: str) -> None:
        keys = [self._key(suffix) for suffix in suffixes]
        try:
            if keys:
                self.client.delete(*keys)
        except Exception as exc:
            LOGGER.warning("redis_cache_evict_failed", keys=keys, error=str(exc))

    def clear(self) -> None:
        """Drop every key under this cache's prefix."""

        pattern = self._key("*")
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if keys:
                self.client.delete(*keys)
        except Exception as exc:
            LOGGER.warning("redis_cache_clear_failed", pattern=pattern, error=str(exc))


@lru_cache()
def get_product_cache() -> RedisProductCache | None:
    """Return the shared product cache, or ``None`` when Redis is disabled."""

    settings = get_settings()
    if not settings.redis_enabled:
        return None
    return RedisProductCache(
        Redis.from_url(settings.redis_url),
        ttl_seconds=settings.product_cache_ttl_seconds,
    )


__all__ = ["RedisProductCache", "get_product_cache"]
