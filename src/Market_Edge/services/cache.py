"""Shared expiring cache for quotes and history with best-effort semantics.

Provides a cache-first pattern for data fetching: check cache, fetch on miss,
store, and return. When a Redis client is configured every instance of the
service shares it; otherwise entries live in an in-process dict with lazy
eviction. Backend failures never reach the caller: a failed read is a miss
and a failed write is dropped, both logged at WARNING.
"""

from __future__ import annotations

import datetime
import logging
from typing import Final

import redis.asyncio as redis
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: TTL values in seconds
# ---------------------------------------------------------------------------

TTL_QUOTE: Final[int] = 10
TTL_HISTORY: Final[int] = 60 * 60  # 1 hour

# Key prefixes (the request fingerprint follows the prefix)
KEY_PREFIX_QUOTE: Final[str] = "quote"
KEY_PREFIX_HISTORY: Final[str] = "history"

# Lazy cleanup: run eviction at most every N accesses
LAZY_CLEANUP_INTERVAL: Final[int] = 100


def quote_key(symbol: str) -> str:
    """Cache key for a quote snapshot."""
    return f"{KEY_PREFIX_QUOTE}:{symbol}"


def history_key(symbol: str, interval: str, limit: int) -> str:
    """Cache key for a history series."""
    return f"{KEY_PREFIX_HISTORY}:{symbol}:{interval}:{limit}"


class CacheEntry(BaseModel):
    """A single cached value with metadata for expiration checking."""

    model_config = ConfigDict(frozen=True)

    key: str
    value: str  # JSON-serialized payload
    created_at: datetime.datetime
    ttl_seconds: int

    def is_expired(self) -> bool:
        """Return True if this entry has exceeded its TTL."""
        now = datetime.datetime.now(datetime.UTC)
        age = (now - self.created_at).total_seconds()
        return age > self.ttl_seconds


class ServiceCache:
    """Key/value cache backed by Redis, or by memory when Redis is absent.

    Usage::

        client = redis.Redis.from_url("redis://localhost:6379/0", decode_responses=True)
        cache = ServiceCache(redis_client=client)

        cached = await cache.get("quote:AAPL")
        if cached is None:
            quote = await fetch_quote("AAPL")
            await cache.set("quote:AAPL", quote.model_dump_json(by_alias=True), TTL_QUOTE)
    """

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        self._redis = redis_client
        self._memory_cache: dict[str, CacheEntry] = {}
        self._access_count: int = 0

        logger.info(
            "ServiceCache initialized: backend=%s",
            "redis" if redis_client is not None else "memory",
        )

    @classmethod
    def from_url(cls, redis_url: str) -> ServiceCache:
        """Build a cache for *redis_url*, or a memory cache when it is empty."""
        if not redis_url:
            return cls()
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        return cls(redis_client=client)

    @property
    def backend(self) -> str:
        """Name of the active backend ("redis" or "memory")."""
        return "redis" if self._redis is not None else "memory"

    async def get(self, key: str) -> str | None:
        """Retrieve a cached value by key.

        Returns None on miss, on expiry, or if the backend is unavailable.
        """
        if self._redis is not None:
            try:
                value = await self._redis.get(key)
            except (redis.RedisError, OSError) as exc:
                logger.warning("Cache read failed for %s, treating as miss: %s", key, exc)
                return None
            if value is None:
                logger.debug("Cache miss: %s", key)
                return None
            logger.debug("Redis cache hit: %s", key)
            return value if isinstance(value, str) else value.decode("utf-8")

        self._increment_access_count()
        entry = self._memory_cache.get(key)
        if entry is None:
            logger.debug("Cache miss: %s", key)
            return None
        if entry.is_expired():
            del self._memory_cache[key]
            logger.debug("Memory cache expired: %s", key)
            return None
        logger.debug("Memory cache hit: %s", key)
        return entry.value

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with an expiry. Failures are logged and dropped."""
        if self._redis is not None:
            try:
                await self._redis.set(key, value, ex=ttl_seconds)
            except (redis.RedisError, OSError) as exc:
                logger.warning("Cache write failed for %s: %s", key, exc)
                return
            logger.debug("Redis cache set: %s (ttl=%ds)", key, ttl_seconds)
            return

        self._memory_cache[key] = CacheEntry(
            key=key,
            value=value,
            created_at=datetime.datetime.now(datetime.UTC),
            ttl_seconds=ttl_seconds,
        )
        logger.debug("Memory cache set: %s (ttl=%ds)", key, ttl_seconds)

    async def invalidate(self, key: str) -> None:
        """Remove a specific key."""
        self._memory_cache.pop(key, None)

        if self._redis is not None:
            try:
                await self._redis.delete(key)
            except (redis.RedisError, OSError) as exc:
                logger.warning("Cache delete failed for %s: %s", key, exc)

        logger.debug("Cache invalidated: %s", key)

    async def ping(self) -> bool:
        """Return True if the backend is reachable (always True for memory)."""
        if self._redis is None:
            return True
        try:
            return bool(await self._redis.ping())
        except (redis.RedisError, OSError) as exc:
            logger.warning("Cache ping failed: %s", exc)
            return False

    async def aclose(self) -> None:
        """Close the Redis connection pool, if any."""
        if self._redis is not None:
            await self._redis.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _increment_access_count(self) -> None:
        """Track accesses and trigger lazy cleanup when threshold is reached."""
        self._access_count += 1
        if self._access_count >= LAZY_CLEANUP_INTERVAL:
            self._access_count = 0
            self._evict_expired_memory_entries()

    def _evict_expired_memory_entries(self) -> None:
        """Remove expired entries from the in-memory cache."""
        expired_keys = [k for k, v in self._memory_cache.items() if v.is_expired()]
        for key in expired_keys:
            del self._memory_cache[key]

        if expired_keys:
            logger.debug(
                "Lazy cleanup: evicted %d expired memory entries",
                len(expired_keys),
            )
