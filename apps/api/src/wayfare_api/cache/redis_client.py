"""Redis-backed cache store.

Every operation degrades instead of raising: when Redis is unreachable the
store logs the problem and reports a miss (``None``) or a failure (``False``),
so callers can always fall back to computing the value themselves.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

_DELETE_BATCH = 500


class CacheStore:
    """JSON key-value store with per-key TTL on top of Redis."""

    def __init__(self, client: redis.Redis | None = None) -> None:
        self._client = client

    @classmethod
    async def from_url(cls, url: str) -> CacheStore:
        """Create a store for *url* and check the connection once."""
        store = cls(redis.from_url(url, decode_responses=True))
        if await store.ping():
            logger.info("Redis connected: %s", url)
        else:
            logger.warning("Redis unreachable at %s, caching disabled until it is", url)
        return store

    @property
    def connected(self) -> bool:
        return self._client is not None

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            logger.error("Redis ping failed: %s", exc)
            return False

    async def close(self) -> None:
        """Release the connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection closed")

    async def get(self, key: str) -> Any | None:
        """Return the stored payload, or ``None`` when absent or expired."""
        if self._client is None:
            return None
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            logger.error("Redis get error for key %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Discarding undecodable cache entry %s", key)
            return None

    async def set(self, key: str, value: Any, ttl: int) -> bool:
        """Store *value* under *key* for *ttl* seconds, replacing any entry."""
        if self._client is None:
            return False
        if ttl <= 0:
            # Already expired: the entry must read as absent.
            return await self.delete(key)
        try:
            await self._client.set(key, json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.error("Redis set error for key %s: %s", key, exc)
            return False
        return True

    async def delete(self, key: str) -> bool:
        if self._client is None:
            return False
        try:
            await self._client.delete(key)
        except RedisError as exc:
            logger.error("Redis delete error for key %s: %s", key, exc)
            return False
        return True

    async def delete_pattern(self, pattern: str) -> bool:
        """Delete every key matching the glob *pattern*."""
        if self._client is None:
            return False
        try:
            batch: list[str] = []
            async for key in self._client.scan_iter(match=pattern):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH:
                    await self._client.delete(*batch)
                    batch.clear()
            if batch:
                await self._client.delete(*batch)
        except RedisError as exc:
            logger.error("Redis delete_pattern error for pattern %s: %s", pattern, exc)
            return False
        return True

    async def flush_all(self) -> bool:
        """Remove every key from the store's database."""
        if self._client is None:
            return False
        try:
            await self._client.flushdb()
        except RedisError as exc:
            logger.error("Redis flush error: %s", exc)
            return False
        return True

    async def keys(self, pattern: str = "*") -> list[str]:
        """List keys matching *pattern* (inspection only, uses SCAN)."""
        if self._client is None:
            return []
        try:
            return sorted([key async for key in self._client.scan_iter(match=pattern)])
        except RedisError as exc:
            logger.error("Redis scan error for pattern %s: %s", pattern, exc)
            return []

    async def ttl(self, key: str) -> int | None:
        """Remaining lifetime of *key* in seconds, ``None`` if it has none."""
        if self._client is None:
            return None
        try:
            remaining = await self._client.ttl(key)
        except RedisError as exc:
            logger.error("Redis ttl error for key %s: %s", key, exc)
            return None
        return remaining if remaining >= 0 else None
