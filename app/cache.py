import json
import logging

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    Keys are stored under *namespace* so several deployments can share one
    Redis database.  Every public method is safe to call while Redis is
    down: reads miss, writes and invalidations are skipped, and the error
    is logged at DEBUG.
    """

    def __init__(self, namespace: str = "fitquest") -> None:
        self.namespace = namespace
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @property
    def enabled(self) -> bool:
        return self._redis is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool; the app keeps running without Redis."""
        client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await client.ping()
        except redis.RedisError as exc:
            logger.warning("Redis unavailable at %s, caching disabled: %s", settings.REDIS_URL, exc)
            await client.aclose()
            return
        self._redis = client
        logger.info("Redis connected: %s", settings.REDIS_URL)

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss or error."""
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(self._key(key))
        except redis.RedisError as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            self._misses += 1
            return None
        if data is None:
            self._misses += 1
            return None
        self._hits += 1
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        if not self._redis:
            return
        try:
            await self._redis.set(self._key(key), json.dumps(value, default=str), ex=ttl)
        except redis.RedisError as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (avoids blocking KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=self._key(pattern))]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except redis.RedisError as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation
    # ------------------------------------------------------------------

    async def invalidate_articles(self, article_id: int | None = None) -> None:
        """
        Drop every cached article list page, plus the detail entry for
        *article_id* when given.
        """
        await self.delete_pattern("articles:list:*")
        if article_id is not None:
            await self.delete_pattern(f"articles:detail:{article_id}")

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "enabled": self.enabled,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
