import json
import logging
import uuid

import redis.asyncio as redis

from blog_platform.config import settings
from blog_platform.pagination import PageQuery

logger = logging.getLogger(__name__)

POST_LIST_PREFIX = "posts:list"


def post_list_key(query: PageQuery, blog_id: uuid.UUID | None = None) -> str:
    """
    Key for one viewer-independent page of a post listing.

    The viewer's own ``myStatus`` is never cached; it is overlaid from
    the database on every request.
    """
    scope = str(blog_id) if blog_id is not None else "all"
    return f"{POST_LIST_PREFIX}:{scope}:{query.cache_key_part()}"


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    When Redis is unavailable reads miss and writes are skipped, so a
    cache outage slows listings down but never fails a request.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        self._hits: int = 0
        self._misses: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except redis.RedisError as exc:
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None
        logger.info("Cache stats at shutdown: %s", self.stats)

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        if not self._redis:
            self._misses += 1
            return None
        try:
            data = await self._redis.get(key)
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
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except (redis.RedisError, TypeError, ValueError) as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN (never KEYS)."""
        if not self._redis:
            return
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except redis.RedisError as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Domain-level invalidation
    # ------------------------------------------------------------------

    async def invalidate_posts(self) -> None:
        """
        Purge every cached post listing page.

        Scheduled with ``database.after_commit`` by every post
        create/update/delete and post reaction.  A single post shows up
        in both the global and the per-blog listings, so everything goes.
        """
        await self.delete_pattern(f"{POST_LIST_PREFIX}:*")

    @property
    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }


# Module-level singleton shared across all request handlers.
cache = CacheManager()
