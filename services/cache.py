"""
Best-effort JSON cache over Redis.

The cache is never a source of truth: every failure is logged and reported to
the caller as a miss, so a Redis outage only costs a trip to the database.
"""

import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from config.settings import settings

logger = logging.getLogger(__name__)


class CacheClient:
    def __init__(self, redis: Redis, default_ttl: int = settings.cache_ttl_seconds):
        self.redis = redis
        self.default_ttl = default_ttl

    @classmethod
    def from_url(cls, url: str = settings.redis_url) -> "CacheClient":
        return cls(Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.redis.get(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache read failed for {key}: {e}")
            return None

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        try:
            await self.redis.set(key, json.dumps(value), ex=ttl or self.default_ttl)
            return True
        except (RedisError, OSError, TypeError) as e:
            logger.warning(f"Cache write failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except (RedisError, OSError) as e:
            logger.warning(f"Cache eviction failed for {key}: {e}")

    async def close(self):
        await self.redis.aclose()
