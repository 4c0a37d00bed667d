# yogaschool/core/cache.py
"""Redis caching implementation."""
import pickle
import logging
from typing import Any, Optional, Union
from datetime import timedelta
import redis.asyncio as redis
from .config import settings

logger = logging.getLogger(__name__)

class CacheManager:
    def __init__(self, prefix: str = "yogaschool"):
        self.redis: Optional[redis.Redis] = None
        self.prefix = prefix

    @property
    def enabled(self) -> bool:
        return settings.cache_enabled

    async def initialize(self):
        """Initialize Redis connection."""
        if self.enabled and not self.redis:
            self.redis = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=False
            )

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.close()
            self.redis = None

    def make_key(self, *parts: Any) -> str:
        return ":".join([self.prefix, *(str(part) for part in parts)])

    async def get(self, key: str) -> Optional[Any]:
        """Get value from cache."""
        if not self.enabled:
            return None
        await self.initialize()

        try:
            value = await self.redis.get(key)
            if value:
                return pickle.loads(value)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
        return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[Union[int, timedelta]] = None
    ) -> bool:
        """Set value in cache."""
        if not self.enabled:
            return False
        await self.initialize()

        try:
            serialized = pickle.dumps(value)
            if ttl:
                if isinstance(ttl, timedelta):
                    ttl = int(ttl.total_seconds())
                return await self.redis.setex(key, ttl, serialized)
            return await self.redis.set(key, serialized)
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete key from cache."""
        if not self.enabled:
            return False
        await self.initialize()

        try:
            return bool(await self.redis.delete(key))
        except Exception as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    async def ping(self) -> bool:
        if not self.enabled:
            return False
        await self.initialize()

        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error(f"Cache ping failed: {e}")
            return False

# Global cache instance
cache_manager = CacheManager()

DIRECTORY_CACHE_KEY = cache_manager.make_key("chat", "directory")
