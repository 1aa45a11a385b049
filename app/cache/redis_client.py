"""
Redis cache for event capacity summaries.

Cache failures are logged and treated as misses; they never fail a request.
"""
import json
from typing import Optional, Any
import redis.asyncio as redis
from app.core.config import settings
from app.core.logging import logger


class RedisCache:
    """Async Redis cache client with connection pooling."""
    
    def __init__(self, url: str, enabled: bool = True):
        self._url = url
        self._enabled = enabled
        self._client: Optional[redis.Redis] = None
    
    def _get_client(self) -> redis.Redis:
        """Get or create Redis client with connection pooling."""
        if self._client is None:
            pool = redis.ConnectionPool.from_url(
                self._url,
                decode_responses=True,
                max_connections=20
            )
            self._client = redis.Redis(connection_pool=pool)
            logger.info("Redis connection pool created")
        return self._client
    
    async def get(self, key: str) -> Optional[Any]:
        """Cached JSON value for `key`, or None on miss or error."""
        if not self._enabled:
            return None
        try:
            value = await self._get_client().get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None
    
    async def set(self, key: str, value: Any, expire: int = 300) -> bool:
        if not self._enabled:
            return False
        try:
            serialized = json.dumps(value, default=str)
            await self._get_client().setex(key, expire, serialized)
            return True
        except Exception as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False
    
    async def delete(self, key: str) -> bool:
        if not self._enabled:
            return False
        try:
            await self._get_client().delete(key)
            return True
        except Exception as e:
            logger.error(f"Redis DELETE error for key {key}: {e}")
            return False
    
    async def invalidate_event(self, event_id) -> bool:
        """Drop the cached summary of an event whose capacity figures changed."""
        return await self.delete(f"events:detail:{event_id}")
    
    async def close(self):
        """Close Redis connection pool."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis connection pool closed")


# Create a single instance to be imported throughout the app
cache = RedisCache(settings.REDIS_URL, enabled=settings.CACHE_ENABLED)
