"""
Cache decorators for async repository functions.
"""
from functools import wraps
from typing import Callable, Any
from app.cache.redis_client import cache
from app.core.logging import logger


def cached(key_builder: Callable[..., str], expire: int = 300):
    """
    Cache a coroutine's JSON-serialisable result under an explicit key.

    The key is built from the call arguments so writers can invalidate exactly
    the entries they affect. `None` results are not cached.

    Usage:
        @cached(lambda db, event_id: f"events:detail:{event_id}", expire=300)
        async def get_event_summary(db, event_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            cache_key = key_builder(*args, **kwargs)
            
            cached_value = await cache.get(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit for key: {cache_key}")
                return cached_value
            
            logger.debug(f"Cache miss for key: {cache_key}")
            result = await func(*args, **kwargs)
            if result is not None:
                await cache.set(cache_key, result, expire)
            return result
        return wrapper
    return decorator
