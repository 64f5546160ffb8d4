"""
Cache Service Singleton - Thesis Defense Platform
thesis_app/services/cache.py

Provides a singleton Redis cache instance with TTL constants and key helpers.
Gracefully handles Redis unavailability.
"""
import logging
import redis
from typing import Callable, Optional, Type, TypeVar
from pydantic import BaseModel
from thesis_app.services.redis_cache import RedisCache
from thesis_app.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

TTL_RUBRIC_TEMPLATE = settings.CACHE_TTL_RUBRICS
TTL_RANKINGS = settings.CACHE_TTL_RANKINGS

CACHE_KEY_TEMPLATE_PREFIX = "rubric_template:"
CACHE_KEY_RANKINGS_PREFIX = "rankings:"

# Singleton instance
_cache: Optional[RedisCache] = None


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if Redis is available, None otherwise.

    Note:
        Returns None if Redis is unavailable, allowing the application
        to continue functioning without caching (graceful degradation).
    """
    global _cache
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError):
            _cache = None
    return _cache


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache
    _cache = None


def template_cache_key(template_id) -> str:
    return f"{CACHE_KEY_TEMPLATE_PREFIX}{str(template_id).lower()}"


def rankings_cache_key(target: str, limit: Optional[int]) -> str:
    return f"{CACHE_KEY_RANKINGS_PREFIX}{target}:{limit or 'all'}"


def get_or_load(key: str, model: Type[T], ttl: int, loader: Callable[[], Optional[T]]) -> Optional[T]:
    """Read-through helper: cache hit returns early, misses call loader and store the result."""
    cache = get_cache()
    if cache:
        try:
            cached = cache.get(key, model)
            if cached is not None:
                return cached
        except Exception as e:
            logger.warning(f"Cache read failed for {key}: {e}")

    value = loader()

    if cache and value is not None:
        try:
            cache.set(key, value, ttl)
        except Exception as e:
            logger.warning(f"Cache write failed for {key}: {e}")
    return value


def invalidate_template(template_id) -> None:
    """Drop a cached rubric template. Rankings depend on criteria, so they go too."""
    cache = get_cache()
    if cache:
        try:
            cache.delete(template_cache_key(template_id))
            cache.delete_pattern(f"{CACHE_KEY_RANKINGS_PREFIX}*")
        except Exception as e:
            logger.warning(f"Cache invalidation failed for template {template_id}: {e}")


def invalidate_rankings() -> None:
    cache = get_cache()
    if cache:
        try:
            cache.delete_pattern(f"{CACHE_KEY_RANKINGS_PREFIX}*")
        except Exception as e:
            logger.warning(f"Cache invalidation failed for rankings: {e}")
