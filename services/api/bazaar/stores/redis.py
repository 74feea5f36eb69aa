"""Redis store for short-lived read caching.

Handles:
- Caching with TTL policies
- Invalidation after writes

Nothing in the marketplace core reads from here. Gating, inventory, offer
state and promotion bounds are always decided against PostgreSQL; the cache
only absorbs repeated public reads (e.g. the featured promotions strip).

TTL policies:
- Active promotions payload: 30 seconds (configurable)
- Trust leaderboard payload: 60 seconds
"""

import json
import logging
from typing import Any

import redis.asyncio as redis

from bazaar.settings import get_settings

# TTL constants (in seconds)
TTL_LEADERBOARD = 60

# Key prefixes
PREFIX_PROMOTIONS = "promotions:"
PREFIX_LEADERBOARD = "leaderboard:"

KEY_ACTIVE_PROMOTIONS = f"{PREFIX_PROMOTIONS}active"

# Redis client (initialized on startup)
_redis: redis.Redis | None = None
logger = logging.getLogger("uvicorn.error")


async def init_redis() -> None:
    """Initialize Redis connection."""
    global _redis
    settings = get_settings()
    _redis = redis.from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    # Validate connectivity early (especially for `rediss://` in production).
    await _redis.ping()
    logger.info("Redis connected")


async def close_redis() -> None:
    """Close Redis connection."""
    global _redis
    if _redis:
        await _redis.aclose()
        _redis = None


def _get_redis() -> redis.Redis:
    """Get Redis client instance."""
    if _redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return _redis


# ============================================================
# Generic cache operations
# ============================================================


async def cache_get(key: str) -> str | None:
    """Get value from cache.

    Args:
        key: Cache key.

    Returns:
        Cached value or None if not found.
    """
    return await _get_redis().get(key)


async def cache_set(key: str, value: str, ttl: int) -> None:
    """Set value in cache with TTL.

    Args:
        key: Cache key.
        value: Value to cache.
        ttl: Time-to-live in seconds.
    """
    await _get_redis().setex(key, ttl, value)


async def cache_delete(key: str) -> None:
    """Delete value from cache.

    Args:
        key: Cache key.
    """
    await _get_redis().delete(key)


async def cache_get_json(key: str) -> Any | None:
    """Get JSON value from cache.

    Args:
        key: Cache key.

    Returns:
        Parsed JSON value or None if not found.
    """
    value = await cache_get(key)
    if value:
        return json.loads(value)
    return None


async def cache_set_json(key: str, value: Any, ttl: int) -> None:
    """Set JSON value in cache.

    Args:
        key: Cache key.
        value: JSON-serializable value to cache.
        ttl: Time-to-live in seconds.
    """
    await cache_set(key, json.dumps(value), ttl)


# ============================================================
# Best-effort wrappers (Redis is optional in tests / local runs)
# ============================================================


async def try_cache_get_json(key: str) -> Any | None:
    """Read a cached JSON value, treating any Redis problem as a miss."""
    try:
        return await cache_get_json(key)
    except Exception as e:
        logger.warning(f"Cache read skipped for {key}: {e}")
        return None


async def try_cache_set_json(key: str, value: Any, ttl: int) -> None:
    if ttl <= 0:
        return
    try:
        await cache_set_json(key, value, ttl)
    except Exception as e:
        logger.warning(f"Cache write skipped for {key}: {e}")


async def try_cache_delete(key: str) -> None:
    try:
        await cache_delete(key)
    except Exception as e:
        logger.warning(f"Cache invalidation skipped for {key}: {e}")


async def invalidate_promotions_cache() -> None:
    """Drop the cached featured-promotions payload after a queue change."""
    await try_cache_delete(KEY_ACTIVE_PROMOTIONS)
