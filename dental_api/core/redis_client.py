"""Redis client configuration and cache helpers."""

import json
from typing import Any, cast

import redis
import structlog

from dental_api.config import settings

logger = structlog.get_logger(__name__)

# Global Redis client instance
_redis_client: redis.Redis | None = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client instance.

    Returns:
        Redis client instance
    """
    global _redis_client

    if _redis_client is None:
        _redis_client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            username=settings.redis_username,
            password=settings.redis_password or None,
            decode_responses=settings.redis_decode_responses,
            socket_connect_timeout=2,
            socket_keepalive=True,
            health_check_interval=30,
        )

    return _redis_client


async def check_redis_connection() -> bool:
    """Check if Redis connection is healthy."""
    try:
        get_redis_client().ping()
        return True
    except Exception:
        return False


def close_redis_connection() -> None:
    """Close Redis connection."""
    global _redis_client

    if _redis_client is not None:
        _redis_client.close()
        _redis_client = None


class CacheManager:
    """Redis-backed JSON cache.

    Every operation fails open: a Redis outage turns reads into misses and
    writes into no-ops so scheduling keeps working from the database.
    """

    def __init__(self, redis_client: redis.Redis):
        """Initialize cache manager with Redis client."""
        self.redis = redis_client

    def get_json(self, key: str) -> Any | None:
        """Get a JSON value from cache and deserialize it."""
        try:
            value = cast(str | None, self.redis.get(key))
        except redis.RedisError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

        if not value:
            return None

        try:
            return json.loads(value)
        except ValueError:
            return None

    def set_json(self, key: str, value: Any, ttl: int | None = None) -> bool:
        """
        Serialize and set a JSON value in cache.

        Args:
            key: Cache key
            value: Value to serialize and cache
            ttl: Time to live in seconds

        Returns:
            True if successful, False otherwise
        """
        payload = json.dumps(value, default=str)
        try:
            if ttl:
                self.redis.setex(key, ttl, payload)
            else:
                self.redis.set(key, payload)
        except redis.RedisError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Args:
            pattern: Redis key pattern (e.g., 'schedule:<tenant>:*')

        Returns:
            Number of keys deleted
        """
        try:
            keys = cast(list[str], self.redis.keys(pattern))
            if keys:
                return cast(int, self.redis.delete(*keys))
        except redis.RedisError as e:
            logger.warning("cache_invalidation_failed", pattern=pattern, error=str(e))
        return 0
