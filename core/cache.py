"""
Redis client manager for CRO Auditor
Handles connection pooling, audit caching, and health checks
"""

import json
import redis
from typing import Optional, Any
import logging

from config import settings

logger = logging.getLogger(__name__)


def analysis_cache_key(url: str, mode: str = "rules", viewport: str = "desktop") -> str:
    return f"cache:analysis:{mode}:{viewport}:{url}"


class RedisClient:
    """
    Redis connection manager with connection pooling and retry logic.
    """

    def __init__(self, redis_url: Optional[str] = None):
        redis_url = redis_url or settings.REDIS_URL

        try:
            self.pool = redis.ConnectionPool.from_url(
                redis_url,
                max_connections=20,
                decode_responses=True,
                socket_timeout=5,
                socket_connect_timeout=5,
                retry_on_timeout=True,
            )
            self.client = redis.Redis(connection_pool=self.pool)

            self.client.ping()
            logger.info(f"✅ Redis connected successfully: {redis_url}")
        except redis.ConnectionError as e:
            logger.error(f"❌ Redis connection failed: {str(e)}")
            raise RuntimeError(f"Failed to connect to Redis: {str(e)}")

    def ping(self) -> bool:
        """Check if Redis is available"""
        try:
            return self.client.ping()
        except redis.ConnectionError:
            return False

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Store a value in Redis with optional TTL.

        Args:
            key: Redis key
            value: Value to store (JSON-encoded if not a string)
            ttl: Time to live in seconds (None = no expiration)

        Returns:
            True if successful
        """
        try:
            if not isinstance(value, str):
                value = json.dumps(value)

            if ttl:
                return bool(self.client.setex(key, ttl, value))
            return bool(self.client.set(key, value))
        except Exception as e:
            logger.error(f"Redis SET failed for key '{key}': {str(e)}")
            return False

    def get(self, key: str, decode_json: bool = True) -> Optional[Any]:
        try:
            value = self.client.get(key)

            if value is None:
                return None

            if decode_json:
                try:
                    return json.loads(value)
                except (json.JSONDecodeError, TypeError):
                    return value

            return value
        except Exception as e:
            logger.error(f"Redis GET failed for key '{key}': {str(e)}")
            return None

    def delete(self, key: str) -> bool:
        try:
            return bool(self.client.delete(key))
        except Exception as e:
            logger.error(f"Redis DELETE failed for key '{key}': {str(e)}")
            return False

    def cache_analysis(
        self,
        url: str,
        analysis_result: dict,
        mode: str = "rules",
        viewport: str = "desktop",
        ttl: int = settings.CACHE_TTL,
    ) -> bool:
        """Cache a serialized audit result for a URL, audit mode and viewport."""
        return self.set(analysis_cache_key(url, mode, viewport), analysis_result, ttl=ttl)

    def get_cached_analysis(
        self, url: str, mode: str = "rules", viewport: str = "desktop"
    ) -> Optional[dict]:
        cached = self.get(analysis_cache_key(url, mode, viewport), decode_json=True)
        return cached if isinstance(cached, dict) else None

    def clear_cache(self, pattern: str = "cache:*") -> int:
        """
        Clear cached entries matching a pattern.

        Args:
            pattern: Redis key pattern (default: all cache entries)

        Returns:
            Number of keys deleted
        """
        try:
            keys = list(self.client.scan_iter(match=pattern))
            if keys:
                return self.client.delete(*keys)
            return 0
        except Exception as e:
            logger.error(f"Redis cache clear failed for pattern '{pattern}': {str(e)}")
            return 0

    def clear_analysis(self, url: str) -> int:
        """Remove every cached audit of a URL, across modes and viewports."""
        return self.clear_cache(analysis_cache_key(url, "*", "*"))

    def get_stats(self) -> dict:
        try:
            info = self.client.info()
            return {
                "connected_clients": info.get("connected_clients", 0),
                "used_memory_human": info.get("used_memory_human", "unknown"),
                "total_commands_processed": info.get("total_commands_processed", 0),
            }
        except Exception as e:
            logger.error(f"Failed to get Redis stats: {str(e)}")
            return {"error": str(e)}

    def close(self):
        """Close Redis connection pool"""
        try:
            self.pool.disconnect()
            logger.info("Redis connection closed")
        except Exception as e:
            logger.error(f"Error closing Redis connection: {str(e)}")


# Global Redis client instance
redis_client: Optional[RedisClient] = None


def get_redis_client() -> RedisClient:
    """Get or create the global Redis client instance."""
    global redis_client

    if redis_client is None:
        redis_client = RedisClient()

    return redis_client


def close_redis_client():
    """Close the global Redis client"""
    global redis_client

    if redis_client is not None:
        redis_client.close()
        redis_client = None
