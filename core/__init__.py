# Core package - Infrastructure components
from .browser import BrowserPool, get_browser_pool, close_browser_pool
from .cache import RedisClient, get_redis_client, close_redis_client
from .celery import celery_app

__all__ = [
    # Browser pool
    "BrowserPool",
    "get_browser_pool",
    "close_browser_pool",
    # Redis/Cache
    "RedisClient",
    "get_redis_client",
    "close_redis_client",
    # Celery
    "celery_app",
]
