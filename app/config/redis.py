"""Redis connection and client management."""

from typing import Optional

import redis.asyncio as redis

from app.settings import settings
from app.utils import logger

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Returns the shared Redis client, creating it on first use.
    Only valid when REDIS_URL is configured.
    """
    global _redis_client
    if settings.REDIS_URL is None:
        raise RuntimeError("REDIS_URL is not configured")
    if _redis_client is None:
        _redis_client = redis.from_url(
            str(settings.REDIS_URL), encoding="utf-8", decode_responses=True
        )
    return _redis_client


async def check_redis_connection():
    """
    Checks the connection to the Redis server.
    Raises an exception if the connection fails.
    """
    try:
        # Create a Redis client from the URL using async context manager
        async with redis.from_url(
            str(settings.REDIS_URL), encoding="utf-8", decode_responses=True
        ) as redis_client:
            # Ping the server
            if await redis_client.ping():
                logger.info("Redis connection successful")
            else:
                raise ConnectionError(
                    "Redis connection failed: PING command returned False"
                )
    except Exception as e:
        logger.error(f"Redis connection error: {e}")
        raise


async def close_redis_client():
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
