"""
Redis configuration and connection management
"""

import redis.asyncio as redis
from redis.exceptions import RedisError
from typing import Optional
import logging

from shutterbook.config import settings

logger = logging.getLogger(__name__)

# Global Redis client
redis_client: Optional[redis.Redis] = None


async def init_redis():
    """
    Initialize Redis connection
    """
    global redis_client
    try:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            max_connections=settings.REDIS_MAX_CONNECTIONS,
            decode_responses=True
        )
        # Test connection
        await redis_client.ping()
        logger.info("Redis connection established")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {e}")
        raise


async def close_redis():
    """
    Close Redis connection
    """
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")


async def get_redis() -> redis.Redis:
    """
    Get Redis client
    """
    if not redis_client:
        await init_redis()
    return redis_client


class TokenBlacklist:
    """
    Revoked token ids, kept only until the token would have expired anyway
    """

    KEY_PREFIX = "blacklist:"

    def __init__(self, client: redis.Redis):
        self.client = client

    def _key(self, jti: str) -> str:
        return f"{self.KEY_PREFIX}{jti}"

    async def add(self, jti: str, ttl_seconds: int):
        await self.client.setex(self._key(jti), max(1, int(ttl_seconds)), "1")
        logger.info("Token revoked", extra={"jti": jti, "ttl": ttl_seconds})

    async def contains(self, jti: str) -> bool:
        try:
            return bool(await self.client.exists(self._key(jti)))
        except RedisError as e:
            # Fail open for availability
            logger.error(f"Error checking token blacklist: {e}")
            return False
