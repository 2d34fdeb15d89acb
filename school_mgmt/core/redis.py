from typing import Optional

from redis import asyncio as aioredis

from school_mgmt.core.logging import logger

redis_client: Optional[aioredis.Redis] = None


def init_redis(url: str) -> aioredis.Redis:
    """Create the shared Redis client used by the rate limiters"""
    global redis_client
    redis_client = aioredis.from_url(url, decode_responses=True)
    logger.info("Redis client configured for rate limiting")
    return redis_client


async def close_redis() -> None:
    """Close Redis connection"""
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
        logger.info("Redis connection closed")
