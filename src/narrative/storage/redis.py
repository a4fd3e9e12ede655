"""Redis connection for the queue, flag store and search cache.

The client is created with `decode_responses=False`; consumers decode
what they read.
"""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from narrative.core.exceptions import RedisConnectionError
from narrative.core.logging import get_logger

logger = get_logger(__name__)

# Process-wide client (set up by the app lifespan or the CLI)
_redis: Redis | None = None


def get_redis() -> Redis:
    """Get the process-wide Redis client."""
    if _redis is None:
        raise RuntimeError("Redis not initialized")
    return _redis


async def init_redis(redis_url: str) -> Redis:
    """Connect to Redis and verify the connection with PING.

    Raises:
        RedisConnectionError: If the server does not answer
    """
    global _redis
    client = Redis.from_url(redis_url, decode_responses=False)
    try:
        await client.ping()  # type: ignore[misc]
    except RedisError as e:
        await client.aclose()
        raise RedisConnectionError(f"Redis ping failed: {e}") from e
    _redis = client
    logger.info("Redis connected")
    return client


async def close_redis() -> None:
    """Close the process-wide Redis client, if any."""
    global _redis
    if _redis is None:
        return
    await _redis.aclose()
    _redis = None
    logger.info("Redis disconnected")
