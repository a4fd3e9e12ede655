"""Fixtures for integration tests against real services.

Redis comes from REDIS_URL (default redis://localhost:6379/15); tests are
skipped when it does not answer. Keys are namespaced per test run.
"""

import os
import uuid
from collections.abc import AsyncIterator

import pytest
from redis.asyncio import Redis
from redis.exceptions import RedisError


@pytest.fixture
async def real_redis() -> AsyncIterator[Redis]:
    client = Redis.from_url(
        os.environ.get("REDIS_URL", "redis://localhost:6379/15"), decode_responses=False
    )
    try:
        await client.ping()  # type: ignore[misc]
    except RedisError as e:
        await client.aclose()
        pytest.skip(f"Redis unavailable: {e}")
    yield client
    await client.aclose()


@pytest.fixture
async def key_prefix(real_redis: Redis) -> AsyncIterator[str]:
    """Unique key prefix; everything under it is deleted afterwards."""
    prefix = f"narrative:test:{uuid.uuid4().hex[:8]}"
    yield prefix
    keys = [key async for key in real_redis.scan_iter(match=f"{prefix}:*")]
    if keys:
        await real_redis.delete(*keys)
