"""
Fixtures for integration tests against a live Redis server.

The server is taken from REDIS_URL (default: database 15 on localhost).
Tests are skipped when it cannot be reached.
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from redis.asyncio import Redis
from redis.exceptions import RedisError

from session.redis_store import RedisSessionStore

DEFAULT_TEST_REDIS_URL = "redis://127.0.0.1:6379/15"
TEST_PREFIX = "session-store-test/"
OTHER_TEST_PREFIX = "session-store-test-other/"


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[Redis, None]:
    """Connected client, closed after the test."""
    client = Redis.from_url(
        os.getenv("REDIS_URL", DEFAULT_TEST_REDIS_URL),
        max_connections=6,
        decode_responses=True,
    )
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        await client.aclose()
        pytest.skip(f"Redis not available: {e}")
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def store(redis_client: Redis) -> AsyncGenerator[RedisSessionStore, None]:
    """Store under TEST_PREFIX, emptied before and after the test."""
    store = RedisSessionStore.from_pool(redis_client, TEST_PREFIX)
    await store.clear_store()
    yield store
    await store.clear_store()


@pytest_asyncio.fixture
async def other_store(redis_client: Redis) -> AsyncGenerator[RedisSessionStore, None]:
    """Second store sharing the same client under OTHER_TEST_PREFIX."""
    store = RedisSessionStore.from_pool(redis_client, OTHER_TEST_PREFIX)
    await store.clear_store()
    yield store
    await store.clear_store()
