"""
Construction helpers for the configured session store.

The store never owns its connection pool. These helpers build a pool and
client from settings on the caller's behalf; closing the client (and with
it the pool) stays the caller's job.
"""

import logging
from typing import Optional

from redis.asyncio import ConnectionPool, Redis

from config.settings import Settings, StoreType, get_settings
from session.memory_store import InMemorySessionStore
from session.redis_store import RedisSessionStore
from session.store import SessionStore

logger = logging.getLogger(__name__)


def create_redis_client(settings: Optional[Settings] = None) -> Redis:
    """
    Create an async Redis client backed by a bounded connection pool.

    No connection is opened until the first command.

    Raises:
        ValueError: If no Redis URL is configured.
    """
    settings = settings or get_settings()
    if not settings.redis_url:
        raise ValueError("redis_url is not configured")

    pool = ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        decode_responses=True,
    )
    return Redis(connection_pool=pool)


def create_session_store(
    settings: Optional[Settings] = None,
    client: Optional[Redis] = None
) -> SessionStore:
    """
    Build the session store described by settings.

    Args:
        settings: Settings to use, defaults to ``get_settings()``.
        client: Existing Redis client to share. When omitted one is created
            with ``create_redis_client``.

    Returns:
        A RedisSessionStore, or an InMemorySessionStore when the memory
        store is selected or, in development, no Redis URL is configured.
    """
    settings = settings or get_settings()

    if settings.session_store_type == StoreType.MEMORY:
        return InMemorySessionStore(sliding_expiry=settings.session_sliding_expiry)

    if client is None and not settings.redis_url:
        logger.warning("redis_url not configured, falling back to in-memory session store")
        return InMemorySessionStore(sliding_expiry=settings.session_sliding_expiry)

    if client is None:
        client = create_redis_client(settings)

    logger.info("Using Redis session store", extra={
        "extra_data": {
            "prefix": settings.session_key_prefix,
            "sliding_expiry": settings.session_sliding_expiry,
        }
    })
    return RedisSessionStore.from_pool(
        client,
        settings.session_key_prefix,
        sliding_expiry=settings.session_sliding_expiry,
    )
