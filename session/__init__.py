"""
Session persistence for web session middleware.

This module stores opaque session records in Redis (or in memory for
development), keyed by a prefix and the session id and expired through the
store's native TTL.
"""

from session.session import Session, SessionRecord
from session.store import SessionStore
from session.redis_store import RedisSessionStore
from session.memory_store import InMemorySessionStore
from session.factory import create_redis_client, create_session_store

__all__ = [
    "Session",
    "SessionRecord",
    "SessionStore",
    "RedisSessionStore",
    "InMemorySessionStore",
    "create_redis_client",
    "create_session_store",
]
