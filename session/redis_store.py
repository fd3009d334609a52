"""
Redis-based session store implementation.

This module provides a Redis-backed implementation of the SessionStore
interface. Sessions are stored as JSON strings under ``prefix + session.id``
and expire through Redis' native per-key TTL.

The store is handed an already-connected client or connection pool and
never connects or closes it; pool lifecycle belongs to the caller.
"""

import logging
from contextlib import contextmanager
from datetime import timedelta
from typing import Iterator, Optional, Union

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from errors.exceptions import session_store_unavailable
from session.session import Session, SessionRecord
from session.store import SessionStore

logger = logging.getLogger(__name__)

# Keys removed per DEL command when clearing a prefixed store
CLEAR_BATCH_SIZE = 500

# COUNT hint passed to SCAN
SCAN_COUNT = 1000

_GLOB_SPECIAL_CHARS = frozenset("\\*?[]")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so ``value`` matches literally."""
    return "".join("\\" + c if c in _GLOB_SPECIAL_CHARS else c for c in value)


def _milliseconds(delta: timedelta) -> int:
    return int(delta.total_seconds() * 1000)


@contextmanager
def _translate_errors(command: str, key: Optional[str] = None) -> Iterator[None]:
    """Re-raise redis client errors as SessionStoreConnectionError."""
    try:
        yield
    except RedisError as e:
        details = {"command": command, "error": str(e)}
        if key is not None:
            details["key"] = key
        raise session_store_unavailable(
            f"Redis {command} failed: {e}",
            details=details
        ) from e


class RedisSessionStore(SessionStore):
    """
    Redis-backed session store implementation.

    Keys are ``prefix + session.id``. Without a prefix the store owns the
    whole selected database, and ``clear_store`` flushes it.

    Attributes:
        prefix: Key prefix, fixed for the lifetime of the store
        sliding_expiry: Whether loading a session resets its TTL
    """

    def __init__(
        self,
        client: Redis,
        prefix: Optional[str] = None,
        *,
        sliding_expiry: bool = True
    ):
        """
        Initialize the Redis session store.

        Args:
            client: A connected ``redis.asyncio.Redis`` client. Shared, not
                owned by the store.
            prefix: Optional key prefix for namespace isolation. An empty
                string is the same as no prefix.
            sliding_expiry: Reset a session's TTL to its expiry window each
                time it is loaded.
        """
        self._client = client
        self._prefix = prefix or None
        self.sliding_expiry = sliding_expiry

    @classmethod
    def from_pool(
        cls,
        pool: Union[Redis, ConnectionPool],
        prefix: Optional[str] = None,
        *,
        sliding_expiry: bool = True
    ) -> "RedisSessionStore":
        """
        Build a store around an existing client or connection pool.

        No I/O is performed. A bare ``ConnectionPool`` is wrapped in a client
        that does not close the pool.
        """
        if isinstance(pool, ConnectionPool):
            client = Redis(connection_pool=pool)
        else:
            client = pool
        return cls(client, prefix, sliding_expiry=sliding_expiry)

    @property
    def prefix(self) -> Optional[str]:
        return self._prefix

    @property
    def client(self) -> Redis:
        return self._client

    def _prefix_key(self, key: str) -> str:
        """
        Generate the Redis key for a session id.

        Args:
            key: The session identifier.

        Returns:
            The key with the store prefix applied.
        """
        if self._prefix is None:
            return key
        return f"{self._prefix}{key}"

    async def load_session(self, cookie_value: str) -> Optional[Session]:
        """
        Retrieve a session by cookie value.

        When sliding expiry is enabled and the session has an expiry
        window, the key's TTL and the session's expiry are both reset to
        the full window.

        Returns:
            The session, or None if the key is absent.

        Raises:
            SessionStoreConnectionError: If a Redis command fails.
            SessionSerializationError: If the stored payload is invalid.
        """
        key = self._prefix_key(Session.id_from_cookie_value(cookie_value))

        with _translate_errors("GET", key):
            payload = await self._client.get(key)

        if payload is None:
            return None

        # The key's TTL is authoritative; the stored expiry lags behind it
        # once the TTL has been slid.
        session = Session.from_record(SessionRecord.from_payload(payload), cookie_value)

        if self.sliding_expiry:
            await self._slide(key, session)

        return session

    async def store_session(self, session: Session) -> Optional[str]:
        """
        Create or update a session.

        The session's remaining lifetime becomes the key's TTL (PX, in
        milliseconds). A session without an expiry is stored without a TTL,
        replacing any TTL the key had. A session that has already expired
        is not written; its key is deleted instead.

        Returns:
            The session's cookie value, or None if it has none or was
            not written.

        Raises:
            SessionStoreConnectionError: If a Redis command fails.
            SessionSerializationError: If the session cannot be encoded.
        """
        key = self._prefix_key(session.id)
        payload = session.to_record().to_payload()

        expiry_ms: Optional[int] = None
        if session.expires_in is not None:
            expiry_ms = _milliseconds(session.expires_in)
            if expiry_ms <= 0:
                logger.debug("Session already expired, deleting instead of storing", extra={
                    "extra_data": {"key": key}
                })
                with _translate_errors("DEL", key):
                    await self._client.delete(key)
                return None

        with _translate_errors("SET", key):
            await self._client.set(key, payload, px=expiry_ms)

        return session.into_cookie_value()

    async def destroy_session(self, session: Session) -> None:
        """
        Delete a session.

        This operation is idempotent - deleting a non-existent
        session does not raise an error.

        Raises:
            SessionStoreConnectionError: If the DEL command fails.
        """
        key = self._prefix_key(session.id)
        with _translate_errors("DEL", key):
            await self._client.delete(key)

    async def clear_store(self) -> None:
        """
        Delete every session under the store prefix.

        Keys are found with a non-blocking SCAN and removed in batches of
        ``CLEAR_BATCH_SIZE``. Keys written while the scan is running may or
        may not be removed. Without a prefix the selected database is
        flushed.

        Raises:
            SessionStoreConnectionError: If a Redis command fails.
        """
        if self._prefix is None:
            with _translate_errors("FLUSHDB"):
                await self._client.flushdb()
            return

        ids = await self._ids()
        for start in range(0, len(ids), CLEAR_BATCH_SIZE):
            batch = ids[start:start + CLEAR_BATCH_SIZE]
            with _translate_errors("DEL"):
                await self._client.delete(*batch)

        logger.debug("Cleared session store", extra={
            "extra_data": {"prefix": self._prefix, "deleted": len(ids)}
        })

    async def count(self) -> int:
        """
        Count stored sessions.

        Uses DBSIZE when the store has no prefix, otherwise a SCAN over
        the prefix.
        """
        if self._prefix is None:
            with _translate_errors("DBSIZE"):
                return int(await self._client.dbsize())
        return len(await self._ids())

    async def ttl_for_session(self, session: Session) -> int:
        """
        Return the remaining TTL of a session's key in seconds.

        Follows Redis semantics: -1 if the key has no TTL, -2 if it does
        not exist.
        """
        key = self._prefix_key(session.id)
        with _translate_errors("TTL", key):
            return int(await self._client.ttl(key))

    async def refresh_ttl(self, session: Session) -> bool:
        """
        Reset a session's expiry to its full window without rewriting data.

        Returns:
            True if the key exists and its TTL was reset, False if the key
            does not exist or the session has no expiry.

        Raises:
            SessionStoreConnectionError: If the PEXPIRE command fails.
        """
        return await self._slide(self._prefix_key(session.id), session)

    async def health_check(self) -> bool:
        """
        Check connectivity and health of the Redis store.

        Returns:
            True if Redis answers PING, False otherwise.

        Note:
            This method does not raise exceptions - connectivity issues
            are caught and result in a False return value.
        """
        try:
            result = await self._client.ping()
            return result is True
        except Exception as e:
            logger.debug("Redis health check failed", extra={
                "extra_data": {"error": str(e)}
            })
            return False

    async def _slide(self, key: str, session: Session) -> bool:
        window_ms = int((session.max_age or 0) * 1000)
        if window_ms <= 0:
            return False

        session.expire_in(session.max_age)
        with _translate_errors("PEXPIRE", key):
            result = await self._client.pexpire(key, window_ms)
        return bool(result)

    async def _ids(self) -> list:
        """Collect all string keys under the store prefix."""
        pattern = f"{escape_glob(self._prefix or '')}*"
        keys = []
        with _translate_errors("SCAN"):
            async for key in self._client.scan_iter(
                match=pattern, count=SCAN_COUNT, _type="STRING"
            ):
                keys.append(key)
        return keys

    def __repr__(self) -> str:
        return f"RedisSessionStore(prefix={self._prefix!r})"
