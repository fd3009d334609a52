"""In-memory session store with expiry checked on access."""

import asyncio
from datetime import datetime, timezone
from typing import Optional

from session.session import Session, SessionRecord
from session.store import SessionStore


class InMemorySessionStore(SessionStore):
    """
    In-memory session store guarded by an asyncio.Lock.

    Sessions are kept as encoded JSON payloads so they round-trip exactly
    as they would through Redis. Suitable for development, testing, and
    single-process applications.
    """

    def __init__(self, *, sliding_expiry: bool = True) -> None:
        self._store: dict[str, tuple[str, Optional[datetime]]] = {}
        self._lock = asyncio.Lock()
        self.sliding_expiry = sliding_expiry

    @staticmethod
    def _expired(expires_at: Optional[datetime]) -> bool:
        return expires_at is not None and expires_at <= datetime.now(timezone.utc)

    async def load_session(self, cookie_value: str) -> Optional[Session]:
        """Retrieve a session. Returns ``None`` if missing or expired."""
        session_id = Session.id_from_cookie_value(cookie_value)
        async with self._lock:
            entry = self._store.get(session_id)
            if entry is None:
                return None

            payload, expires_at = entry
            if self._expired(expires_at):
                del self._store[session_id]
                return None

            session = Session.from_record(SessionRecord.from_payload(payload), cookie_value)
            if self.sliding_expiry and session.max_age:
                session.expire_in(session.max_age)
                self._store[session_id] = (payload, session.expiry)
            return session

    async def store_session(self, session: Session) -> Optional[str]:
        """Store a session until its expiry, or indefinitely."""
        payload = session.to_record().to_payload()
        async with self._lock:
            if session.is_expired:
                self._store.pop(session.id, None)
                return None
            self._store[session.id] = (payload, session.expiry)
        return session.into_cookie_value()

    async def destroy_session(self, session: Session) -> None:
        """Remove a session."""
        async with self._lock:
            self._store.pop(session.id, None)

    async def clear_store(self) -> None:
        async with self._lock:
            self._store.clear()

    async def count(self) -> int:
        """Count sessions that have not expired."""
        async with self._lock:
            expired = [sid for sid, (_, exp) in self._store.items() if self._expired(exp)]
            for sid in expired:
                del self._store[sid]
            return len(self._store)

    async def health_check(self) -> bool:
        return True
