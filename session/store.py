"""
Session store abstraction for external session storage.

This module defines the abstract interface consumed by web session
middleware: persist a session and hand back its cookie value, look a
session up by cookie value, destroy a session, and clear the store.
"""

from abc import ABC, abstractmethod
from typing import Optional

from session.session import Session


class SessionStore(ABC):
    """
    Abstract base class for session storage implementations.

    Implementations keep no in-process state beyond their configuration;
    every operation is an independent round trip to the backing store.

    All methods are async to support non-blocking I/O operations with
    external storage systems.
    """

    @abstractmethod
    async def load_session(self, cookie_value: str) -> Optional[Session]:
        """
        Look a session up by the cookie value handed to the client.

        Args:
            cookie_value: The opaque cookie value.

        Returns:
            The session if found, None if it does not exist or has expired.

        Raises:
            SessionStoreConnectionError: If the backing store is unreachable.
            SessionSerializationError: If the stored payload cannot be decoded.
        """
        pass

    @abstractmethod
    async def store_session(self, session: Session) -> Optional[str]:
        """
        Create or update a session.

        The session's expiry, when set, becomes the key's TTL.

        Args:
            session: The session to persist.

        Returns:
            The cookie value to hand to the client, or None if the session
            does not carry one or was not written because it has expired.

        Raises:
            SessionStoreConnectionError: If the backing store is unreachable.
            SessionSerializationError: If the session cannot be encoded.
        """
        pass

    @abstractmethod
    async def destroy_session(self, session: Session) -> None:
        """
        Delete a session immediately, regardless of its remaining TTL.

        This operation is idempotent - destroying a session that is not
        stored does not raise an error.

        Raises:
            SessionStoreConnectionError: If the backing store is unreachable.
        """
        pass

    @abstractmethod
    async def clear_store(self) -> None:
        """
        Delete every session belonging to this store.

        Raises:
            SessionStoreConnectionError: If the backing store is unreachable.
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of sessions currently held by this store."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check connectivity and health of the session store.

        Returns:
            True if the store is healthy and accessible, False otherwise.

        Note:
            This method should not raise exceptions - connectivity issues
            should be caught and result in a False return value.
        """
        pass
