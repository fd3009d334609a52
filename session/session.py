"""
Session model persisted by the session stores.

A Session is an opaque record owned by the calling application: a unique
identifier, a mapping of string keys to JSON-serializable values, and an
optional expiry. Stores only serialize and deserialize it.

The identifier is derived from the cookie value handed to the client, so
the raw cookie never appears in the backing store.
"""

import hashlib
import math
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, Field, ValidationError
from pydantic_core import PydanticSerializationError

from errors.exceptions import serialization_error

# 64 random bytes, urlsafe base64 encoded
COOKIE_VALUE_BYTES = 64

_MISSING = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_json_value(value: Any, path: str = "$") -> None:
    """
    Check that a value survives a JSON round-trip unchanged.

    Only dicts with str keys, lists, str, int, finite float, bool and None
    qualify. Tuples, NaN, infinities and non-str dict keys are rejected
    because JSON would hand them back as something else.

    Raises:
        TypeError: If the value, or anything nested in it, has another type.
        ValueError: If a float is NaN or infinite.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"{path}: {value!r} is not a finite number")
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            check_json_value(item, f"{path}[{i}]")
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"{path}: dict key {key!r} is not a str")
            check_json_value(item, f"{path}.{key}")
        return
    raise TypeError(f"{path}: {type(value).__name__} is not JSON-compatible")


class SessionRecord(BaseModel):
    """
    Wire form of a session as stored in the key-value store.

    Attributes:
        id: Session identifier (SHA-256 hex digest of the cookie value)
        expiry: Absolute UTC expiry, None for sessions that never expire
        max_age: Length of the expiry window in seconds, used to slide expiry
        data: Session attributes
    """
    id: str
    expiry: Optional[datetime] = None
    max_age: Optional[float] = None
    data: dict[str, Any] = Field(default_factory=dict)

    def to_payload(self) -> str:
        """
        Encode the record as a JSON string.

        Raises:
            SessionSerializationError: If a value, including one mutated
                after insert, would not survive a JSON round-trip.
        """
        try:
            check_json_value(self.data)
            return self.model_dump_json()
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise serialization_error(
                f"Failed to encode session {self.id!r}",
                details={"error": str(e)}
            ) from e

    @classmethod
    def from_payload(cls, payload: Union[str, bytes]) -> "SessionRecord":
        """
        Decode a record from a JSON string or bytes.

        Raises:
            SessionSerializationError: If the payload is not a valid record.
        """
        try:
            return cls.model_validate_json(payload)
        except ValidationError as e:
            raise serialization_error(
                "Failed to decode session payload",
                details={"error": str(e)}
            ) from e


class Session:
    """
    Server-side session record.

    New sessions carry a freshly generated cookie value; sessions rebuilt
    from the store only know their cookie value when the caller supplies it.

    Example:
        session = Session()
        session.insert("user_id", 42)
        session.expire_in(timedelta(minutes=30))
        cookie = await store.store_session(session)
    """

    def __init__(self) -> None:
        self._cookie_value: Optional[str] = secrets.token_urlsafe(COOKIE_VALUE_BYTES)
        self._id = self.id_from_cookie_value(self._cookie_value)
        self._data: dict[str, Any] = {}
        self._expiry: Optional[datetime] = None
        self._max_age: Optional[float] = None
        self._destroyed = False
        self._data_changed = False

    @staticmethod
    def id_from_cookie_value(cookie_value: str) -> str:
        """
        Derive the session id from a cookie value.

        Args:
            cookie_value: The opaque value stored in the client's cookie.

        Returns:
            The hex SHA-256 digest of the cookie value.
        """
        return hashlib.sha256(cookie_value.encode("utf-8")).hexdigest()

    @classmethod
    def from_record(
        cls,
        record: SessionRecord,
        cookie_value: Optional[str] = None
    ) -> "Session":
        """
        Rebuild a session from its stored record.

        Args:
            record: The decoded record.
            cookie_value: The cookie the session was looked up with, if known.
        """
        session = cls.__new__(cls)
        session._cookie_value = cookie_value
        session._id = record.id
        session._data = dict(record.data)
        session._expiry = record.expiry
        session._max_age = record.max_age
        session._destroyed = False
        session._data_changed = False
        return session

    def to_record(self) -> SessionRecord:
        return SessionRecord(
            id=self._id,
            expiry=self._expiry,
            max_age=self._max_age,
            data=dict(self._data),
        )

    @property
    def id(self) -> str:
        return self._id

    @property
    def cookie_value(self) -> Optional[str]:
        return self._cookie_value

    def into_cookie_value(self) -> Optional[str]:
        """Return the cookie value to hand back to the client, if known."""
        return self._cookie_value

    # Data

    def insert(self, key: str, value: Any) -> None:
        """
        Set a session attribute.

        Raises:
            SessionSerializationError: If the value would not survive a JSON
                round-trip unchanged.
        """
        try:
            check_json_value(value)
        except (TypeError, ValueError) as e:
            raise serialization_error(
                f"Value for session key {key!r} is not serializable",
                details={"key": key, "error": str(e)}
            ) from e
        if self._data.get(key, _MISSING) != value:
            self._data_changed = True
        self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def remove(self, key: str) -> None:
        """Remove a session attribute if it exists."""
        if key in self._data:
            del self._data[key]
            self._data_changed = True

    def clear(self) -> None:
        if self._data:
            self._data.clear()
            self._data_changed = True

    def keys(self) -> list[str]:
        return list(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    @property
    def data_changed(self) -> bool:
        return self._data_changed

    def reset_data_changed(self) -> None:
        self._data_changed = False

    # Expiry

    @property
    def expiry(self) -> Optional[datetime]:
        return self._expiry

    @property
    def max_age(self) -> Optional[float]:
        """Length of the expiry window in seconds, or None."""
        return self._max_age

    def set_expiry(self, expiry: datetime) -> None:
        """
        Set an absolute expiry.

        Naive datetimes are treated as UTC. The expiry window used for
        sliding expiry becomes the time remaining until ``expiry``.
        """
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        self._expiry = expiry
        self._max_age = max((expiry - _utcnow()).total_seconds(), 0.0)

    def expire_in(self, ttl: Union[timedelta, int, float]) -> None:
        """Expire the session ``ttl`` (a timedelta or seconds) from now."""
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        self._expiry = _utcnow() + ttl
        self._max_age = ttl.total_seconds()

    def clear_expiry(self) -> None:
        self._expiry = None
        self._max_age = None

    @property
    def expires_in(self) -> Optional[timedelta]:
        """Time remaining until expiry, None if the session never expires."""
        if self._expiry is None:
            return None
        return self._expiry - _utcnow()

    @property
    def is_expired(self) -> bool:
        return self._expiry is not None and self._expiry <= _utcnow()

    def validate(self) -> Optional["Session"]:
        """Return the session if it has not expired, otherwise None."""
        return None if self.is_expired else self

    # Lifecycle

    def destroy(self) -> None:
        """Mark the session for deletion by the caller's middleware."""
        self._destroyed = True

    @property
    def is_destroyed(self) -> bool:
        return self._destroyed

    def regenerate(self) -> None:
        """
        Issue a new cookie value and id, keeping the data.

        The caller is responsible for destroying the record stored under
        the previous id.
        """
        self._cookie_value = secrets.token_urlsafe(COOKIE_VALUE_BYTES)
        self._id = self.id_from_cookie_value(self._cookie_value)
        self._data_changed = True

    def __repr__(self) -> str:
        return (
            f"Session(id={self._id!r}, expiry={self._expiry!r}, "
            f"keys={list(self._data)!r})"
        )
