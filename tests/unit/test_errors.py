"""
Unit tests for the session store error hierarchy.
"""

import pytest

from errors import (
    ErrorCode,
    SessionSerializationError,
    SessionStoreConnectionError,
    SessionStoreError,
    is_transient,
    serialization_error,
    session_store_unavailable,
)


class TestSessionStoreError:
    """Tests for the base exception."""

    def test_base_error_takes_explicit_code(self):
        error = SessionStoreError("boom", error_code=ErrorCode.CONFIGURATION_ERROR)

        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert error.message == "boom"
        assert str(error) == "boom"
        assert error.details is None

    def test_base_error_without_code_raises(self):
        with pytest.raises(TypeError):
            SessionStoreError("boom")

    def test_to_dict_omits_missing_details(self):
        error = SessionSerializationError("boom")

        assert error.to_dict() == {"error_code": "SESSION_SERIALIZATION_ERROR", "message": "boom"}

    def test_to_dict_includes_details(self):
        error = SessionStoreConnectionError("down", details={"command": "GET"})

        assert error.to_dict() == {
            "error_code": "SESSION_STORE_UNAVAILABLE",
            "message": "down",
            "details": {"command": "GET"},
        }

    def test_repr(self):
        error = SessionSerializationError("bad payload")

        assert repr(error) == (
            "SessionSerializationError(error_code='SESSION_SERIALIZATION_ERROR', "
            "message='bad payload', details=None)"
        )

    def test_explicit_error_code_overrides_default(self):
        error = SessionStoreConnectionError("x", error_code=ErrorCode.SESSION_SERIALIZATION_ERROR)

        assert error.error_code == ErrorCode.SESSION_SERIALIZATION_ERROR
        assert error.transient is False


class TestFactories:
    """Tests for the convenience factory functions."""

    def test_session_store_unavailable(self):
        error = session_store_unavailable(details={"command": "SET"})

        assert isinstance(error, SessionStoreConnectionError)
        assert isinstance(error, SessionStoreError)
        assert error.message == "Session store unavailable"
        assert error.transient is True

    def test_serialization_error(self):
        error = serialization_error("cannot decode")

        assert isinstance(error, SessionSerializationError)
        assert error.error_code == ErrorCode.SESSION_SERIALIZATION_ERROR
        assert error.transient is False


@pytest.mark.parametrize("code,expected", [
    (ErrorCode.SESSION_STORE_UNAVAILABLE, True),
    (ErrorCode.SESSION_SERIALIZATION_ERROR, False),
    (ErrorCode.CONFIGURATION_ERROR, False),
])
def test_is_transient(code, expected):
    assert is_transient(code) is expected
