"""
Exception classes for the session store.

This module provides the SessionStoreError hierarchy and convenience
factory functions for creating exceptions with proper error codes.
"""

from typing import Any, Optional

from errors.codes import ErrorCode, is_transient


class SessionStoreError(Exception):
    """
    Base exception class for all session store errors.

    This exception provides structured error information including:
    - error_code: A standardized error code from the ErrorCode enum
    - message: A human-readable error message
    - details: Optional additional context (e.g., the failing operation)

    Example:
        raise SessionStoreError(
            error_code=ErrorCode.SESSION_STORE_UNAVAILABLE,
            message="Redis GET failed",
            details={"operation": "load_session"}
        )
    """

    default_error_code: Optional[ErrorCode] = None

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[dict[str, Any]] = None
    ):
        """
        Initialize a SessionStoreError.

        Args:
            message: A human-readable error message
            error_code: The error code (defaults to the class default)
            details: Optional dictionary with additional error context

        Raises:
            TypeError: If no error code is given and the class has no default.
        """
        error_code = error_code or self.default_error_code
        if error_code is None:
            raise TypeError(f"{type(self).__name__} requires an error_code")
        self.error_code = error_code
        self.message = message
        self.details = details
        super().__init__(message)

    @property
    def transient(self) -> bool:
        return is_transient(self.error_code)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert the exception to a dictionary for JSON serialization.

        Returns:
            Dictionary containing error_code, message, and details
        """
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(error_code={self.error_code.value!r}, "
            f"message={self.message!r}, details={self.details!r})"
        )


class SessionStoreConnectionError(SessionStoreError):
    """Raised when the backing store cannot be reached or a command fails."""

    default_error_code = ErrorCode.SESSION_STORE_UNAVAILABLE


class SessionSerializationError(SessionStoreError):
    """Raised when a session payload cannot be encoded or decoded."""

    default_error_code = ErrorCode.SESSION_SERIALIZATION_ERROR


# Convenience factory functions for common error types

def session_store_unavailable(
    message: str = "Session store unavailable",
    details: Optional[dict[str, Any]] = None
) -> SessionStoreConnectionError:
    """Create a session store unavailable exception."""
    return SessionStoreConnectionError(message, details=details)


def serialization_error(
    message: str = "Session payload could not be serialized",
    details: Optional[dict[str, Any]] = None
) -> SessionSerializationError:
    """Create a serialization error exception."""
    return SessionSerializationError(message, details=details)
