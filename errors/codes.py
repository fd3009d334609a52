"""
Error code catalog for the session store.

This module defines the error codes raised by the session store, covering
backend connectivity failures, payload serialization failures, and
configuration problems.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the session store.

    Each code identifies one failure category:
    - Backend errors: the key-value store could not be reached or refused a command
    - Payload errors: a session could not be encoded or decoded
    - Configuration errors: settings are missing or invalid
    """

    # Backend errors
    SESSION_STORE_UNAVAILABLE = "SESSION_STORE_UNAVAILABLE"
    """Redis unavailable or command failed"""

    # Payload errors
    SESSION_SERIALIZATION_ERROR = "SESSION_SERIALIZATION_ERROR"
    """Session payload could not be encoded or decoded"""

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """Settings missing or invalid"""


# Codes worth surfacing to an operator as an outage rather than a bad request
TRANSIENT_ERROR_CODES: frozenset[ErrorCode] = frozenset({
    ErrorCode.SESSION_STORE_UNAVAILABLE,
})


def is_transient(error_code: ErrorCode) -> bool:
    """
    Check whether an error code describes a transient backend condition.

    Args:
        error_code: The error code to look up

    Returns:
        True if retrying the same call later may succeed
    """
    return error_code in TRANSIENT_ERROR_CODES
