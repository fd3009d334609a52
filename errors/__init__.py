"""
Error handling module for the session store.

This module provides structured error handling with:
- ErrorCode enum for standardized error codes
- SessionStoreError hierarchy for store failures
- Factory functions for the common failure types
"""

from errors.codes import ErrorCode, is_transient
from errors.exceptions import (
    SessionStoreError,
    SessionStoreConnectionError,
    SessionSerializationError,
    session_store_unavailable,
    serialization_error,
)

__all__ = [
    "ErrorCode",
    "is_transient",
    "SessionStoreError",
    "SessionStoreConnectionError",
    "SessionSerializationError",
    "session_store_unavailable",
    "serialization_error",
]
