"""
Shared pytest fixtures and configuration for all tests.
"""
import os
from typing import Any, AsyncIterator, Iterable
from unittest.mock import MagicMock, AsyncMock

import pytest

# Hypothesis configuration for property-based testing
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced for local development
settings.register_profile(
    "default",
    max_examples=100,
    verbosity=Verbosity.normal,
    deadline=None,  # Disable deadline for async tests
    print_blob=True,  # Print failing examples for debugging
)

# CI profile: more thorough testing for continuous integration
settings.register_profile(
    "ci",
    max_examples=200,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    derandomize=True,  # Reproducible results in CI
)

# Debug profile: minimal examples for quick debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
    print_blob=True,
    phases=[Phase.explicit, Phase.reuse, Phase.generate],  # Skip shrinking for speed
)

# Fast profile: quick smoke tests
settings.register_profile(
    "fast",
    max_examples=20,
    verbosity=Verbosity.normal,
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


async def async_iter(items: Iterable[Any]) -> AsyncIterator[Any]:
    """Async generator over ``items``, standing in for ``scan_iter``."""
    for item in items:
        yield item


@pytest.fixture
def mock_redis() -> MagicMock:
    """Create a mock async Redis client for unit tests."""
    mock = MagicMock()
    mock.get = AsyncMock(return_value=None)
    mock.set = AsyncMock(return_value=True)
    mock.delete = AsyncMock(return_value=1)
    mock.pexpire = AsyncMock(return_value=True)
    mock.ttl = AsyncMock(return_value=-2)
    mock.dbsize = AsyncMock(return_value=0)
    mock.flushdb = AsyncMock(return_value=True)
    mock.ping = AsyncMock(return_value=True)
    mock.scan_iter = MagicMock(side_effect=lambda **kwargs: async_iter([]))
    return mock


@pytest.fixture
def sample_session_data() -> dict:
    """Sample session attributes for testing."""
    return {
        "user_id": 42,
        "username": "jdoe",
        "roles": ["admin", "editor"],
        "preferences": {"theme": "dark", "page_size": 25},
        "csrf_token": None,
    }


@pytest.fixture
def set_scan_keys(mock_redis: MagicMock):
    """Make ``mock_redis.scan_iter`` yield the given keys."""
    def _set(keys: Iterable[str]) -> None:
        keys = list(keys)
        mock_redis.scan_iter.side_effect = lambda **kwargs: async_iter(keys)
    return _set
