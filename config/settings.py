"""
Configuration management for the session store.

This module provides centralized configuration loading and validation using
Pydantic settings. Values are loaded from environment variables or .env files,
with an environment-specific .env file layered over the base one.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any, Optional, List, Tuple
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from errors.codes import ErrorCode

REDIS_URL_SCHEMES = {"redis", "rediss", "unix"}


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreType(str, Enum):
    """Session store backends."""
    REDIS = "redis"
    MEMORY = "memory"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the list of .env files to load for the given environment.

    Files are loaded in order, with later files overriding earlier ones.
    """
    return (".env", f".env.{environment.value}")


class Settings(BaseSettings):
    """
    Session store settings loaded from environment variables.

    The ENVIRONMENT variable determines which environment-specific
    .env file is layered over the base .env file.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Session Store Configuration
    session_store_type: StoreType = Field(
        default=StoreType.REDIS,
        description="Session store type: 'redis' or 'memory'"
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for session storage"
    )
    redis_max_connections: int = Field(
        default=6,
        ge=1,
        le=1000,
        description="Maximum connections held by the Redis connection pool"
    )
    session_key_prefix: Optional[str] = Field(
        default=None,
        description="Prefix applied to every session key"
    )
    session_sliding_expiry: bool = Field(
        default=True,
        description="Reset a session's TTL each time it is loaded"
    )

    # Observability Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=True,
        description="Emit logs as JSON lines"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("session_store_type", mode="before")
    @classmethod
    def normalize_session_store_type(cls, v: Any) -> Any:
        """Accept store types in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate that redis_url, when given, uses a Redis URL scheme."""
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        scheme = urlparse(v).scheme
        if scheme not in REDIS_URL_SCHEMES:
            raise ValueError(
                f"redis_url must use one of the schemes: {', '.join(sorted(REDIS_URL_SCHEMES))}"
            )
        return v

    @field_validator("session_key_prefix")
    @classmethod
    def validate_session_key_prefix(cls, v: Optional[str]) -> Optional[str]:
        """Treat a blank prefix as no prefix."""
        if v is None or not v.strip():
            return None
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level is a valid logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v = v.strip().upper()
        if v not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(valid_levels))}")
        return v

    @model_validator(mode="after")
    def validate_session_store_config(self) -> "Settings":
        """Validate that a Redis URL is provided where one is required."""
        if self.session_store_type == StoreType.REDIS and not self.redis_url:
            # In development, redis_url is optional (in-memory fallback)
            if self.environment != Environment.DEVELOPMENT:
                raise ValueError(
                    "redis_url is required when session_store_type is 'redis' "
                    "in non-development environments"
                )
        return self


class ConfigurationError(Exception):
    """Exception raised when configuration validation fails."""

    error_code = ErrorCode.CONFIGURATION_ERROR

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None,
                 invalid_fields: Optional[dict] = None):
        self.message = message
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        super().__init__(self.format_error_message())

    def format_error_message(self) -> str:
        """Format a descriptive error message listing all issues."""
        parts = [self.message]

        if self.missing_fields:
            parts.append(f"\nMissing required fields: {', '.join(self.missing_fields)}")

        if self.invalid_fields:
            invalid_parts = [f"  - {field}: {error}" for field, error in self.invalid_fields.items()]
            parts.append("\nInvalid field values:\n" + "\n".join(invalid_parts))

        return "".join(parts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": {
                "missing_fields": self.missing_fields,
                "invalid_fields": self.invalid_fields,
            },
        }


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Factory function to create Settings for a specific environment.

    Args:
        environment: Optional environment override. If not provided, detected from
                    the ENVIRONMENT variable.

    Returns:
        Settings: Validated settings for the specified environment.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = tuple(f for f in _get_env_files(environment) if Path(f).exists())

    class EnvironmentSettings(Settings):
        model_config = SettingsConfigDict(
            env_file=env_files or None,
            env_file_encoding="utf-8",
            case_sensitive=False,
            extra="ignore"
        )

    try:
        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        # Extract field-level errors from Pydantic ValidationError
        if hasattr(e, "errors"):
            for error in e.errors():
                field_name = ".".join(str(loc) for loc in error.get("loc", [])) or "settings"
                error_msg = error.get("msg", str(error))

                if error.get("type") == "missing":
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name] = error_msg

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


# Global settings cache
_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    This is primarily useful for testing to allow reloading settings
    with different environment variables.
    """
    global _settings_cache
    _settings_cache = None


def validate_startup(settings: Optional[Settings] = None) -> None:
    """
    Validate settings before the first session is served.

    Production stores must use a key prefix: without one the store owns the
    whole Redis database and ``clear_store`` flushes it.

    Raises:
        ConfigurationError: If any setting is unusable.
    """
    settings = settings or get_settings()
    validation_errors = {}

    if settings.environment == Environment.PRODUCTION:
        if settings.session_store_type == StoreType.MEMORY:
            validation_errors["session_store_type"] = (
                "The in-memory session store is not shared between processes "
                "and cannot be used in production"
            )
        if settings.session_key_prefix is None:
            validation_errors["session_key_prefix"] = (
                "Production environment requires a session key prefix"
            )

    if validation_errors:
        raise ConfigurationError(
            "Configuration validation failed during startup",
            invalid_fields=validation_errors
        )
