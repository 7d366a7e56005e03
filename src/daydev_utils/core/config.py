"""Configuration management for daydev-utils.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded on first use
and is immutable afterwards.
"""

import hashlib
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOKEN_BYTES = 64
DEFAULT_TOKEN_DIGEST = "sha256"


class Settings(BaseSettings):
    """Library configuration settings.

    Settings are loaded from environment variables prefixed with ``DAYDEV_``
    and from a local .env file. All values are validated on load.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DAYDEV_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "development"

    # Logging Settings
    log_mode: str = Field(
        default="production",
        description="Logger preset: 'prod'/'production' for JSON, anything else for console",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Token Settings
    token_bytes: int = Field(
        default=DEFAULT_TOKEN_BYTES,
        description="Random bytes per generated token",
    )
    token_digest: str = Field(
        default=DEFAULT_TOKEN_DIGEST,
        description="hashlib algorithm used for token fingerprints",
    )

    # JWT Settings
    jwt_secret: str = Field(
        default="change-me-in-production-use-openssl-rand-hex-32",
        description="Secret key for HS256 token signing",
    )
    jwt_expire_minutes: int = 60

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("token_bytes")
    @classmethod
    def validate_token_bytes(cls, v: int) -> int:
        """Token size must be positive."""
        if v <= 0:
            raise ValueError("token_bytes must be a positive integer")
        return v

    @field_validator("token_digest")
    @classmethod
    def validate_token_digest(cls, v: str) -> str:
        """Digest must be a fixed-size hashlib algorithm."""
        return check_digest(v)

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


def check_digest(name: str) -> str:
    """Validate a hashlib algorithm name and return it normalized.

    Args:
        name: Algorithm name, e.g. ``sha256``.

    Returns:
        The lowercased algorithm name.

    Raises:
        ValueError: If the algorithm is unknown or has a variable-length output.
    """
    normalized = name.strip().lower()
    try:
        digest = hashlib.new(normalized)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Unsupported token digest: {name!r}") from e
    # shake_* report digest_size 0 and need an explicit length
    if digest.digest_size == 0:
        raise ValueError(f"Token digest must have a fixed output size: {name!r}")
    return normalized


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded once per process. Tests reset the cache with
    ``get_settings.cache_clear()``.

    Returns:
        Settings: The application settings.
    """
    return Settings()
