"""Environment-based configuration using pydantic-settings.

Example:
    >>> from relentless.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.retry.delay
    5.0
    >>> settings.logging.level
    'INFO'

    # Or with environment variables:
    # RELENTLESS_RETRY_DELAY=0.5
    # RELENTLESS_RETRY_MAX_ATTEMPTS=10
    # RELENTLESS_LOG_FORMAT=json
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrySettings(BaseSettings):
    """Default engine configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RELENTLESS_RETRY_",
        extra="ignore",
    )

    delay: float = Field(default=5.0, description="Seconds to wait between attempts")
    max_attempts: int = Field(default=0, description="Attempt cap, 0 = unbounded")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RELENTLESS_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "text"] = "text"

    @field_validator("level", mode="before")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class RelentlessSettings(BaseSettings):
    """Root settings.

    Loads configuration from environment variables with RELENTLESS_ prefix.

    Example environment variables:
        RELENTLESS_DEBUG=true
        RELENTLESS_RETRY_DELAY=1.5
        RELENTLESS_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="RELENTLESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    debug: bool = Field(default=False, description="Enable debug logging")

    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> RelentlessSettings:
    """Get the global settings instance (cached)."""
    return RelentlessSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    The next get_settings() call reloads configuration from environment.
    """
    get_settings.cache_clear()
