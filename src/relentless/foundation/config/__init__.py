"""Configuration management using pydantic-settings."""

from .settings import (
    LoggingSettings,
    RelentlessSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "LoggingSettings",
    "RelentlessSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
