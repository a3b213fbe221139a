"""Foundation: errors and configuration shared by the runtime."""

from .config import (
    LoggingSettings,
    RelentlessSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from .errors import CancellationRequested, ErrorCode, RetriesExhausted, RetryError

__all__ = [
    # Errors
    "ErrorCode",
    "RetryError",
    "RetriesExhausted",
    "CancellationRequested",
    # Config
    "LoggingSettings",
    "RelentlessSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
