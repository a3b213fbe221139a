"""Runtime: retry engine, cancellation watchers, concurrency helpers."""

from .cancellation import SignalWatcher, TriggerWatcher, Watcher
from .concurrency import OnceSlot, run_sync
from .observability import configure_logging
from .retry import (
    Operation,
    Outcome,
    Reason,
    Retry,
    RetryConfig,
    again,
    max_attempts,
    new,
    sleep,
    stop,
    watch,
)

__all__ = [
    "Retry",
    "RetryConfig",
    "Reason",
    "Outcome",
    "Operation",
    "new",
    "sleep",
    "max_attempts",
    "watch",
    "stop",
    "again",
    "Watcher",
    "SignalWatcher",
    "TriggerWatcher",
    "OnceSlot",
    "run_sync",
    "configure_logging",
]
