"""Relentless - call an operation until it says stop.

Wraps any fallible, pollable operation (health checks, network calls,
convergence loops) in a loop with a fixed delay, an optional attempt cap,
and cancellation on SIGINT/SIGTERM.

Quick Start:
    >>> from relentless import Reason, new, sleep, max_attempts, RetriesExhausted
    >>>
    >>> def check() -> tuple[Reason, Exception | None]:
    ...     if service_is_up():
    ...         return Reason.STOP, None
    ...     return Reason.AGAIN, None
    >>>
    >>> engine = new(sleep(2.0), max_attempts(10))
    >>> try:
    ...     engine.execute(check)
    ... except RetriesExhausted:
    ...     print("gave up")

Async operations and callers:
    >>> async def check() -> Outcome:
    ...     return stop() if await ping() else again()
    >>>
    >>> await engine.aexecute(check)

Errors instead of exceptions:
    >>> err = engine.outcome(check)
    >>> if isinstance(err, CancellationRequested): ...

Custom cancellation source (tests, embedding):
    >>> watcher = TriggerWatcher()
    >>> engine = new(sleep(1.0), watch(watcher))
    >>> watcher.trigger()  # from any thread
"""

import logging

from relentless.foundation import (
    CancellationRequested,
    ErrorCode,
    LoggingSettings,
    RelentlessSettings,
    RetriesExhausted,
    RetryError,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from relentless.runtime import (
    OnceSlot,
    Operation,
    Outcome,
    Reason,
    Retry,
    RetryConfig,
    SignalWatcher,
    TriggerWatcher,
    Watcher,
    again,
    configure_logging,
    max_attempts,
    new,
    sleep,
    stop,
    watch,
)

logging.getLogger("relentless").addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Engine
    "Retry",
    "RetryConfig",
    "new",
    "sleep",
    "max_attempts",
    "watch",
    # Outcomes
    "Reason",
    "Outcome",
    "Operation",
    "stop",
    "again",
    # Errors
    "ErrorCode",
    "RetryError",
    "RetriesExhausted",
    "CancellationRequested",
    # Cancellation
    "Watcher",
    "SignalWatcher",
    "TriggerWatcher",
    # Concurrency
    "OnceSlot",
    # Settings & logging
    "RelentlessSettings",
    "RetrySettings",
    "LoggingSettings",
    "get_settings",
    "clear_settings_cache",
    "configure_logging",
]
