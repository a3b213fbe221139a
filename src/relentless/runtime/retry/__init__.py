"""Fixed-delay retry engine.

Example:
    >>> from relentless.runtime.retry import Reason, new, sleep, max_attempts
    >>>
    >>> count = 0
    >>> def op():
    ...     global count
    ...     count += 1
    ...     return (Reason.AGAIN, None) if count < 3 else (Reason.STOP, None)
    >>>
    >>> new(sleep(0.01)).execute(op)
    >>> count
    3
"""

from .config import (
    DEFAULT_DELAY,
    Duration,
    Option,
    RetryConfig,
    max_attempts,
    sleep,
    to_seconds,
    watch,
)
from .engine import Retry, new
from .reason import Operation, Outcome, Reason, again, stop, unpack

__all__ = [
    # Outcomes
    "Reason",
    "Outcome",
    "Operation",
    "stop",
    "again",
    "unpack",
    # Configuration
    "RetryConfig",
    "Option",
    "Duration",
    "DEFAULT_DELAY",
    "sleep",
    "max_attempts",
    "watch",
    "to_seconds",
    # Engine
    "Retry",
    "new",
]
