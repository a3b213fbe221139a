"""Engine-raised errors.

Two outcomes are produced by the engine itself rather than by the retried
operation: running out of attempts and being told to stop by the OS.
Both are typed exceptions so callers match them with ``except`` (class
identity), never by message.
"""

from __future__ import annotations

from enum import StrEnum
from typing import ClassVar


class ErrorCode(StrEnum):
    """Machine-readable codes for engine-raised errors."""
    EXHAUSTED = "EXHAUSTED"
    CANCELLED = "CANCELLED"


class RetryError(Exception):
    """Base for errors raised by the engine itself.

    Never wraps an operation error: operation errors surface verbatim,
    engine errors are raised ``from None``.
    """

    code: ClassVar[ErrorCode]
    default_message: ClassVar[str] = "retry failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class RetriesExhausted(RetryError):
    """The attempt cap was reached without the operation returning STOP.

    Attributes:
        attempts: Number of times the operation was invoked
    """

    code = ErrorCode.EXHAUSTED
    default_message = "exhausted the number of retries"

    __slots__ = ("attempts",)

    def __init__(self, attempts: int, message: str | None = None) -> None:
        self.attempts = attempts
        super().__init__(message)


class CancellationRequested(RetryError):
    """A termination request won the race against the retry loop.

    Attributes:
        signum: Signal number that triggered cancellation, if known
    """

    code = ErrorCode.CANCELLED
    default_message = "received OS signal to stop operation"

    __slots__ = ("signum",)

    def __init__(self, signum: int | None = None, message: str | None = None) -> None:
        self.signum = signum
        super().__init__(message)
