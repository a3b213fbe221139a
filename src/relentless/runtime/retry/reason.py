"""Operation outcomes.

An operation is a zero-argument callable (plain or ``async``) returning a
``(Reason, error)`` pair:

    STOP  → finish now; ``error`` (None = success) is the final result
    AGAIN → wait the configured delay and call the operation again
"""

from __future__ import annotations

from collections.abc import Awaitable
from enum import Enum
from typing import Callable, TypeAlias


class Reason(Enum):
    """Directive returned by an operation."""
    STOP = "stop"
    AGAIN = "again"


Outcome: TypeAlias = tuple[Reason, BaseException | None]
Operation: TypeAlias = Callable[[], Outcome] | Callable[[], Awaitable[Outcome]]


def stop(error: BaseException | None = None) -> Outcome:
    """Finish retrying; ``error`` is surfaced to the caller unchanged."""
    return Reason.STOP, error


def again() -> Outcome:
    """Request another attempt after the configured delay."""
    return Reason.AGAIN, None


def unpack(outcome: object) -> Outcome:
    """Check an operation's return value against the outcome shape.

    Raises:
        TypeError: If outcome is not ``(Reason, BaseException | None)``
    """
    match outcome:
        case (Reason() as reason, BaseException() | None as error):
            return reason, error
    raise TypeError(
        f"operation must return (Reason, BaseException | None), got {outcome!r}"
    )
