"""Engine configuration and functional options.

Options are pure functions ``RetryConfig -> RetryConfig`` applied in order
by ``new()``; when two options set the same field the last one wins.
Values are not range-checked: a zero delay means busy retry, and a zero
(or negative) attempt cap means unbounded.

Example:
    >>> engine = new(sleep(0.5), max_attempts(10))
    >>> engine.max_attempts
    10
"""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Callable, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

from relentless.runtime.cancellation import Watcher

if TYPE_CHECKING:
    from relentless.foundation.config import RetrySettings

DEFAULT_DELAY = 5.0

Duration: TypeAlias = float | int | timedelta


def to_seconds(duration: Duration) -> float:
    """Normalize a duration to float seconds."""
    return duration.total_seconds() if isinstance(duration, timedelta) else float(duration)


class RetryConfig(BaseModel):
    """Immutable engine configuration.

    Attributes:
        delay: Seconds to wait after an AGAIN before the next attempt
        max_attempts: Attempt cap; 0 means unbounded
        watcher: Cancellation source; None selects the process signal watcher
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,  # For Watcher protocol
        extra="forbid",
        revalidate_instances="never",
    )

    delay: float = DEFAULT_DELAY
    max_attempts: int = 0
    watcher: Watcher | None = Field(default=None, repr=False)

    @field_validator("delay", mode="before")
    @classmethod
    def _normalize_delay(cls, v: Duration) -> float:
        """Accept timedelta as well as seconds."""
        return to_seconds(v) if isinstance(v, timedelta) else v

    @classmethod
    def from_settings(cls, settings: RetrySettings) -> RetryConfig:
        return cls(delay=settings.delay, max_attempts=settings.max_attempts)


Option: TypeAlias = Callable[[RetryConfig], RetryConfig]


def apply(config: RetryConfig, options: tuple[Option, ...]) -> RetryConfig:
    for opt in options:
        config = opt(config)
    return config


def sleep(duration: Duration) -> Option:
    """Set the delay between attempts (seconds or timedelta). Default 5 seconds."""
    seconds = to_seconds(duration)

    def option(config: RetryConfig) -> RetryConfig:
        return config.model_copy(update={"delay": seconds})
    return option


def max_attempts(attempts: int) -> Option:
    """Set the attempt cap. Default 0: unlimited."""
    def option(config: RetryConfig) -> RetryConfig:
        return config.model_copy(update={"max_attempts": attempts})
    return option


def watch(watcher: Watcher) -> Option:
    """Replace the process signal watcher with another cancellation source."""
    def option(config: RetryConfig) -> RetryConfig:
        return config.model_copy(update={"watcher": watcher})
    return option
