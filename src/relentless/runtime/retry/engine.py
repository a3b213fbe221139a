"""Retry engine.

Calls an operation until it returns STOP, the attempt cap is reached, or a
termination request arrives. Each execution races two tasks into one
first-write-wins slot:

    loop     → exhaustion check, call, STOP/AGAIN dispatch, fixed sleep
    watcher  → first termination request becomes CancellationRequested

Whichever writes first decides the result; the other task is cancelled.
An in-flight operation call is never interrupted: a blocking call keeps
running on its daemon thread and a coroutine is shielded, and either way
its late result is discarded. The sync facade keeps its private loop
alive on a daemon thread until such abandoned calls finish.

A watcher that raises is logged and ignored; the loop alone then decides.

Example:
    >>> from relentless import Reason, new, sleep, max_attempts
    >>>
    >>> def ping() -> tuple[Reason, Exception | None]:
    ...     return (Reason.STOP, None) if healthy() else (Reason.AGAIN, None)
    >>>
    >>> new(sleep(1.0), max_attempts(30)).execute(ping)
"""

from __future__ import annotations

import asyncio
import inspect
import logging

from relentless.foundation.config import RelentlessSettings, get_settings
from relentless.foundation.errors import CancellationRequested, RetriesExhausted
from relentless.runtime.cancellation import SignalWatcher, Watcher
from relentless.runtime.concurrency import OnceSlot, run_sync, to_daemon_thread

from .config import Option, RetryConfig, apply
from .reason import Operation, Outcome, Reason, unpack

logger = logging.getLogger("relentless.retry")

_SIGNAL_WATCHER = SignalWatcher()


async def _invoke(operation: Operation) -> Outcome:
    """Call operation once. A raised exception counts as STOP with that error."""
    try:
        if inspect.iscoroutinefunction(operation) or inspect.iscoroutinefunction(
            getattr(operation, "__call__", None)
        ):
            outcome = await asyncio.shield(operation())
        else:
            outcome = await to_daemon_thread(operation)
            if inspect.isawaitable(outcome):
                outcome = await asyncio.shield(outcome)
    except asyncio.CancelledError:
        raise
    except Exception as e:
        return Reason.STOP, e
    return unpack(outcome)


class Retry:
    """Retry engine with a fixed delay and an optional attempt cap.

    Configuration is immutable; one engine can serve any number of
    sequential or concurrent executions, each with its own attempt
    counter, watcher subscription and result slot.

    Example:
        >>> engine = Retry(delay=0.5, max_attempts=5)
        >>> try:
        ...     engine.execute(check)
        ... except RetriesExhausted:
        ...     ...
    """

    __slots__ = ("_config",)

    def __init__(self, config: RetryConfig | None = None, /, **fields: object) -> None:
        base = config or RetryConfig()
        self._config = RetryConfig.model_validate({**dict(base), **fields}) if fields else base

    @classmethod
    def from_settings(cls, *options: Option, settings: RelentlessSettings | None = None) -> Retry:
        """Build from RELENTLESS_RETRY_* environment settings, then apply options."""
        settings = settings or get_settings()
        return cls(apply(RetryConfig.from_settings(settings.retry), options))

    def with_options(self, *options: Option) -> Retry:
        """New engine with options applied on top of this one's configuration."""
        return Retry(apply(self._config, options))

    @property
    def config(self) -> RetryConfig:
        return self._config

    @property
    def delay(self) -> float:
        return self._config.delay

    @property
    def max_attempts(self) -> int:
        """The configured attempt cap, exactly as set (0 = unbounded)."""
        return self._config.max_attempts

    @property
    def watcher(self) -> Watcher:
        return self._config.watcher or _SIGNAL_WATCHER

    def _exhausted(self, attempt: int) -> bool:
        cap = self._config.max_attempts
        return cap > 0 and attempt > cap

    # ─────────────────────────────────────────────────────────────────
    # Racing units
    # ─────────────────────────────────────────────────────────────────

    async def _loop(self, operation: Operation) -> BaseException | None:
        attempt = 1
        while True:
            if self._exhausted(attempt):
                logger.debug(f"Exhausted after {attempt - 1} attempts")
                return RetriesExhausted(attempt - 1)

            reason, error = await _invoke(operation)
            match reason:
                case Reason.STOP:
                    return error
                case Reason.AGAIN:
                    await asyncio.sleep(self._config.delay)
                    attempt += 1

    async def _drive(self, operation: Operation, slot: OnceSlot[BaseException | None]) -> None:
        try:
            result = await self._loop(operation)
        except Exception as e:
            result = e
        slot.offer(result)

    async def _watch(self, slot: OnceSlot[BaseException | None]) -> None:
        try:
            signum = await self.watcher.wait()
        except Exception:
            # Retrying goes on without cancellation; the loop still decides
            logger.exception(f"Watcher {self.watcher!r} failed; continuing without cancellation")
            return
        if slot.offer(CancellationRequested(signum)):
            logger.debug(f"Termination request (signal {signum}) cancelled execution")

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def aoutcome(self, operation: Operation) -> BaseException | None:
        """Run operation to its final outcome and return it instead of raising.

        Returns:
            None on success, the operation's own error verbatim,
            RetriesExhausted, or CancellationRequested
        """
        slot: OnceSlot[BaseException | None] = OnceSlot()
        tasks = (
            asyncio.create_task(self._drive(operation, slot), name="relentless-loop"),
            asyncio.create_task(self._watch(slot), name="relentless-watcher"),
        )
        try:
            return await slot.get()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def aexecute(self, operation: Operation) -> None:
        """Run operation until STOP, exhaustion, or cancellation.

        Raises:
            RetriesExhausted: Attempt cap reached without STOP
            CancellationRequested: A termination request arrived first
            BaseException: The error the operation returned with STOP
        """
        if (error := await self.aoutcome(operation)) is not None:
            raise error

    def outcome(self, operation: Operation) -> BaseException | None:
        """Sync version of aoutcome()."""
        return run_sync(self.aoutcome(operation))

    def execute(self, operation: Operation) -> None:
        """Sync version of aexecute(). Blocks until the final outcome."""
        if (error := self.outcome(operation)) is not None:
            raise error

    def __repr__(self) -> str:
        return f"Retry(delay={self.delay!r}, max_attempts={self.max_attempts!r})"


def new(*options: Option) -> Retry:
    """Create an engine: 5 second delay, unbounded attempts, then options in order."""
    return Retry(apply(RetryConfig(), options))
