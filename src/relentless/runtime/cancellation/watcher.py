"""Cancellation sources raced against the retry loop.

A watcher's ``wait()`` completes when a termination request arrives. The
engine starts one ``wait()`` per execution and cancels it once the loop has
finished, so a subscription never outlives its execution.

- SignalWatcher: SIGINT/SIGTERM delivered to the process (default)
- TriggerWatcher: Programmatic trigger, for tests and embedding

Example:
    >>> watcher = TriggerWatcher()
    >>> engine = new(sleep(0.1), watch(watcher))
    >>> # from any thread:
    >>> watcher.trigger()
"""

from __future__ import annotations

import asyncio
import signal
import threading
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from relentless.runtime.concurrency import post_to_loop, settle

from .hub import SignalHub, default_hub

DEFAULT_SIGNALS: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)


@runtime_checkable
class Watcher(Protocol):
    """Source of termination requests.

    ``wait()`` resolves with the signal number that requested termination
    (None when the source has no signal number). It must tear down any
    subscription when it returns or is cancelled.
    """

    async def wait(self) -> int | None: ...


@dataclass(frozen=True, slots=True)
class SignalWatcher:
    """Waits for the first of ``signals`` delivered to this process.

    Attributes:
        signals: Signal numbers to watch (default: SIGINT, SIGTERM)
        hub: Handler fan-out shared across watchers
    """

    signals: tuple[int, ...] = DEFAULT_SIGNALS
    hub: SignalHub = field(default_factory=default_hub, repr=False, compare=False)

    async def wait(self) -> int | None:
        loop = asyncio.get_running_loop()
        fired: asyncio.Future[int | None] = loop.create_future()

        # Runs inside the Python-level signal handler on the main thread
        def notify(signum: int) -> None:
            post_to_loop(loop, settle, fired, signum)

        unsubscribe = self.hub.subscribe(self.signals, notify)
        try:
            return await fired
        finally:
            unsubscribe()


class TriggerWatcher:
    """Manually triggered watcher.

    ``trigger()`` is thread-safe and latches: every pending and future
    ``wait()`` resolves until ``reset()`` re-arms the watcher.
    """

    __slots__ = ("_lock", "_waiters", "_fired", "_signum")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._waiters: set[tuple[asyncio.AbstractEventLoop, asyncio.Future[int | None]]] = set()
        self._fired = False
        self._signum: int | None = None

    @property
    def triggered(self) -> bool:
        return self._fired

    @property
    def pending(self) -> int:
        """Number of wait() calls currently subscribed."""
        with self._lock:
            return len(self._waiters)

    def trigger(self, signum: int | None = None) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired, self._signum = True, signum
            waiters = tuple(self._waiters)
        for loop, future in waiters:
            post_to_loop(loop, settle, future, signum)

    def reset(self) -> None:
        with self._lock:
            self._fired, self._signum = False, None

    async def wait(self) -> int | None:
        loop = asyncio.get_running_loop()
        future: asyncio.Future[int | None] = loop.create_future()
        entry = (loop, future)
        with self._lock:
            if self._fired:
                return self._signum
            self._waiters.add(entry)
        try:
            return await future
        finally:
            with self._lock:
                self._waiters.discard(entry)

    def __repr__(self) -> str:
        return f"TriggerWatcher(triggered={self._fired})"
