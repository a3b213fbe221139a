"""Process-wide fan-out of termination signals.

Python allows one handler per signal, but any number of executions may be
waiting on SIGINT/SIGTERM at once. The hub installs a single handler per
signal while it has subscribers, forwards every delivery to all of them,
and puts the previous handler back when the last subscriber leaves.

Handlers can only be installed from the main thread. A subscription made
elsewhere joins an already-installed handler, or stays passive.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterable
from types import FrameType
from typing import TypeAlias

logger = logging.getLogger("relentless.cancellation")

Listener: TypeAlias = Callable[[int], None]
_Handler: TypeAlias = Callable[[int, FrameType | None], object] | int | signal.Handlers | None


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


class SignalHub:
    """Shares OS signal handlers between concurrent subscribers."""

    __slots__ = ("_lock", "_listeners", "_previous")

    def __init__(self) -> None:
        # Reentrant: the handler runs on the main thread and may interrupt it mid-subscribe
        self._lock = threading.RLock()
        self._listeners: dict[int, dict[int, Listener]] = {}
        self._previous: dict[int, _Handler] = {}

    def installed(self, signum: int) -> bool:
        """Whether the hub currently owns the handler for signum."""
        with self._lock:
            return signum in self._previous

    def subscribers(self, signum: int) -> int:
        with self._lock:
            return len(self._listeners.get(signum, {}))

    def subscribe(self, signals: Iterable[int], listener: Listener) -> Callable[[], None]:
        """Register listener for signals. Returns an idempotent unsubscribe callable."""
        key = id(listener)
        joined: list[int] = []
        with self._lock:
            for signum in signals:
                if signum not in self._previous and not self._install(signum):
                    continue
                self._listeners.setdefault(signum, {})[key] = listener
                joined.append(signum)

        def unsubscribe() -> None:
            with self._lock:
                for signum in joined:
                    listeners = self._listeners.get(signum)
                    if listeners is None or listeners.pop(key, None) is None:
                        continue
                    if not listeners:
                        self._restore(signum)
            joined.clear()

        return unsubscribe

    def _install(self, signum: int) -> bool:
        if not _in_main_thread():
            logger.warning(
                f"Cannot watch signal {signum} outside the main thread; "
                "termination requests will not cancel this execution"
            )
            return False
        try:
            self._previous[signum] = signal.signal(signum, self._dispatch)
        except (ValueError, OSError) as e:
            logger.warning(f"Cannot watch signal {signum}: {e}")
            return False
        logger.debug(f"Installed handler for signal {signum}")
        return True

    def _restore(self, signum: int) -> None:
        # Off the main thread the handler stays; _dispatch restores it on next delivery
        if not _in_main_thread():
            return
        previous = self._previous.pop(signum, signal.SIG_DFL)
        self._listeners.pop(signum, None)
        signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        logger.debug(f"Restored handler for signal {signum}")

    def _dispatch(self, signum: int, frame: FrameType | None) -> None:
        previous: _Handler = None
        with self._lock:
            listeners = tuple(self._listeners.get(signum, {}).values())
            if not listeners:
                previous = self._previous.get(signum)
                self._restore(signum)
        if listeners:
            for listener in listeners:
                listener(signum)
            return
        # Stale handler with nobody listening: behave as if it was never installed
        if callable(previous):
            previous(signum, frame)
        elif previous in (signal.SIG_DFL, None):
            signal.raise_signal(signum)


_hub = SignalHub()


def default_hub() -> SignalHub:
    """The hub shared by every SignalWatcher in this process."""
    return _hub
