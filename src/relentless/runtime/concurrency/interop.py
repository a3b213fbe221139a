"""Sync/async interoperability utilities.

    - run_sync: Run async code from sync context
    - to_daemon_thread: Await a blocking callable without tying up the loop
    - post_to_loop: Schedule a callback on a loop from any thread

Blocking callables run on daemon threads rather than the loop's default
executor: a call abandoned after losing a race must not keep the loop
(or interpreter shutdown) waiting for it.

Example:
    >>> # Call async from sync
    >>> result = run_sync(async_function())

    >>> # Call sync from async (in a daemon thread)
    >>> result = await to_daemon_thread(blocking_function)
"""

from __future__ import annotations

import asyncio
import contextvars
import logging
import threading
from concurrent.futures import Future
from typing import Callable, Coroutine, TypeVar

from .slot import settle

T = TypeVar("T")

logger = logging.getLogger("relentless.concurrency")


# ─────────────────────────────────────────────────────────────────────────────
# Sync → Async: Running async code from sync context
# ─────────────────────────────────────────────────────────────────────────────

def run_sync(coro: Coroutine[object, object, T]) -> T:
    """Run async coroutine from synchronous context.

    1. No running loop → Run a private loop on this thread
    2. Called from within event loop → Run the private loop on a worker thread

    Tasks still pending when coro returns (calls abandoned after losing a
    race) are not cancelled: the loop keeps running them on a daemon
    thread and closes once they finish.

    Example:
        >>> result = run_sync(async_operation())
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return _run_detached(coro)

    # Inside a running loop (Jupyter, nested calls): a second loop needs its own thread
    return _run_on_worker_thread(coro)


def _run_detached(coro: Coroutine[object, object, T]) -> T:
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        if leftover := asyncio.all_tasks(loop):
            logger.debug(f"Draining {len(leftover)} abandoned task(s) in the background")
            threading.Thread(
                target=_drain, args=(loop, leftover), name="relentless-drain", daemon=True,
            ).start()
        else:
            _close(loop)


async def _settle_all(tasks: set[asyncio.Task[object]]) -> None:
    await asyncio.gather(*tasks, return_exceptions=True)


def _drain(loop: asyncio.AbstractEventLoop, tasks: set[asyncio.Task[object]]) -> None:
    try:
        loop.run_until_complete(_settle_all(tasks))
    finally:
        _close(loop)


def _close(loop: asyncio.AbstractEventLoop) -> None:
    try:
        loop.run_until_complete(loop.shutdown_asyncgens())
    finally:
        loop.close()


def _run_on_worker_thread(coro: Coroutine[object, object, T]) -> T:
    outcome: Future[T] = Future()

    def runner() -> None:
        try:
            outcome.set_result(_run_detached(coro))
        except BaseException as e:
            outcome.set_exception(e)

    threading.Thread(target=runner, name="relentless-loop", daemon=True).start()
    return outcome.result()


# ─────────────────────────────────────────────────────────────────────────────
# Async → Sync: Running blocking code from async context
# ─────────────────────────────────────────────────────────────────────────────

def post_to_loop(loop: asyncio.AbstractEventLoop, callback: Callable[..., object], *args: object) -> bool:
    """Schedule callback on loop from any thread.

    Returns False when the loop is already closed; the callback is dropped.
    """
    try:
        loop.call_soon_threadsafe(callback, *args)
    except RuntimeError:
        return False
    return True


def _fail(future: asyncio.Future[T], error: BaseException) -> None:
    if not future.done():
        future.set_exception(error)


async def to_daemon_thread(func: Callable[[], T], *, name: str | None = None) -> T:
    """Run blocking func on a daemon thread and await its result.

    Cancelling the awaiting task does not stop the thread; its eventual
    result is discarded.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future[T] = loop.create_future()
    ctx = contextvars.copy_context()

    def runner() -> None:
        try:
            result = ctx.run(func)
        except BaseException as e:
            delivered = post_to_loop(loop, _fail, future, e)
        else:
            delivered = post_to_loop(loop, settle, future, result)
        if not delivered:
            logger.debug(f"Discarding result of {thread.name}: event loop closed")

    thread = threading.Thread(target=runner, name=name or "relentless-call", daemon=True)
    thread.start()
    return await future
