"""Tests for OnceSlot and sync/async interop helpers."""

from __future__ import annotations

import asyncio
import threading

import pytest

from relentless.runtime.concurrency import OnceSlot, post_to_loop, run_sync, settle, to_daemon_thread


@pytest.mark.asyncio
async def test_once_slot_first_write_wins() -> None:
    slot: OnceSlot[str] = OnceSlot()
    assert not slot.filled
    assert slot.offer("first")
    assert not slot.offer("second")
    assert slot.filled
    assert await slot.get() == "first"


@pytest.mark.asyncio
async def test_once_slot_concurrent_writers() -> None:
    slot: OnceSlot[int] = OnceSlot()

    async def writer(n: int) -> bool:
        await asyncio.sleep(0.01 * n)
        return slot.offer(n)

    wins = await asyncio.gather(*(writer(n) for n in range(4)))
    assert wins == [True, False, False, False]
    assert await slot.get() == 0


@pytest.mark.asyncio
async def test_settle_ignores_done_future() -> None:
    future: asyncio.Future[int] = asyncio.get_running_loop().create_future()
    future.cancel()
    assert not settle(future, 1)


@pytest.mark.asyncio
async def test_to_daemon_thread_result_and_error() -> None:
    main = threading.current_thread()
    ran_on: list[threading.Thread] = []

    def work() -> int:
        ran_on.append(threading.current_thread())
        return 42

    assert await to_daemon_thread(work) == 42
    assert ran_on[0] is not main
    assert ran_on[0].daemon

    def fail() -> int:
        raise KeyError("missing")

    with pytest.raises(KeyError):
        await to_daemon_thread(fail)


@pytest.mark.asyncio
async def test_to_daemon_thread_cancel_does_not_wait_for_call() -> None:
    release = threading.Event()
    task = asyncio.create_task(to_daemon_thread(lambda: release.wait(5)))
    await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await asyncio.wait_for(task, timeout=1)
    release.set()


def test_post_to_closed_loop_is_dropped() -> None:
    loop = asyncio.new_event_loop()
    loop.close()
    assert not post_to_loop(loop, print, "never")


def test_run_sync_without_loop() -> None:
    async def answer() -> int:
        return 7

    assert run_sync(answer()) == 7


@pytest.mark.asyncio
async def test_run_sync_inside_loop_uses_thread() -> None:
    async def loop_thread() -> threading.Thread:
        return threading.current_thread()

    assert run_sync(loop_thread()) is not threading.current_thread()
