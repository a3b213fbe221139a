"""Tests for the retry engine loop.

Validates:
- STOP / AGAIN dispatch and invocation counts
- Attempt cap and exhaustion
- Delay behaviour
- Configuration options and introspection
- Sync and async operations, sync and async callers
"""

from __future__ import annotations

import time
from datetime import timedelta

import pytest
from pydantic import ValidationError

from relentless import (
    CancellationRequested,
    ErrorCode,
    Reason,
    RetriesExhausted,
    Retry,
    RetryConfig,
    TriggerWatcher,
    again,
    max_attempts,
    new,
    sleep,
    stop,
    watch,
)


class Counter:
    """Operation that returns AGAIN `until` times, then STOP with `error`."""

    def __init__(self, until: int, error: BaseException | None = None) -> None:
        self.until, self.error, self.calls = until, error, 0

    def __call__(self) -> tuple[Reason, BaseException | None]:
        if self.calls == self.until:
            self.calls += 1
            return Reason.STOP, self.error
        self.calls += 1
        return Reason.AGAIN, None


def quick(*options: object) -> Retry:
    """Engine with no delay and a private watcher, so no OS signals are touched."""
    return new(sleep(0), watch(TriggerWatcher()), *options)  # type: ignore[arg-type]


# ═════════════════════════════════════════════════════════════════════════════
# Loop Dispatch
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("k", [0, 1, 2, 7])
def test_again_k_times_then_stop(k: int) -> None:
    """Operation is invoked exactly k+1 times and STOP's error is surfaced."""
    op = Counter(k)
    assert quick().outcome(op) is None
    assert op.calls == k + 1


def test_scenario_counter_reaches_three() -> None:
    """Default cap, AGAIN while counter < 3, then STOP(None)."""
    count = 0

    def op() -> tuple[Reason, BaseException | None]:
        nonlocal count
        if count < 3:
            count += 1
            return again()
        return stop()

    quick().execute(op)
    assert count == 3


def test_stop_error_is_returned_verbatim() -> None:
    """STOP with an error on the first call surfaces that exact object."""
    boom = ValueError("boom")
    op = Counter(0, boom)

    assert quick().outcome(op) is boom
    with pytest.raises(ValueError) as info:
        quick().execute(Counter(0, boom))
    assert info.value is boom
    assert op.calls == 1


def test_raised_exception_is_treated_as_stop() -> None:
    calls = 0
    boom = RuntimeError("raised")

    def op() -> tuple[Reason, BaseException | None]:
        nonlocal calls
        calls += 1
        raise boom

    assert quick(max_attempts(5)).outcome(op) is boom
    assert calls == 1


@pytest.mark.parametrize("bad", [True, "stop", (Reason.STOP,), (Reason.AGAIN, "nope"), None])
def test_malformed_outcome_raises_type_error(bad: object) -> None:
    with pytest.raises(TypeError, match="must return"):
        quick().execute(lambda: bad)  # type: ignore[arg-type, return-value]


# ═════════════════════════════════════════════════════════════════════════════
# Attempt Cap
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize("cap", [1, 2, 5, 13])
def test_cap_invokes_exactly_n_times(cap: int) -> None:
    """Always-AGAIN operation runs N times (never N+1) before exhaustion."""
    op = Counter(until=-1)
    engine = quick(max_attempts(cap))

    with pytest.raises(RetriesExhausted) as info:
        engine.execute(op)

    assert op.calls == cap
    assert info.value.attempts == cap
    assert info.value.code is ErrorCode.EXHAUSTED
    assert str(info.value) == "exhausted the number of retries"
    assert info.value.__cause__ is None


def test_stop_on_last_allowed_attempt_is_not_exhaustion() -> None:
    op = Counter(until=4)
    assert quick(max_attempts(5)).outcome(op) is None
    assert op.calls == 5


def test_negative_cap_is_unbounded() -> None:
    op = Counter(until=6)
    engine = quick(max_attempts(-1))
    assert engine.outcome(op) is None
    assert op.calls == 7
    assert engine.max_attempts == -1


def test_max_attempts_accessor_is_stable_across_executions() -> None:
    engine = quick(max_attempts(4))
    for _ in range(3):
        assert isinstance(engine.outcome(Counter(until=-1)), RetriesExhausted)
        assert engine.max_attempts == 4


def test_sequential_executions_do_not_share_attempts() -> None:
    """Same engine, fresh operation state: same outcome class every time."""
    engine = quick(max_attempts(3))
    for _ in range(3):
        op = Counter(until=2)
        assert engine.outcome(op) is None
        assert op.calls == 3
    for _ in range(2):
        op = Counter(until=-1)
        assert isinstance(engine.outcome(op), RetriesExhausted)
        assert op.calls == 3


# ═════════════════════════════════════════════════════════════════════════════
# Delay
# ═════════════════════════════════════════════════════════════════════════════


def test_again_incurs_delay() -> None:
    engine = new(sleep(0.05), watch(TriggerWatcher()))
    start = time.monotonic()
    engine.execute(Counter(until=1))
    assert time.monotonic() - start >= 0.04


def test_stop_first_incurs_no_delay() -> None:
    engine = new(sleep(10), watch(TriggerWatcher()))
    start = time.monotonic()
    engine.execute(Counter(until=0))
    assert time.monotonic() - start < 2.0


# ═════════════════════════════════════════════════════════════════════════════
# Configuration
# ═════════════════════════════════════════════════════════════════════════════


def test_defaults() -> None:
    engine = new()
    assert engine.delay == 5.0
    assert engine.max_attempts == 0
    assert engine.config.watcher is None


def test_options_last_write_wins() -> None:
    engine = new(sleep(1), max_attempts(3), sleep(2), max_attempts(7))
    assert engine.delay == 2.0
    assert engine.max_attempts == 7


def test_option_applied_twice_is_idempotent() -> None:
    opt = max_attempts(9)
    assert new(opt, opt).config == new(opt).config


def test_sleep_accepts_timedelta() -> None:
    assert new(sleep(timedelta(milliseconds=250))).delay == 0.25
    assert Retry(delay=timedelta(seconds=3)).delay == 3.0


def test_no_validation_on_values() -> None:
    engine = new(sleep(0), max_attempts(-5))
    assert engine.delay == 0.0
    assert engine.max_attempts == -5


def test_config_is_immutable() -> None:
    engine = new(max_attempts(2))
    with pytest.raises(ValidationError):
        engine.config.max_attempts = 10  # type: ignore[misc]

    derived = engine.with_options(max_attempts(10))
    assert engine.max_attempts == 2
    assert derived.max_attempts == 10


def test_direct_construction_matches_options() -> None:
    watcher = TriggerWatcher()
    direct = Retry(delay=0.5, max_attempts=3, watcher=watcher)
    built = new(sleep(0.5), max_attempts(3), watch(watcher))
    assert direct.config == built.config
    assert direct.watcher is watcher

    base = RetryConfig(delay=1.0)
    assert Retry(base, max_attempts=4).config == RetryConfig(delay=1.0, max_attempts=4)


def test_repr() -> None:
    assert repr(new(sleep(1), max_attempts(2))) == "Retry(delay=1.0, max_attempts=2)"


# ═════════════════════════════════════════════════════════════════════════════
# Async
# ═════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_async_operation() -> None:
    calls = 0

    async def op() -> tuple[Reason, BaseException | None]:
        nonlocal calls
        calls += 1
        return again() if calls < 4 else stop()

    await quick().aexecute(op)
    assert calls == 4


@pytest.mark.asyncio
async def test_async_caller_with_sync_operation() -> None:
    op = Counter(until=2)
    assert await quick().aoutcome(op) is None
    assert op.calls == 3


@pytest.mark.asyncio
async def test_async_exhaustion_raises() -> None:
    async def op() -> tuple[Reason, BaseException | None]:
        return again()

    with pytest.raises(RetriesExhausted):
        await quick(max_attempts(3)).aexecute(op)


@pytest.mark.asyncio
async def test_execute_from_inside_running_loop() -> None:
    """Sync facade still works when called from a coroutine."""
    op = Counter(until=1)
    quick().execute(op)
    assert op.calls == 2


@pytest.mark.asyncio
async def test_concurrent_executions_on_one_engine() -> None:
    import asyncio

    engine = quick(max_attempts(5))
    ops = [Counter(until=n) for n in (0, 2, 4)] + [Counter(until=-1)]
    results = await asyncio.gather(*(engine.aoutcome(op) for op in ops))

    assert results[:3] == [None, None, None]
    assert isinstance(results[3], RetriesExhausted)
    assert [op.calls for op in ops] == [1, 3, 5, 5]


def test_engine_errors_are_distinct() -> None:
    assert not issubclass(RetriesExhausted, CancellationRequested)
    assert not issubclass(CancellationRequested, RetriesExhausted)
