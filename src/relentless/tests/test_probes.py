"""Tests for the HTTP health probe."""

from __future__ import annotations

import httpx
import pytest

from relentless import Reason, RetriesExhausted, Retry, TriggerWatcher, max_attempts, new, sleep, watch
from relentless.probes import http_probe


def scripted(*steps: int | Exception) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
    """Client answering each request with the next status code (or raising)."""
    seen: list[httpx.Request] = []
    queue = list(steps)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        step = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(step, Exception):
            raise step
        return httpx.Response(step)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen


def engine(*options: object) -> Retry:
    return new(sleep(0), watch(TriggerWatcher()), *options)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_polls_until_expected_status() -> None:
    client, seen = scripted(503, 503, 200)
    async with client:
        await engine().aexecute(http_probe("http://svc/healthz", client=client))
    assert len(seen) == 3
    assert all(r.url == httpx.URL("http://svc/healthz") for r in seen)


@pytest.mark.asyncio
async def test_transport_errors_are_retried() -> None:
    client, seen = scripted(httpx.ConnectError("refused"), httpx.ReadTimeout("slow"), 204)
    async with client:
        await engine().aexecute(http_probe("http://svc/", client=client, expect={200, 204}))
    assert len(seen) == 3


@pytest.mark.asyncio
async def test_gives_up_after_cap() -> None:
    client, seen = scripted(500)
    async with client:
        with pytest.raises(RetriesExhausted):
            await engine(max_attempts(4)).aexecute(http_probe("http://svc/", client=client))
    assert len(seen) == 4


@pytest.mark.asyncio
async def test_probe_outcomes_and_method() -> None:
    client, seen = scripted(404, 200)
    async with client:
        probe = http_probe("http://svc/ready", client=client, method="HEAD")
        assert await probe() == (Reason.AGAIN, None)
        assert await probe() == (Reason.STOP, None)
    assert [r.method for r in seen] == ["HEAD", "HEAD"]
