"""HTTP health probe operation.

Builds an async operation that polls a URL until it answers with an
expected status code:

    expected status          → STOP (success)
    other status             → AGAIN
    httpx.TransportError     → AGAIN (connection refused, timeouts, ...)
    anything else raised     → STOP with that error (engine behaviour)

Example:
    >>> from relentless import new, sleep, max_attempts
    >>> from relentless.probes import http_probe
    >>>
    >>> ready = http_probe("http://localhost:8080/healthz", expect={200, 204})
    >>> await new(sleep(2), max_attempts(30)).aexecute(ready)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Collection
from typing import Literal

import httpx

from relentless.runtime.retry import Outcome, again, stop

logger = logging.getLogger("relentless.probes")

HttpMethod = Literal["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


def http_probe(
    url: str,
    *,
    expect: int | Collection[int] = 200,
    method: HttpMethod = "GET",
    client: httpx.AsyncClient | None = None,
    timeout: float = 5.0,
) -> Callable[[], Awaitable[Outcome]]:
    """Create an operation that polls url until it returns an expected status.

    Args:
        url: URL to request
        expect: Status code or codes that end the polling successfully
        method: HTTP method
        client: Client to reuse; a short-lived client is created per call otherwise
        timeout: Per-request timeout in seconds
    """
    expected = frozenset({expect}) if isinstance(expect, int) else frozenset(expect)

    async def request() -> httpx.Response:
        if client is not None:
            return await client.request(method, url, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as owned:
            return await owned.request(method, url)

    async def probe() -> Outcome:
        try:
            response = await request()
        except httpx.TransportError as e:
            logger.debug(f"{method} {url} failed: {e!r}")
            return again()
        if response.status_code in expected:
            return stop()
        logger.debug(f"{method} {url} returned {response.status_code}")
        return again()

    return probe
