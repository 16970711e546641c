"""httpx wrapper.

Standardizes timeouts, headers and retries so the DNS provider and the
resolver behave the same way. Tests inject an `httpx.MockTransport`.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any, Awaitable, Callable

import httpx

from core.config import AppSettings
from core.logging_setup import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})

Sleep = Callable[[float], Awaitable[None]]


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    base_url: str | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the configured defaults."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)
    kwargs: dict[str, Any] = {
        "timeout": httpx.Timeout(settings.http_timeout_seconds),
        "follow_redirects": True,
        "headers": headers,
    }
    if transport is not None:
        kwargs["transport"] = transport
    if base_url:
        kwargs["base_url"] = base_url
    return httpx.AsyncClient(**kwargs)


def _retry_after_seconds(response: httpx.Response) -> float | None:
    value = response.headers.get("Retry-After")
    if not value:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return max(0.0, min(seconds, 60.0))


def backoff_delay(attempt: int, retry_after: float | None = None) -> float:
    base = retry_after if retry_after is not None else (1.25 * (2**attempt))
    return base + random.uniform(0.0, 0.35)


async def request_with_retries(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_retries: int,
    sleep: Sleep = asyncio.sleep,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request, retrying 429/5xx answers and transport errors.

    The last response is returned as-is once retries are exhausted, so the
    caller decides how to report a non-2xx status. A transport error on the
    last attempt is re-raised.
    """

    attempt = 0
    while True:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            if attempt >= max_retries:
                raise
            delay = backoff_delay(attempt)
            logger.warning("%s %s failed (%s); retrying in %.1fs", method, url, type(exc).__name__, delay)
        else:
            if response.status_code not in RETRYABLE_STATUS or attempt >= max_retries:
                return response
            delay = backoff_delay(attempt, _retry_after_seconds(response))
            logger.warning("%s %s -> HTTP %s; retrying in %.1fs", method, url, response.status_code, delay)
        attempt += 1
        await sleep(delay)
