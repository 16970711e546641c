"""Propagation checks against public resolvers.

After a record change the provider answers immediately, but resolvers keep
serving the old value until its TTL expires (typically 10 to 60 minutes).
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from core.domain.errors import ResolverError
from core.domain.models import PropagationResult, RecordType, normalize_hostname
from core.interfaces.dns import Resolver
from core.logging_setup import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SECONDS = 3600.0
DEFAULT_INTERVAL_SECONDS = 30.0


def propagation_hint(fqdn: str) -> str:
    return f"dig {fqdn} +short"


def _matches(answers: list[str], expected: str, record_type: RecordType) -> bool:
    if record_type == RecordType.TXT:
        return expected in answers
    return normalize_hostname(expected) in answers


async def check_propagation(
    resolver: Resolver,
    fqdn: str,
    expected: str,
    record_type: RecordType = RecordType.CNAME,
) -> PropagationResult:
    answers = await resolver.resolve(fqdn, record_type)
    return PropagationResult(
        fqdn=normalize_hostname(fqdn),
        record_type=record_type,
        expected=expected,
        answers=answers,
        propagated=_matches(answers, expected, record_type),
    )


async def wait_for_propagation(
    resolver: Resolver,
    fqdn: str,
    expected: str,
    record_type: RecordType = RecordType.CNAME,
    *,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_attempt: Callable[[PropagationResult], None] | None = None,
) -> PropagationResult:
    """Poll until `fqdn` resolves to `expected` or `timeout_seconds` elapse.

    Never raises on timeout: the last observation is returned with
    `propagated=False`. A resolver failure on the first attempt is raised;
    later failures are logged and the previous answers are kept.
    """

    started = clock()
    attempts = 0
    last: PropagationResult | None = None
    while True:
        attempts += 1
        try:
            result = await check_propagation(resolver, fqdn, expected, record_type)
        except ResolverError as exc:
            if last is None:
                raise
            logger.warning("%s: attempt %d failed: %s", last.fqdn, attempts, exc)
            result = last
        elapsed = clock() - started
        result = result.model_copy(update={"attempts": attempts, "elapsed_seconds": round(elapsed, 3)})
        last = result
        if on_attempt:
            on_attempt(result)
        if result.propagated:
            logger.info("%s propagated after %d attempt(s)", result.fqdn, attempts)
            return result
        if elapsed + interval_seconds > timeout_seconds:
            logger.info("%s not propagated after %.0fs", result.fqdn, elapsed)
            return result
        await sleep(interval_seconds)
