"""Tests for propagation checks."""

from __future__ import annotations

import asyncio

import pytest

from core.domain.errors import ResolverError
from core.domain.models import RecordType
from core.services.propagation import check_propagation, propagation_hint, wait_for_propagation


class ScriptedResolver:
    """Replays one round per call; an exception round is raised."""

    def __init__(self, *rounds: list[str] | Exception) -> None:
        self._rounds = list(rounds)
        self.queries: list[tuple[str, RecordType]] = []

    async def resolve(self, fqdn: str, record_type: RecordType) -> list[str]:
        self.queries.append((fqdn, record_type))
        answer = self._rounds.pop(0) if len(self._rounds) > 1 else self._rounds[0]
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.mark.unit
def test_check_propagation_matches_normalized_expected() -> None:
    resolver = ScriptedResolver(["app.up.railway.app"])
    result = asyncio.run(check_propagation(resolver, "www.example.io", "App.Up.Railway.App."))
    assert result.propagated
    assert result.answers == ["app.up.railway.app"]


@pytest.mark.unit
def test_wait_polls_until_propagated() -> None:
    resolver = ScriptedResolver(["old.herokudns.com"], [], ["app.up.railway.app"])
    clock = FakeClock()
    seen: list[int] = []

    result = asyncio.run(
        wait_for_propagation(
            resolver,
            "www.example.io",
            "app.up.railway.app",
            timeout_seconds=600,
            interval_seconds=30,
            sleep=clock.sleep,
            clock=clock,
            on_attempt=lambda r: seen.append(r.attempts),
        )
    )

    assert result.propagated
    assert result.attempts == 3
    assert result.elapsed_seconds == 60
    assert clock.sleeps == [30, 30]
    assert seen == [1, 2, 3]


@pytest.mark.unit
def test_wait_gives_up_after_timeout_without_raising() -> None:
    resolver = ScriptedResolver(["old.herokudns.com"])
    clock = FakeClock()

    result = asyncio.run(
        wait_for_propagation(
            resolver,
            "www.example.io",
            "app.up.railway.app",
            RecordType.CNAME,
            timeout_seconds=100,
            interval_seconds=30,
            sleep=clock.sleep,
            clock=clock,
        )
    )

    assert not result.propagated
    assert result.answers == ["old.herokudns.com"]
    assert result.attempts == 4
    assert clock.now <= 100


@pytest.mark.unit
def test_wait_survives_a_failed_poll() -> None:
    resolver = ScriptedResolver(
        ["old.herokudns.com"],
        ResolverError("resolver answered HTTP 503"),
        ["app.up.railway.app"],
    )
    clock = FakeClock()
    seen: list[tuple[int, list[str]]] = []

    result = asyncio.run(
        wait_for_propagation(
            resolver,
            "www.example.io",
            "app.up.railway.app",
            timeout_seconds=600,
            interval_seconds=30,
            sleep=clock.sleep,
            clock=clock,
            on_attempt=lambda r: seen.append((r.attempts, r.answers)),
        )
    )

    assert result.propagated
    assert result.attempts == 3
    assert seen[1] == (2, ["old.herokudns.com"])


@pytest.mark.unit
def test_wait_raises_when_first_poll_fails() -> None:
    resolver = ScriptedResolver(ResolverError("resolver unreachable"))
    clock = FakeClock()

    with pytest.raises(ResolverError):
        asyncio.run(
            wait_for_propagation(
                resolver,
                "www.example.io",
                "app.up.railway.app",
                sleep=clock.sleep,
                clock=clock,
            )
        )

    assert clock.sleeps == []


@pytest.mark.unit
def test_propagation_hint() -> None:
    assert propagation_hint("www.example.io") == "dig www.example.io +short"
