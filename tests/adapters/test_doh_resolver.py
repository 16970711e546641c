"""Tests for the DNS-over-HTTPS resolver."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from adapters.doh_resolver import DohResolver
from core.config import AppSettings
from core.domain.errors import ResolverError
from core.domain.models import RecordType
from tests.fakes import RecordingTransport, no_sleep


def _resolver(settings: AppSettings, handler) -> tuple[DohResolver, RecordingTransport]:
    transport = RecordingTransport(handler)
    return DohResolver(settings, transport=transport, sleep=no_sleep), transport


@pytest.mark.unit
def test_cname_answers_are_normalized(settings: AppSettings) -> None:
    body = {
        "Status": 0,
        "Answer": [
            {"name": "www.example.io.", "type": 5, "TTL": 600, "data": "Example-Production.up.railway.app."},
            {"name": "example-production.up.railway.app.", "type": 1, "TTL": 60, "data": "66.33.22.11"},
        ],
    }
    resolver, transport = _resolver(settings, lambda request: httpx.Response(200, json=body))

    answers = asyncio.run(resolver.resolve("WWW.example.io.", RecordType.CNAME))

    assert answers == ["example-production.up.railway.app"]
    request = transport.requests[0]
    assert request.url.params["name"] == "www.example.io"
    assert request.url.params["type"] == "CNAME"
    assert request.headers["Accept"] == "application/dns-json"


@pytest.mark.unit
def test_nxdomain_returns_no_answers(settings: AppSettings) -> None:
    resolver, _ = _resolver(settings, lambda request: httpx.Response(200, json={"Status": 3}))
    assert asyncio.run(resolver.resolve("nope.example.io", RecordType.CNAME)) == []


@pytest.mark.unit
def test_servfail_raises(settings: AppSettings) -> None:
    resolver, _ = _resolver(settings, lambda request: httpx.Response(200, json={"Status": 2}))
    with pytest.raises(ResolverError, match="status 2"):
        asyncio.run(resolver.resolve("www.example.io", RecordType.CNAME))


@pytest.mark.unit
def test_http_error_raises(settings: AppSettings) -> None:
    resolver, transport = _resolver(settings, lambda request: httpx.Response(400))
    with pytest.raises(ResolverError, match="HTTP 400"):
        asyncio.run(resolver.resolve("www.example.io", RecordType.A))
    assert len(transport.requests) == 1


@pytest.mark.unit
def test_transport_error_raises_after_retries(settings: AppSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resolver, transport = _resolver(settings, handler)
    with pytest.raises(ResolverError, match="unreachable"):
        asyncio.run(resolver.resolve("www.example.io", RecordType.CNAME))
    assert len(transport.requests) == 3
