"""Tests for the GoDaddy records client."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.godaddy import GoDaddyClient, auth_header, masked_auth_header
from core.config import AppSettings
from core.domain.errors import ConfigurationError, DnsProviderError
from core.domain.models import DnsRecord, RecordChange, RecordType
from tests.fakes import RecordingTransport, no_sleep


def _change(target: str = "example-production.up.railway.app") -> RecordChange:
    return RecordChange(domain="example.io", name="www", records=[DnsRecord(data=target, ttl=600)])


@pytest.mark.unit
def test_replace_records_sends_documented_request(settings: AppSettings) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(200))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    status = asyncio.run(client.replace_records(_change()))

    assert status == 200
    (request,) = transport.requests
    assert request.method == "PUT"
    assert str(request.url) == "https://api.godaddy.com/v1/domains/example.io/records/CNAME/www"
    assert request.headers["Authorization"] == "sso-key test-key-1234:test-secret"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == [{"data": "example-production.up.railway.app", "ttl": 600}]


@pytest.mark.unit
def test_replace_records_raises_with_provider_message(settings: AppSettings) -> None:
    body = {
        "code": "INVALID_BODY",
        "message": "Request body doesn't fulfill schema",
        "fields": [{"path": "records[0].ttl", "message": "must be >= 600"}],
    }
    transport = RecordingTransport(lambda request: httpx.Response(422, json=body))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    with pytest.raises(DnsProviderError) as excinfo:
        asyncio.run(client.replace_records(_change()))

    err = excinfo.value
    assert err.status_code == 422
    assert err.code == "INVALID_BODY"
    assert "doesn't fulfill schema" in str(err)
    assert err.field_messages() == ["records[0].ttl: must be >= 600"]
    # 4xx answers are not retried.
    assert len(transport.requests) == 1


@pytest.mark.unit
def test_non_json_error_body_is_kept_as_text(settings: AppSettings) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(401, text="Unauthorized"))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    with pytest.raises(DnsProviderError, match="Unauthorized"):
        asyncio.run(client.replace_records(_change()))


@pytest.mark.unit
def test_transient_errors_are_retried(settings: AppSettings) -> None:
    answers = iter([httpx.Response(503), httpx.Response(429, headers={"Retry-After": "1"}), httpx.Response(200)])
    transport = RecordingTransport(lambda request: next(answers))
    delays: list[float] = []

    async def record_sleep(seconds: float) -> None:
        delays.append(seconds)

    client = GoDaddyClient(settings, transport=transport, sleep=record_sleep)
    assert asyncio.run(client.replace_records(_change())) == 200
    assert len(transport.requests) == 3
    assert len(delays) == 2
    assert 1.0 <= delays[1] < 1.5


@pytest.mark.unit
def test_retries_are_bounded(settings: AppSettings) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(500, json={"code": "INTERNAL", "message": "boom"}))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    with pytest.raises(DnsProviderError) as excinfo:
        asyncio.run(client.replace_records(_change()))

    assert excinfo.value.status_code == 500
    # settings fixture allows 2 retries.
    assert len(transport.requests) == 3


@pytest.mark.unit
def test_get_records_parses_list(settings: AppSettings) -> None:
    payload = [{"data": "old.example.net", "name": "www", "ttl": 3600, "type": "CNAME"}]
    transport = RecordingTransport(lambda request: httpx.Response(200, json=payload))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    records = asyncio.run(client.get_records("example.io", RecordType.CNAME, "www"))

    assert records == [DnsRecord(data="old.example.net", name="www", ttl=3600, type=RecordType.CNAME)]
    assert transport.requests[0].method == "GET"


@pytest.mark.unit
def test_get_records_accepts_short_stored_ttl(settings: AppSettings) -> None:
    payload = [{"data": "old.example.net", "name": "www", "ttl": 300, "type": "CNAME"}]
    transport = RecordingTransport(lambda request: httpx.Response(200, json=payload))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    records = asyncio.run(client.get_records("example.io", RecordType.CNAME, "www"))

    assert [r.ttl for r in records] == [300]


@pytest.mark.unit
def test_get_records_404_is_empty(settings: AppSettings) -> None:
    transport = RecordingTransport(lambda request: httpx.Response(404, json={"code": "NOT_FOUND", "message": "x"}))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    assert asyncio.run(client.get_records("example.io", RecordType.CNAME, "www")) == []


@pytest.mark.unit
def test_missing_credentials_fail_before_any_request(make_settings) -> None:
    settings = make_settings(GODADDY_API_KEY="only-key")
    transport = RecordingTransport(lambda request: httpx.Response(200))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    with pytest.raises(ConfigurationError) as excinfo:
        asyncio.run(client.replace_records(_change()))

    assert excinfo.value.missing == ["GODADDY_API_SECRET"]
    assert transport.requests == []


@pytest.mark.unit
def test_ote_base_url_is_honoured(make_settings) -> None:
    settings = make_settings(
        GODADDY_API_KEY="k" * 12,
        GODADDY_API_SECRET="s",
        DEPLOY_OPS_GODADDY_BASE_URL="https://api.ote-godaddy.com/",
    )
    transport = RecordingTransport(lambda request: httpx.Response(200, json={"domain": "example.io", "status": "ACTIVE"}))
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    info = asyncio.run(client.check_access("example.io"))

    assert info["status"] == "ACTIVE"
    assert str(transport.requests[0].url) == "https://api.ote-godaddy.com/v1/domains/example.io"


@pytest.mark.unit
def test_auth_header_helpers() -> None:
    assert auth_header("k", "s") == "sso-key k:s"
    assert masked_auth_header("abcdefghijkl") == "sso-key abcd****:****"
    assert masked_auth_header(None) == "sso-key ****:****"


@pytest.mark.unit
def test_network_failure_becomes_provider_error(settings: AppSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("name resolution failed", request=request)

    transport = RecordingTransport(handler)
    client = GoDaddyClient(settings, transport=transport, sleep=no_sleep)

    with pytest.raises(DnsProviderError) as excinfo:
        asyncio.run(client.get_records("example.io", RecordType.CNAME, "www"))

    err = excinfo.value
    assert err.status_code is None
    assert "unreachable" in str(err)
    assert "name resolution failed" in str(err)
    assert "test-secret" not in str(err)
    assert len(transport.requests) == settings.http_max_retries + 1
