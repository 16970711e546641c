"""DNS provider: GoDaddy Domains API (v1).

Records are addressed as `/v1/domains/{domain}/records/{type}/{name}`; a PUT
on that path replaces every record of that type and name with the JSON list
in the body. Authentication is the `sso-key {key}:{secret}` header.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from adapters.http_client import Sleep, build_async_client, request_with_retries
from core.config import AppSettings
from core.domain.errors import ConfigurationError, DnsProviderError
from core.domain.models import DnsRecord, RecordChange, RecordType
from core.interfaces.dns import DnsProvider
from core.logging_setup import get_logger

logger = get_logger(__name__)


def auth_header(api_key: str, api_secret: str) -> str:
    return f"sso-key {api_key}:{api_secret}"


def masked_auth_header(api_key: str | None) -> str:
    key = api_key or ""
    visible = key[:4] if len(key) > 8 else ""
    return f"sso-key {visible}****:****"


def provider_error(response: httpx.Response) -> DnsProviderError:
    """Build a `DnsProviderError` from the provider's JSON error body."""

    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        fields = body.get("fields")
        return DnsProviderError(
            response.status_code,
            str(body.get("message") or response.reason_phrase or "request failed"),
            code=body.get("code"),
            fields=fields if isinstance(fields, list) else None,
        )

    text = response.text.strip()[:500]
    return DnsProviderError(response.status_code, text or response.reason_phrase or "request failed")


class GoDaddyClient(DnsProvider):
    """Async client for the records endpoints."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._sleep = sleep

    def _require_credentials(self) -> tuple[str, str]:
        missing = [
            name
            for name, value in (
                ("GODADDY_API_KEY", self._settings.godaddy_api_key),
                ("GODADDY_API_SECRET", self._settings.godaddy_api_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                "DNS provider credentials are not configured: " + ", ".join(missing),
                missing=missing,
            )
        return self._settings.godaddy_api_key, self._settings.godaddy_api_secret  # type: ignore[return-value]

    def _client(self) -> httpx.AsyncClient:
        key, secret = self._require_credentials()
        return build_async_client(
            self._settings,
            extra_headers={"Authorization": auth_header(key, secret)},
            transport=self._transport,
            base_url=self._settings.godaddy_base_url.rstrip("/"),
        )

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        async with self._client() as client:
            try:
                return await request_with_retries(
                    client,
                    method,
                    path,
                    max_retries=self._settings.http_max_retries,
                    sleep=self._sleep,
                    **kwargs,
                )
            except httpx.TransportError as exc:
                logger.error("%s %s failed: %s", method, path, exc)
                raise DnsProviderError(None, f"{method} {path}: {str(exc) or type(exc).__name__}") from exc

    async def get_records(self, domain: str, record_type: RecordType, name: str) -> list[DnsRecord]:
        path = f"/v1/domains/{domain}/records/{record_type.value}/{name}"
        response = await self._send("GET", path)
        if response.status_code == 404:
            return []
        if response.status_code != 200:
            raise provider_error(response)

        data = response.json()
        if not isinstance(data, list):
            return []
        records = [DnsRecord.model_validate(item) for item in data if isinstance(item, dict)]
        logger.debug("GET %s -> %d record(s)", path, len(records))
        return records

    async def replace_records(self, change: RecordChange) -> int:
        logger.info("PUT %s (%d record(s))", change.path, len(change.records))
        response = await self._send(
            "PUT",
            change.path,
            json=change.payload(),
            headers={"Content-Type": "application/json"},
        )
        if not response.is_success:
            raise provider_error(response)
        return response.status_code

    async def check_access(self, domain: str) -> dict[str, Any]:
        """Fetch the domain summary; proves the credentials can see `domain`."""

        response = await self._send("GET", f"/v1/domains/{domain}")
        if response.status_code != 200:
            raise provider_error(response)
        data = response.json()
        return {
            "domain": data.get("domain", domain),
            "status": data.get("status"),
            "expires": data.get("expires"),
            "name_servers": data.get("nameServers") or [],
        }
