"""Public resolver over DNS-over-HTTPS (JSON API).

Works with the `application/dns-json` flavour served by Google
(`https://dns.google/resolve`) and Cloudflare
(`https://cloudflare-dns.com/dns-query`).
"""

from __future__ import annotations

import asyncio

import httpx

from adapters.http_client import Sleep, build_async_client, request_with_retries
from core.config import AppSettings
from core.domain.errors import ResolverError
from core.domain.models import RecordType, normalize_hostname
from core.interfaces.dns import Resolver
from core.logging_setup import get_logger

logger = get_logger(__name__)

# RFC 1035 / 3596 / 2782 type codes.
TYPE_CODES: dict[RecordType, int] = {
    RecordType.A: 1,
    RecordType.NS: 2,
    RecordType.CNAME: 5,
    RecordType.SOA: 6,
    RecordType.MX: 15,
    RecordType.TXT: 16,
    RecordType.AAAA: 28,
    RecordType.SRV: 33,
}

NOERROR = 0
NXDOMAIN = 3


class DohResolver(Resolver):
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

    async def resolve(self, fqdn: str, record_type: RecordType = RecordType.CNAME) -> list[str]:
        name = normalize_hostname(fqdn)
        async with build_async_client(
            self._settings,
            extra_headers={"Accept": "application/dns-json"},
            transport=self._transport,
        ) as client:
            try:
                response = await request_with_retries(
                    client,
                    "GET",
                    self._settings.doh_url,
                    params={"name": name, "type": record_type.value},
                    max_retries=self._settings.http_max_retries,
                    sleep=self._sleep,
                )
            except httpx.TransportError as exc:
                raise ResolverError(f"resolver unreachable: {exc}") from exc

        if response.status_code != 200:
            raise ResolverError(f"resolver answered HTTP {response.status_code}")
        try:
            body = response.json()
        except ValueError as exc:
            raise ResolverError("resolver returned a non-JSON body") from exc

        status = body.get("Status", NOERROR)
        if status == NXDOMAIN:
            logger.debug("%s: NXDOMAIN", name)
            return []
        if status != NOERROR:
            raise ResolverError(f"resolver returned DNS status {status} for {name}")

        wanted = TYPE_CODES[record_type]
        answers: list[str] = []
        for answer in body.get("Answer") or []:
            if not isinstance(answer, dict) or answer.get("type") != wanted:
                continue
            data = answer.get("data")
            if isinstance(data, str) and data.strip():
                value = data.strip().strip('"') if record_type == RecordType.TXT else normalize_hostname(data)
                answers.append(value)
        logger.debug("%s %s -> %s", name, record_type.value, answers)
        return answers
