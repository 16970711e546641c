"""DNS contracts.

`DnsProvider` is the registrar side (authoritative records, write access);
`Resolver` is the public side (what recursive resolvers currently answer).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import DnsRecord, RecordChange, RecordType


@runtime_checkable
class DnsProvider(Protocol):
    async def get_records(self, domain: str, record_type: RecordType, name: str) -> list[DnsRecord]:
        """Return the records stored for `type` + `name` (empty when none)."""

        ...

    async def replace_records(self, change: RecordChange) -> int:
        """Replace the records described by `change`; return the HTTP status."""

        ...


@runtime_checkable
class Resolver(Protocol):
    async def resolve(self, fqdn: str, record_type: RecordType) -> list[str]:
        """Return normalized answers of `record_type` for `fqdn`."""

        ...
