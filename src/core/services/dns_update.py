"""Record update orchestration.

The CLI delegates the whole repoint flow here: validate inputs before any
I/O, read the current value, replace it, read it back. UI concerns
(printing, spinners) stay in hooks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from adapters.godaddy import GoDaddyClient
from core.config import AppSettings
from core.domain.errors import ConfigurationError
from core.domain.models import (
    DnsRecord,
    RecordChange,
    RecordType,
    UpdateOutcome,
    normalize_hostname,
)
from core.interfaces.dns import DnsProvider
from core.logging_setup import get_logger

logger = get_logger(__name__)

# Provider minimum for written records.
MIN_TTL_SECONDS = 600


@dataclass
class UpdateRequest:
    """Parameters of one update; unset values fall back to settings."""

    domain: str | None = None
    name: str | None = None
    target: str | None = None
    ttl: int | None = None
    record_type: RecordType = RecordType.CNAME
    dry_run: bool = False


@dataclass
class UpdateHooks:
    """Optional callbacks for UI layers."""

    planned: Callable[[RecordChange], None] | None = None
    warning: Callable[[str], None] | None = None
    messages: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        self.messages.append(message)
        logger.warning(message)
        if self.warning:
            self.warning(message)


def build_change(settings: AppSettings, request: UpdateRequest) -> RecordChange:
    """Resolve request + settings into a validated `RecordChange`.

    Raises:
        ConfigurationError: missing credentials, domain or target, a TTL below
            MIN_TTL_SECONDS, or a CNAME requested at the zone apex.
    """

    domain = request.domain or settings.domain
    name = (request.name or settings.record_name).strip()
    target = request.target or settings.cname_target
    ttl = request.ttl if request.ttl is not None else settings.record_ttl

    missing: list[str] = []
    if not request.dry_run:
        if not settings.godaddy_api_key:
            missing.append("GODADDY_API_KEY")
        if not settings.godaddy_api_secret:
            missing.append("GODADDY_API_SECRET")
    if not domain:
        missing.append("DEPLOY_OPS_DOMAIN")
    if not target:
        missing.append("CNAME_TARGET")
    if missing:
        raise ConfigurationError("Missing required settings: " + ", ".join(missing), missing=missing)

    if ttl < MIN_TTL_SECONDS:
        raise ConfigurationError(f"TTL must be at least {MIN_TTL_SECONDS} seconds (got {ttl}).")

    if request.record_type == RecordType.CNAME and name == "@":
        raise ConfigurationError(
            "A CNAME cannot live at the zone apex. Point the 'www' record at the "
            "platform hostname and use it as primary, or manage an A record for '@'."
        )

    value = normalize_hostname(target) if request.record_type == RecordType.CNAME else target.strip()  # type: ignore[union-attr]
    if request.record_type == RecordType.CNAME and normalize_hostname(domain) == value:  # type: ignore[arg-type]
        raise ConfigurationError("CNAME target must differ from the domain itself.")

    return RecordChange(
        domain=domain,  # type: ignore[arg-type]
        type=request.record_type,
        name=name,
        records=[DnsRecord(data=value, ttl=ttl)],
    )


def _same_data(left: list[DnsRecord], right: list[DnsRecord]) -> bool:
    return sorted(normalize_hostname(r.data) for r in left) == sorted(
        normalize_hostname(r.data) for r in right
    )


async def update_record(
    *,
    settings: AppSettings,
    request: UpdateRequest,
    provider: DnsProvider | None = None,
    hooks: UpdateHooks | None = None,
) -> UpdateOutcome:
    hooks = hooks or UpdateHooks()
    change = build_change(settings, request)
    if hooks.planned:
        hooks.planned(change)

    if request.dry_run:
        logger.info("Dry run: %s not sent", change.path)
        return UpdateOutcome(change=change, dry_run=True)

    if provider is None:
        provider = GoDaddyClient(settings)

    previous = await provider.get_records(change.domain, change.type, change.name)
    if previous and _same_data(previous, change.records):
        logger.info("%s already points at %s; replacing anyway to refresh TTL", change.fqdn, change.records[0].data)

    status = await provider.replace_records(change)
    current = await provider.get_records(change.domain, change.type, change.name)
    verified = _same_data(current, change.records)
    if not verified:
        hooks.warn(
            f"Read-back of {change.fqdn} returned {[r.data for r in current]} "
            f"instead of {[r.data for r in change.records]}"
        )

    return UpdateOutcome(
        change=change,
        status_code=status,
        previous=previous,
        current=current,
        verified=verified,
    )
