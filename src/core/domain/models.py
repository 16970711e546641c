"""Domain models (Pydantic v2).

These models describe *what* a deployment change is (records, migrations,
environment variables), not *how* it reaches the provider or the database.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict


def normalize_hostname(value: str) -> str:
    """Lower-case a hostname and strip the trailing root dot."""

    return value.strip().rstrip(".").lower()


class RecordType(str, Enum):
    """Record types accepted by the provider's records endpoint."""

    A = "A"
    AAAA = "AAAA"
    CNAME = "CNAME"
    MX = "MX"
    NS = "NS"
    SOA = "SOA"
    SRV = "SRV"
    TXT = "TXT"


class DnsRecord(BaseModel):
    """One record value as the provider stores it."""

    model_config = ConfigDict(extra="ignore")

    data: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Record value (target hostname for CNAME, address for A).",
    )
    ttl: int = Field(
        default=600,
        ge=0,
        description="Time to live in seconds (the provider accepts writes of 600 or more).",
    )
    name: str | None = Field(
        default=None,
        description="Record name as echoed by the provider on reads.",
    )
    type: RecordType | None = Field(
        default=None,
        description="Record type as echoed by the provider on reads.",
    )
    priority: int | None = Field(
        default=None,
        ge=0,
        description="Priority (MX/SRV only).",
    )

    def to_payload(self) -> dict[str, Any]:
        """Body element for a replace request: `{"data", "ttl"}`."""

        payload: dict[str, Any] = {"data": self.data, "ttl": self.ttl}
        if self.priority is not None:
            payload["priority"] = self.priority
        return payload


class RecordChange(BaseModel):
    """Replace all records of `type` + `name` under `domain` with `records`."""

    domain: str = Field(..., min_length=3, max_length=253)
    type: RecordType = Field(default=RecordType.CNAME)
    name: str = Field(default="www", min_length=1, max_length=253)
    records: list[DnsRecord] = Field(..., min_length=1)

    @field_validator("domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        return normalize_hostname(value)

    @property
    def path(self) -> str:
        return f"/v1/domains/{self.domain}/records/{self.type.value}/{self.name}"

    @property
    def fqdn(self) -> str:
        if self.name == "@":
            return self.domain
        return f"{self.name}.{self.domain}"

    def payload(self) -> list[dict[str, Any]]:
        return [record.to_payload() for record in self.records]


class UpdateOutcome(BaseModel):
    """Result of one record update, including the read-back."""

    change: RecordChange
    dry_run: bool = False
    status_code: int | None = Field(
        default=None,
        description="Provider status for the replace request (None on dry runs).",
    )
    previous: list[DnsRecord] = Field(default_factory=list)
    current: list[DnsRecord] = Field(default_factory=list)
    verified: bool = Field(
        default=False,
        description="True when the read-back matches the requested data.",
    )
    finished_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def changed(self) -> bool:
        before = sorted(normalize_hostname(r.data) for r in self.previous)
        after = sorted(normalize_hostname(r.data) for r in self.change.records)
        return before != after


class PropagationResult(BaseModel):
    """Public resolution of a hostname compared with the expected value."""

    fqdn: str
    record_type: RecordType = RecordType.CNAME
    expected: str
    answers: list[str] = Field(default_factory=list)
    propagated: bool = False
    attempts: int = Field(default=1, ge=1)
    elapsed_seconds: float = Field(default=0.0, ge=0)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EnvVarState(str, Enum):
    OK = "ok"
    MISSING = "missing"
    INSECURE = "insecure"
    OPTIONAL_MISSING = "optional-missing"


class EnvVarStatus(BaseModel):
    name: str
    required: bool = True
    state: EnvVarState
    display_value: str | None = Field(
        default=None,
        description="Masked value, never the secret itself.",
    )
    detail: str | None = None


class EnvReport(BaseModel):
    """Audit of the application's environment variables."""

    strict: bool = Field(
        default=False,
        description="Production mode: missing/insecure required variables fail the audit.",
    )
    variables: list[EnvVarStatus] = Field(default_factory=list)

    @property
    def problems(self) -> list[EnvVarStatus]:
        return [
            v
            for v in self.variables
            if v.required and v.state in (EnvVarState.MISSING, EnvVarState.INSECURE)
        ]

    @property
    def ok(self) -> bool:
        return not self.strict or not self.problems


class Migration(BaseModel):
    """A versioned SQL file (`002_seo_tables.sql`)."""

    version: int = Field(..., ge=0)
    name: str
    path: Path
    checksum: str = Field(..., min_length=64, max_length=64)

    @property
    def filename(self) -> str:
        return self.path.name

    def read_sql(self) -> str:
        return self.path.read_text(encoding="utf-8")


class MigrationResult(BaseModel):
    database: str = Field(..., description="Masked connection URL.")
    dry_run: bool = False
    applied: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    checksum_mismatches: list[str] = Field(default_factory=list)
