"""Domain errors.

Every failure the CLI reports to the operator derives from `DeployOpsError`;
anything else is a bug and propagates with its traceback.
"""

from __future__ import annotations

from typing import Any


class DeployOpsError(Exception):
    """Base class for operator-facing failures."""


class ConfigurationError(DeployOpsError):
    """Required settings are missing or contradictory."""

    def __init__(self, message: str, *, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class DnsProviderError(DeployOpsError):
    """The DNS provider answered with a non-2xx status, or could not be reached
    (`status_code` is None).
    """

    def __init__(
        self,
        status_code: int | None,
        message: str,
        *,
        code: str | None = None,
        fields: list[dict[str, Any]] | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        self.fields = list(fields or [])
        if status_code is None:
            label = "unreachable"
        else:
            label = f"{status_code} {code}" if code else str(status_code)
        super().__init__(f"DNS provider error ({label}): {message}")

    def field_messages(self) -> list[str]:
        out: list[str] = []
        for field in self.fields:
            path = field.get("path") or field.get("pathRelated") or "?"
            out.append(f"{path}: {field.get('message', '')}".rstrip(": "))
        return out


class ResolverError(DeployOpsError):
    """The DNS-over-HTTPS resolver failed to answer."""


class DatabaseError(DeployOpsError):
    """Connection or statement failure against PostgreSQL."""

    def __init__(self, message: str, *, url: str | None = None, filename: str | None = None) -> None:
        self.url = url
        self.filename = filename
        prefix = f"[{filename}] " if filename else ""
        super().__init__(f"{prefix}{message}")
