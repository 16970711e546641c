"""Environment variables of the hosted application.

Covers the runbook's "configure environment variables" step: audit what is
set, generate strong secrets for what is not, and render the hosting
platform CLI commands that set them.
"""

from __future__ import annotations

import secrets
import shlex
from pathlib import Path
from typing import Mapping, Sequence

from adapters.postgres import mask_database_url
from core.config import parse_env_lines
from core.domain.models import EnvReport, EnvVarState, EnvVarStatus

REQUIRED_VARS: tuple[str, ...] = (
    "JWT_SECRET",
    "JWT_REFRESH_SECRET",
    "ENCRYPTION_KEY",
    "DATABASE_URL",
)

OPTIONAL_VARS: tuple[str, ...] = (
    "NODE_ENV",
    "PORT",
    "REDIS_URL",
    "ALLOWED_ORIGINS",
    "CSRF_SECRET",
    "ADMIN_SECRET_KEY",
    "INTERNAL_SECRET",
)

# Values the application ships as fallbacks; never acceptable in production.
PLACEHOLDER_VALUES: frozenset[str] = frozenset(
    {
        "your-secret-key-change-in-production",
        "your-refresh-secret-change-in-production",
        "default-encryption-key-32-chars!",
        "csrf-secret-key-change-in-prod!",
        "changeme",
        "change-me",
        "secret",
    }
)

MIN_SECRET_LENGTH = 32


def is_secret_name(name: str) -> bool:
    upper = name.upper()
    return any(token in upper for token in ("SECRET", "KEY", "PASSWORD", "TOKEN"))


def mask_value(name: str, value: str) -> str:
    """Masked rendering for tables and logs."""

    if name.upper().endswith("_URL") and "://" in value:
        return mask_database_url(value)
    if not is_secret_name(name):
        return value
    if len(value) <= 8:
        return "****"
    return f"{value[:4]}****{value[-2:]}"


def load_env_file(path: Path) -> dict[str, str]:
    return parse_env_lines(path.read_text(encoding="utf-8"))


def _status(name: str, value: str | None, *, required: bool) -> EnvVarStatus:
    if value is None or not value.strip():
        return EnvVarStatus(
            name=name,
            required=required,
            state=EnvVarState.MISSING if required else EnvVarState.OPTIONAL_MISSING,
        )
    if value.strip() in PLACEHOLDER_VALUES:
        return EnvVarStatus(
            name=name,
            required=required,
            state=EnvVarState.INSECURE,
            display_value=mask_value(name, value),
            detail="placeholder default",
        )
    if is_secret_name(name) and len(value) < MIN_SECRET_LENGTH:
        return EnvVarStatus(
            name=name,
            required=required,
            state=EnvVarState.INSECURE,
            display_value=mask_value(name, value),
            detail=f"shorter than {MIN_SECRET_LENGTH} characters",
        )
    return EnvVarStatus(name=name, required=required, state=EnvVarState.OK, display_value=mask_value(name, value))


def audit_environment(
    env: Mapping[str, str],
    *,
    required: Sequence[str] = REQUIRED_VARS,
    optional: Sequence[str] = OPTIONAL_VARS,
    production: bool | None = None,
) -> EnvReport:
    """Check `env` against the required/optional variable lists.

    `production=None` derives strictness from `env["NODE_ENV"]`.
    """

    if production is None:
        production = env.get("NODE_ENV", "").strip().lower() == "production"

    variables = [_status(name, env.get(name), required=True) for name in required]
    variables += [_status(name, env.get(name), required=False) for name in optional if name not in required]
    return EnvReport(strict=production, variables=variables)


def generate_secrets(names: Sequence[str], *, nbytes: int = 32) -> dict[str, str]:
    return {name: secrets.token_hex(nbytes) for name in names}


def render_platform_commands(
    values: Mapping[str, str],
    *,
    service: str | None = None,
    reveal: bool = False,
) -> list[str]:
    """`railway variables --set KEY=VALUE` lines, one per variable."""

    prefix = "railway variables"
    if service:
        prefix += f" --service {shlex.quote(service)}"
    lines: list[str] = []
    for name in sorted(values):
        value = values[name] if reveal else mask_value(name, values[name])
        lines.append(f"{prefix} --set {shlex.quote(f'{name}={value}')}")
    return lines
