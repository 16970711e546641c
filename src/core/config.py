"""Core configuration.

Centralizes environment variables (pydantic-settings) so the CLI and the
adapters (DNS provider, resolver, database) read the same contract.

The variable names the deployment runbook exports (`GODADDY_API_KEY`,
`DATABASE_URL`, ...) are accepted as-is next to the `DEPLOY_OPS_` prefixed
ones.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "deploy-ops"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :].lstrip()
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v})

    lines = [f"# {APP_NAME} user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


def _env(name: str, *aliases: str) -> AliasChoices:
    return AliasChoices(name, f"DEPLOY_OPS_{name}", *aliases)


class AppSettings(BaseSettings):
    """Central application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DEPLOY_OPS_",
        extra="ignore",
        case_sensitive=False,
        # Project first, then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    # DNS provider
    godaddy_api_key: str | None = Field(
        default=None,
        validation_alias=_env("GODADDY_API_KEY"),
        description="GoDaddy API key (production or OTE).",
    )
    godaddy_api_secret: str | None = Field(
        default=None,
        validation_alias=_env("GODADDY_API_SECRET"),
        description="GoDaddy API secret paired with the key.",
    )
    godaddy_base_url: str = Field(
        default="https://api.godaddy.com",
        min_length=8,
        description="GoDaddy API base URL (https://api.ote-godaddy.com for the sandbox).",
    )
    domain: str | None = Field(
        default=None,
        description="Registered domain whose records are managed (e.g. example.io).",
    )
    record_name: str = Field(
        default="www",
        min_length=1,
        description="Record name relative to the domain ('@' for the apex).",
    )
    cname_target: str | None = Field(
        default=None,
        validation_alias=_env("CNAME_TARGET", "RAILWAY_URL"),
        description="Public hostname of the hosting platform deployment.",
    )
    record_ttl: int = Field(
        default=600,
        ge=600,
        le=604_800,
        description="TTL in seconds for written records (provider minimum is 600).",
    )

    # HTTP
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Per-request timeout (seconds).",
    )
    http_max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Max retries on transient failures (429, 5xx, network).",
    )
    user_agent: str = Field(
        default=f"{APP_NAME}/0.1",
        min_length=1,
        description="User-Agent for outgoing requests.",
    )
    doh_url: str = Field(
        default="https://dns.google/resolve",
        min_length=8,
        description="DNS-over-HTTPS JSON endpoint used for propagation checks.",
    )

    # Database / application environment
    database_url: str | None = Field(
        default=None,
        validation_alias=_env("DATABASE_URL"),
        description="PostgreSQL connection string of the managed database.",
    )
    node_env: str = Field(
        default="development",
        validation_alias=_env("NODE_ENV"),
        description="Application environment; 'production' enforces TLS and strict env checks.",
    )
    migrations_dir: Path = Field(
        default=Path("migrations"),
        description="Directory holding ordered NNN_name.sql migration files.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Root log level (DEBUG, INFO, WARNING, ERROR).",
    )

    @property
    def is_production(self) -> bool:
        return self.node_env.strip().lower() == "production"

    @property
    def has_dns_credentials(self) -> bool:
        return bool(self.godaddy_api_key and self.godaddy_api_secret)
