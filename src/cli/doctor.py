"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.doh_resolver import DohResolver
from adapters.godaddy import GoDaddyClient
from adapters.postgres import connect, mask_database_url, server_info
from cli.ui_components import print_banner
from core.config import AppSettings, write_user_env_vars
from core.domain.errors import DeployOpsError
from core.domain.models import RecordType

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_provider(settings: AppSettings) -> tuple[bool, str]:
    try:
        info = await GoDaddyClient(settings).check_access(settings.domain or "")
    except DeployOpsError as exc:
        return False, str(exc)
    return True, f"{info['domain']} ({info['status'] or 'unknown status'})"


async def _check_resolver(settings: AppSettings) -> tuple[bool, str]:
    try:
        answers = await DohResolver(settings).resolve(settings.domain or "example.com", RecordType.NS)
    except DeployOpsError as exc:
        return False, str(exc)
    return True, ", ".join(answers) or "no NS answers"


def _check_database(settings: AppSettings) -> tuple[bool, str]:
    try:
        conn = connect(settings, connect_timeout=5)
    except DeployOpsError as exc:
        return False, str(exc)
    try:
        info = server_info(conn)
    except DeployOpsError as exc:
        return False, str(exc)
    finally:
        conn.close()
    return True, str(info["version"]).split(",")[0]


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    print_banner(_console)

    table = Table(title="deploy-ops doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.has_dns_credentials:
        table.add_row("DNS credentials", "OK", settings.godaddy_base_url)
    else:
        table.add_row("DNS credentials", "MISSING", "Run `deploy-ops doctor setup-dns`")
    table.add_row("Domain", "OK" if settings.domain else "MISSING", settings.domain or "DEPLOY_OPS_DOMAIN")
    table.add_row(
        "CNAME target",
        "OK" if settings.cname_target else "MISSING",
        settings.cname_target or "CNAME_TARGET",
    )
    table.add_row("Database URL", "OK" if settings.database_url else "MISSING", mask_database_url(settings.database_url))

    failures = 0

    # Connectivity (best-effort)
    if settings.has_dns_credentials and settings.domain:
        ok, detail = asyncio.run(_check_provider(settings))
        failures += not ok
        table.add_row("DNS provider API", "OK" if ok else "FAIL", detail)
    else:
        table.add_row("DNS provider API", "SKIPPED", "credentials or domain not set")

    ok, detail = asyncio.run(_check_resolver(settings))
    failures += not ok
    table.add_row("DoH resolver", "OK" if ok else "FAIL", detail)

    if settings.database_url:
        ok, detail = _check_database(settings)
        failures += not ok
        table.add_row("PostgreSQL", "OK" if ok else "FAIL", detail)
    else:
        table.add_row("PostgreSQL", "SKIPPED", "DATABASE_URL not set")

    _console.print(table)
    if failures:
        raise typer.Exit(code=1)


@app.command(name="setup-dns")
def setup_dns() -> None:
    """Interactive DNS setup (stores config in the user config .env)."""

    settings = AppSettings()
    environment = typer.prompt("GoDaddy environment (production/ote)", default="production").strip().lower()
    presets = {
        "production": "https://api.godaddy.com",
        "ote": "https://api.ote-godaddy.com",
    }
    if environment not in presets:
        raise typer.BadParameter("environment must be 'production' or 'ote'")

    api_key = typer.prompt("GoDaddy API key", hide_input=True).strip()
    api_secret = typer.prompt("GoDaddy API secret", hide_input=True).strip()
    domain = typer.prompt("Domain", default=settings.domain or "", show_default=bool(settings.domain)).strip()
    target = typer.prompt(
        "CNAME target (platform hostname)",
        default=settings.cname_target or "",
        show_default=bool(settings.cname_target),
    ).strip()

    if not api_key or not api_secret or not domain:
        raise typer.BadParameter("api key, api secret and domain are required")

    env_path = write_user_env_vars(
        {
            "DEPLOY_OPS_GODADDY_BASE_URL": presets[environment],
            "GODADDY_API_KEY": api_key,
            "GODADDY_API_SECRET": api_secret,
            "DEPLOY_OPS_DOMAIN": domain,
            "CNAME_TARGET": target,
        }
    )

    _console.print(f"[green]Saved DNS config to:[/green] {env_path}")
