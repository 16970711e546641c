"""DNS commands: repoint a record, show it, check public propagation."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from adapters.doh_resolver import DohResolver
from adapters.godaddy import GoDaddyClient, masked_auth_header
from adapters.json_exporter import export_model_json
from cli.ui_components import (
    build_outcome_table,
    build_propagation_table,
    build_records_table,
    build_request_panel,
    print_error,
)
from core.config import AppSettings
from core.domain.errors import ConfigurationError, DeployOpsError
from core.domain.models import PropagationResult, RecordChange, RecordType
from core.services.dns_update import UpdateHooks, UpdateRequest, update_record
from core.services.propagation import (
    DEFAULT_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    check_propagation,
    propagation_hint,
    wait_for_propagation,
)

app = typer.Typer(no_args_is_help=True, help="DNS records at the registrar and their public propagation.")

_console = Console()


@app.command()
def update(
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Domain (default: DEPLOY_OPS_DOMAIN)."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Record name (default: www)."),
    target: Optional[str] = typer.Option(None, "--target", "-t", help="Value, e.g. the platform hostname."),
    ttl: Optional[int] = typer.Option(None, "--ttl", min=600, help="TTL in seconds (default: 600)."),
    record_type: RecordType = typer.Option(RecordType.CNAME, "--type", case_sensitive=False),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the request without sending it."),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the outcome as JSON."),
) -> None:
    """Point a record (by default the www CNAME) at the deployment hostname."""

    settings = AppSettings()
    request = UpdateRequest(
        domain=domain,
        name=name,
        target=target,
        ttl=ttl,
        record_type=record_type,
        dry_run=dry_run,
    )

    def show_plan(change: RecordChange) -> None:
        _console.print(f"Updating DNS records for [bold]{change.domain}[/bold]...")
        _console.print(
            build_request_panel(
                change,
                base_url=settings.godaddy_base_url,
                auth=masked_auth_header(settings.godaddy_api_key),
            )
        )

    hooks = UpdateHooks(
        planned=show_plan,
        warning=lambda msg: _console.print(f"[yellow]Warning:[/yellow] {escape(msg)}"),
    )

    try:
        outcome = asyncio.run(update_record(settings=settings, request=request, hooks=hooks))
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc

    if json_out:
        export_model_json(model=outcome, output_path=json_out)

    if outcome.dry_run:
        _console.print("[cyan]Dry run:[/cyan] no request sent.")
        return

    _console.print(build_outcome_table(outcome))
    if not outcome.verified:
        _console.print("[red]The provider accepted the change but the read-back does not match.[/red]")
        raise typer.Exit(code=1)

    _console.print(f"[green]{outcome.change.type.value} updated successfully.[/green]")
    _console.print("DNS changes take 10-60 minutes to propagate. Check with:")
    _console.print(f"  [bold]{propagation_hint(outcome.change.fqdn)}[/bold]")
    _console.print(f"  [bold]deploy-ops dns check --fqdn {outcome.change.fqdn} --wait[/bold]")


@app.command()
def show(
    domain: Optional[str] = typer.Option(None, "--domain", "-d"),
    name: Optional[str] = typer.Option(None, "--name", "-n"),
    record_type: RecordType = typer.Option(RecordType.CNAME, "--type", case_sensitive=False),
) -> None:
    """Show the records currently stored at the registrar."""

    settings = AppSettings()
    domain = domain or settings.domain
    name = name or settings.record_name
    if not domain:
        print_error(_console, ConfigurationError("No domain given (use --domain or DEPLOY_OPS_DOMAIN)"))
        raise typer.Exit(code=1)

    try:
        records = asyncio.run(GoDaddyClient(settings).get_records(domain, record_type, name))
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc

    if not records:
        _console.print(f"[yellow]No {record_type.value} record '{name}' on {domain}.[/yellow]")
        return
    _console.print(build_records_table(f"{record_type.value} {name}.{domain}", records))


@app.command()
def check(
    fqdn: Optional[str] = typer.Option(None, "--fqdn", help="Hostname (default: <record_name>.<domain>)."),
    expect: Optional[str] = typer.Option(None, "--expect", help="Expected value (default: CNAME_TARGET)."),
    record_type: RecordType = typer.Option(RecordType.CNAME, "--type", case_sensitive=False),
    wait: bool = typer.Option(False, "--wait", help="Poll until propagated or timed out."),
    timeout: float = typer.Option(DEFAULT_TIMEOUT_SECONDS, "--timeout", min=1, help="Seconds to wait."),
    interval: float = typer.Option(DEFAULT_INTERVAL_SECONDS, "--interval", min=1, help="Seconds between polls."),
) -> None:
    """Check what public resolvers answer for a hostname."""

    settings = AppSettings()
    if not fqdn and settings.domain:
        fqdn = settings.domain if settings.record_name == "@" else f"{settings.record_name}.{settings.domain}"
    expect = expect or settings.cname_target
    if not fqdn or not expect:
        print_error(_console, ConfigurationError("Both --fqdn and --expect (or their settings) are required"))
        raise typer.Exit(code=1)

    resolver = DohResolver(settings)

    def progress(result: PropagationResult) -> None:
        if not result.propagated:
            answers = ", ".join(result.answers) or "(none)"
            _console.print(f"[dim]attempt {result.attempts}: {answers}[/dim]")

    try:
        if wait:
            result = asyncio.run(
                wait_for_propagation(
                    resolver,
                    fqdn,
                    expect,
                    record_type,
                    timeout_seconds=timeout,
                    interval_seconds=interval,
                    on_attempt=progress,
                )
            )
        else:
            result = asyncio.run(check_propagation(resolver, fqdn, expect, record_type))
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc

    _console.print(build_propagation_table(result))
    if not result.propagated:
        raise typer.Exit(code=1)
