"""Environment variable commands for the hosted application."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from adapters.json_exporter import export_model_json
from cli.ui_components import build_env_table
from core.services.env_audit import (
    OPTIONAL_VARS,
    REQUIRED_VARS,
    audit_environment,
    generate_secrets,
    load_env_file,
    render_platform_commands,
)

app = typer.Typer(no_args_is_help=True, help="Audit, generate and publish application environment variables.")

_console = Console()

SECRET_VARS = ("JWT_SECRET", "JWT_REFRESH_SECRET", "ENCRYPTION_KEY", "CSRF_SECRET", "INTERNAL_SECRET")


def _load(env_file: Path | None) -> dict[str, str]:
    if env_file is None:
        return dict(os.environ)
    if not env_file.is_file():
        raise typer.BadParameter(f"{env_file} does not exist", param_hint="--env-file")
    return load_env_file(env_file)


@app.command()
def check(
    env_file: Optional[Path] = typer.Option(None, "--env-file", help="Read a dotenv file instead of the process env."),
    production: Optional[bool] = typer.Option(
        None,
        "--production/--no-production",
        help="Force strict mode (default: NODE_ENV=production).",
    ),
    json_out: Optional[Path] = typer.Option(None, "--json-out", help="Write the report as JSON."),
) -> None:
    """Report missing or insecure variables; fails in production mode."""

    values = _load(env_file)
    report = audit_environment(values, production=production)
    _console.print(build_env_table(report))
    if json_out:
        export_model_json(model=report, output_path=json_out)

    names = ", ".join(v.name for v in report.problems)
    if not report.ok:
        _console.print(f"[bold red]Missing or insecure variables:[/bold red] {names}")
        raise typer.Exit(code=1)
    if report.problems:
        _console.print(f"[yellow]Warning:[/yellow] fix before going to production: {names}")


@app.command()
def secrets(
    names: Optional[List[str]] = typer.Argument(None, help="Variable names (default: the app's secrets)."),
    nbytes: int = typer.Option(32, "--bytes", min=16, max=128, help="Random bytes per secret."),
) -> None:
    """Generate strong random secrets in dotenv format."""

    for key, value in generate_secrets(names or list(SECRET_VARS), nbytes=nbytes).items():
        typer.echo(f"{key}={value}")


@app.command()
def render(
    env_file: Path = typer.Option(..., "--env-file", help="Dotenv file with the values to publish."),
    service: Optional[str] = typer.Option(None, "--service", help="Hosting platform service name."),
    reveal: bool = typer.Option(False, "--reveal", help="Print secret values unmasked."),
    all_vars: bool = typer.Option(False, "--all", help="Include variables the app does not declare."),
) -> None:
    """Print the platform CLI commands that set each variable."""

    values = _load(env_file)
    if not all_vars:
        known = set(REQUIRED_VARS) | set(OPTIONAL_VARS)
        values = {k: v for k, v in values.items() if k in known}
    if not values:
        _console.print("[yellow]No variables to publish.[/yellow]")
        raise typer.Exit(code=1)
    for line in render_platform_commands(values, service=service, reveal=reveal):
        typer.echo(line)
