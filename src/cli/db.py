"""Managed PostgreSQL commands: connectivity, tables, migrations."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from adapters.postgres import connect, list_tables, mask_database_url, server_info
from cli.ui_components import print_error
from core.config import AppSettings
from core.domain.errors import DeployOpsError
from core.domain.models import Migration
from core.services.migrations import MigrationHooks, apply_migrations, discover_migrations

app = typer.Typer(no_args_is_help=True, help="Managed PostgreSQL: connectivity, tables and migrations.")

_console = Console()


@app.command()
def check() -> None:
    """Connect to DATABASE_URL and print the server version."""

    settings = AppSettings()
    _console.print(f"Database: {mask_database_url(settings.database_url)}")
    try:
        conn = connect(settings)
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    try:
        info = server_info(conn)
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    finally:
        conn.close()

    _console.print("[green]Connected to PostgreSQL[/green]")
    _console.print(f"[dim]{info['version']}[/dim]")
    _console.print(f"Server time: {info['server_time']}")


@app.command()
def tables(schema: str = typer.Option("public", "--schema")) -> None:
    """List the tables in a schema."""

    settings = AppSettings()
    try:
        conn = connect(settings)
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    try:
        names = list_tables(conn, schema)
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc
    finally:
        conn.close()

    table = Table(title=f"Tables in {schema}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Table", style="cyan")
    for i, name in enumerate(names, start=1):
        table.add_row(str(i), name)
    _console.print(table)
    if not names:
        _console.print("[yellow]No tables found.[/yellow]")


@app.command()
def migrate(
    directory: Optional[Path] = typer.Option(None, "--dir", help="Migrations directory (default: settings)."),
    dry_run: bool = typer.Option(False, "--dry-run", help="List pending migrations without running them."),
) -> None:
    """Apply pending NNN_name.sql migrations in order."""

    settings = AppSettings()
    masked = mask_database_url(settings.database_url)
    _console.print(f"Database: {masked}")

    hooks = MigrationHooks(
        applying=lambda m: _console.print(f"Running migration: [bold]{m.filename}[/bold]"),
        applied=lambda m: _console.print(f"  [green]done[/green] {m.filename}"),
        skipped=lambda m: _console.print(f"  [dim]already applied[/dim] {m.filename}"),
    )

    try:
        migrations: list[Migration] = discover_migrations(directory or settings.migrations_dir)
        conn = connect(settings)
    except DeployOpsError as exc:
        print_error(_console, exc)
        raise typer.Exit(code=1) from exc

    try:
        result = apply_migrations(conn, migrations, database=masked, dry_run=dry_run, hooks=hooks)
    except DeployOpsError as exc:
        print_error(_console, exc)
        _console.print("Check DATABASE_URL, database reachability and the SQL in the failing file.")
        raise typer.Exit(code=1) from exc
    finally:
        conn.close()

    verb = "Pending" if dry_run else "Applied"
    _console.print(f"{verb}: {len(result.applied)}, already applied: {len(result.skipped)}")
    for name in result.checksum_mismatches:
        _console.print(f"[yellow]Warning:[/yellow] {name} was modified after being applied")
