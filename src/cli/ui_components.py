"""CLI UI components (Rich).

Tables and panels shared by several commands, kept apart from command
logic.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import DeployOpsError, DnsProviderError
from core.domain.models import (
    DnsRecord,
    EnvReport,
    EnvVarState,
    PropagationResult,
    RecordChange,
    UpdateOutcome,
)

_STATE_STYLES = {
    EnvVarState.OK: "green",
    EnvVarState.MISSING: "red",
    EnvVarState.INSECURE: "yellow",
    EnvVarState.OPTIONAL_MISSING: "dim",
}


def print_banner(console: Console) -> None:
    title = Text("deploy-ops", style="bold cyan")
    subtitle = Text("DNS • Managed PostgreSQL • Environment", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_error(console: Console, exc: DeployOpsError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    if isinstance(exc, DnsProviderError):
        for line in exc.field_messages():
            console.print(f"  [red]-[/red] {escape(line)}")


def build_request_panel(change: RecordChange, *, base_url: str, auth: str) -> Panel:
    """Planned provider request, with the credentials masked."""

    body = Text()
    body.append("PUT ", style="bold")
    body.append(f"{base_url.rstrip('/')}{change.path}\n")
    body.append(f"Authorization: {auth}\n", style="dim")
    body.append("Content-Type: application/json\n\n", style="dim")
    body.append(str(change.payload()).replace("'", '"'))
    return Panel(body, title=f"{change.type.value} {change.fqdn}", border_style="cyan")


def build_records_table(title: str, records: list[DnsRecord]) -> Table:
    table = Table(title=title)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Data", style="magenta")
    table.add_column("TTL", style="white", justify="right")
    for record in records:
        table.add_row(
            record.name or "",
            record.type.value if record.type else "",
            record.data,
            str(record.ttl),
        )
    return table


def build_outcome_table(outcome: UpdateOutcome) -> Table:
    change = outcome.change
    table = Table(title=f"Update {change.fqdn}")
    table.add_column("Field", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Record", f"{change.type.value} {change.name}")
    table.add_row("Previous", ", ".join(r.data for r in outcome.previous) or "(none)")
    table.add_row("Requested", ", ".join(r.data for r in change.records))
    table.add_row("TTL", str(change.records[0].ttl))
    table.add_row("HTTP status", str(outcome.status_code) if outcome.status_code else "-")
    table.add_row("Verified", "[green]yes[/green]" if outcome.verified else "[red]no[/red]")
    return table


def build_propagation_table(result: PropagationResult) -> Table:
    table = Table(title=f"Propagation {result.fqdn}")
    table.add_column("Expected", style="cyan")
    table.add_column("Public answers", style="magenta")
    table.add_column("Status", style="white")
    table.add_column("Attempts", justify="right")
    status = "[green]propagated[/green]" if result.propagated else "[yellow]pending[/yellow]"
    table.add_row(result.expected, ", ".join(result.answers) or "(none)", status, str(result.attempts))
    return table


def build_env_table(report: EnvReport) -> Table:
    mode = "production" if report.strict else "non-production"
    table = Table(title=f"Environment ({mode})")
    table.add_column("Variable", style="cyan", no_wrap=True)
    table.add_column("Required")
    table.add_column("State")
    table.add_column("Value", style="dim")
    table.add_column("Details", style="dim")
    for var in report.variables:
        style = _STATE_STYLES[var.state]
        table.add_row(
            var.name,
            "yes" if var.required else "no",
            f"[{style}]{var.state.value}[/{style}]",
            var.display_value or "",
            var.detail or "",
        )
    return table
