"""Root Typer application.

Wires the sub-commands together and configures logging once per
invocation.
"""

from __future__ import annotations

import typer

from cli import db, dns, doctor, env
from core.config import AppSettings
from core.logging_setup import configure_logging

app = typer.Typer(
    no_args_is_help=True,
    help="Deployment helpers: DNS records, managed PostgreSQL and environment variables.",
)
app.add_typer(dns.app, name="dns")
app.add_typer(db.app, name="db")
app.add_typer(env.app, name="env")
app.add_typer(doctor.app, name="doctor")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    level = "DEBUG" if verbose else AppSettings().log_level
    configure_logging(level)


def run() -> None:
    app()
