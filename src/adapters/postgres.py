"""PostgreSQL access for the managed database (psycopg2).

Connections are short-lived: each command opens one, does its work and
closes it. TLS is required in production, as the hosting platform only
exposes the managed instance over TLS.
"""

from __future__ import annotations

import re
from typing import Any

import psycopg2

from core.config import AppSettings
from core.domain.errors import ConfigurationError, DatabaseError
from core.logging_setup import get_logger

logger = get_logger(__name__)

_PASSWORD_RE = re.compile(r"(://[^:/@]*):[^@]*@")


def mask_database_url(url: str | None) -> str:
    """Replace the password in a connection URL with `****`."""

    if not url:
        return "<unset>"
    return _PASSWORD_RE.sub(r"\1:****@", url, count=1)


def connect(settings: AppSettings, *, connect_timeout: int = 10) -> Any:
    """Open a psycopg2 connection to `settings.database_url`.

    Raises:
        ConfigurationError: `DATABASE_URL` is not set.
        DatabaseError: the server is unreachable or rejects the login.
    """

    if not settings.database_url:
        raise ConfigurationError("DATABASE_URL is not set", missing=["DATABASE_URL"])

    masked = mask_database_url(settings.database_url)
    kwargs: dict[str, Any] = {"connect_timeout": connect_timeout}
    if settings.is_production:
        kwargs["sslmode"] = "require"

    try:
        conn = psycopg2.connect(settings.database_url, **kwargs)
    except psycopg2.Error as exc:
        logger.error("Connection to %s failed: %s", masked, exc)
        raise DatabaseError(str(exc).strip(), url=masked) from exc

    logger.info("Connected to %s", masked)
    return conn


def server_info(conn: Any) -> dict[str, Any]:
    try:
        with conn.cursor() as cur:
            cur.execute("SELECT version(), NOW()")
            version, now = cur.fetchone()
    except psycopg2.Error as exc:
        raise DatabaseError(str(exc).strip()) from exc
    return {"version": version, "server_time": now}


def list_tables(conn: Any, schema: str = "public") -> list[str]:
    try:
        with conn.cursor() as cur:
            cur.execute(
                """
                SELECT table_name
                FROM information_schema.tables
                WHERE table_schema = %s
                ORDER BY table_name
                """,
                (schema,),
            )
            return [row[0] for row in cur.fetchall()]
    except psycopg2.Error as exc:
        raise DatabaseError(str(exc).strip()) from exc
