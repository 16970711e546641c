"""Ordered SQL migrations.

Files are named `NNN_description.sql` and applied in version order. Applied
versions are recorded in `schema_migrations`, so re-running a deploy only
applies what is new. Each file runs in its own transaction; the first
failure rolls back that file and stops the run.
"""

from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import psycopg2

from core.domain.errors import ConfigurationError, DatabaseError
from core.domain.models import Migration, MigrationResult
from core.logging_setup import get_logger

logger = get_logger(__name__)

_FILENAME_RE = re.compile(r"^(?P<version>\d+)_(?P<name>.+)\.sql$", re.IGNORECASE)

TRACKING_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    version     INTEGER PRIMARY KEY,
    name        VARCHAR(255) NOT NULL,
    checksum    CHAR(64) NOT NULL,
    applied_at  TIMESTAMPTZ NOT NULL DEFAULT NOW()
)
"""


@dataclass
class MigrationHooks:
    applying: Callable[[Migration], None] | None = None
    applied: Callable[[Migration], None] | None = None
    skipped: Callable[[Migration], None] | None = None


def file_checksum(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def discover_migrations(directory: Path) -> list[Migration]:
    """List `NNN_name.sql` files in `directory`, sorted by version.

    Raises:
        ConfigurationError: the directory does not exist, or two files share a
            version number.
    """

    if not directory.is_dir():
        raise ConfigurationError(f"Migrations directory not found: {directory}")

    found: list[Migration] = []
    for path in sorted(directory.glob("*.sql")):
        match = _FILENAME_RE.match(path.name)
        if not match:
            logger.warning("Ignoring %s: expected NNN_name.sql", path.name)
            continue
        found.append(
            Migration(
                version=int(match.group("version")),
                name=match.group("name"),
                path=path,
                checksum=file_checksum(path),
            )
        )

    found.sort(key=lambda m: (m.version, m.name))
    seen: dict[int, str] = {}
    for migration in found:
        if migration.version in seen:
            raise ConfigurationError(
                f"Duplicate migration version {migration.version}: "
                f"{seen[migration.version]} and {migration.filename}"
            )
        seen[migration.version] = migration.filename
    return found


def applied_versions(conn: Any, *, create: bool = True) -> dict[int, str]:
    """Return `{version: checksum}` of recorded migrations.

    With `create=False` the tracking table is only read: when it does not
    exist yet nothing is recorded, and the read transaction is rolled back.
    """

    with conn.cursor() as cur:
        if create:
            cur.execute(TRACKING_TABLE_SQL)
        else:
            cur.execute("SELECT to_regclass('schema_migrations')")
            row = cur.fetchone()
            if not row or row[0] is None:
                conn.rollback()
                return {}
        cur.execute("SELECT version, checksum FROM schema_migrations ORDER BY version")
        rows = cur.fetchall()
    if create:
        conn.commit()
    else:
        conn.rollback()
    return {int(version): str(checksum).strip() for version, checksum in rows}


def apply_migrations(
    conn: Any,
    migrations: list[Migration],
    *,
    database: str,
    dry_run: bool = False,
    hooks: MigrationHooks | None = None,
) -> MigrationResult:
    hooks = hooks or MigrationHooks()
    result = MigrationResult(database=database, dry_run=dry_run)
    try:
        done = applied_versions(conn, create=not dry_run)
    except psycopg2.Error as exc:
        conn.rollback()
        logger.error("Reading schema_migrations failed: %s", exc)
        raise DatabaseError(str(exc).strip(), url=database) from exc

    for migration in migrations:
        recorded = done.get(migration.version)
        if recorded is not None:
            if recorded != migration.checksum:
                logger.warning("%s changed after it was applied (checksum mismatch)", migration.filename)
                result.checksum_mismatches.append(migration.filename)
            result.skipped.append(migration.filename)
            if hooks.skipped:
                hooks.skipped(migration)
            continue

        if hooks.applying:
            hooks.applying(migration)
        if dry_run:
            result.applied.append(migration.filename)
            continue

        try:
            with conn.cursor() as cur:
                cur.execute(migration.read_sql())
                cur.execute(
                    "INSERT INTO schema_migrations (version, name, checksum) VALUES (%s, %s, %s)",
                    (migration.version, migration.name, migration.checksum),
                )
            conn.commit()
        except psycopg2.Error as exc:
            conn.rollback()
            logger.error("Migration %s failed: %s", migration.filename, exc)
            raise DatabaseError(str(exc).strip(), url=database, filename=migration.filename) from exc

        logger.info("Applied %s", migration.filename)
        result.applied.append(migration.filename)
        if hooks.applied:
            hooks.applied(migration)

    return result
