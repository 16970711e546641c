"""Test doubles for HTTP and database I/O."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import psycopg2


async def no_sleep(_: float) -> None:
    return None


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)


class FakeCursor:
    def __init__(self, conn: "FakeConnection") -> None:
        self._conn = conn
        self._result: list[tuple[Any, ...]] = []

    def __enter__(self) -> "FakeCursor":
        return self

    def __exit__(self, *exc: object) -> None:
        return None

    def execute(self, sql: str, params: tuple[Any, ...] | None = None) -> None:
        self._conn.executed.append((sql, params))
        if self._conn.fail_on and self._conn.fail_on in sql:
            raise psycopg2.ProgrammingError(f"syntax error near {self._conn.fail_on!r}")
        for marker, rows in self._conn.results.items():
            if marker in sql:
                self._result = list(rows)
                return
        self._result = []

    def fetchone(self) -> tuple[Any, ...] | None:
        return self._result[0] if self._result else None

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self._result)


class FakeConnection:
    """Minimal DB-API connection recording statements and transactions."""

    def __init__(
        self,
        results: dict[str, list[tuple[Any, ...]]] | None = None,
        fail_on: str | None = None,
    ) -> None:
        self.results = results or {}
        self.fail_on = fail_on
        self.executed: list[tuple[str, tuple[Any, ...] | None]] = []
        self.commits = 0
        self.rollbacks = 0
        self.closed = False

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True
