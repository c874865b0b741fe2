"""Shared pytest fixtures.

The database is replaced by an in-memory double of the asyncpg pool that
understands the handful of statements the credential store issues, enforces
unique columns and undoes a transaction's inserts on rollback.
"""

import asyncio
import re
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import asyncpg
import pytest
from fastapi.testclient import TestClient

from folio.app import App
from folio.config import Config
from folio.core.core import Core
from folio.core.db import Database
from folio.web.server import create_fastapi_app

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"

UNIQUE_COLUMNS = {
    "auth_users": ("id", "email"),
    "profiles": ("id",),
}

INSERT_RE = re.compile(r"INSERT INTO (\w+) \(([^)]*)\)")
SELECT_RE = re.compile(r"SELECT (.+?) FROM (\w+) WHERE (\w+) = \$1")


class FakeTransaction:
    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection

    async def __aenter__(self) -> "FakeTransaction":
        self._connection.undo_log = []
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        undo_log, self._connection.undo_log = self._connection.undo_log, None
        if exc_type is not None:
            for table, row in reversed(undo_log or []):
                self._connection.tables[table].remove(row)
            self._connection.rollbacks += 1


class FakeConnection:
    def __init__(self, pool: "FakePool") -> None:
        self.tables = pool.tables
        self._pool = pool
        self.undo_log: list[tuple[str, dict[str, Any]]] | None = None
        self.rollbacks = 0

    def transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    async def execute(self, query: str, *args: Any) -> str:
        await asyncio.sleep(0)
        match = INSERT_RE.search(query)
        if match is None:
            # Schema statements
            return "OK"

        table = match.group(1)
        if table in self._pool.fail_on_insert:
            raise ConnectionResetError(f"connection lost while writing {table}")

        columns = [column.strip() for column in match.group(2).split(",")]
        row = dict(zip(columns, args, strict=True))
        for column in UNIQUE_COLUMNS.get(table, ()):
            if any(existing[column] == row[column] for existing in self.tables[table]):
                raise asyncpg.UniqueViolationError(f'duplicate key value violates unique constraint on "{column}"')

        self.tables[table].append(row)
        if self.undo_log is not None:
            self.undo_log.append((table, row))
        return "INSERT 0 1"

    def _select(self, query: str, value: Any) -> list[dict[str, Any]]:
        match = SELECT_RE.search(query)
        assert match is not None, f"unsupported query: {query}"
        columns, table, where_column = match.groups()
        rows = [row for row in self.tables[table] if row[where_column] == value]
        if "ORDER BY created_at DESC" in query:
            rows.sort(key=lambda row: row["created_at"], reverse=True)
        names = [column.strip() for column in columns.split(",")]
        return [{name: row[name] for name in names} for row in rows]

    async def fetchrow(self, query: str, value: Any) -> dict[str, Any] | None:
        await asyncio.sleep(0)
        rows = self._select(query, value)
        return rows[0] if rows else None

    async def fetchval(self, query: str, value: Any) -> Any:
        row = await self.fetchrow(query, value)
        return next(iter(row.values())) if row else None


class FakePool:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {"auth_users": [], "profiles": [], "user_roles": []}
        self.fail_on_insert: set[str] = set()
        self.stalled = False
        self.acquired = 0
        self.released = 0
        self.last_connection: FakeConnection | None = None

    @asynccontextmanager
    async def acquire(self, *, timeout: float | None = None):
        if self.stalled:
            await asyncio.wait_for(asyncio.Event().wait(), timeout)
        self.acquired += 1
        self.last_connection = FakeConnection(self)
        try:
            yield self.last_connection
        finally:
            self.released += 1

    async def close(self) -> None:
        pass


class FakeDatabase(Database):
    def __init__(self, pool: FakePool, timeout: float = 0.05) -> None:
        super().__init__("postgresql://fake/folio", pool_size=1, timeout=timeout)
        self.fake_pool = pool

    async def connect(self) -> None:
        self._pool = self.fake_pool  # type: ignore[assignment]

    async def close(self) -> None:
        self._pool = None


@pytest.fixture
def config():
    return Config(
        database_url="postgresql://fake/folio",
        token_secret=TEST_SECRET,
        token_ttl=timedelta(days=7),
        password_hash_rounds=4,
        _env_file=None,
    )


@pytest.fixture
def fake_pool():
    return FakePool()


@pytest.fixture
def database(fake_pool):
    return FakeDatabase(fake_pool)


@pytest.fixture
async def core(config, database):
    core = Core(config, database)
    async with core.lifespan():
        yield core


@pytest.fixture
def client(config, database):
    app = App(config, database)
    with TestClient(create_fastapi_app(app, config), raise_server_exceptions=False) as test_client:
        yield test_client
