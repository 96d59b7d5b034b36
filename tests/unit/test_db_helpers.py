"""
Tests for the pooled query helpers and pool health reporting.
"""

from contextlib import asynccontextmanager

import psycopg
import pytest

from app.db import helpers
from app.db.helpers import DatabaseError, execute_query, fetch_all, fetch_one
from app.db.pool import DatabasePoolManager


class FakeCursor:
    def __init__(self, rows=None, rowcount=0, error=None):
        self.rows = rows or []
        self.rowcount = rowcount
        self.error = error
        self.executed = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params):
        if self.error is not None:
            raise self.error
        self.executed.append((query, params))

    async def fetchone(self):
        return self.rows[0] if self.rows else None

    async def fetchall(self):
        return list(self.rows)


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


@pytest.fixture
def use_cursor(monkeypatch):
    def _use(cursor):
        @asynccontextmanager
        async def connection():
            yield FakeConnection(cursor)

        monkeypatch.setattr(helpers.db_pool, "connection", connection)
        return cursor

    return _use


@pytest.mark.asyncio
async def test_fetch_helpers_return_rows(use_cursor):
    cursor = use_cursor(FakeCursor(rows=[{"id": "g1"}, {"id": "g2"}]))

    assert await fetch_all("SELECT id FROM groceries WHERE expiry_date <= %s", ("2026-01-17",)) == [
        {"id": "g1"},
        {"id": "g2"},
    ]
    assert await fetch_one("SELECT id FROM groceries") == {"id": "g1"}
    assert cursor.executed[0][1] == ("2026-01-17",)


@pytest.mark.asyncio
async def test_fetch_one_without_rows(use_cursor):
    use_cursor(FakeCursor(rows=[]))

    assert await fetch_one("SELECT id FROM users WHERE id = %s", ("missing",)) is None


@pytest.mark.asyncio
async def test_execute_query_returns_rowcount(use_cursor):
    use_cursor(FakeCursor(rowcount=3))

    assert await execute_query("UPDATE groceries SET notification_sent = true") == 3


@pytest.mark.asyncio
async def test_driver_errors_become_database_error(use_cursor):
    use_cursor(FakeCursor(error=psycopg.OperationalError("connection lost")))

    with pytest.raises(DatabaseError) as exc_info:
        await execute_query("UPDATE groceries SET notification_sent = true")

    assert exc_info.value.operation == "execute"


@pytest.mark.asyncio
async def test_health_check_before_initialize():
    health = await DatabasePoolManager().health_check()

    assert health["healthy"] is False
    assert health["error"] == "Pool not initialized"
