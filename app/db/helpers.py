# app/db/helpers.py
"""
Pooled query helpers used by the grocery repository.

Every call borrows one autocommit connection; driver errors surface as
DatabaseError tagged with the helper that failed.
"""

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import psycopg

from app.db.pool import db_pool
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class DatabaseError(Exception):
    """Custom exception for database operations."""

    def __init__(self, message: str, operation: str = "unknown", recoverable: bool = True):
        super().__init__(message)
        self.operation = operation
        self.recoverable = recoverable


async def _run(
    operation: str,
    query: str,
    params: tuple,
    consume: Callable[[psycopg.AsyncCursor], Awaitable[T]],
) -> T:
    try:
        async with db_pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(query, params)
                return await consume(cur)
    except psycopg.Error as e:
        logger.error("Database query failed", operation=operation, query=query[:100], error=str(e))
        raise DatabaseError(f"Query failed: {e}", operation=operation) from e


async def _rowcount(cur: psycopg.AsyncCursor) -> int:
    return cur.rowcount


async def fetch_one(query: str, params: tuple = ()) -> dict[str, Any] | None:
    return await _run("fetch_one", query, params, lambda cur: cur.fetchone())


async def fetch_all(query: str, params: tuple = ()) -> list[dict[str, Any]]:
    """Rows as dicts; also used for UPDATE ... RETURNING."""
    return await _run("fetch_all", query, params, lambda cur: cur.fetchall())


async def execute_query(query: str, params: tuple = ()) -> int:
    """Run a write and return the affected row count."""
    return await _run("execute", query, params, _rowcount)
