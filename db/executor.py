"""
db/executor.py
--------------
Single entry point for SQL execution.

Every statement runs over a leased pool connection that is released on
every exit path. Values are always bound through `%s` placeholders; only
allow-listed identifiers and internally computed fragments may be part of
the SQL text itself.
"""

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Sequence

import psycopg2
from psycopg2 import extras

from db.connection import get_connection, release_connection
from exceptions import QueryError
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class QueryResult:
    """
    Outcome of one statement.

    Attributes:
        rows: Result rows as dicts (empty for statements without a result set).
        rowcount: Rows affected (or returned) as reported by the driver.
    """
    rows: list[dict] = field(default_factory=list)
    rowcount: int = 0

    def first(self) -> Optional[dict]:
        """First row or None."""
        return self.rows[0] if self.rows else None


def _run(cur, sql: str, params: Optional[Sequence[Any]]) -> QueryResult:
    try:
        cur.execute(sql, params)
    except psycopg2.Error as e:
        raise QueryError(str(e).strip() or e.__class__.__name__, pgcode=e.pgcode) from e
    rows = [dict(r) for r in cur.fetchall()] if cur.description is not None else []
    return QueryResult(rows=rows, rowcount=cur.rowcount)


def _commit(conn) -> None:
    try:
        conn.commit()
    except psycopg2.Error as e:
        raise QueryError(str(e).strip() or e.__class__.__name__, pgcode=e.pgcode) from e


def _rollback(conn) -> None:
    """Roll back unless the server already dropped the connection; never masks the original error."""
    if conn.closed:
        return
    try:
        conn.rollback()
    except psycopg2.Error as e:
        logger.warning(f"Rollback failed, connection will be discarded: {e}")


class Transaction:
    """A group of statements sharing one connection; see `transaction()`."""

    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
        with self._conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            return _run(cur, sql, params)

    def fetch_all(self, sql: str, params: Optional[Sequence[Any]] = None) -> list[dict]:
        return self.execute(sql, params).rows

    def fetch_one(self, sql: str, params: Optional[Sequence[Any]] = None) -> Optional[dict]:
        return self.execute(sql, params).first()


@contextmanager
def transaction() -> Iterator[Transaction]:
    """
    Run several statements atomically.

    Usage:
        with transaction() as tx:
            tx.execute("INSERT ...", (...))
            tx.execute("UPDATE ...", (...))

    Commits when the block exits cleanly; rolls back and re-raises otherwise.
    """
    conn = get_connection()
    try:
        yield Transaction(conn)
        _commit(conn)
    except Exception as e:
        _rollback(conn)
        logger.error(f"Transaction rolled back: {e}")
        raise
    finally:
        release_connection(conn)


def execute(sql: str, params: Optional[Sequence[Any]] = None) -> QueryResult:
    """
    Execute one statement in its own transaction.

    Args:
        sql: SQL template with `%s` positional placeholders.
        params: Values bound to the placeholders.

    Returns:
        QueryResult with dict rows and the affected row count.

    Raises:
        DatabaseConnectionError: If no connection could be leased.
        QueryError: If the store rejects the statement.
    """
    conn = get_connection()
    try:
        with conn.cursor(cursor_factory=extras.RealDictCursor) as cur:
            result = _run(cur, sql, params)
        _commit(conn)
        return result
    except Exception as e:
        _rollback(conn)
        logger.error(f"Query failed: {e}")
        raise
    finally:
        release_connection(conn)


def fetch_all(sql: str, params: Optional[Sequence[Any]] = None) -> list[dict]:
    return execute(sql, params).rows


def fetch_one(sql: str, params: Optional[Sequence[Any]] = None) -> Optional[dict]:
    return execute(sql, params).first()


def fetch_value(sql: str, params: Optional[Sequence[Any]] = None, default: Any = None) -> Any:
    """First column of the first row, or `default` when there is no row."""
    row = execute(sql, params).first()
    if not row:
        return default
    return next(iter(row.values()))


# ── Introspection ─────────────────────────────────────────

def table_exists(table: str) -> bool:
    """Whether `table` exists in the current schema."""
    sql = """
        SELECT 1 FROM information_schema.tables
        WHERE table_schema = current_schema() AND table_name = %s
        LIMIT 1;
    """
    return fetch_one(sql, (table,)) is not None


def column_exists(table: str, column: str) -> bool:
    """Whether `table` has a column named `column` in the current schema."""
    sql = """
        SELECT 1 FROM information_schema.columns
        WHERE table_schema = current_schema() AND table_name = %s AND column_name = %s
        LIMIT 1;
    """
    return fetch_one(sql, (table, column)) is not None
