"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's ThreadedConnectionPool for connection reuse across request
threads. A bounded semaphore in front of the pool makes `get_connection`
wait for a free slot instead of failing the moment the pool is exhausted.
"""

import threading

import psycopg2
from psycopg2 import pool

from config import (
    DATABASE_URL,
    DB_POOL_MAX,
    DB_POOL_MIN,
    DB_POOL_TIMEOUT,
    DB_STATEMENT_TIMEOUT_MS,
)
from exceptions import DatabaseConnectionError
from utils.logger import get_logger

logger = get_logger(__name__)

_pool: pool.ThreadedConnectionPool | None = None
_slots: threading.BoundedSemaphore | None = None
_max_conn: int = 0
# id(conn) of every connection currently leased out
_leased: set[int] = set()
_lock = threading.Lock()


def init_pool(min_conn: int = DB_POOL_MIN, max_conn: int = DB_POOL_MAX) -> None:
    """
    Initialize the database connection pool.

    `min_conn` connections are opened immediately; the rest are opened
    lazily, up to `max_conn`, and reused afterwards.

    Args:
        min_conn: Minimum number of connections to keep open.
        max_conn: Maximum number of connections allowed.

    Raises:
        DatabaseConnectionError: If the database is unreachable.
    """
    global _pool, _slots, _max_conn
    with _lock:
        if _pool is not None:
            return
        kwargs = {}
        if DB_STATEMENT_TIMEOUT_MS:
            kwargs["options"] = f"-c statement_timeout={DB_STATEMENT_TIMEOUT_MS}"
        try:
            new_pool = pool.ThreadedConnectionPool(min_conn, max_conn, DATABASE_URL, **kwargs)
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise DatabaseConnectionError(f"Database unreachable: {e}") from e
        # _pool is published last: get_connection reads it without the lock
        _slots = threading.BoundedSemaphore(max_conn)
        _max_conn = max_conn
        _pool = new_pool
        logger.info(f"Database connection pool initialized (min={min_conn}, max={max_conn}).")


def get_connection(timeout: float = DB_POOL_TIMEOUT):
    """
    Lease a connection from the pool, waiting up to `timeout` seconds for a
    free slot when all connections are in use.

    Returns:
        A psycopg2 connection object. Pair every call with `release_connection`.

    Raises:
        DatabaseConnectionError: If the pool stays exhausted for `timeout`
            seconds or a new connection cannot be opened.
    """
    if _pool is None or _slots is None:
        init_pool()
    db_pool, slots = _pool, _slots
    if db_pool is None or slots is None:
        raise DatabaseConnectionError("Connection pool is closed")
    if not slots.acquire(timeout=timeout):
        logger.error(f"Connection pool exhausted: waited {timeout}s for a free connection")
        raise DatabaseConnectionError(f"No database connection available after {timeout}s")
    try:
        conn = db_pool.getconn()
    except (psycopg2.OperationalError, pool.PoolError) as e:
        slots.release()
        logger.error(f"Failed to open database connection: {e}")
        raise DatabaseConnectionError(f"Database unreachable: {e}") from e
    with _lock:
        _leased.add(id(conn))
    return conn


def release_connection(conn) -> None:
    """
    Return a connection back to the pool.

    Releasing the same lease twice is logged and otherwise ignored.
    Connections the server closed are discarded instead of reused.

    Args:
        conn: The psycopg2 connection to release.
    """
    if conn is None or _pool is None:
        return
    with _lock:
        if id(conn) not in _leased:
            logger.warning("Ignoring release of a connection that is not leased.")
            return
        _leased.discard(id(conn))
    try:
        _pool.putconn(conn, close=bool(conn.closed))
    finally:
        _slots.release()


def pool_stats() -> dict:
    """Current pool usage, for health endpoints and logs."""
    with _lock:
        in_use = len(_leased)
    return {"initialized": _pool is not None, "in_use": in_use, "max": _max_conn}


def close_pool() -> None:
    """Close all connections in the pool."""
    global _pool, _slots, _max_conn
    with _lock:
        if _pool is None:
            return
        _pool.closeall()
        _pool = None
        _slots = None
        _max_conn = 0
        _leased.clear()
    logger.info("Database connection pool closed.")
