"""
Shared fixtures.

`fake_db` replaces the SQL executor with an in-memory script: every
statement is recorded (whitespace-collapsed) and answered with the next
queued result. No database is needed.
"""

from contextlib import contextmanager
from unittest.mock import patch

import pytest

from db.executor import QueryResult
from models.identity import Identity
from repositories import settings_repo


class FakeDB:
    """Scripted stand-in for db.executor.execute / db.executor.transaction."""

    def __init__(self):
        self.calls: list[tuple[str, list | None]] = []
        self._responses: list = []
        self.committed = 0
        self.rolled_back = 0

    def queue(self, rows=None, rowcount=None, error=None):
        """Answer the next statement with `rows` (or raise `error`)."""
        if error is not None:
            self._responses.append(error)
        else:
            rows = [dict(r) for r in rows or []]
            self._responses.append(QueryResult(rows=rows, rowcount=len(rows) if rowcount is None else rowcount))
        return self

    def execute(self, sql, params=None):
        if sql.lstrip().upper().startswith("CREATE TABLE"):
            return QueryResult()
        self.calls.append((" ".join(sql.split()), list(params) if params is not None else None))
        if not self._responses:
            return QueryResult()
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def fetch_all(self, sql, params=None):
        return self.execute(sql, params).rows

    def fetch_one(self, sql, params=None):
        return self.execute(sql, params).first()

    @contextmanager
    def transaction(self):
        try:
            yield self
        except Exception:
            self.rolled_back += 1
            raise
        self.committed += 1

    @property
    def statements(self) -> list[str]:
        return [sql for sql, _ in self.calls]


@pytest.fixture
def fake_db():
    db = FakeDB()
    with patch("db.executor.execute", side_effect=db.execute), \
            patch("db.executor.transaction", db.transaction):
        yield db


@pytest.fixture(autouse=True)
def _reset_settings_table_flag():
    yield
    settings_repo.reset_table_flag()


@pytest.fixture
def admin():
    return Identity(id=1, role="admin", email="owner@shop.test")


@pytest.fixture
def customer():
    return Identity(id=5, role="user", email="buyer@shop.test")
