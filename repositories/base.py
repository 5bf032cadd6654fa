"""
repositories/base.py
--------------------
Table-level CRUD shared by all entity repositories.

Subclasses declare their table name and column allow-list; every column
name that reaches SQL text is checked against that allow-list, so request
data can only ever influence the bound values.
"""

from typing import Iterable, Mapping, Optional

from db import executor
from exceptions import InsertError, NotFoundError, ValidationError
from models.filters import Equals, Predicate, WhereClause
from utils.identifiers import normalize_row_ids, require_id
from utils.logger import get_logger

logger = get_logger(__name__)


def build_where(predicates: Iterable[Predicate]) -> WhereClause:
    """
    Render predicates into one AND-ed WHERE clause.
    No predicates yields an empty clause (the query scans the whole table).
    """
    where = WhereClause()
    for predicate in predicates:
        sql, params = predicate.render()
        where.conditions.append(sql)
        where.params.extend(params)
    return where


class Repository:
    """
    Base repository for one table.

    Class attributes:
        table: Table name.
        entity: Human-readable name used in errors and logs.
        columns: Every column that may be filtered, sorted, or written.
        writable: Columns accepted by `create`/`update` (defaults to `columns` minus `id`).
        default_order: Column used when no valid sort key is given.
    """

    table: str = ""
    entity: str = "Record"
    columns: frozenset[str] = frozenset()
    writable: Optional[frozenset[str]] = None
    default_order: str = "id"

    # ── HELPERS ───────────────────────────────────────────

    def _writable(self) -> frozenset[str]:
        return self.writable if self.writable is not None else self.columns - {"id"}

    def _check_fields(self, fields: Mapping, allowed: frozenset[str]) -> None:
        if not fields:
            raise ValidationError(f"No fields given for {self.entity}")
        unknown = sorted(set(fields) - allowed)
        if unknown:
            raise ValidationError(
                f"Unknown {self.entity} fields: {', '.join(unknown)}", field=unknown[0]
            )

    def _order_clause(self, order_by: Optional[str], order_dir: Optional[str]) -> str:
        column = order_by if order_by in self.columns else self.default_order
        direction = order_dir.upper() if isinstance(order_dir, str) else "ASC"
        if direction not in ("ASC", "DESC"):
            direction = "ASC"
        return f"ORDER BY {column} {direction}"

    def _to_record(self, row: Optional[dict]) -> Optional[dict]:
        """Hook for subclasses; normalizes id fields by default."""
        return normalize_row_ids(row) if row is not None else None

    def where_for(self, filters: Optional[Mapping]) -> WhereClause:
        """Equality WHERE clause for the given column/value mapping."""
        filters = filters or {}
        unknown = sorted(set(filters) - self.columns)
        if unknown:
            raise ValidationError(
                f"Cannot filter {self.entity} by: {', '.join(unknown)}", field=unknown[0]
            )
        return build_where(Equals(column, value) for column, value in filters.items())

    # ── READ ──────────────────────────────────────────────

    def find_by_id(self, record_id) -> Optional[dict]:
        """
        Fetch a single row by primary key.

        Raises:
            InvalidIdentifier: If `record_id` is not a valid id.
        """
        rid = require_id(record_id)
        row = executor.fetch_one(f"SELECT * FROM {self.table} WHERE id = %s;", (rid,))
        return self._to_record(row)

    def find_many(
        self,
        filters: Optional[Mapping] = None,
        order_by: Optional[str] = None,
        order_dir: Optional[str] = "ASC",
        limit: Optional[int] = None,
    ) -> list[dict]:
        """
        Fetch rows matching every `column = value` pair in `filters`.

        Args:
            filters: Column → value equality filters (None/empty = all rows).
            order_by: Sort column; unknown columns fall back to `default_order`.
            order_dir: 'ASC' or 'DESC'.
            limit: Optional positive row cap.

        Raises:
            ValidationError: On unknown filter columns or a bad limit.
        """
        where = self.where_for(filters)
        sql = f"SELECT * FROM {self.table} {where.sql} {self._order_clause(order_by, order_dir)}"
        params = list(where.params)
        if limit is not None:
            if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
                raise ValidationError(f"limit must be a positive integer, got {limit!r}", field="limit")
            sql += " LIMIT %s"
            params.append(limit)
        return [self._to_record(r) for r in executor.fetch_all(sql + ";", params)]

    def count(self, filters: Optional[Mapping] = None) -> int:
        where = self.where_for(filters)
        return int(executor.fetch_value(
            f"SELECT COUNT(*) AS total FROM {self.table} {where.sql};", where.params, default=0
        ))

    # ── CREATE ────────────────────────────────────────────

    def create(self, fields: Mapping) -> dict:
        """
        Insert a row.

        Returns:
            The given fields plus the generated `id`.

        Raises:
            ValidationError: If `fields` is empty or names unknown columns.
            InsertError: If the store returned no id.
        """
        self._check_fields(fields, self._writable())
        keys = list(fields)
        sql = (
            f"INSERT INTO {self.table} ({', '.join(keys)}) "
            f"VALUES ({', '.join(['%s'] * len(keys))}) RETURNING id;"
        )
        row = executor.fetch_one(sql, [fields[k] for k in keys])
        if not row or row.get("id") is None:
            raise InsertError(self.table)
        record = {**fields, "id": row["id"]}
        logger.info(f"Created {self.entity} #{record['id']}")
        return self._to_record(record)

    # ── UPDATE ────────────────────────────────────────────

    def update(self, record_id, fields: Mapping) -> dict:
        """
        Update columns of an existing row.

        Returns:
            The stored row after the update.

        Raises:
            InvalidIdentifier: If `record_id` is not a valid id.
            ValidationError: If `fields` is empty or names unknown columns.
            NotFoundError: If no row has this id.
        """
        rid = require_id(record_id)
        self._check_fields(fields, self._writable())
        keys = list(fields)
        set_clause = ", ".join(f"{k} = %s" for k in keys)
        if "updated_at" in self.columns and "updated_at" not in fields:
            set_clause += ", updated_at = NOW()"
        sql = f"UPDATE {self.table} SET {set_clause} WHERE id = %s RETURNING *;"
        row = executor.fetch_one(sql, [fields[k] for k in keys] + [rid])
        if row is None:
            raise NotFoundError(self.entity, rid)
        logger.info(f"Updated {self.entity} #{rid}")
        return self._to_record(row)

    # ── DELETE ────────────────────────────────────────────

    def remove(self, record_id) -> bool:
        """
        Delete a row by id.

        Returns:
            True if a row was deleted, False otherwise.
        """
        rid = require_id(record_id)
        result = executor.execute(f"DELETE FROM {self.table} WHERE id = %s;", (rid,))
        deleted = result.rowcount > 0
        if deleted:
            logger.info(f"Deleted {self.entity} #{rid}")
        return deleted
