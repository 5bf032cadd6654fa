"""
repositories/pagination.py
--------------------------
Paginated listings: one COUNT query and one ordered, bounded SELECT that
share the same FROM/JOIN text and the same WHERE clause, so the reported
total always describes the rows being paged through.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from db import executor
from models.filters import WhereClause
from models.pagination import PageRequest, PageResult
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PagedQuery:
    """
    Static description of a listing.

    Attributes:
        select: Column list, e.g. ``"p.*, c.name AS category_name"``.
        source: FROM clause with JOINs, e.g. ``"products p LEFT JOIN categories c ON ..."``.
        sortable: Public sort key → SQL column expression (the allow-list).
        default_order: Public sort key used when the requested one is not allowed.
        default_dir: Direction used when the requested one is not ASC/DESC.
        count_expr: Aggregate used by the count query (``COUNT(DISTINCT o.id)``
            when the JOINs can multiply rows).
        tiebreaker: Appended to ORDER BY so page boundaries are stable.
    """
    select: str
    source: str
    sortable: dict[str, str] = field(default_factory=dict)
    default_order: str = "id"
    default_dir: str = "DESC"
    count_expr: str = "COUNT(*)"
    tiebreaker: Optional[str] = None

    def order_clause(self, order_by: Optional[str], order_dir: Optional[str]) -> str:
        column = self.sortable.get(order_by) if order_by else None
        if column is None:
            if order_by:
                logger.debug(f"Sort key {order_by!r} not allowed; using {self.default_order!r}")
            column = self.sortable[self.default_order]
        direction = order_dir.upper() if isinstance(order_dir, str) else ""
        if direction not in ("ASC", "DESC"):
            direction = self.default_dir
        clause = f"ORDER BY {column} {direction}"
        if self.tiebreaker and self.tiebreaker != column:
            clause += f", {self.tiebreaker} {direction}"
        return clause

    def count_sql(self, where: WhereClause) -> str:
        return f"SELECT {self.count_expr} AS total FROM {self.source} {where.sql};"

    def data_sql(self, where: WhereClause, page: PageRequest) -> str:
        return (
            f"SELECT {self.select} FROM {self.source} {where.sql} "
            f"{self.order_clause(page.order_by, page.order_dir)} LIMIT %s OFFSET %s;"
        )


def paginate(
    query: PagedQuery,
    where: WhereClause,
    page: PageRequest,
    transform: Optional[Callable[[dict], dict]] = None,
) -> PageResult:
    """
    Run the count and data queries for one page.

    `page.page` must already be >= 1 (see `PageRequest.from_params`).

    Args:
        query: Listing description.
        where: Predicate shared by both queries.
        page: Requested slice and ordering.
        transform: Optional per-row mapper applied to the data rows.

    Returns:
        PageResult with the rows of this page and the total matching count.
    """
    total = int(executor.fetch_value(query.count_sql(where), where.params, default=0) or 0)
    rows = executor.fetch_all(
        query.data_sql(where, page), list(where.params) + [page.limit, page.offset]
    )
    if transform is not None:
        rows = [transform(r) for r in rows]
    return PageResult(rows=rows, total=total, page=page.page, limit=page.limit)
