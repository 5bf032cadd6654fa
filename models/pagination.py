"""
models/pagination.py
--------------------
Input parameters and output envelope of paginated listings.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class PageRequest:
    """
    Which slice of a listing to return.

    Attributes:
        page: 1-based page number.
        limit: Rows per page.
        order_by: Public sort key; checked against the listing's allow-list.
        order_dir: 'ASC' or 'DESC'; anything else uses the listing default.
    """
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    order_by: Optional[str] = None
    order_dir: Optional[str] = None

    @classmethod
    def from_params(cls, page=None, limit=None, order_by=None, order_dir=None) -> "PageRequest":
        """
        Coerce raw query-string values. Page numbers below 1 become 1 and the
        limit is clamped to [1, MAX_PAGE_SIZE].
        """
        return cls(
            page=max(1, _to_int(page, 1)),
            limit=min(MAX_PAGE_SIZE, max(1, _to_int(limit, DEFAULT_PAGE_SIZE))),
            order_by=order_by or None,
            order_dir=order_dir.upper() if isinstance(order_dir, str) else None,
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class PageResult:
    """One page of rows plus the size of the whole matching set."""
    rows: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "rows": self.rows,
            "pagination": {
                "total": self.total,
                "page": self.page,
                "limit": self.limit,
                "totalPages": self.total_pages,
            },
        }
