"""Tests for models/pagination.py and repositories/pagination.py"""

from unittest.mock import patch

import pytest

from db.executor import QueryResult
from models.filters import Equals, ProductFilter
from models.pagination import PageRequest, PageResult
from repositories.base import build_where
from repositories.pagination import PagedQuery, paginate
from repositories.product_repo import PRODUCT_LISTING, ProductRepository


class TestPageRequest:
    """Raw query-string values are coerced and clamped."""

    def test_defaults(self):
        page = PageRequest.from_params()
        assert (page.page, page.limit, page.offset) == (1, 10, 0)

    def test_clamps(self):
        page = PageRequest.from_params(page="-4", limit="5000", order_dir="desc")
        assert page.page == 1
        assert page.limit == 100
        assert page.order_dir == "DESC"

    def test_garbage_uses_defaults(self):
        page = PageRequest.from_params(page="two", limit=None)
        assert (page.page, page.limit) == (1, 10)

    def test_offset(self):
        assert PageRequest(page=3, limit=20).offset == 40


class TestPageResult:

    @pytest.mark.parametrize("total,limit,pages", [(0, 10, 0), (10, 10, 1), (11, 10, 2), (23, 5, 5)])
    def test_total_pages(self, total, limit, pages):
        assert PageResult(total=total, limit=limit).total_pages == pages

    def test_to_dict(self):
        result = PageResult(rows=[{"id": 1}], total=11, page=2, limit=10).to_dict()
        assert result["pagination"] == {"total": 11, "page": 2, "limit": 10, "totalPages": 2}


class TestOrderClause:
    """Sort keys outside the allow-list fall back to the default, silently."""

    def test_allowed_key(self):
        assert PRODUCT_LISTING.order_clause("price", "ASC") == "ORDER BY p.price ASC, p.id ASC"

    def test_unknown_key_uses_default(self):
        assert PRODUCT_LISTING.order_clause("price; DROP TABLE products", "ASC") == (
            "ORDER BY p.created_at ASC, p.id ASC"
        )

    def test_bad_direction_uses_default(self):
        assert PRODUCT_LISTING.order_clause("name", "sideways") == "ORDER BY p.name DESC, p.id DESC"

    def test_tiebreaker_not_repeated(self):
        assert PRODUCT_LISTING.order_clause("id", "ASC") == "ORDER BY p.id ASC"


class TestPaginate:
    """Count and data queries share one WHERE clause."""

    ITEMS = PagedQuery(
        select="id, name",
        source="items",
        sortable={"id": "id"},
        default_order="id",
        default_dir="ASC",
    )

    @staticmethod
    def _table(rows):
        """Answer COUNT queries with len(rows) and data queries by LIMIT/OFFSET."""
        calls = []

        def execute(sql, params=None):
            calls.append((sql, list(params or [])))
            if "COUNT(" in sql:
                return QueryResult(rows=[{"total": len(rows)}], rowcount=1)
            limit, offset = params[-2], params[-1]
            page = rows[offset:offset + limit]
            return QueryResult(rows=[dict(r) for r in page], rowcount=len(page))

        return execute, calls

    def test_pages_cover_every_row_once(self):
        rows = [{"id": i, "name": f"row {i}"} for i in range(1, 24)]
        execute, _ = self._table(rows)
        with patch("db.executor.execute", side_effect=execute):
            first = paginate(self.ITEMS, build_where([]), PageRequest(page=1, limit=10))
            seen = []
            for number in range(1, first.total_pages + 1):
                result = paginate(self.ITEMS, build_where([]), PageRequest(page=number, limit=10))
                seen.extend(r["id"] for r in result.rows)

        assert first.total == 23
        assert first.total_pages == 3
        assert sorted(seen) == [r["id"] for r in rows]

    def test_count_and_data_share_predicate(self):
        execute, calls = self._table([])
        where = build_where([Equals("name", "x")])
        with patch("db.executor.execute", side_effect=execute):
            paginate(self.ITEMS, where, PageRequest(page=1, limit=10))

        (count_sql, count_params), (data_sql, data_params) = calls
        assert "WHERE name = %s" in count_sql
        assert "WHERE name = %s" in data_sql
        assert count_params == ["x"]
        assert data_params == ["x", 10, 0]
        assert data_sql.rstrip().endswith("LIMIT %s OFFSET %s;")

    def test_transform_applied(self):
        execute, _ = self._table([{"id": 1, "name": "a"}])
        with patch("db.executor.execute", side_effect=execute):
            result = paginate(self.ITEMS, build_where([]), PageRequest(), transform=lambda r: r["name"])
        assert result.rows == ["a"]


class TestProductListingEndToEnd:
    """Category + search filter, page 2 of 10."""

    def test_binds_filters_and_window(self, fake_db):
        fake_db.queue([{"total": 14}])
        fake_db.queue([
            {"id": "11", "name": "Green Tea", "price": "5.50", "sale_price": None,
             "category_id": "7", "category_name": "Teas", "category_slug": "teas"},
        ])
        filters = ProductFilter.from_mapping({"categoryId": "7", "query": "tea"})

        result = ProductRepository().paginate(filters, PageRequest.from_params(page=2, limit=10))

        (count_sql, count_params), (data_sql, data_params) = fake_db.calls
        assert count_params == ["%tea%", "%tea%", 7]
        assert data_params == ["%tea%", "%tea%", 7, 10, 10]
        assert count_sql.count("ILIKE %s") == 2
        assert "p.category_id = %s" in data_sql
        assert result.total == 14
        assert result.page == 2
        assert result.rows[0]["id"] == 11
        assert result.rows[0]["price"] == 5.5
        assert result.rows[0]["category"] == {"id": 7, "name": "Teas", "slug": "teas"}
