"""
repositories/category_repo.py
-----------------------------
Data access layer for product categories.
"""

from typing import Optional

from db import executor
from repositories.base import Repository


class CategoryRepository(Repository):
    """Repository for CRUD operations on the categories table."""

    table = "categories"
    entity = "Category"
    columns = frozenset({"id", "name", "slug", "description", "image", "created_at"})
    writable = frozenset({"name", "slug", "description", "image"})
    default_order = "name"

    def list_with_product_count(self) -> list[dict]:
        """All categories, alphabetically, each with its number of products."""
        sql = """
            SELECT c.*, COUNT(p.id) AS product_count
            FROM categories c
            LEFT JOIN products p ON c.id = p.category_id
            GROUP BY c.id
            ORDER BY c.name ASC;
        """
        rows = executor.fetch_all(sql)
        for row in rows:
            self._to_record(row)
            row["product_count"] = int(row["product_count"])
        return rows

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        sql = "SELECT 1 FROM categories WHERE slug = %s"
        params: list = [slug]
        if exclude_id is not None:
            sql += " AND id <> %s"
            params.append(exclude_id)
        return executor.fetch_one(sql + " LIMIT 1;", params) is not None
