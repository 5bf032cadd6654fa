"""
repositories/product_repo.py
----------------------------
Data access layer for products.
All SQL queries related to the `products` table live here.
"""

from typing import Optional

from db import executor
from models.filters import ProductFilter
from models.pagination import PageRequest, PageResult
from repositories.base import Repository, build_where
from repositories.pagination import PagedQuery, paginate
from utils.identifiers import normalize_id, normalize_row_ids, require_id
from utils.logger import get_logger

logger = get_logger(__name__)

_WITH_CATEGORY = """
    p.*,
    c.name AS category_name,
    c.slug AS category_slug
"""
_SOURCE = "products p LEFT JOIN categories c ON p.category_id = c.id"

PRODUCT_LISTING = PagedQuery(
    select=_WITH_CATEGORY,
    source=_SOURCE,
    sortable={
        "createdAt": "p.created_at",
        "name": "p.name",
        "price": "p.price",
        "inventory": "p.inventory",
        "id": "p.id",
    },
    default_order="createdAt",
    default_dir="DESC",
    tiebreaker="p.id",
)


class ProductRepository(Repository):
    """Repository for CRUD operations on the products table."""

    table = "products"
    entity = "Product"
    columns = frozenset({
        "id", "name", "slug", "description", "price", "sale_price", "inventory",
        "category_id", "images", "is_featured", "is_published", "created_at", "updated_at",
    })
    writable = columns - {"id", "created_at"}
    default_order = "created_at"

    # ── READ ──────────────────────────────────────────────

    def list_with_category(self, filters: Optional[ProductFilter] = None) -> list[dict]:
        """
        Fetch products with their category, newest first.

        Args:
            filters: Optional ProductFilter (search, category, published, featured).

        Returns:
            List of product dicts with a nested `category` dict (or None).
        """
        where = build_where((filters or ProductFilter()).predicates())
        sql = f"SELECT {_WITH_CATEGORY} FROM {_SOURCE} {where.sql} ORDER BY p.created_at DESC, p.id DESC;"
        return [self._with_category(r) for r in executor.fetch_all(sql, where.params)]

    def paginate(self, filters: Optional[ProductFilter], page: PageRequest) -> PageResult:
        """Paginated product listing with nested categories."""
        where = build_where((filters or ProductFilter()).predicates())
        return paginate(PRODUCT_LISTING, where, page, transform=self._with_category)

    def get_with_category(self, product_id) -> Optional[dict]:
        pid = require_id(product_id)
        sql = f"SELECT {_WITH_CATEGORY} FROM {_SOURCE} WHERE p.id = %s;"
        row = executor.fetch_one(sql, (pid,))
        return self._with_category(row) if row else None

    def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        sql = "SELECT 1 FROM products WHERE slug = %s"
        params: list = [slug]
        if exclude_id is not None:
            sql += " AND id <> %s"
            params.append(exclude_id)
        return executor.fetch_one(sql + " LIMIT 1;", params) is not None

    # ── UPDATE ────────────────────────────────────────────

    def decrement_inventory(self, tx, product_id: int, quantity: int) -> bool:
        """
        Take `quantity` units out of stock inside an open transaction.

        Returns:
            False if the product does not exist or has too little stock.
        """
        result = tx.execute(
            "UPDATE products SET inventory = inventory - %s, updated_at = NOW() "
            "WHERE id = %s AND inventory >= %s;",
            (quantity, product_id, quantity),
        )
        return result.rowcount > 0

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _with_category(row: dict) -> dict:
        """Fold the joined category columns into a nested `category` dict."""
        product = normalize_row_ids(dict(row))
        name = product.pop("category_name", None)
        slug = product.pop("category_slug", None)
        for money in ("price", "sale_price"):
            if product.get(money) is not None:
                product[money] = float(product[money])
        product["category"] = (
            {"id": normalize_id(product["category_id"]), "name": name or "Unknown", "slug": slug or "unknown"}
            if product.get("category_id") is not None
            else None
        )
        return product
