"""
repositories/order_repo.py
--------------------------
Data access layer for orders and their line items.
All SQL queries related to the `orders` and `order_items` tables live here.
"""

import json
from typing import Optional

from db import executor
from models.filters import AnyOf, OrderFilter
from models.pagination import PageRequest, PageResult
from repositories.aggregation import group_joined_rows, reconstruct
from repositories.base import Repository, build_where
from repositories.pagination import PagedQuery, paginate
from utils.identifiers import normalize_id, normalize_row_ids, require_id
from utils.logger import get_logger

logger = get_logger(__name__)

# ASCII unit separator: cannot occur in product names typed by users
ITEM_SEPARATOR = "\x1f"

_AGGREGATED_ITEMS = {
    "item_ids": "id",
    "item_product_ids": "product_id",
    "item_names": "name",
    "item_quantities": "quantity",
    "item_prices": "price",
}
_ITEM_NUMERIC = {"id": int, "product_id": int, "quantity": int, "price": float}

ORDER_LISTING = PagedQuery(
    select="""
        o.id, o.user_id, o.status, o.payment_status, o.total, o.created_at, o.updated_at,
        COALESCE(u.name, TRIM(CONCAT(o.customer_first_name, ' ', o.customer_last_name))) AS customer_name,
        COALESCE(u.email, o.customer_email) AS customer_email
    """,
    source="orders o LEFT JOIN users u ON o.user_id = u.id",
    sortable={
        "id": "o.id",
        "status": "o.status",
        "total": "o.total",
        "createdAt": "o.created_at",
        "updatedAt": "o.updated_at",
        "customerName": "u.name",
    },
    default_order="createdAt",
    default_dir="DESC",
    tiebreaker="o.id",
)


class OrderRepository(Repository):
    """Repository for orders; order items are always read through their order."""

    table = "orders"
    entity = "Order"
    columns = frozenset({
        "id", "user_id", "total", "status", "payment_status", "payment_method",
        "payment_details", "shipping_address", "billing_address", "customer_first_name",
        "customer_last_name", "customer_email", "customer_phone", "created_at", "updated_at",
    })
    writable = columns - {"id", "created_at", "updated_at"}
    default_order = "created_at"

    # ── CREATE ────────────────────────────────────────────

    def insert_order(self, tx, fields: dict) -> dict:
        """
        Insert the order row inside an open transaction.

        Returns:
            Dict with the generated `id` and `created_at`.
        """
        self._check_fields(fields, self._writable())
        keys = list(fields)
        sql = (
            f"INSERT INTO orders ({', '.join(keys)}) VALUES ({', '.join(['%s'] * len(keys))}) "
            "RETURNING id, created_at;"
        )
        return tx.fetch_one(sql, [fields[k] for k in keys])

    def insert_item(self, tx, order_id: int, item: dict) -> int:
        """Insert one line item inside an open transaction; returns its id."""
        row = tx.fetch_one(
            "INSERT INTO order_items (order_id, product_id, name, quantity, price) "
            "VALUES (%s, %s, %s, %s, %s) RETURNING id;",
            (order_id, item.get("product_id"), item["name"], item["quantity"], item["price"]),
        )
        return row["id"]

    # ── READ ──────────────────────────────────────────────

    def list_with_items(self, user_id: Optional[int] = None) -> list[dict]:
        """
        Fetch orders with their items, newest first.

        Items are aggregated per order in SQL and unpacked with `reconstruct`.

        Args:
            user_id: Restrict to this user's orders (None = all orders).
        """
        user_clause = "WHERE o.user_id = %s" if user_id is not None else ""
        sql = f"""
            SELECT o.*,
                   string_agg(oi.id::text, chr(31) ORDER BY oi.id) AS item_ids,
                   string_agg(COALESCE(oi.product_id, 0)::text, chr(31) ORDER BY oi.id) AS item_product_ids,
                   string_agg(oi.name, chr(31) ORDER BY oi.id) AS item_names,
                   string_agg(oi.quantity::text, chr(31) ORDER BY oi.id) AS item_quantities,
                   string_agg(oi.price::text, chr(31) ORDER BY oi.id) AS item_prices
            FROM orders o
            LEFT JOIN order_items oi ON o.id = oi.order_id
            {user_clause}
            GROUP BY o.id
            ORDER BY o.created_at DESC, o.id DESC;
        """
        rows = executor.fetch_all(sql, (user_id,) if user_id is not None else None)
        orders = []
        for row in rows:
            order = reconstruct(row, _AGGREGATED_ITEMS, numeric=_ITEM_NUMERIC, delimiter=ITEM_SEPARATOR)
            for item in order["items"]:
                item["product_id"] = item["product_id"] or None
            orders.append(self.format_order(order))
        return orders

    def get_with_items(self, order_id, user_id: Optional[int] = None) -> Optional[dict]:
        """
        Fetch one order and its items with a plain JOIN, grouped in memory.

        Args:
            order_id: Order id.
            user_id: If given, the order must belong to this user.
        """
        oid = require_id(order_id)
        sql = """
            SELECT o.*,
                   oi.id AS item_id, oi.product_id AS item_product_id, oi.name AS item_name,
                   oi.quantity AS item_quantity, oi.price AS item_price
            FROM orders o
            LEFT JOIN order_items oi ON o.id = oi.order_id
            WHERE o.id = %s
        """
        params: list = [oid]
        if user_id is not None:
            sql += " AND o.user_id = %s"
            params.append(user_id)
        grouped = group_joined_rows(executor.fetch_all(sql + " ORDER BY oi.id;", params))
        return self.format_order(grouped[0]) if grouped else None

    def paginate(self, filters: Optional[OrderFilter], page: PageRequest) -> PageResult:
        """Admin listing: one page of orders, each with its items."""
        where = build_where((filters or OrderFilter()).predicates())
        result = paginate(ORDER_LISTING, where, page, transform=self._summary)
        items = self.items_for_orders([o["id"] for o in result.rows])
        for order in result.rows:
            order["items"] = items.get(order["id"], [])
        return result

    def items_for_orders(self, order_ids: list[int]) -> dict[int, list[dict]]:
        """Line items for several orders in one query, keyed by order id."""
        if not order_ids:
            return {}
        where = build_where([AnyOf("oi.order_id", tuple(order_ids))])
        sql = f"""
            SELECT oi.order_id, oi.id, oi.product_id,
                   COALESCE(p.name, oi.name) AS name, oi.quantity, oi.price
            FROM order_items oi
            LEFT JOIN products p ON oi.product_id = p.id
            {where.sql}
            ORDER BY oi.id;
        """
        grouped: dict[int, list[dict]] = {}
        for row in executor.fetch_all(sql, where.params):
            item = self._item(row)
            grouped.setdefault(item.pop("order_id"), []).append(item)
        return grouped

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _item(row: dict) -> dict:
        item = normalize_row_ids(dict(row))
        item["quantity"] = int(item["quantity"])
        item["price"] = float(item["price"])
        return item

    @staticmethod
    def _summary(row: dict) -> dict:
        order = normalize_row_ids(dict(row))
        order["total"] = float(order["total"] or 0)
        return order

    @classmethod
    def format_order(cls, order: dict) -> dict:
        """Convert a stored order (with `items`) into its API shape."""
        return {
            "id": normalize_id(order["id"]),
            "user_id": normalize_id(order["user_id"]) if order.get("user_id") is not None else None,
            "total": float(order.get("total") or 0),
            "status": order.get("status") or "pending",
            "payment_status": order.get("payment_status") or "pending",
            "payment_method": order.get("payment_method") or "",
            "payment_details": _parse_json(order.get("payment_details"), "payment_details") or {},
            "items": [cls._item(i) for i in order.get("items", [])],
            "shipping_address": _parse_json(order.get("shipping_address"), "shipping_address"),
            "billing_address": _parse_json(order.get("billing_address"), "billing_address"),
            "customer": {
                "first_name": order.get("customer_first_name") or "",
                "last_name": order.get("customer_last_name") or "",
                "email": order.get("customer_email") or "",
                "phone": order.get("customer_phone") or "",
            },
            "created_at": order.get("created_at"),
            "updated_at": order.get("updated_at"),
        }


def _parse_json(value, name: str):
    """Decode a JSON text column; undecodable text is returned unchanged."""
    if value is None or not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        logger.warning(f"Stored {name} is not valid JSON, returning raw text: {e}")
        return value
