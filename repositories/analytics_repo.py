"""
repositories/analytics_repo.py
------------------------------
Read-only reporting queries for the admin dashboard.
"""

from db import executor
from utils.identifiers import normalize_row_ids


class AnalyticsRepository:
    """Aggregate queries across users, products, orders and order items."""

    def totals(self) -> dict:
        """
        Overall counters.

        Returns:
            Dict with 'revenue', 'orders', 'users', 'products'.
        """
        sql = """
            SELECT
                (SELECT COUNT(*) FROM users) AS users,
                (SELECT COUNT(*) FROM products) AS products,
                (SELECT COUNT(*) FROM orders) AS orders,
                (SELECT COALESCE(SUM(total), 0) FROM orders) AS revenue;
        """
        row = executor.fetch_one(sql) or {}
        return {
            "revenue": float(row.get("revenue") or 0),
            "orders": int(row.get("orders") or 0),
            "users": int(row.get("users") or 0),
            "products": int(row.get("products") or 0),
        }

    def daily_sales(self, days: int = 30) -> list[dict]:
        """Revenue and order count per day over the last `days` days."""
        sql = """
            SELECT DATE(created_at) AS date, SUM(total) AS revenue, COUNT(*) AS order_count
            FROM orders
            WHERE created_at >= CURRENT_DATE - %s * INTERVAL '1 day'
            GROUP BY DATE(created_at)
            ORDER BY date;
        """
        return [
            {"date": r["date"], "revenue": float(r["revenue"]), "order_count": int(r["order_count"])}
            for r in executor.fetch_all(sql, (days,))
        ]

    def top_products(self, limit: int = 5) -> list[dict]:
        """Best selling products by units sold."""
        sql = """
            SELECT p.id, p.name, p.price,
                   SUM(oi.quantity) AS total_sold,
                   SUM(oi.price * oi.quantity) AS total_revenue
            FROM products p
            JOIN order_items oi ON p.id = oi.product_id
            GROUP BY p.id, p.name, p.price
            ORDER BY total_sold DESC
            LIMIT %s;
        """
        return [self._money(r, "price", "total_revenue") for r in executor.fetch_all(sql, (limit,))]

    def newest_products(self, limit: int = 5) -> list[dict]:
        """Stand-in for `top_products` when there are no order items yet."""
        sql = """
            SELECT id, name, price, 0 AS total_sold, 0 AS total_revenue
            FROM products ORDER BY created_at DESC LIMIT %s;
        """
        return [self._money(r, "price", "total_revenue") for r in executor.fetch_all(sql, (limit,))]

    def category_revenue(self) -> list[dict]:
        sql = """
            SELECT c.id, c.name, COALESCE(SUM(oi.price * oi.quantity), 0) AS revenue
            FROM categories c
            LEFT JOIN products p ON c.id = p.category_id
            LEFT JOIN order_items oi ON p.id = oi.product_id
            GROUP BY c.id, c.name
            ORDER BY revenue DESC;
        """
        return [self._money(r, "revenue") for r in executor.fetch_all(sql)]

    def recent_orders(self, limit: int = 5) -> list[dict]:
        sql = """
            SELECT o.id, o.total, o.status, o.created_at,
                   COALESCE(u.name, 'Guest') AS customer_name
            FROM orders o
            LEFT JOIN users u ON o.user_id = u.id
            ORDER BY o.created_at DESC
            LIMIT %s;
        """
        return [self._money(r, "total") for r in executor.fetch_all(sql, (limit,))]

    @staticmethod
    def _money(row: dict, *fields: str) -> dict:
        row = normalize_row_ids(row)
        for name in fields:
            row[name] = float(row[name] or 0)
        if "total_sold" in row:
            row["total_sold"] = int(row["total_sold"] or 0)
        return row
