"""
services/analytics_service.py
-----------------------------
Admin dashboard figures. Every section is computed independently: a
section whose query fails (or whose table is missing) comes back empty
instead of failing the whole dashboard.
"""

from db import executor
from exceptions import DatabaseConnectionError, QueryError
from models.identity import Identity
from repositories.analytics_repo import AnalyticsRepository
from security.auth import admin_only
from utils.logger import get_logger

logger = get_logger(__name__)

EMPTY_TOTALS = {"revenue": 0.0, "orders": 0, "users": 0, "products": 0}


class AnalyticsService:

    def __init__(self):
        self.repo = AnalyticsRepository()

    @admin_only
    def dashboard(self, identity: Identity, days: int = 30, top: int = 5) -> dict:
        """
        Collect every dashboard section.

        Returns:
            Dict with 'totals', 'sales', 'top_products', 'category_revenue'
            and 'recent_orders'.
        """
        has_items = self._table_ready("order_items")
        return {
            "totals": self._section("totals", self.repo.totals, dict(EMPTY_TOTALS)),
            "sales": self._section("sales", lambda: self.repo.daily_sales(days)),
            "top_products": self._section(
                "top_products",
                (lambda: self.repo.top_products(top)) if has_items else (lambda: self.repo.newest_products(top)),
            ),
            "category_revenue": self._section(
                "category_revenue",
                self.repo.category_revenue if has_items and self._table_ready("categories") else list,
            ),
            "recent_orders": self._section("recent_orders", lambda: self.repo.recent_orders(top)),
        }

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _section(name: str, compute, fallback=None):
        try:
            return compute()
        except (DatabaseConnectionError, QueryError) as e:
            logger.warning(f"Analytics section '{name}' unavailable: {e}")
            return fallback if fallback is not None else []

    @staticmethod
    def _table_ready(table: str) -> bool:
        try:
            return executor.table_exists(table)
        except (DatabaseConnectionError, QueryError) as e:
            logger.warning(f"Could not check for table '{table}': {e}")
            return False
