"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of orders for the admin panel.
"""

import io
from typing import Optional

import pandas as pd

from models.identity import Identity
from repositories.order_repo import OrderRepository
from security.auth import admin_only
from utils.logger import get_logger

logger = get_logger(__name__)

COLUMNS = ["Order", "Date", "Status", "Payment", "Customer", "Email", "Items", "Total"]


class ExportService:
    """Generates downloadable order reports in CSV and Excel formats."""

    def __init__(self):
        self.repo = OrderRepository()

    def _frame(self, status: Optional[str]) -> pd.DataFrame:
        orders = self.repo.list_with_items()
        if status:
            orders = [o for o in orders if o["status"] == status]
        data = [
            {
                "Order": o["id"],
                "Date": o["created_at"].isoformat() if hasattr(o["created_at"], "isoformat") else o["created_at"],
                "Status": o["status"],
                "Payment": o["payment_status"],
                "Customer": f"{o['customer']['first_name']} {o['customer']['last_name']}".strip(),
                "Email": o["customer"]["email"],
                "Items": sum(i["quantity"] for i in o["items"]),
                "Total": o["total"],
            }
            for o in orders
        ]
        return pd.DataFrame(data, columns=COLUMNS)

    @admin_only
    def export_orders_csv(self, identity: Identity, status: Optional[str] = None) -> io.BytesIO:
        """
        Export orders as a CSV file.

        Args:
            identity: Calling admin.
            status: Only orders with this status (None = all).

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = self._frame(status)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} orders as CSV for user {identity.id}")
        return buffer

    @admin_only
    def export_orders_excel(self, identity: Identity, status: Optional[str] = None) -> io.BytesIO:
        """
        Export orders as an Excel (.xlsx) file with a per-status summary sheet.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = self._frame(status)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Orders", index=False)

            if not df.empty:
                summary = df.groupby("Status")["Total"].agg(["count", "sum"]).reset_index()
                summary.columns = ["Status", "Orders", "Revenue"]
                summary.to_excel(writer, sheet_name="Summary", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} orders as Excel for user {identity.id}")
        return buffer
