"""
services/order_service.py
-------------------------
Business logic for placing and managing orders.
Orchestrates between the order, product and cart repositories.
"""

import json
import re
from typing import Mapping, Optional

from config import ORDER_STATUSES
from db.executor import transaction
from exceptions import NotFoundError, ValidationError
from models.filters import OrderFilter
from models.identity import Identity
from models.pagination import PageRequest, PageResult
from repositories.cart_repo import CartRepository
from repositories.order_repo import OrderRepository
from repositories.product_repo import ProductRepository
from security.auth import admin_only, has_admin_access
from utils.identifiers import normalize_id, require_id
from utils.logger import get_logger

logger = get_logger(__name__)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class OrderService:
    """
    Handles everything about orders.

    Workflow of `place_order`:
        1. Validate the checkout payload.
        2. Insert the order row and its line items in one transaction.
        3. Take the ordered quantities out of stock.
        4. Empty the caller's cart (optional).
    """

    def __init__(self):
        self.orders = OrderRepository()
        self.products = ProductRepository()
        self.cart = CartRepository()

    # ── CREATE ────────────────────────────────────────────

    def place_order(self, identity: Optional[Identity], data: Mapping, clear_cart: bool = True) -> dict:
        """
        Create an order with its items.

        Args:
            identity: The buyer (None for a guest checkout).
            data: Checkout payload with `items`, `shipping_address`, `total`,
                `customer` ({first_name, last_name, email, phone}) and
                optional `billing_address`, `payment_method`, `payment_details`.
            clear_cart: Empty the buyer's cart in the same transaction.

        Returns:
            Dict with 'id', 'created_at' and 'status'.

        Raises:
            ValidationError: If the payload is incomplete.
        """
        items = self._validate_items(data.get("items"))
        shipping = data.get("shipping_address")
        if not shipping:
            raise ValidationError("Shipping address is required", field="shipping_address")
        total = self._validate_total(data.get("total"))
        customer = data.get("customer") or {}
        email = str(customer.get("email") or "").strip()
        if not _EMAIL.match(email):
            raise ValidationError("A valid customer e-mail is required", field="customer.email")

        user_id = identity.id if identity is not None and identity.id > 0 else None
        fields = {
            "user_id": user_id,
            "total": total,
            "status": "pending",
            "payment_status": "pending",
            "payment_method": data.get("payment_method") or "cash_on_delivery",
            "payment_details": json.dumps(data.get("payment_details") or {}),
            "shipping_address": json.dumps(shipping),
            "billing_address": json.dumps(data.get("billing_address") or shipping),
            "customer_first_name": customer.get("first_name") or "",
            "customer_last_name": customer.get("last_name") or "",
            "customer_email": email,
            "customer_phone": customer.get("phone") or "",
        }

        with transaction() as tx:
            created = self.orders.insert_order(tx, fields)
            order_id = created["id"]
            for item in items:
                self.orders.insert_item(tx, order_id, item)
                if item["product_id"] is not None and not self.products.decrement_inventory(
                    tx, item["product_id"], item["quantity"]
                ):
                    logger.warning(
                        f"Order #{order_id}: could not take {item['quantity']} of "
                        f"product #{item['product_id']} out of stock"
                    )
            if clear_cart and user_id is not None:
                self.cart.clear(user_id, tx=tx)

        logger.info(f"Order #{order_id} placed with {len(items)} items, total {total:.2f}")
        return {"id": normalize_id(order_id), "created_at": created.get("created_at"), "status": "pending"}

    # ── READ ──────────────────────────────────────────────

    def list_orders(self, identity: Identity) -> list[dict]:
        """The caller's orders with items; admins see every order."""
        if has_admin_access(identity):
            return self.orders.list_with_items()
        return self.orders.list_with_items(user_id=identity.id)

    def get_order(self, identity: Identity, order_id) -> dict:
        """
        One order with its items.

        Raises:
            NotFoundError: If the order does not exist or, for non-admins,
                belongs to someone else.
        """
        owner = None if has_admin_access(identity) else identity.id
        order = self.orders.get_with_items(order_id, user_id=owner)
        if order is None:
            raise NotFoundError("Order", normalize_id(order_id))
        return order

    @admin_only
    def list_admin(self, identity: Identity, params: Optional[Mapping], page: PageRequest) -> PageResult:
        """Paginated listing for the admin panel, filtered by status and search text."""
        filters = OrderFilter.from_mapping(params, ORDER_STATUSES)
        return self.orders.paginate(filters, page)

    # ── UPDATE ────────────────────────────────────────────

    @admin_only
    def update_status(self, identity: Identity, order_id, status: str) -> dict:
        """
        Move an order to a new status.

        Raises:
            ValidationError: If `status` is not one of ORDER_STATUSES.
            NotFoundError: If the order does not exist.
        """
        if status not in ORDER_STATUSES:
            raise ValidationError(
                f"Invalid status: {status!r}. Expected one of {', '.join(ORDER_STATUSES)}",
                field="status",
            )
        updated = self.orders.update(require_id(order_id), {"status": status})
        logger.info(f"Order #{updated['id']} set to {status} by user {identity.id}")
        return updated

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _validate_items(raw) -> list[dict]:
        if not isinstance(raw, (list, tuple)) or not raw:
            raise ValidationError("An order needs at least one item", field="items")
        items = []
        for position, entry in enumerate(raw, start=1):
            if not isinstance(entry, Mapping):
                raise ValidationError(f"Item {position} is not an object", field="items")
            name = str(entry.get("name") or "").strip()
            try:
                quantity = int(entry.get("quantity"))
                price = float(entry.get("price"))
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Item {position} has an invalid quantity or price",
                                      field="items") from e
            if not name or quantity < 1 or price < 0:
                raise ValidationError(f"Item {position} is incomplete", field="items")
            product_id = normalize_id(entry.get("product_id", entry.get("id")))
            items.append({
                "product_id": product_id or None,
                "name": name,
                "quantity": quantity,
                "price": price,
            })
        return items

    @staticmethod
    def _validate_total(raw) -> float:
        try:
            total = float(raw)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid order total: {raw!r}", field="total") from e
        if total < 0:
            raise ValidationError("Order total cannot be negative", field="total")
        return total
