"""
services/cart_service.py
------------------------
Shopping cart and wishlist of the signed-in user, and checkout totals.
"""

from typing import Optional

from exceptions import NotFoundError, ValidationError
from models.identity import Identity
from repositories.cart_repo import CartRepository, WishlistRepository
from repositories.product_repo import ProductRepository
from services.settings_service import SettingsService
from utils import theme
from utils.identifiers import require_id
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_LINE_QUANTITY = 99


def _quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid quantity: {value!r}", field="quantity") from e
    if not 1 <= quantity <= MAX_LINE_QUANTITY:
        raise ValidationError(f"Quantity must be between 1 and {MAX_LINE_QUANTITY}", field="quantity")
    return quantity


def unit_price(item: dict) -> float:
    """Sale price when one is set, else the regular price."""
    sale = item.get("sale_price")
    return sale if sale is not None else item["price"]


class CartService:
    """Cart and wishlist operations; every call acts on the caller's own data."""

    def __init__(self, settings: Optional[SettingsService] = None):
        self.cart = CartRepository()
        self.wishlist = WishlistRepository()
        self.products = ProductRepository()
        self.settings = settings or SettingsService()

    # ── CART ──────────────────────────────────────────────

    def get_cart(self, identity: Identity) -> dict:
        """
        Cart lines with product data and the subtotal.

        Returns:
            Dict with 'items' and 'subtotal'.
        """
        items = self.cart.get_items(identity.id)
        return {"items": items, "subtotal": self.subtotal(items)}

    def add_to_cart(self, identity: Identity, product_id, quantity=1) -> dict:
        pid = require_id(product_id, "product_id")
        if self.products.find_by_id(pid) is None:
            raise NotFoundError("Product", pid)
        return self.cart.add_item(identity.id, pid, _quantity(quantity))

    def set_quantity(self, identity: Identity, item_id, quantity) -> None:
        iid = require_id(item_id)
        if not self.cart.set_quantity(identity.id, iid, _quantity(quantity)):
            raise NotFoundError("Cart item", iid)

    def remove_from_cart(self, identity: Identity, item_id) -> bool:
        return self.cart.remove_item(identity.id, require_id(item_id))

    def clear_cart(self, identity: Identity) -> int:
        removed = self.cart.clear(identity.id)
        logger.info(f"Cleared {removed} cart lines of user {identity.id}")
        return removed

    @staticmethod
    def subtotal(items: list[dict]) -> float:
        return round(sum(unit_price(i) * i["quantity"] for i in items), 2)

    def checkout_totals(self, identity: Identity, zone_name: Optional[str] = None) -> dict:
        """
        Subtotal, shipping fee and total of the caller's cart.
        Shipping rules come from the `shipping` settings category.
        """
        cart = self.get_cart(identity)
        settings = {"shipping": self.settings.get_category("shipping")}
        shipping = theme.shipping_fee(settings, cart["subtotal"], zone_name)
        return {
            "items": cart["items"],
            "subtotal": cart["subtotal"],
            "shipping": shipping,
            "total": round(cart["subtotal"] + shipping, 2),
        }

    # ── WISHLIST ──────────────────────────────────────────

    def get_wishlist(self, identity: Identity) -> list[dict]:
        return self.wishlist.get_items(identity.id)

    def add_to_wishlist(self, identity: Identity, product_id) -> bool:
        """Returns False when the product was already on the wishlist."""
        return self.wishlist.add(identity.id, require_id(product_id, "product_id"))

    def remove_from_wishlist(self, identity: Identity, product_id) -> bool:
        return self.wishlist.remove(identity.id, require_id(product_id, "product_id"))
