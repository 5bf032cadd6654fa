"""
repositories/cart_repo.py
-------------------------
Data access layer for shopping carts (one cart per user, stored as
`cart_items` rows) and wishlists.
"""

from db import executor
from utils.identifiers import normalize_row_ids
from utils.logger import get_logger

logger = get_logger(__name__)


class CartRepository:
    """Repository for the cart_items table."""

    def get_items(self, user_id: int) -> list[dict]:
        """Cart lines of a user joined with current product data."""
        sql = """
            SELECT ci.id, ci.product_id, ci.quantity,
                   p.name, p.price, p.sale_price, p.images, p.inventory
            FROM cart_items ci
            JOIN products p ON ci.product_id = p.id
            WHERE ci.user_id = %s
            ORDER BY ci.id;
        """
        items = []
        for row in executor.fetch_all(sql, (user_id,)):
            item = normalize_row_ids(row)
            item["price"] = float(item["price"])
            item["sale_price"] = float(item["sale_price"]) if item["sale_price"] is not None else None
            items.append(item)
        return items

    def add_item(self, user_id: int, product_id: int, quantity: int) -> dict:
        """
        Add a product to the cart. Adding a product already in the cart
        increases its quantity.
        """
        sql = """
            INSERT INTO cart_items (user_id, product_id, quantity)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, product_id)
            DO UPDATE SET quantity = cart_items.quantity + EXCLUDED.quantity
            RETURNING id, product_id, quantity;
        """
        row = executor.fetch_one(sql, (user_id, product_id, quantity))
        logger.info(f"Cart of user {user_id}: product #{product_id} now x{row['quantity']}")
        return normalize_row_ids(row)

    def set_quantity(self, user_id: int, item_id: int, quantity: int) -> bool:
        """Set the quantity of one cart line. Returns False if the line is not the user's."""
        result = executor.execute(
            "UPDATE cart_items SET quantity = %s WHERE id = %s AND user_id = %s;",
            (quantity, item_id, user_id),
        )
        return result.rowcount > 0

    def remove_item(self, user_id: int, item_id: int) -> bool:
        result = executor.execute(
            "DELETE FROM cart_items WHERE id = %s AND user_id = %s;", (item_id, user_id)
        )
        return result.rowcount > 0

    def clear(self, user_id: int, tx=None) -> int:
        """Empty the cart; runs inside `tx` when given. Returns removed line count."""
        run = tx.execute if tx is not None else executor.execute
        return run("DELETE FROM cart_items WHERE user_id = %s;", (user_id,)).rowcount


class WishlistRepository:
    """Repository for the wishlist table."""

    def get_items(self, user_id: int) -> list[dict]:
        sql = """
            SELECT w.id, w.product_id, w.created_at,
                   p.name, p.price, p.sale_price, p.images, p.slug
            FROM wishlist w
            JOIN products p ON w.product_id = p.id
            WHERE w.user_id = %s
            ORDER BY w.created_at DESC;
        """
        items = []
        for row in executor.fetch_all(sql, (user_id,)):
            item = normalize_row_ids(row)
            item["price"] = float(item["price"])
            items.append(item)
        return items

    def add(self, user_id: int, product_id: int) -> bool:
        """Add a product; returns False if it was already on the wishlist."""
        result = executor.execute(
            "INSERT INTO wishlist (user_id, product_id) VALUES (%s, %s) "
            "ON CONFLICT (user_id, product_id) DO NOTHING;",
            (user_id, product_id),
        )
        return result.rowcount > 0

    def remove(self, user_id: int, product_id: int) -> bool:
        result = executor.execute(
            "DELETE FROM wishlist WHERE user_id = %s AND product_id = %s;", (user_id, product_id)
        )
        return result.rowcount > 0
