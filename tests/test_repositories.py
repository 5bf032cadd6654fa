"""Tests for the repositories against the scripted executor"""

import pytest

from exceptions import InsertError, InvalidIdentifier, NotFoundError, ValidationError
from repositories.analytics_repo import AnalyticsRepository
from repositories.cart_repo import CartRepository, WishlistRepository
from repositories.category_repo import CategoryRepository
from repositories.order_repo import OrderRepository
from repositories.product_repo import ProductRepository
from repositories.user_repo import UserRepository


class TestGenericAccessor:
    """CRUD shared by every entity repository."""

    def test_find_by_id_normalizes_ids(self, fake_db):
        fake_db.queue([{"id": "3", "name": "Tea", "category_id": "7"}])
        product = ProductRepository().find_by_id("3")
        assert product == {"id": 3, "name": "Tea", "category_id": 7}
        assert fake_db.calls == [("SELECT * FROM products WHERE id = %s;", [3])]

    def test_find_by_id_missing(self, fake_db):
        fake_db.queue([])
        assert ProductRepository().find_by_id(99) is None

    def test_find_by_id_rejects_bad_id(self, fake_db):
        with pytest.raises(InvalidIdentifier):
            ProductRepository().find_by_id("abc")
        assert fake_db.calls == []

    def test_find_many_without_filters(self, fake_db):
        CategoryRepository().find_many()
        assert fake_db.calls == [("SELECT * FROM categories ORDER BY name ASC;", [])]

    def test_find_many_filters_and_limit(self, fake_db):
        UserRepository().find_many({"role": "admin"}, order_by="email", order_dir="desc", limit=5)
        sql, params = fake_db.calls[0]
        assert sql == "SELECT * FROM users WHERE role = %s ORDER BY email DESC LIMIT %s;"
        assert params == ["admin", 5]

    def test_find_many_unknown_order_falls_back(self, fake_db):
        ProductRepository().find_many(order_by="name; DROP TABLE products")
        assert "ORDER BY created_at ASC" in fake_db.statements[0]

    def test_find_many_unknown_filter(self, fake_db):
        with pytest.raises(ValidationError):
            ProductRepository().find_many({"password": "x"})
        assert fake_db.calls == []

    @pytest.mark.parametrize("limit", [0, -1, "10", True])
    def test_find_many_bad_limit(self, fake_db, limit):
        with pytest.raises(ValidationError):
            ProductRepository().find_many(limit=limit)

    def test_count(self, fake_db):
        fake_db.queue([{"total": 4}])
        assert CategoryRepository().count() == 4

    def test_create_returns_fields_and_id(self, fake_db):
        fake_db.queue([{"id": 12}])
        created = CategoryRepository().create({"name": "Teas", "slug": "teas"})
        assert created == {"name": "Teas", "slug": "teas", "id": 12}
        sql, params = fake_db.calls[0]
        assert sql == "INSERT INTO categories (name, slug) VALUES (%s, %s) RETURNING id;"
        assert params == ["Teas", "teas"]

    def test_create_without_returned_id(self, fake_db):
        fake_db.queue([])
        with pytest.raises(InsertError):
            CategoryRepository().create({"name": "Teas", "slug": "teas"})

    def test_create_rejects_unknown_column(self, fake_db):
        with pytest.raises(ValidationError):
            CategoryRepository().create({"name": "Teas", "id": 1})
        with pytest.raises(ValidationError):
            CategoryRepository().create({})

    def test_update_sets_timestamp(self, fake_db):
        fake_db.queue([{"id": 3, "name": "New", "category_id": None}])
        updated = ProductRepository().update("3", {"name": "New"})
        sql, params = fake_db.calls[0]
        assert sql == "UPDATE products SET name = %s, updated_at = NOW() WHERE id = %s RETURNING *;"
        assert params == ["New", 3]
        assert updated["id"] == 3

    def test_update_missing_row(self, fake_db):
        fake_db.queue([])
        with pytest.raises(NotFoundError) as exc:
            CategoryRepository().update(404, {"name": "Gone"})
        assert exc.value.status_code == 404

    def test_remove(self, fake_db):
        fake_db.queue(rowcount=1).queue(rowcount=0)
        repo = ProductRepository()
        assert repo.remove(3) is True
        assert repo.remove(3) is False


class TestProductRepository:

    def test_list_with_category(self, fake_db):
        fake_db.queue([
            {"id": 1, "name": "Tea", "price": "4.00", "sale_price": "3.50",
             "category_id": None, "category_name": None, "category_slug": None},
        ])
        products = ProductRepository().list_with_category()
        assert products == [{"id": 1, "name": "Tea", "price": 4.0, "sale_price": 3.5,
                             "category_id": None, "category": None}]
        assert "WHERE" not in fake_db.statements[0]

    def test_slug_exists_excludes_self(self, fake_db):
        fake_db.queue([{"?column?": 1}])
        assert ProductRepository().slug_exists("tea", exclude_id=3) is True
        assert fake_db.calls[0][1] == ["tea", 3]

    def test_decrement_inventory_guarded(self, fake_db):
        fake_db.queue(rowcount=0)
        assert ProductRepository().decrement_inventory(fake_db, 3, 5) is False
        assert "inventory >= %s" in fake_db.statements[0]


class TestOrderRepository:
    """Orders come back with their items in API shape."""

    def test_list_with_items_reconstructs(self, fake_db):
        fake_db.queue([{
            "id": 9, "user_id": "5", "total": "22.50", "status": "pending",
            "payment_details": '{"card": "x"}', "shipping_address": '{"city": "Kandy"}',
            "customer_first_name": "Ann", "customer_email": "ann@shop.test",
            "item_ids": "1\x1f2", "item_product_ids": "4\x1f0", "item_names": "Tea, large\x1fOil",
            "item_quantities": "2\x1f1", "item_prices": "5.00\x1f12.50",
        }])
        orders = OrderRepository().list_with_items(user_id=5)

        assert fake_db.calls[0][1] == [5]
        assert "WHERE o.user_id = %s" in fake_db.statements[0]
        order = orders[0]
        assert order["user_id"] == 5
        assert order["total"] == 22.5
        assert order["payment_details"] == {"card": "x"}
        assert order["shipping_address"] == {"city": "Kandy"}
        assert order["customer"]["first_name"] == "Ann"
        assert order["items"] == [
            {"id": 1, "product_id": 4, "name": "Tea, large", "quantity": 2, "price": 5.0},
            {"id": 2, "product_id": None, "name": "Oil", "quantity": 1, "price": 12.5},
        ]

    def test_list_all_orders_has_no_where(self, fake_db):
        OrderRepository().list_with_items()
        assert "WHERE" not in fake_db.statements[0]
        assert fake_db.calls[0][1] is None

    def test_get_with_items_scoped_to_owner(self, fake_db):
        fake_db.queue([
            {"id": 9, "user_id": 5, "total": 10, "shipping_address": "not json",
             "item_id": 1, "item_product_id": 4, "item_name": "Tea", "item_quantity": 2, "item_price": "5"},
        ])
        order = OrderRepository().get_with_items("9", user_id=5)
        assert fake_db.calls[0][1] == [9, 5]
        assert order["shipping_address"] == "not json"
        assert order["items"] == [{"id": 1, "product_id": 4, "name": "Tea", "quantity": 2, "price": 5.0}]

    def test_get_with_items_missing(self, fake_db):
        fake_db.queue([])
        assert OrderRepository().get_with_items(9) is None

    def test_items_for_orders_single_query(self, fake_db):
        fake_db.queue([
            {"order_id": 1, "id": 10, "product_id": 4, "name": "Tea", "quantity": 1, "price": "5"},
            {"order_id": 2, "id": 11, "product_id": 5, "name": "Oil", "quantity": 3, "price": "2"},
        ])
        grouped = OrderRepository().items_for_orders([1, 2])
        assert fake_db.calls[0][1] == [[1, 2]]
        assert grouped[2] == [{"id": 11, "product_id": 5, "name": "Oil", "quantity": 3, "price": 2.0}]

    def test_items_for_no_orders(self, fake_db):
        assert OrderRepository().items_for_orders([]) == {}
        assert fake_db.calls == []


class TestCartRepository:

    def test_add_item_accumulates(self, fake_db):
        fake_db.queue([{"id": 1, "product_id": 4, "quantity": 3}])
        assert CartRepository().add_item(5, 4, 1)["quantity"] == 3
        assert "ON CONFLICT (user_id, product_id)" in fake_db.statements[0]

    def test_clear_inside_transaction(self, fake_db):
        fake_db.queue(rowcount=2)
        assert CartRepository().clear(5, tx=fake_db) == 2

    def test_wishlist_add_is_idempotent(self, fake_db):
        fake_db.queue(rowcount=1).queue(rowcount=0)
        repo = WishlistRepository()
        assert repo.add(5, 4) is True
        assert repo.add(5, 4) is False


class TestAnalyticsRepository:

    def test_totals(self, fake_db):
        fake_db.queue([{"users": 3, "products": 8, "orders": 2, "revenue": "41.50"}])
        assert AnalyticsRepository().totals() == {"revenue": 41.5, "orders": 2, "users": 3, "products": 8}

    def test_top_products(self, fake_db):
        fake_db.queue([{"id": "4", "name": "Tea", "price": "5", "total_sold": "7", "total_revenue": "35"}])
        top = AnalyticsRepository().top_products(3)
        assert top == [{"id": 4, "name": "Tea", "price": 5.0, "total_sold": 7, "total_revenue": 35.0}]
        assert fake_db.calls[0][1] == [3]
