"""
services/product_service.py
----------------------------
Business logic for the product catalogue and its categories.
"""

import json
import re
from typing import Mapping, Optional

from exceptions import NotFoundError, ValidationError
from models.filters import ProductFilter
from models.identity import Identity
from models.pagination import PageRequest, PageResult
from repositories.category_repo import CategoryRepository
from repositories.product_repo import ProductRepository
from security.auth import admin_only
from utils.identifiers import normalize_id, require_id
from utils.logger import get_logger

logger = get_logger(__name__)

_PRODUCT_TEXT = ("name", "description", "images")
_PRODUCT_FLAGS = ("is_featured", "is_published")


def create_slug(text: str) -> str:
    """'Organic Green Tea!' -> 'organic-green-tea'"""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
    return slug.strip("-") or "item"


def unique_slug(name: str, exists) -> str:
    """First of slug, slug-1, slug-2, ... for which `exists(slug)` is False."""
    base = create_slug(name)
    slug, counter = base, 1
    while exists(slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


class ProductService:
    """Catalogue queries for shoppers and catalogue management for admins."""

    def __init__(self):
        self.products = ProductRepository()
        self.categories = CategoryRepository()

    # ── SHOP ──────────────────────────────────────────────

    def list_public(self, params: Optional[Mapping] = None) -> list[dict]:
        """
        Published products with their category.

        Args:
            params: Request filters (`query`, `categoryId`, `isFeatured`).

        Raises:
            ValidationError: On unsupported filter keys or malformed values.
        """
        filters = ProductFilter.from_mapping(params)
        filters.is_published = True
        return self.products.list_with_category(filters)

    def get_product(self, product_id) -> dict:
        product = self.products.get_with_category(product_id)
        if product is None:
            raise NotFoundError("Product", normalize_id(product_id))
        return product

    def list_categories(self) -> list[dict]:
        return self.categories.list_with_product_count()

    # ── ADMIN: PRODUCTS ───────────────────────────────────

    @admin_only
    def list_admin(self, identity: Identity, params: Optional[Mapping], page: PageRequest) -> PageResult:
        """Every product (published or not), one page at a time."""
        return self.products.paginate(ProductFilter.from_mapping(params), page)

    @admin_only
    def create_product(self, identity: Identity, data: Mapping) -> dict:
        """
        Create a product with a unique slug derived from its name.

        Raises:
            ValidationError: If name or price are missing or invalid.
        """
        fields = self._product_fields(data, require_all=True)
        fields["slug"] = unique_slug(fields["name"], self.products.slug_exists)
        return self.products.create(fields)

    @admin_only
    def update_product(self, identity: Identity, product_id, data: Mapping) -> dict:
        pid = require_id(product_id)
        fields = self._product_fields(data, require_all=False)
        if "name" in fields:
            fields["slug"] = unique_slug(
                fields["name"], lambda s: self.products.slug_exists(s, exclude_id=pid)
            )
        return self.products.update(pid, fields)

    @admin_only
    def delete_product(self, identity: Identity, product_id) -> bool:
        return self.products.remove(product_id)

    # ── ADMIN: CATEGORIES ─────────────────────────────────

    @admin_only
    def create_category(self, identity: Identity, data: Mapping) -> dict:
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("Category name is required", field="name")
        fields = {
            "name": name,
            "slug": unique_slug(name, self.categories.slug_exists),
            "description": data.get("description"),
            "image": data.get("image"),
        }
        return self.categories.create(fields)

    @admin_only
    def update_category(self, identity: Identity, category_id, data: Mapping) -> dict:
        cid = require_id(category_id)
        fields = {k: data[k] for k in ("name", "description", "image") if k in data}
        if "name" in fields:
            fields["name"] = str(fields["name"] or "").strip()
            if not fields["name"]:
                raise ValidationError("Category name is required", field="name")
            fields["slug"] = unique_slug(
                fields["name"], lambda s: self.categories.slug_exists(s, exclude_id=cid)
            )
        return self.categories.update(cid, fields)

    @admin_only
    def delete_category(self, identity: Identity, category_id) -> bool:
        return self.categories.remove(category_id)

    # ── HELPERS ───────────────────────────────────────────

    def _product_fields(self, data: Mapping, require_all: bool) -> dict:
        """Validate and coerce a product payload into column values."""
        fields: dict = {}
        for key in _PRODUCT_TEXT:
            if key in data:
                fields[key] = data[key]
        if isinstance(fields.get("images"), (list, tuple)):
            fields["images"] = json.dumps(list(fields["images"]))
        if "name" in fields or require_all:
            name = str(fields.get("name") or "").strip()
            if not name:
                raise ValidationError("Product name is required", field="name")
            fields["name"] = name

        for key in ("price", "sale_price"):
            if key in data and data[key] not in (None, ""):
                fields[key] = _non_negative(data[key], key, float)
            elif key == "price" and require_all:
                raise ValidationError("Product price is required", field="price")
            elif key in data:
                fields[key] = None

        if "inventory" in data:
            fields["inventory"] = _non_negative(data["inventory"], "inventory", int)
        if "category_id" in data:
            fields["category_id"] = (
                require_id(data["category_id"], "category_id") if data["category_id"] else None
            )
        for key in _PRODUCT_FLAGS:
            if key in data:
                fields[key] = bool(data[key])

        if not fields:
            raise ValidationError("No product fields given")
        return fields


def _non_negative(value, name: str, kind):
    try:
        number = kind(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{name}' must be a number, got {value!r}", field=name) from e
    if number < 0:
        raise ValidationError(f"'{name}' cannot be negative", field=name)
    return number
