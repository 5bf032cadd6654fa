"""
db/seed.py
----------
Sample catalogue data for development databases.
Rows are matched by slug, so seeding twice inserts nothing new.
"""

import json

from db.executor import transaction
from utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_CATEGORIES = [
    {"name": "Herbal Teas", "slug": "herbal-teas", "description": "Loose leaf and bagged herbal infusions"},
    {"name": "Essential Oils", "slug": "essential-oils", "description": "Pure plant extracts for aromatherapy"},
    {"name": "Skin Care", "slug": "skin-care", "description": "Natural creams, balms and soaps"},
    {"name": "Supplements", "slug": "supplements", "description": "Herbal capsules and powders"},
]

SAMPLE_PRODUCTS = [
    {"name": "Organic Green Tea", "slug": "organic-green-tea", "category": "herbal-teas",
     "description": "Hand-picked green tea leaves from the central highlands.",
     "price": 1250.00, "sale_price": None, "inventory": 120, "is_featured": True},
    {"name": "Chamomile Calm Tea", "slug": "chamomile-calm-tea", "category": "herbal-teas",
     "description": "Soothing chamomile flowers for a restful evening.",
     "price": 980.00, "sale_price": 850.00, "inventory": 80, "is_featured": False},
    {"name": "Lavender Essential Oil", "slug": "lavender-essential-oil", "category": "essential-oils",
     "description": "Steam distilled lavender oil, 10 ml.",
     "price": 2400.00, "sale_price": None, "inventory": 45, "is_featured": True},
    {"name": "Eucalyptus Oil", "slug": "eucalyptus-oil", "category": "essential-oils",
     "description": "Refreshing eucalyptus oil for steam inhalation.",
     "price": 1600.00, "sale_price": None, "inventory": 60, "is_featured": False},
    {"name": "Aloe Vera Gel", "slug": "aloe-vera-gel", "category": "skin-care",
     "description": "Cooling gel made from fresh aloe leaves.",
     "price": 1100.00, "sale_price": 990.00, "inventory": 150, "is_featured": True},
    {"name": "Turmeric Capsules", "slug": "turmeric-capsules", "category": "supplements",
     "description": "Turmeric root extract with black pepper, 60 capsules.",
     "price": 3200.00, "sale_price": None, "inventory": 30, "is_featured": False},
]


def seed() -> dict:
    """
    Insert the sample categories and products that are not there yet.

    Returns:
        Dict with the number of inserted 'categories' and 'products'.
    """
    inserted = {"categories": 0, "products": 0}
    with transaction() as tx:
        category_ids = {}
        for category in SAMPLE_CATEGORIES:
            result = tx.execute(
                "INSERT INTO categories (name, slug, description) VALUES (%s, %s, %s) "
                "ON CONFLICT (slug) DO NOTHING;",
                (category["name"], category["slug"], category["description"]),
            )
            inserted["categories"] += result.rowcount
            row = tx.fetch_one("SELECT id FROM categories WHERE slug = %s;", (category["slug"],))
            category_ids[category["slug"]] = row["id"]

        for product in SAMPLE_PRODUCTS:
            result = tx.execute(
                """
                INSERT INTO products (name, slug, description, price, sale_price, inventory,
                                      category_id, images, is_featured, is_published)
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, TRUE)
                ON CONFLICT (slug) DO NOTHING;
                """,
                (
                    product["name"], product["slug"], product["description"], product["price"],
                    product["sale_price"], product["inventory"], category_ids[product["category"]],
                    json.dumps([f"/images/products/{product['slug']}.jpg"]), product["is_featured"],
                ),
            )
            inserted["products"] += result.rowcount

    logger.info(f"Seeded {inserted['categories']} categories and {inserted['products']} products")
    return inserted
