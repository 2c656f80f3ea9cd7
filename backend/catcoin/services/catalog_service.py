# backend/catcoin/services/catalog_service.py
"""
Catalog Store

Product records: name, price, category, stock and display emoji.
- list_products is ordered by category, then name
- update_product is a full replace; there is no partial-field patch
- delete_product is a hard delete with no check against the sale ledger
  (sale lines keep their own snapshot of name and price)
- stock is only ever decremented by Sale-Commit; inventory edits set it
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product
from ..models.catalog import DEFAULT_EMOJI
from .concurrency import write_lock

PRODUCT_FIELD_DEFAULTS = {
    "name": None,
    "price_cents": None,
    "category": "",
    "stock": 0,
    "emoji": DEFAULT_EMOJI,
}

DEFAULT_CATALOG = [
    {"name": "Catnip Latte", "price_cents": 450, "category": "Drinks", "stock": 50, "emoji": "☕"},
    {"name": "Tuna Sandwich", "price_cents": 799, "category": "Food", "stock": 30, "emoji": "🥪"},
    {"name": "Salmon Sushi Roll", "price_cents": 1299, "category": "Food", "stock": 25, "emoji": "🍱"},
    {"name": "Milk Tea", "price_cents": 550, "category": "Drinks", "stock": 40, "emoji": "🧋"},
    {"name": "Fish Cookies", "price_cents": 399, "category": "Snacks", "stock": 60, "emoji": "🍪"},
    {"name": "Paw-cakes", "price_cents": 899, "category": "Food", "stock": 20, "emoji": "🥞"},
    {"name": "Meow Muffin", "price_cents": 425, "category": "Snacks", "stock": 35, "emoji": "🧁"},
    {"name": "Kitty Smoothie", "price_cents": 650, "category": "Drinks", "stock": 45, "emoji": "🥤"},
    {"name": "Purr-rito", "price_cents": 999, "category": "Food", "stock": 28, "emoji": "🌯"},
    {"name": "Cat Cake Slice", "price_cents": 599, "category": "Desserts", "stock": 22, "emoji": "🍰"},
]


def _replace_fields(p: Product, patch: dict) -> None:
    for field, default in PRODUCT_FIELD_DEFAULTS.items():
        value = patch.get(field)
        setattr(p, field, default if value is None else value)


def list_products() -> list[Product]:
    return (
        db.session.query(Product)
        .order_by(Product.category.asc(), Product.name.asc(), Product.id.asc())
        .all()
    )


def get_product(product_id: int) -> Product | None:
    return db.session.get(Product, product_id)


def list_low_stock(threshold: int | None = None) -> list[Product]:
    """
    Products at or below the threshold, lowest stock first.

    Args:
        threshold: inclusive upper bound (LOW_STOCK_THRESHOLD if None)
    """
    if threshold is None:
        threshold = current_app.config["LOW_STOCK_THRESHOLD"]

    return (
        db.session.query(Product)
        .filter(Product.stock <= threshold)
        .order_by(Product.stock.asc(), Product.name.asc(), Product.id.asc())
        .all()
    )


def create_product(*, patch: dict) -> Product:
    """
    Create product using a validated patch dict.

    Missing optional fields take their defaults (category "", stock 0,
    emoji 📦).
    """
    with write_lock():
        p = Product()
        _replace_fields(p, patch)
        db.session.add(p)
        db.session.commit()

    current_app.logger.info("Created product id=%s name=%r stock=%s", p.id, p.name, p.stock)
    return p


def update_product(*, product_id: int, patch: dict) -> Product | None:
    """
    Replace a product record.

    Every mutable field is overwritten; fields absent from the patch are
    reset to their defaults. Last write wins.

    Returns:
        Updated product, or None if not found
    """
    with write_lock():
        p = db.session.get(Product, product_id)
        if not p:
            return None

        _replace_fields(p, patch)
        db.session.commit()

    current_app.logger.info("Replaced product id=%s stock=%s", p.id, p.stock)
    return p


def delete_product(*, product_id: int) -> bool:
    """
    Delete a product.

    Returns:
        True if deleted, False if not found
    """
    with write_lock():
        p = db.session.get(Product, product_id)
        if not p:
            return False

        db.session.delete(p)
        db.session.commit()

    current_app.logger.info("Deleted product id=%s", product_id)
    return True


def seed_default_catalog() -> int:
    """Insert the default café menu when the catalog is empty. Returns rows added."""
    with write_lock():
        if db.session.query(Product).count() > 0:
            return 0

        for row in DEFAULT_CATALOG:
            db.session.add(Product(**row))
        db.session.commit()

    return len(DEFAULT_CATALOG)
