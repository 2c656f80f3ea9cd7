from __future__ import annotations

from ..extensions import db
from catcoin.money import cents_to_amount
from catcoin.time_utils import to_utc_z

DEFAULT_EMOJI = "📦"


class Product(db.Model):
    """
    Catalog entry sold at the register.

    Price is stored in cents; the JSON view presents it as a currency amount.

    STOCK:
    - stock is the live on-hand count, decremented by Sale-Commit only
    - inventory edits replace the whole record (last write wins)
    - historical sales keep their own snapshot of name and price, so deleting
      a product never invalidates the ledger
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_name", "category", "name"),
        db.Index("ix_products_stock", "stock"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False, default="")

    # Authoritative storage in cents (frontend may only format for display)
    price_cents = db.Column(db.Integer, nullable=False)

    stock = db.Column(db.Integer, nullable=False, default=0)
    emoji = db.Column(db.String(16), nullable=False, default=DEFAULT_EMOJI)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": cents_to_amount(self.price_cents),
            "category": self.category,
            "stock": self.stock,
            "emoji": self.emoji,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
