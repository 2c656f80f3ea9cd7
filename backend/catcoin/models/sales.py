from __future__ import annotations

from ..extensions import db
from catcoin.money import cents_to_amount
from catcoin.time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "card")


class Sale(db.Model):
    """
    Committed sale (append-only ledger entry).

    WHY: The ledger is the source of truth that daily_stats is reconciled
    against, so rows are written once by Sale-Commit and never updated.

    INVARIANTS (at creation):
    - subtotal_cents == sum(line.line_total_cents)
    - total_cents == subtotal_cents + tax_cents
    - business_date == UTC date of created_at
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_business_date", "business_date"),
        db.Index("ix_sales_created_at", "created_at"),
        db.CheckConstraint("total_cents = subtotal_cents + tax_cents", name="ck_sales_total"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    subtotal_cents = db.Column(db.Integer, nullable=False)
    tax_cents = db.Column(db.Integer, nullable=False)
    total_cents = db.Column(db.Integer, nullable=False)

    payment_method = db.Column(db.String(16), nullable=False)

    # Date key used for the daily_stats rollup (YYYY-MM-DD)
    business_date = db.Column(db.String(10), nullable=False)

    # Assigned by the service inside the commit transaction
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    lines = db.relationship(
        "SaleLine",
        backref="sale",
        lazy=True,
        order_by="SaleLine.position",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Sale id={self.id} total_cents={self.total_cents} date={self.business_date}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "subtotal": cents_to_amount(self.subtotal_cents),
            "tax": cents_to_amount(self.tax_cents),
            "total": cents_to_amount(self.total_cents),
            "payment_method": self.payment_method,
            "business_date": self.business_date,
            "created_at": to_utc_z(self.created_at),
            "items": [line.to_dict() for line in self.lines],
        }


class SaleLine(db.Model):
    """
    Line item captured by value.

    product_id is deliberately not a foreign key: products may be deleted
    while their sales remain in the ledger.
    """
    __tablename__ = "sale_lines"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_sale_lines_quantity"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    sale_id = db.Column(db.Integer, db.ForeignKey("sales.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    product_id = db.Column(db.Integer, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    unit_price_cents = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    line_total_cents = db.Column(db.Integer, nullable=False)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "price": cents_to_amount(self.unit_price_cents),
            "quantity": self.quantity,
            "line_total": cents_to_amount(self.line_total_cents),
        }
