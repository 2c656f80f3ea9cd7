"""
Sale Ledger

Append-only record of committed sales.

WHY: daily_stats is reconciled against this table after the fact, so a sale
is written exactly once (by Sale-Commit, inside its transaction) and never
updated or deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from ..extensions import db
from ..models import Sale, SaleLine
from catcoin.money import tax_cents_for
from catcoin.time_utils import business_date


@dataclass(frozen=True)
class LineInput:
    """One cart line: the price is the one captured when it was added."""
    product_id: int
    unit_price_cents: int
    quantity: int

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity


@dataclass(frozen=True)
class Totals:
    subtotal_cents: int
    tax_cents: int
    total_cents: int


def compute_totals(lines: list[LineInput], tax_rate: Decimal) -> Totals:
    """
    subtotal = sum(price * qty); tax = subtotal * rate (half-up to the cent);
    total = subtotal + tax.

    The register display uses the same arithmetic.
    """
    subtotal = sum(line.line_total_cents for line in lines)
    tax = tax_cents_for(subtotal, tax_rate)
    return Totals(subtotal_cents=subtotal, tax_cents=tax, total_cents=subtotal + tax)


def append_sale(
    *,
    lines: list[LineInput],
    names: dict[int, str],
    totals: Totals,
    payment_method: str,
    created_at: datetime,
) -> Sale:
    """
    Stage a sale and its lines in the current transaction.

    Caller owns the transaction (commit / rollback). Flushes so the sale id
    is assigned before the aggregate is touched.
    """
    sale = Sale(
        subtotal_cents=totals.subtotal_cents,
        tax_cents=totals.tax_cents,
        total_cents=totals.total_cents,
        payment_method=payment_method,
        business_date=business_date(created_at),
        created_at=created_at,
    )

    for position, line in enumerate(lines, start=1):
        sale.lines.append(
            SaleLine(
                position=position,
                product_id=line.product_id,
                name=names[line.product_id],
                unit_price_cents=line.unit_price_cents,
                quantity=line.quantity,
                line_total_cents=line.line_total_cents,
            )
        )

    db.session.add(sale)
    db.session.flush()
    return sale


def get_sale(sale_id: int) -> Sale | None:
    return db.session.get(Sale, sale_id)


def list_sales(start_date: str | None = None, end_date: str | None = None) -> list[Sale]:
    """
    All sales, newest first. Optional inclusive business-date bounds.
    """
    query = db.session.query(Sale)
    if start_date:
        query = query.filter(Sale.business_date >= start_date)
    if end_date:
        query = query.filter(Sale.business_date <= end_date)
    return query.order_by(Sale.created_at.desc(), Sale.id.desc()).all()


def list_sales_for_date(date: str) -> list[Sale]:
    return list_sales(start_date=date, end_date=date)
