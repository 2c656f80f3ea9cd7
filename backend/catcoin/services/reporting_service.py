# Overview: Service-layer operations for reporting; derived from the sale ledger on demand.

from __future__ import annotations

from catcoin.money import cents_to_amount
from catcoin.time_utils import business_date, parse_iso_date, to_utc_z, utcnow
from ..models.sales import PAYMENT_METHODS
from .sales_service import list_sales_for_date


class ReportError(Exception):
    """Raised when report generation fails."""
    pass


def x_report(date: str | None = None) -> dict:
    """
    Mid-day register summary (X-report) for one business date.

    Recomputed from the ledger, not from daily_stats, so it can be compared
    with the stored aggregate.
    """
    try:
        date = parse_iso_date(date) or business_date()
    except ValueError:
        raise ReportError("date must be an ISO date (YYYY-MM-DD)")

    sales = list_sales_for_date(date)

    by_method = {m: {"transactions": 0, "total_cents": 0} for m in PAYMENT_METHODS}
    items_sold = 0
    product_qty: dict[int, dict] = {}
    for sale in sales:
        bucket = by_method.setdefault(sale.payment_method, {"transactions": 0, "total_cents": 0})
        bucket["transactions"] += 1
        bucket["total_cents"] += sale.total_cents
        for line in sale.lines:
            items_sold += line.quantity
            entry = product_qty.setdefault(line.product_id, {"product_id": line.product_id, "name": line.name, "quantity": 0})
            entry["quantity"] += line.quantity

    top_items = sorted(product_qty.values(), key=lambda e: (-e["quantity"], e["name"]))[:5]

    return {
        "date": date,
        "generated_at": to_utc_z(utcnow()),
        "total_transactions": len(sales),
        "total_sales": cents_to_amount(sum(s.total_cents for s in sales)),
        "subtotal": cents_to_amount(sum(s.subtotal_cents for s in sales)),
        "tax_collected": cents_to_amount(sum(s.tax_cents for s in sales)),
        "items_sold": items_sold,
        "by_payment_method": {
            method: {
                "transactions": bucket["transactions"],
                "total_sales": cents_to_amount(bucket["total_cents"]),
            }
            for method, bucket in by_method.items()
        },
        "top_items": top_items,
    }
