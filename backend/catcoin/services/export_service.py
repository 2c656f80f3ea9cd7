# Overview: Read-only renderings of the full sale ledger (CSV / JSON downloads).

from __future__ import annotations

import csv
import io
import json

from .sales_service import list_sales

CSV_HEADER = ["ID", "Date", "Subtotal", "Tax", "Total", "Payment Method", "Items"]


def _items_summary(sale) -> str:
    return "; ".join(f"{line.name}({line.quantity})" for line in sale.lines)


def sales_csv(start_date: str | None = None, end_date: str | None = None) -> str:
    """
    One row per sale, newest first.

    Money columns are fixed two-decimal strings; Items is "name(qty); ...".
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for sale in list_sales(start_date=start_date, end_date=end_date):
        d = sale.to_dict()
        writer.writerow([
            sale.id,
            d["created_at"],
            f"{sale.subtotal_cents / 100:.2f}",
            f"{sale.tax_cents / 100:.2f}",
            f"{sale.total_cents / 100:.2f}",
            sale.payment_method,
            _items_summary(sale),
        ])

    return buf.getvalue()


def sales_json(start_date: str | None = None, end_date: str | None = None) -> str:
    sales = [s.to_dict() for s in list_sales(start_date=start_date, end_date=end_date)]
    return json.dumps(sales, indent=2, ensure_ascii=False)
