# Overview: Ledger downloads (CSV / JSON) and the X-report.

import csv
import io
import json
from datetime import datetime

import pytest

from catcoin.services import checkout_service, export_service, reporting_service


@pytest.fixture
def two_sales(db_session, make_product, cart_line, frozen_clock):
    latte = make_product(name="Catnip Latte", price_cents=450, stock=50, emoji="☕")
    sushi = make_product(name="Salmon Sushi Roll", price_cents=1299, stock=25, emoji="🍱")

    first = checkout_service.commit_sale([cart_line(latte, 2)], "card")
    frozen_clock.set(datetime(2026, 3, 14, 15, 30, 0))
    second = checkout_service.commit_sale([cart_line(latte, 1), cart_line(sushi, 1)], "cash")
    return first.id, second.id


class TestCsvExport:

    def test_header_and_rows_newest_first(self, two_sales):
        first_id, second_id = two_sales

        rows = list(csv.reader(io.StringIO(export_service.sales_csv())))

        assert rows[0] == ["ID", "Date", "Subtotal", "Tax", "Total", "Payment Method", "Items"]
        assert rows[1] == [
            str(second_id), "2026-03-14T15:30:00Z", "17.49", "1.40", "18.89", "cash",
            "Catnip Latte(1); Salmon Sushi Roll(1)",
        ]
        assert rows[2] == [
            str(first_id), "2026-03-14T12:00:00Z", "9.00", "0.72", "9.72", "card", "Catnip Latte(2)",
        ]

    def test_empty_ledger_is_header_only(self, db_session):
        assert export_service.sales_csv() == "ID,Date,Subtotal,Tax,Total,Payment Method,Items\n"

    def test_date_bounds(self, two_sales):
        assert export_service.sales_csv("2026-03-15", None).count("\n") == 1

    def test_route(self, client, two_sales):
        resp = client.get("/api/export/sales/csv")

        assert resp.status_code == 200
        assert resp.mimetype == "text/csv"
        assert resp.headers["Content-Disposition"] == "attachment; filename=sales.csv"
        assert resp.get_data(as_text=True).startswith("ID,Date,")

        assert client.get("/api/export/sales/csv?start=bad").status_code == 400


class TestJsonExport:

    def test_full_records(self, two_sales):
        data = json.loads(export_service.sales_json())

        assert [s["id"] for s in data] == list(reversed(two_sales))
        assert data[0]["items"][1]["name"] == "Salmon Sushi Roll"
        assert data[1]["total"] == 9.72

    def test_route(self, client, two_sales):
        resp = client.get("/api/export/sales/json")

        assert resp.status_code == 200
        assert resp.headers["Content-Disposition"] == "attachment; filename=sales.json"
        assert len(json.loads(resp.get_data(as_text=True))) == 2


class TestXReport:

    def test_summary(self, two_sales):
        report = reporting_service.x_report("2026-03-14")

        assert report["total_transactions"] == 2
        assert report["total_sales"] == 28.61
        assert report["subtotal"] == 26.49
        assert report["tax_collected"] == 2.12
        assert report["items_sold"] == 4
        assert report["by_payment_method"] == {
            "cash": {"transactions": 1, "total_sales": 18.89},
            "card": {"transactions": 1, "total_sales": 9.72},
        }
        assert report["top_items"][0] == {"product_id": report["top_items"][0]["product_id"],
                                          "name": "Catnip Latte", "quantity": 3}

    def test_empty_day(self, db_session):
        report = reporting_service.x_report("2026-01-01")

        assert report["total_transactions"] == 0
        assert report["total_sales"] == 0.0
        assert report["top_items"] == []

    def test_bad_date(self, db_session):
        with pytest.raises(reporting_service.ReportError):
            reporting_service.x_report("14/03/2026")

    def test_route(self, client, two_sales):
        resp = client.get("/api/reports/x-report?date=2026-03-14")
        assert resp.status_code == 200
        assert resp.get_json()["total_transactions"] == 2

        assert client.get("/api/reports/x-report?date=nope").status_code == 400
