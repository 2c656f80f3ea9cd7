# Overview: Flask CLI command tests (bootstrap, catalog, stats reconcile, export).

import pytest

from catcoin.models import DailyStat, Product
from catcoin.services import checkout_service
from catcoin.services.catalog_service import DEFAULT_CATALOG


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_init_seeds_empty_catalog(runner, db_session):
    result = runner.invoke(args=["system", "init"])

    assert result.exit_code == 0
    assert f"Seeded {len(DEFAULT_CATALOG)} products" in result.output
    assert db_session.query(Product).count() == len(DEFAULT_CATALOG)

    again = runner.invoke(args=["system", "init"])
    assert "seed skipped" in again.output
    assert db_session.query(Product).count() == len(DEFAULT_CATALOG)


def test_init_no_seed(runner, db_session):
    result = runner.invoke(args=["system", "init", "--no-seed"])

    assert result.exit_code == 0
    assert db_session.query(Product).count() == 0


def test_reset_db_requires_confirmation(runner, db_session, latte):
    result = runner.invoke(args=["system", "reset-db"], input="n\n")

    assert result.exit_code != 0
    assert db_session.query(Product).count() == 1


def test_catalog_seed_and_low_stock(runner, db_session, make_product):
    make_product(name="Cat Cake Slice", stock=2)

    seeded = runner.invoke(args=["catalog", "seed"])
    assert "already has products" in seeded.output

    result = runner.invoke(args=["catalog", "low-stock", "--threshold", "5"])
    assert result.exit_code == 0
    assert "Cat Cake Slice" in result.output

    result = runner.invoke(args=["catalog", "low-stock", "--threshold", "0"])
    assert "No low-stock products." in result.output


def test_reconcile_pass(runner, db_session, latte, cart_line, frozen_clock):
    checkout_service.commit_sale([cart_line(latte, 2)], "card")

    result = runner.invoke(args=["stats", "reconcile", "--date", "2026-03-14"])

    assert result.exit_code == 0
    assert "PASS 2026-03-14" in result.output


def test_reconcile_mismatch_exits_nonzero_until_repaired(runner, db_session, latte, cart_line, frozen_clock):
    checkout_service.commit_sale([cart_line(latte, 2)], "card")
    db_session.query(DailyStat).one().order_count = 3
    db_session.commit()

    result = runner.invoke(args=["stats", "reconcile", "--all"])
    assert result.exit_code == 1
    assert "FAIL 2026-03-14: order_count" in result.output

    repaired = runner.invoke(args=["stats", "reconcile", "--all", "--repair"])
    assert repaired.exit_code == 0
    assert "FIXED 2026-03-14" in repaired.output

    db_session.expire_all()
    assert db_session.query(DailyStat).one().order_count == 1


def test_reconcile_rejects_bad_arguments(runner, db_session):
    assert runner.invoke(args=["stats", "reconcile", "--date", "soon"]).exit_code == 2
    assert runner.invoke(args=["stats", "reconcile", "--date", "2026-03-14", "--all"]).exit_code == 2


def test_reconcile_all_on_empty_ledger(runner, db_session):
    result = runner.invoke(args=["stats", "reconcile", "--all"])
    assert result.exit_code == 0
    assert "No sales in ledger." in result.output


def test_export_csv_to_file(runner, db_session, latte, cart_line, frozen_clock, tmp_path):
    checkout_service.commit_sale([cart_line(latte, 2)], "card")
    out = tmp_path / "sales.csv"

    result = runner.invoke(args=["sales", "export", "--format", "csv", "--output", str(out)])

    assert result.exit_code == 0
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "ID,Date,Subtotal,Tax,Total,Payment Method,Items"
    assert lines[1].endswith(",9.00,0.72,9.72,card,Catnip Latte(2)")


def test_export_json_to_stdout(runner, db_session, latte, cart_line, frozen_clock):
    checkout_service.commit_sale([cart_line(latte, 1)], "cash")

    result = runner.invoke(args=["sales", "export", "--format", "json"])

    assert result.exit_code == 0
    assert '"payment_method": "cash"' in result.output
