# Overview: Flask CLI command groups for the register backend.

# backend/catcoin/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--no-seed]
#   Idempotent bootstrap: creates tables and seeds the default menu if the catalog is empty.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Catalog:
# - python -m flask catalog seed
#   Insert the default café menu (only when the catalog is empty).
# - python -m flask catalog low-stock [--threshold 10]
#   List products at or below the threshold.
#
# Daily stats:
# - python -m flask stats reconcile --date 2026-01-31 [--repair]
#   Compare daily_stats with the sale ledger for one date.
# - python -m flask stats reconcile --all [--repair]
#   Same, for every date that has sales.
#
# Sales:
# - python -m flask sales export --format csv [--output sales.csv] [--start 2026-01-01] [--end 2026-01-31]
#   Write the ledger as CSV or JSON (stdout by default).

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .services import catalog_service, export_service, stats_service
from .validation import ValidationError
from .time_utils import business_date, parse_iso_date


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--seed/--no-seed', default=None, help='Seed the default menu (default: SEED_ON_INIT)')
@with_appcontext
def init_system(seed):
    """
    Create tables and (optionally) seed the default catalog.

    Safe to run repeatedly: existing tables and products are left alone.
    """
    click.echo("START Initializing Cat Coin register...")

    db.create_all()
    click.echo("PASS Tables ready")

    if seed is None:
        seed = current_app.config.get("SEED_ON_INIT", True)

    if seed:
        added = catalog_service.seed_default_catalog()
        if added:
            click.echo(f"PASS Seeded {added} products")
        else:
            click.echo("PASS Catalog already populated; seed skipped")

    click.echo("DONE Initialization complete")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to seed.")


@click.group('catalog')
def catalog_group():
    """Catalog inspection and seeding."""


@catalog_group.command('seed')
@with_appcontext
def seed_catalog():
    """Insert the default menu when the catalog is empty."""
    added = catalog_service.seed_default_catalog()
    if added:
        click.echo(f"PASS Seeded {added} products")
    else:
        click.echo("SKIP Catalog already has products")


@catalog_group.command('low-stock')
@click.option('--threshold', type=int, default=None, help='Inclusive stock threshold')
@with_appcontext
def low_stock_cli(threshold):
    """List products at or below the stock threshold."""
    products = catalog_service.list_low_stock(threshold)
    if not products:
        click.echo("No low-stock products.")
        return

    click.echo(f"{'ID':<6} {'Stock':>6}  Name")
    for p in products:
        click.echo(f"{p.id:<6} {p.stock:>6}  {p.emoji} {p.name}")


@click.group('stats')
def stats_group():
    """Daily aggregate maintenance."""


@stats_group.command('reconcile')
@click.option('--date', 'date_str', default=None, help='YYYY-MM-DD (default: today)')
@click.option('--all', 'all_dates', is_flag=True, help='Every date present in the ledger')
@click.option('--repair', is_flag=True, help='Overwrite mismatching rows with ledger values')
@with_appcontext
def reconcile_cli(date_str, all_dates, repair):
    """
    Compare daily_stats with the sale ledger.

    Exit code 1 when a mismatch remains (unrepaired).
    """
    if all_dates and date_str:
        raise click.UsageError("Use either --date or --all, not both")

    if all_dates:
        dates = stats_service.ledger_dates()
    else:
        try:
            dates = [parse_iso_date(date_str) or business_date()]
        except ValueError:
            raise click.BadParameter("must be YYYY-MM-DD", param_hint="--date")

    if not dates:
        click.echo("No sales in ledger.")
        return

    unresolved = 0
    for date in dates:
        try:
            result = stats_service.reconcile(date, repair=repair)
        except ValidationError as exc:
            raise click.BadParameter(str(exc), param_hint="--date")

        if result["matches"]:
            click.echo(f"PASS {date}: orders={result['stored']['order_count']} "
                       f"total_cents={result['stored']['total_sales_cents']}")
        elif result["repaired"]:
            click.echo(f"FIXED {date}: {', '.join(result['mismatched_fields'])} "
                       f"(stored={result['stored']} ledger={result['ledger']})")
        else:
            unresolved += 1
            click.echo(f"FAIL {date}: {', '.join(result['mismatched_fields'])} "
                       f"(stored={result['stored']} ledger={result['ledger']})")

    if unresolved:
        raise SystemExit(1)


@click.group('sales')
def sales_group():
    """Sale ledger utilities."""


@sales_group.command('export')
@click.option('--format', 'fmt', type=click.Choice(['csv', 'json']), default='csv')
@click.option('--output', type=click.Path(dir_okay=False, writable=True), default=None)
@click.option('--start', default=None, help='YYYY-MM-DD (inclusive)')
@click.option('--end', default=None, help='YYYY-MM-DD (inclusive)')
@with_appcontext
def export_sales_cli(fmt, output, start, end):
    """Write the sale ledger as CSV or JSON."""
    try:
        start = parse_iso_date(start)
        end = parse_iso_date(end)
    except ValueError:
        raise click.BadParameter("dates must be YYYY-MM-DD")

    if fmt == 'csv':
        content = export_service.sales_csv(start, end)
    else:
        content = export_service.sales_json(start, end)

    if output:
        with open(output, 'w', encoding='utf-8', newline='') as fh:
            fh.write(content)
        click.echo(f"PASS Wrote {output}")
    else:
        click.echo(content, nl=False)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(stats_group)
    app.cli.add_command(sales_group)
