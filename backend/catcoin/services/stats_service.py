# Overview: Daily aggregate store; per-date rollup maintained by Sale-Commit.

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import DailyStat, Sale
from ..validation import ValidationError
from .concurrency import write_lock
from catcoin.time_utils import business_date, parse_iso_date, shift_date
"""
Daily Aggregate Invariants (authoritative)

- One row per calendar date (ISO YYYY-MM-DD), created lazily by the first
  sale of that date.
- For any date: order_count == number of sales with that business_date, and
  total_sales_cents == sum of their total_cents.
- Rows are incremented in place by Sale-Commit inside its transaction and
  never deleted by normal operation.
- Reads of a date with no row return a zero-valued record, never an error.
"""

TREATS_RULES = {
    "floor_total": lambda total_cents: total_cents // 100,
    "per_order": lambda total_cents: 1,
    "none": lambda total_cents: 0,
}


def treats_for(total_cents: int, rule: str | None = None) -> int:
    """Secondary counter contribution of one sale under the configured rule."""
    if rule is None:
        rule = current_app.config.get("TREATS_RULE", "floor_total")
    try:
        return TREATS_RULES[rule](total_cents)
    except KeyError:
        raise ValueError(f"Unknown TREATS_RULE: {rule!r}")


def _require_date(value: str | None, field: str) -> str:
    try:
        parsed = parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{field} must be an ISO date (YYYY-MM-DD)")
    if parsed is None:
        raise ValidationError(f"{field} is required")
    return parsed


def get_stats_for_date(date: str) -> dict:
    date = _require_date(date, "date")
    row = db.session.query(DailyStat).filter_by(date=date).first()
    if row is None:
        return DailyStat.empty_dict(date)
    return row.to_dict()


def get_today_stats() -> dict:
    return get_stats_for_date(business_date())


def upsert_increment(date: str, amount_cents: int, order_delta: int, treats_delta: int) -> DailyStat:
    """
    Create the row with the deltas as initial values, else add the deltas.

    Runs in the caller's transaction; caller commits.
    """
    row = db.session.query(DailyStat).filter_by(date=date).with_for_update().first()
    if row is None:
        row = DailyStat(
            date=date,
            total_sales_cents=amount_cents,
            order_count=order_delta,
            treats_eaten=treats_delta,
        )
        db.session.add(row)
    else:
        row.total_sales_cents += amount_cents
        row.order_count += order_delta
        row.treats_eaten += treats_delta

    db.session.flush()
    return row


def get_stats_range(start: str | None, end: str | None) -> list[dict]:
    """Inclusive on both ends, newest date first."""
    start = _require_date(start, "start")
    end = _require_date(end, "end")
    if start > end:
        raise ValidationError("start must be on or before end")

    rows = (
        db.session.query(DailyStat)
        .filter(DailyStat.date >= start, DailyStat.date <= end)
        .order_by(DailyStat.date.desc())
        .all()
    )
    return [row.to_dict() for row in rows]


def get_recent_stats(days: int = 7) -> list[dict]:
    """Trailing window ending today (dashboard trend)."""
    if days < 1:
        raise ValidationError("days must be >= 1")
    end = business_date()
    return get_stats_range(shift_date(end, -(days - 1)), end)


def recompute_from_ledger(date: str) -> dict:
    """Rebuild a date's aggregate from the sale ledger alone."""
    date = _require_date(date, "date")
    rule = current_app.config.get("TREATS_RULE", "floor_total")

    totals = db.session.query(Sale.total_cents).filter(Sale.business_date == date).all()
    return {
        "date": date,
        "total_sales_cents": sum(t for (t,) in totals),
        "order_count": len(totals),
        "treats_eaten": sum(treats_for(t, rule) for (t,) in totals),
    }


def reconcile(date: str, *, repair: bool = False) -> dict:
    """
    Compare the stored aggregate for a date with the ledger.

    With repair=True a mismatching row is overwritten with the recomputed
    values (operator tool after a reported persistence failure).
    """
    expected = recompute_from_ledger(date)
    date = expected["date"]

    row = db.session.query(DailyStat).filter_by(date=date).first()
    stored = {
        "total_sales_cents": row.total_sales_cents if row else 0,
        "order_count": row.order_count if row else 0,
        "treats_eaten": row.treats_eaten if row else 0,
    }
    mismatches = sorted(k for k in stored if stored[k] != expected[k])

    repaired = False
    if mismatches and repair:
        with write_lock():
            if row is None:
                row = DailyStat(date=date)
                db.session.add(row)
            row.total_sales_cents = expected["total_sales_cents"]
            row.order_count = expected["order_count"]
            row.treats_eaten = expected["treats_eaten"]
            db.session.commit()
        repaired = True
        current_app.logger.warning("Repaired daily_stats for %s: fields=%s", date, mismatches)

    return {
        "date": date,
        "matches": not mismatches,
        "mismatched_fields": mismatches,
        "stored": stored,
        "ledger": {k: expected[k] for k in stored},
        "repaired": repaired,
    }


def ledger_dates() -> list[str]:
    """Every business date that has at least one sale, oldest first."""
    rows = db.session.query(func.distinct(Sale.business_date)).order_by(Sale.business_date.asc()).all()
    return [d for (d,) in rows]
