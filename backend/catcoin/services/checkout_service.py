"""
Sale-Commit

Finalizes a cart into a persisted sale plus its stock and aggregate side
effects, as one unit of work:

    validate -> totals -> check phase -> write phase (ledger -> stock -> daily_stats) -> commit

- Totals use the unit price captured when the item was added to the cart,
  never the live catalog price.
- The check phase (products exist, enough stock) completes before any write.
- Check and write run under the process write lock and inside a single DB
  transaction, so no other commit or inventory edit can invalidate the check.
- Any database error during the write phase rolls the whole transaction back
  and surfaces as PersistenceFailure. It is never retried here: a retry of a
  half-applied sale would double count.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..models import Product, Sale
from ..models.sales import PAYMENT_METHODS
from ..validation import MAX_PRICE_CENTS, MAX_STOCK
from catcoin.money import amount_to_cents, cents_to_amount, parse_rate
from catcoin.time_utils import utcnow
from . import stats_service
from .concurrency import begin_immediate, lock_for_update, write_lock
from .sales_service import LineInput, Totals, append_sale, compute_totals


# Largest id an INTEGER primary key can hold
MAX_PRODUCT_ID = 2**63 - 1


class CommitError(Exception):
    """Raised when a sale cannot be committed. No partial state is left behind."""
    code = "COMMIT_ERROR"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code, "details": self.details}


class InvalidInput(CommitError):
    """Malformed cart or payment method; caller should correct and resubmit."""
    code = "INVALID_INPUT"


class ProductNotFound(CommitError):
    code = "PRODUCT_NOT_FOUND"


class InsufficientStock(CommitError):
    code = "INSUFFICIENT_STOCK"


class PersistenceFailure(CommitError):
    """Write phase could not complete. Needs operator attention; do not auto-retry."""
    code = "PERSISTENCE_FAILURE"


def _as_int(value, field: str, index: int) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"items[{index}].{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        s = value.strip()
        # ASCII only: int() also accepts non-Latin digits and "_" separators
        if s.isascii() and "_" not in s:
            try:
                return int(s)
            except ValueError:
                pass
    raise InvalidInput(f"items[{index}].{field} must be an integer")


def parse_cart(items) -> list[LineInput]:
    """
    Normalize cart items into LineInputs.

    Accepts the register's cart item shape ({id, price, quantity, ...}) as well
    as {product_id, unit_price, quantity}. Extra keys are ignored.
    """
    if not isinstance(items, list) or not items:
        raise InvalidInput("Cart is empty")

    lines: list[LineInput] = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise InvalidInput(f"items[{i}] must be an object")

        raw_id = item.get("product_id", item.get("id"))
        if raw_id is None:
            raise InvalidInput(f"items[{i}].product_id is required")
        product_id = _as_int(raw_id, "product_id", i)
        if not 0 < product_id <= MAX_PRODUCT_ID:
            raise InvalidInput(f"items[{i}].product_id is out of range")

        if "quantity" not in item:
            raise InvalidInput(f"items[{i}].quantity is required")
        quantity = _as_int(item["quantity"], "quantity", i)
        if quantity <= 0:
            raise InvalidInput(f"items[{i}].quantity must be > 0", details={"product_id": product_id})
        if quantity > MAX_STOCK:
            raise InvalidInput(f"items[{i}].quantity cannot exceed {MAX_STOCK}", details={"product_id": product_id})

        raw_price = item.get("unit_price", item.get("price"))
        if raw_price is None:
            raise InvalidInput(f"items[{i}].price is required")
        try:
            unit_price_cents = amount_to_cents(raw_price)
        except ValueError as e:
            raise InvalidInput(f"items[{i}].price: {e}")
        if unit_price_cents < 0:
            raise InvalidInput(f"items[{i}].price must be >= 0")
        if unit_price_cents > MAX_PRICE_CENTS:
            raise InvalidInput(f"items[{i}].price cannot exceed {MAX_PRICE_CENTS / 100:,.2f}")

        lines.append(LineInput(product_id=product_id, unit_price_cents=unit_price_cents, quantity=quantity))

    return lines


def parse_payment_method(value) -> str:
    method = value.strip().lower() if isinstance(value, str) else None
    if method not in PAYMENT_METHODS:
        raise InvalidInput(
            "payment_method must be one of: " + ", ".join(PAYMENT_METHODS),
            details={"payment_method": value},
        )
    return method


def _check_expected_totals(totals: Totals, expected: dict | None) -> None:
    """Client-displayed totals, when sent, must match the server's to the cent."""
    if not expected:
        return

    computed = {
        "subtotal": totals.subtotal_cents,
        "tax": totals.tax_cents,
        "total": totals.total_cents,
    }
    mismatched = {}
    for key, cents in computed.items():
        if expected.get(key) is None:
            continue
        try:
            sent = amount_to_cents(round(float(expected[key]), 2))
        except (TypeError, ValueError):
            raise InvalidInput(f"{key} must be a number")
        if sent != cents:
            mismatched[key] = {"sent": expected[key], "computed": cents_to_amount(cents)}

    if mismatched:
        raise InvalidInput("Cart totals do not match", details=mismatched)


def _check_phase(lines: list[LineInput], enforce_stock: bool) -> dict[int, Product]:
    requested: dict[int, int] = {}
    for line in lines:
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

    products = lock_for_update(
        db.session.query(Product).filter(Product.id.in_(requested.keys()))
    ).all()
    by_id = {p.id: p for p in products}

    missing = sorted(pid for pid in requested if pid not in by_id)
    if missing:
        raise ProductNotFound("Product not found", details={"product_ids": missing})

    if enforce_stock:
        insufficient = [
            {
                "product_id": pid,
                "name": by_id[pid].name,
                "requested_quantity": qty,
                "on_hand": by_id[pid].stock,
            }
            for pid, qty in requested.items()
            if qty > by_id[pid].stock
        ]
        if insufficient:
            raise InsufficientStock("Insufficient stock to commit sale", details={"items": insufficient})

    return by_id


def _write_phase(
    lines: list[LineInput],
    products: dict[int, Product],
    totals: Totals,
    payment_method: str,
    created_at: datetime,
) -> Sale:
    sale = append_sale(
        lines=lines,
        names={pid: p.name for pid, p in products.items()},
        totals=totals,
        payment_method=payment_method,
        created_at=created_at,
    )

    for line in lines:
        products[line.product_id].stock -= line.quantity

    stats_service.upsert_increment(
        sale.business_date,
        amount_cents=totals.total_cents,
        order_delta=1,
        treats_delta=stats_service.treats_for(totals.total_cents),
    )
    return sale


def commit_sale(
    items,
    payment_method,
    *,
    tax_rate: Decimal | str | None = None,
    enforce_stock: bool | None = None,
    expected_totals: dict | None = None,
) -> Sale:
    """
    Commit a cart as a sale.

    Args:
        items: cart lines [{product_id|id, price|unit_price, quantity}]
        payment_method: "cash" or "card"
        tax_rate: overrides TAX_RATE
        enforce_stock: overrides ENFORCE_STOCK_CHECK (False allows negative stock)
        expected_totals: optional {subtotal, tax, total} the client displayed

    Returns:
        The persisted Sale (id, created_at and lines assigned)

    Raises:
        InvalidInput, ProductNotFound, InsufficientStock: nothing was written
        PersistenceFailure: the transaction was rolled back

    The sale runs in its own transaction on the shared session: anything the
    caller left pending (added, modified or deleted but not committed) is
    rolled back and discarded before the check phase. Commit first.
    """
    config = current_app.config
    lines = parse_cart(items)
    method = parse_payment_method(payment_method)
    rate = parse_rate(config["TAX_RATE"] if tax_rate is None else tax_rate)
    if enforce_stock is None:
        enforce_stock = config.get("ENFORCE_STOCK_CHECK", True)

    totals = compute_totals(lines, rate)
    _check_expected_totals(totals, expected_totals)

    with write_lock():
        # Drop any stale transaction so BEGIN IMMEDIATE starts clean
        db.session.rollback()
        try:
            begin_immediate()
            products = _check_phase(lines, enforce_stock)
        except CommitError:
            db.session.rollback()
            raise
        except Exception as exc:
            db.session.rollback()
            current_app.logger.exception("Sale-Commit check phase failed")
            raise PersistenceFailure("Could not read catalog", details={"reason": type(exc).__name__})

        try:
            sale = _write_phase(lines, products, totals, method, utcnow())
            db.session.commit()
        except Exception as exc:
            db.session.rollback()
            current_app.logger.error(
                "Sale-Commit write phase failed; rolled back. payment_method=%s total_cents=%s lines=%s",
                method,
                totals.total_cents,
                [(line.product_id, line.quantity, line.unit_price_cents) for line in lines],
                exc_info=True,
            )
            raise PersistenceFailure(
                "Sale could not be saved",
                details={"reason": type(exc).__name__},
            )

    current_app.logger.info(
        "Committed sale id=%s total_cents=%s lines=%s date=%s",
        sale.id,
        sale.total_cents,
        len(lines),
        sale.business_date,
    )
    return sale
