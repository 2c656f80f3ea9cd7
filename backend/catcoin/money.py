# Overview: Currency helpers; all stored amounts are integer cents.

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")


def parse_rate(value) -> Decimal:
    """Normalize a tax rate (str / float / Decimal) to a Decimal in [0, 1)."""
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValueError(f"Invalid tax rate: {value!r}")
    if not rate.is_finite() or rate < 0 or rate >= 1:
        raise ValueError(f"Tax rate must be between 0 and 1: {value!r}")
    return rate


def amount_to_cents(value) -> int:
    """
    Convert a currency amount (e.g. 4.5, "4.50") to integer cents.

    Floats go through str() so 4.1 becomes 410, not 409.
    Raises ValueError for non-numeric input or more than two decimal places.
    """
    if isinstance(value, bool):
        raise ValueError("amount must be a number")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError("amount must be a number")
    if not amount.is_finite():
        raise ValueError("amount must be a finite number")
    try:
        exact = amount == amount.quantize(CENT)
    except InvalidOperation:
        raise ValueError("amount is out of range")
    if not exact:
        raise ValueError("amount cannot have more than 2 decimal places")
    return int((amount * 100).to_integral_value())


def cents_to_amount(cents: int | None) -> float | None:
    if cents is None:
        return None
    return float(Decimal(cents) / 100)


def tax_cents_for(subtotal_cents: int, rate: Decimal) -> int:
    # nearest-cent rounding (half-up)
    return int((Decimal(subtotal_cents) * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))
