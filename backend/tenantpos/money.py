"""
Money helpers.

Authoritative storage is integer cents. Clients send and receive decimal
amounts ("100.00", 25.5); conversion happens only at the API boundary.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .errors import InvalidAmountError

CENT = Decimal("0.01")

# Maximum amount: 9,999,999.99
MAX_AMOUNT_CENTS = 999_999_999
MAX_AMOUNT = Decimal(MAX_AMOUNT_CENTS) / 100


def to_cents(value, field: str, *, allow_zero: bool = True) -> int:
    """
    Parse a client-supplied amount into cents.

    Accepts ints, floats, Decimals and numeric strings. The value is rounded
    half-up to two decimal places before conversion.

    Raises InvalidAmountError for missing, non-numeric, negative or
    out-of-range input.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmountError(f"{field} is required", field=field)

    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"{field} must be a number", field=field)

    if not amount.is_finite():
        raise InvalidAmountError(f"{field} must be a number", field=field)

    # Sign and range are checked on the raw value: quantize cannot represent
    # huge exponents, and rounding would turn -0.004 into zero.
    if amount < 0:
        raise InvalidAmountError(f"{field} must be zero or greater", field=field)
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(
            f"{field} cannot exceed {MAX_AMOUNT:,.2f}", field=field
        )

    try:
        cents = int(amount.quantize(CENT, rounding=ROUND_HALF_UP) * 100)
    except InvalidOperation:
        raise InvalidAmountError(f"{field} must be a number", field=field)
    if not allow_zero and cents == 0:
        raise InvalidAmountError(f"{field} must be greater than 0", field=field)

    return cents


def cents_to_decimal(cents: int | None) -> Decimal | None:
    if cents is None:
        return None
    return (Decimal(cents) / 100).quantize(CENT)


def cents_to_json(cents: int | None) -> float | None:
    """Render cents as a JSON number with two-decimal precision."""
    if cents is None:
        return None
    return float(cents_to_decimal(cents))
