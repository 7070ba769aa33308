"""Fixed-point money utilities.

All amounts are Decimal with exactly 2 fraction digits. Binary floats are
accepted only at the input boundary and converted through their repr, never
used for arithmetic.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_AMOUNT = Decimal("999999999.99")


def _plain_text(value: object) -> str:
    """Text form of an amount; exponent notation ("1e3", Decimal("1E+3")) is refused."""
    text = repr(value) if isinstance(value, float) else str(value).strip()
    if "e" in text.lower() and not isinstance(value, float):
        raise ValueError(f"Amount must be written in plain digits, got {value!r}")
    return text


def to_money(value: object) -> Decimal:
    """Coerce int / str / Decimal / float to a 2dp Decimal.

    Raises ValueError for booleans, non-finite numbers, exponent notation
    and unparsable text.
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be a number, got a boolean")
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"Amount must be finite, got {value}")
    text = _plain_text(value)
    try:
        amount = Decimal(text)
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Amount must be a valid number, got {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"Amount is out of range: {value!r}") from exc


def has_at_most_two_places(value: object) -> bool:
    """True if ``value`` carries no precision below a cent."""
    if isinstance(value, bool):
        return False
    try:
        amount = Decimal(_plain_text(value))
        return amount.is_finite() and amount == amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError):
        return False


def sum_money(values: "list[Decimal] | tuple[Decimal, ...]") -> Decimal:
    return sum(values, ZERO).quantize(CENT)


def percentage(part: Decimal, total: Decimal) -> Decimal:
    """part / total * 100 at 2dp, 0 when total is 0."""
    if total == 0:
        return ZERO
    return (part / total * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def money_to_display(amount: Decimal) -> str:
    """Decimal to display string: 6500 -> '₹6,500.00', -12 -> '-₹12.00'."""
    if amount < 0:
        return f"-₹{-amount:,.2f}"
    return f"₹{amount:,.2f}"
