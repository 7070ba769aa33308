"""Pure settlement rules: no I/O.

Credit settlement: cash actually changes hands, so a derived Cash IN (Sales)
or Cash OUT (same category) entry is generated and flagged
``is_settlement_derived`` so the accrual view does not count it twice.

Advance settlement: the cash moved when the advance was recorded; settling it
only flips recognition for the accrual view. No derived entry.
"""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.bk_common.datetime_utils import parse_date
from src.bk_common.enums import Category, EntryType, PaymentMethod, SettlementType
from src.bk_common.errors import (
    EntryNotSettleableError,
    SettlementExceedsRemainingError,
    ValidationError,
)
from src.bk_common.money import CENT, ZERO, sum_money
from src.bk_ledger.domain.models import Entry
from src.bk_ledger.domain.validation import validate_payment_method

_SETTLEMENT_TYPES: dict[EntryType, SettlementType] = {
    EntryType.CREDIT: SettlementType.CREDIT,
    EntryType.ADVANCE: SettlementType.ADVANCE,
}


def settlement_type_for(entry_type: EntryType) -> SettlementType:
    try:
        return _SETTLEMENT_TYPES[entry_type]
    except KeyError:
        raise EntryNotSettleableError(entry_type.value) from None


def remaining_before(entry: Entry) -> Decimal:
    """Outstanding balance; a NULL remaining_amount on legacy rows means nothing settled yet."""
    return entry.remaining_amount if entry.remaining_amount is not None else entry.amount


def apply_settlement(remaining: Decimal, amount: Decimal) -> Decimal:
    """remaining - amount, clamped at zero, 2dp. Raises if amount exceeds remaining."""
    if amount > remaining:
        raise SettlementExceedsRemainingError(amount, remaining)
    after = (remaining - amount).quantize(CENT, rounding=ROUND_HALF_UP)
    return max(after, ZERO)


def remaining_after_reversal(amount: Decimal, other_settlements: Iterable[Decimal]) -> Decimal:
    """Outstanding balance once one settlement is undone: amount minus every OTHER settlement."""
    restored = amount - sum_money(list(other_settlements))
    return min(max(restored, ZERO), amount)


def settled_state(remaining: Decimal, on_date: date | None) -> dict[str, object]:
    """The (settled, settled_at) pair implied by a remaining balance."""
    settled = remaining == 0
    return {"settled": settled, "settled_at": on_date if settled else None}


def derived_note(original: Entry) -> str:
    return f"Settlement of credit {original.category.value.lower()} ({original.id})"


def derived_entry_for(
    original: Entry,
    *,
    entry_id: str,
    settlement_id: str,
    amount: Decimal,
    settlement_date: date,
    payment_method: PaymentMethod | None = None,
) -> Entry | None:
    """The cash entry a credit settlement generates; None for advances."""
    if original.entry_type != EntryType.CREDIT:
        return None
    if original.category == Category.SALES:
        entry_type = EntryType.CASH_IN
    else:
        entry_type = EntryType.CASH_OUT
    if payment_method not in (PaymentMethod.CASH, PaymentMethod.BANK):
        payment_method = (
            original.payment_method
            if original.payment_method in (PaymentMethod.CASH, PaymentMethod.BANK)
            else PaymentMethod.CASH
        )
    return Entry(
        id=entry_id,
        owner_id=original.owner_id,
        entry_type=entry_type,
        category=original.category,
        payment_method=payment_method,
        amount=amount,
        remaining_amount=amount,
        settled=False,
        entry_date=settlement_date,
        notes=derived_note(original),
        party_id=original.party_id,
        is_settlement_derived=True,
        source_settlement_id=settlement_id,
        original_entry_id=original.id,
    )


def validate_settlement_date(value: object, today: date) -> date:
    try:
        settlement_date = parse_date(value)
    except ValueError:
        raise ValidationError(
            "settlement_date", "Invalid date format, expected YYYY-MM-DD"
        ) from None
    if settlement_date > today:
        raise ValidationError("settlement_date", "Settlement date cannot be in the future")
    return settlement_date


def validate_settlement_method(value: object) -> PaymentMethod | None:
    """Optional Cash / Bank override for the derived cash entry."""
    if value is None:
        return None
    method = validate_payment_method(value)
    if method not in (PaymentMethod.CASH, PaymentMethod.BANK):
        raise ValidationError("payment_method", "Settlements are paid by Cash or Bank")
    return method
