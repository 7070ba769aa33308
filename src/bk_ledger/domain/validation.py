"""Entry validation rules. Pure functions; every failure is a ValidationError naming its rule.

(entry_type, category) and (entry_type, payment_method) are validated as pairs.
Nothing is inferred: a Sales "Cash OUT" is rejected, not silently turned into "Cash IN".
"""

from datetime import date
from decimal import Decimal
from typing import Any

from src.bk_common.datetime_utils import parse_date
from src.bk_common.enums import Category, EntryType, PartyType, PaymentMethod
from src.bk_common.errors import ValidationError
from src.bk_common.money import MAX_AMOUNT, has_at_most_two_places, to_money
from src.bk_ledger.domain.models import EntryDraft

MAX_NOTES_LENGTH = 1000
MAX_PARTY_NAME_LENGTH = 100

_ALLOWED_CATEGORIES: dict[EntryType, frozenset[Category]] = {
    EntryType.CASH_IN: frozenset({Category.SALES}),
    EntryType.CASH_OUT: frozenset({Category.COGS, Category.OPEX, Category.ASSETS}),
    EntryType.CREDIT: frozenset(Category),
    EntryType.ADVANCE: frozenset(Category),
}

_ALLOWED_PAYMENT_METHODS: dict[EntryType, frozenset[PaymentMethod]] = {
    EntryType.CASH_IN: frozenset({PaymentMethod.CASH, PaymentMethod.BANK}),
    EntryType.CASH_OUT: frozenset({PaymentMethod.CASH, PaymentMethod.BANK}),
    EntryType.CREDIT: frozenset({PaymentMethod.NONE}),
    EntryType.ADVANCE: frozenset({PaymentMethod.CASH, PaymentMethod.BANK}),
}


def validate_entry_type(value: Any) -> EntryType:
    try:
        return EntryType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in EntryType)
        raise ValidationError("entry_type", f"entry_type must be one of: {allowed}") from None


def validate_category(value: Any) -> Category:
    try:
        return Category(value)
    except ValueError:
        allowed = ", ".join(c.value for c in Category)
        raise ValidationError("category", f"category must be one of: {allowed}") from None


def validate_payment_method(value: Any) -> PaymentMethod:
    if value is None:
        return PaymentMethod.NONE
    try:
        return PaymentMethod(value)
    except ValueError:
        allowed = ", ".join(p.value for p in PaymentMethod)
        raise ValidationError(
            "payment_method", f"payment_method must be one of: {allowed}"
        ) from None


def validate_type_category(entry_type: EntryType, category: Category) -> None:
    if category not in _ALLOWED_CATEGORIES[entry_type]:
        raise ValidationError(
            "entry_type_category",
            f"{entry_type.value} entries cannot use category {category.value}",
        )


def validate_type_payment_method(entry_type: EntryType, method: PaymentMethod) -> None:
    if method not in _ALLOWED_PAYMENT_METHODS[entry_type]:
        allowed = ", ".join(sorted(m.value for m in _ALLOWED_PAYMENT_METHODS[entry_type]))
        raise ValidationError(
            "entry_type_payment_method",
            f"{entry_type.value} entries must use payment method: {allowed}",
        )


def validate_amount(value: Any) -> Decimal:
    """Coerce to 2dp; reject non-finite, non-positive, too large, or sub-cent amounts."""
    try:
        amount = to_money(value)
    except ValueError as exc:
        raise ValidationError("amount", str(exc)) from None
    if not has_at_most_two_places(value):
        raise ValidationError("amount", "Amount can have at most 2 decimal places")
    if amount <= 0:
        raise ValidationError("amount", "Amount must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationError("amount", f"Amount cannot exceed {MAX_AMOUNT}")
    return amount


def validate_entry_date(value: Any, today: date, max_age_years: int) -> date:
    try:
        entry_date = parse_date(value)
    except ValueError:
        raise ValidationError("entry_date", "Invalid date format, expected YYYY-MM-DD") from None
    if entry_date > today:
        raise ValidationError("entry_date", "Date cannot be in the future")
    try:
        oldest = today.replace(year=today.year - max_age_years)
    except ValueError:  # Feb 29
        oldest = today.replace(year=today.year - max_age_years, day=28)
    if entry_date < oldest:
        raise ValidationError(
            "entry_date", f"Date cannot be more than {max_age_years} years in the past"
        )
    return entry_date


def validate_notes(value: Any) -> str | None:
    if value is None:
        return None
    notes = str(value).strip()
    if len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(
            "notes", f"Notes cannot exceed {MAX_NOTES_LENGTH} characters"
        )
    return notes or None


def validate_entry(data: dict[str, Any], today: date, max_age_years: int) -> EntryDraft:
    """Validate a complete entry record (new, or existing merged with a patch)."""
    entry_type = validate_entry_type(data.get("entry_type"))
    category = validate_category(data.get("category"))
    payment_method = validate_payment_method(data.get("payment_method"))
    validate_type_category(entry_type, category)
    validate_type_payment_method(entry_type, payment_method)
    return EntryDraft(
        entry_type=entry_type,
        category=category,
        payment_method=payment_method,
        amount=validate_amount(data.get("amount")),
        entry_date=validate_entry_date(data.get("entry_date"), today, max_age_years),
        notes=validate_notes(data.get("notes")),
        party_id=data.get("party_id") or None,
    )


def validate_party_name(value: Any) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationError("party_name", "Party name is required")
    if len(name) > MAX_PARTY_NAME_LENGTH:
        raise ValidationError(
            "party_name", f"Party name cannot exceed {MAX_PARTY_NAME_LENGTH} characters"
        )
    return name


def validate_party_type(value: Any) -> PartyType:
    try:
        return PartyType(value)
    except ValueError:
        raise ValidationError("party_type", "party_type must be Customer, Vendor or Both") from None


def required_party_type(entry_type: EntryType, category: Category) -> PartyType | None:
    """Which kind of counterparty an entry is grouped under; None for cash entries."""
    if entry_type not in (EntryType.CREDIT, EntryType.ADVANCE):
        return None
    return PartyType.CUSTOMER if category == Category.SALES else PartyType.VENDOR
