"""Domain models for bk_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.bk_common.enums import (
    SETTLEABLE_ENTRY_TYPES,
    Category,
    EntryType,
    PartyType,
    PaymentMethod,
    SettlementState,
)


@dataclass
class Entry:
    id: str
    owner_id: str
    entry_type: EntryType
    category: Category
    payment_method: PaymentMethod
    amount: Decimal              # 2dp, fixed at creation
    remaining_amount: Decimal    # 0 <= remaining_amount <= amount
    settled: bool                # == (remaining_amount == 0)
    entry_date: date
    settled_at: date | None = None
    notes: str | None = None
    party_id: str | None = None
    # Set only on the CashIn/CashOut generated by settling a Credit entry
    is_settlement_derived: bool = False
    source_settlement_id: str | None = None
    original_entry_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_settleable(self) -> bool:
        return self.entry_type in SETTLEABLE_ENTRY_TYPES

    @property
    def outstanding(self) -> Decimal:
        return self.remaining_amount if self.remaining_amount is not None else self.amount

    @property
    def state(self) -> SettlementState:
        if self.outstanding == 0:
            return SettlementState.SETTLED
        if self.outstanding < self.amount:
            return SettlementState.PARTIALLY_SETTLED
        return SettlementState.OPEN


@dataclass
class EntryDraft:
    """Validated input for a new entry, before an id is assigned."""

    entry_type: EntryType
    category: Category
    payment_method: PaymentMethod
    amount: Decimal
    entry_date: date
    notes: str | None = None
    party_id: str | None = None


@dataclass
class DeleteEntryResult:
    entry_id: str
    # Settlements still pointing at the deleted entry; they are NOT reversed.
    orphaned_settlements: int = 0

    @property
    def warning(self) -> str | None:
        if self.orphaned_settlements == 0:
            return None
        return (
            f"Entry had {self.orphaned_settlements} settlement(s); "
            "they and their cash entries were left in place"
        )


@dataclass
class Party:
    id: str
    owner_id: str
    name: str
    party_type: PartyType
    opening_balance: Decimal
    mobile: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
