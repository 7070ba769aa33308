"""Pydantic schemas for bk_ledger API.

Request bodies are deliberately loose on enums: the domain validators check
membership and the (entry_type, category) / (entry_type, payment_method) pairs
so every failure names its rule. Amounts are returned as 2dp decimals plus a
display string.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.money import money_to_display
from src.bk_ledger.domain.models import DeleteEntryResult, Entry, Party
from src.bk_ledger.domain.party_balance import PartyLedgerBalance

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateEntryRequest(BaseModel):
    entry_type: str = Field(..., description="Cash IN | Cash OUT | Credit | Advance")
    category: str = Field(..., description="Sales | COGS | Opex | Assets")
    payment_method: str | None = Field(None, description="Cash | Bank | None")
    amount: Decimal
    entry_date: date
    notes: str | None = None
    party_id: str | None = None


class UpdateEntryRequest(BaseModel):
    entry_type: str | None = None
    category: str | None = None
    payment_method: str | None = None
    amount: Decimal | None = None
    entry_date: date | None = None
    notes: str | None = None
    party_id: str | None = None


class CreatePartyRequest(BaseModel):
    name: str
    party_type: str = Field(..., description="Customer | Vendor | Both")
    mobile: str | None = Field(None, max_length=20)
    opening_balance: Decimal = Decimal("0.00")


class UpdatePartyRequest(BaseModel):
    name: str | None = None
    party_type: str | None = None
    mobile: str | None = Field(None, max_length=20)
    opening_balance: Decimal | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class EntryResponse(BaseModel):
    id: str
    entry_type: str
    category: str
    payment_method: str
    amount: Decimal
    amount_display: str
    remaining_amount: Decimal
    remaining_display: str
    settled: bool
    settled_at: date | None
    state: str
    entry_date: date
    notes: str | None
    party_id: str | None
    is_settlement_derived: bool
    source_settlement_id: str | None
    original_entry_id: str | None
    created_at: str | None  # ISO8601

    @classmethod
    def from_domain(cls, e: Entry) -> "EntryResponse":
        return cls(
            id=e.id,
            entry_type=e.entry_type.value,
            category=e.category.value,
            payment_method=e.payment_method.value,
            amount=e.amount,
            amount_display=money_to_display(e.amount),
            remaining_amount=e.outstanding,
            remaining_display=money_to_display(e.outstanding),
            settled=e.settled,
            settled_at=e.settled_at,
            state=e.state.value,
            entry_date=e.entry_date,
            notes=e.notes,
            party_id=e.party_id,
            is_settlement_derived=e.is_settlement_derived,
            source_settlement_id=e.source_settlement_id,
            original_entry_id=e.original_entry_id,
            created_at=e.created_at.isoformat() if e.created_at else None,
        )


class EntryListResponse(BaseModel):
    items: list[EntryResponse]
    total_count: int
    start: date | None
    end: date | None


class DeleteEntryResponse(BaseModel):
    entry_id: str
    orphaned_settlements: int
    warning: str | None

    @classmethod
    def from_result(cls, result: DeleteEntryResult) -> "DeleteEntryResponse":
        return cls(
            entry_id=result.entry_id,
            orphaned_settlements=result.orphaned_settlements,
            warning=result.warning,
        )


class PartyResponse(BaseModel):
    id: str
    name: str
    party_type: str
    mobile: str | None
    opening_balance: Decimal
    opening_balance_display: str
    created_at: str | None

    @classmethod
    def from_domain(cls, p: Party) -> "PartyResponse":
        return cls(
            id=p.id,
            name=p.name,
            party_type=p.party_type.value,
            mobile=p.mobile,
            opening_balance=p.opening_balance,
            opening_balance_display=money_to_display(p.opening_balance),
            created_at=p.created_at.isoformat() if p.created_at else None,
        )


class PartyListResponse(BaseModel):
    items: list[PartyResponse]


class PartyBalanceResponse(BaseModel):
    party_id: str
    party_name: str
    opening_balance: Decimal
    debits: Decimal
    credits: Decimal
    balance: Decimal
    balance_display: str
    receivable: Decimal
    payable: Decimal
    entry_count: int

    @classmethod
    def from_domain(cls, party: Party, b: PartyLedgerBalance) -> "PartyBalanceResponse":
        return cls(
            party_id=b.party_id,
            party_name=party.name,
            opening_balance=b.opening_balance,
            debits=b.debits,
            credits=b.credits,
            balance=b.balance,
            balance_display=money_to_display(b.balance),
            receivable=b.receivable,
            payable=b.payable,
            entry_count=b.entry_count,
        )
