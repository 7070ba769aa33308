"""Pydantic schemas for bk_settlement API."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.money import money_to_display
from src.bk_ledger.application.schemas import EntryResponse
from src.bk_settlement.domain.models import Settlement

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateSettlementRequest(BaseModel):
    entry_id: str
    amount: Decimal
    settlement_date: date
    notes: str | None = None
    payment_method: str | None = Field(
        None, description="Cash | Bank for the generated cash entry (credit settlements)"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class SettlementResponse(BaseModel):
    id: str
    original_entry_id: str
    settlement_type: str
    amount: Decimal
    amount_display: str
    settlement_date: date
    derived_entry_id: str | None
    notes: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, s: Settlement) -> "SettlementResponse":
        return cls(
            id=s.id,
            original_entry_id=s.original_entry_id,
            settlement_type=s.settlement_type.value,
            amount=s.amount,
            amount_display=money_to_display(s.amount),
            settlement_date=s.settlement_date,
            derived_entry_id=s.derived_entry_id,
            notes=s.notes,
            created_at=s.created_at.isoformat() if s.created_at else None,
        )


class CreateSettlementResponse(BaseModel):
    settlement: SettlementResponse
    entry: EntryResponse
    derived_entry: EntryResponse | None


class ReverseSettlementResponse(BaseModel):
    settlement_id: str
    # None when the original entry had already been deleted
    entry: EntryResponse | None
    derived_entry_deleted: bool


class SettlementListResponse(BaseModel):
    items: list[SettlementResponse]
