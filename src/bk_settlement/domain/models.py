"""Domain models for bk_settlement: pure dataclasses."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from src.bk_common.enums import SettlementType


@dataclass
class Settlement:
    id: str
    owner_id: str
    original_entry_id: str
    settlement_type: SettlementType
    amount: Decimal
    settlement_date: date
    # Generated Cash IN / Cash OUT entry; None for advance settlements
    derived_entry_id: str | None = None
    notes: str | None = None
    created_at: datetime | None = None
