"""Outstanding Credit / Advance balances grouped by counterparty.

  collections        open Credit (Sales)        customers owe us
  bills              open Credit (expense)      we owe vendors
  advances_received  open Advance (Sales)       goods/services we still owe
  advances_paid      open Advance (expense)     goods/services owed to us
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from src.bk_common.enums import Category, EntryType, SettlementState
from src.bk_common.money import ZERO, sum_money
from src.bk_ledger.domain.models import Entry


class PendingKind(str, Enum):
    COLLECTIONS = "collections"
    BILLS = "bills"
    ADVANCES_RECEIVED = "advances_received"
    ADVANCES_PAID = "advances_paid"


def pending_kind(entry: Entry) -> PendingKind | None:
    if not entry.is_settleable or entry.state == SettlementState.SETTLED:
        return None
    sales = entry.category == Category.SALES
    if entry.entry_type == EntryType.CREDIT:
        return PendingKind.COLLECTIONS if sales else PendingKind.BILLS
    return PendingKind.ADVANCES_RECEIVED if sales else PendingKind.ADVANCES_PAID


@dataclass(frozen=True)
class PartyBalance:
    party_id: str | None
    party_name: str
    amount: Decimal
    count: int
    oldest_entry_date: date


@dataclass(frozen=True)
class PendingGroup:
    kind: PendingKind
    total: Decimal = ZERO
    parties: list[PartyBalance] = field(default_factory=list)


@dataclass(frozen=True)
class PendingSummary:
    collections: PendingGroup
    bills: PendingGroup
    advances_received: PendingGroup
    advances_paid: PendingGroup


def _group(kind: PendingKind, entries: list[Entry], names: dict[str, str]) -> PendingGroup:
    by_party: dict[str | None, list[Entry]] = {}
    for e in entries:
        by_party.setdefault(e.party_id, []).append(e)

    parties = [
        PartyBalance(
            party_id=party_id,
            party_name=names.get(party_id, "Unknown party") if party_id else "No party",
            amount=sum_money([e.outstanding for e in items]),
            count=len(items),
            oldest_entry_date=min(e.entry_date for e in items),
        )
        for party_id, items in by_party.items()
    ]
    parties.sort(key=lambda p: (-p.amount, p.party_name))
    return PendingGroup(kind=kind, total=sum_money([p.amount for p in parties]), parties=parties)


def pending_by_party(
    entries: Iterable[Entry], party_names: dict[str, str] | None = None
) -> PendingSummary:
    names = party_names or {}
    buckets: dict[PendingKind, list[Entry]] = {kind: [] for kind in PendingKind}
    for e in entries:
        kind = pending_kind(e)
        if kind is not None:
            buckets[kind].append(e)
    return PendingSummary(
        collections=_group(PendingKind.COLLECTIONS, buckets[PendingKind.COLLECTIONS], names),
        bills=_group(PendingKind.BILLS, buckets[PendingKind.BILLS], names),
        advances_received=_group(
            PendingKind.ADVANCES_RECEIVED, buckets[PendingKind.ADVANCES_RECEIVED], names
        ),
        advances_paid=_group(PendingKind.ADVANCES_PAID, buckets[PendingKind.ADVANCES_PAID], names),
    )
