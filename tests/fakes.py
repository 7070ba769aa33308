"""In-memory repositories and a session with real commit/rollback semantics.

Repositories share one ``MemoryStore``. Every mutation records an undo step on
the ``FakeSession`` it was made through; ``rollback()`` replays them in reverse,
``commit()`` forgets them. ``get_entry`` yields to the event loop after reading, so two
coroutines run with asyncio.gather both see the same snapshot and then race
to write, the way two requests would.
"""

import asyncio
import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from src.bk_alerts.domain.models import Alert, AlertCounts
from src.bk_common.enums import AlertType, Category, EntryType, PaymentMethod
from src.bk_common.errors import ConflictError
from src.bk_ledger.domain.models import Entry, Party
from src.bk_settlement.domain.models import Settlement


class FakeSession:
    def __init__(self) -> None:
        self._undo: list[Callable[[], None]] = []
        self.commits = 0
        self.rollbacks = 0

    def record(self, undo: Callable[[], None]) -> None:
        self._undo.append(undo)

    async def commit(self) -> None:
        self._undo.clear()
        self.commits += 1

    async def rollback(self) -> None:
        while self._undo:
            self._undo.pop()()
        self.rollbacks += 1


@dataclass
class MemoryStore:
    entries: dict[str, Entry] = field(default_factory=dict)
    parties: dict[str, Party] = field(default_factory=dict)
    settlements: dict[str, Settlement] = field(default_factory=dict)
    alerts: dict[str, Alert] = field(default_factory=dict)


def _put(db: FakeSession, table: dict[str, Any], key: str, value: Any) -> None:
    missing = object()
    previous = table.get(key, missing)

    def undo() -> None:
        if previous is missing:
            table.pop(key, None)
        else:
            table[key] = previous

    table[key] = value
    db.record(undo)


def _pop(db: FakeSession, table: dict[str, Any], key: str) -> Any:
    value = table.pop(key)
    db.record(lambda: table.__setitem__(key, value))
    return value


class FakeEntryRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def get_entry(self, db: FakeSession, entry_id: str) -> Entry | None:
        entry = self.store.entries.get(entry_id)
        await asyncio.sleep(0)
        return entry

    async def list_entries(
        self,
        db: FakeSession,
        owner_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> list[Entry]:
        rows = [
            e for e in self.store.entries.values()
            if e.owner_id == owner_id
            and (start is None or e.entry_date >= start)
            and (end is None or e.entry_date <= end)
        ]
        return sorted(rows, key=lambda e: e.entry_date, reverse=True)

    async def insert_entry(self, db: FakeSession, entry: Entry) -> Entry:
        saved = dataclasses.replace(entry, created_at=entry.created_at or datetime.now())
        _put(db, self.store.entries, saved.id, saved)
        return saved

    async def compare_and_update_entry(
        self,
        db: FakeSession,
        entry_id: str,
        owner_id: str,
        expected_remaining: Decimal,
        patch: dict[str, Any],
    ) -> Entry:
        current = self.store.entries.get(entry_id)
        if (
            current is None
            or current.owner_id != owner_id
            or current.remaining_amount != expected_remaining
        ):
            raise ConflictError(f"Entry {entry_id} changed since it was read")
        updated = dataclasses.replace(current, **patch)
        _put(db, self.store.entries, entry_id, updated)
        return updated

    async def delete_entry(self, db: FakeSession, entry_id: str, owner_id: str) -> bool:
        entry = self.store.entries.get(entry_id)
        if entry is None or entry.owner_id != owner_id:
            return False
        _pop(db, self.store.entries, entry_id)
        return True

    async def clear_party(self, db: FakeSession, owner_id: str, party_id: str) -> int:
        linked = [
            e for e in self.store.entries.values()
            if e.owner_id == owner_id and e.party_id == party_id
        ]
        for e in linked:
            _put(db, self.store.entries, e.id, dataclasses.replace(e, party_id=None))
        return len(linked)


class FakePartyRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def get_party(self, db: FakeSession, party_id: str) -> Party | None:
        return self.store.parties.get(party_id)

    async def get_party_by_name(self, db: FakeSession, owner_id: str, name: str) -> Party | None:
        for p in self.store.parties.values():
            if p.owner_id == owner_id and p.name.lower() == name.lower():
                return p
        return None

    async def list_parties(self, db: FakeSession, owner_id: str) -> list[Party]:
        return sorted(
            (p for p in self.store.parties.values() if p.owner_id == owner_id),
            key=lambda p: p.name,
        )

    async def insert_party(self, db: FakeSession, party: Party) -> Party:
        _put(db, self.store.parties, party.id, party)
        return party

    async def update_party(
        self, db: FakeSession, party_id: str, owner_id: str, patch: dict[str, Any]
    ) -> Party | None:
        current = self.store.parties.get(party_id)
        if current is None or current.owner_id != owner_id:
            return None
        updated = dataclasses.replace(current, **patch)
        _put(db, self.store.parties, party_id, updated)
        return updated

    async def delete_party(self, db: FakeSession, party_id: str, owner_id: str) -> bool:
        party = self.store.parties.get(party_id)
        if party is None or party.owner_id != owner_id:
            return False
        _pop(db, self.store.parties, party_id)
        return True


class FakeSettlementRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def get_settlement(self, db: FakeSession, settlement_id: str) -> Settlement | None:
        return self.store.settlements.get(settlement_id)

    async def list_settlements(
        self, db: FakeSession, owner_id: str, entry_id: str | None = None
    ) -> list[Settlement]:
        rows = [
            s for s in self.store.settlements.values()
            if s.owner_id == owner_id and (entry_id is None or s.original_entry_id == entry_id)
        ]
        return sorted(rows, key=lambda s: s.settlement_date, reverse=True)

    async def insert_settlement(self, db: FakeSession, settlement: Settlement) -> Settlement:
        _put(db, self.store.settlements, settlement.id, settlement)
        return settlement

    async def delete_settlement(self, db: FakeSession, settlement_id: str, owner_id: str) -> bool:
        s = self.store.settlements.get(settlement_id)
        if s is None or s.owner_id != owner_id:
            return False
        _pop(db, self.store.settlements, settlement_id)
        return True


class FakeAlertRepository:
    def __init__(self, store: MemoryStore) -> None:
        self.store = store

    async def insert_alerts(self, db: FakeSession, alerts: list[Alert]) -> list[Alert]:
        saved = []
        for a in alerts:
            a = dataclasses.replace(a, created_at=a.created_at or datetime.now())
            _put(db, self.store.alerts, a.id, a)
            saved.append(a)
        return saved

    def _owned(self, owner_id: str) -> list[Alert]:
        return [a for a in self.store.alerts.values() if a.owner_id == owner_id]

    async def list_alerts(
        self, db: FakeSession, owner_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Alert]:
        rows = [a for a in self._owned(owner_id) if not (unread_only and a.is_read)]
        rows.sort(key=lambda a: (a.priority, a.created_at), reverse=True)
        return rows[:limit]

    async def count_alerts(self, db: FakeSession, owner_id: str) -> AlertCounts:
        rows = self._owned(owner_id)
        unread = [a for a in rows if not a.is_read]
        return AlertCounts(
            total=len(rows),
            unread=len(unread),
            critical_unread=sum(1 for a in unread if a.alert_type == AlertType.CRITICAL),
        )

    async def mark_read(
        self, db: FakeSession, alert_id: str, owner_id: str, read_at: datetime
    ) -> Alert | None:
        a = self.store.alerts.get(alert_id)
        if a is None or a.owner_id != owner_id:
            return None
        updated = dataclasses.replace(a, is_read=True, read_at=a.read_at or read_at)
        _put(db, self.store.alerts, alert_id, updated)
        return updated

    async def mark_all_read(self, db: FakeSession, owner_id: str, read_at: datetime) -> int:
        unread = [a for a in self._owned(owner_id) if not a.is_read]
        for a in unread:
            _put(db, self.store.alerts, a.id, dataclasses.replace(a, is_read=True, read_at=read_at))
        return len(unread)

    async def delete_alert(self, db: FakeSession, alert_id: str, owner_id: str) -> bool:
        a = self.store.alerts.get(alert_id)
        if a is None or a.owner_id != owner_id:
            return False
        _pop(db, self.store.alerts, alert_id)
        return True

    async def delete_read_alerts(
        self, db: FakeSession, owner_id: str, read_before: datetime | None = None
    ) -> int:
        doomed = [
            a for a in self._owned(owner_id)
            if a.is_read and (read_before is None or (a.read_at and a.read_at < read_before))
        ]
        for a in doomed:
            _pop(db, self.store.alerts, a.id)
        return len(doomed)


def make_entry(
    entry_type: EntryType = EntryType.CASH_IN,
    category: Category = Category.SALES,
    amount: str | Decimal = "1000.00",
    entry_date: date = date(2026, 3, 10),
    *,
    entry_id: str = "ent_1",
    owner_id: str = "owner-1",
    payment_method: PaymentMethod | None = None,
    remaining: str | Decimal | None = None,
    party_id: str | None = None,
    derived: bool = False,
) -> Entry:
    amount = Decimal(amount)
    remaining_amount = amount if remaining is None else Decimal(remaining)
    if payment_method is None:
        payment_method = PaymentMethod.NONE if entry_type == EntryType.CREDIT else PaymentMethod.CASH
    return Entry(
        id=entry_id,
        owner_id=owner_id,
        entry_type=entry_type,
        category=category,
        payment_method=payment_method,
        amount=amount,
        remaining_amount=remaining_amount,
        settled=remaining_amount == 0,
        settled_at=entry_date if remaining_amount == 0 else None,
        entry_date=entry_date,
        party_id=party_id,
        is_settlement_derived=derived,
    )
