"""LedgerApplicationService against in-memory repositories."""

from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from src.bk_alerts.application.service import AlertApplicationService
from src.bk_alerts.domain.models import AlertThresholds
from src.bk_common.enums import Category, EntryType, PartyType
from src.bk_common.errors import (
    AmountBelowSettledError,
    AuthorizationError,
    DerivedEntryImmutableError,
    EntryNotFoundError,
    PartyNotFoundError,
    ValidationError,
)
from src.bk_common.events import EntryCreated, EntryDeleted, EventPublisher
from src.bk_ledger.application.service import LedgerApplicationService
from src.bk_ledger.domain.models import Party
from src.bk_settlement.application.service import SettlementEngine
from tests.fakes import (
    FakeAlertRepository,
    FakeEntryRepository,
    FakePartyRepository,
    FakeSession,
    FakeSettlementRepository,
    MemoryStore,
)

TODAY = date(2026, 3, 15)
OWNER = "owner-1"


@pytest.fixture
def events() -> EventPublisher:
    return EventPublisher()


@pytest.fixture
def service(
    entry_repo: FakeEntryRepository,
    party_repo: FakePartyRepository,
    settlement_repo: FakeSettlementRepository,
    alert_repo: FakeAlertRepository,
    events: EventPublisher,
) -> LedgerApplicationService:
    alerts = AlertApplicationService(
        alert_repo, entry_repo, AlertThresholds(Decimal("50000.00"), Decimal("10000.00"))
    )
    return LedgerApplicationService(
        entry_repo, party_repo, settlement_repo, alerts, events=events, clock=lambda: TODAY
    )


@pytest.fixture
def engine(settlement_repo: FakeSettlementRepository, entry_repo: FakeEntryRepository) -> SettlementEngine:
    return SettlementEngine(settlement_repo, entry_repo, clock=lambda: TODAY)


def _body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "entry_type": "Credit",
        "category": "Sales",
        "payment_method": None,
        "amount": Decimal("5000"),
        "entry_date": date(2026, 3, 1),
    }
    body.update(overrides)
    return body


class TestCreateEntry:
    async def test_creates_open_entry(
        self, service: LedgerApplicationService, store: MemoryStore, db: FakeSession
    ) -> None:
        resp = await service.create_entry(db, OWNER, _body())

        assert resp.id.startswith("ent_")
        assert resp.remaining_amount == Decimal("5000.00")
        assert resp.settled is False
        assert resp.state == "OPEN"
        assert resp.amount_display == "₹5,000.00"
        assert resp.payment_method == "None"
        assert store.entries[resp.id].owner_id == OWNER

    async def test_invalid_pair_rejected(self, service: LedgerApplicationService, store: MemoryStore, db: FakeSession) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await service.create_entry(db, OWNER, _body(entry_type="Cash OUT", category="Sales", payment_method="Cash"))
        assert exc_info.value.rule == "entry_type_category"
        assert store.entries == {}

    async def test_generates_alerts_after_commit(
        self, service: LedgerApplicationService, store: MemoryStore, db: FakeSession
    ) -> None:
        await service.create_entry(
            db, OWNER, _body(entry_type="Cash OUT", category="Assets", payment_method="Bank", amount=Decimal("75000"))
        )
        titles = {a.title for a in store.alerts.values()}
        assert titles == {"Large Expense Recorded", "Negative Cash Balance!"}

    async def test_publishes_entry_created(
        self, service: LedgerApplicationService, events: EventPublisher, db: FakeSession
    ) -> None:
        seen: list[object] = []

        async def handler(event: object) -> None:
            seen.append(event)

        events.subscribe(handler)
        resp = await service.create_entry(db, OWNER, _body())
        assert isinstance(seen[0], EntryCreated)
        assert seen[0].entry_id == resp.id

    async def test_party_must_exist_and_be_owned(
        self, service: LedgerApplicationService, store: MemoryStore, db: FakeSession
    ) -> None:
        with pytest.raises(PartyNotFoundError):
            await service.create_entry(db, OWNER, _body(party_id="pty_missing"))

        store.parties["pty_x"] = Party("pty_x", "owner-2", "Other", PartyType.CUSTOMER, Decimal("0"))
        with pytest.raises(AuthorizationError):
            await service.create_entry(db, OWNER, _body(party_id="pty_x"))


class TestUpdateEntry:
    async def test_amount_edit_rederives_remaining(
        self, service: LedgerApplicationService, engine: SettlementEngine, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        await engine.create_settlement(db, OWNER, created.id, "3000", "2026-03-10")

        resp = await service.update_entry(db, OWNER, created.id, {"amount": Decimal("6000")})

        assert resp.amount == Decimal("6000.00")
        assert resp.remaining_amount == Decimal("3000.00")
        assert resp.state == "PARTIALLY_SETTLED"

    async def test_amount_down_to_settled_total_settles(
        self, service: LedgerApplicationService, engine: SettlementEngine, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        await engine.create_settlement(db, OWNER, created.id, "3000", "2026-03-10")

        resp = await service.update_entry(db, OWNER, created.id, {"amount": Decimal("3000")})

        assert resp.settled is True
        assert resp.settled_at == date(2026, 3, 10)

    async def test_amount_below_settled_rejected(
        self, service: LedgerApplicationService, engine: SettlementEngine, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        await engine.create_settlement(db, OWNER, created.id, "3000", "2026-03-10")
        with pytest.raises(AmountBelowSettledError):
            await service.update_entry(db, OWNER, created.id, {"amount": Decimal("2999.99")})

    async def test_type_locked_once_settled(
        self, service: LedgerApplicationService, engine: SettlementEngine, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        await engine.create_settlement(db, OWNER, created.id, "100", "2026-03-10")
        with pytest.raises(ValidationError) as exc_info:
            await service.update_entry(db, OWNER, created.id, {"category": "COGS"})
        assert exc_info.value.rule == "settled_entry_locked"

    async def test_patch_revalidates_whole_record(
        self, service: LedgerApplicationService, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        with pytest.raises(ValidationError) as exc_info:
            await service.update_entry(db, OWNER, created.id, {"payment_method": "Cash"})
        assert exc_info.value.rule == "entry_type_payment_method"

    async def test_notes_and_unknown_fields(
        self, service: LedgerApplicationService, store: MemoryStore, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        resp = await service.update_entry(
            db, OWNER, created.id, {"notes": "net 30", "remaining_amount": Decimal("1")}
        )
        assert resp.notes == "net 30"
        assert store.entries[created.id].remaining_amount == Decimal("5000.00")

    async def test_derived_entries_are_immutable(
        self, service: LedgerApplicationService, engine: SettlementEngine, db: FakeSession
    ) -> None:
        created = await service.create_entry(db, OWNER, _body())
        applied = await engine.create_settlement(db, OWNER, created.id, "100", "2026-03-10")
        assert applied.derived_entry is not None
        with pytest.raises(DerivedEntryImmutableError):
            await service.update_entry(db, OWNER, applied.derived_entry.id, {"notes": "x"})


class TestDeleteAndRead:
    async def test_delete_reports_orphaned_settlements(
        self,
        service: LedgerApplicationService,
        engine: SettlementEngine,
        events: EventPublisher,
        store: MemoryStore,
        db: FakeSession,
    ) -> None:
        seen: list[object] = []

        async def handler(event: object) -> None:
            seen.append(event)

        events.subscribe(handler)
        created = await service.create_entry(db, OWNER, _body())
        await engine.create_settlement(db, OWNER, created.id, "100", "2026-03-10")

        resp = await service.delete_entry(db, OWNER, created.id)

        assert resp.orphaned_settlements == 1
        assert resp.warning is not None
        assert created.id not in store.entries
        assert len(store.settlements) == 1
        assert isinstance(seen[-1], EntryDeleted)

    async def test_delete_missing(self, service: LedgerApplicationService, db: FakeSession) -> None:
        with pytest.raises(EntryNotFoundError):
            await service.delete_entry(db, OWNER, "ent_missing")

    async def test_get_foreign_entry(self, service: LedgerApplicationService, db: FakeSession) -> None:
        created = await service.create_entry(db, OWNER, _body())
        with pytest.raises(AuthorizationError):
            await service.get_entry(db, "owner-2", created.id)

    async def test_list_with_period(self, service: LedgerApplicationService, db: FakeSession) -> None:
        await service.create_entry(db, OWNER, _body(entry_date=date(2026, 2, 10)))
        await service.create_entry(db, OWNER, _body(entry_date=date(2026, 3, 10)))

        resp = await service.list_entries(db, OWNER, date(2026, 3, 1), date(2026, 3, 31))
        assert resp.total_count == 1
        assert resp.items[0].entry_date == date(2026, 3, 10)

        with pytest.raises(ValidationError):
            await service.list_entries(db, OWNER, date(2026, 3, 31), date(2026, 3, 1))
