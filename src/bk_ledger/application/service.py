"""LedgerApplicationService — entry lifecycle (create / update / delete / read).

Every mutation is one `transaction(db)` unit. Domain events are published only
after the unit commits. Entry creation then hands a fresh snapshot to the
alert engine, which persists in its own transaction and never fails the
creation.

remaining_amount is owned by the settlement engine; update_entry only
re-derives it (amount - settled so far) and writes it with the same
compare-and-swap the engine uses, so an edit racing a settlement retries.
"""

import logging
from collections.abc import Callable
from dataclasses import asdict
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bk_alerts.application.service import AlertApplicationService
from src.bk_common.database import transaction
from src.bk_common.datetime_utils import today
from src.bk_common.errors import (
    AmountBelowSettledError,
    AuthorizationError,
    ConcurrentModificationError,
    ConflictError,
    DerivedEntryImmutableError,
    EntryNotFoundError,
    PartyNotFoundError,
    ValidationError,
)
from src.bk_common.events import EntryCreated, EntryDeleted, EntryUpdated, EventPublisher
from src.bk_common.id_generator import new_id
from src.bk_common.money import sum_money
from src.bk_common.rate_limit import NoopRateLimiter, RateLimiterProtocol
from src.bk_ledger.application.schemas import (
    DeleteEntryResponse,
    EntryListResponse,
    EntryResponse,
)
from src.bk_ledger.domain.models import DeleteEntryResult, Entry
from src.bk_ledger.domain.repository import EntryRepositoryProtocol, PartyRepositoryProtocol
from src.bk_ledger.domain.validation import validate_entry
from src.bk_ledger.infrastructure.persistence import EntryRepository, PartyRepository
from src.bk_settlement.domain.repository import SettlementRepositoryProtocol
from src.bk_settlement.infrastructure.persistence import SettlementRepository

logger = logging.getLogger(__name__)

_DAY = 24 * 3600
_HOUR = 3600

# Fields a caller may change on an existing entry
_EDITABLE_FIELDS = ("entry_type", "category", "payment_method", "amount", "entry_date", "notes", "party_id")


async def load_owned_entry(
    repo: EntryRepositoryProtocol, db: AsyncSession, owner_id: str, entry_id: str
) -> Entry:
    """Missing -> EntryNotFoundError; another owner's entry -> AuthorizationError."""
    entry = await repo.get_entry(db, entry_id)
    if entry is None:
        raise EntryNotFoundError(entry_id)
    if entry.owner_id != owner_id:
        raise AuthorizationError("entries", entry_id)
    return entry


class LedgerApplicationService:
    def __init__(
        self,
        repo: EntryRepositoryProtocol | None = None,
        party_repo: PartyRepositoryProtocol | None = None,
        settlement_repo: SettlementRepositoryProtocol | None = None,
        alerts: AlertApplicationService | None = None,
        rate_limiter: RateLimiterProtocol | None = None,
        events: EventPublisher | None = None,
        clock: Callable[[], date] = today,
    ) -> None:
        self._repo: EntryRepositoryProtocol = repo or EntryRepository()
        self._parties: PartyRepositoryProtocol = party_repo or PartyRepository()
        self._settlements: SettlementRepositoryProtocol = settlement_repo or SettlementRepository()
        self._alerts = alerts or AlertApplicationService(entry_repo=self._repo)
        self._limiter: RateLimiterProtocol = rate_limiter or NoopRateLimiter()
        self._events = events or EventPublisher()
        self._clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_entry(
        self, db: AsyncSession, owner_id: str, data: dict[str, Any]
    ) -> EntryResponse:
        await self._limiter.hit(
            f"entry_create:{owner_id}", settings.ENTRY_CREATE_LIMIT_PER_DAY, _DAY
        )
        draft = validate_entry(data, self._clock(), settings.MAX_ENTRY_AGE_YEARS)
        if draft.party_id:
            await self._check_party(db, owner_id, draft.party_id)

        entry = Entry(
            id=new_id("ent"),
            owner_id=owner_id,
            remaining_amount=draft.amount,
            settled=False,
            **asdict(draft),
        )
        async with transaction(db):
            entry = await self._repo.insert_entry(db, entry)
        logger.info(
            "Entry created: id=%s owner=%s type=%s category=%s amount=%s",
            entry.id, owner_id, entry.entry_type.value, entry.category.value, entry.amount,
        )

        await self._events.publish(
            EntryCreated(owner_id=owner_id, entry_id=entry.id, entry_date=entry.entry_date)
        )
        await self._alerts.generate_for_entry(db, owner_id, entry)
        return EntryResponse.from_domain(entry)

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    async def update_entry(
        self, db: AsyncSession, owner_id: str, entry_id: str, patch: dict[str, Any]
    ) -> EntryResponse:
        await self._limiter.hit(
            f"entry_update:{owner_id}", settings.ENTRY_UPDATE_LIMIT_PER_HOUR, _HOUR
        )
        patch = {k: v for k, v in patch.items() if k in _EDITABLE_FIELDS}
        if patch.get("party_id"):
            await self._check_party(db, owner_id, patch["party_id"])

        attempts = settings.SETTLEMENT_MAX_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                async with transaction(db):
                    updated = await self._apply_update(db, owner_id, entry_id, patch)
                break
            except ConflictError:
                if attempt == attempts:
                    logger.warning("Entry update gave up: entry=%s attempts=%d", entry_id, attempt)
                    raise ConcurrentModificationError(entry_id, attempts) from None
                logger.warning("Entry update conflict, retrying: entry=%s attempt=%d", entry_id, attempt)

        logger.info("Entry updated: id=%s fields=%s", entry_id, sorted(patch))
        await self._events.publish(EntryUpdated(owner_id=owner_id, entry_id=entry_id))
        return EntryResponse.from_domain(updated)

    async def _apply_update(
        self, db: AsyncSession, owner_id: str, entry_id: str, patch: dict[str, Any]
    ) -> Entry:
        entry = await load_owned_entry(self._repo, db, owner_id, entry_id)
        if entry.is_settlement_derived:
            raise DerivedEntryImmutableError(entry_id)

        merged = {field: getattr(entry, field) for field in _EDITABLE_FIELDS}
        merged.update(patch)
        draft = validate_entry(merged, self._clock(), settings.MAX_ENTRY_AGE_YEARS)

        settlements = await self._settlements.list_settlements(db, owner_id, entry_id)
        settled_total = sum_money([s.amount for s in settlements])
        if settlements and (
            draft.entry_type != entry.entry_type or draft.category != entry.category
        ):
            raise ValidationError(
                "settled_entry_locked",
                "Type and category cannot change while the entry has settlements",
            )
        if draft.amount < settled_total:
            raise AmountBelowSettledError(draft.amount, settled_total)

        remaining = draft.amount - settled_total
        settled = remaining == 0
        if settled:
            settled_at = entry.settled_at or max(s.settlement_date for s in settlements)
        else:
            settled_at = None

        return await self._repo.compare_and_update_entry(
            db,
            entry_id,
            owner_id,
            entry.remaining_amount,
            {
                **asdict(draft),
                "remaining_amount": remaining,
                "settled": settled,
                "settled_at": settled_at,
            },
        )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_entry(
        self, db: AsyncSession, owner_id: str, entry_id: str
    ) -> DeleteEntryResponse:
        """Unrestricted. Settlements against the entry are left as they are."""
        async with transaction(db):
            await load_owned_entry(self._repo, db, owner_id, entry_id)
            settlements = await self._settlements.list_settlements(db, owner_id, entry_id)
            if not await self._repo.delete_entry(db, entry_id, owner_id):
                raise EntryNotFoundError(entry_id)

        result = DeleteEntryResult(entry_id=entry_id, orphaned_settlements=len(settlements))
        if result.orphaned_settlements:
            logger.warning(
                "Entry %s deleted with %d settlement(s) still recorded; they were not reversed",
                entry_id, result.orphaned_settlements,
            )
        else:
            logger.info("Entry deleted: id=%s", entry_id)
        await self._events.publish(
            EntryDeleted(
                owner_id=owner_id,
                entry_id=entry_id,
                orphaned_settlements=result.orphaned_settlements,
            )
        )
        return DeleteEntryResponse.from_result(result)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_entry(self, db: AsyncSession, owner_id: str, entry_id: str) -> EntryResponse:
        return EntryResponse.from_domain(
            await load_owned_entry(self._repo, db, owner_id, entry_id)
        )

    async def list_entries(
        self,
        db: AsyncSession,
        owner_id: str,
        start: date | None = None,
        end: date | None = None,
    ) -> EntryListResponse:
        if start and end and start > end:
            raise ValidationError("period", f"Period start {start} is after end {end}")
        entries = await self._repo.list_entries(db, owner_id, start, end)
        return EntryListResponse(
            items=[EntryResponse.from_domain(e) for e in entries],
            total_count=len(entries),
            start=start,
            end=end,
        )

    async def _check_party(self, db: AsyncSession, owner_id: str, party_id: str) -> None:
        party = await self._parties.get_party(db, party_id)
        if party is None:
            raise PartyNotFoundError(party_id)
        if party.owner_id != owner_id:
            raise AuthorizationError("parties", party_id)
