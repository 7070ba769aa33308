"""SettlementEngine — the only writer of remaining_amount / settled / settled_at.

create_settlement, per attempt, inside ONE transaction:
  1. load the entry (owner-checked), require Credit / Advance
  2. remaining - amount, rejected if amount exceeds remaining (nothing written)
  3. Credit only: insert the derived Cash IN / Cash OUT entry
  4. compare-and-swap the original on the remaining_amount read in (1)
  5. insert the Settlement record
Any failure rolls back 3-5 together. A lost compare-and-swap (ConflictError)
rolls back, re-reads and re-validates; after SETTLEMENT_MAX_ATTEMPTS the
caller gets ConcurrentModificationError.

reverse_settlement undoes exactly one settlement: its derived entry is deleted
and the original is restored to amount - sum(other settlements), under the
same compare-and-swap and retry.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bk_common.database import transaction
from src.bk_common.datetime_utils import today
from src.bk_common.errors import (
    AuthorizationError,
    ConcurrentModificationError,
    ConflictError,
    SettlementNotFoundError,
)
from src.bk_common.events import EventPublisher, SettlementApplied, SettlementReversed
from src.bk_common.id_generator import new_id
from src.bk_common.rate_limit import NoopRateLimiter, RateLimiterProtocol
from src.bk_ledger.application.schemas import EntryResponse
from src.bk_ledger.application.service import load_owned_entry
from src.bk_ledger.domain.models import Entry
from src.bk_ledger.domain.repository import EntryRepositoryProtocol
from src.bk_ledger.domain.validation import validate_amount, validate_notes
from src.bk_ledger.infrastructure.persistence import EntryRepository
from src.bk_settlement.application.schemas import (
    CreateSettlementResponse,
    ReverseSettlementResponse,
    SettlementListResponse,
    SettlementResponse,
)
from src.bk_settlement.domain.models import Settlement
from src.bk_settlement.domain.repository import SettlementRepositoryProtocol
from src.bk_settlement.domain.rules import (
    apply_settlement,
    derived_entry_for,
    remaining_after_reversal,
    remaining_before,
    settled_state,
    settlement_type_for,
    validate_settlement_date,
    validate_settlement_method,
)
from src.bk_settlement.infrastructure.persistence import SettlementRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

_HOUR = 3600


class SettlementEngine:
    def __init__(
        self,
        repo: SettlementRepositoryProtocol | None = None,
        entry_repo: EntryRepositoryProtocol | None = None,
        rate_limiter: RateLimiterProtocol | None = None,
        events: EventPublisher | None = None,
        clock: Callable[[], date] = today,
        max_attempts: int | None = None,
    ) -> None:
        self._repo: SettlementRepositoryProtocol = repo or SettlementRepository()
        self._entries: EntryRepositoryProtocol = entry_repo or EntryRepository()
        self._limiter: RateLimiterProtocol = rate_limiter or NoopRateLimiter()
        self._events = events or EventPublisher()
        self._clock = clock
        self._max_attempts = max_attempts or settings.SETTLEMENT_MAX_ATTEMPTS

    async def _with_retry(
        self,
        db: AsyncSession,
        entry_id: str,
        operation: str,
        attempt_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """Run ``attempt_fn`` as one unit of work, retrying on a lost compare-and-swap."""
        for attempt in range(1, self._max_attempts + 1):
            try:
                async with transaction(db):
                    return await attempt_fn()
            except ConflictError as exc:
                if attempt == self._max_attempts:
                    logger.warning(
                        "%s gave up: entry=%s attempts=%d (%s)",
                        operation, entry_id, attempt, exc.message,
                    )
                    raise ConcurrentModificationError(entry_id, attempt) from exc
                logger.warning(
                    "%s conflict, retrying: entry=%s attempt=%d", operation, entry_id, attempt
                )
        raise ConcurrentModificationError(entry_id, self._max_attempts)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create_settlement(
        self,
        db: AsyncSession,
        owner_id: str,
        entry_id: str,
        amount: Any,
        settlement_date: Any,
        notes: str | None = None,
        payment_method: str | None = None,
    ) -> CreateSettlementResponse:
        amount = validate_amount(amount)
        on_date = validate_settlement_date(settlement_date, self._clock())
        notes = validate_notes(notes)
        method = validate_settlement_method(payment_method)
        await self._limiter.hit(
            f"settlement:{owner_id}", settings.SETTLEMENT_LIMIT_PER_HOUR, _HOUR
        )

        async def attempt() -> tuple[Settlement, Entry, Entry | None]:
            entry = await load_owned_entry(self._entries, db, owner_id, entry_id)
            settlement_type = settlement_type_for(entry.entry_type)
            new_remaining = apply_settlement(remaining_before(entry), amount)

            settlement_id = new_id("stl")
            derived = derived_entry_for(
                entry,
                entry_id=new_id("ent"),
                settlement_id=settlement_id,
                amount=amount,
                settlement_date=on_date,
                payment_method=method,
            )
            if derived is not None:
                derived = await self._entries.insert_entry(db, derived)

            updated = await self._entries.compare_and_update_entry(
                db,
                entry.id,
                owner_id,
                entry.remaining_amount,
                {"remaining_amount": new_remaining, **settled_state(new_remaining, on_date)},
            )
            settlement = await self._repo.insert_settlement(
                db,
                Settlement(
                    id=settlement_id,
                    owner_id=owner_id,
                    original_entry_id=entry.id,
                    settlement_type=settlement_type,
                    amount=amount,
                    settlement_date=on_date,
                    derived_entry_id=derived.id if derived else None,
                    notes=notes,
                ),
            )
            return settlement, updated, derived

        settlement, updated, derived = await self._with_retry(
            db, entry_id, "Settlement", attempt
        )
        logger.info(
            "Settlement applied: id=%s entry=%s amount=%s remaining=%s derived=%s",
            settlement.id, entry_id, amount, updated.remaining_amount,
            derived.id if derived else None,
        )
        await self._events.publish(
            SettlementApplied(
                owner_id=owner_id,
                settlement_id=settlement.id,
                entry_id=entry_id,
                amount=amount,
                derived_entry_id=derived.id if derived else None,
            )
        )
        return CreateSettlementResponse(
            settlement=SettlementResponse.from_domain(settlement),
            entry=EntryResponse.from_domain(updated),
            derived_entry=EntryResponse.from_domain(derived) if derived else None,
        )

    # ------------------------------------------------------------------
    # Reverse
    # ------------------------------------------------------------------

    async def reverse_settlement(
        self, db: AsyncSession, owner_id: str, settlement_id: str
    ) -> ReverseSettlementResponse:
        await self._limiter.hit(
            f"settlement:{owner_id}", settings.SETTLEMENT_LIMIT_PER_HOUR, _HOUR
        )

        async def attempt() -> tuple[Settlement, Entry | None, bool]:
            settlement = await self._load_owned(db, owner_id, settlement_id)
            derived_deleted = False
            if settlement.derived_entry_id:
                derived_deleted = await self._entries.delete_entry(
                    db, settlement.derived_entry_id, owner_id
                )

            restored = None
            entry = await self._entries.get_entry(db, settlement.original_entry_id)
            if entry is not None and entry.owner_id == owner_id:
                history = await self._repo.list_settlements(db, owner_id, entry.id)
                remaining = remaining_after_reversal(
                    entry.amount, [s.amount for s in history if s.id != settlement.id]
                )
                restored = await self._entries.compare_and_update_entry(
                    db,
                    entry.id,
                    owner_id,
                    entry.remaining_amount,
                    {"remaining_amount": remaining, **settled_state(remaining, entry.settled_at)},
                )

            if not await self._repo.delete_settlement(db, settlement.id, owner_id):
                raise ConflictError(f"Settlement {settlement.id} was removed concurrently")
            return settlement, restored, derived_deleted

        settlement_entry = await self._settlement_entry_id(db, owner_id, settlement_id)
        settlement, restored, derived_deleted = await self._with_retry(
            db, settlement_entry, "Reversal", attempt
        )
        if restored is None:
            logger.warning(
                "Settlement %s reversed but original entry %s no longer exists",
                settlement.id, settlement.original_entry_id,
            )
        logger.info(
            "Settlement reversed: id=%s entry=%s amount=%s remaining=%s",
            settlement.id, settlement.original_entry_id, settlement.amount,
            restored.remaining_amount if restored else None,
        )
        await self._events.publish(
            SettlementReversed(
                owner_id=owner_id,
                settlement_id=settlement.id,
                entry_id=settlement.original_entry_id,
                amount=settlement.amount,
            )
        )
        return ReverseSettlementResponse(
            settlement_id=settlement.id,
            entry=EntryResponse.from_domain(restored) if restored else None,
            derived_entry_deleted=derived_deleted,
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def list_settlements(
        self, db: AsyncSession, owner_id: str, entry_id: str | None = None
    ) -> SettlementListResponse:
        settlements = await self._repo.list_settlements(db, owner_id, entry_id)
        return SettlementListResponse(
            items=[SettlementResponse.from_domain(s) for s in settlements]
        )

    async def _load_owned(
        self, db: AsyncSession, owner_id: str, settlement_id: str
    ) -> Settlement:
        settlement = await self._repo.get_settlement(db, settlement_id)
        if settlement is None:
            raise SettlementNotFoundError(settlement_id)
        if settlement.owner_id != owner_id:
            raise AuthorizationError("settlements", settlement_id)
        return settlement

    async def _settlement_entry_id(
        self, db: AsyncSession, owner_id: str, settlement_id: str
    ) -> str:
        """Original entry id, for conflict reporting; also surfaces not-found early."""
        return (await self._load_owned(db, owner_id, settlement_id)).original_entry_id
