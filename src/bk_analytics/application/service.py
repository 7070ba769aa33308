"""AnalyticsApplicationService — loads an owner's entries and runs the pure aggregator.

All methods are read-only; no commit/rollback needed.
"""

from collections.abc import Callable
from datetime import date
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_analytics.application.schemas import (
    dump_accrual_view,
    dump_cash_view,
    dump_comparison,
    dump_health,
    dump_pending,
)
from src.bk_analytics.domain.accrual import get_accrual_view
from src.bk_analytics.domain.cash_basis import get_cash_basis_view, monthly_comparison
from src.bk_analytics.domain.health import business_health
from src.bk_analytics.domain.insights import get_recommendations
from src.bk_analytics.domain.pending import pending_by_party
from src.bk_analytics.domain.period import (
    DateRange,
    Period,
    custom_period,
    month_bounds,
    period_label,
    previous_month,
    resolve_period,
)
from src.bk_common.datetime_utils import today
from src.bk_common.errors import ValidationError
from src.bk_ledger.domain.models import Entry
from src.bk_ledger.domain.repository import EntryRepositoryProtocol, PartyRepositoryProtocol
from src.bk_ledger.infrastructure.persistence import EntryRepository, PartyRepository


class AnalyticsApplicationService:
    def __init__(
        self,
        entry_repo: EntryRepositoryProtocol | None = None,
        party_repo: PartyRepositoryProtocol | None = None,
        clock: Callable[[], date] = today,
    ) -> None:
        self._entries: EntryRepositoryProtocol = entry_repo or EntryRepository()
        self._parties: PartyRepositoryProtocol = party_repo or PartyRepository()
        self._clock = clock

    def resolve(
        self,
        date_range: DateRange | str = DateRange.THIS_MONTH,
        start: date | None = None,
        end: date | None = None,
    ) -> Period | None:
        """Explicit start/end win over a named range; both must be given together."""
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValidationError("period", "Both start and end are required for a custom period")
            return custom_period(start, end)
        return resolve_period(date_range, self._clock())

    async def _load(
        self, db: AsyncSession, owner_id: str, period: Period | None
    ) -> tuple[list[Entry], dict[str, str]]:
        if period is None:
            entries = await self._entries.list_entries(db, owner_id)
        else:
            entries = await self._entries.list_entries(db, owner_id, period.start, period.end)
        parties = await self._parties.list_parties(db, owner_id)
        return entries, {p.id: p.name for p in parties}

    async def cash_view(
        self,
        db: AsyncSession,
        owner_id: str,
        date_range: DateRange | str = DateRange.THIS_MONTH,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, Any]:
        period = self.resolve(date_range, start, end)
        entries, names = await self._load(db, owner_id, period)
        return dump_cash_view(get_cash_basis_view(entries, period, names))

    async def accrual_view(
        self,
        db: AsyncSession,
        owner_id: str,
        date_range: DateRange | str = DateRange.THIS_MONTH,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, Any]:
        period = self.resolve(date_range, start, end)
        entries, names = await self._load(db, owner_id, period)
        return dump_accrual_view(get_accrual_view(entries, period, names))

    async def pending(self, db: AsyncSession, owner_id: str) -> dict[str, Any]:
        # Outstanding balances are not period-scoped: an old unpaid credit is still owed.
        entries, names = await self._load(db, owner_id, None)
        return dump_pending(pending_by_party(entries, names))

    async def monthly_comparison(self, db: AsyncSession, owner_id: str) -> dict[str, Any]:
        now = self._clock()
        window = Period(month_bounds(previous_month(now)).start, month_bounds(now).end)
        entries = await self._entries.list_entries(db, owner_id, window.start, window.end)
        return dump_comparison(monthly_comparison(entries, now))

    async def recommendations(
        self,
        db: AsyncSession,
        owner_id: str,
        date_range: DateRange | str = DateRange.THIS_MONTH,
        start: date | None = None,
        end: date | None = None,
    ) -> dict[str, Any]:
        period = self.resolve(date_range, start, end)
        # Unscoped load: the trend checks also need the month before the period.
        entries, _ = await self._load(db, owner_id, None)
        return {
            "period": period_label(period),
            "recommendations": get_recommendations(entries, period, self._clock()),
        }

    async def health_score(self, db: AsyncSession, owner_id: str) -> dict[str, Any]:
        entries, _ = await self._load(db, owner_id, None)
        return dump_health(business_health(entries, self._clock()))
