"""AlertApplicationService — persists rule output and serves the alert inbox.

generate_for_entry runs after the entry's own transaction has committed and
writes alerts in a separate transaction. It never raises: an alert failure is
logged and must not fail the entry that triggered it.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.bk_alerts.application.schemas import (
    AffectedResponse,
    AlertCountsResponse,
    AlertListResponse,
    AlertResponse,
)
from src.bk_alerts.domain.models import Alert, AlertThresholds
from src.bk_alerts.domain.repository import AlertRepositoryProtocol
from src.bk_alerts.engine import evaluate_alerts
from src.bk_alerts.infrastructure.persistence import AlertRepository
from src.bk_common.database import transaction
from src.bk_common.datetime_utils import utc_now
from src.bk_common.errors import AlertNotFoundError
from src.bk_common.id_generator import new_id
from src.bk_ledger.domain.models import Entry
from src.bk_ledger.domain.repository import EntryRepositoryProtocol
from src.bk_ledger.infrastructure.persistence import EntryRepository

logger = logging.getLogger(__name__)


class AlertApplicationService:
    def __init__(
        self,
        repo: AlertRepositoryProtocol | None = None,
        entry_repo: EntryRepositoryProtocol | None = None,
        thresholds: AlertThresholds | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: AlertRepositoryProtocol = repo or AlertRepository()
        self._entries: EntryRepositoryProtocol = entry_repo or EntryRepository()
        self._thresholds = thresholds or AlertThresholds.from_settings()
        self._clock = clock

    async def generate_for_entry(
        self, db: AsyncSession, owner_id: str, entry: Entry
    ) -> list[AlertResponse]:
        try:
            snapshot = await self._entries.list_entries(db, owner_id)
            drafts = evaluate_alerts(snapshot, entry, self._thresholds)
            if not drafts:
                return []
            alerts = [
                Alert(
                    id=new_id("alr"),
                    owner_id=owner_id,
                    alert_type=d.alert_type,
                    priority=d.priority,
                    title=d.title,
                    message=d.message,
                    related_entity_type=d.related_entity_type,
                    related_entity_id=d.related_entity_id,
                )
                for d in drafts
            ]
            async with transaction(db):
                saved = await self._repo.insert_alerts(db, alerts)
        except Exception:
            logger.exception("Alert generation failed for entry %s", entry.id)
            return []
        logger.info(
            "Generated %d alert(s) for entry %s: %s",
            len(saved), entry.id, ", ".join(a.title for a in saved),
        )
        return [AlertResponse.from_domain(a) for a in saved]

    async def list_alerts(
        self, db: AsyncSession, owner_id: str, unread_only: bool = False, limit: int = 50
    ) -> AlertListResponse:
        alerts = await self._repo.list_alerts(db, owner_id, unread_only, limit)
        return AlertListResponse(items=[AlertResponse.from_domain(a) for a in alerts])

    async def alert_counts(self, db: AsyncSession, owner_id: str) -> AlertCountsResponse:
        return AlertCountsResponse.from_domain(await self._repo.count_alerts(db, owner_id))

    async def mark_read(self, db: AsyncSession, owner_id: str, alert_id: str) -> AlertResponse:
        async with transaction(db):
            alert = await self._repo.mark_read(db, alert_id, owner_id, self._clock())
            if alert is None:
                raise AlertNotFoundError(alert_id)
        return AlertResponse.from_domain(alert)

    async def mark_all_read(self, db: AsyncSession, owner_id: str) -> AffectedResponse:
        async with transaction(db):
            affected = await self._repo.mark_all_read(db, owner_id, self._clock())
        return AffectedResponse(affected=affected)

    async def delete_alert(self, db: AsyncSession, owner_id: str, alert_id: str) -> None:
        async with transaction(db):
            if not await self._repo.delete_alert(db, alert_id, owner_id):
                raise AlertNotFoundError(alert_id)

    async def delete_read_alerts(self, db: AsyncSession, owner_id: str) -> AffectedResponse:
        async with transaction(db):
            affected = await self._repo.delete_read_alerts(db, owner_id)
        return AffectedResponse(affected=affected)

    async def cleanup_old_read_alerts(
        self, db: AsyncSession, owner_id: str, retention_days: int | None = None
    ) -> AffectedResponse:
        """Retention sweep: drop alerts read more than ``retention_days`` ago."""
        days = settings.ALERT_RETENTION_DAYS if retention_days is None else retention_days
        cutoff = self._clock() - timedelta(days=days)
        async with transaction(db):
            affected = await self._repo.delete_read_alerts(db, owner_id, read_before=cutoff)
        if affected:
            logger.info("Removed %d read alert(s) older than %d days for %s", affected, days, owner_id)
        return AffectedResponse(affected=affected)
