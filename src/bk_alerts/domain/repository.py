from datetime import datetime
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_alerts.domain.models import Alert, AlertCounts


class AlertRepositoryProtocol(Protocol):
    async def insert_alerts(self, db: AsyncSession, alerts: list[Alert]) -> list[Alert]: ...

    async def list_alerts(
        self, db: AsyncSession, owner_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Alert]:
        """Most urgent first, then newest."""
        ...

    async def count_alerts(self, db: AsyncSession, owner_id: str) -> AlertCounts: ...

    async def mark_read(
        self, db: AsyncSession, alert_id: str, owner_id: str, read_at: datetime
    ) -> Alert | None: ...

    async def mark_all_read(self, db: AsyncSession, owner_id: str, read_at: datetime) -> int: ...

    async def delete_alert(self, db: AsyncSession, alert_id: str, owner_id: str) -> bool: ...

    async def delete_read_alerts(
        self, db: AsyncSession, owner_id: str, read_before: datetime | None = None
    ) -> int:
        """Delete read alerts; only those read before ``read_before`` when given."""
        ...
