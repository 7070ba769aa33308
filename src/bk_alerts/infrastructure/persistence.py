"""AlertRepository — raw SQL over the alerts table.

Alerts are scoped by owner in every statement; another owner's alert is
indistinguishable from a missing one.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bk_alerts.domain.models import Alert, AlertCounts
from src.bk_common.enums import AlertType

_COLUMNS = """
    id, owner_id, alert_type, priority, title, message, is_read, read_at,
    related_entity_type, related_entity_id, created_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO alerts
        (id, owner_id, alert_type, priority, title, message,
         related_entity_type, related_entity_id)
    VALUES
        (:id, :owner_id, :alert_type, :priority, :title, :message,
         :related_entity_type, :related_entity_id)
    RETURNING {_COLUMNS}
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM alerts
    WHERE owner_id = :owner_id AND (:unread_only = FALSE OR is_read = FALSE)
    ORDER BY priority DESC, created_at DESC
    LIMIT :limit
""")

_COUNT_SQL = text("""
    SELECT
        COUNT(*) AS total,
        COUNT(*) FILTER (WHERE is_read = FALSE) AS unread,
        COUNT(*) FILTER (WHERE is_read = FALSE AND alert_type = 'critical') AS critical_unread
    FROM alerts
    WHERE owner_id = :owner_id
""")

_MARK_READ_SQL = text(f"""
    UPDATE alerts SET is_read = TRUE, read_at = COALESCE(read_at, :read_at)
    WHERE id = :id AND owner_id = :owner_id
    RETURNING {_COLUMNS}
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE alerts SET is_read = TRUE, read_at = :read_at
    WHERE owner_id = :owner_id AND is_read = FALSE
""")

_DELETE_SQL = text("""
    DELETE FROM alerts WHERE id = :id AND owner_id = :owner_id RETURNING id
""")

_DELETE_READ_SQL = text("""
    DELETE FROM alerts
    WHERE owner_id = :owner_id AND is_read = TRUE
      AND (CAST(:read_before AS TIMESTAMPTZ) IS NULL OR read_at < :read_before)
""")


def _row_to_alert(row: Any) -> Alert:
    return Alert(
        id=row.id,
        owner_id=row.owner_id,
        alert_type=AlertType(row.alert_type),
        priority=row.priority,
        title=row.title,
        message=row.message,
        is_read=row.is_read,
        read_at=row.read_at,
        related_entity_type=row.related_entity_type,
        related_entity_id=row.related_entity_id,
        created_at=row.created_at,
    )


class AlertRepository:
    async def insert_alerts(self, db: AsyncSession, alerts: list[Alert]) -> list[Alert]:
        inserted = []
        for alert in alerts:
            result = await db.execute(
                _INSERT_SQL,
                {
                    "id": alert.id,
                    "owner_id": alert.owner_id,
                    "alert_type": alert.alert_type.value,
                    "priority": alert.priority,
                    "title": alert.title,
                    "message": alert.message,
                    "related_entity_type": alert.related_entity_type,
                    "related_entity_id": alert.related_entity_id,
                },
            )
            inserted.append(_row_to_alert(result.fetchone()))
        return inserted

    async def list_alerts(
        self, db: AsyncSession, owner_id: str, unread_only: bool = False, limit: int = 50
    ) -> list[Alert]:
        result = await db.execute(
            _LIST_SQL, {"owner_id": owner_id, "unread_only": unread_only, "limit": limit}
        )
        return [_row_to_alert(row) for row in result.fetchall()]

    async def count_alerts(self, db: AsyncSession, owner_id: str) -> AlertCounts:
        row = (await db.execute(_COUNT_SQL, {"owner_id": owner_id})).fetchone()
        if row is None:
            return AlertCounts(total=0, unread=0, critical_unread=0)
        return AlertCounts(
            total=int(row.total), unread=int(row.unread), critical_unread=int(row.critical_unread)
        )

    async def mark_read(
        self, db: AsyncSession, alert_id: str, owner_id: str, read_at: datetime
    ) -> Alert | None:
        result = await db.execute(
            _MARK_READ_SQL, {"id": alert_id, "owner_id": owner_id, "read_at": read_at}
        )
        row = result.fetchone()
        return _row_to_alert(row) if row else None

    async def mark_all_read(self, db: AsyncSession, owner_id: str, read_at: datetime) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"owner_id": owner_id, "read_at": read_at})
        return int(result.rowcount or 0)

    async def delete_alert(self, db: AsyncSession, alert_id: str, owner_id: str) -> bool:
        result = await db.execute(_DELETE_SQL, {"id": alert_id, "owner_id": owner_id})
        return result.fetchone() is not None

    async def delete_read_alerts(
        self, db: AsyncSession, owner_id: str, read_before: datetime | None = None
    ) -> int:
        result = await db.execute(
            _DELETE_READ_SQL, {"owner_id": owner_id, "read_before": read_before}
        )
        return int(result.rowcount or 0)
