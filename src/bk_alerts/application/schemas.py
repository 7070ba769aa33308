"""Pydantic schemas for bk_alerts API."""

from pydantic import BaseModel, Field

from src.bk_alerts.domain.models import Alert, AlertCounts


class CleanupRequest(BaseModel):
    retention_days: int | None = Field(
        None, ge=0, le=3650, description="Defaults to ALERT_RETENTION_DAYS"
    )


class AlertResponse(BaseModel):
    id: str
    type: str
    priority: int
    title: str
    message: str
    is_read: bool
    read_at: str | None
    related_entity_type: str | None
    related_entity_id: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, a: Alert) -> "AlertResponse":
        return cls(
            id=a.id,
            type=a.alert_type.value,
            priority=a.priority,
            title=a.title,
            message=a.message,
            is_read=a.is_read,
            read_at=a.read_at.isoformat() if a.read_at else None,
            related_entity_type=a.related_entity_type,
            related_entity_id=a.related_entity_id,
            created_at=a.created_at.isoformat() if a.created_at else None,
        )


class AlertCountsResponse(BaseModel):
    total: int
    unread: int
    critical_unread: int

    @classmethod
    def from_domain(cls, c: AlertCounts) -> "AlertCountsResponse":
        return cls(total=c.total, unread=c.unread, critical_unread=c.critical_unread)


class AlertListResponse(BaseModel):
    items: list[AlertResponse]


class AffectedResponse(BaseModel):
    """Bulk operations: how many alerts were touched."""

    affected: int
