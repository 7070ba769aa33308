"""Domain models for bk_alerts: pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from config.settings import settings
from src.bk_common.enums import AlertType

# Higher = more urgent
PRIORITY_INFO = 0
PRIORITY_WARNING = 1
PRIORITY_CRITICAL = 2


@dataclass
class Alert:
    id: str
    owner_id: str
    alert_type: AlertType
    priority: int
    title: str
    message: str
    is_read: bool = False
    read_at: datetime | None = None
    related_entity_type: str | None = None
    related_entity_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class AlertDraft:
    """What a rule produces; persisted as an Alert by the application service."""

    alert_type: AlertType
    priority: int
    title: str
    message: str
    related_entity_type: str | None = None
    related_entity_id: str | None = None


@dataclass(frozen=True)
class AlertThresholds:
    high_expense: Decimal
    low_balance: Decimal
    low_balance_warning: Decimal = Decimal("5000.00")

    @classmethod
    def from_settings(cls) -> "AlertThresholds":
        return cls(
            high_expense=settings.HIGH_EXPENSE_THRESHOLD,
            low_balance=settings.LOW_BALANCE_THRESHOLD,
            low_balance_warning=settings.LOW_BALANCE_WARNING_THRESHOLD,
        )


@dataclass(frozen=True)
class AlertCounts:
    total: int
    unread: int
    critical_unread: int
