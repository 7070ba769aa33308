"""Domain events emitted by the ledger core.

Published only after the owning transaction has committed. Subscribers
(cache invalidators, notifiers) react to these instead of the core calling
them directly. A failing subscriber is logged and does not affect the
committed operation or the remaining subscribers.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from src.bk_common.datetime_utils import utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomainEvent:
    owner_id: str
    occurred_at: datetime = field(default_factory=utc_now, kw_only=True)


@dataclass(frozen=True)
class EntryCreated(DomainEvent):
    entry_id: str
    entry_date: date


@dataclass(frozen=True)
class EntryUpdated(DomainEvent):
    entry_id: str


@dataclass(frozen=True)
class EntryDeleted(DomainEvent):
    entry_id: str
    orphaned_settlements: int


@dataclass(frozen=True)
class SettlementApplied(DomainEvent):
    settlement_id: str
    entry_id: str
    amount: Decimal
    derived_entry_id: str | None


@dataclass(frozen=True)
class SettlementReversed(DomainEvent):
    settlement_id: str
    entry_id: str
    amount: Decimal


EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventPublisher:
    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    async def publish(self, event: DomainEvent) -> None:
        for handler in self._handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    "Event handler %r failed for %s", handler, type(event).__name__
                )
