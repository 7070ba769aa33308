"""Business health score out of 100.

  cash         30   positive all-time cash (20), plus runway above half a month's sales (10)
  profit       30   positive month profit (20), plus net margin above 20% (10)
  collections  20   by age of the oldest open credit sale; 20 when nothing is pending
  payables     20   by age of the oldest open credit purchase; 20 when nothing is pending
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from src.bk_analytics.domain.accrual import accrual_totals
from src.bk_analytics.domain.cash_basis import cash_balance
from src.bk_analytics.domain.pending import PendingGroup, pending_by_party
from src.bk_analytics.domain.period import filter_entries, month_bounds
from src.bk_common.money import percentage
from src.bk_ledger.domain.models import Entry


class HealthStatus(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    NEEDS_ATTENTION = "needs-attention"


@dataclass(frozen=True)
class HealthInputs:
    cash: Decimal
    profit: Decimal
    sales: Decimal
    pending_collections: Decimal
    pending_bills: Decimal
    oldest_collection_days: int
    oldest_bill_days: int


@dataclass(frozen=True)
class HealthComponent:
    score: int
    max: int
    status: str


@dataclass(frozen=True)
class HealthScore:
    total: int
    status: HealthStatus
    cash: HealthComponent
    profit: HealthComponent
    collections: HealthComponent
    payables: HealthComponent


def _age_score(oldest_days: int, pending: Decimal) -> int:
    if pending == 0 or oldest_days <= 30:
        return 20
    if oldest_days <= 60:
        return 10
    return 5


def _label(score: int, top: int, middle: int, labels: tuple[str, str, str]) -> str:
    if score >= top:
        return labels[0]
    if score >= middle:
        return labels[1]
    return labels[2]


def calculate_health_score(data: HealthInputs) -> HealthScore:
    cash = 0
    if data.cash > 0:
        cash = 20
        if data.cash > data.sales * Decimal("0.5"):
            cash += 10

    profit = 0
    if data.profit > 0:
        profit = 20
        if percentage(data.profit, data.sales) > 20:
            profit += 10

    collections = _age_score(data.oldest_collection_days, data.pending_collections)
    payables = _age_score(data.oldest_bill_days, data.pending_bills)
    total = cash + profit + collections + payables

    if total >= 85:
        status = HealthStatus.EXCELLENT
    elif total >= 70:
        status = HealthStatus.GOOD
    elif total >= 50:
        status = HealthStatus.FAIR
    else:
        status = HealthStatus.NEEDS_ATTENTION

    return HealthScore(
        total=total,
        status=status,
        cash=HealthComponent(cash, 30, _label(cash, 25, 15, ("Excellent", "Good", "Needs attention"))),
        profit=HealthComponent(
            profit, 30, _label(profit, 25, 15, ("Excellent", "Good", "Needs attention"))
        ),
        collections=HealthComponent(
            collections, 20, _label(collections, 15, 10, ("Excellent", "Fair", "Needs attention"))
        ),
        payables=HealthComponent(
            payables, 20, _label(payables, 15, 10, ("Excellent", "Fair", "Overdue items"))
        ),
    )


def _oldest_days(group: PendingGroup, today: date) -> int:
    if not group.parties:
        return 0
    return (today - min(p.oldest_entry_date for p in group.parties)).days


def health_inputs(entries: Iterable[Entry], today: date) -> HealthInputs:
    """Cash is all-time; profit and sales are the current month on accrual basis."""
    entries = list(entries)
    month = accrual_totals(filter_entries(entries, month_bounds(today)))
    pending = pending_by_party(entries)
    return HealthInputs(
        cash=cash_balance(entries),
        profit=month.net_profit,
        sales=month.revenue,
        pending_collections=pending.collections.total,
        pending_bills=pending.bills.total,
        oldest_collection_days=_oldest_days(pending.collections, today),
        oldest_bill_days=_oldest_days(pending.bills, today),
    )


def business_health(entries: Iterable[Entry], today: date) -> HealthScore:
    return calculate_health_score(health_inputs(entries, today))
