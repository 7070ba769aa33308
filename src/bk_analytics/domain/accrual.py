"""Accrual-basis view: revenue and expenses when earned / incurred.

Recognition per entry:
  - Cash IN / Cash OUT: recognised, unless generated by a credit settlement
    (``is_settlement_derived``); the original Credit entry already counted it.
  - Credit: recognised immediately, settled or not.
  - Advance: recognised only once settled.
Assets are capital spend, never an expense here.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.bk_analytics.domain.breakdown import BreakdownRow, by_category, by_party
from src.bk_analytics.domain.period import (
    Period,
    filter_entries,
    iter_months,
    month_bounds,
    period_label,
    span_of,
)
from src.bk_common.enums import Category, EntryType
from src.bk_common.money import sum_money
from src.bk_ledger.domain.models import Entry

MARGIN_PLACES = Decimal("0.0001")


def is_recognized(entry: Entry) -> bool:
    if entry.is_settlement_derived:
        return False
    if entry.entry_type == EntryType.ADVANCE:
        return entry.settled
    return True


def _recognized(entries: Iterable[Entry], category: Category) -> list[Entry]:
    return [e for e in entries if e.category == category and is_recognized(e)]


@dataclass(frozen=True)
class AccrualTotals:
    revenue: Decimal
    cogs: Decimal
    opex: Decimal

    @property
    def expenses(self) -> Decimal:
        return self.cogs + self.opex

    @property
    def gross_profit(self) -> Decimal:
        return self.revenue - self.cogs

    @property
    def net_profit(self) -> Decimal:
        return self.gross_profit - self.opex


def accrual_totals(entries: Iterable[Entry]) -> AccrualTotals:
    entries = list(entries)
    return AccrualTotals(
        revenue=sum_money([e.amount for e in _recognized(entries, Category.SALES)]),
        cogs=sum_money([e.amount for e in _recognized(entries, Category.COGS)]),
        opex=sum_money([e.amount for e in _recognized(entries, Category.OPEX)]),
    )


def profit_margin(net_profit: Decimal, revenue: Decimal) -> Decimal:
    """net / revenue as a ratio at 4dp; 0 when there is no revenue."""
    if revenue <= 0:
        return Decimal("0.0000")
    return (net_profit / revenue).quantize(MARGIN_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ProfitPoint:
    month: date  # first day of the month
    label: str
    revenue: Decimal
    expenses: Decimal
    profit: Decimal
    margin: Decimal


@dataclass(frozen=True)
class AccrualView:
    period: Period | None
    label: str
    revenue: Decimal
    cogs: Decimal
    opex: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    margin: Decimal
    expense_breakdown: list[BreakdownRow] = field(default_factory=list)
    by_party: list[BreakdownRow] = field(default_factory=list)
    trend: list[ProfitPoint] = field(default_factory=list)


def expense_entries(entries: Iterable[Entry]) -> list[Entry]:
    entries = list(entries)
    return _recognized(entries, Category.COGS) + _recognized(entries, Category.OPEX)


def monthly_profit_trend(entries: Iterable[Entry], start: date, end: date) -> list[ProfitPoint]:
    entries = list(entries)
    points = []
    for month in iter_months(start, end):
        totals = accrual_totals(filter_entries(entries, month))
        profit = totals.revenue - totals.expenses
        points.append(
            ProfitPoint(
                month=month.start,
                label=f"{month.start:%b %Y}",
                revenue=totals.revenue,
                expenses=totals.expenses,
                profit=profit,
                margin=profit_margin(profit, totals.revenue),
            )
        )
    return points


def get_accrual_view(
    entries: Iterable[Entry],
    period: Period | None,
    party_names: dict[str, str] | None = None,
) -> AccrualView:
    scoped = filter_entries(entries, period)
    totals = accrual_totals(scoped)
    recognized = [e for e in scoped if is_recognized(e) and e.category != Category.ASSETS]

    window = period or span_of(recognized)
    trend = monthly_profit_trend(scoped, window.start, window.end) if window else []

    return AccrualView(
        period=period,
        label=period_label(period),
        revenue=totals.revenue,
        cogs=totals.cogs,
        opex=totals.opex,
        gross_profit=totals.gross_profit,
        net_profit=totals.net_profit,
        margin=profit_margin(totals.net_profit, totals.revenue),
        expense_breakdown=by_category(expense_entries(scoped)),
        by_party=by_party(recognized, party_names),
        trend=trend,
    )


def monthly_expense_vs_revenue(entries: Iterable[Entry], day: date) -> AccrualTotals:
    """Accrual totals for the calendar month containing ``day``."""
    return accrual_totals(filter_entries(entries, month_bounds(day)))

