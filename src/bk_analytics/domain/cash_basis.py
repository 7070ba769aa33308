"""Cash-basis view: actual cash movement only.

  cash in  = Cash IN + Advance (Sales)
  cash out = Cash OUT + Advance (COGS | Opex | Assets)
  balance  = cash in - cash out

Credit entries never touch this view; the Cash IN / Cash OUT generated when a
credit is settled is what moves cash.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from src.bk_analytics.domain.breakdown import BreakdownRow, by_category, by_party
from src.bk_analytics.domain.period import (
    Period,
    filter_entries,
    iter_days,
    month_bounds,
    period_label,
    previous_month,
    span_of,
)
from src.bk_common.enums import EXPENSE_CATEGORIES, Category, EntryType
from src.bk_common.money import CENT, ZERO, sum_money
from src.bk_ledger.domain.models import Entry


def is_cash_in(entry: Entry) -> bool:
    return entry.entry_type == EntryType.CASH_IN or (
        entry.entry_type == EntryType.ADVANCE and entry.category == Category.SALES
    )


def is_cash_out(entry: Entry) -> bool:
    return entry.entry_type == EntryType.CASH_OUT or (
        entry.entry_type == EntryType.ADVANCE and entry.category in EXPENSE_CATEGORIES
    )


@dataclass(frozen=True)
class CashSummary:
    cash_in: Decimal
    cash_out: Decimal
    balance: Decimal


@dataclass(frozen=True)
class CashFlowPoint:
    day: date
    cash_in: Decimal
    cash_out: Decimal
    net: Decimal


@dataclass(frozen=True)
class CashBasisView:
    period: Period | None
    label: str
    cash_in: Decimal
    cash_out: Decimal
    balance: Decimal
    entry_count: int
    cash_in_by_category: list[BreakdownRow] = field(default_factory=list)
    cash_out_by_category: list[BreakdownRow] = field(default_factory=list)
    by_party: list[BreakdownRow] = field(default_factory=list)
    trend: list[CashFlowPoint] = field(default_factory=list)


def cash_summary(entries: Iterable[Entry]) -> CashSummary:
    entries = list(entries)
    cash_in = sum_money([e.amount for e in entries if is_cash_in(e)])
    cash_out = sum_money([e.amount for e in entries if is_cash_out(e)])
    return CashSummary(cash_in, cash_out, cash_in - cash_out)


def cash_balance(entries: Iterable[Entry]) -> Decimal:
    return cash_summary(entries).balance


def daily_cash_trend(entries: Iterable[Entry], start: date, end: date) -> list[CashFlowPoint]:
    """One point per calendar day in [start, end], empty days included."""
    ins: dict[date, list[Decimal]] = {}
    outs: dict[date, list[Decimal]] = {}
    for e in entries:
        if not start <= e.entry_date <= end:
            continue
        if is_cash_in(e):
            ins.setdefault(e.entry_date, []).append(e.amount)
        elif is_cash_out(e):
            outs.setdefault(e.entry_date, []).append(e.amount)

    points = []
    for day in iter_days(start, end):
        cash_in = sum_money(ins.get(day, []))
        cash_out = sum_money(outs.get(day, []))
        points.append(CashFlowPoint(day, cash_in, cash_out, cash_in - cash_out))
    return points


def get_cash_basis_view(
    entries: Iterable[Entry],
    period: Period | None,
    party_names: dict[str, str] | None = None,
) -> CashBasisView:
    scoped = filter_entries(entries, period)
    cash_in_entries = [e for e in scoped if is_cash_in(e)]
    cash_out_entries = [e for e in scoped if is_cash_out(e)]
    summary = cash_summary(scoped)

    window = period or span_of(cash_in_entries + cash_out_entries)
    trend = daily_cash_trend(scoped, window.start, window.end) if window else []

    return CashBasisView(
        period=period,
        label=period_label(period),
        cash_in=summary.cash_in,
        cash_out=summary.cash_out,
        balance=summary.balance,
        entry_count=len(cash_in_entries) + len(cash_out_entries),
        cash_in_by_category=by_category(cash_in_entries),
        cash_out_by_category=by_category(cash_out_entries),
        by_party=by_party(cash_in_entries + cash_out_entries, party_names),
        trend=trend,
    )


# ---------------------------------------------------------------------------
# Month-over-month comparison
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyComparison:
    current_month: Period
    last_month: Period
    current: CashSummary
    previous: CashSummary
    cash_in_change_pct: Decimal
    cash_out_change_pct: Decimal
    balance_change_pct: Decimal


def _change_pct(current: Decimal, previous: Decimal) -> Decimal:
    """Percent change relative to |previous|; 0 when there is nothing to compare against."""
    if previous == 0:
        return ZERO
    return ((current - previous) / abs(previous) * 100).quantize(CENT, rounding=ROUND_HALF_UP)


def monthly_comparison(entries: Iterable[Entry], today: date) -> MonthlyComparison:
    entries = list(entries)
    this_month = month_bounds(today)
    last_month = month_bounds(previous_month(today))
    current = cash_summary(filter_entries(entries, this_month))
    previous = cash_summary(filter_entries(entries, last_month))
    return MonthlyComparison(
        current_month=this_month,
        last_month=last_month,
        current=current,
        previous=previous,
        cash_in_change_pct=_change_pct(current.cash_in, previous.cash_in),
        cash_out_change_pct=_change_pct(current.cash_out, previous.cash_out),
        balance_change_pct=_change_pct(current.balance, previous.balance),
    )
