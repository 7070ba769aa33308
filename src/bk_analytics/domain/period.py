"""Period resolution shared by every aggregation.

A Period is a closed interval [start, end] of calendar dates. Entries are
bucketed by ``entry_date`` (the date of the underlying event), never by
creation timestamp. ``all-time`` resolves to None: no filtering.
"""

import calendar
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import TypeVar

from src.bk_common.errors import ValidationError
from src.bk_ledger.domain.models import Entry

E = TypeVar("E", bound=Entry)


class DateRange(str, Enum):
    THIS_MONTH = "this-month"
    LAST_MONTH = "last-month"
    THIS_YEAR = "this-year"
    LAST_YEAR = "last-year"
    ALL_TIME = "all-time"


@dataclass(frozen=True)
class Period:
    start: date
    end: date

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


def month_bounds(day: date) -> Period:
    last = calendar.monthrange(day.year, day.month)[1]
    return Period(day.replace(day=1), day.replace(day=last))


def previous_month(day: date) -> date:
    """Any date in the month before ``day`` (the 1st)."""
    return day.replace(day=1) - timedelta(days=1)


def resolve_period(date_range: DateRange | str, today: date) -> Period | None:
    try:
        date_range = DateRange(date_range)
    except ValueError:
        allowed = ", ".join(r.value for r in DateRange)
        raise ValidationError("date_range", f"range must be one of: {allowed}") from None

    if date_range == DateRange.THIS_MONTH:
        return month_bounds(today)
    if date_range == DateRange.LAST_MONTH:
        return month_bounds(previous_month(today))
    if date_range == DateRange.THIS_YEAR:
        return Period(date(today.year, 1, 1), date(today.year, 12, 31))
    if date_range == DateRange.LAST_YEAR:
        return Period(date(today.year - 1, 1, 1), date(today.year - 1, 12, 31))
    return None


def custom_period(start: date, end: date) -> Period:
    if start > end:
        raise ValidationError("period", f"Period start {start} is after end {end}")
    return Period(start, end)


def filter_entries(entries: Iterable[E], period: Period | None) -> list[E]:
    if period is None:
        return list(entries)
    return [e for e in entries if e.entry_date in period]


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def iter_months(start: date, end: date) -> Iterator[Period]:
    """Calendar months touching [start, end], each as its full month."""
    month = start.replace(day=1)
    while month <= end:
        bounds = month_bounds(month)
        yield bounds
        month = bounds.end + timedelta(days=1)


def period_label(period: Period | None) -> str:
    if period is None:
        return "All Time"
    return f"{period.start:%d %b %Y} - {period.end:%d %b %Y}"


def span_of(entries: Iterable[Entry]) -> Period | None:
    """Smallest period covering every entry; None when there are none."""
    dates = [e.entry_date for e in entries]
    if not dates:
        return None
    return Period(min(dates), max(dates))
