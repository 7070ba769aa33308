"""Tests for bk_analytics.domain.period."""

from datetime import date

import pytest

from src.bk_analytics.domain.period import (
    DateRange,
    Period,
    custom_period,
    filter_entries,
    iter_days,
    iter_months,
    month_bounds,
    period_label,
    resolve_period,
)
from src.bk_common.errors import ValidationError
from tests.fakes import make_entry

TODAY = date(2026, 3, 15)


class TestResolvePeriod:
    def test_this_month(self) -> None:
        assert resolve_period(DateRange.THIS_MONTH, TODAY) == Period(date(2026, 3, 1), date(2026, 3, 31))

    def test_last_month_across_year_boundary(self) -> None:
        assert resolve_period("last-month", date(2026, 1, 20)) == Period(
            date(2025, 12, 1), date(2025, 12, 31)
        )

    def test_this_and_last_year(self) -> None:
        assert resolve_period("this-year", TODAY) == Period(date(2026, 1, 1), date(2026, 12, 31))
        assert resolve_period("last-year", TODAY) == Period(date(2025, 1, 1), date(2025, 12, 31))

    def test_all_time_is_unbounded(self) -> None:
        assert resolve_period("all-time", TODAY) is None

    def test_unknown_range(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            resolve_period("fortnight", TODAY)
        assert exc_info.value.rule == "date_range"

    def test_february_leap_year(self) -> None:
        assert month_bounds(date(2024, 2, 10)).end == date(2024, 2, 29)


class TestCustomPeriod:
    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(ValidationError):
            custom_period(date(2026, 3, 2), date(2026, 3, 1))

    def test_single_day(self) -> None:
        assert date(2026, 3, 1) in custom_period(date(2026, 3, 1), date(2026, 3, 1))


class TestHelpers:
    def test_filter_is_inclusive_on_both_ends(self) -> None:
        entries = [
            make_entry(entry_id="a", entry_date=date(2026, 2, 28)),
            make_entry(entry_id="b", entry_date=date(2026, 3, 1)),
            make_entry(entry_id="c", entry_date=date(2026, 3, 31)),
            make_entry(entry_id="d", entry_date=date(2026, 4, 1)),
        ]
        scoped = filter_entries(entries, month_bounds(TODAY))
        assert [e.id for e in scoped] == ["b", "c"]

    def test_filter_none_keeps_everything(self) -> None:
        entries = [make_entry(entry_id="a"), make_entry(entry_id="b")]
        assert len(filter_entries(entries, None)) == 2

    def test_iter_days_includes_ends(self) -> None:
        days = list(iter_days(date(2026, 2, 27), date(2026, 3, 2)))
        assert days == [date(2026, 2, 27), date(2026, 2, 28), date(2026, 3, 1), date(2026, 3, 2)]

    def test_iter_months(self) -> None:
        months = list(iter_months(date(2025, 11, 15), date(2026, 1, 3)))
        assert [m.start for m in months] == [date(2025, 11, 1), date(2025, 12, 1), date(2026, 1, 1)]
        assert months[-1].end == date(2026, 1, 31)

    def test_labels(self) -> None:
        assert period_label(None) == "All Time"
        assert period_label(Period(date(2026, 3, 1), date(2026, 3, 31))) == "01 Mar 2026 - 31 Mar 2026"
