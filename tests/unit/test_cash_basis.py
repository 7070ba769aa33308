"""Tests for bk_analytics.domain.cash_basis."""

from datetime import date
from decimal import Decimal

from src.bk_analytics.domain.cash_basis import (
    cash_summary,
    daily_cash_trend,
    get_cash_basis_view,
    monthly_comparison,
)
from src.bk_analytics.domain.period import Period
from src.bk_common.enums import Category, EntryType
from tests.fakes import make_entry

MARCH = Period(date(2026, 3, 1), date(2026, 3, 31))


class TestCashSummary:
    def test_cash_in_out_and_advances(self) -> None:
        entries = [
            make_entry(EntryType.CASH_IN, Category.SALES, "5000", entry_id="a"),
            make_entry(EntryType.CASH_OUT, Category.OPEX, "1200", entry_id="b"),
            make_entry(EntryType.ADVANCE, Category.SALES, "800", entry_id="c"),
            make_entry(EntryType.ADVANCE, Category.COGS, "300", entry_id="d"),
        ]
        summary = cash_summary(entries)
        assert summary.cash_in == Decimal("5800.00")
        assert summary.cash_out == Decimal("1500.00")
        assert summary.balance == Decimal("4300.00")

    def test_credit_never_moves_cash(self) -> None:
        entries = [
            make_entry(EntryType.CREDIT, Category.SALES, "9000", entry_id="a"),
            make_entry(EntryType.CREDIT, Category.COGS, "4000", entry_id="b", remaining="0"),
        ]
        summary = cash_summary(entries)
        assert summary.cash_in == summary.cash_out == Decimal("0.00")

    def test_settling_a_credit_moves_cash_through_the_derived_entry(self) -> None:
        credit = make_entry(EntryType.CREDIT, Category.SALES, "5000", entry_id="cr", remaining="2000")
        derived = make_entry(EntryType.CASH_IN, Category.SALES, "3000", entry_id="dv", derived=True)
        assert cash_summary([credit]).cash_in == Decimal("0.00")
        assert cash_summary([credit, derived]).cash_in == Decimal("3000.00")

    def test_negative_balance(self) -> None:
        entries = [make_entry(EntryType.CASH_OUT, Category.ASSETS, "250", entry_id="a")]
        assert cash_summary(entries).balance == Decimal("-250.00")


class TestCashView:
    def test_view_scopes_to_period_and_breaks_down(self) -> None:
        entries = [
            make_entry(EntryType.CASH_IN, Category.SALES, "3000", date(2026, 3, 2), entry_id="a", party_id="p1"),
            make_entry(EntryType.CASH_IN, Category.SALES, "1000", date(2026, 3, 3), entry_id="b"),
            make_entry(EntryType.CASH_OUT, Category.COGS, "1500", date(2026, 3, 3), entry_id="c"),
            make_entry(EntryType.CASH_OUT, Category.OPEX, "500", date(2026, 3, 4), entry_id="d"),
            make_entry(EntryType.CASH_IN, Category.SALES, "7777", date(2026, 2, 27), entry_id="old"),
        ]
        view = get_cash_basis_view(entries, MARCH, {"p1": "Mehta Stores"})

        assert view.cash_in == Decimal("4000.00")
        assert view.cash_out == Decimal("2000.00")
        assert view.balance == Decimal("2000.00")
        assert view.entry_count == 4
        assert [r.label for r in view.cash_out_by_category] == ["COGS", "Opex"]
        assert view.cash_out_by_category[0].percentage == Decimal("75.00")
        assert {r.label for r in view.by_party} == {"Mehta Stores", "No party"}
        assert len(view.trend) == 31

    def test_all_time_trend_spans_the_data(self) -> None:
        entries = [
            make_entry(EntryType.CASH_IN, Category.SALES, "100", date(2026, 1, 30), entry_id="a"),
            make_entry(EntryType.CASH_IN, Category.SALES, "100", date(2026, 2, 2), entry_id="b"),
        ]
        view = get_cash_basis_view(entries, None)
        assert view.label == "All Time"
        assert view.trend[0].day == date(2026, 1, 30)
        assert view.trend[-1].day == date(2026, 2, 2)

    def test_empty(self) -> None:
        view = get_cash_basis_view([], None)
        assert view.balance == Decimal("0.00")
        assert view.trend == []

    def test_daily_trend_fills_empty_days(self) -> None:
        entries = [make_entry(EntryType.CASH_OUT, Category.OPEX, "40", date(2026, 3, 2), entry_id="a")]
        trend = daily_cash_trend(entries, date(2026, 3, 1), date(2026, 3, 3))
        assert [p.net for p in trend] == [Decimal("0.00"), Decimal("-40.00"), Decimal("0.00")]


class TestMonthlyComparison:
    def test_change_relative_to_last_month(self) -> None:
        entries = [
            make_entry(EntryType.CASH_IN, Category.SALES, "1000", date(2026, 2, 10), entry_id="a"),
            make_entry(EntryType.CASH_IN, Category.SALES, "1500", date(2026, 3, 10), entry_id="b"),
            make_entry(EntryType.CASH_OUT, Category.OPEX, "500", date(2026, 3, 11), entry_id="c"),
        ]
        cmp = monthly_comparison(entries, date(2026, 3, 15))
        assert cmp.current.cash_in == Decimal("1500.00")
        assert cmp.previous.cash_in == Decimal("1000.00")
        assert cmp.cash_in_change_pct == Decimal("50.00")
        # Nothing went out last month: no baseline
        assert cmp.cash_out_change_pct == Decimal("0.00")
        assert cmp.balance_change_pct == Decimal("0.00")

    def test_negative_baseline_uses_magnitude(self) -> None:
        entries = [
            make_entry(EntryType.CASH_OUT, Category.OPEX, "200", date(2026, 2, 10), entry_id="a"),
            make_entry(EntryType.CASH_OUT, Category.OPEX, "100", date(2026, 3, 10), entry_id="b"),
        ]
        cmp = monthly_comparison(entries, date(2026, 3, 15))
        # -100 vs -200: balance improved by 50%
        assert cmp.balance_change_pct == Decimal("50.00")
