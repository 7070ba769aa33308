"""Tests for bk_common.money."""

from decimal import Decimal

import pytest

from src.bk_common.money import (
    has_at_most_two_places,
    money_to_display,
    percentage,
    sum_money,
    to_money,
)


class TestToMoney:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (5000, Decimal("5000.00")),
            ("1234.5", Decimal("1234.50")),
            (Decimal("0.1"), Decimal("0.10")),
            (0.1, Decimal("0.10")),
        ],
    )
    def test_coerces_to_two_places(self, raw: object, expected: Decimal) -> None:
        assert to_money(raw) == expected
        assert to_money(raw).as_tuple().exponent == -2

    def test_float_goes_through_repr_not_binary_value(self) -> None:
        # 0.1 + 0.2 as a float is 0.30000000000000004
        assert to_money(0.1 + 0.2) == Decimal("0.30")

    @pytest.mark.parametrize("raw", [True, float("nan"), float("inf"), "abc", "", None])
    def test_rejects_non_numbers(self, raw: object) -> None:
        with pytest.raises(ValueError):
            to_money(raw)

    @pytest.mark.parametrize("raw", ["1e3", "1E+3", "2.5e2", Decimal("1E+3")])
    def test_rejects_exponent_notation(self, raw: object) -> None:
        with pytest.raises(ValueError, match="plain digits"):
            to_money(raw)


class TestHasAtMostTwoPlaces:
    def test_two_places_ok(self) -> None:
        assert has_at_most_two_places("10.25")
        assert has_at_most_two_places(10)

    def test_sub_cent_rejected(self) -> None:
        assert not has_at_most_two_places("10.255")
        assert not has_at_most_two_places(0.001)

    def test_trailing_zeros_are_fine(self) -> None:
        assert has_at_most_two_places("10.2500")

    def test_exponent_form_is_not_two_places(self) -> None:
        assert not has_at_most_two_places("1e3")


class TestAggregates:
    def test_sum_money_is_exact(self) -> None:
        values = [Decimal("0.10")] * 10
        assert sum_money(values) == Decimal("1.00")

    def test_sum_money_empty(self) -> None:
        assert sum_money([]) == Decimal("0.00")

    def test_percentage(self) -> None:
        assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.33")

    def test_percentage_of_zero_total(self) -> None:
        assert percentage(Decimal("5"), Decimal("0")) == Decimal("0.00")


class TestDisplay:
    def test_grouping(self) -> None:
        assert money_to_display(Decimal("1234.5")) == "₹1,234.50"

    def test_negative(self) -> None:
        assert money_to_display(Decimal("-12")) == "-₹12.00"

    def test_zero(self) -> None:
        assert money_to_display(Decimal("0")) == "₹0.00"
