"""Plain-language recommendations derived from the accrual view.

Ratios are percentages of revenue for the period. The trend checks compare the
month the period starts in (the current month for all-time) with the month
before it, in percentage points for the margin and percent for operating cost.
"""

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from src.bk_analytics.domain.accrual import accrual_totals, expense_entries
from src.bk_analytics.domain.breakdown import by_category
from src.bk_analytics.domain.period import Period, filter_entries, month_bounds, previous_month
from src.bk_common.money import money_to_display, percentage
from src.bk_ledger.domain.models import Entry

HIGH_COGS_PCT = Decimal("50")
LOW_COGS_PCT = Decimal("30")
HIGH_OPEX_PCT = Decimal("40")
LOW_MARGIN_PCT = Decimal("10")
STRONG_MARGIN_PCT = Decimal("20")
MARGIN_SHIFT_POINTS = Decimal("5")
OPEX_SPIKE_PCT = Decimal("20")


def _margin_pct(entries: Iterable[Entry]) -> Decimal:
    totals = accrual_totals(entries)
    return percentage(totals.net_profit, totals.revenue)


def _ratio_advice(entries: list[Entry]) -> list[str]:
    totals = accrual_totals(entries)
    if totals.revenue <= 0:
        return []
    advice = []
    cogs = percentage(totals.cogs, totals.revenue)
    if cogs > HIGH_COGS_PCT:
        advice.append(
            f"Your COGS is {cogs:.1f}% of revenue (industry avg: 40-50%). Consider optimizing "
            "your supply chain or renegotiating with suppliers."
        )
    elif cogs < LOW_COGS_PCT:
        advice.append(
            f"Your COGS is {cogs:.1f}% of revenue, which is excellent! You have strong margins."
        )

    opex = percentage(totals.opex, totals.revenue)
    if opex > HIGH_OPEX_PCT:
        advice.append(
            f"Operating expenses are {opex:.1f}% of revenue. "
            "Look for opportunities to reduce overhead costs."
        )

    margin = percentage(totals.net_profit, totals.revenue)
    if margin < 0:
        advice.append(
            "You're currently running at a loss. Focus on increasing revenue or reducing "
            "expenses to reach break-even."
        )
    elif margin < LOW_MARGIN_PCT:
        advice.append(
            f"Profit margin is {margin:.1f}%, which is low. "
            "Aim for at least 10-15% for healthy business growth."
        )
    elif margin > STRONG_MARGIN_PCT:
        advice.append(
            f"Excellent profit margin of {margin:.1f}%! Your business is performing very well."
        )
    return advice


def _trend_advice(entries: list[Entry], anchor: date) -> list[str]:
    current = filter_entries(entries, month_bounds(anchor))
    previous = filter_entries(entries, month_bounds(previous_month(anchor)))
    advice = []

    previous_margin = _margin_pct(previous)
    if previous_margin != 0:
        change = _margin_pct(current) - previous_margin
        if change > MARGIN_SHIFT_POINTS:
            advice.append(f"Profit margin improved by {change:.1f}% this month. Great work!")
        elif change < -MARGIN_SHIFT_POINTS:
            advice.append(
                f"Profit margin declined by {-change:.1f}% this month. "
                "Review recent changes in pricing or costs."
            )

    previous_opex = accrual_totals(previous).opex
    if previous_opex > 0:
        spike = percentage(accrual_totals(current).opex - previous_opex, previous_opex)
        if spike > OPEX_SPIKE_PCT:
            advice.append(
                f"Operating expenses increased by {spike:.1f}% this month. "
                "Investigate the cause of this spike."
            )
    return advice


def get_recommendations(
    entries: Iterable[Entry], period: Period | None, today: date
) -> list[str]:
    entries = list(entries)
    scoped = filter_entries(entries, period)
    advice = _ratio_advice(scoped)

    expenses = by_category(expense_entries(scoped))
    if expenses:
        top = expenses[0]
        advice.append(
            f"Top expense category: {top.label} ({money_to_display(top.amount)}, "
            f"{top.percentage:.1f}% of total expenses)"
        )

    advice.extend(_trend_advice(entries, period.start if period else today))
    return advice
