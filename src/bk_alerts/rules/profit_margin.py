from collections.abc import Sequence
from decimal import Decimal

from src.bk_alerts.domain.models import (
    PRIORITY_CRITICAL,
    PRIORITY_INFO,
    PRIORITY_WARNING,
    AlertDraft,
)
from src.bk_analytics.domain.accrual import monthly_expense_vs_revenue
from src.bk_common.enums import AlertType
from src.bk_common.money import money_to_display, percentage
from src.bk_ledger.domain.models import Entry

# Net margin (percent of revenue) below which an alert is raised
LOW_MARGIN_PCT = Decimal("10")
WARNING_MARGIN_PCT = Decimal("5")


def check_profit_margin(entries: Sequence[Entry], new_entry: Entry) -> AlertDraft | None:
    """Accrual net margin for the month of ``new_entry``; silent without revenue."""
    totals = monthly_expense_vs_revenue(entries, new_entry.entry_date)
    if totals.revenue <= 0:
        return None
    margin = percentage(totals.net_profit, totals.revenue)
    if margin >= LOW_MARGIN_PCT:
        return None

    month = f"{new_entry.entry_date:%b %Y}"
    if margin < 0:
        return AlertDraft(
            alert_type=AlertType.CRITICAL,
            priority=PRIORITY_CRITICAL,
            title="Operating at a Loss",
            message=(
                f"You're operating at a {-margin:.1f}% loss in {month}. "
                f"Revenue: {money_to_display(totals.revenue)}, "
                f"Loss: {money_to_display(-totals.net_profit)}"
            ),
        )
    warning = margin < WARNING_MARGIN_PCT
    return AlertDraft(
        alert_type=AlertType.WARNING if warning else AlertType.INFO,
        priority=PRIORITY_WARNING if warning else PRIORITY_INFO,
        title="Low Profit Margin",
        message=(
            f"Your profit margin for {month} is only {margin:.1f}%. "
            "Consider ways to increase revenue or reduce expenses."
        ),
    )
