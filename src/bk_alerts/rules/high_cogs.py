from collections.abc import Sequence
from decimal import Decimal

from src.bk_alerts.domain.models import PRIORITY_WARNING, AlertDraft
from src.bk_analytics.domain.accrual import monthly_expense_vs_revenue
from src.bk_common.enums import AlertType
from src.bk_common.money import percentage
from src.bk_ledger.domain.models import Entry

HIGH_COGS_PCT = Decimal("50")


def check_high_cogs(entries: Sequence[Entry], new_entry: Entry) -> AlertDraft | None:
    """COGS above half of the month's revenue."""
    totals = monthly_expense_vs_revenue(entries, new_entry.entry_date)
    if totals.revenue <= 0:
        return None
    share = percentage(totals.cogs, totals.revenue)
    if share <= HIGH_COGS_PCT:
        return None
    return AlertDraft(
        alert_type=AlertType.WARNING,
        priority=PRIORITY_WARNING,
        title="High Cost of Goods Sold",
        message=(
            f"Your COGS is {share:.1f}% of revenue (industry avg: 40-50%). "
            "Consider optimizing your supply chain or renegotiating with suppliers."
        ),
    )
