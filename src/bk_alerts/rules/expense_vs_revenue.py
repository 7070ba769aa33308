from collections.abc import Sequence
from decimal import Decimal

from src.bk_alerts.domain.models import PRIORITY_CRITICAL, PRIORITY_WARNING, AlertDraft
from src.bk_analytics.domain.accrual import monthly_expense_vs_revenue
from src.bk_common.enums import AlertType
from src.bk_common.money import money_to_display
from src.bk_ledger.domain.models import Entry

# Expenses above revenue * this ratio escalate to critical
CRITICAL_RATIO = Decimal("1.5")


def check_expense_vs_revenue(entries: Sequence[Entry], new_entry: Entry) -> AlertDraft | None:
    """Accrual COGS + Opex vs revenue for the month of ``new_entry``."""
    totals = monthly_expense_vs_revenue(entries, new_entry.entry_date)
    expenses, revenue = totals.expenses, totals.revenue
    if expenses <= revenue:
        return None

    month = f"{new_entry.entry_date:%b %Y}"
    difference = expenses - revenue
    critical = revenue > 0 and expenses > revenue * CRITICAL_RATIO
    return AlertDraft(
        alert_type=AlertType.CRITICAL if critical else AlertType.WARNING,
        priority=PRIORITY_CRITICAL if critical else PRIORITY_WARNING,
        title="Expenses Far Exceed Revenue" if critical else "Expenses Exceed Revenue",
        message=(
            f"Your expenses ({money_to_display(expenses)}) exceed your revenue "
            f"({money_to_display(revenue)}) by {money_to_display(difference)} in {month}."
        ),
    )
