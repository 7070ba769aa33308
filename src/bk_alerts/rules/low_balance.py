from collections.abc import Sequence
from decimal import Decimal

from src.bk_alerts.domain.models import (
    PRIORITY_CRITICAL,
    PRIORITY_INFO,
    PRIORITY_WARNING,
    AlertDraft,
)
from src.bk_analytics.domain.cash_basis import cash_balance
from src.bk_common.enums import AlertType
from src.bk_common.money import money_to_display
from src.bk_ledger.domain.models import Entry


def check_low_balance(
    entries: Sequence[Entry], threshold: Decimal, warning_below: Decimal
) -> AlertDraft | None:
    """All-time cash-basis balance in three tiers.

    negative -> critical, below ``warning_below`` -> warning, below ``threshold`` -> info.
    """
    balance = cash_balance(entries)
    if balance >= threshold:
        return None
    if balance < 0:
        return AlertDraft(
            alert_type=AlertType.CRITICAL,
            priority=PRIORITY_CRITICAL,
            title="Negative Cash Balance!",
            message=(
                f"URGENT: Your cash balance is negative: {money_to_display(balance)}. "
                "Immediate action required."
            ),
        )
    low = balance < warning_below
    return AlertDraft(
        alert_type=AlertType.WARNING if low else AlertType.INFO,
        priority=PRIORITY_WARNING if low else PRIORITY_INFO,
        title="Low Cash Balance",
        message=(
            f"Your cash balance is low: {money_to_display(balance)}. "
            "Consider managing cash flow."
        ),
    )
