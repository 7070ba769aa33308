from decimal import Decimal

from src.bk_alerts.domain.models import PRIORITY_WARNING, AlertDraft
from src.bk_common.enums import AlertType, Category
from src.bk_common.money import money_to_display
from src.bk_ledger.domain.models import Entry


def check_high_expense(new_entry: Entry, threshold: Decimal) -> AlertDraft | None:
    """Warn on a single non-sales entry at or above ``threshold``."""
    if new_entry.category == Category.SALES or new_entry.is_settlement_derived:
        return None
    if new_entry.amount < threshold:
        return None
    return AlertDraft(
        alert_type=AlertType.WARNING,
        priority=PRIORITY_WARNING,
        title="Large Expense Recorded",
        message=(
            f"A large expense of {money_to_display(new_entry.amount)} was recorded in "
            f"{new_entry.category.value}. Please review if this is correct."
        ),
        related_entity_type="entry",
        related_entity_id=new_entry.id,
    )
