"""Alert Rule Engine — stateless rules over one new entry plus an entry snapshot.

Each rule is independent: all may fire from one entry, and a rule that cannot
be evaluated is logged and skipped instead of failing the caller. The engine
does not deduplicate; two entries created together may raise similar alerts.
"""

import logging
from collections.abc import Callable, Sequence

from src.bk_alerts.domain.models import AlertDraft, AlertThresholds
from src.bk_alerts.rules.expense_vs_revenue import check_expense_vs_revenue
from src.bk_alerts.rules.high_cogs import check_high_cogs
from src.bk_alerts.rules.high_expense import check_high_expense
from src.bk_alerts.rules.low_balance import check_low_balance
from src.bk_alerts.rules.profit_margin import check_profit_margin
from src.bk_ledger.domain.models import Entry

logger = logging.getLogger(__name__)

Rule = Callable[[Sequence[Entry], Entry, AlertThresholds], AlertDraft | None]

RULES: dict[str, Rule] = {
    "high_expense": lambda entries, new, t: check_high_expense(new, t.high_expense),
    "low_balance": lambda entries, new, t: check_low_balance(
        entries, t.low_balance, t.low_balance_warning
    ),
    "expense_vs_revenue": lambda entries, new, t: check_expense_vs_revenue(entries, new),
    "profit_margin": lambda entries, new, t: check_profit_margin(entries, new),
    "high_cogs": lambda entries, new, t: check_high_cogs(entries, new),
}


def evaluate_alerts(
    entries: Sequence[Entry],
    new_entry: Entry,
    thresholds: AlertThresholds | None = None,
    rules: dict[str, Rule] | None = None,
) -> list[AlertDraft]:
    """Run every rule; return the drafts that fired, in rule order."""
    thresholds = thresholds or AlertThresholds.from_settings()
    snapshot = list(entries)
    if all(e.id != new_entry.id for e in snapshot):
        snapshot.append(new_entry)

    drafts: list[AlertDraft] = []
    for name, rule in (rules or RULES).items():
        try:
            draft = rule(snapshot, new_entry, thresholds)
        except Exception:
            logger.warning(
                "Alert rule %s failed for entry %s; skipped", name, new_entry.id, exc_info=True
            )
            continue
        if draft is not None:
            drafts.append(draft)
    return drafts
