"""Grouping helpers: amount / count / percentage-of-total rows, largest first."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from src.bk_common.money import ZERO, percentage, sum_money
from src.bk_ledger.domain.models import Entry


@dataclass(frozen=True)
class BreakdownRow:
    key: str | None
    label: str
    amount: Decimal
    count: int
    percentage: Decimal  # of the group total, 2dp


def breakdown(
    entries: Iterable[Entry],
    key: Callable[[Entry], str | None],
    label: Callable[[str | None], str] | None = None,
) -> list[BreakdownRow]:
    totals: dict[str | None, list[Decimal]] = {}
    for entry in entries:
        totals.setdefault(key(entry), []).append(entry.amount)

    grand_total = sum_money([sum_money(v) for v in totals.values()]) if totals else ZERO
    rows = [
        BreakdownRow(
            key=k,
            label=label(k) if label else (k or "Unassigned"),
            amount=sum_money(amounts),
            count=len(amounts),
            percentage=percentage(sum_money(amounts), grand_total),
        )
        for k, amounts in totals.items()
    ]
    # Ties broken by label so output is stable
    rows.sort(key=lambda r: (-r.amount, r.label))
    return rows


def by_category(entries: Iterable[Entry]) -> list[BreakdownRow]:
    return breakdown(entries, lambda e: e.category.value)


def by_party(
    entries: Iterable[Entry], party_names: dict[str, str] | None = None
) -> list[BreakdownRow]:
    names = party_names or {}
    return breakdown(
        entries,
        lambda e: e.party_id,
        lambda party_id: names.get(party_id, "Unknown party") if party_id else "No party",
    )
