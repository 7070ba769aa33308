"""Serialisation of the aggregator's frozen dataclasses.

The views are plain dataclasses (the aggregator has no pydantic dependency);
TypeAdapter turns them into JSON-safe dicts: Decimals as 2dp strings, dates
as ISO strings.
"""

from typing import Any

from pydantic import TypeAdapter

from src.bk_analytics.domain.accrual import AccrualView
from src.bk_analytics.domain.cash_basis import CashBasisView, MonthlyComparison
from src.bk_analytics.domain.health import HealthScore
from src.bk_analytics.domain.pending import PendingSummary

_CASH_VIEW = TypeAdapter(CashBasisView)
_ACCRUAL_VIEW = TypeAdapter(AccrualView)
_PENDING = TypeAdapter(PendingSummary)
_COMPARISON = TypeAdapter(MonthlyComparison)
_HEALTH = TypeAdapter(HealthScore)


def dump_cash_view(view: CashBasisView) -> dict[str, Any]:
    return _CASH_VIEW.dump_python(view, mode="json")


def dump_accrual_view(view: AccrualView) -> dict[str, Any]:
    return _ACCRUAL_VIEW.dump_python(view, mode="json")


def dump_pending(summary: PendingSummary) -> dict[str, Any]:
    return _PENDING.dump_python(summary, mode="json")


def dump_comparison(comparison: MonthlyComparison) -> dict[str, Any]:
    return _COMPARISON.dump_python(comparison, mode="json")


def dump_health(score: HealthScore) -> dict[str, Any]:
    return _HEALTH.dump_python(score, mode="json")
