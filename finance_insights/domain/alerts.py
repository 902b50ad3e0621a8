"""Detection of budget summaries that have crossed their alert thresholds"""

from typing import Iterable, List, Optional

from finance_insights.domain.aggregation import round_amount
from finance_insights.domain.models import BudgetAlert, BudgetSummary, CategoryConsumption


def thresholds_reached(ratio: float, thresholds: Iterable[float]) -> List[float]:
    """Ascending list of thresholds at or below the consumption ratio"""
    return sorted(t for t in thresholds if ratio >= t)


def evaluate_budget_alerts(
    summaries: Iterable[BudgetSummary],
    category_consumption: Optional[Iterable[CategoryConsumption]] = None,
) -> List[BudgetAlert]:
    """
    Build an alert for every summary whose consumption reached a threshold.

    Summaries with a non-positive limit or no reached threshold are
    skipped. The highest reached threshold is the one an alert is
    reported against; category totals are attached when available.
    """
    totals_by_category = {item.category_id: item for item in category_consumption or ()}
    alerts = []

    for summary in summaries:
        if summary.monthly_limit <= 0:
            continue

        ratio = summary.consumption / summary.monthly_limit
        reached = thresholds_reached(ratio, summary.thresholds)
        if not reached:
            continue

        alerts.append(
            BudgetAlert(
                budget_id=summary.budget_id,
                category_id=summary.category_id,
                month_key=summary.month_key,
                consumption_ratio=round(ratio, 4),
                consumption_percentage=round_amount(ratio * 100),
                threshold_reached=reached[-1],
                thresholds_reached=reached,
                summary=summary,
                category_totals=totals_by_category.get(summary.category_id),
            )
        )

    return alerts
