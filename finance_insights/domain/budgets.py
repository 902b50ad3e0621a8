"""Budget consumption: status classification, per-month summaries and category roll-ups"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from finance_insights.domain.aggregation import build_consumption_map, round_amount, to_amount
from finance_insights.domain.models import (
    BUDGET_STATUSES,
    Budget,
    BudgetSummary,
    CategoryConsumption,
    LedgerEntry,
)
from finance_insights.domain.thresholds import normalize_threshold_list, resolve_budget_thresholds
from finance_insights.utils.date_utils import month_key


def status_priority(status: str) -> int:
    """Position in the severity ordering; unknown statuses rank as healthy"""
    return BUDGET_STATUSES.index(status) if status in BUDGET_STATUSES else 0


def max_status(first: str, second: str) -> str:
    return first if status_priority(first) >= status_priority(second) else second


@dataclass(frozen=True)
class BudgetPolicy:
    """Threshold defaults and fallback cutoffs injected into the classifier"""

    default_thresholds: tuple = (0.5, 0.75, 0.9)
    fallback_caution_ratio: float = 0.6
    fallback_warning_ratio: float = 0.85

    @classmethod
    def from_settings(cls, settings: Any) -> "BudgetPolicy":
        return cls(
            default_thresholds=tuple(normalize_threshold_list(settings.budget_default_thresholds)),
            fallback_caution_ratio=settings.budget_fallback_caution_ratio,
            fallback_warning_ratio=settings.budget_fallback_warning_ratio,
        )


class BudgetStatusClassifier:
    """Maps a consumption ratio and a threshold list to a severity level"""

    def __init__(self, policy: Optional[BudgetPolicy] = None):
        self.policy = policy or BudgetPolicy()

    def classify(self, consumption: float, limit: float, thresholds: Sequence[float]) -> str:
        ratio = consumption / limit if limit > 0 else None
        return self.classify_ratio(ratio, thresholds)

    def classify_ratio(self, ratio: Optional[float], thresholds: Sequence[float]) -> str:
        """
        Severity for a consumption ratio.

        Rules, in order:
        - ratio >= 1 is critical whatever the thresholds say
        - with thresholds: the largest is the warning cutoff; the caution
          cutoff is the first ascending threshold below it (or the only one).
          Interior thresholds of a 3+ element list therefore share the
          smallest threshold's caution cutoff.
        - without thresholds: fixed fallback cutoffs from the policy
        """
        if ratio is None:
            return "healthy"

        if ratio >= 1:
            return "critical"

        ordered = sorted(thresholds)
        if ordered:
            warning_threshold = ordered[-1]
            caution_threshold = next((t for t in ordered if t < warning_threshold), ordered[0])
            if ratio >= warning_threshold:
                return "warning"
            if ratio >= caution_threshold:
                return "caution"
        else:
            if ratio >= self.policy.fallback_warning_ratio:
                return "warning"
            if ratio >= self.policy.fallback_caution_ratio:
                return "caution"

        return "healthy"


def build_budget_summaries(
    budgets: Iterable[Budget],
    entries: Iterable[LedgerEntry],
    months: Sequence[Any],
    classifier: Optional[BudgetStatusClassifier] = None,
    status: Any = None,
    entry_type: str = "payable",
) -> List[BudgetSummary]:
    """
    One BudgetSummary per (budget, month).

    A budget pinned to a reference month is only evaluated for that month;
    other budgets are evaluated for every requested month. Budgets without
    thresholds use the policy defaults.
    """
    classifier = classifier or BudgetStatusClassifier()
    consumption_map = build_consumption_map(entries, entry_type=entry_type, status=status)
    requested = [key for key in (month_key(m) for m in months) if key]
    summaries = []

    for budget in budgets:
        limit = to_amount(budget.monthly_limit) or 0.0
        thresholds = resolve_budget_thresholds(budget.thresholds, classifier.policy.default_thresholds)
        pinned = month_key(budget.reference_month)
        budget_months = [pinned] if pinned else requested

        for key in budget_months:
            consumption = round_amount(consumption_map.get((budget.category_id, key), 0.0))
            percentage = round_amount(consumption / limit * 100) if limit > 0 else 0.0
            summaries.append(
                BudgetSummary(
                    budget_id=budget.id,
                    category_id=budget.category_id,
                    category_name=budget.category_name,
                    month_key=key,
                    monthly_limit=round_amount(limit),
                    consumption=consumption,
                    remaining=round_amount(limit - consumption),
                    percentage=percentage,
                    status=classifier.classify(consumption, limit, thresholds),
                    thresholds=thresholds,
                )
            )

    summaries.sort(key=lambda summary: summary.month_key)
    return summaries


def aggregate_category_consumption(summaries: Iterable[BudgetSummary]) -> List[CategoryConsumption]:
    """Merge budget summaries into one consumption view per category"""
    grouped: Dict[Optional[int], Dict[str, Any]] = {}

    for summary in summaries:
        bucket = grouped.setdefault(
            summary.category_id,
            {
                "total_limit": 0.0,
                "total_consumption": 0.0,
                "months": 0,
                "highest_percentage": None,
                "status": "healthy",
            },
        )
        bucket["total_limit"] += summary.monthly_limit
        bucket["total_consumption"] += summary.consumption
        bucket["months"] += 1
        if bucket["highest_percentage"] is None or summary.percentage > bucket["highest_percentage"]:
            bucket["highest_percentage"] = summary.percentage
        bucket["status"] = max_status(bucket["status"], summary.status)

    results = []
    for category_id, bucket in grouped.items():
        total_limit = bucket["total_limit"]
        total_consumption = bucket["total_consumption"]
        average = total_consumption / total_limit * 100 if total_limit > 0 else 0.0
        results.append(
            CategoryConsumption(
                category_id=category_id,
                total_limit=round_amount(total_limit),
                total_consumption=round_amount(total_consumption),
                remaining=round_amount(total_limit - total_consumption),
                average_percentage=round_amount(average),
                highest_percentage=bucket["highest_percentage"] or 0.0,
                months=bucket["months"],
                status=bucket["status"],
            )
        )

    results.sort(key=lambda item: (item.category_id is None, item.category_id or 0))
    return results
