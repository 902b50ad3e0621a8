"""Monthly cash-flow projection with finance goal matching"""

from datetime import date
from typing import Dict, Iterable, List, Optional

from finance_insights.domain.aggregation import (
    MAX_PROJECTION_MONTHS,
    build_actual_monthly_map,
    build_projection_buckets,
    round_amount,
    to_amount,
)
from finance_insights.domain.models import (
    FinanceGoal,
    GoalProgress,
    LedgerEntry,
    MonthlyProjection,
    ProjectionBucket,
    TypeTotals,
)
from finance_insights.domain.recurring import MAX_RECURRING_ITERATIONS, build_recurring_projection_map
from finance_insights.utils.date_utils import month_key, start_of_month

_EMPTY = {"receivable": 0.0, "payable": 0.0}


def build_goals_map(goals: Iterable[FinanceGoal]) -> Dict[str, FinanceGoal]:
    """Index goals by month key; goals with an unparseable month are ignored"""
    goal_map: Dict[str, FinanceGoal] = {}
    for goal in goals:
        key = month_key(goal.month)
        if key:
            goal_map[key] = goal
    return goal_map


def match_goal(projected_net: float, goal: Optional[FinanceGoal]) -> Optional[GoalProgress]:
    """Compare a projected net result against the month's goal"""
    if goal is None:
        return None

    target = to_amount(goal.target_net_amount)
    if target is None:
        return GoalProgress(target_net_amount=None, achieved=None, gap_to_goal=None, notes=goal.notes, goal_id=goal.id)

    return GoalProgress(
        target_net_amount=round_amount(target),
        achieved=projected_net >= target,
        gap_to_goal=round_amount(projected_net - target),
        notes=goal.notes,
        goal_id=goal.id,
    )


def combine_projection_data(
    buckets: List[ProjectionBucket],
    actual_map: Dict[str, Dict[str, float]],
    recurring_map: Dict[str, Dict[str, float]],
    goal_map: Dict[str, FinanceGoal],
    reference_date: date,
) -> List[MonthlyProjection]:
    reference_start = start_of_month(reference_date)
    current_key = month_key(reference_date)
    projections = []

    for bucket in buckets:
        actual = actual_map.get(bucket.month_key, _EMPTY)
        recurring = recurring_map.get(bucket.month_key, _EMPTY)

        projected_receivable = actual["receivable"] + recurring["receivable"]
        projected_payable = actual["payable"] + recurring["payable"]
        projected_net = projected_receivable - projected_payable

        goal = goal_map.get(bucket.month_key)
        progress = match_goal(projected_net, goal)
        has_goal = goal is not None

        projections.append(
            MonthlyProjection(
                month_key=bucket.month_key,
                label=bucket.label,
                start=bucket.start,
                end=bucket.end,
                actual=TypeTotals(
                    receivable=round_amount(actual["receivable"]),
                    payable=round_amount(actual["payable"]),
                    net=round_amount(actual["receivable"] - actual["payable"]),
                ),
                projected=TypeTotals(
                    receivable=round_amount(projected_receivable),
                    payable=round_amount(projected_payable),
                    net=round_amount(projected_net),
                ),
                goal=progress,
                is_current=bucket.month_key == current_key,
                is_past=bucket.start < reference_start,
                is_future=bucket.start > reference_start,
                has_goal=has_goal,
                needs_attention=has_goal and progress.achieved is False,
            )
        )

    return projections


def build_monthly_projection(
    entries: Iterable[LedgerEntry],
    goals: Iterable[FinanceGoal],
    reference_date: date,
    months: int,
    max_months: int = MAX_PROJECTION_MONTHS,
    max_iterations: int = MAX_RECURRING_ITERATIONS,
) -> List[MonthlyProjection]:
    """
    Main entry point: project actual and recurring cash flow over the window.

    Returns one MonthlyProjection per calendar month, starting at the
    reference month, each carrying actual totals, projected totals
    (actual + recurring occurrences) and goal progress.
    """
    entries = list(entries)
    buckets = build_projection_buckets(reference_date, months, max_months=max_months)
    if not buckets:
        return []

    actual_map = build_actual_monthly_map(entries, [bucket.month_key for bucket in buckets])
    recurring_map = build_recurring_projection_map(entries, buckets, max_iterations=max_iterations)
    goal_map = build_goals_map(goals)

    return combine_projection_data(buckets, actual_map, recurring_map, goal_map, reference_date)
