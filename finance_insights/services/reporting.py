"""Reporting facade consumed by dashboards and the budget alert workflow"""

import time
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence

from finance_insights.config import Settings, settings
from finance_insights.domain.aggregation import (
    build_monthly_summary,
    build_status_summary,
    build_totals,
    count_invalid_entries,
    parse_projection_months,
)
from finance_insights.domain.budgets import (
    BudgetPolicy,
    BudgetStatusClassifier,
    aggregate_category_consumption,
    build_budget_summaries,
)
from finance_insights.domain.models import (
    Budget,
    BudgetOverview,
    FinanceGoal,
    FinanceSummary,
    LedgerEntry,
    MonthlyProjection,
)
from finance_insights.domain.projection import build_monthly_projection
from finance_insights.infrastructure.observability.logging import log_report_run
from finance_insights.infrastructure.observability.metrics import (
    record_budget_statuses,
    report_duration_histogram,
    skipped_entries_counter,
)
from finance_insights.utils.date_utils import month_key, parse_date_candidate


def resolve_reference_date(value: Any = None) -> date:
    """Parsed reference date, defaulting to today (UTC)"""
    return parse_date_candidate(value) or datetime.now(timezone.utc).date()


class ReportingService:
    """Runs the pure projection and budget computations with logging and metrics"""

    def __init__(self, policy: Optional[BudgetPolicy] = None, config: Settings = settings):
        self.config = config
        self.policy = policy or BudgetPolicy.from_settings(config)
        self.classifier = BudgetStatusClassifier(self.policy)

    def _projection_months(self, months: Any) -> int:
        return parse_projection_months(
            months,
            default=self.config.default_projection_months,
            maximum=self.config.max_projection_months,
        )

    def _finish(self, report: str, entries: List[LedgerEntry], start_time: float) -> None:
        duration = time.time() - start_time
        skipped = count_invalid_entries(entries)
        if skipped:
            skipped_entries_counter.labels(stage="aggregation").inc(skipped)
        report_duration_histogram.labels(report=report).observe(duration)
        log_report_run(report, len(entries), skipped, duration * 1000)

    def get_monthly_projection(
        self,
        entries: Iterable[LedgerEntry],
        goals: Iterable[FinanceGoal] = (),
        reference_date: Any = None,
        months: Any = None,
    ) -> List[MonthlyProjection]:
        """Actual + recurring projection per month, matched against goals"""
        start_time = time.time()
        entries = list(entries)

        projections = build_monthly_projection(
            entries,
            goals,
            resolve_reference_date(reference_date),
            self._projection_months(months),
            max_months=self.config.max_projection_months,
            max_iterations=self.config.recurring_max_iterations,
        )

        self._finish("projection", entries, start_time)
        return projections

    def get_finance_summary(
        self,
        entries: Iterable[LedgerEntry],
        goals: Iterable[FinanceGoal] = (),
        reference_date: Any = None,
        months: Any = None,
    ) -> FinanceSummary:
        """Status breakdown, monthly totals, headline totals and projections in one pass"""
        start_time = time.time()
        entries = list(entries)

        status_summary = build_status_summary(entries)
        summary = FinanceSummary(
            status_summary=status_summary,
            monthly_summary=build_monthly_summary(entries),
            totals=build_totals(status_summary),
            projections=build_monthly_projection(
                entries,
                goals,
                resolve_reference_date(reference_date),
                self._projection_months(months),
                max_months=self.config.max_projection_months,
                max_iterations=self.config.recurring_max_iterations,
            ),
        )

        self._finish("finance_summary", entries, start_time)
        return summary

    def get_budget_overview(
        self,
        budgets: Iterable[Budget],
        entries: Iterable[LedgerEntry],
        months: Optional[Sequence[Any]] = None,
        reference_date: Any = None,
        status: Any = None,
    ) -> BudgetOverview:
        """
        Budget summaries and per-category consumption.

        Without explicit months the reference month (default: current
        month) is evaluated. Budgets pinned to a reference month are
        always evaluated for that month only.
        """
        start_time = time.time()
        entries = list(entries)
        if not months:
            months = [resolve_reference_date(reference_date)]

        summaries = build_budget_summaries(budgets, entries, months, classifier=self.classifier, status=status)
        overview = BudgetOverview(
            summaries=summaries,
            category_consumption=aggregate_category_consumption(summaries),
            months=sorted({summary.month_key for summary in summaries} | {k for k in map(month_key, months) if k}),
        )

        record_budget_statuses(summary.status for summary in summaries)
        self._finish("budget_overview", entries, start_time)
        return overview
