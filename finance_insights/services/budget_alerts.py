"""Scheduler entry point: evaluate budgets and dispatch each threshold crossing once"""

from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from finance_insights.domain.aggregation import to_amount
from finance_insights.domain.alerts import evaluate_budget_alerts
from finance_insights.domain.models import Budget, BudgetAlert, BudgetAlertRun, LedgerEntry
from finance_insights.infrastructure.observability.logging import log_alert_dispatch
from finance_insights.infrastructure.observability.metrics import alert_dispatch_counter
from finance_insights.services.alert_triggers import AlertTriggerDeduplicator
from finance_insights.services.reporting import ReportingService

# Sends the actual e-mail / in-app message for one (alert, threshold)
Notifier = Callable[[BudgetAlert, float], None]


def process_budget_alerts(
    budgets: Iterable[Budget],
    entries: Iterable[LedgerEntry],
    deduplicator: AlertTriggerDeduplicator,
    notify: Notifier,
    reporting: Optional[ReportingService] = None,
    now: Optional[datetime] = None,
) -> BudgetAlertRun:
    """
    Run one alert evaluation tick.

    Flow:
    1. Summarize consumption for every budget with a positive limit
    2. Find the thresholds each summary has reached
    3. Ask the deduplicator whether each crossing should be dispatched
    4. Notify; on failure release a freshly created trigger so the next
       tick retries it
    """
    now = now or datetime.now(timezone.utc)
    reporting = reporting or ReportingService()

    active = [budget for budget in budgets if (to_amount(budget.monthly_limit) or 0) > 0]
    overview = reporting.get_budget_overview(active, entries, reference_date=now)
    alerts = evaluate_budget_alerts(overview.summaries, overview.category_consumption)

    run = BudgetAlertRun(processed_budgets=len(active))

    for alert in alerts:
        for threshold in alert.thresholds_reached:
            result = deduplicator.register_trigger(alert.budget_id, alert.month_key, threshold, now=now)
            if not result.should_dispatch:
                if result.reason in ("duplicate", "constraint-race"):
                    run.deduplicated += 1
                continue

            try:
                notify(alert, threshold)
            except Exception as e:
                run.failed += 1
                alert_dispatch_counter.labels(outcome="failed").inc()
                log_alert_dispatch(alert.budget_id, alert.month_key, threshold, sent=False, error=e)
                if result.created:
                    deduplicator.release_trigger(alert.budget_id, alert.month_key, threshold)
                continue

            alert_dispatch_counter.labels(outcome="sent").inc()
            log_alert_dispatch(alert.budget_id, alert.month_key, threshold, sent=True)
            run.dispatched.append(
                {
                    "budget_id": alert.budget_id,
                    "category_id": alert.category_id,
                    "month": alert.month_key,
                    "threshold": threshold,
                    "consumption_percentage": alert.consumption_percentage,
                    "fail_open": not result.created,
                }
            )

    return run
