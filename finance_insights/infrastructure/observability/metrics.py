"""Prometheus metrics for report computations, budget health and alert deduplication"""

from prometheus_client import Counter, Histogram

# Alert dedup metrics
trigger_outcome_counter = Counter(
    "finance_threshold_trigger_total",
    "Threshold trigger registrations",
    ["reason"],  # created | duplicate | constraint-race | invalid-input | storage-failure
)

alert_dispatch_counter = Counter(
    "finance_budget_alert_dispatch_total",
    "Budget alert dispatch attempts",
    ["outcome"],  # sent | failed
)

# Input quality
skipped_entries_counter = Counter(
    "finance_ledger_entries_skipped_total",
    "Ledger records skipped because of malformed type, date or value",
    ["stage"],  # ingest | aggregation
)

# Reporting
report_duration_histogram = Histogram(
    "finance_report_duration_seconds",
    "Report computation time",
    ["report"],  # projection | finance_summary | budget_overview
    buckets=[0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

budget_status_counter = Counter(
    "finance_budget_status_total",
    "Budget summaries computed by severity",
    ["status"],  # healthy | caution | warning | critical
)


def record_trigger_outcome(reason: str) -> None:
    trigger_outcome_counter.labels(reason=reason).inc()


def record_budget_statuses(statuses) -> None:
    """Count computed budget summaries by severity"""
    for status in statuses:
        budget_status_counter.labels(status=status).inc()
