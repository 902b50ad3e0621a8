"""Recurring entry expansion into future projection buckets"""

from typing import Dict, Iterable, List

from finance_insights.domain.aggregation import iter_valid_entries
from finance_insights.domain.models import FINANCE_TYPES, LedgerEntry, ProjectionBucket
from finance_insights.utils.date_utils import advance_by_interval

MAX_RECURRING_ITERATIONS = 500


def build_recurring_projection_map(
    entries: Iterable[LedgerEntry],
    buckets: List[ProjectionBucket],
    max_iterations: int = MAX_RECURRING_ITERATIONS,
) -> Dict[str, Dict[str, float]]:
    """
    Project future occurrences of recurring entries onto the bucket window.

    For each recurring entry the due date itself is skipped (the actual
    aggregator already counts it); every following occurrence that lands
    inside [first bucket start, last bucket end] adds the entry's value to
    its month. Occurrences before the window are walked past silently and
    iteration stops once an occurrence passes the window end, or after
    max_iterations steps for a single entry.
    """
    if not buckets:
        return {}

    by_month = {bucket.month_key: bucket for bucket in buckets}
    range_start = buckets[0].start.date()
    range_end = buckets[-1].end.date()
    projection: Dict[str, Dict[str, float]] = {}

    for entry, due, amount in iter_valid_entries(entries):
        if not entry.recurring or not amount:
            continue

        occurrence = advance_by_interval(due, entry.recurring_interval)
        steps = 0

        while occurrence <= range_end and steps < max_iterations:
            steps += 1
            if occurrence >= range_start:
                key = f"{occurrence.year:04d}-{occurrence.month:02d}"
                bucket = by_month.get(key)
                if bucket is not None and bucket.contains(occurrence):
                    totals = projection.setdefault(key, {entry_type: 0.0 for entry_type in FINANCE_TYPES})
                    totals[entry.type] += amount
            occurrence = advance_by_interval(occurrence, entry.recurring_interval)

    return projection
