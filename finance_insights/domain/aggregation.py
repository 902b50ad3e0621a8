"""Ledger aggregation: month buckets, actual totals and budget consumption"""

import math
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from finance_insights.domain.models import FINANCE_STATUSES, FINANCE_TYPES, LedgerEntry, ProjectionBucket
from finance_insights.utils.date_utils import (
    end_of_month,
    generate_month_range,
    month_label,
    parse_date_candidate,
    start_of_month,
)

DEFAULT_PROJECTION_MONTHS = 6
MAX_PROJECTION_MONTHS = 24


def to_amount(value: Any) -> Optional[float]:
    """Finite float for a raw ledger value, or None"""
    if value is None or isinstance(value, bool):
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    return numeric if math.isfinite(numeric) else None


def round_amount(value: float) -> float:
    return round(value, 2) + 0.0  # + 0.0 folds -0.0 into 0.0


def iter_valid_entries(entries: Iterable[LedgerEntry]) -> Iterator[Tuple[LedgerEntry, date, float]]:
    """Yield (entry, due date, amount) for entries that can be aggregated"""
    for entry in entries:
        if entry.type not in FINANCE_TYPES:
            continue
        due = parse_date_candidate(entry.due_date)
        amount = to_amount(entry.value)
        if due is None or amount is None:
            continue
        yield entry, due, amount


def count_invalid_entries(entries: Iterable[LedgerEntry]) -> int:
    """Number of entries the aggregators skip (unknown type, bad date or value)"""
    entries = list(entries)
    return len(entries) - sum(1 for _ in iter_valid_entries(entries))


def _month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


def parse_projection_months(
    value: Any,
    default: int = DEFAULT_PROJECTION_MONTHS,
    maximum: int = MAX_PROJECTION_MONTHS,
) -> int:
    """Requested projection length; invalid or non-positive values use the default"""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    if parsed <= 0:
        return default
    return min(parsed, maximum)


def build_projection_buckets(
    reference_date: date,
    months: int,
    max_months: int = MAX_PROJECTION_MONTHS,
) -> List[ProjectionBucket]:
    """Consecutive calendar-month windows starting at the reference month"""
    total = min(max(months, 1), max_months)
    return [
        ProjectionBucket(
            month_key=_month_key(first_day),
            label=month_label(first_day),
            start=start_of_month(first_day),
            end=end_of_month(first_day),
        )
        for first_day in generate_month_range(reference_date, total)
    ]


def build_actual_monthly_map(
    entries: Iterable[LedgerEntry],
    month_keys: Optional[Sequence[str]] = None,
) -> Dict[str, Dict[str, float]]:
    """
    Projection mode: sum entry values per month and type.

    No status filter is applied; a projection reflects every recorded
    entry regardless of payment state. When month_keys is given, months
    outside it are dropped.
    """
    wanted = set(month_keys) if month_keys is not None else None
    monthly: Dict[str, Dict[str, float]] = {}

    for entry, due, amount in iter_valid_entries(entries):
        key = _month_key(due)
        if wanted is not None and key not in wanted:
            continue
        totals = monthly.setdefault(key, {entry_type: 0.0 for entry_type in FINANCE_TYPES})
        totals[entry.type] += amount

    return monthly


def build_consumption_map(
    entries: Iterable[LedgerEntry],
    entry_type: str = "payable",
    status: Any = None,
) -> Dict[Tuple[int, str], float]:
    """
    Budget-consumption mode: sum values per (category id, month).

    Only entries of entry_type count, optionally restricted to one status
    or a collection of statuses. Entries without a category cannot be
    attributed to a budget and are excluded.
    """
    if isinstance(status, str):
        statuses = {status}
    elif status is not None:
        statuses = set(status)
    else:
        statuses = None

    consumption: Dict[Tuple[int, str], float] = defaultdict(float)
    for entry, due, amount in iter_valid_entries(entries):
        if entry.type != entry_type or entry.category_id is None:
            continue
        if statuses is not None and entry.status not in statuses:
            continue
        consumption[(entry.category_id, _month_key(due))] += amount

    return dict(consumption)


def create_empty_status_summary() -> Dict[str, Dict[str, float]]:
    return {entry_type: {status: 0.0 for status in FINANCE_STATUSES} for entry_type in FINANCE_TYPES}


def build_status_summary(entries: Iterable[LedgerEntry]) -> Dict[str, Dict[str, float]]:
    """Totals per type and status; unknown statuses are counted as pending"""
    summary = create_empty_status_summary()
    for entry in entries:
        if entry.type not in FINANCE_TYPES:
            continue
        status = entry.status if entry.status in FINANCE_STATUSES else "pending"
        summary[entry.type][status] += to_amount(entry.value) or 0.0
    return summary


def build_monthly_summary(entries: Iterable[LedgerEntry]) -> List[Dict[str, Any]]:
    """Chronological list of {"month", "payable", "receivable"} rows"""
    monthly = build_actual_monthly_map(entries)
    return [{"month": key, **monthly[key]} for key in sorted(monthly)]


def build_totals(status_summary: Dict[str, Dict[str, float]]) -> Dict[str, float]:
    """Headline totals derived from a status summary"""
    totals = {entry_type: sum(status_summary.get(entry_type, {}).values()) for entry_type in FINANCE_TYPES}
    totals["net"] = totals["receivable"] - totals["payable"]
    for status in ("overdue", "paid", "pending"):
        totals[status] = sum(status_summary.get(entry_type, {}).get(status, 0.0) for entry_type in FINANCE_TYPES)
    return totals
