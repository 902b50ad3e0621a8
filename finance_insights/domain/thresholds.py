"""Budget threshold normalization, applied on ingest and before persistence"""

import json
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Iterable, List, Optional

from finance_insights.domain.exceptions import InvalidThresholdError

_TWO_PLACES = Decimal("0.01")
_FOUR_PLACES = Decimal("0.0001")
_SEPARATORS = re.compile(r"[;,\s]+")


def threshold_decimal(value: Any) -> Optional[Decimal]:
    """
    Normalize a raw threshold into a 2-decimal ratio within (0, 1].

    The value is first rounded to 4 places (so 0.99999 is treated as 1.0),
    range-checked, then quantized to 2 places. Returns None when the value
    is missing, non-numeric, non-finite, out of range or rounds down to 0.00.
    """
    if value is None or isinstance(value, bool):
        return None

    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None

    if not math.isfinite(numeric):
        return None

    try:
        rounded = Decimal(str(numeric)).quantize(_FOUR_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None

    if rounded <= 0 or rounded > 1:
        return None

    normalized = rounded.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return normalized if normalized > 0 else None


def normalize_threshold_value(value: Any) -> Optional[float]:
    normalized = threshold_decimal(value)
    return float(normalized) if normalized is not None else None


def _coerce_threshold_input(value: Any) -> List[Any]:
    if value is None:
        return []

    if isinstance(value, (list, tuple, set)):
        return list(value)

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return []
        if trimmed.startswith("["):
            try:
                parsed = json.loads(trimmed)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return parsed
        return [item for item in _SEPARATORS.split(trimmed.strip("[]")) if item]

    return [value]


def normalize_threshold_list(value: Any) -> List[float]:
    """
    Normalize raw thresholds into an ascending list of unique ratios.

    Accepts lists, JSON arrays and separator-delimited strings
    ("0.5, 0.75;0.9"). Out-of-range and non-numeric items are dropped
    rather than rejecting the whole list.
    """
    normalized = {
        item
        for item in (normalize_threshold_value(raw) for raw in _coerce_threshold_input(value))
        if item is not None
    }
    return sorted(normalized)


def validate_threshold_list(value: Any) -> List[float]:
    """Normalize and validate thresholds before a budget is persisted"""
    raw_items = _coerce_threshold_input(value)

    if not raw_items:
        raise InvalidThresholdError("At least one alert threshold between 0 and 1 is required.")

    if any(threshold_decimal(item) is None for item in raw_items):
        raise InvalidThresholdError("Each alert threshold must be greater than 0 and at most 1.")

    return normalize_threshold_list(raw_items)


def resolve_budget_thresholds(thresholds: Iterable[Any], defaults: Iterable[float]) -> List[float]:
    """Budget's own thresholds, or the configured defaults when it has none"""
    normalized = normalize_threshold_list(list(thresholds or ()))
    return normalized if normalized else list(defaults)
