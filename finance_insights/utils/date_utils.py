"""Calendar arithmetic: month-safe date advancement, month keys and month windows"""

import calendar
import re
import unicodedata
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, List, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

UTC = timezone.utc

RECURRING_INTERVALS = ("weekly", "biweekly", "monthly", "quarterly", "yearly")
DEFAULT_INTERVAL = "monthly"

# Canonical values, shorthand codes and the display labels used by the finance UI
_INTERVAL_ALIASES = {
    "weekly": "weekly",
    "semanal": "weekly",
    "1w": "weekly",
    "biweekly": "biweekly",
    "quinzenal": "biweekly",
    "2w": "biweekly",
    "monthly": "monthly",
    "mensal": "monthly",
    "mensalmente": "monthly",
    "1m": "monthly",
    "quarterly": "quarterly",
    "trimestral": "quarterly",
    "3m": "quarterly",
    "yearly": "yearly",
    "annually": "yearly",
    "anual": "yearly",
    "12m": "yearly",
}

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_MONTH_KEY_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def add_days(from_date: date, days: int) -> date:
    """Add calendar days to a date"""
    return from_date + timedelta(days=days)


def add_months(from_date: date, months: int) -> date:
    """
    Advance by calendar months, clamping the day to the destination month.

    relativedelta keeps the day-of-month when it exists and otherwise falls
    back to the last day of the target month:
        2024-01-31 + 1 month -> 2024-02-29
        2023-01-31 + 1 month -> 2023-02-28
    """
    return from_date + relativedelta(months=months)


def add_years(from_date: date, years: int) -> date:
    return add_months(from_date, 12 * years)


def _strip_accents(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_recurring_interval(value: Any) -> Optional[str]:
    """Map a raw interval (value, label or shorthand) to its canonical name, or None"""
    if not isinstance(value, str):
        return None
    key = _strip_accents(value).strip().lower()
    if not key:
        return None
    return _INTERVAL_ALIASES.get(key)


def resolve_interval(value: Any) -> str:
    """Canonical interval for projection; unknown or missing values project monthly"""
    return normalize_recurring_interval(value) or DEFAULT_INTERVAL


def advance_by_interval(from_date: date, interval: Any) -> date:
    """Next occurrence of a recurring entry after from_date"""
    step = resolve_interval(interval)
    if step == "weekly":
        return add_days(from_date, 7)
    if step == "biweekly":
        return add_days(from_date, 14)
    if step == "quarterly":
        return add_months(from_date, 3)
    if step == "yearly":
        return add_years(from_date, 1)
    return add_months(from_date, 1)


def parse_date_candidate(value: Any) -> Optional[date]:
    """
    Best-effort conversion of a raw value into a calendar date.

    Accepts date/datetime objects and ISO 8601 strings, including bare
    month keys ("2024-07" -> 2024-07-01). Aware datetimes are converted to
    UTC before taking the date. Anything else returns None.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            parsed = isoparse(trimmed)
        except (ValueError, OverflowError):
            return None
        return parse_date_candidate(parsed)

    return None


def parse_month_key(value: Any) -> Optional[date]:
    """First day of the month named by a YYYY-MM key"""
    if not isinstance(value, str):
        return None
    match = _MONTH_KEY_PATTERN.match(value.strip())
    if not match:
        return None
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return date(year, month, 1)


def month_key(value: Any) -> Optional[str]:
    """YYYY-MM key for any parseable date value"""
    parsed = parse_date_candidate(value)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}"


def first_day_of_month(value: date) -> date:
    return value.replace(day=1)


def last_day_of_month(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def start_of_month(value: date) -> datetime:
    """First instant of the month (UTC)"""
    return datetime.combine(first_day_of_month(value), time.min, tzinfo=UTC)


def end_of_month(value: date) -> datetime:
    """Last instant of the month (UTC), 23:59:59.999"""
    return datetime.combine(last_day_of_month(value), time(23, 59, 59, 999000), tzinfo=UTC)


def month_label(value: date) -> str:
    return f"{_MONTH_ABBR[value.month - 1]} {value.year}"


def generate_month_range(start: date, count: int) -> List[date]:
    """First day of `count` consecutive months beginning at start's month"""
    first = first_day_of_month(start)
    return [add_months(first, i) for i in range(count)]
