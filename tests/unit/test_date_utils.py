"""Unit tests for calendar arithmetic"""

import pytest
from datetime import date, datetime, timedelta, timezone
from finance_insights.utils.date_utils import (
    add_days,
    add_months,
    add_years,
    advance_by_interval,
    end_of_month,
    generate_month_range,
    month_key,
    month_label,
    normalize_recurring_interval,
    parse_date_candidate,
    parse_month_key,
    resolve_interval,
    start_of_month,
)


def test_add_months_clamps_to_leap_february():
    """Jan 31 + 1 month lands on Feb 29 in a leap year"""
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)


def test_add_months_clamps_to_common_february():
    """Jan 31 + 1 month lands on Feb 28 in a non-leap year"""
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)


def test_add_months_keeps_day_when_valid():
    assert add_months(date(2024, 3, 15), 1) == date(2024, 4, 15)
    assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)
    assert add_months(date(2024, 5, 31), -1) == date(2024, 4, 30)


def test_add_years_from_leap_day():
    """Feb 29 + 1 year clamps to Feb 28"""
    assert add_years(date(2024, 2, 29), 1) == date(2025, 2, 28)
    assert add_years(date(2024, 2, 29), 4) == date(2028, 2, 29)


def test_add_days_crosses_month_boundary():
    assert add_days(date(2024, 2, 28), 1) == date(2024, 2, 29)
    assert add_days(date(2024, 12, 31), 1) == date(2025, 1, 1)


@pytest.mark.parametrize(
    "interval,expected",
    [
        ("weekly", date(2024, 2, 7)),
        ("biweekly", date(2024, 2, 14)),
        ("monthly", date(2024, 2, 29)),
        ("quarterly", date(2024, 4, 30)),
        ("yearly", date(2025, 1, 31)),
    ],
)
def test_advance_by_interval_from_month_end(interval, expected):
    """Each interval from Jan 31 2024, including month-end clamping"""
    assert advance_by_interval(date(2024, 1, 31), interval) == expected


def test_advance_by_interval_yearly_from_leap_day():
    assert advance_by_interval(date(2024, 2, 29), "yearly") == date(2025, 2, 28)


def test_advance_by_interval_quarterly_clamps():
    assert advance_by_interval(date(2024, 11, 30), "quarterly") == date(2025, 2, 28)


def test_advance_by_interval_defaults_to_monthly():
    """Unknown or missing intervals advance one calendar month"""
    assert advance_by_interval(date(2024, 1, 15), None) == date(2024, 2, 15)
    assert advance_by_interval(date(2024, 1, 15), "fortnightly-ish") == date(2024, 2, 15)


def test_interval_aliases_are_normalized():
    assert normalize_recurring_interval(" Weekly ") == "weekly"
    assert normalize_recurring_interval("Quinzenal") == "biweekly"
    assert normalize_recurring_interval("Mensal") == "monthly"
    assert normalize_recurring_interval("3m") == "quarterly"
    assert normalize_recurring_interval("annually") == "yearly"
    assert normalize_recurring_interval("ANUAL") == "yearly"
    assert normalize_recurring_interval("") is None
    assert normalize_recurring_interval(12) is None
    assert resolve_interval("daily") == "monthly"


def test_parse_date_candidate_variants():
    assert parse_date_candidate(date(2024, 7, 5)) == date(2024, 7, 5)
    assert parse_date_candidate(datetime(2024, 7, 5, 18, 30)) == date(2024, 7, 5)
    assert parse_date_candidate("2024-07-05") == date(2024, 7, 5)
    assert parse_date_candidate("2024-07") == date(2024, 7, 1)
    assert parse_date_candidate(" 2024-07-05T10:00:00Z ") == date(2024, 7, 5)


def test_parse_date_candidate_converts_aware_datetimes_to_utc():
    """23:30 at UTC-03:00 is already the next day in UTC"""
    local = datetime(2024, 7, 31, 23, 30, tzinfo=timezone(timedelta(hours=-3)))
    assert parse_date_candidate(local) == date(2024, 8, 1)


def test_parse_date_candidate_rejects_garbage():
    assert parse_date_candidate(None) is None
    assert parse_date_candidate("") is None
    assert parse_date_candidate("invalid-date") is None
    assert parse_date_candidate("2024-13-01") is None
    assert parse_date_candidate(20240705) is None


def test_month_key_and_parse_month_key():
    assert month_key(date(2024, 2, 29)) == "2024-02"
    assert month_key("2024-12-31") == "2024-12"
    assert month_key("nope") is None
    assert parse_month_key("2024-02") == date(2024, 2, 1)
    assert parse_month_key("2024-13") is None
    assert parse_month_key("2024-02-01") is None


def test_month_window_bounds_are_utc():
    start = start_of_month(date(2024, 2, 17))
    end = end_of_month(date(2024, 2, 17))

    assert start == datetime(2024, 2, 1, tzinfo=timezone.utc)
    assert end == datetime(2024, 2, 29, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_generate_month_range_crosses_year():
    months = generate_month_range(date(2024, 11, 20), 4)
    assert months == [date(2024, 11, 1), date(2024, 12, 1), date(2025, 1, 1), date(2025, 2, 1)]


def test_month_label():
    assert month_label(date(2024, 8, 1)) == "Aug 2024"
