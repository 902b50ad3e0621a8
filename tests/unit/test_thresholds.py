"""Unit tests for threshold normalization and validation"""

import pytest
from decimal import Decimal
from finance_insights.domain.exceptions import InvalidThresholdError
from finance_insights.domain.thresholds import (
    normalize_threshold_list,
    normalize_threshold_value,
    resolve_budget_thresholds,
    threshold_decimal,
    validate_threshold_list,
)


def test_threshold_decimal_rounds_to_two_places():
    assert threshold_decimal(0.755) == Decimal("0.76")
    assert threshold_decimal("0.5") == Decimal("0.50")
    assert threshold_decimal(Decimal("0.9")) == Decimal("0.90")


def test_threshold_decimal_near_one_counts_as_one():
    """0.99999 rounds to 1.0000 at four places, which is still in range"""
    assert threshold_decimal(0.99999) == Decimal("1.00")
    assert threshold_decimal(1) == Decimal("1.00")


@pytest.mark.parametrize("raw", [None, True, "abc", 0, -0.2, 1.2, float("nan"), float("inf"), [0.5]])
def test_threshold_decimal_rejects_invalid(raw):
    assert threshold_decimal(raw) is None


@pytest.mark.parametrize("raw", [0.001, 0.003, "0.0049"])
def test_threshold_decimal_rejects_values_rounding_to_zero(raw):
    assert threshold_decimal(raw) is None


def test_threshold_decimal_keeps_smallest_positive_step():
    assert threshold_decimal(0.005) == Decimal("0.01")


def test_normalize_threshold_value_returns_float():
    assert normalize_threshold_value("0.8") == 0.8
    assert normalize_threshold_value(0) is None


def test_normalize_threshold_list_sorts_and_dedupes():
    assert normalize_threshold_list([0.9, "0.5", 0.75, 0.5, 0.751]) == [0.5, 0.75, 0.9]


def test_normalize_threshold_list_filters_out_of_range_items():
    """Bad items are dropped instead of rejecting the whole list"""
    assert normalize_threshold_list([0, None, "0.8", 1.2, -1]) == [0.8]


def test_normalize_threshold_list_from_strings():
    assert normalize_threshold_list("0.5, 0.75;0.9") == [0.5, 0.75, 0.9]
    assert normalize_threshold_list("[0.9, 0.6]") == [0.6, 0.9]
    assert normalize_threshold_list("   ") == []
    assert normalize_threshold_list(None) == []
    assert normalize_threshold_list(0.7) == [0.7]


def test_validate_threshold_list_accepts_valid_input():
    assert validate_threshold_list("0.6,0.8") == [0.6, 0.8]


def test_validate_threshold_list_rejects_empty():
    with pytest.raises(InvalidThresholdError):
        validate_threshold_list([])

    with pytest.raises(InvalidThresholdError):
        validate_threshold_list(["x", 2])


def test_validate_threshold_list_accepts_full_limit_threshold():
    assert validate_threshold_list([1.0, 0.5]) == [0.5, 1.0]


@pytest.mark.parametrize("raw", [[0.5, 1.2], [0.5, 0], [0.5, "abc"], "0.5;-0.1"])
def test_validate_threshold_list_rejects_any_out_of_range_item(raw):
    """Unlike normalization, validation refuses the whole list instead of dropping items"""
    with pytest.raises(InvalidThresholdError):
        validate_threshold_list(raw)


def test_resolve_budget_thresholds_falls_back_to_defaults():
    assert resolve_budget_thresholds((), (0.5, 0.75, 0.9)) == [0.5, 0.75, 0.9]
    assert resolve_budget_thresholds(("bad",), (0.6,)) == [0.6]
    assert resolve_budget_thresholds((0.8, 0.4), (0.6,)) == [0.4, 0.8]


def test_normalize_threshold_list_drops_values_rounding_to_zero():
    assert normalize_threshold_list([0.003, 0.9]) == [0.9]


@pytest.mark.parametrize("raw", [[0.003], [0.003, 0.9]])
def test_validate_threshold_list_rejects_values_rounding_to_zero(raw):
    with pytest.raises(InvalidThresholdError):
        validate_threshold_list(raw)
