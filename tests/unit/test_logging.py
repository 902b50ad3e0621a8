"""Unit tests for structured JSON logging"""

import io
import json
import logging
import pytest
from finance_insights.infrastructure.observability.logging import (
    log_alert_dispatch,
    log_trigger_outcome,
    setup_logging,
)


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    setup_logging("INFO", stream=stream)
    yield stream
    logging.getLogger().handlers.clear()


def _records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


def test_records_carry_service_metadata(log_stream):
    logging.getLogger("finance_insights.test").info("hello")

    record = _records(log_stream)[0]
    assert record["message"] == "hello"
    assert record["level"] == "INFO"
    assert record["service"] == "finance-insights"
    assert record["name"] == "finance_insights.test"
    assert record["timestamp"].endswith("+00:00")


def test_trigger_outcome_fields(log_stream):
    log_trigger_outcome(11, "2024-05-01", "0.75", "duplicate", False)

    record = _records(log_stream)[0]
    assert record["step"] == "threshold_trigger"
    assert record["budget_id"] == 11
    assert record["reason"] == "duplicate"
    assert record["should_dispatch"] is False


def test_failed_dispatch_logs_at_error_level(log_stream):
    log_alert_dispatch(11, "2024-05", 0.5, sent=False, error=RuntimeError("smtp down"))

    record = _records(log_stream)[0]
    assert record["level"] == "ERROR"
    assert record["outcome"] == "failed"
    assert "smtp down" in record["message"]


def test_level_filters_debug(log_stream):
    logging.debug("hidden")
    assert _records(log_stream) == []
