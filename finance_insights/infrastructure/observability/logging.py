"""Structured JSON logging for report runs and alert deduplication"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO
from pythonjsonlogger import jsonlogger
from finance_insights.config import settings

LOG_FORMAT = "%(timestamp)s %(level)s %(name)s %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter stamping every record with UTC time, level and service name"""

    def __init__(self, *args: Any, service_name: Optional[str] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.service_name = service_name or settings.service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Route the root logger to a single JSON handler (stdout unless a stream is given)"""
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(CustomJsonFormatter(LOG_FORMAT))
    root.addHandler(handler)


def log_trigger_outcome(
    budget_id: Any,
    reference_month: Any,
    threshold: Any,
    reason: str,
    should_dispatch: bool,
) -> None:
    """Log the dedup decision for one threshold crossing"""
    logging.info(
        "Threshold trigger registered",
        extra={
            "step": "threshold_trigger",
            "budget_id": budget_id,
            "reference_month": str(reference_month),
            "threshold": str(threshold),
            "reason": reason,
            "should_dispatch": should_dispatch,
        },
    )


def log_alert_dispatch(budget_id: int, month: str, threshold: float, sent: bool, error: Optional[Exception] = None) -> None:
    """Log one notifier call; failures go out at error level"""
    extra = {
        "step": "alert_dispatch",
        "budget_id": budget_id,
        "month": month,
        "threshold": threshold,
        "outcome": "sent" if sent else "failed",
    }
    if sent:
        logging.info("Budget alert dispatched", extra=extra)
    else:
        logging.error(f"Budget alert dispatch failed: {error}", extra=extra)


def log_report_run(report: str, entry_count: int, skipped_entries: int, duration_ms: float) -> None:
    """Log a completed reporting computation"""
    logging.info(
        "Report computed",
        extra={
            "step": "report_complete",
            "report": report,
            "entry_count": entry_count,
            "skipped_entries": skipped_entries,
            "duration_ms": duration_ms,
        },
    )
