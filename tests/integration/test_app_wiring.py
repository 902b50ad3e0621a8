"""Integration tests for process wiring"""

import pytest
from datetime import datetime
from finance_insights.app import create_deduplicator, create_reporting_service, metrics_payload
from finance_insights.config import Settings

pytestmark = pytest.mark.integration


def test_create_deduplicator_initializes_store(tmp_path):
    config = Settings(database_url=f"sqlite:///{tmp_path / 'wiring.db'}")
    deduplicator = create_deduplicator(config)

    first = deduplicator.register_trigger(5, "2024-05", 0.5, now=datetime(2024, 5, 2))
    second = deduplicator.register_trigger(5, "2024-05", 0.5, now=datetime(2024, 5, 3))

    assert first.reason == "created"
    assert second.reason == "duplicate"


def test_create_reporting_service_uses_configured_policy():
    service = create_reporting_service(Settings(budget_default_thresholds="0.3,0.6"))
    assert service.policy.default_thresholds == (0.3, 0.6)


def test_metrics_payload_exposes_trigger_counter(deduplicator):
    deduplicator.register_trigger(6, "2024-05", 0.5, now=datetime(2024, 5, 2))

    body, content_type = metrics_payload()

    assert content_type.startswith("text/plain")
    assert b"finance_threshold_trigger_total" in body
