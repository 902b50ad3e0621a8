"""Process wiring for the scheduler and dashboard processes embedding the package"""

from typing import Optional, Tuple

from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from finance_insights.config import Settings, settings
from finance_insights.domain.budgets import BudgetPolicy
from finance_insights.infrastructure.database.session import create_db_engine, create_session_factory, init_db
from finance_insights.infrastructure.observability.logging import setup_logging
from finance_insights.services.alert_triggers import AlertTriggerDeduplicator
from finance_insights.services.reporting import ReportingService


def configure_logging(config: Settings = settings) -> None:
    setup_logging(config.log_level)


def create_deduplicator(
    config: Settings = settings,
    database_url: Optional[str] = None,
    use_upsert: bool = True,
) -> AlertTriggerDeduplicator:
    """Deduplicator bound to the configured trigger store, creating the table if missing"""
    engine = create_db_engine(database_url or config.database_url)
    init_db(engine)
    return AlertTriggerDeduplicator(create_session_factory(engine), use_upsert=use_upsert)


def create_reporting_service(config: Settings = settings) -> ReportingService:
    return ReportingService(policy=BudgetPolicy.from_settings(config), config=config)


def metrics_payload() -> Tuple[bytes, str]:
    """Prometheus exposition body and content type for a /metrics handler"""
    return generate_latest(), CONTENT_TYPE_LATEST
