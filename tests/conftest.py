"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from finance_insights.domain.models import Budget, LedgerEntry
from finance_insights.infrastructure.database.models import Base
from finance_insights.infrastructure.database.session import create_db_engine, create_session_factory, init_db
from finance_insights.services.alert_triggers import AlertTriggerDeduplicator


@pytest.fixture
def engine(tmp_path) -> Generator[Engine, None, None]:
    """File-backed SQLite database so concurrent sessions share one store"""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return create_session_factory(engine)


@pytest.fixture
def deduplicator(session_factory: sessionmaker) -> AlertTriggerDeduplicator:
    return AlertTriggerDeduplicator(session_factory)


@pytest.fixture
def recurring_entries() -> list[LedgerEntry]:
    """Monthly salary and rent: +500 receivable, -200 payable"""
    return [
        LedgerEntry(
            id=1,
            type="receivable",
            status="pending",
            value=500,
            due_date=date(2024, 7, 5),
            recurring=True,
            recurring_interval="monthly",
        ),
        LedgerEntry(
            id=2,
            type="payable",
            status="pending",
            value=200,
            due_date=date(2024, 7, 10),
            recurring=True,
            recurring_interval="monthly",
            category_id=3,
        ),
    ]


@pytest.fixture
def marketing_budget() -> Budget:
    """1000/month budget on category 9 with three alert thresholds"""
    return Budget(
        id=11,
        monthly_limit=1000,
        category_id=9,
        thresholds=(0.5, 0.75, 0.9),
        category_name="Marketing",
    )
