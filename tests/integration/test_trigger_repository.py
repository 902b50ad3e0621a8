"""Integration tests for the threshold trigger repository against SQLite"""

import pytest
from datetime import date, datetime
from decimal import Decimal
from finance_insights.domain.models import TriggerKey
from finance_insights.infrastructure.database.models import BudgetThresholdTrigger
from finance_insights.infrastructure.database.repositories import (
    TriggerRepository,
    format_threshold,
    to_trigger_record,
)

pytestmark = pytest.mark.integration

KEY = TriggerKey(budget_id=11, reference_month=date(2024, 5, 1), threshold=Decimal("0.75"))
FIRST = datetime(2024, 5, 10, 9, 0)
LATER = datetime(2024, 5, 12, 18, 30)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


def test_format_threshold():
    assert format_threshold(Decimal("0.5")) == "0.50"
    assert format_threshold(Decimal("1.00")) == "1.00"


@pytest.mark.parametrize("use_upsert", [True, False])
def test_insert_if_absent_creates_once(db, use_upsert):
    repo = TriggerRepository(db, use_upsert=use_upsert)

    assert repo.insert_if_absent(KEY, FIRST) is True
    assert repo.insert_if_absent(KEY, LATER) is False

    rows = db.query(BudgetThresholdTrigger).all()
    assert len(rows) == 1
    assert rows[0].threshold == "0.75"
    assert rows[0].triggered_at == FIRST


def test_keys_differing_in_any_component_are_distinct(db):
    repo = TriggerRepository(db)
    keys = [
        KEY,
        TriggerKey(budget_id=12, reference_month=date(2024, 5, 1), threshold=Decimal("0.75")),
        TriggerKey(budget_id=11, reference_month=date(2024, 6, 1), threshold=Decimal("0.75")),
        TriggerKey(budget_id=11, reference_month=date(2024, 5, 1), threshold=Decimal("0.90")),
    ]

    assert [repo.insert_if_absent(key, FIRST) for key in keys] == [True, True, True, True]
    assert db.query(BudgetThresholdTrigger).count() == 4


def test_get_and_record_conversion(db):
    repo = TriggerRepository(db)
    assert repo.get(KEY) is None

    repo.insert_if_absent(KEY, FIRST)
    record = to_trigger_record(repo.get(KEY))

    assert record.key == KEY
    assert record.triggered_at == FIRST
    assert record.id is not None


def test_touch_refreshes_triggered_at(db):
    repo = TriggerRepository(db)
    assert repo.touch(KEY, LATER) is None

    repo.insert_if_absent(KEY, FIRST)
    row = repo.touch(KEY, LATER)

    assert row.triggered_at == LATER
    assert db.query(BudgetThresholdTrigger).count() == 1


def test_delete(db):
    repo = TriggerRepository(db)
    repo.insert_if_absent(KEY, FIRST)

    assert repo.delete(KEY) is True
    assert repo.delete(KEY) is False
    assert repo.insert_if_absent(KEY, LATER) is True
