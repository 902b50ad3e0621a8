"""Data access layer for budget threshold triggers"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from finance_insights.domain.exceptions import TriggerConflictError
from finance_insights.domain.models import TriggerKey, TriggerRecord
from finance_insights.infrastructure.database.models import BudgetThresholdTrigger

# Dialects with INSERT ... ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}

_KEY_COLUMNS = ["budget_id", "reference_month", "threshold"]


def format_threshold(threshold: Decimal) -> str:
    return f"{threshold:.2f}"


def to_trigger_record(row: BudgetThresholdTrigger) -> TriggerRecord:
    return TriggerRecord(
        key=TriggerKey(
            budget_id=row.budget_id,
            reference_month=row.reference_month,
            threshold=Decimal(row.threshold),
        ),
        triggered_at=row.triggered_at,
        id=row.id,
    )


class TriggerRepository:
    """Repository for threshold triggers; every write commits its own transaction"""

    def __init__(self, db: Session, use_upsert: bool = True):
        self.db = db
        self.use_upsert = use_upsert

    def _key_filter(self, key: TriggerKey):
        return (
            BudgetThresholdTrigger.budget_id == key.budget_id,
            BudgetThresholdTrigger.reference_month == key.reference_month,
            BudgetThresholdTrigger.threshold == format_threshold(key.threshold),
        )

    def get(self, key: TriggerKey) -> Optional[BudgetThresholdTrigger]:
        return self.db.execute(select(BudgetThresholdTrigger).where(*self._key_filter(key))).scalar_one_or_none()

    def insert_if_absent(self, key: TriggerKey, triggered_at: datetime) -> bool:
        """
        Atomically create the trigger row unless it already exists.

        Returns True when this call inserted the row. Where the dialect
        supports it a single INSERT ... ON CONFLICT DO NOTHING decides the
        winner. Otherwise the row is looked up first and inserted; losing
        the race on that insert raises TriggerConflictError.
        """
        values = {
            "budget_id": key.budget_id,
            "reference_month": key.reference_month,
            "threshold": format_threshold(key.threshold),
            "triggered_at": triggered_at,
        }

        dialect_insert = _UPSERT_INSERTS.get(self.db.get_bind().dialect.name)
        if self.use_upsert and dialect_insert is not None:
            stmt = dialect_insert(BudgetThresholdTrigger).values(**values).on_conflict_do_nothing(
                index_elements=_KEY_COLUMNS
            )
            result = self.db.execute(stmt)
            self.db.commit()
            return result.rowcount == 1

        if self.get(key) is not None:
            self.db.rollback()
            return False

        self.db.add(BudgetThresholdTrigger(**values))
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise TriggerConflictError(f"Trigger already registered: {key}") from exc
        return True

    def touch(self, key: TriggerKey, triggered_at: datetime) -> Optional[BudgetThresholdTrigger]:
        """Refresh triggered_at on an existing row"""
        row = self.get(key)
        if row is None:
            self.db.rollback()
            return None
        row.triggered_at = triggered_at
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, key: TriggerKey) -> bool:
        row = self.get(key)
        if row is None:
            self.db.rollback()
            return False
        self.db.delete(row)
        self.db.commit()
        return True
