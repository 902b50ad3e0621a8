"""Exactly-once gate for budget threshold alerts"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from finance_insights.domain.exceptions import InvalidTriggerKeyError, TriggerConflictError
from finance_insights.domain.models import TriggerKey, TriggerResult
from finance_insights.domain.thresholds import threshold_decimal
from finance_insights.infrastructure.database.repositories import TriggerRepository, to_trigger_record
from finance_insights.infrastructure.observability.logging import log_trigger_outcome
from finance_insights.infrastructure.observability.metrics import record_trigger_outcome
from finance_insights.utils.date_utils import first_day_of_month, parse_date_candidate

# Largest id the trigger store's integer column can hold (signed 64-bit)
MAX_BUDGET_ID = 2**63 - 1


def normalize_budget_id(value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidTriggerKeyError(f"Invalid budget id: {value!r}")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if not isinstance(value, int) or not 0 < value <= MAX_BUDGET_ID:
        raise InvalidTriggerKeyError(f"Invalid budget id: {value!r}")
    return value


def normalize_trigger_key(budget_id: Any, reference_month: Any, threshold: Any) -> TriggerKey:
    """Dedup key with the month pinned to its first day and a 2-decimal threshold"""
    month = parse_date_candidate(reference_month)
    if month is None:
        raise InvalidTriggerKeyError(f"Invalid reference month: {reference_month!r}")

    normalized_threshold = threshold_decimal(threshold)
    if normalized_threshold is None:
        raise InvalidTriggerKeyError(f"Invalid threshold: {threshold!r}")

    return TriggerKey(
        budget_id=normalize_budget_id(budget_id),
        reference_month=first_day_of_month(month),
        threshold=normalized_threshold,
    )


class AlertTriggerDeduplicator:
    """
    Decides whether a threshold crossing should be dispatched.

    Each (budget, month, threshold) key yields should_dispatch=True for
    exactly one caller, even when several scheduler workers race on the
    same key. Every call uses its own session from the factory.
    """

    def __init__(self, session_factory: sessionmaker, use_upsert: bool = True):
        self.session_factory = session_factory
        self.use_upsert = use_upsert

    def register_trigger(
        self,
        budget_id: Any,
        reference_month: Any,
        threshold: Any,
        now: Optional[datetime] = None,
        touch: bool = True,
    ) -> TriggerResult:
        """
        Register a threshold crossing and report whether to dispatch.

        Outcomes (TriggerResult.reason):
        - created: first registration for the key, dispatch
        - duplicate: key already registered, no dispatch
        - constraint-race: a concurrent writer inserted first, no dispatch
        - invalid-input: key cannot be normalized, no dispatch
        - storage-failure: store unavailable, dispatch anyway (fail open)

        Never raises.
        """
        try:
            key = normalize_trigger_key(budget_id, reference_month, threshold)
        except InvalidTriggerKeyError as e:
            logging.warning(f"Rejected threshold trigger: {e}")
            result = TriggerResult(should_dispatch=False, created=False, reason="invalid-input", error=e)
            self._record(budget_id, reference_month, threshold, result)
            return result

        now = now or datetime.now(timezone.utc)

        with self.session_factory() as db:
            repo = TriggerRepository(db, use_upsert=self.use_upsert)
            try:
                result = self._register(repo, key, now, touch)
            except SQLAlchemyError as e:
                db.rollback()
                logging.error(
                    f"Threshold trigger store failed, dispatching anyway: {e}",
                    extra={"budget_id": key.budget_id, "threshold": str(key.threshold)},
                )
                result = TriggerResult(should_dispatch=True, created=False, reason="storage-failure", error=e)

        self._record(key.budget_id, key.reference_month, key.threshold, result)
        return result

    def _register(self, repo: TriggerRepository, key: TriggerKey, now: datetime, touch: bool) -> TriggerResult:
        try:
            inserted = repo.insert_if_absent(key, now)
        except TriggerConflictError:
            return self._recover_from_race(repo, key, now, touch)

        if inserted:
            row = repo.get(key)
            return TriggerResult(
                should_dispatch=True,
                created=True,
                reason="created",
                record=to_trigger_record(row) if row is not None else None,
            )

        row = repo.touch(key, now) if touch else repo.get(key)
        return TriggerResult(
            should_dispatch=False,
            created=False,
            reason="duplicate",
            record=to_trigger_record(row) if row is not None else None,
        )

    def _recover_from_race(self, repo: TriggerRepository, key: TriggerKey, now: datetime, touch: bool) -> TriggerResult:
        """Another writer won the insert: treat the crossing as already registered"""
        row = repo.touch(key, now) if touch else repo.get(key)
        return TriggerResult(
            should_dispatch=False,
            created=False,
            reason="constraint-race",
            record=to_trigger_record(row) if row is not None else None,
        )

    def release_trigger(self, budget_id: Any, reference_month: Any, threshold: Any) -> bool:
        """
        Forget a registered crossing so the next evaluation dispatches again.

        Used when the notification for a freshly created trigger could not
        be sent. Returns False when nothing was removed.
        """
        try:
            key = normalize_trigger_key(budget_id, reference_month, threshold)
        except InvalidTriggerKeyError:
            return False

        with self.session_factory() as db:
            try:
                return TriggerRepository(db, use_upsert=self.use_upsert).delete(key)
            except SQLAlchemyError as e:
                db.rollback()
                logging.error(f"Failed to release threshold trigger: {e}", extra={"budget_id": key.budget_id})
                return False

    def _record(self, budget_id: Any, reference_month: Any, threshold: Any, result: TriggerResult) -> None:
        record_trigger_outcome(result.reason)
        log_trigger_outcome(budget_id, reference_month, threshold, result.reason, result.should_dispatch)
