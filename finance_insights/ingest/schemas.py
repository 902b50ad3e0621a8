"""Pydantic schemas validating raw finance records supplied by collaborators"""

import logging
from datetime import date
from typing import Any, Iterable, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from finance_insights.domain.models import Budget, FinanceGoal, LedgerEntry
from finance_insights.domain.thresholds import normalize_threshold_list
from finance_insights.infrastructure.observability.metrics import skipped_entries_counter
from finance_insights.utils.date_utils import first_day_of_month, normalize_recurring_interval, parse_date_candidate


def _required_date(value: Any) -> date:
    parsed = parse_date_candidate(value)
    if parsed is None:
        raise ValueError(f"unparseable date: {value!r}")
    return parsed


class LedgerEntryRecord(BaseModel):
    """Finance entry as exported by the finance module (camelCase or snake_case keys)"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    type: Literal["payable", "receivable"]
    status: str = "pending"
    value: float = Field(..., ge=0, allow_inf_nan=False)
    due_date: date = Field(..., alias="dueDate")
    recurring: bool = False
    recurring_interval: Optional[str] = Field(None, alias="recurringInterval")
    category_id: Optional[int] = Field(None, alias="financeCategoryId")
    owner_id: Optional[int] = Field(None, alias="userId")

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, value: Any) -> date:
        return _required_date(value)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: Any) -> str:
        return str(value or "pending").strip().lower()

    @field_validator("recurring_interval", mode="before")
    @classmethod
    def normalize_interval(cls, value: Any) -> Optional[str]:
        return normalize_recurring_interval(value)

    def to_domain(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            type=self.type,
            status=self.status,
            value=self.value,
            due_date=self.due_date,
            recurring=self.recurring,
            recurring_interval=self.recurring_interval,
            category_id=self.category_id,
            owner_id=self.owner_id,
        )


class BudgetRecord(BaseModel):
    """Budget row; thresholds are normalized here rather than inside the entity"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int = Field(..., gt=0)
    monthly_limit: float = Field(..., gt=0, allow_inf_nan=False, alias="monthlyLimit")
    thresholds: List[float] = Field(default_factory=list)
    reference_month: Optional[date] = Field(None, alias="referenceMonth")
    category_id: Optional[int] = Field(None, alias="financeCategoryId")
    owner_id: Optional[int] = Field(None, alias="userId")
    category_name: Optional[str] = Field(None, alias="categoryName")

    @field_validator("thresholds", mode="before")
    @classmethod
    def normalize_thresholds(cls, value: Any) -> List[float]:
        return normalize_threshold_list(value)

    @field_validator("reference_month", mode="before")
    @classmethod
    def normalize_reference_month(cls, value: Any) -> Optional[date]:
        if value is None or value == "":
            return None
        return first_day_of_month(_required_date(value))

    def to_domain(self) -> Budget:
        return Budget(
            id=self.id,
            monthly_limit=self.monthly_limit,
            category_id=self.category_id,
            thresholds=tuple(self.thresholds),
            reference_month=self.reference_month,
            owner_id=self.owner_id,
            category_name=self.category_name,
        )


class FinanceGoalRecord(BaseModel):
    """Monthly net result target"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    month: date
    target_net_amount: Optional[float] = Field(None, allow_inf_nan=False, alias="targetNetAmount")
    notes: Optional[str] = None

    @field_validator("month", mode="before")
    @classmethod
    def normalize_month(cls, value: Any) -> date:
        return first_day_of_month(_required_date(value))

    def to_domain(self) -> FinanceGoal:
        return FinanceGoal(id=self.id, month=self.month, target_net_amount=self.target_net_amount, notes=self.notes)


def parse_ledger_entries(records: Iterable[Any]) -> List[LedgerEntry]:
    """Validate raw ledger records; malformed ones are logged and skipped"""
    entries = []
    for record in records:
        try:
            entries.append(LedgerEntryRecord.model_validate(record).to_domain())
        except ValidationError as e:
            skipped_entries_counter.labels(stage="ingest").inc()
            logging.warning(f"Skipping malformed ledger record: {e.error_count()} error(s)", extra={"record_id": _record_id(record)})
    return entries


def parse_budgets(records: Iterable[Any]) -> List[Budget]:
    budgets = []
    for record in records:
        try:
            budgets.append(BudgetRecord.model_validate(record).to_domain())
        except ValidationError as e:
            logging.warning(f"Skipping malformed budget: {e.error_count()} error(s)", extra={"record_id": _record_id(record)})
    return budgets


def parse_goals(records: Iterable[Any]) -> List[FinanceGoal]:
    goals = []
    for record in records:
        try:
            goals.append(FinanceGoalRecord.model_validate(record).to_domain())
        except ValidationError as e:
            logging.warning(f"Skipping malformed finance goal: {e.error_count()} error(s)", extra={"record_id": _record_id(record)})
    return goals


def _record_id(record: Any) -> Any:
    return record.get("id") if isinstance(record, dict) else None
