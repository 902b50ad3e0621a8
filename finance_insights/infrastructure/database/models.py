"""SQLAlchemy ORM models for the threshold trigger store"""

from sqlalchemy import Column, Date, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class BudgetThresholdTrigger(Base):
    """One alertable threshold crossing per (budget, month, threshold)"""

    __tablename__ = "budget_threshold_triggers"
    __table_args__ = (
        UniqueConstraint(
            "budget_id",
            "reference_month",
            "threshold",
            name="budget_threshold_triggers_unique_idx",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    budget_id = Column(Integer, nullable=False, index=True)
    reference_month = Column(Date, nullable=False)  # Always the first day of the month
    threshold = Column(String(8), nullable=False)  # Fixed 2-decimal ratio, e.g. "0.75"
    triggered_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
