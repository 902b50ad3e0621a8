"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

FINANCE_TYPES = ("payable", "receivable")
FINANCE_STATUSES = ("pending", "paid", "overdue", "cancelled")

# Severity ordering: healthy < caution < warning < critical
BUDGET_STATUSES = ("healthy", "caution", "warning", "critical")


@dataclass(frozen=True)
class LedgerEntry:
    """Snapshot of one financial record supplied by the finance module"""

    type: str  # "payable" or "receivable"
    status: str
    value: Any  # numeric, tolerated as string/Decimal; non-finite values are skipped
    due_date: Any  # date, datetime or ISO string; unparseable values are skipped
    recurring: bool = False
    recurring_interval: Optional[str] = None
    category_id: Optional[int] = None
    id: Optional[int] = None
    owner_id: Optional[int] = None


@dataclass(frozen=True)
class Budget:
    """Monthly spending ceiling for a finance category"""

    id: int
    monthly_limit: float
    category_id: Optional[int]
    thresholds: tuple = ()
    reference_month: Optional[date] = None
    owner_id: Optional[int] = None
    category_name: Optional[str] = None


@dataclass(frozen=True)
class FinanceGoal:
    """Target net result for a calendar month"""

    month: Any
    target_net_amount: Optional[float]
    notes: Optional[str] = None
    id: Optional[int] = None


@dataclass
class ProjectionBucket:
    """Calendar-month window used as the unit of projection"""

    month_key: str
    label: str
    start: datetime
    end: datetime

    def contains(self, day: date) -> bool:
        return self.start.date() <= day <= self.end.date()


@dataclass
class TypeTotals:
    """Receivable/payable totals for one bucket"""

    receivable: float = 0.0
    payable: float = 0.0
    net: float = 0.0


@dataclass
class GoalProgress:
    """How a bucket's projected net compares with its finance goal"""

    target_net_amount: Optional[float]
    achieved: Optional[bool]
    gap_to_goal: Optional[float]
    notes: Optional[str] = None
    goal_id: Optional[int] = None


@dataclass
class MonthlyProjection:
    """Computed result for one projection bucket"""

    month_key: str
    label: str
    start: datetime
    end: datetime
    actual: TypeTotals
    projected: TypeTotals
    goal: Optional[GoalProgress]
    is_current: bool
    is_past: bool
    is_future: bool
    has_goal: bool
    needs_attention: bool


@dataclass
class FinanceSummary:
    """Dashboard overview: status breakdown, monthly totals and projections"""

    status_summary: Dict[str, Dict[str, float]]
    monthly_summary: List[Dict[str, Any]]
    totals: Dict[str, float]
    projections: List[MonthlyProjection]


@dataclass
class BudgetSummary:
    """Consumption result for one (budget, month)"""

    budget_id: int
    category_id: Optional[int]
    month_key: str
    monthly_limit: float
    consumption: float
    remaining: float
    percentage: float
    status: str
    thresholds: List[float] = field(default_factory=list)
    category_name: Optional[str] = None


@dataclass
class CategoryConsumption:
    """Aggregate of budget summaries sharing a category"""

    category_id: Optional[int]
    total_limit: float
    total_consumption: float
    remaining: float
    average_percentage: float
    highest_percentage: float
    months: int
    status: str


@dataclass
class BudgetOverview:
    """Budget summaries plus their per-category roll-up"""

    summaries: List[BudgetSummary]
    category_consumption: List[CategoryConsumption]
    months: List[str]


@dataclass
class BudgetAlert:
    """A budget summary that has reached at least one threshold"""

    budget_id: int
    category_id: Optional[int]
    month_key: str
    consumption_ratio: float
    consumption_percentage: float
    threshold_reached: float
    thresholds_reached: List[float]
    summary: BudgetSummary
    category_totals: Optional[CategoryConsumption] = None


@dataclass(frozen=True)
class TriggerKey:
    """Dedup key identifying one alertable event"""

    budget_id: int
    reference_month: date
    threshold: Decimal


@dataclass
class TriggerRecord:
    """Stored threshold trigger"""

    key: TriggerKey
    triggered_at: datetime
    id: Optional[int] = None


@dataclass
class TriggerResult:
    """Outcome of registering a threshold crossing"""

    should_dispatch: bool
    created: bool
    reason: str  # created | duplicate | constraint-race | invalid-input | storage-failure
    record: Optional[TriggerRecord] = None
    error: Optional[Exception] = None


@dataclass
class BudgetAlertRun:
    """Result of one scheduler tick of the budget alert workflow"""

    processed_budgets: int
    dispatched: List[Dict[str, Any]] = field(default_factory=list)
    deduplicated: int = 0
    failed: int = 0
