"""
Project Risk Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Project Risk Engine.

This module defines the enums, snapshots, results and errors
shared by every part of the engine. Inputs arrive as a
ProjectSnapshot from the external financial/operations
aggregator; everything else is derived and recomputed on
every call.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable (frozen dataclasses)
- Enums for discrete values (factor, status, alert type)
- Missing numeric inputs are coerced to zero, never raised
- Clear separation between input and output types

============================================================
RISK FACTORS
============================================================
The engine scores exactly five factors:

1. BUDGET - Costs vs earned revenue
2. SCHEDULE - Actual vs expected progress
3. COR_EXPOSURE - Pending change orders vs contract value
4. ACTIVITY - Days since the last daily report
5. SAFETY - Recent injury reports

Each factor scores 0 (healthy) to 100 (critical).

============================================================
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


# ============================================================
# ENUMS
# ============================================================


class RiskFactor(str, Enum):
    """
    The five risk factors evaluated by the engine.

    Order matters: it is the evaluation order, the order used
    for threshold validation, and the order of summaries.
    """

    BUDGET = "budget"
    SCHEDULE = "schedule"
    COR_EXPOSURE = "cor_exposure"
    ACTIVITY = "activity"
    SAFETY = "safety"

    @classmethod
    def all_factors(cls) -> List["RiskFactor"]:
        """Return all factors in evaluation order."""
        return [cls.BUDGET, cls.SCHEDULE, cls.COR_EXPOSURE, cls.ACTIVITY, cls.SAFETY]

    @classmethod
    def parse(cls, value: Any) -> "RiskFactor":
        """
        Resolve a factor from an enum, its value, or the
        camelCase key used by stored settings ("corExposure").
        """
        if isinstance(value, cls):
            return value
        key = str(value)
        if key == "corExposure":
            return cls.COR_EXPOSURE
        return cls(key)


class RiskStatus(str, Enum):
    """
    Status bucket for a factor score or composite score.

    - HEALTHY: score <= 25
    - WARNING: score <= 60
    - CRITICAL: score > 60
    """

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertType(str, Enum):
    """Alert severity, ordered by display priority."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"

    @property
    def priority(self) -> int:
        """Sort key: lower sorts first."""
        return {"critical": 0, "warning": 1, "info": 2}[self.value]


class ActionTarget(str, Enum):
    """
    Navigation targets consumed by the dashboard router.

    The engine only emits these strings; it never navigates.
    """

    FINANCIALS = "financials"
    OVERVIEW = "overview"
    REPORTS = "reports"
    CORS = "cors"
    BILLING = "billing"


class ThresholdPreset(str, Enum):
    """Named threshold sets selectable as a unit."""

    CONSERVATIVE = "conservative"
    BALANCED = "balanced"
    AGGRESSIVE = "aggressive"


# ============================================================
# INPUT DATA CONTRACTS
# ============================================================


def _coerce_number(value: Any) -> float:
    """Treat None and NaN as zero."""
    if value is None:
        return 0
    if isinstance(value, float) and math.isnan(value):
        return 0
    return value


def to_utc_datetime(value: Any) -> Optional[datetime]:
    """Normalize to an aware UTC datetime (naive values are taken as UTC)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        return to_utc_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    raise TypeError(f"Unsupported date value: {value!r}")


_NUMERIC_FIELDS = (
    "total_costs",
    "earned_revenue",
    "actual_progress",
    "expected_progress",
    "pending_cor_value",
    "contract_value",
    "recent_injury_count",
    "unbilled_amount",
    "unbilled_cor_count",
    "unbilled_ticket_count",
    "change_order_value",
    "pending_cor_count",
)


@dataclass(frozen=True)
class ProjectSnapshot:
    """
    Point-in-time numeric summary of one project.

    Supplied entirely by the external aggregator. The engine
    never mutates it.

    Money fields are in major currency units (dollars) except
    ``unbilled_amount``, which is in minor units (cents).
    """

    id: str
    name: str = ""

    # Financials
    total_costs: float = 0.0
    earned_revenue: float = 0.0
    contract_value: float = 0.0
    pending_cor_value: float = 0.0

    # Progress (0-100)
    actual_progress: float = 0.0
    expected_progress: float = 0.0

    # Field activity
    last_report_date: Optional[datetime] = None
    recent_injury_count: int = 0
    start_date: Optional[datetime] = None

    # Billing (cents)
    unbilled_amount: int = 0
    unbilled_cor_count: int = 0
    unbilled_ticket_count: int = 0

    # Portfolio roll-up inputs
    original_contract_value: Optional[float] = None
    change_order_value: float = 0.0
    pending_cor_count: int = 0
    schedule_status: Optional[str] = None  # ahead | on_track | behind
    labor_status: Optional[str] = None     # over | under | on_track

    def __post_init__(self) -> None:
        for name in _NUMERIC_FIELDS:
            object.__setattr__(self, name, _coerce_number(getattr(self, name)))
        object.__setattr__(self, "last_report_date", to_utc_datetime(self.last_report_date))
        object.__setattr__(self, "start_date", to_utc_datetime(self.start_date))

    @property
    def base_contract_value(self) -> float:
        """
        Original contract value, before change orders.

        Without an explicit original value, approved change orders
        are taken back out of the revised contract_value.
        """
        if self.original_contract_value is None:
            return self.contract_value - self.change_order_value
        return self.original_contract_value

    @property
    def unbilled_item_count(self) -> int:
        return self.unbilled_cor_count + self.unbilled_ticket_count


# ============================================================
# OUTPUT DATA CONTRACTS
# ============================================================


_VALUE_NAMES = {
    RiskFactor.BUDGET: "ratio",
    RiskFactor.SCHEDULE: "variance",
    RiskFactor.COR_EXPOSURE: "exposure",
    RiskFactor.ACTIVITY: "days_since",
    RiskFactor.SAFETY: "count",
}


@dataclass(frozen=True)
class FactorResult:
    """
    Score for a single risk factor.

    ``value`` is the raw measurement the score was derived from;
    its meaning depends on the factor (see ``value_name``).
    ``weight`` is only set once the result is part of a
    composite score.
    """

    factor: RiskFactor
    score: float
    status: RiskStatus
    label: str
    value: Optional[float] = None
    weight: Optional[float] = None

    @property
    def value_name(self) -> str:
        """Name of the raw value field for this factor."""
        return _VALUE_NAMES[self.factor]

    @property
    def weighted_score(self) -> float:
        return self.score * (self.weight or 0.0)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "score": self.score,
            "status": self.status.value,
            "label": self.label,
            self.value_name: self.value,
        }
        if self.weight is not None:
            data["weight"] = self.weight
        return data


@dataclass(frozen=True)
class RiskScoreResult:
    """
    Composite risk score for one project.

    ============================================================
    OUTPUT GUARANTEES
    ============================================================
    - score: Always an integer 0-100
    - status: Bucketed with the same cut points as factors
    - factors: All five factors present, each with its weight
    ============================================================
    """

    score: int
    status: RiskStatus
    label: str
    factors: Dict[RiskFactor, FactorResult] = field(default_factory=dict)

    def get_factor(self, factor: RiskFactor) -> FactorResult:
        return self.factors[factor]

    @property
    def critical_factors(self) -> List[RiskFactor]:
        return [f for f, r in self.factors.items() if r.status == RiskStatus.CRITICAL]

    @property
    def warning_factors(self) -> List[RiskFactor]:
        return [f for f, r in self.factors.items() if r.status == RiskStatus.WARNING]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status.value,
            "label": self.label,
            "factors": {f.value: r.to_dict() for f, r in self.factors.items()},
        }


@dataclass(frozen=True)
class Alert:
    """
    Actionable alert for a project.

    ``action_target`` tells the dashboard where the ``action``
    should take the user.
    """

    type: AlertType
    title: str
    description: str
    action: str
    action_target: ActionTarget
    project_id: Optional[str] = None
    project_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "title": self.title,
            "description": self.description,
            "action": self.action,
            "action_target": self.action_target.value,
            "project_id": self.project_id,
            "project_name": self.project_name,
        }


@dataclass(frozen=True)
class ProjectionResult:
    """
    Linear end-of-project projections.

    All estimates are None when no progress has been recorded.
    """

    estimated_completion_cost: Optional[int] = None
    estimated_final_margin: Optional[float] = None
    estimated_completion_date: Optional[datetime] = None
    cost_per_percent: Optional[float] = None

    @property
    def has_projection(self) -> bool:
        return self.estimated_completion_cost is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimated_completion_cost": self.estimated_completion_cost,
            "estimated_final_margin": self.estimated_final_margin,
            "estimated_completion_date": (
                self.estimated_completion_date.isoformat()
                if self.estimated_completion_date else None
            ),
            "cost_per_percent": self.cost_per_percent,
        }


@dataclass(frozen=True)
class ThresholdValidation:
    """Outcome of threshold ordering validation."""

    ok: bool
    category: Optional[RiskFactor] = None
    message: str = ""


# ============================================================
# ERROR TYPES
# ============================================================


class RiskScoringError(Exception):
    """Base exception for project risk engine errors."""

    def __init__(self, message: str, category: Optional[RiskFactor] = None) -> None:
        super().__init__(message)
        self.message = message
        self.category = category

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value if self.category else None,
        }


class ThresholdConfigError(RiskScoringError):
    """
    Raised on threshold ingress: unknown category, incomplete
    boundaries, or an ordering violation on save.
    """
    pass


class WeightConfigError(RiskScoringError):
    """Raised when weight overrides cannot form a valid weighting."""
    pass
