"""
Pydantic Schemas for Project Risk Engine ingress.

Records from the financial/operations aggregator and from the
threshold settings store arrive as loosely-typed dicts with
camelCase keys. These schemas validate them and convert them
into the engine's frozen dataclasses.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .config import DEFAULT_THRESHOLDS, FactorThresholds, ThresholdSet, merge_thresholds
from .types import ProjectSnapshot


# =============================================================
# PROJECT SNAPSHOTS
# =============================================================

_NULLABLE_NUMBERS = (
    "total_costs",
    "earned_revenue",
    "actual_progress",
    "pending_cor_value",
    "contract_value",
    "recent_injury_count",
    "unbilled_amount",
    "unbilled_cor_count",
    "unbilled_ticket_count",
    "change_order_value",
    "pending_cor_count",
)


class ProjectSnapshotSchema(BaseModel):
    """Snapshot record as produced by the metrics aggregator."""
    id: Union[str, int]
    name: str = ""

    total_costs: float = Field(0.0, alias="totalCosts")
    earned_revenue: float = Field(0.0, alias="earnedRevenue")
    contract_value: float = Field(0.0, alias="contractValue")
    pending_cor_value: float = Field(0.0, alias="pendingCORValue")

    actual_progress: float = Field(0.0, alias="actualProgress")
    expected_progress: Optional[float] = Field(None, alias="expectedProgress")

    last_report_date: Optional[datetime] = Field(None, alias="lastReportDate")
    recent_injury_count: int = Field(0, alias="recentInjuryCount")
    start_date: Optional[datetime] = Field(None, alias="startDate")

    unbilled_amount: int = Field(0, alias="unbilledAmount")
    unbilled_cor_count: int = Field(0, alias="unbilledCORCount")
    unbilled_ticket_count: int = Field(0, alias="unbilledTicketCount")

    original_contract_value: Optional[float] = Field(None, alias="originalContractValue")
    change_order_value: float = Field(0.0, alias="changeOrderValue")
    pending_cor_count: int = Field(0, alias="pendingCORCount")
    schedule_status: Optional[str] = Field(None, alias="scheduleStatus")
    labor_status: Optional[str] = Field(None, alias="laborStatus")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator(*_NULLABLE_NUMBERS, mode="before")
    @classmethod
    def null_to_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_snapshot(self) -> ProjectSnapshot:
        """
        Convert to a ProjectSnapshot.

        A missing or zero expected progress falls back to actual
        progress (no schedule variance).
        """
        expected = self.expected_progress
        if not expected:
            expected = self.actual_progress

        return ProjectSnapshot(
            id=str(self.id),
            name=self.name,
            total_costs=self.total_costs,
            earned_revenue=self.earned_revenue,
            contract_value=self.contract_value,
            pending_cor_value=self.pending_cor_value,
            actual_progress=self.actual_progress,
            expected_progress=expected,
            last_report_date=self.last_report_date,
            recent_injury_count=self.recent_injury_count,
            start_date=self.start_date,
            unbilled_amount=self.unbilled_amount,
            unbilled_cor_count=self.unbilled_cor_count,
            unbilled_ticket_count=self.unbilled_ticket_count,
            original_contract_value=self.original_contract_value,
            change_order_value=self.change_order_value,
            pending_cor_count=self.pending_cor_count,
            schedule_status=self.schedule_status,
            labor_status=self.labor_status,
        )


def parse_snapshot(record: Dict[str, Any]) -> ProjectSnapshot:
    return ProjectSnapshotSchema.model_validate(record).to_snapshot()


def parse_snapshots(records: Iterable[Dict[str, Any]]) -> List[ProjectSnapshot]:
    """Validate and convert a batch of aggregator records."""
    return [parse_snapshot(r) for r in records]


# =============================================================
# THRESHOLDS
# =============================================================

class FactorThresholdsSchema(BaseModel):
    healthy: float
    warning: float
    critical: float

    def to_thresholds(self) -> FactorThresholds:
        return FactorThresholds(self.healthy, self.warning, self.critical)


class ThresholdSetSchema(BaseModel):
    """
    Stored threshold settings.

    Categories left out keep their default boundaries.
    """
    budget: Optional[FactorThresholdsSchema] = None
    schedule: Optional[FactorThresholdsSchema] = None
    cor_exposure: Optional[FactorThresholdsSchema] = Field(None, alias="corExposure")
    activity: Optional[FactorThresholdsSchema] = None
    safety: Optional[FactorThresholdsSchema] = None

    class Config:
        populate_by_name = True
        extra = "forbid"

    def to_threshold_set(self, base: ThresholdSet = DEFAULT_THRESHOLDS) -> ThresholdSet:
        overrides = {
            name: value.to_thresholds()
            for name, value in (
                ("budget", self.budget),
                ("schedule", self.schedule),
                ("cor_exposure", self.cor_exposure),
                ("activity", self.activity),
                ("safety", self.safety),
            )
            if value is not None
        }
        return merge_thresholds(overrides, base=base)


def parse_threshold_set(data: Dict[str, Any]) -> ThresholdSet:
    """Validate stored settings and merge them onto the defaults."""
    return ThresholdSetSchema.model_validate(data).to_threshold_set()
