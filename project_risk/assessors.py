"""
Project Risk Engine - Factor Assessors.

============================================================
PURPOSE
============================================================
Scoring functions for each risk factor.

Each scorer:
1. Guards its degenerate case (missing denominator, no data)
2. Computes the factor's raw value
3. Maps the value onto 0-100 with the shared curve
4. Buckets the score into a status
5. Builds a human-readable label

============================================================
SCORING CURVE
============================================================
    value <= healthy   -> 0
    value >= critical  -> 100
    otherwise          -> linear between healthy and critical

The warning boundary is NOT a breakpoint of the curve. It
only picks the wording of the label.

Status comes from the score, not from the raw value:
    score <= 25 -> healthy
    score <= 60 -> warning
    else        -> critical

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input = same output
- Never raise on missing or zero data
- "Now" is passed in, never read implicitly

============================================================
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .clock import Clock, get_default_clock
from .config import DEFAULT_THRESHOLDS, FactorThresholds, ThresholdSet
from .formatting import format_compact, format_fixed, format_percent
from .types import (
    FactorResult,
    ProjectSnapshot,
    RiskFactor,
    RiskStatus,
    to_utc_datetime,
)


SECONDS_PER_DAY = 86_400

HEALTHY_MAX_SCORE = 25
WARNING_MAX_SCORE = 60


# ============================================================
# SHARED SCORING PRIMITIVES
# ============================================================


def score_of(value: float, thresholds: FactorThresholds) -> float:
    """
    Map a raw factor value onto the 0-100 risk curve.

    Args:
        value: Raw factor value in the factor's native unit
        thresholds: Boundaries for the factor

    Returns:
        0 at or below healthy, 100 at or above critical,
        linear in between
    """
    if value <= thresholds.healthy:
        return 0
    if value >= thresholds.critical:
        return 100

    span = thresholds.critical - thresholds.healthy
    excess = value - thresholds.healthy
    return (excess / span) * 100


def status_from_score(score: float) -> RiskStatus:
    """Bucket a 0-100 score. Shared by factors and the composite score."""
    if score <= HEALTHY_MAX_SCORE:
        return RiskStatus.HEALTHY
    if score <= WARNING_MAX_SCORE:
        return RiskStatus.WARNING
    return RiskStatus.CRITICAL


def _result(factor: RiskFactor, value: Optional[float], score: float, label: str) -> FactorResult:
    return FactorResult(
        factor=factor,
        score=score,
        status=status_from_score(score),
        label=label,
        value=value,
    )


# ============================================================
# FACTOR SCORERS
# ============================================================


def calculate_budget_factor(
    total_costs: Optional[float],
    earned_revenue: Optional[float],
    thresholds: FactorThresholds = DEFAULT_THRESHOLDS.budget,
) -> FactorResult:
    """
    Score cost burn against earned revenue.

    Args:
        total_costs: Total costs to date
        earned_revenue: Revenue earned to date
        thresholds: Cost/revenue ratio boundaries

    Returns:
        FactorResult with ``value`` = cost/revenue ratio
    """
    if not earned_revenue or earned_revenue <= 0:
        return FactorResult(
            factor=RiskFactor.BUDGET,
            score=0,
            status=RiskStatus.HEALTHY,
            label="No revenue yet",
            value=0,
        )

    ratio = (total_costs or 0) / earned_revenue
    pct = format_percent(ratio)

    if ratio < thresholds.healthy:
        label = f"Costs at {pct}% of revenue"
    elif ratio < thresholds.warning:
        label = f"Costs at {pct}% - monitor closely"
    else:
        label = f"Costs at {pct}% - review immediately"

    return _result(RiskFactor.BUDGET, ratio, score_of(ratio, thresholds), label)


def calculate_schedule_factor(
    actual_progress: Optional[float],
    expected_progress: Optional[float],
    thresholds: FactorThresholds = DEFAULT_THRESHOLDS.schedule,
) -> FactorResult:
    """
    Score progress shortfall against the schedule baseline.

    Being ahead of schedule is never penalized: the raw
    variance keeps its sign, but only the shortfall is scored.

    Returns:
        FactorResult with ``value`` = (expected - actual) / expected
    """
    if not expected_progress or expected_progress <= 0:
        return FactorResult(
            factor=RiskFactor.SCHEDULE,
            score=0,
            status=RiskStatus.HEALTHY,
            label="No schedule baseline",
            value=0,
        )

    actual = actual_progress or 0
    variance = (expected_progress - actual) / expected_progress
    shortfall = max(0, variance)

    if variance <= 0:
        label = "Complete" if actual >= 100 else "On or ahead of schedule"
    elif variance < thresholds.warning:
        label = f"{format_percent(variance)}% behind schedule"
    else:
        label = f"{format_percent(variance)}% behind - needs attention"

    return _result(RiskFactor.SCHEDULE, variance, score_of(shortfall, thresholds), label)


def calculate_cor_exposure_factor(
    pending_cor_value: Optional[float],
    contract_value: Optional[float],
    thresholds: FactorThresholds = DEFAULT_THRESHOLDS.cor_exposure,
) -> FactorResult:
    """
    Score pending change-order value as a share of the contract.

    Returns:
        FactorResult with ``value`` = pending COR value / contract value
    """
    if not contract_value or contract_value <= 0:
        return FactorResult(
            factor=RiskFactor.COR_EXPOSURE,
            score=0,
            status=RiskStatus.HEALTHY,
            label="No contract value",
            value=0,
        )

    pending = pending_cor_value or 0
    exposure = pending / contract_value
    amount = format_compact(pending)

    if exposure < thresholds.healthy:
        label = f"${amount} pending" if pending > 0 else "No pending CORs"
    elif exposure < thresholds.warning:
        label = f"${amount} pending ({format_percent(exposure)}% of contract)"
    else:
        label = f"High exposure: ${amount} ({format_percent(exposure)}%)"

    return _result(RiskFactor.COR_EXPOSURE, exposure, score_of(exposure, thresholds), label)


def calculate_activity_factor(
    last_report_date: Optional[datetime],
    thresholds: FactorThresholds = DEFAULT_THRESHOLDS.activity,
    now: Optional[datetime] = None,
) -> FactorResult:
    """
    Score how long the project has gone without a daily report.

    A project that has never filed a report is critical.

    Args:
        last_report_date: Timestamp of the latest daily report
        thresholds: Day-count boundaries
        now: Reference time (defaults to the default clock)

    Returns:
        FactorResult with ``value`` = whole days since the last report
    """
    if last_report_date is None:
        return FactorResult(
            factor=RiskFactor.ACTIVITY,
            score=100,
            status=RiskStatus.CRITICAL,
            label="No reports filed",
            value=None,
        )

    now = to_utc_datetime(now or get_default_clock().now())
    last = to_utc_datetime(last_report_date)
    days_since = math.floor((now - last).total_seconds() / SECONDS_PER_DAY)

    if days_since == 0:
        label = "Report filed today"
    elif days_since == 1:
        label = "Report filed yesterday"
    elif days_since <= thresholds.warning:
        label = f"Last report {days_since} days ago"
    else:
        label = f"No report in {days_since} days - may be stalled"

    return _result(RiskFactor.ACTIVITY, days_since, score_of(days_since, thresholds), label)


def calculate_safety_factor(
    injury_count: Optional[int],
    thresholds: FactorThresholds = DEFAULT_THRESHOLDS.safety,
) -> FactorResult:
    """
    Score injury reports from the last 30 days.

    Returns:
        FactorResult with ``value`` = incident count
    """
    count = injury_count or 0

    if count == 0:
        label = "No incidents"
    elif count == 1:
        label = "1 incident in last 30 days"
    else:
        label = f"{format_fixed(count)} incidents - safety review needed"

    return _result(RiskFactor.SAFETY, count, score_of(count, thresholds), label)


# ============================================================
# SNAPSHOT ASSESSORS
# ============================================================


class BaseFactorAssessor(ABC):
    """
    Applies one factor scorer to a ProjectSnapshot.

    The engine holds one assessor per factor and feeds each
    the matching threshold entry.
    """

    @property
    @abstractmethod
    def factor(self) -> RiskFactor:
        """Return the factor this assessor scores."""
        pass

    def assess(
        self,
        snapshot: ProjectSnapshot,
        thresholds: ThresholdSet = DEFAULT_THRESHOLDS,
    ) -> FactorResult:
        return self._score(snapshot, thresholds.get(self.factor))

    @abstractmethod
    def _score(self, snapshot: ProjectSnapshot, thresholds: FactorThresholds) -> FactorResult:
        pass


class BudgetAssessor(BaseFactorAssessor):
    factor = RiskFactor.BUDGET

    def _score(self, snapshot, thresholds):
        return calculate_budget_factor(snapshot.total_costs, snapshot.earned_revenue, thresholds)


class ScheduleAssessor(BaseFactorAssessor):
    factor = RiskFactor.SCHEDULE

    def _score(self, snapshot, thresholds):
        return calculate_schedule_factor(
            snapshot.actual_progress, snapshot.expected_progress, thresholds
        )


class CORExposureAssessor(BaseFactorAssessor):
    factor = RiskFactor.COR_EXPOSURE

    def _score(self, snapshot, thresholds):
        return calculate_cor_exposure_factor(
            snapshot.pending_cor_value, snapshot.contract_value, thresholds
        )


class ActivityAssessor(BaseFactorAssessor):
    """Needs a clock: days since the last report depend on "now"."""

    factor = RiskFactor.ACTIVITY

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or get_default_clock()

    def _score(self, snapshot, thresholds):
        return calculate_activity_factor(
            snapshot.last_report_date, thresholds, now=self._clock.now()
        )


class SafetyAssessor(BaseFactorAssessor):
    factor = RiskFactor.SAFETY

    def _score(self, snapshot, thresholds):
        return calculate_safety_factor(snapshot.recent_injury_count, thresholds)
