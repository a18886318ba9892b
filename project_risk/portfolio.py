"""
Project Risk Engine - Portfolio Aggregation.

============================================================
PURPOSE
============================================================
Runs the engine across a collection of projects and rolls
the results up for the portfolio dashboard.

Per project:
    score -> alerts -> projections

Portfolio-wide:
- Flattened, priority-sorted alert feed with counts
- Contract / earned / remaining value totals
- Project health buckets
- Schedule and labor status counts

============================================================
HEALTH BUCKETS
============================================================
The buckets overlap on purpose. A project billing ahead of
its progress can be both "on track" from the progress view
and "at risk" from the budget view, and is counted in both.

    complete:    progress >= 100
    on_track:    progress < 100 and billed <= contract * progress * 1.10
    at_risk:     billed > contract * 0.90 and progress < 90
    over_budget: billed > contract

============================================================
CONCURRENCY
============================================================
Each project reads only its own snapshot and the shared,
immutable configuration. With ``max_workers > 1`` projects
are scored on a thread pool; output order always follows
input order.

============================================================
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence

from .alerting import generate_smart_alerts, sort_alerts
from .clock import Clock
from .config import RiskEngineConfig
from .engine import RiskScoringEngine
from .formatting import round_half_up
from .projections import calculate_projections
from .types import (
    Alert,
    AlertType,
    FactorResult,
    ProjectionResult,
    ProjectSnapshot,
    RiskFactor,
    RiskStatus,
)


logger = logging.getLogger(__name__)


ON_TRACK_BILLING_TOLERANCE = 1.10
AT_RISK_BILLED_SHARE = 0.90
AT_RISK_MAX_PROGRESS = 90


# ============================================================
# RESULT TYPES
# ============================================================


@dataclass(frozen=True)
class ProjectRiskSummary:
    """Risk score, alerts and projections for one project."""

    project_id: str
    project_name: str
    risk_score: int
    risk_status: RiskStatus
    risk_label: str
    factors: Dict[RiskFactor, FactorResult]
    alerts: List[Alert]
    projections: ProjectionResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "risk_score": self.risk_score,
            "risk_status": self.risk_status.value,
            "risk_label": self.risk_label,
            "factors": {f.value: r.to_dict() for f, r in self.factors.items()},
            "alerts": [a.to_dict() for a in self.alerts],
            "projections": self.projections.to_dict(),
        }


@dataclass(frozen=True)
class PortfolioRiskSummary:
    """Per-project risk plus the portfolio-wide alert feed."""

    project_risks: List[ProjectRiskSummary] = field(default_factory=list)
    all_alerts: List[Alert] = field(default_factory=list)
    critical_count: int = 0
    warning_count: int = 0

    @property
    def info_count(self) -> int:
        return len(self.all_alerts) - self.critical_count - self.warning_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_risks": [p.to_dict() for p in self.project_risks],
            "all_alerts": [a.to_dict() for a in self.all_alerts],
            "critical_count": self.critical_count,
            "warning_count": self.warning_count,
        }


@dataclass(frozen=True)
class PortfolioMetrics:
    """Contract value roll-ups across all projects."""

    total_original_contract: float = 0.0
    total_change_orders: float = 0.0
    total_portfolio_value: float = 0.0
    total_earned: float = 0.0
    total_remaining: float = 0.0
    weighted_completion: int = 0
    total_pending_cor_value: float = 0.0
    total_pending_cor_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass(frozen=True)
class ProjectHealthCounts:
    """Overlapping health buckets; see module docstring."""

    complete: int = 0
    on_track: int = 0
    at_risk: int = 0
    over_budget: int = 0
    with_change_orders: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass(frozen=True)
class ScheduleMetrics:
    """Counts of projects by reported schedule and labor status."""

    schedule_ahead: int = 0
    schedule_on_track: int = 0
    schedule_behind: int = 0
    labor_over: int = 0
    labor_under: int = 0
    labor_on_track: int = 0

    @property
    def has_any_schedule_data(self) -> bool:
        return self.schedule_ahead + self.schedule_on_track + self.schedule_behind > 0

    @property
    def has_any_labor_data(self) -> bool:
        return self.labor_over + self.labor_under + self.labor_on_track > 0

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.__dict__)
        data["has_any_schedule_data"] = self.has_any_schedule_data
        data["has_any_labor_data"] = self.has_any_labor_data
        return data


@dataclass(frozen=True)
class PortfolioReport:
    """Everything the portfolio dashboard needs in one object."""

    risk: PortfolioRiskSummary
    metrics: PortfolioMetrics
    health: ProjectHealthCounts
    schedule: ScheduleMetrics

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk": self.risk.to_dict(),
            "metrics": self.metrics.to_dict(),
            "health": self.health.to_dict(),
            "schedule": self.schedule.to_dict(),
        }


# ============================================================
# ROLL-UPS
# ============================================================


def calculate_portfolio_metrics(snapshots: Sequence[ProjectSnapshot]) -> PortfolioMetrics:
    """Sum contract, change-order, earned and pending COR values."""
    total_original = sum(s.base_contract_value for s in snapshots)
    total_change_orders = sum(s.change_order_value for s in snapshots)
    total_value = total_original + total_change_orders
    total_earned = sum(s.earned_revenue for s in snapshots)

    weighted_completion = (
        round_half_up(total_earned / total_value * 100) if total_value > 0 else 0
    )

    return PortfolioMetrics(
        total_original_contract=total_original,
        total_change_orders=total_change_orders,
        total_portfolio_value=total_value,
        total_earned=total_earned,
        total_remaining=total_value - total_earned,
        weighted_completion=weighted_completion,
        total_pending_cor_value=sum(s.pending_cor_value for s in snapshots),
        total_pending_cor_count=sum(s.pending_cor_count for s in snapshots),
    )


def calculate_project_health(snapshots: Sequence[ProjectSnapshot]) -> ProjectHealthCounts:
    """
    Count projects per health bucket.

    ``contract_value`` is the revised contract (original plus
    approved change orders); ``earned_revenue`` is billed value.
    A project can land in several buckets.
    """
    complete = on_track = at_risk = over_budget = with_change_orders = 0

    for s in snapshots:
        progress = s.actual_progress
        billed = s.earned_revenue
        contract = s.contract_value

        if progress >= 100:
            complete += 1
        if progress < 100 and billed <= contract * (progress / 100) * ON_TRACK_BILLING_TOLERANCE:
            on_track += 1
        if billed > contract * AT_RISK_BILLED_SHARE and progress < AT_RISK_MAX_PROGRESS:
            at_risk += 1
        if billed > contract:
            over_budget += 1
        if s.change_order_value > 0:
            with_change_orders += 1

    return ProjectHealthCounts(
        complete=complete,
        on_track=on_track,
        at_risk=at_risk,
        over_budget=over_budget,
        with_change_orders=with_change_orders,
    )


def calculate_schedule_metrics(snapshots: Sequence[ProjectSnapshot]) -> ScheduleMetrics:
    """
    Count reported schedule and labor statuses.

    Projects without a status are skipped. Any status other than
    ahead/behind (or over/under) counts as on track.
    """
    counts = dict.fromkeys(ScheduleMetrics.__dataclass_fields__, 0)

    for s in snapshots:
        if s.schedule_status:
            if s.schedule_status == "ahead":
                counts["schedule_ahead"] += 1
            elif s.schedule_status == "behind":
                counts["schedule_behind"] += 1
            else:
                counts["schedule_on_track"] += 1
        if s.labor_status:
            if s.labor_status == "over":
                counts["labor_over"] += 1
            elif s.labor_status == "under":
                counts["labor_under"] += 1
            else:
                counts["labor_on_track"] += 1

    return ScheduleMetrics(**counts)


# ============================================================
# AGGREGATOR
# ============================================================


class PortfolioAggregator:
    """
    Scores every project in a portfolio and merges the results.

    ============================================================
    USAGE
    ============================================================
        aggregator = PortfolioAggregator(config=config, clock=clock)
        report = aggregator.analyze(snapshots)

        for alert in report.risk.all_alerts:
            print(alert.type.value, alert.project_name, alert.title)

    ============================================================
    """

    def __init__(
        self,
        config: Optional[RiskEngineConfig] = None,
        clock: Optional[Clock] = None,
        max_workers: Optional[int] = None,
    ):
        """
        Initialize the aggregator.

        Args:
            config: Engine configuration shared by every project
            clock: Time source shared by every project
            max_workers: Thread pool size; None or 1 runs serially
        """
        self._engine = RiskScoringEngine(config=config, clock=clock)
        self._max_workers = max_workers

    @property
    def config(self) -> RiskEngineConfig:
        return self._engine.config

    def assess_project(self, snapshot: ProjectSnapshot) -> ProjectRiskSummary:
        """Score, alert and project a single snapshot."""
        risk = self._engine.score(snapshot)
        alerts = generate_smart_alerts(risk, snapshot, self.config.alerting)
        projections = calculate_projections(snapshot, self._engine.clock)

        stamped = [
            replace(alert, project_id=snapshot.id, project_name=snapshot.name or None)
            for alert in alerts
        ]

        return ProjectRiskSummary(
            project_id=snapshot.id,
            project_name=snapshot.name,
            risk_score=risk.score,
            risk_status=risk.status,
            risk_label=risk.label,
            factors=risk.factors,
            alerts=stamped,
            projections=projections,
        )

    def analyze_risk(self, snapshots: Sequence[ProjectSnapshot]) -> PortfolioRiskSummary:
        """Assess every project and build the sorted alert feed."""
        if self._max_workers and self._max_workers > 1 and len(snapshots) > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
                project_risks = list(executor.map(self.assess_project, snapshots))
        else:
            project_risks = [self.assess_project(s) for s in snapshots]

        all_alerts = sort_alerts(a for p in project_risks for a in p.alerts)

        summary = PortfolioRiskSummary(
            project_risks=project_risks,
            all_alerts=all_alerts,
            critical_count=sum(1 for a in all_alerts if a.type == AlertType.CRITICAL),
            warning_count=sum(1 for a in all_alerts if a.type == AlertType.WARNING),
        )

        logger.info(
            f"Portfolio risk analyzed: {len(project_risks)} projects, "
            f"{summary.critical_count} critical / {summary.warning_count} warning alerts"
        )
        return summary

    def analyze(self, snapshots: Sequence[ProjectSnapshot]) -> PortfolioReport:
        """Full portfolio report: risk, metrics, health and schedule."""
        snapshots = list(snapshots)
        return PortfolioReport(
            risk=self.analyze_risk(snapshots),
            metrics=calculate_portfolio_metrics(snapshots),
            health=calculate_project_health(snapshots),
            schedule=calculate_schedule_metrics(snapshots),
        )


def analyze_portfolio(
    snapshots: Sequence[ProjectSnapshot],
    config: Optional[RiskEngineConfig] = None,
    clock: Optional[Clock] = None,
) -> PortfolioReport:
    """Convenience wrapper around PortfolioAggregator.analyze."""
    return PortfolioAggregator(config=config, clock=clock).analyze(snapshots)
