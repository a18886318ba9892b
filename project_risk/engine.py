"""
Project Risk Engine - Composite Scorer.

============================================================
PURPOSE
============================================================
The RiskScoringEngine is the main entry point for scoring a
single project.

It orchestrates:
1. Threshold and weight resolution (defaults + overrides)
2. Individual factor assessments
3. Weighted aggregation into a 0-100 score
4. Status bucketing and summary label

============================================================
DESIGN PRINCIPLES
============================================================
- Orchestration only: factors are scored by assessors
- Deterministic and stateless per call (given a fixed clock)
- Never raises on incomplete snapshot data

============================================================
USAGE
============================================================
    from project_risk import RiskScoringEngine, ProjectSnapshot

    engine = RiskScoringEngine()
    result = engine.score(ProjectSnapshot(id="p-1", ...))

    print(f"{result.score}/100 {result.status.value}: {result.label}")

============================================================
"""

import logging
from dataclasses import replace
from typing import Dict, List, Optional

from .assessors import (
    ActivityAssessor,
    BaseFactorAssessor,
    BudgetAssessor,
    CORExposureAssessor,
    SafetyAssessor,
    ScheduleAssessor,
    status_from_score,
)
from .clock import Clock, get_default_clock
from .config import (
    RiskEngineConfig,
    ThresholdOverrides,
    WeightOverrides,
    merge_thresholds,
    merge_weights,
)
from .formatting import round_half_up
from .types import (
    FactorResult,
    ProjectSnapshot,
    RiskFactor,
    RiskScoreResult,
    RiskStatus,
)


logger = logging.getLogger(__name__)


SUMMARY_LABELS: Dict[RiskStatus, str] = {
    RiskStatus.HEALTHY: "Project is on track",
    RiskStatus.WARNING: "Some factors need attention",
    RiskStatus.CRITICAL: "Immediate review recommended",
}


class RiskScoringEngine:
    """
    Composite risk scorer for a single project.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Hold configuration and the injected clock
    2. Merge per-call threshold and weight overrides
    3. Run all five factor assessors
    4. Weight, round and bucket the composite score

    ============================================================
    """

    def __init__(
        self,
        config: Optional[RiskEngineConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Thresholds, weights and alerting settings.
                    Uses defaults if not provided.
            clock: Time source for activity scoring.
                   Uses real UTC time if not provided.
        """
        self.config = config or RiskEngineConfig()
        self.clock = clock or get_default_clock()

        self._assessors: List[BaseFactorAssessor] = [
            BudgetAssessor(),
            ScheduleAssessor(),
            CORExposureAssessor(),
            ActivityAssessor(self.clock),
            SafetyAssessor(),
        ]

    def score(
        self,
        snapshot: ProjectSnapshot,
        threshold_overrides: Optional[ThresholdOverrides] = None,
        weight_overrides: Optional[WeightOverrides] = None,
    ) -> RiskScoreResult:
        """
        Score one project snapshot.

        Args:
            snapshot: Project metrics from the aggregator
            threshold_overrides: Per-category threshold replacements
            weight_overrides: Per-category weight replacements;
                the merged weights are re-normalized to sum to 1.0

        Returns:
            RiskScoreResult with every factor and its weight

        Raises:
            ThresholdConfigError, WeightConfigError: Invalid overrides
        """
        thresholds = merge_thresholds(threshold_overrides, base=self.config.thresholds)
        weights = merge_weights(weight_overrides, base=self.config.weights)

        factors: Dict[RiskFactor, FactorResult] = {}
        for assessor in self._assessors:
            result = assessor.assess(snapshot, thresholds)
            factors[assessor.factor] = replace(result, weight=weights.get(assessor.factor))

        composite = round_half_up(sum(f.weighted_score for f in factors.values()))
        status = status_from_score(composite)

        logger.debug(
            f"Scored project {snapshot.id}: {composite}/100 ({status.value}) "
            + ", ".join(f"{f.value}={r.score:.1f}" for f, r in factors.items())
        )

        return RiskScoreResult(
            score=composite,
            status=status,
            label=SUMMARY_LABELS[status],
            factors=factors,
        )


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


def calculate_risk_score(
    snapshot: ProjectSnapshot,
    threshold_overrides: Optional[ThresholdOverrides] = None,
    weight_overrides: Optional[WeightOverrides] = None,
    clock: Optional[Clock] = None,
) -> RiskScoreResult:
    """
    Score a project in one call with default configuration.

    Overrides are merged onto the default thresholds and weights.
    """
    engine = RiskScoringEngine(clock=clock)
    return engine.score(snapshot, threshold_overrides, weight_overrides)


def format_risk_summary(result: RiskScoreResult, title: str = "RISK ASSESSMENT SUMMARY") -> str:
    """
    Format a human-readable risk summary.

    Useful for logging and the command line.
    """
    lines = [
        "=" * 50,
        title,
        "=" * 50,
        f"Score: {result.score}/100",
        f"Status: {result.status.name}",
        f"Summary: {result.label}",
        "",
        "Factor Breakdown:",
    ]
    for factor, factor_result in result.factors.items():
        weight = factor_result.weight or 0.0
        lines.append(
            f"  {factor.value:<13} {factor_result.score:6.1f} x {weight:.2f}  "
            f"{factor_result.status.name:<8} {factor_result.label}"
        )
    lines.append("=" * 50)

    return "\n".join(lines)
