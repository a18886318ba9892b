"""
Project Risk Engine - Package.

============================================================
PURPOSE
============================================================
Deterministic, multi-factor risk scoring for construction
projects. Converts per-project operational metrics into a
composite health score, prioritized alerts, and end-of-job
projections, then rolls them up across a portfolio.

============================================================
WHAT IT IS
============================================================
- Pure, synchronous computation over ProjectSnapshots
- Threshold-based linear scoring, 0 (healthy) to 100 (critical)
- Configurable thresholds with named presets

============================================================
WHAT IT IS NOT
============================================================
- NOT a data fetcher: snapshots come from the aggregator
- NOT a renderer or notifier: alerts name an action target,
  the dashboard decides what to do with it
- NOT a settings store: thresholds are loaded and saved
  through an injected ThresholdStore

============================================================
FIVE RISK FACTORS
============================================================
1. BUDGET (30%): costs vs earned revenue
2. SCHEDULE (25%): progress shortfall vs plan
3. COR_EXPOSURE (20%): pending change orders vs contract
4. ACTIVITY (15%): days since last daily report
5. SAFETY (10%): injuries in the last 30 days

============================================================
USAGE
============================================================
    from project_risk import (
        FixedClock,
        PortfolioAggregator,
        ProjectSnapshot,
        calculate_risk_score,
        generate_smart_alerts,
    )

    snapshot = ProjectSnapshot(
        id="p-100",
        name="Main St Retail",
        total_costs=50_000,
        earned_revenue=100_000,
        actual_progress=60,
        expected_progress=55,
        contract_value=150_000,
    )

    result = calculate_risk_score(snapshot)
    alerts = generate_smart_alerts(result, snapshot)

    report = PortfolioAggregator().analyze([snapshot])
    print(report.risk.critical_count, report.metrics.weighted_completion)

============================================================
"""

# Types
from .types import (
    # Enums
    RiskFactor,
    RiskStatus,
    AlertType,
    ActionTarget,
    ThresholdPreset,

    # Input types
    ProjectSnapshot,

    # Output types
    FactorResult,
    RiskScoreResult,
    Alert,
    ProjectionResult,
    ThresholdValidation,

    # Exceptions
    RiskScoringError,
    ThresholdConfigError,
    WeightConfigError,
)

# Clock
from .clock import (
    Clock,
    SystemClock,
    FixedClock,
)

# Configuration
from .config import (
    FactorThresholds,
    ThresholdSet,
    FactorWeights,
    AlertingConfig,
    RiskEngineConfig,
    DEFAULT_THRESHOLDS,
    DEFAULT_WEIGHTS,
    PRESETS,
    get_preset,
    validate_thresholds,
    detect_preset,
    merge_thresholds,
    merge_weights,
    get_default_config,
    get_conservative_config,
    get_aggressive_config,
)

# Factor scorers
from .assessors import (
    score_of,
    status_from_score,
    calculate_budget_factor,
    calculate_schedule_factor,
    calculate_cor_exposure_factor,
    calculate_activity_factor,
    calculate_safety_factor,
    BaseFactorAssessor,
    BudgetAssessor,
    ScheduleAssessor,
    CORExposureAssessor,
    ActivityAssessor,
    SafetyAssessor,
)

# Engine
from .engine import (
    RiskScoringEngine,
    calculate_risk_score,
    format_risk_summary,
)

# Alerting
from .alerting import (
    generate_smart_alerts,
    sort_alerts,
)

# Projections
from .projections import calculate_projections

# Portfolio
from .portfolio import (
    ProjectRiskSummary,
    PortfolioRiskSummary,
    PortfolioMetrics,
    ProjectHealthCounts,
    ScheduleMetrics,
    PortfolioReport,
    PortfolioAggregator,
    calculate_portfolio_metrics,
    calculate_project_health,
    calculate_schedule_metrics,
    analyze_portfolio,
)

# Ingress schemas
from .schemas import (
    ProjectSnapshotSchema,
    ThresholdSetSchema,
    parse_snapshot,
    parse_snapshots,
    parse_threshold_set,
)

# Persistence
from .store import (
    ThresholdStore,
    InMemoryThresholdStore,
    JsonFileThresholdStore,
    SqlThresholdStore,
)


__all__ = [
    # Enums
    "RiskFactor",
    "RiskStatus",
    "AlertType",
    "ActionTarget",
    "ThresholdPreset",

    # Input types
    "ProjectSnapshot",

    # Output types
    "FactorResult",
    "RiskScoreResult",
    "Alert",
    "ProjectionResult",
    "ThresholdValidation",

    # Exceptions
    "RiskScoringError",
    "ThresholdConfigError",
    "WeightConfigError",

    # Clock
    "Clock",
    "SystemClock",
    "FixedClock",

    # Configuration
    "FactorThresholds",
    "ThresholdSet",
    "FactorWeights",
    "AlertingConfig",
    "RiskEngineConfig",
    "DEFAULT_THRESHOLDS",
    "DEFAULT_WEIGHTS",
    "PRESETS",
    "get_preset",
    "validate_thresholds",
    "detect_preset",
    "merge_thresholds",
    "merge_weights",
    "get_default_config",
    "get_conservative_config",
    "get_aggressive_config",

    # Factor scorers
    "score_of",
    "status_from_score",
    "calculate_budget_factor",
    "calculate_schedule_factor",
    "calculate_cor_exposure_factor",
    "calculate_activity_factor",
    "calculate_safety_factor",
    "BaseFactorAssessor",
    "BudgetAssessor",
    "ScheduleAssessor",
    "CORExposureAssessor",
    "ActivityAssessor",
    "SafetyAssessor",

    # Engine
    "RiskScoringEngine",
    "calculate_risk_score",
    "format_risk_summary",

    # Alerting
    "generate_smart_alerts",
    "sort_alerts",

    # Projections
    "calculate_projections",

    # Portfolio
    "ProjectRiskSummary",
    "PortfolioRiskSummary",
    "PortfolioMetrics",
    "ProjectHealthCounts",
    "ScheduleMetrics",
    "PortfolioReport",
    "PortfolioAggregator",
    "calculate_portfolio_metrics",
    "calculate_project_health",
    "calculate_schedule_metrics",
    "analyze_portfolio",

    # Ingress schemas
    "ProjectSnapshotSchema",
    "ThresholdSetSchema",
    "parse_snapshot",
    "parse_snapshots",
    "parse_threshold_set",

    # Persistence
    "ThresholdStore",
    "InMemoryThresholdStore",
    "JsonFileThresholdStore",
    "SqlThresholdStore",
]


__version__ = "1.0.0"
