"""
Project Risk Engine - Configuration.

============================================================
PURPOSE
============================================================
Threshold registry, factor weights and engine settings.

- Default thresholds and weights
- Named presets (conservative, balanced, aggressive)
- Ordering validation and preset detection
- Category-level threshold merge
- Weight merge with validation and re-normalization

============================================================
THRESHOLD PHILOSOPHY
============================================================
Three boundaries per factor, in the factor's native unit:
- HEALTHY: at or below this the factor scores 0
- WARNING: informs labels only, not the scoring curve
- CRITICAL: at or above this the factor scores 100

Between HEALTHY and CRITICAL the score is linear.

============================================================
UNITS
============================================================
- budget: cost / earned revenue ratio
- schedule: (expected - actual) / expected ratio
- cor_exposure: pending COR value / contract value ratio
- activity: whole days since last daily report
- safety: injury reports in the last 30 days

============================================================
"""

import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import load_dotenv

from .types import (
    RiskFactor,
    ThresholdConfigError,
    ThresholdPreset,
    ThresholdValidation,
    WeightConfigError,
)


logger = logging.getLogger(__name__)


# ============================================================
# THRESHOLDS
# ============================================================


@dataclass(frozen=True)
class FactorThresholds:
    """Scoring boundaries for one factor."""

    healthy: float
    warning: float
    critical: float

    @property
    def is_ordered(self) -> bool:
        return self.healthy <= self.warning <= self.critical

    @classmethod
    def from_value(cls, value: Union["FactorThresholds", Mapping[str, Any]]) -> "FactorThresholds":
        """Build from an instance or a {healthy, warning, critical} mapping."""
        if isinstance(value, FactorThresholds):
            return value
        missing = [k for k in ("healthy", "warning", "critical") if k not in value]
        if missing:
            raise ThresholdConfigError(f"Missing threshold boundaries: {', '.join(missing)}")
        return cls(
            healthy=value["healthy"],
            warning=value["warning"],
            critical=value["critical"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "healthy": self.healthy,
            "warning": self.warning,
            "critical": self.critical,
        }


@dataclass(frozen=True)
class ThresholdSet:
    """
    Complete set of thresholds, one entry per factor.

    Created once (defaults, a preset, or customized), passed by
    reference to every computation and never mutated.
    """

    budget: FactorThresholds = field(default_factory=lambda: FactorThresholds(0.60, 0.75, 0.85))
    schedule: FactorThresholds = field(default_factory=lambda: FactorThresholds(0.05, 0.15, 0.25))
    cor_exposure: FactorThresholds = field(default_factory=lambda: FactorThresholds(0.05, 0.15, 0.25))
    activity: FactorThresholds = field(default_factory=lambda: FactorThresholds(1, 3, 5))
    safety: FactorThresholds = field(default_factory=lambda: FactorThresholds(0, 1, 2))

    def get(self, factor: RiskFactor) -> FactorThresholds:
        return getattr(self, RiskFactor.parse(factor).value)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThresholdSet":
        """Build a complete set; missing categories take defaults."""
        return merge_thresholds(data, base=DEFAULT_THRESHOLDS)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name).to_dict() for f in fields(self)}


DEFAULT_THRESHOLDS = ThresholdSet()


PRESETS: Dict[ThresholdPreset, ThresholdSet] = {
    # Flag issues early. High-stakes or regulated projects.
    ThresholdPreset.CONSERVATIVE: ThresholdSet(
        budget=FactorThresholds(0.50, 0.65, 0.80),
        schedule=FactorThresholds(0.05, 0.10, 0.20),
        cor_exposure=FactorThresholds(0.03, 0.08, 0.15),
        activity=FactorThresholds(1, 2, 5),
        safety=FactorThresholds(0, 1, 2),
    ),
    # Standard thresholds for typical construction projects.
    ThresholdPreset.BALANCED: DEFAULT_THRESHOLDS,
    # Higher tolerance. Only flag significant issues.
    ThresholdPreset.AGGRESSIVE: ThresholdSet(
        budget=FactorThresholds(0.70, 0.85, 0.95),
        schedule=FactorThresholds(0.15, 0.25, 0.40),
        cor_exposure=FactorThresholds(0.10, 0.20, 0.30),
        activity=FactorThresholds(3, 5, 10),
        safety=FactorThresholds(1, 2, 4),
    ),
}


def get_preset(name: Union[ThresholdPreset, str]) -> ThresholdSet:
    """Look up a preset by enum or name."""
    return PRESETS[ThresholdPreset(name)]


def validate_thresholds(thresholds: ThresholdSet) -> ThresholdValidation:
    """
    Check boundary ordering for every factor.

    Reports the first factor (in evaluation order) where
    ``healthy > warning`` or ``warning > critical``. Scorers do
    not re-check this, so it must run wherever thresholds enter
    the system.
    """
    for factor in RiskFactor.all_factors():
        bounds = thresholds.get(factor)
        if bounds.healthy > bounds.warning:
            return ThresholdValidation(
                ok=False,
                category=factor,
                message=f"{factor.value}: healthy ({bounds.healthy}) exceeds warning ({bounds.warning})",
            )
        if bounds.warning > bounds.critical:
            return ThresholdValidation(
                ok=False,
                category=factor,
                message=f"{factor.value}: warning ({bounds.warning}) exceeds critical ({bounds.critical})",
            )
    return ThresholdValidation(ok=True)


def detect_preset(thresholds: ThresholdSet) -> Optional[ThresholdPreset]:
    """
    Return the preset that exactly matches every factor, or
    None for a custom set.
    """
    for name, preset in PRESETS.items():
        if all(preset.get(f) == thresholds.get(f) for f in RiskFactor.all_factors()):
            return name
    return None


ThresholdOverrides = Union[ThresholdSet, Mapping[Any, Any]]


def merge_thresholds(
    overrides: Optional[ThresholdOverrides] = None,
    base: ThresholdSet = DEFAULT_THRESHOLDS,
) -> ThresholdSet:
    """
    Merge overrides onto a base set, one whole category at a time.

    A category override replaces all three boundaries of that
    category; boundaries are never merged individually.

    Raises:
        ThresholdConfigError: Unknown category or incomplete boundaries
    """
    if overrides is None:
        return base
    if isinstance(overrides, ThresholdSet):
        return overrides

    changes: Dict[str, FactorThresholds] = {}
    for key, value in overrides.items():
        try:
            factor = RiskFactor.parse(key)
        except ValueError:
            raise ThresholdConfigError(f"Unknown threshold category: {key}") from None
        try:
            changes[factor.value] = FactorThresholds.from_value(value)
        except ThresholdConfigError as e:
            raise ThresholdConfigError(e.message, category=factor) from None

    return replace(base, **changes)


# ============================================================
# WEIGHTS
# ============================================================


WEIGHT_SUM_TOLERANCE = 1e-9


@dataclass(frozen=True)
class FactorWeights:
    """Contribution of each factor to the composite score. Sums to 1.0."""

    budget: float = 0.30
    schedule: float = 0.25
    cor_exposure: float = 0.20
    activity: float = 0.15
    safety: float = 0.10

    def get(self, factor: RiskFactor) -> float:
        return getattr(self, RiskFactor.parse(factor).value)

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


DEFAULT_WEIGHTS = FactorWeights()


WeightOverrides = Union[FactorWeights, Mapping[Any, float]]


def merge_weights(
    overrides: Optional[WeightOverrides] = None,
    base: FactorWeights = DEFAULT_WEIGHTS,
) -> FactorWeights:
    """
    Merge weight overrides onto a base weighting.

    Partial overrides would otherwise skew the composite score,
    so the merged weights are re-normalized to sum to 1.0.

    Raises:
        WeightConfigError: Unknown category, negative weight, or
            a merged total of zero
    """
    if overrides is None:
        merged = base
    elif isinstance(overrides, FactorWeights):
        merged = overrides
    else:
        changes: Dict[str, float] = {}
        for key, value in overrides.items():
            try:
                factor = RiskFactor.parse(key)
            except ValueError:
                raise WeightConfigError(f"Unknown weight category: {key}") from None
            changes[factor.value] = float(value)
        merged = replace(base, **changes)

    for factor in RiskFactor.all_factors():
        if merged.get(factor) < 0:
            raise WeightConfigError(
                f"Negative weight for {factor.value}: {merged.get(factor)}",
                category=factor,
            )

    total = merged.total
    if total <= 0:
        raise WeightConfigError("Factor weights sum to zero")

    if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
        logger.warning(f"Factor weights sum to {total:.4f}, re-normalizing to 1.0")
        merged = FactorWeights(**{k: v / total for k, v in merged.to_dict().items()})

    return merged


# ============================================================
# ALERTING CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class AlertingConfig:
    """
    Settings for alert generation.

    ``unbilled_warning_cents`` is in minor currency units:
    500000 cents is $5,000. Unbilled work above it raises a
    warning; anything smaller is informational.
    """

    unbilled_warning_cents: int = 500_000

    def to_dict(self) -> Dict[str, Any]:
        return {"unbilled_warning_cents": self.unbilled_warning_cents}


# ============================================================
# ENGINE CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class RiskEngineConfig:
    """
    Master configuration for the Project Risk Engine.

    Aggregates thresholds, weights and alerting settings.
    """

    thresholds: ThresholdSet = DEFAULT_THRESHOLDS
    weights: FactorWeights = DEFAULT_WEIGHTS
    alerting: AlertingConfig = field(default_factory=AlertingConfig)

    engine_version: str = "1.0.0"

    @classmethod
    def from_env(cls) -> "RiskEngineConfig":
        """
        Build configuration from environment variables.

        RISK_THRESHOLD_PRESET: conservative | balanced | aggressive
        RISK_UNBILLED_WARNING_CENTS: unbilled warning threshold (cents)
        """
        load_dotenv()

        thresholds = DEFAULT_THRESHOLDS
        preset = os.getenv("RISK_THRESHOLD_PRESET")
        if preset:
            try:
                thresholds = get_preset(preset.strip().lower())
            except ValueError:
                raise ThresholdConfigError(f"Unknown threshold preset: {preset}") from None

        alerting = AlertingConfig()
        unbilled = os.getenv("RISK_UNBILLED_WARNING_CENTS")
        if unbilled:
            alerting = AlertingConfig(unbilled_warning_cents=int(unbilled))

        config = cls(thresholds=thresholds, alerting=alerting)
        logger.info(
            f"Risk engine config loaded: preset={detect_preset(thresholds)}, "
            f"unbilled_warning_cents={alerting.unbilled_warning_cents}"
        )
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "thresholds": self.thresholds.to_dict(),
            "weights": self.weights.to_dict(),
            "alerting": self.alerting.to_dict(),
            "engine_version": self.engine_version,
        }


def get_default_config() -> RiskEngineConfig:
    """Balanced thresholds and default weights."""
    return RiskEngineConfig()


def get_conservative_config() -> RiskEngineConfig:
    """
    Lower thresholds = earlier warnings.
    """
    return RiskEngineConfig(thresholds=PRESETS[ThresholdPreset.CONSERVATIVE])


def get_aggressive_config() -> RiskEngineConfig:
    """
    Higher thresholds = later warnings.
    Use only where project teams report reliably.
    """
    return RiskEngineConfig(thresholds=PRESETS[ThresholdPreset.AGGRESSIVE])
