"""
Project Risk Engine - Alert Generation.

============================================================
PURPOSE
============================================================
Turns a scored project into a prioritized list of actionable
alerts for the dashboard.

============================================================
RULE TABLE (evaluated in this order)
============================================================
1. budget critical            -> critical "Budget Alert"
2. activity critical          -> critical "Activity Alert"
3. safety critical            -> critical "Safety Alert"
4. budget warning             -> warning  "Budget Watch"
5. schedule warning/critical  -> matching "Schedule Alert"
6. COR exposure warn/critical -> matching "COR Exposure"
7. unbilled amount > 0        -> warning/info "Unbilled Work"
8. activity warning           -> info     "Activity Notice"

A project may receive several alerts. The list is then
stable-sorted critical -> warning -> info, so ties keep
rule-table order.

============================================================
ALERT PHILOSOPHY
============================================================
- Every alert names an action and an action target
- Delivery (banners, push, email) is the caller's concern

============================================================
"""

import logging
from typing import Iterable, List, Optional

from .config import AlertingConfig
from .formatting import format_cents
from .types import (
    ActionTarget,
    Alert,
    AlertType,
    ProjectSnapshot,
    RiskFactor,
    RiskScoreResult,
    RiskStatus,
)


logger = logging.getLogger(__name__)


_STATUS_ALERT_TYPES = {
    RiskStatus.CRITICAL: AlertType.CRITICAL,
    RiskStatus.WARNING: AlertType.WARNING,
}


def sort_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """Stable sort by priority: critical, then warning, then info."""
    return sorted(alerts, key=lambda alert: alert.type.priority)


def generate_smart_alerts(
    risk_result: RiskScoreResult,
    snapshot: ProjectSnapshot,
    config: Optional[AlertingConfig] = None,
) -> List[Alert]:
    """
    Build alerts for one project from its risk score.

    Args:
        risk_result: Output of RiskScoringEngine.score
        snapshot: The snapshot that was scored (billing context)
        config: Alerting settings (unbilled warning threshold)

    Returns:
        Alerts sorted by priority
    """
    config = config or AlertingConfig()
    factors = risk_result.factors

    budget = factors[RiskFactor.BUDGET]
    schedule = factors[RiskFactor.SCHEDULE]
    cor_exposure = factors[RiskFactor.COR_EXPOSURE]
    activity = factors[RiskFactor.ACTIVITY]
    safety = factors[RiskFactor.SAFETY]

    alerts: List[Alert] = []

    def add(alert_type: AlertType, title: str, description: str, action: str, target: ActionTarget) -> None:
        alerts.append(Alert(
            type=alert_type,
            title=title,
            description=description,
            action=action,
            action_target=target,
            project_id=snapshot.id,
            project_name=snapshot.name or None,
        ))

    # Critical
    if budget.status == RiskStatus.CRITICAL:
        add(AlertType.CRITICAL, "Budget Alert", budget.label,
            "Review costs immediately", ActionTarget.FINANCIALS)

    if activity.status == RiskStatus.CRITICAL:
        add(AlertType.CRITICAL, "Activity Alert", activity.label,
            "Check project status", ActionTarget.OVERVIEW)

    if safety.status == RiskStatus.CRITICAL:
        add(AlertType.CRITICAL, "Safety Alert", safety.label,
            "Review safety reports", ActionTarget.REPORTS)

    # Warning
    if budget.status == RiskStatus.WARNING:
        add(AlertType.WARNING, "Budget Watch", budget.label,
            "Monitor costs", ActionTarget.FINANCIALS)

    if schedule.status in _STATUS_ALERT_TYPES:
        add(_STATUS_ALERT_TYPES[schedule.status], "Schedule Alert", schedule.label,
            "Review progress", ActionTarget.OVERVIEW)

    if cor_exposure.status in _STATUS_ALERT_TYPES:
        add(_STATUS_ALERT_TYPES[cor_exposure.status], "COR Exposure", cor_exposure.label,
            "Review pending CORs", ActionTarget.CORS)

    # Unbilled work, independent of scoring
    if snapshot.unbilled_amount > 0:
        alert_type = (
            AlertType.WARNING
            if snapshot.unbilled_amount > config.unbilled_warning_cents
            else AlertType.INFO
        )
        add(
            alert_type,
            "Unbilled Work",
            f"{format_cents(snapshot.unbilled_amount)} in approved work not yet invoiced "
            f"({snapshot.unbilled_item_count} items)",
            "Create invoice",
            ActionTarget.BILLING,
        )

    # Info
    if activity.status == RiskStatus.WARNING:
        add(AlertType.INFO, "Activity Notice", activity.label,
            "File daily report", ActionTarget.REPORTS)

    if alerts:
        logger.debug(f"Project {snapshot.id}: {len(alerts)} alerts generated")

    return sort_alerts(alerts)
