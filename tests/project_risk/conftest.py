"""
Shared fixtures for Project Risk Engine tests.
"""

from datetime import datetime, timedelta, timezone

import pytest

from project_risk import FixedClock, ProjectSnapshot


NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest.fixture
def healthy_snapshot() -> ProjectSnapshot:
    """On budget, slightly ahead of plan, reported today."""
    return ProjectSnapshot(
        id="p-healthy",
        name="Main St Retail",
        total_costs=50_000,
        earned_revenue=100_000,
        actual_progress=60,
        expected_progress=55,
        pending_cor_value=2_000,
        contract_value=150_000,
        last_report_date=NOW,
        recent_injury_count=0,
    )


@pytest.fixture
def troubled_snapshot() -> ProjectSnapshot:
    """Over budget, far behind, no reports, two injuries."""
    return ProjectSnapshot(
        id="p-troubled",
        name="Harbor Warehouse",
        total_costs=95_000,
        earned_revenue=100_000,
        actual_progress=40,
        expected_progress=70,
        pending_cor_value=40_000,
        contract_value=150_000,
        last_report_date=None,
        recent_injury_count=2,
    )


@pytest.fixture
def mixed_snapshot() -> ProjectSnapshot:
    """
    One alert of every priority:
    budget warning, schedule critical, small unbilled amount,
    activity warning.
    """
    return ProjectSnapshot(
        id="p-mixed",
        name="Elm Ave Clinic",
        total_costs=70_000,
        earned_revenue=100_000,
        actual_progress=50,
        expected_progress=80,
        contract_value=0,
        last_report_date=NOW - timedelta(days=3),
        unbilled_amount=100_000,
        unbilled_cor_count=1,
        unbilled_ticket_count=1,
    )
