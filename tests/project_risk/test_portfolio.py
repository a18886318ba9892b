"""
Tests for portfolio aggregation.

============================================================
PURPOSE
============================================================
TEST PRINCIPLES:
- Every project appears once, in input order
- Alert feed is priority-sorted across projects
- Health buckets may overlap
- Thread pool gives the same report as a serial run

============================================================
"""

from datetime import datetime, timezone

import pytest

from project_risk import (
    AlertType,
    PortfolioAggregator,
    ProjectSnapshot,
    RiskStatus,
    analyze_portfolio,
    calculate_portfolio_metrics,
    calculate_project_health,
    calculate_schedule_metrics,
)


@pytest.fixture
def portfolio(healthy_snapshot, troubled_snapshot, mixed_snapshot):
    return [healthy_snapshot, troubled_snapshot, mixed_snapshot]


# ============================================================
# TEST: Risk Roll-up
# ============================================================

class TestPortfolioRisk:

    def test_projects_in_input_order(self, clock, portfolio):
        summary = PortfolioAggregator(clock=clock).analyze_risk(portfolio)
        assert [p.project_id for p in summary.project_risks] == ["p-healthy", "p-troubled", "p-mixed"]
        assert [p.risk_status for p in summary.project_risks] == [
            RiskStatus.HEALTHY,
            RiskStatus.CRITICAL,
            RiskStatus.WARNING,
        ]

    def test_alert_counts(self, clock, portfolio):
        summary = PortfolioAggregator(clock=clock).analyze_risk(portfolio)
        assert summary.critical_count == 6
        assert summary.warning_count == 1
        assert summary.info_count == 2
        assert len(summary.all_alerts) == 9

    def test_feed_sorted_and_stamped(self, clock, portfolio):
        alerts = PortfolioAggregator(clock=clock).analyze_risk(portfolio).all_alerts

        priorities = [a.type.priority for a in alerts]
        assert priorities == sorted(priorities)

        criticals = [a for a in alerts if a.type == AlertType.CRITICAL]
        assert [a.project_name for a in criticals] == ["Harbor Warehouse"] * 5 + ["Elm Ave Clinic"]

    def test_projections_included(self, clock, healthy_snapshot):
        summary = PortfolioAggregator(clock=clock).analyze_risk([healthy_snapshot])
        projections = summary.project_risks[0].projections
        assert projections.estimated_completion_cost == 83_333

    def test_incomplete_project_does_not_break_batch(self, clock, troubled_snapshot):
        summary = PortfolioAggregator(clock=clock).analyze_risk(
            [ProjectSnapshot(id="blank"), troubled_snapshot]
        )
        blank = summary.project_risks[0]
        assert blank.risk_status == RiskStatus.HEALTHY
        assert [a.title for a in blank.alerts] == ["Activity Alert"]
        assert not blank.projections.has_projection

    def test_unrepresentable_completion_date_does_not_break_batch(self, clock, healthy_snapshot):
        crawling = ProjectSnapshot(
            id="p-crawl",
            actual_progress=0.05,
            total_costs=1_000,
            start_date=datetime(2015, 1, 1, tzinfo=timezone.utc),
        )
        report = PortfolioAggregator(clock=clock).analyze([healthy_snapshot, crawling])

        healthy, crawl = report.risk.project_risks
        assert healthy.projections.estimated_completion_cost == 83_333
        assert crawl.projections.has_projection
        assert crawl.projections.estimated_completion_date is None

    def test_empty_portfolio(self, clock):
        report = PortfolioAggregator(clock=clock).analyze([])
        assert report.risk.project_risks == []
        assert report.risk.critical_count == 0
        assert report.metrics.weighted_completion == 0

    def test_thread_pool_matches_serial(self, clock, portfolio):
        serial = PortfolioAggregator(clock=clock).analyze(portfolio)
        pooled = PortfolioAggregator(clock=clock, max_workers=4).analyze(portfolio)
        assert pooled == serial

    def test_to_dict(self, clock, portfolio):
        data = analyze_portfolio(portfolio, clock=clock).to_dict()
        assert data["risk"]["critical_count"] == 6
        assert data["risk"]["project_risks"][1]["factors"]["budget"]["status"] == "critical"
        assert data["risk"]["all_alerts"][0]["action_target"] == "financials"


# ============================================================
# TEST: Contract Metrics
# ============================================================

class TestPortfolioMetrics:

    def test_totals(self):
        metrics = calculate_portfolio_metrics([
            ProjectSnapshot(
                id="a",
                contract_value=120_000,
                original_contract_value=100_000,
                change_order_value=20_000,
                earned_revenue=60_000,
            ),
            ProjectSnapshot(
                id="b",
                contract_value=200_000,
                earned_revenue=50_000,
                pending_cor_value=5_000,
                pending_cor_count=2,
            ),
        ])

        assert metrics.total_original_contract == 300_000
        assert metrics.total_change_orders == 20_000
        assert metrics.total_portfolio_value == 320_000
        assert metrics.total_earned == 110_000
        assert metrics.total_remaining == 210_000
        assert metrics.weighted_completion == 34
        assert metrics.total_pending_cor_value == 5_000
        assert metrics.total_pending_cor_count == 2

    def test_change_orders_not_double_counted(self):
        """Without an original value, the revised contract already holds the change orders."""
        metrics = calculate_portfolio_metrics([
            ProjectSnapshot(id="a", contract_value=110_000, change_order_value=10_000),
        ])

        assert metrics.total_original_contract == 100_000
        assert metrics.total_change_orders == 10_000
        assert metrics.total_portfolio_value == 110_000

    def test_no_contract_value(self):
        metrics = calculate_portfolio_metrics([ProjectSnapshot(id="a", earned_revenue=10)])
        assert metrics.weighted_completion == 0


# ============================================================
# TEST: Health Buckets
# ============================================================

class TestProjectHealth:

    def test_buckets(self):
        health = calculate_project_health([
            # Billing ahead of progress but under the 90% line
            ProjectSnapshot(id="a", contract_value=100_000, actual_progress=85, earned_revenue=92_000),
            # Finished and over contract
            ProjectSnapshot(id="b", contract_value=100_000, actual_progress=100, earned_revenue=105_000),
            # Normal, with a change order
            ProjectSnapshot(
                id="c",
                contract_value=100_000,
                actual_progress=50,
                earned_revenue=40_000,
                change_order_value=10_000,
            ),
        ])

        assert health.complete == 1
        assert health.on_track == 2
        assert health.at_risk == 1
        assert health.over_budget == 1
        assert health.with_change_orders == 1

    def test_project_counted_in_overlapping_buckets(self):
        health = calculate_project_health([
            ProjectSnapshot(id="a", contract_value=100_000, actual_progress=85, earned_revenue=92_000),
        ])
        assert health.on_track == 1
        assert health.at_risk == 1


# ============================================================
# TEST: Schedule Metrics
# ============================================================

class TestScheduleMetrics:

    def test_counts(self):
        metrics = calculate_schedule_metrics([
            ProjectSnapshot(id="a", schedule_status="ahead", labor_status="over"),
            ProjectSnapshot(id="b", schedule_status="behind", labor_status="under"),
            ProjectSnapshot(id="c", schedule_status="on_track"),
            ProjectSnapshot(id="d", schedule_status="unknown"),
            ProjectSnapshot(id="e"),
        ])

        assert metrics.schedule_ahead == 1
        assert metrics.schedule_behind == 1
        assert metrics.schedule_on_track == 2
        assert metrics.labor_over == 1
        assert metrics.labor_under == 1
        assert metrics.labor_on_track == 0
        assert metrics.has_any_schedule_data
        assert metrics.has_any_labor_data

    def test_no_data(self):
        metrics = calculate_schedule_metrics([ProjectSnapshot(id="a")])
        assert not metrics.has_any_schedule_data
        assert not metrics.has_any_labor_data
