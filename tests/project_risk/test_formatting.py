"""
Tests for label number formatting.
"""

import pytest

from project_risk import RiskStatus, calculate_budget_factor
from project_risk.formatting import format_cents, format_compact, format_fixed, round_half_up


class TestRoundHalfUp:

    @pytest.mark.parametrize("value,expected", [(2.5, 3), (12.5, 13), (0.4, 0), (-2.5, -3)])
    def test_ties_round_away_from_zero(self, value, expected):
        assert round_half_up(value) == expected

    def test_places(self):
        assert round_half_up(1.25, 1) == 1.3

    def test_infinite_passes_through(self):
        assert round_half_up(float("inf")) == float("inf")

    def test_huge_value(self):
        assert round_half_up(1e30) == int(1e30)


class TestFormatFixed:

    def test_half_up(self):
        assert format_fixed(72.5) == "73"
        assert format_fixed(1.25, 1) == "1.3"

    def test_infinite(self):
        assert format_fixed(float("inf")) == "inf"

    def test_beyond_decimal_precision(self):
        assert format_fixed(1e30) == f"{1e30:.0f}"


class TestCompactMoney:

    @pytest.mark.parametrize("amount,expected", [
        (950, "950"),
        (45_000, "45K"),
        (1_250_000, "1.3M"),
    ])
    def test_compact(self, amount, expected):
        assert format_compact(amount) == expected

    def test_cents(self):
        assert format_cents(750_000) == "$8K"


class TestExtremeLabels:

    def test_huge_budget_ratio(self):
        result = calculate_budget_factor(1e30, 0.001)
        assert result.score == 100
        assert result.status == RiskStatus.CRITICAL
        assert result.label.endswith("% - review immediately")

    def test_infinite_costs(self):
        result = calculate_budget_factor(float("inf"), 100_000)
        assert result.score == 100
        assert result.label == "Costs at inf% - review immediately"
