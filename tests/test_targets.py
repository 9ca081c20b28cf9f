"""Tests for FIRE targets and property cash."""

import pytest
from fire_planner.params import PropertyEvent
from fire_planner.targets import (
    fire_number,
    inflation_adjusted_fire_number,
    inflation_adjusted_fire_number_at_month,
    property_cash_needed,
)


class TestFireNumber:
    def test_four_percent_rule(self):
        assert fire_number(60_000, 0.04) == 1_500_000

    def test_lower_withdrawal_rates(self):
        assert fire_number(60_000, 0.035) == pytest.approx(1_714_285.71, abs=0.01)
        assert fire_number(60_000, 0.03) == pytest.approx(2_000_000)


class TestInflationAdjusted:
    def test_ten_years_at_two_percent(self):
        """60000 × 1.02^10 / 0.04 ≈ 1,828,492."""
        adjusted = inflation_adjusted_fire_number(60_000, 0.04, 0.02, 10)
        assert adjusted == pytest.approx(1_828_492, abs=1)
        assert adjusted > fire_number(60_000, 0.04)

    def test_zero_inflation_equals_basic(self):
        assert inflation_adjusted_fire_number(60_000, 0.04, 0, 10) == fire_number(60_000, 0.04)

    def test_month_curve_matches_years(self):
        by_month = inflation_adjusted_fire_number_at_month(60_000, 0.04, 0.02, 120)
        assert by_month == pytest.approx(inflation_adjusted_fire_number(60_000, 0.04, 0.02, 10))

    def test_month_curve_is_continuous(self):
        m6 = inflation_adjusted_fire_number_at_month(60_000, 0.04, 0.02, 6)
        assert fire_number(60_000, 0.04) < m6 < inflation_adjusted_fire_number(60_000, 0.04, 0.02, 1)


class TestPropertyCashNeeded:
    def test_down_payment_and_fees(self):
        assert property_cash_needed(PropertyEvent(price=500_000, down_payment_percent=20, fees_percent=12)) == 160_000

    def test_with_additional_costs(self):
        prop = PropertyEvent(price=500_000, down_payment_percent=20, fees_percent=12, additional_costs=30_000)
        assert property_cash_needed(prop) == 190_000

    def test_finca(self):
        assert property_cash_needed(PropertyEvent(price=500_000, down_payment_percent=30, fees_percent=12)) == 210_000
