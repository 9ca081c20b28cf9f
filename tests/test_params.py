"""Tests for PlanConfig, PropertyEvent and calendar helpers."""

import pytest
from fire_planner.params import (
    PlanConfig,
    PropertyEvent,
    add_months,
    age_at_month,
    parse_start_date,
    validate_config,
    validate_property,
)


class TestCalendar:
    def test_parse_start_date(self):
        assert parse_start_date("2026-03") == (2026, 3)

    @pytest.mark.parametrize("bad", ["2026-13", "2026/01", "26-01", "2026-1"])
    def test_parse_start_date_rejects_malformed(self, bad):
        with pytest.raises(ValueError, match="Invalid start date"):
            parse_start_date(bad)

    def test_add_months(self):
        assert add_months("2026-01", 1) == "2026-02"
        assert add_months("2026-12", 1) == "2027-01"
        assert add_months("2026-01", 12) == "2027-01"
        assert add_months("2026-05", 0) == "2026-05"


class TestAgeAtMonth:
    """Start 2026-01, birthday in May: first anniversary in month 4 (2026-05)."""

    def test_before_birthday(self):
        assert age_at_month(35, "2026-01", 5, 3) == 35

    def test_birthday_month_counts(self):
        assert age_at_month(35, "2026-01", 5, 4) == 36

    def test_second_birthday(self):
        assert age_at_month(35, "2026-01", 5, 15) == 36
        assert age_at_month(35, "2026-01", 5, 16) == 37

    def test_birthday_in_start_month(self):
        """Birthday in the start month: next anniversary is 12 months later."""
        assert age_at_month(35, "2026-01", 1, 11) == 35
        assert age_at_month(35, "2026-01", 1, 12) == 36


class TestPropertyEvent:
    def test_month_offset_from_year(self):
        assert PropertyEvent(price=1, purchase_year=3).month_offset == 36

    def test_explicit_month_overrides_year(self):
        assert PropertyEvent(price=1, purchase_year=3, purchase_month=5).month_offset == 5

    def test_loan_amount(self):
        assert PropertyEvent(price=500_000, down_payment_percent=20).loan_amount == pytest.approx(400_000)


class TestValidateConfig:
    def test_defaults_are_valid(self):
        validate_config(PlanConfig())

    def test_target_age_must_exceed_current(self):
        with pytest.raises(ValueError, match="Target age 35 must be greater than current age 35"):
            validate_config(PlanConfig(current_age=35, target_age=35))

    def test_negative_balance(self):
        with pytest.raises(ValueError, match="current_portfolio must be non-negative"):
            validate_config(PlanConfig(current_portfolio=-1))

    def test_non_positive_withdrawal_rate(self):
        with pytest.raises(ValueError, match="withdrawal_rate must be positive"):
            validate_config(PlanConfig(withdrawal_rate=0))

    def test_negative_return_rate(self):
        with pytest.raises(ValueError, match="Return rates must be non-negative"):
            validate_config(PlanConfig(return_rates=(0.05, -0.01)))

    def test_birth_month_range(self):
        with pytest.raises(ValueError, match="birth_month must be 1-12"):
            validate_config(PlanConfig(birth_month=13))

    def test_rent_start_month(self):
        with pytest.raises(ValueError, match="rent_start_month must be >= 1"):
            validate_config(PlanConfig(rent_start_month=0))

    def test_horizon(self):
        config = PlanConfig(current_age=35, target_age=45)
        assert config.horizon_years == 10
        assert config.horizon_months == 120


class TestValidateProperty:
    def test_purchase_outside_horizon(self):
        prop = PropertyEvent(price=100_000, purchase_year=11, label="Flat")
        with pytest.raises(ValueError, match="Flat: purchase month 132 is outside the simulated range 1-120"):
            validate_property(prop, 120)

    def test_percent_out_of_range(self):
        with pytest.raises(ValueError, match="down_payment_percent must be within 0-100"):
            validate_property(PropertyEvent(price=100_000, down_payment_percent=120), 120)

    def test_term_required_for_loan(self):
        with pytest.raises(ValueError, match="mortgage term must be positive"):
            validate_property(PropertyEvent(price=100_000, mortgage_term=0), 120)

    def test_cash_purchase_needs_no_term(self):
        validate_property(PropertyEvent(price=100_000, down_payment_percent=100, mortgage_term=0), 120)
