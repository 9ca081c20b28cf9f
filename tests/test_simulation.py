"""Tests for the month-by-month scenario builder."""

import pytest
from fire_planner.compound import future_value
from fire_planner.mortgage import monthly_mortgage_payment
from fire_planner.params import PlanConfig, PropertyEvent
from fire_planner.simulation import (
    MORTGAGE,
    PARENT_LOAN,
    PHASE_INVESTING,
    PHASE_MORTGAGE_ONLY,
    PHASE_MORTGAGE_PARENT_LOAN,
    PHASE_PARENT_LOAN,
    PHASE_POST_MORTGAGE,
    PHASE_RENT_FREE,
    PHASE_RENTING,
    Obligation,
    build_all_scenarios,
    build_scenario,
    scenario_label,
)


def _config(**kwargs) -> PlanConfig:
    defaults = dict(
        current_age=35, target_age=36, current_portfolio=0, current_cash=0,
        monthly_investment=0, monthly_rent=0, return_rates=(0.07,),
    )
    defaults.update(kwargs)
    return PlanConfig(**defaults)


class TestObligation:
    def test_charged_after_origination_month(self):
        o = Obligation(MORTGAGE, 100, start_month=12, end_month=24)
        assert not o.is_charged(12)
        assert o.is_charged(13)
        assert o.is_charged(24)
        assert not o.is_charged(25)

    def test_held_from_origination(self):
        o = Obligation(PARENT_LOAN, 100, start_month=12, end_month=24)
        assert o.is_held(12)
        assert not o.is_held(11)
        assert not o.is_held(25)


class TestGrowthTiming:
    def test_growth_on_start_balance(self):
        s = build_scenario(_config(current_portfolio=1_200), [], 0.12)
        first = s.months[0]
        assert first.growth == pytest.approx(12)
        assert first.end_balance == pytest.approx(1_212)

    def test_contribution_grows_from_next_month(self):
        s = build_scenario(_config(monthly_investment=100), [], 0.12)
        assert s.months[0].end_balance == pytest.approx(100)
        assert s.months[1].end_balance == pytest.approx(201)

    def test_zero_rate_is_linear(self):
        s = build_scenario(_config(current_portfolio=1_000, monthly_investment=100), [], 0.0)
        assert s.final_balance == pytest.approx(2_200)

    def test_matches_future_value_without_properties(self):
        config = _config(target_age=45, current_portfolio=9_000, current_cash=7_500, monthly_investment=1_000)
        s = build_scenario(config, [], 0.07)
        assert s.final_balance == pytest.approx(future_value(16_500, 1_000, 0.07, 120), rel=1e-9)
        assert len(s.months) == 120
        assert len(s.years) == 10


class TestRent:
    def test_rent_reduces_investing(self):
        s = build_scenario(_config(monthly_investment=1_000, monthly_rent=400), [], 0.0)
        assert all(mp.monthly_investing == 600 for mp in s.months)
        assert s.final_balance == pytest.approx(7_200)

    def test_rent_free_period(self):
        s = build_scenario(_config(monthly_investment=1_000, monthly_rent=400, rent_start_month=4), [], 0.0)
        assert [mp.monthly_rent for mp in s.months[:4]] == [0, 0, 0, 400]
        assert [(p.label, p.from_month, p.to_month) for p in s.phases] == [
            (PHASE_RENT_FREE, 1, 3),
            (PHASE_RENTING, 4, 12),
        ]

    def test_no_rent_is_investing_phase(self):
        s = build_scenario(_config(monthly_investment=500), [], 0.05)
        assert [(p.label, p.from_month, p.to_month) for p in s.phases] == [(PHASE_INVESTING, 1, 12)]

    def test_investing_never_negative(self):
        s = build_scenario(_config(monthly_investment=300, monthly_rent=1_000), [], 0.0)
        assert all(mp.monthly_investing == 0 for mp in s.months)


class TestFlatPurchaseWithParentLoan:
    """Flat bought in month 12 with interior budget, funded partly by a parent loan."""

    def setup_method(self):
        self.config = PlanConfig(
            current_age=35, target_age=55,
            current_portfolio=9_381, current_cash=7_460,
            monthly_investment=4_000, monthly_rent=1_400,
            parent_loan_years=10, return_rates=(0.07,),
        )
        self.flat = PropertyEvent(
            price=500_000, down_payment_percent=20, fees_percent=12,
            additional_costs=30_000, purchase_year=1,
            mortgage_rate=3.2, mortgage_term=20, label="Flat",
        )
        self.scenario = build_scenario(self.config, [self.flat], 0.07)
        self.mortgage = monthly_mortgage_payment(400_000, 3.2, 20)

    def test_parent_loan_covers_shortfall(self):
        assert 130_000 < self.scenario.parent_loan_total < 150_000
        purchase = self.scenario.months[11]
        assert purchase.property_label == "Flat"
        assert purchase.parent_loan == pytest.approx(self.scenario.parent_loan_total)
        assert purchase.end_balance == pytest.approx(0, abs=1e-6)

    def test_no_rent_from_purchase_month(self):
        assert self.scenario.months[10].monthly_rent == 1_400
        assert self.scenario.months[11].monthly_rent == 0
        assert self.scenario.months[11].monthly_investing == 4_000

    def test_phases(self):
        assert [(p.label, p.from_month, p.to_month) for p in self.scenario.phases] == [
            (PHASE_RENTING, 1, 11),
            (PHASE_MORTGAGE_PARENT_LOAN, 12, 132),
            (PHASE_MORTGAGE_ONLY, 133, 240),
        ]

    def test_phase_amounts(self):
        _, both, mortgage_only = self.scenario.phases
        parent_payment = self.scenario.parent_loan_total / 120
        assert both.monthly_mortgage == pytest.approx(self.mortgage)
        assert both.monthly_parent_loan == pytest.approx(parent_payment)
        assert both.monthly_investing == pytest.approx(4_000 - self.mortgage - parent_payment)
        assert mortgage_only.monthly_parent_loan == 0
        assert mortgage_only.monthly_investing == pytest.approx(4_000 - self.mortgage)
        assert mortgage_only.monthly_investing > 1_500

    def test_feasible(self):
        assert self.scenario.feasible

    def test_obligations(self):
        kinds = sorted((o.kind, o.start_month, o.end_month) for o in self.scenario.obligations)
        assert kinds == [(MORTGAGE, 12, 252), (PARENT_LOAN, 12, 132)]

    def test_yearly_roll_up(self):
        year1 = self.scenario.years[0]
        assert year1.property_label == "Flat"
        assert year1.contributions == pytest.approx(11 * 2_600 + 4_000)
        assert year1.start_balance == pytest.approx(9_381 + 7_460)
        assert self.scenario.years[-1].end_balance == self.scenario.final_balance


class TestPostMortgage:
    def test_mortgage_ends_inside_horizon(self):
        config = _config(target_age=40, current_portfolio=200_000, monthly_investment=2_000)
        prop = PropertyEvent(price=100_000, down_payment_percent=50, fees_percent=0,
                             purchase_month=6, mortgage_term=2, label="Studio")
        s = build_scenario(config, [prop], 0.05)
        labels = [(p.label, p.from_month, p.to_month) for p in s.phases]
        assert labels == [
            (PHASE_INVESTING, 1, 5),
            (PHASE_MORTGAGE_ONLY, 6, 30),
            (PHASE_POST_MORTGAGE, 31, 60),
        ]
        assert s.months[29].monthly_mortgage > 0
        assert s.months[30].monthly_mortgage == 0
        assert s.parent_loan_total == 0


class TestCashAndPreservePortfolio:
    def setup_method(self):
        self.prop = PropertyEvent(price=100_000, down_payment_percent=70, fees_percent=10,
                                  purchase_month=1, mortgage_term=30, label="Flat")

    def test_merged_cash_pays_from_portfolio(self):
        config = _config(current_portfolio=100_000, current_cash=50_000)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == 0
        assert s.months[0].end_balance == pytest.approx(70_000)

    def test_preserve_portfolio_with_merged_cash_borrows_all(self):
        config = _config(current_portfolio=100_000, current_cash=50_000, preserve_portfolio=True)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == pytest.approx(80_000)
        assert s.months[0].end_balance == pytest.approx(150_000)

    def test_preserve_portfolio_with_separate_cash_borrows_all(self):
        config = _config(current_portfolio=100_000, current_cash=50_000,
                         preserve_portfolio=True, cash_interest_rate=0.0)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == pytest.approx(80_000)
        assert s.months[0].parent_loan == pytest.approx(80_000)
        assert s.months[0].property_withdrawal == 0
        assert s.months[0].end_cash == pytest.approx(50_000)
        assert s.months[0].end_balance == pytest.approx(150_000)

    def test_purchase_beyond_balances_stays_feasible(self):
        config = _config(current_portfolio=10_000, current_cash=5_000, cash_interest_rate=0.0)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == pytest.approx(65_000)
        assert s.months[0].end_balance == 0
        assert s.months[0].end_cash == 0
        assert s.feasible

    def test_separate_cash_drawn_before_portfolio(self):
        config = _config(current_portfolio=100_000, current_cash=50_000, cash_interest_rate=0.0)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == 0
        assert s.months[0].end_cash == 0
        assert s.months[0].end_balance == pytest.approx(70_000)

    def test_contributions_saved_as_cash_until_last_purchase(self):
        config = _config(current_cash=1_000, monthly_investment=100, cash_interest_rate=0.12)
        prop = PropertyEvent(price=10_000, down_payment_percent=100, fees_percent=0,
                             purchase_month=3, label="Plot")
        s = build_scenario(config, [prop], 0.0)
        assert [mp.monthly_cash_saving for mp in s.months[:4]] == [100, 100, 100, 0]
        assert s.months[0].end_cash == pytest.approx(1_000 * 1.01 + 100)
        # No mortgage on a full cash purchase
        assert all(o.kind == PARENT_LOAN for o in s.obligations)

    def test_no_parent_loan_obligation_without_repayment_years(self):
        config = _config(current_portfolio=10_000, parent_loan_years=0)
        s = build_scenario(config, [self.prop], 0.0)
        assert s.parent_loan_total == pytest.approx(70_000)
        assert [o.kind for o in s.obligations] == [MORTGAGE]
        assert s.phases[-1].label == PHASE_MORTGAGE_ONLY


class TestMultipleProperties:
    def test_second_purchase_does_not_cancel_first_mortgage(self):
        config = _config(target_age=45, current_portfolio=1_000_000, monthly_investment=10_000)
        flat = PropertyEvent(price=300_000, purchase_year=2, mortgage_term=30, label="Flat")
        finca = PropertyEvent(price=200_000, purchase_year=5, mortgage_term=25, label="Finca")
        s = build_scenario(config, [flat, finca], 0.05)
        flat_payment = monthly_mortgage_payment(flat.loan_amount, 3.2, 30)
        finca_payment = monthly_mortgage_payment(finca.loan_amount, 3.2, 25)
        assert s.months[30].monthly_mortgage == pytest.approx(flat_payment)
        assert s.months[70].monthly_mortgage == pytest.approx(flat_payment + finca_payment)
        assert s.parent_loan_total == 0
        mortgage_only = [p for p in s.phases if p.label == PHASE_MORTGAGE_ONLY]
        # One phase per mortgage count
        assert [(p.from_month, p.to_month) for p in mortgage_only] == [(24, 59), (60, 120)]

    def test_same_month_purchases(self):
        config = _config(target_age=40, current_portfolio=50_000)
        a = PropertyEvent(price=100_000, purchase_month=12, label="A")
        b = PropertyEvent(price=100_000, purchase_month=12, label="B")
        s = build_scenario(config, [a, b], 0.0)
        assert s.months[11].property_label == "A, B"
        assert s.months[11].property_withdrawal == pytest.approx(50_000)
        assert s.parent_loan_total == pytest.approx(14_000)


class TestParentLoanOnly:
    def test_cash_purchase_with_parent_loan(self):
        config = _config(target_age=40, current_portfolio=10_000, monthly_investment=1_000, parent_loan_years=1)
        prop = PropertyEvent(price=20_000, down_payment_percent=100, fees_percent=0,
                             purchase_month=1, label="Plot")
        s = build_scenario(config, [prop], 0.0)
        assert s.parent_loan_total == pytest.approx(9_000)
        labels = [(p.label, p.from_month, p.to_month) for p in s.phases]
        assert labels == [(PHASE_PARENT_LOAN, 1, 13), (PHASE_POST_MORTGAGE, 14, 60)]
        assert s.months[1].monthly_parent_loan == pytest.approx(750)
        assert s.months[1].monthly_investing == pytest.approx(250)


class TestFireReached:
    def test_reached_month_recorded_once(self):
        config = _config(target_age=45, annual_expenses=4_000, withdrawal_rate=0.04,
                         inflation_rate=0.0, current_portfolio=90_000, monthly_investment=1_000)
        s = build_scenario(config, [], 0.0)
        assert s.fire_reached_month == 10
        assert s.fire_reached_date == "2026-11"
        assert s.fire_reached_year == 1
        assert s.fire_reached_age == s.months[9].age

    def test_not_reached(self):
        config = _config(annual_expenses=1_000_000)
        s = build_scenario(config, [], 0.07)
        assert s.fire_reached_month is None
        assert s.fire_reached_date is None
        assert s.fire_reached_age is None


class TestDatesAndAges:
    def test_dates_and_ages(self):
        config = _config(start_date="2026-01", birth_month=5)
        s = build_scenario(config, [], 0.05)
        assert s.months[0].date == "2026-02"
        assert s.months[-1].date == "2027-01"
        assert s.months[2].age == 35
        assert s.months[3].age == 36


class TestValidation:
    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError, match="Target age"):
            build_scenario(_config(target_age=30), [], 0.05)

    def test_purchase_outside_horizon_rejected(self):
        with pytest.raises(ValueError, match="outside the simulated range"):
            build_scenario(_config(), [PropertyEvent(price=1, purchase_year=2)], 0.05)


class TestBuildAllScenarios:
    def test_one_per_rate(self):
        config = _config(target_age=40, monthly_investment=500, return_rates=(0.05, 0.07, 0.09))
        scenarios = build_all_scenarios(config, [])
        assert [s.return_rate for s in scenarios] == [0.05, 0.07, 0.09]
        assert [s.label for s in scenarios] == ["Conservative (5%)", "Moderate (7%)", "Optimistic (9%)"]
        balances = [s.final_balance for s in scenarios]
        assert balances == sorted(balances)

    def test_custom_rate_label(self):
        assert scenario_label(0.06) == "6% return"
