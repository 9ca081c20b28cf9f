"""CLI entry point for the FIRE calculation (all return scenarios)."""

import sys

from fire_planner.config import parse_args
from fire_planner.mortgage import calculate_mortgage, monthly_mortgage_payment
from fire_planner.params import PlanConfig, PropertyEvent
from fire_planner.simulation import Scenario, ScenarioPhase, build_all_scenarios, build_scenario
from fire_planner.solver import GapAnalysis, gap_analysis
from fire_planner.targets import fire_number, property_cash_needed

MODERATE_RATE = 0.07


def _eur(value: float) -> str:
    return f"€{value:,.0f}"


def _pick_rate(config: PlanConfig) -> float:
    """Moderate rate when configured, else the middle one."""
    if MODERATE_RATE in config.return_rates:
        return MODERATE_RATE
    rates = sorted(config.return_rates)
    return rates[len(rates) // 2]


def _print_header(config: PlanConfig):
    target = fire_number(config.annual_expenses, config.withdrawal_rate)
    assets = config.current_portfolio + config.current_cash
    print("=" * 80)
    print(f"FIRE plan: age {config.current_age} → {config.target_age} ({config.horizon_years} years, from {config.start_date})")
    print(f"  FIRE number (today): {_eur(target)}  "
          f"({_eur(config.annual_expenses)}/yr at {config.withdrawal_rate * 100:.1f}% withdrawal)")
    print(f"  Current assets: {_eur(assets)} (portfolio {_eur(config.current_portfolio)} + cash {_eur(config.current_cash)})")
    if target > 0:
        print(f"  Progress: {assets / target * 100:.1f}%")
    print(f"  Monthly savings capacity: {_eur(config.monthly_investment)}")
    if config.monthly_rent > 0:
        print(f"  Rent: {_eur(config.monthly_rent)}/mo from month {config.rent_start_month} until the first purchase")
    if config.cash_interest_rate is not None:
        print(f"  Cash kept separately at {config.cash_interest_rate * 100:.2f}%/yr until the last purchase")
    if config.preserve_portfolio:
        print("  Portfolio is never sold for purchases")
    print("=" * 80)
    print()


def _print_purchase_breakdown(config: PlanConfig, properties: list[PropertyEvent], rate: float):
    scenario = build_scenario(config, properties, rate)
    print(f"【Property purchases】 ({rate * 100:.0f}% return)")
    print("-" * 80)
    for prop in properties:
        month = prop.month_offset
        mp = scenario.months[month - 1]
        print(f"  {prop.label} in month {month} ({mp.date}, age {mp.age})")
        print(f"    Price {_eur(prop.price)}: down {prop.down_payment_percent:.0f}% + fees {prop.fees_percent:.0f}%"
              + (f" + {_eur(prop.additional_costs)} extra" if prop.additional_costs else "")
              + f" = {_eur(property_cash_needed(prop))} cash")
        payment = monthly_mortgage_payment(prop.loan_amount, prop.mortgage_rate, prop.mortgage_term)
        print(f"    Mortgage {_eur(prop.loan_amount)} at {prop.mortgage_rate:.2f}% over {prop.mortgage_term}y "
              f"→ {_eur(payment)}/mo")
        print(f"    Balance before purchase: {_eur(mp.start_balance)} → after: {_eur(mp.end_balance)}")
        if mp.parent_loan > 0:
            print(f"    Parent loan: {_eur(mp.parent_loan)} over {config.parent_loan_years}y")
    print()


def _print_phases(phases: list[ScenarioPhase]):
    print("【Budget phases】")
    print("-" * 100)
    print(f"{'Phase':<26} {'Months':>10} {'Ages':>8} {'Rent':>10} {'Mortgage':>10} {'Parent':>10} {'Investing':>10}")
    print("-" * 100)
    for p in phases:
        months = f"{p.from_month}-{p.to_month}"
        ages = f"{p.from_age}-{p.to_age}"
        print(f"{p.label:<26} {months:>10} {ages:>8} {p.monthly_rent:>10,.0f} {p.monthly_mortgage:>10,.0f} "
              f"{p.monthly_parent_loan:>10,.0f} {p.monthly_investing:>10,.0f}")
    print()


def _print_scenario_table(scenario: Scenario):
    print(f"【{scenario.label}】")
    print("-" * 100)
    print(f"{'Year':>4} {'Age':>4} {'Start':>12} {'Contrib.':>10} {'Growth':>10} {'Purchase':>12} {'Parent':>10} {'End':>12}  Event")
    print("-" * 100)
    for y in scenario.years:
        event = y.property_label or ""
        print(f"{y.year:>4} {y.age:>4} {y.start_balance:>12,.0f} {y.contributions:>10,.0f} {y.growth:>10,.0f} "
              f"{-y.property_withdrawal:>12,.0f} {y.parent_loan:>10,.0f} {y.end_balance:>12,.0f}  {event}")
    if not scenario.feasible:
        print("  ⚠ Balance went negative in some month (clamped to 0)")
    print()


def _print_comparison(scenarios: list[Scenario]):
    print("【Scenario comparison】")
    print("-" * 80)
    print(f"{'Scenario':<22} {'Final balance':>14} {'FIRE reached':>14} {'Age':>5} {'Parent loan':>12}")
    print("-" * 80)
    for s in scenarios:
        reached = s.fire_reached_date or "not reached"
        age = str(s.fire_reached_age) if s.fire_reached_age is not None else "-"
        print(f"{s.label:<22} {s.final_balance:>14,.0f} {reached:>14} {age:>5} {s.parent_loan_total:>12,.0f}")
    print()


def _print_gap(gap: GapAnalysis, config: PlanConfig, rate: float):
    print(f"【Gap analysis】 ({rate * 100:.0f}% return)")
    print("-" * 80)
    print(f"  FIRE number (today):        {_eur(gap.fire_number)}")
    print(f"  FIRE number at {config.target_age} (infl.):  {_eur(gap.inflation_adjusted_fire_number)}")
    if gap.total_property_cash > 0:
        print(f"  Property cash needed:       {_eur(gap.total_property_cash)}")
    print(f"  Total needed:               {_eur(gap.total_needed)}")
    print(f"  Current assets:             {_eur(gap.current_assets)}")
    print(f"  Gap:                        {_eur(gap.gap)}")
    if gap.reachable:
        print(f"  Required monthly:           {_eur(gap.required_monthly)}")
    else:
        print(f"  Required monthly:           > {_eur(gap.required_monthly)} (not reachable)")
    print(f"  Current monthly:            {_eur(gap.current_monthly)}")
    if gap.monthly_shortfall > 0:
        print(f"  Shortfall:                  {_eur(gap.monthly_shortfall)}/mo")
    else:
        print("  On track")
    print()


def _print_mortgages(properties: list[PropertyEvent]):
    print("【Mortgage summary】")
    print("-" * 100)
    print(f"{'Property':<26} {'Price':>10} {'Loan':>10} {'Down':>10} {'Fees':>10} {'Cash':>10} {'Monthly':>9} {'Rate':>6} {'Term':>5}")
    print("-" * 100)
    for prop in properties:
        m = calculate_mortgage(prop)
        print(f"{m.label:<26} {m.property_price:>10,.0f} {m.loan_amount:>10,.0f} {m.down_payment:>10,.0f} "
              f"{m.fees:>10,.0f} {m.total_cash_needed:>10,.0f} {m.monthly_payment:>9,.0f} "
              f"{m.mortgage_rate:>5.2f}% {m.term_years:>4}y")
    print()


def main():
    try:
        config, properties, _ = parse_args("FIRE calculator: scenarios, phases and gap analysis")
        scenarios = build_all_scenarios(config, properties)
        rate = _pick_rate(config)
        gap = gap_analysis(config, properties, rate)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _print_header(config)
    if properties:
        _print_purchase_breakdown(config, properties, rate)
    reference = next(s for s in scenarios if s.return_rate == rate)
    _print_phases(reference.phases)
    for scenario in scenarios:
        _print_scenario_table(scenario)
    _print_comparison(scenarios)
    _print_gap(gap, config, rate)
    if properties:
        _print_mortgages(properties)


if __name__ == "__main__":
    main()
