"""Required-contribution solver and gap analysis."""

import dataclasses
from dataclasses import dataclass
from typing import Callable

from fire_planner.compound import required_monthly
from fire_planner.mortgage import monthly_mortgage_payment
from fire_planner.params import PlanConfig, PropertyEvent, validate_config
from fire_planner.simulation import build_scenario
from fire_planner.targets import (
    fire_number,
    inflation_adjusted_fire_number,
    property_cash_needed,
)

SOLVER_TOLERANCE = 0.01  # currency units
SOLVER_MAX_ITERATIONS = 50

METHOD_CLOSED_FORM = "closed-form"
METHOD_BISECTION = "bisection"


def bisect(
    predicate: Callable[[float], bool],
    lo: float,
    hi: float,
    tolerance: float = SOLVER_TOLERANCE,
    max_iterations: int = SOLVER_MAX_ITERATIONS,
) -> tuple[float, bool]:
    """Smallest x in [lo, hi] satisfying a monotonic (False → True) predicate.

    Returns (x, satisfied). When even `hi` fails the result is pinned at `hi`
    with satisfied=False.
    """
    if predicate(lo):
        return lo, True
    if not predicate(hi):
        return hi, False
    for _ in range(max_iterations):
        if hi - lo <= tolerance:
            break
        mid = (lo + hi) / 2
        if predicate(mid):
            hi = mid
        else:
            lo = mid
    return hi, True


@dataclass
class RequiredContribution:
    amount: float  # monthly savings capacity
    reachable: bool  # False → target not reachable within the search bound
    method: str


def horizon_target(config: PlanConfig) -> float:
    """Inflation-adjusted FIRE number at the target age."""
    return inflation_adjusted_fire_number(
        config.annual_expenses, config.withdrawal_rate, config.inflation_rate,
        config.horizon_years,
    )


def default_upper_bound(config: PlanConfig, properties: list[PropertyEvent]) -> float:
    """A monthly capacity that reaches the target within the first month.

    Covers the target, every purchase in cash, rent and all mortgage payments.
    """
    bound = (
        horizon_target(config)
        + sum(property_cash_needed(p) for p in properties)
        + config.monthly_rent
        + sum(monthly_mortgage_payment(p.loan_amount, p.mortgage_rate, p.mortgage_term) for p in properties)
    )
    return max(bound, 1.0)


def required_monthly_capacity(
    config: PlanConfig,
    properties: list[PropertyEvent],
    return_rate: float,
    upper_bound: float | None = None,
) -> RequiredContribution:
    """Monthly savings capacity needed to hit the target at the target age.

    Closed form when no purchase, rent delay or separate cash balance breaks
    the plain annuity; otherwise a bisection over build_scenario().
    """
    validate_config(config)
    target = horizon_target(config)
    rent_whole_horizon = config.monthly_rent == 0 or config.rent_start_month <= 1
    if not properties and config.cash_interest_rate is None and rent_whole_horizon:
        net = required_monthly(
            config.current_portfolio + config.current_cash, target,
            return_rate, config.horizon_months,
        )
        amount = net + config.monthly_rent if net > 0 else 0.0
        return RequiredContribution(amount, True, METHOD_CLOSED_FORM)

    if upper_bound is None:
        upper_bound = default_upper_bound(config, properties)

    def reaches_target(capacity: float) -> bool:
        trial = dataclasses.replace(config, monthly_investment=capacity)
        return build_scenario(trial, properties, return_rate).final_balance >= target

    amount, reachable = bisect(reaches_target, 0.0, upper_bound)
    return RequiredContribution(amount, reachable, METHOD_BISECTION)


@dataclass
class GapAnalysis:
    fire_number: float
    inflation_adjusted_fire_number: float
    total_property_cash: float
    total_needed: float
    current_assets: float
    gap: float
    required_monthly: float
    current_monthly: float
    monthly_shortfall: float
    reachable: bool


def gap_analysis(
    config: PlanConfig,
    properties: list[PropertyEvent],
    return_rate: float,
) -> GapAnalysis:
    """What the plan needs vs what is already there."""
    adjusted = horizon_target(config)
    total_property_cash = sum(property_cash_needed(p) for p in properties)
    total_needed = adjusted + total_property_cash
    current_assets = config.current_portfolio + config.current_cash
    required = required_monthly_capacity(config, properties, return_rate)
    return GapAnalysis(
        fire_number=fire_number(config.annual_expenses, config.withdrawal_rate),
        inflation_adjusted_fire_number=adjusted,
        total_property_cash=total_property_cash,
        total_needed=total_needed,
        current_assets=current_assets,
        gap=max(0.0, total_needed - current_assets),
        required_monthly=required.amount,
        current_monthly=config.monthly_investment,
        monthly_shortfall=max(0.0, required.amount - config.monthly_investment),
        reachable=required.reachable,
    )
