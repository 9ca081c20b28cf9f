"""FIRE planning package: month-by-month scenarios with property purchases."""

from fire_planner.params import (
    PlanConfig,
    PropertyEvent,
    add_months,
    age_at_month,
    validate_config,
    validate_property,
)
from fire_planner.compound import future_value, required_monthly, months_to_target
from fire_planner.mortgage import MortgageSummary, calculate_mortgage, monthly_mortgage_payment
from fire_planner.targets import (
    fire_number,
    inflation_adjusted_fire_number,
    inflation_adjusted_fire_number_at_month,
    property_cash_needed,
)
from fire_planner.simulation import (
    Obligation,
    MonthProjection,
    YearProjection,
    ScenarioPhase,
    Scenario,
    build_scenario,
    build_all_scenarios,
    MORTGAGE,
    PARENT_LOAN,
)
from fire_planner.solver import (
    RequiredContribution,
    GapAnalysis,
    bisect,
    required_monthly_capacity,
    gap_analysis,
)
from fire_planner.portfolio import (
    Transaction,
    Position,
    PortfolioAnalysis,
    parse_scalable_csv,
    analyze_portfolio,
)
from fire_planner.suggestions import Suggestion, generate_suggestions

__all__ = [
    "PlanConfig",
    "PropertyEvent",
    "add_months",
    "age_at_month",
    "validate_config",
    "validate_property",
    "future_value",
    "required_monthly",
    "months_to_target",
    "MortgageSummary",
    "calculate_mortgage",
    "monthly_mortgage_payment",
    "fire_number",
    "inflation_adjusted_fire_number",
    "inflation_adjusted_fire_number_at_month",
    "property_cash_needed",
    "Obligation",
    "MonthProjection",
    "YearProjection",
    "ScenarioPhase",
    "Scenario",
    "build_scenario",
    "build_all_scenarios",
    "MORTGAGE",
    "PARENT_LOAN",
    "RequiredContribution",
    "GapAnalysis",
    "bisect",
    "required_monthly_capacity",
    "gap_analysis",
    "Transaction",
    "Position",
    "PortfolioAnalysis",
    "parse_scalable_csv",
    "analyze_portfolio",
    "Suggestion",
    "generate_suggestions",
]
