"""CLI entry point for the investment plan export (CSV, one return rate)."""

import csv
import sys
from pathlib import Path

from fire_planner.config import parse_args
from fire_planner.params import PlanConfig
from fire_planner.simulation import Scenario, build_scenario
from fire_planner.targets import fire_number, inflation_adjusted_fire_number

# (category, target % of the monthly investing amount)
DEFAULT_ALLOCATION: tuple[tuple[str, float], ...] = (
    ("Global ETFs", 60),
    ("Emerging Markets", 10),
    ("Gold/Commodities", 10),
    ("Individual Stocks", 15),
    ("Bond ETFs", 5),
)


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def build_plan_rows(
    config: PlanConfig,
    scenario: Scenario,
    allocation: tuple[tuple[str, float], ...] = DEFAULT_ALLOCATION,
) -> list[list[str]]:
    """CSV rows: yearly plan, then a summary block and a per-phase allocation block.

    Monthly amounts of a year are those of its last month.
    """
    total_percent = sum(percent for _, percent in allocation)
    if abs(total_percent - 100) > 1e-9:
        raise ValueError(f"Allocation must sum to 100% (got {total_percent:g}%)")

    rows = [[
        "Year", "Age", "Phase",
        "Monthly Savings", "Monthly Rent", "Monthly Mortgage", "Monthly Parent Loan", "Monthly Investing",
        *(f"{label} ({percent:g}%)" for label, percent in allocation),
        "Annual Invested", "Portfolio Growth", "Portfolio Balance",
        "FIRE Target (inflation-adj)", "Progress %",
    ]]
    for y in scenario.years:
        last = scenario.months[y.year * 12 - 1]
        target = inflation_adjusted_fire_number(
            config.annual_expenses, config.withdrawal_rate, config.inflation_rate, y.year,
        )
        progress = y.end_balance / target * 100 if target > 0 else 0.0
        rows.append([
            str(y.year), str(y.age), last.phase,
            _fmt(config.monthly_investment), _fmt(last.monthly_rent), _fmt(last.monthly_mortgage),
            _fmt(last.monthly_parent_loan), _fmt(last.monthly_investing),
            *(_fmt(last.monthly_investing * percent / 100) for _, percent in allocation),
            _fmt(y.contributions), _fmt(y.growth), _fmt(y.end_balance),
            _fmt(target), f"{progress:.1f}%",
        ])

    rows.append([])
    rows.append(["SUMMARY"])
    rows.append(["FIRE Number (today)", _fmt(fire_number(config.annual_expenses, config.withdrawal_rate))])
    rows.append(["Annual Expenses", _fmt(config.annual_expenses)])
    rows.append(["Withdrawal Rate", f"{config.withdrawal_rate * 100:.1f}%"])
    rows.append(["Return Rate Used", f"{scenario.return_rate * 100:.0f}%"])
    rows.append(["Parent Loan Total", _fmt(scenario.parent_loan_total)])
    rows.append(["Final Balance", _fmt(scenario.final_balance)])
    rows.append(["FIRE Reached", scenario.fire_reached_date or "not reached"])
    rows.append([])

    rows.append(["INVESTMENT ALLOCATION"])
    rows.append(["Category", "Target %", *(f"{p.label} ({p.from_month}-{p.to_month})" for p in scenario.phases)])
    for label, percent in allocation:
        rows.append([
            label, f"{percent:g}%",
            *(_fmt(p.monthly_investing * percent / 100) for p in scenario.phases),
        ])
    rows.append(["TOTAL", "100%", *(_fmt(p.monthly_investing) for p in scenario.phases)])
    return rows


def write_plan_csv(rows: list[list[str]], path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        csv.writer(f, delimiter=";").writerows(rows)
    return path


def _print_allocation(config: PlanConfig, scenario: Scenario, allocation: tuple[tuple[str, float], ...]):
    print("=" * 80)
    print(f"FIRE investment plan ({scenario.return_rate * 100:.0f}% return)")
    print(f"  FIRE number (today): €{fire_number(config.annual_expenses, config.withdrawal_rate):,.0f}")
    if scenario.parent_loan_total > 0:
        print(f"  Parent loan: €{scenario.parent_loan_total:,.0f} over {config.parent_loan_years}y")
    print("=" * 80)
    print()
    col_w = 16
    print(f"{'Category':<26}" + "".join(f"{p.label[:col_w - 1]:>{col_w}}" for p in scenario.phases))
    print(f"{'':<26}" + "".join(f"{f'age {p.from_age}-{p.to_age}':>{col_w}}" for p in scenario.phases))
    print("-" * (26 + col_w * len(scenario.phases)))
    for label, percent in allocation:
        name = f"{label} ({percent:g}%)"
        print(f"{name:<26}" + "".join(f"{p.monthly_investing * percent / 100:>{col_w},.0f}" for p in scenario.phases))
    print("-" * (26 + col_w * len(scenario.phases)))
    print(f"{'TOTAL':<26}" + "".join(f"{p.monthly_investing:>{col_w},.0f}" for p in scenario.phases))
    print()
    target = inflation_adjusted_fire_number(
        config.annual_expenses, config.withdrawal_rate, config.inflation_rate, config.horizon_years,
    )
    print(f"  Final balance at {config.target_age}: €{scenario.final_balance:,.0f}")
    print(f"  FIRE target (inflation-adj): €{target:,.0f}")
    if target > 0:
        print(f"  Progress: {scenario.final_balance / target * 100:.1f}%")
    print()


def _add_plan_args(parser):
    parser.add_argument(
        "--rate", type=float, default=7.0,
        help="Return rate %% for the plan (default: 7)",
    )
    parser.add_argument(
        "--output", type=Path, default=Path("fire-plan.csv"),
        help="CSV output path (default: fire-plan.csv)",
    )


def main():
    try:
        config, properties, args = parse_args("FIRE investment plan export", _add_plan_args)
        scenario = build_scenario(config, properties, args.rate / 100)
        rows = build_plan_rows(config, scenario)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    _print_allocation(config, scenario, DEFAULT_ALLOCATION)
    path = write_plan_csv(rows, args.output)
    print(f"Plan exported → {path}", file=sys.stderr)


if __name__ == "__main__":
    main()
