"""Chart generation for FIRE scenarios."""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker

from fire_planner.params import PlanConfig
from fire_planner.simulation import Scenario
from fire_planner.targets import inflation_adjusted_fire_number_at_month

# Return rate → line color
SCENARIO_COLORS = {
    0.05: "#d62728",  # red
    0.07: "#1f77b4",  # blue
    0.09: "#2ca02c",  # green
}

DEFAULT_COLOR = "#7f7f7f"
TARGET_COLOR = "#333333"

BUDGET_COLORS = {
    "rent": "#fc8d62",
    "mortgage": "#8da0cb",
    "parent_loan": "#e78ac3",
    "investing": "#66c2a5",
}


def _format_eur_axis(ax: plt.Axes):
    ax.yaxis.set_major_formatter(
        ticker.FuncFormatter(lambda x, _: f"€{x / 1_000_000:.1f}M" if abs(x) >= 1_000_000 else f"€{x:,.0f}")
    )


def _save(fig, output_path: Path, stem: str, name: str) -> Path:
    output_path.mkdir(parents=True, exist_ok=True)
    suffix = f"-{name}" if name else ""
    filepath = output_path / f"{stem}{suffix}.png"
    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath


def plot_trajectory(
    scenarios: list[Scenario], config: PlanConfig, output_path: Path, name: str = "",
) -> Path:
    """Line chart of the monthly balance per scenario against the FIRE target.

    Args:
        scenarios: build_scenario() results sharing the same config.
        config: plan config (for the inflation-adjusted target curve).
        output_path: directory to save the PNG.
        name: optional suffix for the output filename (e.g. "flat" → "trajectory-flat.png").

    Returns:
        Path to the generated PNG file.
    """
    if not scenarios:
        raise ValueError("No scenarios for trajectory chart")

    fig, ax = plt.subplots(figsize=(14, 8))

    months = [mp.month for mp in scenarios[0].months]
    for s in scenarios:
        color = SCENARIO_COLORS.get(s.return_rate, DEFAULT_COLOR)
        ax.plot(months, [mp.end_balance for mp in s.months], label=s.label, color=color, linewidth=2)
        if s.fire_reached_month is not None:
            reached = s.months[s.fire_reached_month - 1]
            ax.scatter([reached.month], [reached.end_balance], color=color, zorder=5)
            ax.annotate(
                f"FIRE {reached.date} (age {reached.age})",
                xy=(reached.month, reached.end_balance),
                xytext=(-10, 12), textcoords="offset points",
                fontsize=10, color=color, ha="right",
            )

    target = [
        inflation_adjusted_fire_number_at_month(
            config.annual_expenses, config.withdrawal_rate, config.inflation_rate, m,
        )
        for m in months
    ]
    ax.plot(months, target, label="FIRE target (inflation-adj)", color=TARGET_COLOR,
            linewidth=1.5, linestyle="--")

    # Purchase markers
    y_lo, y_hi = ax.get_ylim()
    for mp in scenarios[0].months:
        if mp.property_label:
            ax.axvline(mp.month, color="#888888", linewidth=0.8, linestyle=":", alpha=0.6)
            ax.annotate(
                mp.property_label,
                xy=(mp.month, y_lo + (y_hi - y_lo) * 0.9),
                fontsize=10, ha="center",
                bbox=dict(boxstyle="round,pad=0.4", fc="white", ec="#888888", alpha=0.9, linewidth=0.8),
            )

    # Label every year on the x-axis as age
    year_ticks = months[11::12]
    ax.set_xticks(year_ticks)
    ax.set_xticklabels([str(scenarios[0].months[m - 1].age) for m in year_ticks])

    ax.set_xlabel("Age")
    ax.set_ylabel("Balance (portfolio + cash)")
    ax.set_title("Balance trajectory vs FIRE target")
    ax.legend(loc="upper left")
    ax.grid(True, alpha=0.3)
    _format_eur_axis(ax)

    return _save(fig, output_path, "trajectory", name)


def plot_phase_budget(scenario: Scenario, output_path: Path, name: str = "") -> Path:
    """Stacked monthly budget (rent, mortgage, parent loan, investing) over time."""
    if not scenario.months:
        raise ValueError("No months for budget chart")

    fig, ax = plt.subplots(figsize=(14, 6))
    months = [mp.month for mp in scenario.months]
    ax.stackplot(
        months,
        [mp.monthly_rent for mp in scenario.months],
        [mp.monthly_mortgage for mp in scenario.months],
        [mp.monthly_parent_loan for mp in scenario.months],
        [mp.monthly_investing for mp in scenario.months],
        labels=["Rent", "Mortgage", "Parent loan", "Investing"],
        colors=[BUDGET_COLORS["rent"], BUDGET_COLORS["mortgage"],
                BUDGET_COLORS["parent_loan"], BUDGET_COLORS["investing"]],
        alpha=0.8,
    )

    for phase in scenario.phases[1:]:
        ax.axvline(phase.from_month, color="#555555", linewidth=0.8, linestyle=":")
    y_hi = ax.get_ylim()[1]
    for phase in scenario.phases:
        ax.annotate(
            phase.label,
            xy=((phase.from_month + phase.to_month) / 2, y_hi * 0.95),
            fontsize=9, ha="center", va="top",
        )

    ax.set_xlabel("Month")
    ax.set_ylabel("Monthly amount")
    ax.set_title(f"Monthly budget by phase ({scenario.label})")
    ax.legend(loc="lower right")
    ax.grid(True, alpha=0.3)
    _format_eur_axis(ax)

    return _save(fig, output_path, "budget", name)
