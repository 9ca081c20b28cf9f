"""CLI entry point for chart generation."""

import sys
from pathlib import Path

from fire_planner.charts import plot_phase_budget, plot_trajectory
from fire_planner.config import parse_args
from fire_planner.simulation import build_all_scenarios


def _add_chart_args(parser):
    parser.add_argument(
        "--output", type=Path, default=Path("reports/charts"),
        help="Output directory (default: reports/charts)",
    )
    parser.add_argument(
        "--name", type=str, default="",
        help="Output filename suffix (e.g. flat → trajectory-flat.png)",
    )


def main():
    try:
        config, properties, args = parse_args("FIRE chart generation", _add_chart_args)
        print(f"Simulating {len(config.return_rates)} scenarios (age {config.current_age}→{config.target_age})...", file=sys.stderr)
        scenarios = build_all_scenarios(config, properties)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    path = plot_trajectory(scenarios, config, args.output, name=args.name)
    print(f"  → {path}", file=sys.stderr)

    for scenario in scenarios:
        suffix = f"{args.name}-{scenario.return_rate * 100:.0f}" if args.name else f"{scenario.return_rate * 100:.0f}"
        path = plot_phase_budget(scenario, args.output, name=suffix)
        print(f"  → {path}", file=sys.stderr)

    print("Done", file=sys.stderr)


if __name__ == "__main__":
    main()
