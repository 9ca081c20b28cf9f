"""CLI entry point for portfolio suggestions against the FIRE gap."""

import dataclasses
import sys
from pathlib import Path

from fire_planner.cli import _pick_rate, _print_gap
from fire_planner.config import parse_args
from fire_planner.portfolio_cli import load_analysis, print_analysis
from fire_planner.solver import gap_analysis
from fire_planner.suggestions import HIGH, LOW, MEDIUM, generate_suggestions

PRIORITY_ICONS = {HIGH: "●●●", MEDIUM: "●● ", LOW: "●  "}


def _add_suggest_args(parser):
    parser.add_argument("csv", type=Path, help="Semicolon-delimited CSV export")


def main():
    try:
        config, _, args = parse_args("Portfolio suggestions toward the FIRE target", _add_suggest_args)
        analysis = load_analysis(args.csv)
        # The export is the portfolio; property plans are left to fire-calc
        config = dataclasses.replace(config, current_portfolio=analysis.total_current_value)
        rate = _pick_rate(config)
        gap = gap_analysis(config, [], rate)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    print_analysis(analysis)
    _print_gap(gap, config, rate)

    suggestions = generate_suggestions(analysis, gap)
    print("【Suggestions】")
    if not suggestions:
        print("  Your portfolio looks well-structured. No major suggestions.")
        print()
        return
    for s in suggestions:
        print(f"  {PRIORITY_ICONS.get(s.priority, '   ')} [{s.action.upper()}] {s.message}")
        if s.detail:
            print(f"      {s.detail}")
        print()


if __name__ == "__main__":
    main()
