"""CLI entry point for brokerage CSV analysis."""

import argparse
import sys
from pathlib import Path

from fire_planner.portfolio import Allocation, PortfolioAnalysis, analyze_portfolio, parse_scalable_csv

BAR_WIDTH = 20


def _bar(percent: float) -> str:
    filled = max(0, min(BAR_WIDTH, round(percent / 100 * BAR_WIDTH)))
    return "█" * filled + "░" * (BAR_WIDTH - filled)


def _category_name(category: str) -> str:
    return " ".join(w.capitalize() for w in category.split("-"))


def _print_allocation(title: str, allocation: dict[str, Allocation], name_fn=str):
    print(f"【{title}】")
    for key, alloc in sorted(allocation.items(), key=lambda kv: kv[1].percent, reverse=True):
        print(f"  {name_fn(key):<20} {_bar(alloc.percent)} {alloc.percent:>6.1f}%  (€{alloc.value:,.0f})")
    print()


def load_analysis(csv_path: Path) -> PortfolioAnalysis:
    """Parse and analyze an export; a missing file exits with status 1."""
    if not csv_path.exists():
        print(f"Error: file not found: {csv_path}", file=sys.stderr)
        sys.exit(1)
    transactions = parse_scalable_csv(csv_path)
    print(f"Parsed {len(transactions)} transactions from {csv_path}", file=sys.stderr)
    return analyze_portfolio(transactions)


def print_analysis(analysis: PortfolioAnalysis):
    gain = analysis.total_current_value - analysis.total_invested
    gain_pct = gain / analysis.total_invested * 100 if analysis.total_invested > 0 else 0.0
    print("=" * 80)
    print("Portfolio analysis")
    print(f"  Cost basis:            €{analysis.total_invested:,.0f}")
    print(f"  Est. current value:    €{analysis.total_current_value:,.0f}  ({gain:+,.0f}, {gain_pct:+.1f}%)")
    print(f"  Monthly savings plans: €{analysis.total_monthly_investment:,.2f}/mo")
    print(f"  Positions:             {analysis.position_count}")
    print("  (values use the last known price in the export)")
    print("=" * 80)
    print()

    _print_allocation("Allocation by category", analysis.category_allocation, _category_name)
    _print_allocation("Allocation by region", analysis.region_allocation)

    if analysis.concentration_warnings:
        print("【Concentration warnings】")
        for warning in analysis.concentration_warnings:
            print(f"  ⚠ {warning}")
        print()

    print("【Positions】")
    print("-" * 100)
    print(f"{'Name':<35} {'ISIN':<14} {'Cost':>10} {'Value':>10} {'P/L':>10} {'/mo':>9} {'Category':<16}")
    print("-" * 100)
    for pos in sorted(analysis.positions, key=lambda p: p.current_value, reverse=True):
        name = pos.name if len(pos.name) <= 35 else pos.name[:33] + ".."
        pl = pos.current_value - pos.total_invested
        print(f"{name:<35} {pos.isin:<14} {pos.total_invested:>10,.0f} {pos.current_value:>10,.0f} "
              f"{pl:>+10,.0f} {pos.monthly_investment:>9,.2f} {pos.category:<16}")
    print()


def main():
    parser = argparse.ArgumentParser(description="Analyze a Scalable Capital transaction export")
    parser.add_argument("csv", type=Path, help="Semicolon-delimited CSV export")
    args = parser.parse_args()
    print_analysis(load_analysis(args.csv))


if __name__ == "__main__":
    main()
