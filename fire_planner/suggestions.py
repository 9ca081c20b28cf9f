"""Prioritised portfolio suggestions from a holdings analysis and a FIRE gap."""

import math
import re
from dataclasses import dataclass

from fire_planner.portfolio import PortfolioAnalysis, Position
from fire_planner.solver import GapAnalysis

# Priorities
HIGH = "high"
MEDIUM = "medium"
LOW = "low"

# Actions
INCREASE = "increase"
DECREASE = "decrease"
SELL = "sell"
ADD = "add"
SWITCH = "switch"

# Portfolio-level thresholds (% of portfolio value)
MIN_GLOBAL_CORE_PERCENT = 40
MAX_SECTOR_PERCENT = 20
MAX_STOCK_PERCENT = 15
# Savings plans below this amount (€/mo) count as fragmented
SMALL_PLAN_AMOUNT = 25
MAX_SMALL_PLANS = 3

# Per-position thresholds (% of portfolio value)
MAX_SATELLITE_PERCENT = 10
MIN_COMMODITY_PERCENT = 5
MAX_SINGLE_STOCK_PERCENT = 5
DEEP_LOSS_PERCENT = -20
TINY_STOCK_PLAN = 15
SMALL_STOCK_INVESTED = 200

PER_POSITION_HEADING = "── Per-Position Analysis ──"
DETAIL_INDENT = "\n      "

_DISTRIBUTING = re.compile(r"\(dist\)|\bdist\b|\bdistributing\b", re.IGNORECASE)


@dataclass(frozen=True)
class Suggestion:
    priority: str
    action: str
    message: str
    detail: str = ""


def _category_percent(analysis: PortfolioAnalysis, category: str) -> float | None:
    alloc = analysis.category_allocation.get(category)
    return alloc.percent if alloc else None


def is_distributing(name: str) -> bool:
    return bool(_DISTRIBUTING.search(name))


def _portfolio_suggestions(analysis: PortfolioAnalysis, gap: GapAnalysis | None) -> list[Suggestion]:
    suggestions = []

    if gap is not None and gap.monthly_shortfall > 0:
        suggestions.append(Suggestion(
            HIGH, INCREASE,
            f"Increase monthly investment by €{math.ceil(gap.monthly_shortfall):,} to stay on track for FIRE",
            f"Current: €{gap.current_monthly:,.0f}/mo → Required: €{gap.required_monthly:,.0f}/mo",
        ))

    global_pct = _category_percent(analysis, "global-etf")
    if global_pct is None or global_pct < MIN_GLOBAL_CORE_PERCENT:
        if global_pct is None:
            detail = "No global ETF detected. A low-cost global ETF should be the foundation."
        else:
            detail = (f"Currently {global_pct:.1f}% of portfolio. "
                      "Funnel most of your savings plan budget into 1-2 global ETFs.")
        suggestions.append(Suggestion(
            HIGH, INCREASE,
            "Increase global ETF allocation: it should be the portfolio core (50-70%)",
            detail,
        ))

    if _category_percent(analysis, "bond-etf") is None:
        suggestions.append(Suggestion(
            MEDIUM, ADD,
            "Consider adding bond ETFs for diversification (5-15% of portfolio)",
            "Bonds reduce volatility, which matters more as FIRE gets closer.",
        ))

    sector_pct = _category_percent(analysis, "sector-etf")
    if sector_pct is not None and sector_pct > MAX_SECTOR_PERCENT:
        suggestions.append(Suggestion(
            HIGH, DECREASE,
            f"Sector ETFs are {sector_pct:.1f}% of portfolio: reduce to <15%",
            "Sector bets increase concentration risk and are already part of a global ETF.",
        ))

    stock_pct = _category_percent(analysis, "individual-stock")
    if stock_pct is not None and stock_pct > MAX_STOCK_PERCENT:
        suggestions.append(Suggestion(
            HIGH, DECREASE,
            f"Individual stocks are {stock_pct:.1f}% of portfolio: target <10-15%",
            "Individual stocks carry higher unsystematic risk. Redirect savings plans to broad ETFs.",
        ))

    small = [p for p in analysis.positions if 0 < p.monthly_investment < SMALL_PLAN_AMOUNT]
    if len(small) > MAX_SMALL_PLANS:
        names = ", ".join(p.name.split(" ")[0] for p in small)
        suggestions.append(Suggestion(
            MEDIUM, DECREASE,
            f"{len(small)} positions with <€{SMALL_PLAN_AMOUNT}/mo savings plans: consolidate",
            f"Positions: {names}. Cancel these and redirect to your core ETFs.",
        ))

    for pos in analysis.positions:
        if pos.monthly_investment > 0 and is_distributing(pos.name):
            suggestions.append(Suggestion(
                LOW, SWITCH,
                f"{pos.name}: switch to the accumulating version",
                f"Distributions are taxable events. Redirect the €{pos.monthly_investment:.0f}/mo "
                "savings plan to the Acc share class.",
            ))

    return suggestions


def _format_pl(pl: float, pl_pct: float) -> str:
    if pl >= 0:
        return f"+€{pl:,.0f} (+{pl_pct:.1f}%)"
    return f"-€{abs(pl):,.0f} ({pl_pct:.1f}%)"


def assess_position(pos: Position, total_value: float, total_monthly: float) -> Suggestion:
    """Recommended action for one position, by category, size and P/L."""
    pct_portfolio = pos.current_value / total_value * 100 if total_value > 0 else 0.0
    pct_monthly = pos.monthly_investment / total_monthly * 100 if total_monthly > 0 else 0.0
    pl = pos.current_value - pos.total_invested
    pl_pct = pl / pos.total_invested * 100 if pos.total_invested > 0 else 0.0

    lines = [
        f"{pct_portfolio:.1f}% of portfolio | {pct_monthly:.0f}% of monthly | "
        f"P/L: {_format_pl(pl, pl_pct)} | €{pos.monthly_investment:.0f}/mo"
    ]

    def result(priority: str, action: str, *extra: str) -> Suggestion:
        return Suggestion(priority, action, f"{pos.name} ({pos.isin})",
                          DETAIL_INDENT.join(lines + list(extra)))

    if pos.category == "global-etf":
        return result(HIGH, INCREASE,
                      "KEEP & INCREASE: Core holding. This should be the bulk of your portfolio.")

    if pos.category == "sector-etf":
        if pct_portfolio > MAX_SATELLITE_PERCENT:
            return result(MEDIUM, DECREASE,
                          f"REDUCE: {pct_portfolio:.0f}% is too much for a sector bet. Cap at 5%.",
                          "Stop the savings plan and let it shrink as your core grows.")
        extra = ["HOLD: Acceptable as a small satellite position (<5% target)."]
        if pos.monthly_investment > 0:
            extra.append("Consider stopping the savings plan and redirecting to core ETFs.")
        return result(LOW, DECREASE, *extra)

    if pos.category == "regional-etf":
        if pct_portfolio > MAX_SATELLITE_PERCENT:
            return result(MEDIUM, DECREASE,
                          f"REDUCE: {pct_portfolio:.0f}% is a large regional bet. Consider capping at 5-10%.")
        return result(LOW, DECREASE, "HOLD: Decent regional diversification. Keep as a small satellite.")

    if pos.category == "commodity":
        if pct_portfolio < MIN_COMMODITY_PERCENT:
            return result(MEDIUM, INCREASE,
                          f"INCREASE: Gold at {pct_portfolio:.1f}% is low. Target 5-10% for portfolio stability.")
        return result(LOW, INCREASE, "KEEP: Good hedge position.")

    if pos.category == "individual-stock":
        if pl >= 0 and pct_portfolio > MAX_SINGLE_STOCK_PERCENT:
            return result(HIGH, DECREASE,
                          f"STOP SAVINGS PLAN & TRIM: In profit (+{pl_pct:.0f}%) but "
                          f"{pct_portfolio:.1f}% is too much for one stock.",
                          "Stop the savings plan. Consider selling partial to rebalance.")
        if pl >= 0:
            if pos.monthly_investment < TINY_STOCK_PLAN:
                return result(LOW, DECREASE,
                              f"HOLD: Small profitable position. Savings plan is tiny "
                              f"(€{pos.monthly_investment:.0f}/mo): cancel and redirect.")
            return result(LOW, DECREASE, "HOLD: In profit. Acceptable size. Keep as a satellite bet.")
        if pl_pct < DEEP_LOSS_PERCENT:
            if pos.total_invested < SMALL_STOCK_INVESTED:
                follow_up = "Small position: consider selling at a loss and redirecting to ETFs."
            else:
                follow_up = "Larger position: hold for recovery but stop the savings plan."
            return result(HIGH, SELL,
                          f"STOP SAVINGS PLAN: Down {pl_pct:.0f}%. Stop adding money. Re-evaluate your thesis.",
                          follow_up)
        return result(MEDIUM, DECREASE,
                      f"REVIEW: Down {abs(pl_pct):.0f}%. Consider stopping the savings plan "
                      "if there is no strong conviction.",
                      f"Redirect the €{pos.monthly_investment:.0f}/mo to your core global ETF.")

    return result(LOW, DECREASE, "REVIEW: Unclassified position. Check if it still fits your strategy.")


def generate_suggestions(analysis: PortfolioAnalysis, gap: GapAnalysis | None = None) -> list[Suggestion]:
    """Portfolio-level suggestions, then one assessment per position by value.

    The per-position block starts with a heading entry and is only added when
    there are positions.
    """
    suggestions = _portfolio_suggestions(analysis, gap)
    if not analysis.positions:
        return suggestions

    suggestions.append(Suggestion(
        MEDIUM, INCREASE, PER_POSITION_HEADING,
        "Individual assessment of each position with recommended action:",
    ))
    for pos in sorted(analysis.positions, key=lambda p: p.current_value, reverse=True):
        suggestions.append(assess_position(
            pos, analysis.total_current_value, analysis.total_monthly_investment,
        ))
    return suggestions
