"""FIRE target and property acquisition cost calculators."""

from fire_planner.params import PropertyEvent


def fire_number(annual_expenses: float, withdrawal_rate: float) -> float:
    """Basic FIRE number: annual expenses / withdrawal rate."""
    return annual_expenses / withdrawal_rate


def inflation_adjusted_fire_number(
    annual_expenses: float,
    withdrawal_rate: float,
    inflation_rate: float,
    years: float,
) -> float:
    """FIRE number with expenses inflated over `years` (fractional years allowed)."""
    adjusted_expenses = annual_expenses * (1 + inflation_rate) ** years
    return adjusted_expenses / withdrawal_rate


def inflation_adjusted_fire_number_at_month(
    annual_expenses: float,
    withdrawal_rate: float,
    inflation_rate: float,
    month: int,
) -> float:
    """Inflation-adjusted FIRE number `month` months from start (continuous curve)."""
    return inflation_adjusted_fire_number(
        annual_expenses, withdrawal_rate, inflation_rate, month / 12,
    )


def property_cash_needed(prop: PropertyEvent) -> float:
    """One-off cash for a purchase: down payment + fees + additional costs."""
    return prop.price * (prop.down_payment_percent + prop.fees_percent) / 100 + prop.additional_costs
