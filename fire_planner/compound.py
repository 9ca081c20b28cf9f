"""Compounding helpers for a fixed-rate, fixed-contribution savings plan.

All rates are annual fractions (0.07 = 7%) compounded monthly; contributions
land at the end of each month.
"""


def future_value(
    present_value: float,
    monthly_contribution: float,
    annual_rate: float,
    months: int,
) -> float:
    """Future value with monthly compounding.

    FV = PV × (1+r)^n + PMT × ((1+r)^n − 1) / r, with r = annual_rate / 12.
    """
    if months <= 0:
        return present_value
    if annual_rate == 0:
        return present_value + monthly_contribution * months
    r = annual_rate / 12
    factor = (1 + r) ** months
    return present_value * factor + monthly_contribution * (factor - 1) / r


def required_monthly(
    present_value: float,
    target_value: float,
    annual_rate: float,
    months: int,
) -> float:
    """Monthly contribution needed to grow present_value into target_value.

    Never negative: a surplus is reported as 0.
    """
    if months <= 0:
        return max(0.0, target_value - present_value)
    if annual_rate == 0:
        return max(0.0, (target_value - present_value) / months)
    r = annual_rate / 12
    factor = (1 + r) ** months
    pmt = (target_value - present_value * factor) * r / (factor - 1)
    return max(0.0, pmt)


def months_to_target(
    present_value: float,
    monthly_contribution: float,
    annual_rate: float,
    target_value: float,
    max_months: int = 12 * 60,
) -> int | None:
    """First month at which the balance reaches target_value, or None."""
    if present_value >= target_value:
        return 0
    balance = present_value
    monthly_rate = annual_rate / 12
    for month in range(1, max_months + 1):
        balance = balance * (1 + monthly_rate) + monthly_contribution
        if balance >= target_value:
            return month
    return None
