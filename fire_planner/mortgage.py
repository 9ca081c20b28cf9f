"""Mortgage amortization."""

from dataclasses import dataclass

from fire_planner.params import PropertyEvent


def monthly_mortgage_payment(principal: float, annual_rate: float, term_years: int) -> float:
    """Monthly payment of a fixed-rate amortizing loan (annuity).

    annual_rate is a percentage (3.2 = 3.2%).
    M = P × r(1+r)^n / ((1+r)^n − 1), r = annual_rate/100/12, n = term_years×12
    """
    if principal <= 0:
        return 0.0
    n = term_years * 12
    if annual_rate == 0:
        return principal / n
    r = annual_rate / 100 / 12
    factor = (1 + r) ** n
    return principal * r * factor / (factor - 1)


@dataclass
class MortgageSummary:
    label: str
    property_price: float
    loan_amount: float
    down_payment: float
    fees: float
    total_cash_needed: float
    monthly_payment: float
    mortgage_rate: float
    term_years: int


def calculate_mortgage(prop: PropertyEvent) -> MortgageSummary:
    """Mortgage details for a property (cash needed excludes additional costs)."""
    down_payment = prop.price * prop.down_payment_percent / 100
    fees = prop.price * prop.fees_percent / 100
    loan_amount = prop.price - down_payment
    return MortgageSummary(
        label=prop.label,
        property_price=prop.price,
        loan_amount=loan_amount,
        down_payment=down_payment,
        fees=fees,
        total_cash_needed=down_payment + fees,
        monthly_payment=monthly_mortgage_payment(loan_amount, prop.mortgage_rate, prop.mortgage_term),
        mortgage_rate=prop.mortgage_rate,
        term_years=prop.mortgage_term,
    )
