"""Plan and property parameters, validation and calendar helpers."""

import re
from dataclasses import dataclass, field

_START_DATE_RE = re.compile(r"^(\d{4})-(\d{2})$")


@dataclass(frozen=True)
class PlanConfig:

    current_age: int = 35
    target_age: int = 45

    # Spending target
    annual_expenses: float = 60_000
    withdrawal_rate: float = 0.04
    inflation_rate: float = 0.02

    # Starting balances
    current_portfolio: float = 9_000
    current_cash: float = 7_500

    # Monthly budget
    monthly_investment: float = 1_000  # total savings capacity before rent/mortgage
    monthly_rent: float = 0.0  # paid until the first property purchase
    rent_start_month: int = 1  # earlier months are rent-free
    parent_loan_years: int = 10  # interest-free, equal instalments

    return_rates: tuple[float, ...] = field(default=(0.05, 0.07, 0.09))

    # Calendar
    start_date: str = "2026-01"
    birth_month: int = 5

    # Purchase funding
    preserve_portfolio: bool = False
    # None = cash merged into the portfolio and grows at the modelled return
    cash_interest_rate: float | None = None

    @property
    def horizon_years(self) -> int:
        return self.target_age - self.current_age

    @property
    def horizon_months(self) -> int:
        return self.horizon_years * 12


@dataclass(frozen=True)
class PropertyEvent:

    price: float
    down_payment_percent: float = 20
    fees_percent: float = 12
    additional_costs: float = 0.0  # interior, renovation, etc.
    purchase_year: int = 1  # year offset from start
    purchase_month: int | None = None  # overrides purchase_year * 12 when set
    mortgage_rate: float = 3.2  # annual %
    mortgage_term: int = 30  # years
    label: str = "Property"

    @property
    def month_offset(self) -> int:
        if self.purchase_month is not None:
            return self.purchase_month
        return self.purchase_year * 12

    @property
    def loan_amount(self) -> float:
        return self.price * (1 - self.down_payment_percent / 100)


def parse_start_date(start_date: str) -> tuple[int, int]:
    """Parse "YYYY-MM" → (year, month). Raises ValueError if malformed."""
    m = _START_DATE_RE.match(start_date)
    if not m or not 1 <= int(m.group(2)) <= 12:
        raise ValueError(f"Invalid start date {start_date!r} (expected YYYY-MM)")
    return int(m.group(1)), int(m.group(2))


def add_months(start_date: str, months: int) -> str:
    """Calendar month `months` after start_date, as "YYYY-MM"."""
    year, month = parse_start_date(start_date)
    total = year * 12 + (month - 1) + months
    return f"{total // 12:04d}-{total % 12 + 1:02d}"


def age_at_month(current_age: int, start_date: str, birth_month: int, month: int) -> int:
    """Age in simulated month `month` (1-based).

    Counts birth-month anniversaries falling in months start+1 .. start+month,
    so a birthday in the current month already counts.
    """
    _, start_month = parse_start_date(start_date)
    first = (birth_month - start_month) % 12
    if first == 0:
        first = 12
    if month < first:
        return current_age
    return current_age + (month - first) // 12 + 1


def validate_config(config: PlanConfig) -> None:
    """Validate plan parameters. Raises ValueError on the first violation."""
    if config.target_age <= config.current_age:
        raise ValueError(
            f"Target age {config.target_age} must be greater than current age {config.current_age}"
        )
    for name in (
        "annual_expenses", "inflation_rate", "current_portfolio", "current_cash",
        "monthly_investment", "monthly_rent", "parent_loan_years",
    ):
        value = getattr(config, name)
        if value < 0:
            raise ValueError(f"{name} must be non-negative (got {value})")
    if config.withdrawal_rate <= 0:
        raise ValueError(f"withdrawal_rate must be positive (got {config.withdrawal_rate})")
    if config.cash_interest_rate is not None and config.cash_interest_rate < 0:
        raise ValueError(f"cash_interest_rate must be non-negative (got {config.cash_interest_rate})")
    if any(rate < 0 for rate in config.return_rates):
        raise ValueError(f"Return rates must be non-negative (got {list(config.return_rates)})")
    if not 1 <= config.birth_month <= 12:
        raise ValueError(f"birth_month must be 1-12 (got {config.birth_month})")
    if config.rent_start_month < 1:
        raise ValueError(f"rent_start_month must be >= 1 (got {config.rent_start_month})")
    parse_start_date(config.start_date)


def validate_property(prop: PropertyEvent, horizon_months: int) -> None:
    """Validate a property event against the simulated horizon."""
    if prop.price < 0 or prop.additional_costs < 0:
        raise ValueError(f"{prop.label}: price and additional costs must be non-negative")
    for name in ("down_payment_percent", "fees_percent"):
        value = getattr(prop, name)
        if not 0 <= value <= 100:
            raise ValueError(f"{prop.label}: {name} must be within 0-100 (got {value})")
    if prop.mortgage_rate < 0:
        raise ValueError(f"{prop.label}: mortgage rate must be non-negative (got {prop.mortgage_rate})")
    if prop.loan_amount > 0 and prop.mortgage_term <= 0:
        raise ValueError(f"{prop.label}: mortgage term must be positive (got {prop.mortgage_term})")
    month = prop.month_offset
    if not 1 <= month <= horizon_months:
        raise ValueError(
            f"{prop.label}: purchase month {month} is outside the simulated range 1-{horizon_months}"
        )
