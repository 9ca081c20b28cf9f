"""Core simulation engine: month-by-month scenario builder."""

from dataclasses import dataclass

from fire_planner.mortgage import monthly_mortgage_payment
from fire_planner.params import (
    PlanConfig,
    PropertyEvent,
    add_months,
    age_at_month,
    validate_config,
    validate_property,
)
from fire_planner.targets import inflation_adjusted_fire_number_at_month, property_cash_needed

# Obligation kinds
MORTGAGE = "mortgage"
PARENT_LOAN = "parent_loan"

# Phase labels
PHASE_RENT_FREE = "Rent-free"
PHASE_RENTING = "Renting"
PHASE_INVESTING = "Investing"
PHASE_MORTGAGE_PARENT_LOAN = "Mortgage + Parent Loan"
PHASE_PARENT_LOAN = "Parent Loan"
PHASE_MORTGAGE_ONLY = "Mortgage Only"
PHASE_POST_MORTGAGE = "Post-Mortgage"

SCENARIO_LABELS = {
    0.05: "Conservative (5%)",
    0.07: "Moderate (7%)",
    0.09: "Optimistic (9%)",
}


def scenario_label(return_rate: float) -> str:
    return SCENARIO_LABELS.get(return_rate, f"{return_rate * 100:.0f}% return")


@dataclass(frozen=True)
class Obligation:
    """Recurring payment originated in start_month, charged in start_month+1 .. end_month."""

    kind: str
    payment: float
    start_month: int
    end_month: int
    label: str = ""

    def is_charged(self, month: int) -> bool:
        return self.start_month < month <= self.end_month

    def is_held(self, month: int) -> bool:
        return self.start_month <= month <= self.end_month


@dataclass(frozen=True)
class MonthProjection:
    month: int  # 1-based offset from start
    date: str  # "2026-03"
    age: int
    phase: str
    start_balance: float  # portfolio + cash
    start_cash: float
    contribution: float
    monthly_cash_saving: float  # part of the contribution kept as cash
    growth: float
    property_withdrawal: float
    property_label: str | None
    parent_loan: float  # originated this month
    end_balance: float
    end_cash: float
    monthly_rent: float
    monthly_mortgage: float
    monthly_parent_loan: float
    monthly_investing: float


@dataclass(frozen=True)
class YearProjection:
    year: int
    age: int
    start_balance: float
    contributions: float
    growth: float
    property_withdrawal: float
    property_label: str | None
    parent_loan: float
    end_balance: float


@dataclass(frozen=True)
class ScenarioPhase:
    label: str
    from_month: int
    to_month: int
    from_age: int
    to_age: int
    monthly_rent: float
    monthly_mortgage: float
    monthly_parent_loan: float
    monthly_investing: float


@dataclass
class Scenario:
    label: str
    return_rate: float
    months: list[MonthProjection]
    years: list[YearProjection]
    phases: list[ScenarioPhase]
    obligations: list[Obligation]
    fire_reached_month: int | None
    fire_reached_date: str | None
    fire_reached_age: int | None
    fire_reached_year: int | None
    final_balance: float
    feasible: bool
    parent_loan_total: float


def _charged(obligations: list[Obligation], kind: str, month: int) -> float:
    return sum(o.payment for o in obligations if o.kind == kind and o.is_charged(month))


def _held_count(obligations: list[Obligation], kind: str, month: int) -> int:
    return sum(1 for o in obligations if o.kind == kind and o.is_held(month))


def rent_due(config: PlanConfig, month: int, first_purchase_month: int | None) -> bool:
    """Rent runs from rent_start_month until (excluding) the first purchase month."""
    if month < config.rent_start_month:
        return False
    return first_purchase_month is None or month < first_purchase_month


def phase_label(
    month: int,
    config: PlanConfig,
    first_purchase_month: int | None,
    obligations: list[Obligation],
) -> str:
    """Budget phase of a month, from the schedule of boundaries only."""
    if first_purchase_month is None or month < first_purchase_month:
        if month < config.rent_start_month:
            return PHASE_RENT_FREE
        if config.monthly_rent > 0:
            return PHASE_RENTING
        return PHASE_INVESTING
    has_mortgage = _held_count(obligations, MORTGAGE, month) > 0
    if _held_count(obligations, PARENT_LOAN, month) > 0:
        return PHASE_MORTGAGE_PARENT_LOAN if has_mortgage else PHASE_PARENT_LOAN
    if has_mortgage:
        return PHASE_MORTGAGE_ONLY
    return PHASE_POST_MORTGAGE


def build_scenario(
    config: PlanConfig,
    properties: list[PropertyEvent],
    return_rate: float,
) -> Scenario:
    """Simulate the plan month by month at a fixed annual return.

    Growth is credited on the start-of-month balance; the month's contribution
    lands at month end and grows from the following month. Each property fires
    once in its scheduled month: cash, then the portfolio, covers the
    acquisition cost and any shortfall becomes an interest-free parent loan
    repaid in equal instalments. With preserve_portfolio the whole cost is
    borrowed.
    """
    validate_config(config)
    horizon = config.horizon_months
    for prop in properties:
        validate_property(prop, horizon)

    schedule: dict[int, list[PropertyEvent]] = {}
    for prop in properties:
        schedule.setdefault(prop.month_offset, []).append(prop)
    first_purchase_month = min(schedule) if schedule else None
    last_purchase_month = max(schedule) if schedule else 0

    # Without a cash rate the cash is invested alongside the portfolio
    separate_cash = config.cash_interest_rate is not None
    if separate_cash:
        portfolio = config.current_portfolio
        cash = config.current_cash
        monthly_cash_rate = config.cash_interest_rate / 12
    else:
        portfolio = config.current_portfolio + config.current_cash
        cash = 0.0
        monthly_cash_rate = 0.0
    monthly_rate = return_rate / 12

    obligations: list[Obligation] = []
    months: list[MonthProjection] = []
    feasible = True
    parent_loan_total = 0.0
    fire_reached_month: int | None = None

    for m in range(1, horizon + 1):
        age = age_at_month(config.current_age, config.start_date, config.birth_month, m)

        rent = config.monthly_rent if rent_due(config, m, first_purchase_month) else 0.0
        mortgage = _charged(obligations, MORTGAGE, m)
        parent_repayment = _charged(obligations, PARENT_LOAN, m)
        investing = max(0.0, config.monthly_investment - rent - mortgage - parent_repayment)

        start_portfolio, start_cash = portfolio, cash
        growth = start_portfolio * monthly_rate + start_cash * monthly_cash_rate
        cash_saving = investing if separate_cash and m <= last_purchase_month else 0.0
        portfolio = start_portfolio * (1 + monthly_rate) + investing - cash_saving
        cash = start_cash * (1 + monthly_cash_rate) + cash_saving

        withdrawal = 0.0
        originated = 0.0
        labels: list[str] = []
        for prop in schedule.get(m, []):
            cost = property_cash_needed(prop)
            shortfall = cost
            if not config.preserve_portfolio:
                from_cash = min(max(cash, 0.0), shortfall)
                cash -= from_cash
                shortfall -= from_cash
                from_portfolio = min(max(portfolio, 0.0), shortfall)
                portfolio -= from_portfolio
                shortfall -= from_portfolio
            withdrawal += cost - shortfall
            labels.append(prop.label)

            payment = monthly_mortgage_payment(prop.loan_amount, prop.mortgage_rate, prop.mortgage_term)
            if payment > 0:
                obligations.append(Obligation(
                    MORTGAGE, payment, m, m + prop.mortgage_term * 12, prop.label,
                ))
            if shortfall > 0:
                originated += shortfall
                parent_loan_total += shortfall
                if config.parent_loan_years > 0:
                    repayment_months = config.parent_loan_years * 12
                    obligations.append(Obligation(
                        PARENT_LOAN, shortfall / repayment_months, m, m + repayment_months, prop.label,
                    ))

        # Guard only: draws above are capped at the available balances
        if portfolio < 0 or cash < 0:
            feasible = False
            portfolio = max(0.0, portfolio)
            cash = max(0.0, cash)

        end_balance = portfolio + cash
        if fire_reached_month is None:
            target = inflation_adjusted_fire_number_at_month(
                config.annual_expenses, config.withdrawal_rate, config.inflation_rate, m,
            )
            if end_balance >= target:
                fire_reached_month = m

        months.append(MonthProjection(
            month=m,
            date=add_months(config.start_date, m),
            age=age,
            phase=phase_label(m, config, first_purchase_month, obligations),
            start_balance=start_portfolio + start_cash,
            start_cash=start_cash,
            contribution=investing,
            monthly_cash_saving=cash_saving,
            growth=growth,
            property_withdrawal=withdrawal,
            property_label=", ".join(labels) if labels else None,
            parent_loan=originated,
            end_balance=end_balance,
            end_cash=cash,
            monthly_rent=rent,
            monthly_mortgage=mortgage,
            monthly_parent_loan=parent_repayment,
            monthly_investing=investing,
        ))

    reached = months[fire_reached_month - 1] if fire_reached_month is not None else None
    return Scenario(
        label=scenario_label(return_rate),
        return_rate=return_rate,
        months=months,
        years=aggregate_years(months),
        phases=summarize_phases(months, obligations),
        obligations=obligations,
        fire_reached_month=fire_reached_month,
        fire_reached_date=reached.date if reached else None,
        fire_reached_age=reached.age if reached else None,
        fire_reached_year=(fire_reached_month - 1) // 12 + 1 if reached else None,
        final_balance=months[-1].end_balance,
        feasible=feasible,
        parent_loan_total=parent_loan_total,
    )


def aggregate_years(months: list[MonthProjection]) -> list[YearProjection]:
    """Roll 12-month blocks up into yearly records."""
    years = []
    for i in range(0, len(months), 12):
        block = months[i:i + 12]
        labels = [mp.property_label for mp in block if mp.property_label]
        years.append(YearProjection(
            year=i // 12 + 1,
            age=block[-1].age,
            start_balance=block[0].start_balance,
            contributions=sum(mp.contribution for mp in block),
            growth=sum(mp.growth for mp in block),
            property_withdrawal=sum(mp.property_withdrawal for mp in block),
            property_label=", ".join(labels) if labels else None,
            parent_loan=sum(mp.parent_loan for mp in block),
            end_balance=block[-1].end_balance,
        ))
    return years


def summarize_phases(
    months: list[MonthProjection], obligations: list[Obligation],
) -> list[ScenarioPhase]:
    """Merge adjacent months with the same obligation mix into phases.

    Monthly amounts of a phase are those of its last month.
    """
    def key(mp: MonthProjection) -> tuple[str, int, int]:
        return (
            mp.phase,
            _held_count(obligations, MORTGAGE, mp.month),
            _held_count(obligations, PARENT_LOAN, mp.month),
        )

    phases = []
    start = 0
    for i in range(1, len(months) + 1):
        if i < len(months) and key(months[i]) == key(months[start]):
            continue
        first, last = months[start], months[i - 1]
        phases.append(ScenarioPhase(
            label=first.phase,
            from_month=first.month,
            to_month=last.month,
            from_age=first.age,
            to_age=last.age,
            monthly_rent=last.monthly_rent,
            monthly_mortgage=last.monthly_mortgage,
            monthly_parent_loan=last.monthly_parent_loan,
            monthly_investing=last.monthly_investing,
        ))
        start = i
    return phases


def build_all_scenarios(
    config: PlanConfig, properties: list[PropertyEvent],
) -> list[Scenario]:
    """One independent scenario per configured return rate."""
    return [build_scenario(config, properties, rate) for rate in config.return_rates]
