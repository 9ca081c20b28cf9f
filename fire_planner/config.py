"""TOML config loader with CLI > config > default resolution."""

import argparse
import dataclasses
import sys
import tomllib
from pathlib import Path
from typing import Callable

from fire_planner.params import PlanConfig, PropertyEvent

DEFAULT_CONFIG_PATH = Path("config.toml")

DEFAULTS = {
    "age": 35,
    "target_age": 45,
    "expenses": 60_000.0,
    "withdrawal_rate": 0.04,
    "inflation": 0.02,
    "portfolio": 9_000.0,
    "cash": 7_500.0,
    "cash_rate": None,
    "monthly": 1_000.0,
    "rent": 0.0,
    "rent_start_month": 1,
    "parent_loan_years": 10,
    "preserve_portfolio": False,
    "rates": "5,7,9",
    "start_date": "2026-01",
    "birth_month": 5,
    "mortgage_rate": 3.2,
    "flat_price": 500_000.0,
    "flat_down": 20.0,
    "flat_fees": 12.0,
    "flat_interior": 0.0,
    "flat_year": 3,
    "flat_term": 30,
    "finca_price": 500_000.0,
    "finca_down": 30.0,
    "finca_fees": 12.0,
    "finca_year": 7,
    "finca_term": 25,
}

FLAT_LABEL = "Flat (primary residence)"
FINCA_LABEL = "Finca (second home)"

_PROPERTY_FIELDS = {f.name for f in dataclasses.fields(PropertyEvent)}


def load_config(path: Path | None = None) -> dict:
    """Load TOML config file. Returns empty dict if file doesn't exist."""
    if path is None:
        path = DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        print(f"Failed to read config file {path}: {e}", file=sys.stderr)
        raise SystemExit(1)
    # Normalize rates: TOML list [5, 7, 9] → CLI-compatible "5,7,9"
    if isinstance(raw.get("rates"), list):
        raw["rates"] = ",".join(str(x) for x in raw["rates"])
    return raw


def create_parser(description: str) -> argparse.ArgumentParser:
    """Create argparse parser with shared plan flags."""
    d = DEFAULTS
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", type=Path, default=None, help="Config file path (default: config.toml)")
    parser.add_argument("--age", type=int, default=None, help=f"Current age (default: {d['age']})")
    parser.add_argument("--target-age", type=int, default=None, help=f"Target FIRE age (default: {d['target_age']})")
    parser.add_argument("--expenses", type=float, default=None, help=f"Annual expenses (default: {d['expenses']:.0f})")
    parser.add_argument("--withdrawal-rate", type=float, default=None, help=f"Safe withdrawal rate (default: {d['withdrawal_rate']})")
    parser.add_argument("--inflation", type=float, default=None, help=f"Annual inflation rate (default: {d['inflation']})")
    parser.add_argument("--portfolio", type=float, default=None, help=f"Current portfolio value (default: {d['portfolio']:.0f})")
    parser.add_argument("--cash", type=float, default=None, help=f"Current cash savings (default: {d['cash']:.0f})")
    parser.add_argument("--cash-rate", type=float, default=None, help="Annual interest on cash, tracked separately from the portfolio (default: cash invested with the portfolio)")
    parser.add_argument("--monthly", type=float, default=None, help=f"Monthly savings capacity before rent/mortgage (default: {d['monthly']:.0f})")
    parser.add_argument("--rent", type=float, default=None, help=f"Monthly rent until the first purchase (default: {d['rent']:.0f})")
    parser.add_argument("--rent-start-month", type=int, default=None, help=f"Month rent starts; earlier months are rent-free (default: {d['rent_start_month']})")
    parser.add_argument("--parent-loan-years", type=int, default=None, help=f"Years to repay a parent loan (default: {d['parent_loan_years']})")
    parser.add_argument("--preserve-portfolio", action="store_true", default=None, help="Never sell the portfolio for a purchase; borrow the shortfall instead")
    parser.add_argument("--rates", type=str, default=None, help=f"Return rates to model, comma-separated %% (default: {d['rates']})")
    parser.add_argument("--start-date", type=str, default=None, help=f"Simulation start month YYYY-MM (default: {d['start_date']})")
    parser.add_argument("--birth-month", type=int, default=None, help=f"Birth month 1-12 (default: {d['birth_month']})")
    parser.add_argument("--mortgage-rate", type=float, default=None, help=f"Annual mortgage rate %% (default: {d['mortgage_rate']})")
    parser.add_argument("--flat-price", type=float, default=None, help=f"Flat price, 0 to skip (default: {d['flat_price']:.0f})")
    parser.add_argument("--flat-down", type=float, default=None, help=f"Flat down payment %% (default: {d['flat_down']:.0f})")
    parser.add_argument("--flat-fees", type=float, default=None, help=f"Flat purchase fees %% (default: {d['flat_fees']:.0f})")
    parser.add_argument("--flat-interior", type=float, default=None, help=f"Flat interior/renovation budget (default: {d['flat_interior']:.0f})")
    parser.add_argument("--flat-year", type=int, default=None, help=f"Year to buy the flat, offset from start (default: {d['flat_year']})")
    parser.add_argument("--flat-term", type=int, default=None, help=f"Flat mortgage term in years (default: {d['flat_term']})")
    parser.add_argument("--finca-price", type=float, default=None, help=f"Finca price, 0 to skip (default: {d['finca_price']:.0f})")
    parser.add_argument("--finca-down", type=float, default=None, help=f"Finca down payment %% (default: {d['finca_down']:.0f})")
    parser.add_argument("--finca-fees", type=float, default=None, help=f"Finca purchase fees %% (default: {d['finca_fees']:.0f})")
    parser.add_argument("--finca-year", type=int, default=None, help=f"Year to buy the finca, offset from start (default: {d['finca_year']})")
    parser.add_argument("--finca-term", type=int, default=None, help=f"Finca mortgage term in years (default: {d['finca_term']})")
    return parser


def parse_rates(s: str) -> tuple[float, ...]:
    """Parse "5,7,9" (percent) → (0.05, 0.07, 0.09)."""
    rates = tuple(float(x.strip()) / 100 for x in str(s).split(",") if x.strip())
    if not rates:
        raise ValueError(f"No return rates given: {s!r}")
    return rates


def resolve(args: argparse.Namespace, config: dict) -> dict:
    """Resolve values with priority: CLI flag > config.toml > hardcoded default."""
    resolved = {}
    for key, default in DEFAULTS.items():
        cli_val = getattr(args, key, None)
        resolved[key] = cli_val if cli_val is not None else config.get(key, default)
    return resolved


def build_config(r: dict) -> PlanConfig:
    """Build PlanConfig from resolved config dict."""
    cash_rate = r["cash_rate"]
    return PlanConfig(
        current_age=int(r["age"]),
        target_age=int(r["target_age"]),
        annual_expenses=float(r["expenses"]),
        withdrawal_rate=float(r["withdrawal_rate"]),
        inflation_rate=float(r["inflation"]),
        current_portfolio=float(r["portfolio"]),
        current_cash=float(r["cash"]),
        monthly_investment=float(r["monthly"]),
        monthly_rent=float(r["rent"]),
        rent_start_month=int(r["rent_start_month"]),
        parent_loan_years=int(r["parent_loan_years"]),
        return_rates=parse_rates(r["rates"]),
        start_date=str(r["start_date"]),
        birth_month=int(r["birth_month"]),
        preserve_portfolio=bool(r["preserve_portfolio"]),
        cash_interest_rate=float(cash_rate) if cash_rate is not None else None,
    )


def _property_from_table(table: dict, mortgage_rate: float) -> PropertyEvent:
    unknown = set(table) - _PROPERTY_FIELDS
    if unknown:
        raise ValueError(f"Unknown property keys: {', '.join(sorted(unknown))}")
    if "price" not in table:
        raise ValueError("Property entry without a price")
    return PropertyEvent(**{"mortgage_rate": mortgage_rate, **table})


def build_properties(r: dict, config: dict) -> list[PropertyEvent]:
    """Property list: TOML [[properties]] when present, else flat/finca flags.

    A price of 0 skips the property.
    """
    mortgage_rate = float(r["mortgage_rate"])
    if "properties" in config:
        props = [_property_from_table(t, mortgage_rate) for t in config["properties"]]
        return [p for p in props if p.price > 0]

    properties = []
    if r["flat_price"] > 0:
        properties.append(PropertyEvent(
            price=float(r["flat_price"]),
            down_payment_percent=float(r["flat_down"]),
            fees_percent=float(r["flat_fees"]),
            additional_costs=float(r["flat_interior"]),
            purchase_year=int(r["flat_year"]),
            mortgage_rate=mortgage_rate,
            mortgage_term=int(r["flat_term"]),
            label=FLAT_LABEL,
        ))
    if r["finca_price"] > 0:
        properties.append(PropertyEvent(
            price=float(r["finca_price"]),
            down_payment_percent=float(r["finca_down"]),
            fees_percent=float(r["finca_fees"]),
            purchase_year=int(r["finca_year"]),
            mortgage_rate=mortgage_rate,
            mortgage_term=int(r["finca_term"]),
            label=FINCA_LABEL,
        ))
    return properties


def parse_args(
    description: str,
    add_args_fn: Callable[[argparse.ArgumentParser], None] | None = None,
) -> tuple[PlanConfig, list[PropertyEvent], argparse.Namespace]:
    """Parse CLI args, load config, resolve values.

    Returns (plan_config, properties, namespace).
    namespace: raw argparse.Namespace (for extra CLI args added via add_args_fn).
    """
    parser = create_parser(description)
    if add_args_fn:
        add_args_fn(parser)
    args = parser.parse_args()
    config = load_config(args.config)
    r = resolve(args, config)
    return build_config(r), build_properties(r, config), args
