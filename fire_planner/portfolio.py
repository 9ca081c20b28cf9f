"""Brokerage CSV parsing and holding classification (Scalable Capital export)."""

import csv
import io
import re
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path

CATEGORIES = (
    "global-etf",
    "regional-etf",
    "sector-etf",
    "bond-etf",
    "commodity",
    "individual-stock",
    "crypto",
    "other",
)

# Share of monthly investment or portfolio value above which a position is flagged
CONCENTRATION_LIMIT = 0.25

_ETF_KEYWORDS = (
    "etf", "ucits", "(acc)", "(dist)", "xtrackers", "ishares", "vanguard",
    "vaneck", "hanetf", "amundi", "spdr", "invesco", "lyxor", "scalable msci",
    "scalable s&p", "sc msci", "x msci", "x ie ", "ish ", "vnek ", "x em ",
)
_COMMODITY_KEYWORDS = ("gold", "silver", "commodity", "commodities", "physical")
_CRYPTO_KEYWORDS = ("bitcoin", "crypto", "ethereum")
_BOND_KEYWORDS = ("bond", "treasury", "aggregate", "fixed income")
_SECTOR_KEYWORDS = (
    "technology", "healthcare", "clean energy", "semiconductor", "cyber",
    "gaming", "automation", "artificial intelligence", "blockchain", "water",
    "cloud", "defence", "defense", "internet", "innovation", "momentum",
    "next generation", "digital", "robotics", "battery", "infrastructure",
    "real estate", "reit",
)
_REGIONAL_KEYWORDS = (
    "europe", "european", "asia", "emerging", "japan", "china", "africa",
    "india", "latin", "frontier", "pacific", "euro stoxx", "dax", "s&p 500",
    "nasdaq", "ftse 100",
)
_GLOBAL_KEYWORDS = (
    "world", "global", "all-world", "acwi", "msci world", "ftse all",
    "ac world", "all world",
)

# Region rules, checked in order; short abbreviations only match as whole words
_REGION_RULES: tuple[tuple[str, re.Pattern], ...] = (
    ("Global", re.compile(r"world|global|acwi")),
    ("North America", re.compile(r"s&p 500|nasdaq|\bus\b|u\.s\.|america")),
    ("Europe", re.compile(r"europe|euro stoxx|\bdax\b|ftse 100")),
    ("Emerging Markets", re.compile(r"emerging|\bem\b")),
    ("Africa", re.compile(r"africa")),
    ("Asia-Pacific", re.compile(r"asia|pacific|japan|china|india")),
    ("Latin America", re.compile(r"latin")),
)

_COUNTRY_REGIONS = {
    "US": "North America", "CA": "North America",
    "DE": "Europe", "NL": "Europe", "FR": "Europe", "ES": "Europe", "IT": "Europe",
    "GB": "Europe", "IE": "Europe", "DK": "Europe", "NO": "Europe", "SE": "Europe",
    "FI": "Europe", "CH": "Europe", "AT": "Europe", "BE": "Europe", "PT": "Europe",
    "LU": "Europe",
    "JP": "Asia-Pacific", "KR": "Asia-Pacific", "AU": "Asia-Pacific", "HK": "Asia-Pacific",
    "CN": "Asia-Pacific", "TW": "Asia-Pacific", "SG": "Asia-Pacific",
    "BR": "Latin America", "MX": "Latin America",
    "ZA": "Africa", "NG": "Africa", "EG": "Africa", "KE": "Africa",
}


@dataclass
class Transaction:
    date: str
    time: str
    status: str
    reference: str
    description: str
    asset_type: str
    type: str  # "Savings plan", "Buy", "Sell", "Security transfer", ...
    isin: str
    shares: float
    price: float
    amount: float
    fee: float
    tax: float
    currency: str


@dataclass
class Position:
    isin: str
    name: str
    total_shares: float
    total_invested: float
    average_price: float
    current_price: float
    current_value: float
    monthly_investment: float
    transaction_count: int
    category: str
    region: str


@dataclass
class Allocation:
    value: float = 0.0
    percent: float = 0.0


@dataclass
class PortfolioAnalysis:
    total_invested: float
    total_current_value: float
    total_monthly_investment: float
    positions: list[Position]
    category_allocation: dict[str, Allocation] = field(default_factory=dict)
    region_allocation: dict[str, Allocation] = field(default_factory=dict)
    concentration_warnings: list[str] = field(default_factory=list)

    @property
    def position_count(self) -> int:
        return len(self.positions)


def parse_european_number(value: str | None) -> float:
    """Parse European number format: "1.234,56" → 1234.56. Blank/invalid → 0."""
    if value is None or not value.strip():
        return 0.0
    cleaned = value.strip().replace(".", "").replace(",", ".")
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def parse_scalable_csv_string(raw: str) -> list[Transaction]:
    """Parse a semicolon-delimited export into executed transactions with an ISIN."""
    raw = raw.removeprefix("\ufeff")
    lines = raw.splitlines()
    # Exports may start with delimiter-only junk rows before the header
    header_idx = next(
        (i for i, line in enumerate(lines) if line.lower().startswith("date;")), 0,
    )
    reader = csv.DictReader(io.StringIO("\n".join(lines[header_idx:])), delimiter=";")

    transactions = []
    for row in reader:
        row = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}
        isin = row.get("isin", "")
        status = row.get("status", "")
        if not isin or (status and status.lower() != "executed"):
            continue
        transactions.append(Transaction(
            date=row.get("date", ""),
            time=row.get("time", ""),
            status=status,
            reference=row.get("reference", ""),
            description=row.get("description", ""),
            asset_type=row.get("assetType", ""),
            type=row.get("type", ""),
            isin=isin,
            shares=parse_european_number(row.get("shares")),
            price=parse_european_number(row.get("price")),
            amount=parse_european_number(row.get("amount")),
            fee=parse_european_number(row.get("fee")),
            tax=parse_european_number(row.get("tax")),
            currency=row.get("currency") or "EUR",
        ))
    return transactions


def parse_scalable_csv(path: Path) -> list[Transaction]:
    return parse_scalable_csv_string(path.read_text(encoding="utf-8"))


def group_by_isin(transactions: list[Transaction]) -> dict[str, list[Transaction]]:
    groups: dict[str, list[Transaction]] = defaultdict(list)
    for tx in transactions:
        groups[tx.isin].append(tx)
    return dict(groups)


def monthly_investment_rate(transactions: list[Transaction]) -> float:
    """Current savings plan rate: amount of the most recent "Savings plan" execution.

    Averaging history is unreliable because plans get started, stopped and
    changed over the span of an export.
    """
    plans = [t for t in transactions if t.type == "Savings plan"]
    if not plans:
        return 0.0
    latest = max(plans, key=lambda t: t.date)
    return abs(latest.amount)


def _contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def categorize_asset(name: str, asset_type: str = "") -> str:
    """Allocation category from the security name and CSV asset type."""
    name = name.lower()
    quote_type = asset_type.upper()
    # Official exports label everything "Security"; only specific types are informative
    if quote_type in ("SECURITY", "CASH"):
        quote_type = ""

    if quote_type == "ETC" or _contains_any(name, _COMMODITY_KEYWORDS):
        return "commodity"
    if _contains_any(name, _CRYPTO_KEYWORDS):
        return "crypto"
    if quote_type == "EQUITY":
        return "individual-stock"

    is_etf = quote_type in ("ETF", "MUTUALFUND") or _contains_any(name, _ETF_KEYWORDS)
    if not is_etf:
        return "other"
    if _contains_any(name, _BOND_KEYWORDS):
        return "bond-etf"
    if _contains_any(name, _SECTOR_KEYWORDS):
        return "sector-etf"
    if _contains_any(name, _REGIONAL_KEYWORDS):
        return "regional-etf"
    if _contains_any(name, _GLOBAL_KEYWORDS):
        return "global-etf"
    return "regional-etf"


def determine_region(name: str, isin: str = "") -> str:
    """Region from name keywords, falling back to the ISIN country prefix."""
    text = name.lower()
    for region, pattern in _REGION_RULES:
        if pattern.search(text):
            return region
    return _COUNTRY_REGIONS.get(isin[:2].upper(), "Other")


def _allocation(positions: list[Position], key: str, total_value: float) -> dict[str, Allocation]:
    result: dict[str, Allocation] = {}
    for pos in positions:
        result.setdefault(getattr(pos, key), Allocation()).value += pos.current_value
    for alloc in result.values():
        alloc.percent = alloc.value / total_value * 100 if total_value > 0 else 0.0
    return result


def analyze_portfolio(transactions: list[Transaction]) -> PortfolioAnalysis:
    """Aggregate transactions into positions with allocation and concentration checks."""
    positions = []
    for isin, txs in group_by_isin(transactions).items():
        name = txs[0].description or isin
        purchases = [t for t in txs if t.type in ("Savings plan", "Buy")]
        sells = [t for t in txs if t.type == "Sell"]
        # Transfers and corporate actions move shares without touching cost basis
        moves = [t for t in txs if t.type in ("Security transfer", "Corporate action")]

        total_shares = (
            sum(t.shares for t in purchases)
            + sum(t.shares for t in moves)
            - sum(t.shares for t in sells)
        )
        if total_shares <= 0:
            continue
        total_invested = sum(abs(t.amount) for t in purchases) - sum(abs(t.amount) for t in sells)

        priced = [t for t in purchases + sells if t.price > 0]
        last_price = max(priced, key=lambda t: t.date).price if priced else 0.0
        average_price = max(0.0, total_invested) / total_shares
        current_price = last_price or average_price

        positions.append(Position(
            isin=isin,
            name=name,
            total_shares=total_shares,
            total_invested=max(0.0, total_invested),
            average_price=average_price,
            current_price=current_price,
            current_value=total_shares * current_price,
            monthly_investment=monthly_investment_rate(txs),
            transaction_count=len(txs),
            category=categorize_asset(name, txs[0].asset_type),
            region=determine_region(name, isin),
        ))

    total_value = sum(p.current_value for p in positions)
    total_monthly = sum(p.monthly_investment for p in positions)

    warnings = []
    for pos in positions:
        if total_monthly > 0 and pos.monthly_investment / total_monthly > CONCENTRATION_LIMIT:
            pct = pos.monthly_investment / total_monthly * 100
            warnings.append(f"{pos.name} ({pos.isin}): {pct:.1f}% of monthly investment")
        if total_value > 0 and pos.current_value / total_value > CONCENTRATION_LIMIT:
            pct = pos.current_value / total_value * 100
            warnings.append(f"{pos.name} ({pos.isin}): {pct:.1f}% of portfolio value")

    return PortfolioAnalysis(
        total_invested=sum(p.total_invested for p in positions),
        total_current_value=total_value,
        total_monthly_investment=total_monthly,
        positions=positions,
        category_allocation=_allocation(positions, "category", total_value),
        region_allocation=_allocation(positions, "region", total_value),
        concentration_warnings=warnings,
    )
