"""Static symbol catalog with per-venue availability.

Stablecoins are never merged with fiat or each other (USDT != USD != USDC).
Read-only after import; safe to share across requests without locking.
"""

from __future__ import annotations

from tokenimpact.models import SymbolInfo

# Lower is listed first
BASE_PRIORITY: dict[str, int] = {
    "BTC": 1,
    "ETH": 2,
    "SOL": 3,
    "XRP": 4,
    "DOGE": 5,
    "ADA": 6,
    "AVAX": 7,
    "DOT": 8,
    "LINK": 9,
    "MATIC": 10,
    "LTC": 11,
    "SHIB": 12,
    "UNI": 13,
    "ATOM": 14,
    "XLM": 15,
}

_ALL = ("binance", "coinbase", "kraken")
_NO_BINANCE = ("coinbase", "kraken")
_NO_COINBASE = ("binance", "kraken")

# (quote, venues, bases)
_CATALOG_ROWS: list[tuple[str, tuple[str, ...], tuple[str, ...]]] = [
    # USD pairs: Coinbase + Kraken
    (
        "USD",
        _NO_BINANCE,
        (
            "BTC", "ETH", "SOL", "XRP", "DOGE", "ADA", "AVAX", "DOT", "LINK", "MATIC",
            "LTC", "SHIB", "UNI", "ATOM", "XLM", "AAVE", "ALGO", "APE", "ARB", "OP",
        ),
    ),
    (
        "USDT",
        _ALL,
        (
            "BTC", "ETH", "SOL", "XRP", "DOGE", "ADA", "AVAX", "DOT", "LINK", "MATIC",
            "LTC", "UNI", "ATOM", "XLM", "ALGO", "ARB", "OP", "NEAR", "SAND", "MANA",
            "CRV", "PEPE", "WIF",
        ),
    ),
    ("USDT", _NO_COINBASE, ("SHIB", "AAVE", "APE", "FTM")),
    ("USDC", _ALL, ("BTC", "ETH", "SOL")),
    ("EUR", _ALL, ("BTC", "ETH", "SOL", "XRP", "DOGE", "ADA")),
    ("GBP", _ALL, ("BTC", "ETH")),
    ("BTC", _ALL, ("ETH", "SOL", "XRP", "DOGE", "LINK", "LTC", "ADA", "DOT")),
    ("ETH", _ALL, ("LINK", "UNI", "AAVE")),
]


def _build_catalog() -> tuple[SymbolInfo, ...]:
    out = []
    for quote, venues, bases in _CATALOG_ROWS:
        for base in bases:
            out.append(
                SymbolInfo(
                    symbol=f"{base}-{quote}",
                    base=base,
                    quote=quote,
                    venues={v: v in venues for v in _ALL},
                )
            )
    return tuple(out)


SYMBOL_CATALOG: tuple[SymbolInfo, ...] = _build_catalog()
_BY_SYMBOL: dict[str, SymbolInfo] = {s.symbol: s for s in SYMBOL_CATALOG}


def symbol_priority(info: SymbolInfo) -> float:
    """USD ranks ahead of USDT, which ranks ahead of every other quote."""
    base = BASE_PRIORITY.get(info.base, 100)
    if info.quote == "USD":
        return base
    if info.quote == "USDT":
        return base + 0.1
    return base + 0.2


def get_symbol_catalog() -> list[SymbolInfo]:
    """Full catalog ordered by priority (stable for equal priority)."""
    return sorted(SYMBOL_CATALOG, key=symbol_priority)


def filter_by_quote(symbols: list[SymbolInfo], quote: str) -> list[SymbolInfo]:
    q = quote.upper()
    return [s for s in symbols if s.quote == q]


def filter_by_venue(symbols: list[SymbolInfo], venue: str) -> list[SymbolInfo]:
    return [s for s in symbols if s.listed_on(venue)]


def filter_by_search(symbols: list[SymbolInfo], search: str) -> list[SymbolInfo]:
    """Case-insensitive match against base, quote or the full symbol."""
    term = search.strip().upper()
    if not term:
        return list(symbols)
    return [s for s in symbols if term in s.base or term in s.quote or term in s.symbol]


def is_symbol_in_catalog(symbol: str) -> bool:
    return symbol in _BY_SYMBOL


def get_symbol_info(symbol: str) -> SymbolInfo | None:
    return _BY_SYMBOL.get(symbol)
