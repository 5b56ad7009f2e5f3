"""Canonical BASE-QUOTE <-> venue-native symbol mapping.

Each venue is described by a small rule table (separator, known quote
suffixes, asset aliases, legacy prefix markers). normalize/denormalize never
raise: an unmapped symbol is an expected case and comes back as None.

    normalize("BTCUSDT", "binance")   -> "BTC-USDT"
    normalize("XXBTZUSD", "kraken")   -> "BTC-USD"
    denormalize("BTC-USD", "kraken")  -> "XBTUSD"
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_TOKEN = re.compile(r"^[A-Z0-9]+$")
_CANONICAL = re.compile(r"^([A-Z0-9]+)-([A-Z0-9]+)$")


@dataclass(frozen=True)
class VenueSymbolRules:
    """Native spelling rules for one venue."""

    separator: str = ""
    # Known quote suffixes for concatenated symbols; tried longest-first
    quote_suffixes: tuple[str, ...] = ()
    # native asset code -> canonical asset code
    aliases: dict[str, str] = field(default_factory=dict)
    # Legacy spellings prefix every asset with one of these markers (Kraken X/Z)
    legacy_markers: tuple[str, ...] = ()
    legacy_asset_len: int = 4

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.quote_suffixes, key=len, reverse=True))
        object.__setattr__(self, "quote_suffixes", ordered)

    @property
    def reverse_aliases(self) -> dict[str, str]:
        return {canon: native for native, canon in self.aliases.items()}


VENUE_RULES: dict[str, VenueSymbolRules] = {
    "binance": VenueSymbolRules(
        quote_suffixes=(
            "USDT", "USDC", "BUSD", "TUSD", "FDUSD", "USD",
            "EUR", "GBP", "BTC", "ETH", "BNB", "DAI",
        ),
    ),
    "coinbase": VenueSymbolRules(separator="-"),
    "kraken": VenueSymbolRules(
        quote_suffixes=("USDT", "USDC", "USD", "EUR", "GBP", "CAD", "JPY", "AUD", "XBT", "ETH", "DAI"),
        aliases={"XBT": "BTC", "XDG": "DOGE"},
        legacy_markers=("X", "Z"),
    ),
}


def parse_canonical(symbol: str) -> tuple[str, str] | None:
    """Split BASE-QUOTE into (base, quote). None if not well-formed."""
    if not isinstance(symbol, str):
        return None
    m = _CANONICAL.match(symbol)
    if not m:
        return None
    return m.group(1), m.group(2)


def is_valid_canonical(symbol: str) -> bool:
    return parse_canonical(symbol) is not None


def _split_legacy(native: str, rules: VenueSymbolRules) -> tuple[str, str] | None:
    n = rules.legacy_asset_len
    if not rules.legacy_markers or len(native) != 2 * n:
        return None
    base, quote = native[:n], native[n:]
    if base[0] in rules.legacy_markers and quote[0] in rules.legacy_markers:
        return base[1:], quote[1:]
    return None


def _split_suffix(native: str, rules: VenueSymbolRules) -> tuple[str, str] | None:
    for quote in rules.quote_suffixes:
        if native.endswith(quote) and len(native) > len(quote):
            return native[: -len(quote)], quote
    return None


def normalize(native_symbol: str, venue: str) -> str | None:
    """Venue-native symbol -> canonical BASE-QUOTE, or None if it cannot be mapped."""
    rules = VENUE_RULES.get(venue)
    if rules is None or not isinstance(native_symbol, str) or not native_symbol:
        return None
    native = native_symbol.upper()

    if rules.separator:
        parts = native.split(rules.separator)
        if len(parts) != 2:
            return None
        base, quote = parts
    else:
        split = _split_legacy(native, rules) or _split_suffix(native, rules)
        if split is None:
            return None
        base, quote = split

    base = rules.aliases.get(base, base)
    quote = rules.aliases.get(quote, quote)
    if not (_TOKEN.match(base) and _TOKEN.match(quote)):
        return None
    return f"{base}-{quote}"


def denormalize(canonical_symbol: str, venue: str) -> str | None:
    """Canonical BASE-QUOTE -> venue-native symbol, or None if the venue cannot spell it."""
    rules = VENUE_RULES.get(venue)
    parsed = parse_canonical(canonical_symbol)
    if rules is None or parsed is None:
        return None
    base, quote = parsed
    reverse = rules.reverse_aliases
    native_base = reverse.get(base, base)
    native_quote = reverse.get(quote, quote)
    if rules.quote_suffixes and native_quote not in rules.quote_suffixes:
        return None
    return f"{native_base}{rules.separator}{native_quote}"
