"""Canonical schema (Pydantic) - OrderBook, PriceImpact, Quote, Symbol."""

from tokenimpact.models.orderbook import OrderBookSnapshot, PriceLevel
from tokenimpact.models.quote import (
    VENUE_PRIORITY,
    PriceImpactResult,
    QuoteResponse,
    Side,
    VenueId,
    VenueQuote,
    VenueStatus,
    venue_rank,
)
from tokenimpact.models.symbol import SymbolInfo

__all__ = [
    "OrderBookSnapshot",
    "PriceLevel",
    "PriceImpactResult",
    "QuoteResponse",
    "Side",
    "SymbolInfo",
    "VENUE_PRIORITY",
    "VenueId",
    "VenueQuote",
    "VenueStatus",
    "venue_rank",
]
