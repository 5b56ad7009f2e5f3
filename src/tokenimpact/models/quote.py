"""Price impact and quote response - what the core hands to presentation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

Side = Literal["BUY", "SELL"]
VenueId = Literal["binance", "coinbase", "kraken"]
VenueStatus = Literal["ok", "timeout", "error", "unavailable"]

# Declaration order doubles as the tie-break order for best venue selection
VENUE_PRIORITY: tuple[str, ...] = ("binance", "coinbase", "kraken")


def venue_rank(venue: str) -> int:
    """Position in VENUE_PRIORITY; unknown venues sort last."""
    try:
        return VENUE_PRIORITY.index(venue)
    except ValueError:
        return len(VENUE_PRIORITY)


class PriceImpactResult(BaseModel):
    """Outcome of walking one venue's book for a (side, quantity)."""

    avg_fill_price: float = 0.0
    total_cost: float = 0.0  # proceeds for SELL
    price_impact: float = 0.0  # signed percent vs mid
    mid_price: float = 0.0
    best_bid: float = 0.0
    best_ask: float = 0.0
    volume_pct: float | None = None  # None when 24h volume unknown
    depth_consumed: int = 0
    fillable: bool = False
    shortfall: float = 0.0


class VenueQuote(BaseModel):
    """Per-venue entry of a quote: impact when ok, reason otherwise."""

    venue: str
    status: VenueStatus
    error: str | None = None
    impact: PriceImpactResult | None = None
    stale: bool | None = None


class QuoteResponse(BaseModel):
    symbol: str
    side: Side
    quantity: str
    timestamp: int
    results: list[VenueQuote] = Field(default_factory=list)
    best: str | None = None

    @property
    def ok_count(self) -> int:
        return sum(1 for q in self.results if q.status == "ok")
