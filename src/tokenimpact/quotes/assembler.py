"""Quote assembler - run the impact calculator per successful venue and pick the best venue."""

from __future__ import annotations

from typing import Sequence

import structlog

from tokenimpact.models import QuoteResponse, Side, VenueQuote, venue_rank
from tokenimpact.models.orderbook import STALE_THRESHOLD_SEC, now_ms
from tokenimpact.orderbook.impact import compute_impact
from tokenimpact.venues.aggregator import AggregatedVenueData, VenueAggregator, VenueFetchSuccess

log = structlog.get_logger(__name__)


def select_best(quotes: Sequence[VenueQuote], side: Side) -> str | None:
    """
    Best venue among ok, fillable quotes: lowest total cost for BUY, highest proceeds for SELL.
    Exact ties go to the earlier venue in VENUE_PRIORITY, whatever order quotes arrive in.
    """
    candidates = [
        q for q in quotes if q.status == "ok" and q.impact is not None and q.impact.fillable
    ]
    if not candidates:
        return None
    candidates.sort(key=lambda q: venue_rank(q.venue))
    best = candidates[0]
    for q in candidates[1:]:
        if side == "BUY" and q.impact.total_cost < best.impact.total_cost:
            best = q
        elif side == "SELL" and q.impact.total_cost > best.impact.total_cost:
            best = q
    return best.venue


def assemble_quote(
    symbol: str,
    side: Side,
    quantity: str,
    aggregated: AggregatedVenueData,
    *,
    now: int | None = None,
    stale_after_sec: float = STALE_THRESHOLD_SEC,
) -> QuoteResponse:
    """Shape aggregated venue data into a QuoteResponse. Zero successes is a valid response with best=None."""
    qty = float(quantity)
    now = now if now is not None else now_ms()
    quotes: list[VenueQuote] = []
    for result in aggregated.results.values():
        if isinstance(result, VenueFetchSuccess):
            impact = compute_impact(side, qty, result.orderbook, result.volume_24h)
            quotes.append(
                VenueQuote(
                    venue=result.venue,
                    status="ok",
                    impact=impact,
                    stale=result.orderbook.is_stale(now, stale_after_sec),
                )
            )
        else:
            quotes.append(VenueQuote(venue=result.venue, status=result.status, error=result.error))
    return QuoteResponse(
        symbol=symbol,
        side=side,
        quantity=quantity,
        timestamp=aggregated.timestamp,
        results=quotes,
        best=select_best(quotes, side),
    )


def format_number(value: float, decimals: int = 2) -> str:
    """Fixed decimals; 4 significant digits for magnitudes below 0.01."""
    if value == 0:
        return "0.00"
    if abs(value) < 0.01:
        return f"{value:.4g}"
    return f"{value:.{decimals}f}"


async def fetch_quote(
    aggregator: VenueAggregator,
    symbol: str,
    side: Side,
    quantity: str,
    venues: Sequence[str] | None = None,
    stale_after_sec: float = STALE_THRESHOLD_SEC,
) -> QuoteResponse:
    """Aggregate fresh depth for symbol (optionally a venue subset) and assemble the quote."""
    if venues is not None:
        aggregated = await aggregator.fetch_venues(symbol, venues)
    else:
        aggregated = await aggregator.fetch_all(symbol)
    response = assemble_quote(symbol, side, quantity, aggregated, stale_after_sec=stale_after_sec)
    log.info(
        "quote_assembled",
        symbol=symbol,
        side=side,
        quantity=quantity,
        ok=response.ok_count,
        best=response.best,
    )
    return response
