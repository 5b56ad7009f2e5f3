"""Pydantic schemas for API request validation and response shapes."""

from __future__ import annotations

import math
import re
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from tokenimpact.models import QuoteResponse, SymbolInfo, VenueQuote
from tokenimpact.models.quote import VENUE_PRIORITY
from tokenimpact.quotes.assembler import format_number
from tokenimpact.venues.health import HealthReport

MAX_SYMBOLS_LIMIT = 500
DEFAULT_SYMBOLS_LIMIT = 100

_DECIMAL = re.compile(r"^\d+(\.\d+)?$")


class ErrorCode:
    VALIDATION = "E_VALIDATION"
    EXCHANGE_ERROR = "E_EXCHANGE_ERROR"


# --- Requests ---
class QuoteRequest(BaseModel):
    symbol: str = Field(..., pattern=r"^[A-Z0-9]+-[A-Z0-9]+$")
    side: Literal["BUY", "SELL"]
    quantity: str
    venues: list[str] | None = None

    @field_validator("quantity")
    @classmethod
    def _positive_decimal(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Enter a quantity")
        if not _DECIMAL.match(v):
            raise ValueError("Enter a valid number")
        try:
            n = float(v)
        except ValueError:
            raise ValueError("Enter a valid number") from None
        if math.isnan(n) or math.isinf(n):
            raise ValueError("Enter a valid number")
        if n <= 0:
            raise ValueError("Quantity must be greater than 0")
        return v

    @field_validator("venues", mode="before")
    @classmethod
    def _split_venues(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            v = [p.strip().lower() for p in v.split(",") if p.strip()]
        unknown = [p for p in v if p not in VENUE_PRIORITY]
        if unknown:
            raise ValueError(f"Unknown venue(s): {', '.join(unknown)}")
        return v


class SymbolsRequest(BaseModel):
    quote: str | None = None
    venue: Literal["binance", "coinbase", "kraken"] | None = None
    search: str | None = None
    limit: int = DEFAULT_SYMBOLS_LIMIT

    @field_validator("quote")
    @classmethod
    def _upper(cls, v: str | None) -> str | None:
        return v.upper() if v else None

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, v: Any) -> int:
        try:
            n = int(v)
        except (TypeError, ValueError):
            return DEFAULT_SYMBOLS_LIMIT
        if n < 1:
            return DEFAULT_SYMBOLS_LIMIT
        return min(n, MAX_SYMBOLS_LIMIT)


# --- Responses ---
class VenueQuoteOut(BaseModel):
    """Per-venue quote with numbers rendered as decimal strings."""

    venue: str
    status: str
    error: str | None = None
    midPrice: str | None = None
    bestBid: str | None = None
    bestAsk: str | None = None
    avgFillPrice: str | None = None
    totalCost: str | None = None
    priceImpact: str | None = None
    volumePct: str | None = None
    depthConsumed: int | None = None
    fillable: bool | None = None
    shortfall: str | None = None
    stale: bool | None = None

    @classmethod
    def from_quote(cls, q: VenueQuote) -> VenueQuoteOut:
        if q.impact is None:
            return cls(venue=q.venue, status=q.status, error=q.error)
        r = q.impact
        return cls(
            venue=q.venue,
            status=q.status,
            midPrice=format_number(r.mid_price),
            bestBid=format_number(r.best_bid),
            bestAsk=format_number(r.best_ask),
            avgFillPrice=format_number(r.avg_fill_price),
            totalCost=format_number(r.total_cost),
            priceImpact=format_number(r.price_impact, 3),
            volumePct=format_number(r.volume_pct) if r.volume_pct is not None else None,
            depthConsumed=r.depth_consumed,
            fillable=r.fillable,
            shortfall=format_number(r.shortfall) if r.shortfall > 0 else None,
            stale=q.stale,
        )


class QuoteResponseOut(BaseModel):
    symbol: str
    side: str
    quantity: str
    timestamp: int
    results: list[VenueQuoteOut]
    best: str | None = None

    @classmethod
    def from_quote(cls, resp: QuoteResponse) -> QuoteResponseOut:
        return cls(
            symbol=resp.symbol,
            side=resp.side,
            quantity=resp.quantity,
            timestamp=resp.timestamp,
            results=[VenueQuoteOut.from_quote(q) for q in resp.results],
            best=resp.best,
        )

    def to_content(self) -> dict[str, Any]:
        """JSON body; best is always present, unset per-venue fields are omitted."""
        body = self.model_dump(exclude={"results"})
        body["results"] = [r.model_dump(exclude_none=True) for r in self.results]
        return body


class SymbolsResponse(BaseModel):
    symbols: list[SymbolInfo]
    total: int
    cached: bool
    timestamp: int


class HealthResponse(HealthReport):
    pass


# --- Error (consistent shape for 4xx/5xx) ---
class ErrorBody(BaseModel):
    code: str = Field(..., description="Machine-readable code, e.g. E_VALIDATION")
    message: str = Field(..., description="Human-readable message")
    details: dict[str, Any] | None = None


class ErrorResponse(BaseModel):
    error: ErrorBody


def format_validation_errors(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)
