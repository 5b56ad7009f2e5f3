"""PriceLevel, OrderBookSnapshot - point-in-time venue depth."""

from __future__ import annotations

import time

from pydantic import BaseModel, Field, model_validator

# Depth older than this at the moment of use is flagged stale
STALE_THRESHOLD_SEC = 5.0


def now_ms() -> int:
    return int(time.time() * 1000)


class PriceLevel(BaseModel):
    """Single price level (price -> quantity)."""

    price: float = Field(..., ge=0, allow_inf_nan=False)
    quantity: float = Field(..., ge=0, allow_inf_nan=False)


class OrderBookSnapshot(BaseModel):
    """L2 snapshot from one venue. Bids best (highest) first, asks best (lowest) first."""

    venue: str
    symbol: str
    bids: list[PriceLevel] = Field(default_factory=list)
    asks: list[PriceLevel] = Field(default_factory=list)
    captured_at: int = Field(default_factory=now_ms)  # ms epoch

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_ordering(self) -> OrderBookSnapshot:
        for prev, cur in zip(self.bids, self.bids[1:]):
            if cur.price >= prev.price:
                raise ValueError(f"bids not strictly descending at {cur.price}")
        for prev, cur in zip(self.asks, self.asks[1:]):
            if cur.price <= prev.price:
                raise ValueError(f"asks not strictly ascending at {cur.price}")
        return self

    @classmethod
    def from_pairs(
        cls,
        venue: str,
        symbol: str,
        bids: list[tuple[float, float]],
        asks: list[tuple[float, float]],
        captured_at: int | None = None,
    ) -> OrderBookSnapshot:
        """Build from (price, quantity) pairs. Zero-quantity levels are dropped."""
        return cls(
            venue=venue,
            symbol=symbol,
            bids=[PriceLevel(price=p, quantity=q) for p, q in bids if q != 0],
            asks=[PriceLevel(price=p, quantity=q) for p, q in asks if q != 0],
            captured_at=captured_at if captured_at is not None else now_ms(),
        )

    @property
    def best_bid(self) -> float | None:
        return self.bids[0].price if self.bids else None

    @property
    def best_ask(self) -> float | None:
        return self.asks[0].price if self.asks else None

    def age_ms(self, now: int | None = None) -> int:
        return (now if now is not None else now_ms()) - self.captured_at

    def is_stale(self, now: int | None = None, threshold_sec: float = STALE_THRESHOLD_SEC) -> bool:
        """True when older than threshold_sec. Exactly threshold_sec old is still fresh."""
        return self.age_ms(now) > threshold_sec * 1000
