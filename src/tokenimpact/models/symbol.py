"""SymbolInfo - catalog entry with per-venue availability."""

from __future__ import annotations

from pydantic import BaseModel, Field


class SymbolInfo(BaseModel):
    symbol: str
    base: str
    quote: str
    venues: dict[str, bool] = Field(default_factory=dict)

    def listed_on(self, venue: str) -> bool:
        return self.venues.get(venue, False)
