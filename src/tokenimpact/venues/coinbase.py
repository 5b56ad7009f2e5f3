"""Coinbase Exchange public REST client - /products/{id}/book and /products/{id}/stats."""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from tokenimpact.venues.base import VenueClient

COINBASE_API_BASE = "https://api.exchange.coinbase.com"


class CoinbaseClient(VenueClient):
    venue_id = "coinbase"
    default_base_url = COINBASE_API_BASE
    unsupported_statuses = frozenset({404})

    def _orderbook_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        # Level 2: aggregated top 50 levels per side
        return f"/products/{quote(native, safe='')}/book", {"level": 2}

    def _volume_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        return f"/products/{quote(native, safe='')}/stats", None

    def _ping_path(self) -> str:
        return "/time"

    def _parse_orderbook(
        self, payload: Any, native: str
    ) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
        # [price, size, num_orders]
        bids = [(float(lev[0]), float(lev[1])) for lev in payload["bids"]]
        asks = [(float(lev[0]), float(lev[1])) for lev in payload["asks"]]
        return bids, asks

    def _parse_volume(self, payload: Any, native: str) -> float:
        return float(payload["volume"])
