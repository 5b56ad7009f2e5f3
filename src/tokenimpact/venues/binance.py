"""Binance public REST client - /api/v3/depth and /api/v3/ticker/24hr."""

from __future__ import annotations

from typing import Any

import httpx

from tokenimpact.venues.base import VenueClient
from tokenimpact.venues.exceptions import UnsupportedSymbolError, VenueError

BINANCE_API_BASE = "https://api.binance.com"

# Binance error code for an unknown trading pair
_INVALID_SYMBOL = -1121


def _pairs(levels: list[Any]) -> list[tuple[float, float]]:
    # [["price", "qty"], ...]
    return [(float(lev[0]), float(lev[1])) for lev in levels]


class BinanceClient(VenueClient):
    venue_id = "binance"
    default_base_url = BINANCE_API_BASE
    # 418 is Binance's IP ban escalation after ignoring 429s
    rate_limit_statuses = frozenset({429, 418})

    def _orderbook_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        return "/api/v3/depth", {"symbol": native, "limit": self.depth_limit}

    def _volume_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        return "/api/v3/ticker/24hr", {"symbol": native}

    def _ping_path(self) -> str:
        return "/api/v3/ping"

    def _parse_orderbook(
        self, payload: Any, native: str
    ) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
        return _pairs(payload["bids"]), _pairs(payload["asks"])

    def _parse_volume(self, payload: Any, native: str) -> float:
        return float(payload["volume"])

    def _classify_status(self, response: httpx.Response) -> VenueError:
        if response.status_code == 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            code = body.get("code") if isinstance(body, dict) else None
            if code == _INVALID_SYMBOL:
                return UnsupportedSymbolError(
                    "binance does not list this pair", venue=self.venue_id, status_code=400
                )
        return super()._classify_status(response)
