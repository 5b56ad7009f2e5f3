"""Kraken public REST client - /0/public/Depth and /0/public/Ticker.

Kraken's public endpoints allow roughly one request per second, so every
request of a client instance goes through its own RequestSpacer.
"""

from __future__ import annotations

from typing import Any

from tokenimpact.venues.base import VenueClient
from tokenimpact.venues.exceptions import (
    MalformedResponseError,
    RateLimitError,
    UnsupportedSymbolError,
    VenueHTTPError,
)
from tokenimpact.venues.rate_limit import RequestSpacer

KRAKEN_API_BASE = "https://api.kraken.com"
MIN_REQUEST_INTERVAL_SEC = 1.1


def _first_result(result: Any, native: str) -> Any:
    """Result objects are keyed by Kraken's own pair name, which may differ from the request."""
    if not isinstance(result, dict) or not result:
        raise MalformedResponseError(f"No data returned for {native}", venue="kraken")
    return next(iter(result.values()))


class KrakenClient(VenueClient):
    venue_id = "kraken"
    default_base_url = KRAKEN_API_BASE

    def __init__(
        self,
        base_url: str | None = None,
        *,
        min_request_interval_sec: float = MIN_REQUEST_INTERVAL_SEC,
        spacer: RequestSpacer | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, **kwargs)
        self.spacer = spacer or RequestSpacer(min_request_interval_sec)

    async def _send(self, path: str, params: dict[str, Any] | None) -> Any:
        return await self.spacer.run(lambda: super(KrakenClient, self)._send(path, params))

    def _orderbook_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        return "/0/public/Depth", {"pair": native, "count": self.depth_limit}

    def _volume_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        return "/0/public/Ticker", {"pair": native}

    def _ping_path(self) -> str:
        return "/0/public/Time"

    def _check_payload(self, payload: Any) -> Any:
        if not isinstance(payload, dict):
            raise MalformedResponseError("Kraken response is not an object", venue=self.venue_id)
        errors = payload.get("error") or []
        if errors:
            msg = ", ".join(str(e) for e in errors)
            if "Rate limit exceeded" in msg:
                raise RateLimitError(msg, venue=self.venue_id)
            if "Unknown asset pair" in msg:
                raise UnsupportedSymbolError(f"kraken does not list this pair: {msg}", venue=self.venue_id)
            raise VenueHTTPError(f"Kraken API error: {msg}", venue=self.venue_id)
        return payload.get("result", {})

    def _parse_orderbook(
        self, payload: Any, native: str
    ) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
        book = _first_result(payload, native)
        # [price, volume, timestamp]
        bids = [(float(lev[0]), float(lev[1])) for lev in book["bids"]]
        asks = [(float(lev[0]), float(lev[1])) for lev in book["asks"]]
        return bids, asks

    def _parse_volume(self, payload: Any, native: str) -> float:
        ticker = _first_result(payload, native)
        # v = [today, last 24 hours]
        return float(ticker["v"][1])
