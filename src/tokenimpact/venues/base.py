"""Abstract venue client: symbol mapping, timed GET with rate-limit retry, typed failures.

Subclasses implement the venue-native endpoints and payload parsing; every
failure leaves a client as a VenueError subclass so the aggregator can
classify it without inspecting messages.
"""

from __future__ import annotations

import asyncio
import math
from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from tokenimpact.models import OrderBookSnapshot
from tokenimpact.symbols.normalize import denormalize
from tokenimpact.venues.exceptions import (
    MalformedResponseError,
    RateLimitError,
    UnsupportedSymbolError,
    VenueError,
    VenueHTTPError,
    VenueNetworkError,
    VenueTimeoutError,
)
from tokenimpact.venues.rate_limit import backoff_delay

log = structlog.get_logger(__name__)

REQUEST_TIMEOUT_SEC = 5.0
MAX_RETRIES = 3
BASE_DELAY_SEC = 1.0
DEPTH_LIMIT = 500


class VenueClient(ABC):
    """One venue's public market data. Implement for each exchange."""

    venue_id: str = ""
    default_base_url: str = ""
    rate_limit_statuses: frozenset[int] = frozenset({429})
    # HTTP statuses meaning "this venue does not list the pair"
    unsupported_statuses: frozenset[int] = frozenset()

    def __init__(
        self,
        base_url: str | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        request_timeout_sec: float = REQUEST_TIMEOUT_SEC,
        max_retries: int = MAX_RETRIES,
        base_delay_sec: float = BASE_DELAY_SEC,
        depth_limit: int = DEPTH_LIMIT,
    ) -> None:
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.request_timeout_sec = request_timeout_sec
        self.max_retries = max(1, max_retries)
        self.base_delay_sec = base_delay_sec
        self.depth_limit = depth_limit
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=request_timeout_sec,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> VenueClient:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    # --- symbol mapping ---

    def native_symbol(self, symbol: str) -> str:
        """Venue-native spelling of a canonical symbol. Raises UnsupportedSymbolError on a mapping miss."""
        native = denormalize(symbol, self.venue_id)
        if native is None:
            raise UnsupportedSymbolError(
                f"Symbol {symbol} not supported on {self.venue_id}", venue=self.venue_id
            )
        return native

    # --- public operations ---

    async def fetch_orderbook(self, symbol: str) -> OrderBookSnapshot:
        native = self.native_symbol(symbol)
        payload = await self._get_json(*self._orderbook_request(native))
        try:
            bids, asks = self._parse_orderbook(payload, native)
            return OrderBookSnapshot.from_pairs(self.venue_id, symbol, bids, asks)
        except VenueError:
            raise
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Malformed orderbook from {self.venue_id}: {e}", venue=self.venue_id
            ) from e

    async def fetch_volume_24h(self, symbol: str) -> float:
        native = self.native_symbol(symbol)
        payload = await self._get_json(*self._volume_request(native))
        try:
            volume = float(self._parse_volume(payload, native))
        except VenueError:
            raise
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise MalformedResponseError(
                f"Malformed 24h volume from {self.venue_id}: {e}", venue=self.venue_id
            ) from e
        if not math.isfinite(volume) or volume < 0:
            raise MalformedResponseError(
                f"Invalid 24h volume from {self.venue_id}: {volume}", venue=self.venue_id
            )
        return volume

    async def is_supported(self, symbol: str) -> bool:
        """Mapping miss is False without a network call; otherwise probe the ticker endpoint."""
        try:
            native = self.native_symbol(symbol)
        except UnsupportedSymbolError:
            return False
        try:
            await self._send(*self._volume_request(native))
        except VenueError as e:
            log.debug("venue_symbol_probe_failed", venue=self.venue_id, symbol=symbol, error=str(e))
            return False
        return True

    async def ping(self) -> None:
        """Hit the venue's lightweight liveness endpoint. Raises VenueError on failure."""
        await self._send(self._ping_path(), None)

    # --- venue specifics ---

    @abstractmethod
    def _orderbook_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        """(path, params) for the depth endpoint."""
        ...

    @abstractmethod
    def _volume_request(self, native: str) -> tuple[str, dict[str, Any] | None]:
        """(path, params) for the 24h ticker/stats endpoint."""
        ...

    @abstractmethod
    def _ping_path(self) -> str: ...

    @abstractmethod
    def _parse_orderbook(
        self, payload: Any, native: str
    ) -> tuple[list[tuple[float, float]], list[tuple[float, float]]]:
        """Return (bids, asks) as (price, quantity) pairs in venue order."""
        ...

    @abstractmethod
    def _parse_volume(self, payload: Any, native: str) -> float: ...

    def _check_payload(self, payload: Any) -> Any:
        """Hook for venues that report errors inside a 200 body. Returns the usable payload."""
        return payload

    def _classify_status(self, response: httpx.Response) -> VenueError:
        code = response.status_code
        if code in self.rate_limit_statuses:
            return RateLimitError(f"Rate limited: {code}", venue=self.venue_id, status_code=code)
        if code in self.unsupported_statuses:
            return UnsupportedSymbolError(
                f"{self.venue_id} does not list this pair (HTTP {code})",
                venue=self.venue_id,
                status_code=code,
            )
        return VenueHTTPError(
            f"HTTP {code}: {response.reason_phrase}", venue=self.venue_id, status_code=code
        )

    # --- transport ---

    async def _send(self, path: str, params: dict[str, Any] | None) -> Any:
        """Single GET bounded by the per-call timeout; no retry."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url, params=params, timeout=self.request_timeout_sec)
        except httpx.TimeoutException as e:
            raise VenueTimeoutError(f"Request timeout: {self.venue_id}", venue=self.venue_id) from e
        except httpx.RequestError as e:
            raise VenueNetworkError(f"Network error: {e}", venue=self.venue_id) from e

        if not response.is_success:
            raise self._classify_status(response)
        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Invalid JSON from {self.venue_id}", venue=self.venue_id
            ) from e
        return self._check_payload(payload)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET with exponential backoff on rate limiting only; other failures propagate at once."""
        last_error: RateLimitError | None = None
        for attempt in range(self.max_retries):
            try:
                return await self._send(path, params)
            except RateLimitError as e:
                last_error = e
                if attempt + 1 >= self.max_retries:
                    break
                delay = backoff_delay(attempt, self.base_delay_sec)
                log.warning(
                    "venue_rate_limited",
                    venue=self.venue_id,
                    path=path,
                    attempt=attempt + 1,
                    delay=delay,
                )
                await asyncio.sleep(delay)
        raise RateLimitError(
            f"Rate limited after {self.max_retries} attempts: {last_error}",
            venue=self.venue_id,
            status_code=last_error.status_code if last_error else None,
        )
