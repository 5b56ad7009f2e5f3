"""Multi-venue aggregator - concurrent fetch with per-venue timeout, collect every outcome.

A venue failing (or every venue failing) is a normal result, never an
exception: each venue task converts its own failure into a VenueFetchFailure
before the join, so fetch_all only raises on programming errors.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Sequence, Union

import structlog

from tokenimpact.models import OrderBookSnapshot, venue_rank
from tokenimpact.venues.base import VenueClient
from tokenimpact.venues.exceptions import UnsupportedSymbolError, VenueError, VenueTimeoutError

log = structlog.get_logger(__name__)

VENUE_TIMEOUT_SEC = 5.0


@dataclass(frozen=True)
class VenueFetchSuccess:
    venue: str
    symbol: str
    native_symbol: str
    orderbook: OrderBookSnapshot
    volume_24h: float | None  # None when the venue's 24h volume could not be fetched
    success: bool = field(default=True, init=False)
    status: str = field(default="ok", init=False)


@dataclass(frozen=True)
class VenueFetchFailure:
    venue: str
    status: str  # timeout | error | unavailable
    error: str
    success: bool = field(default=False, init=False)


VenueFetchResult = Union[VenueFetchSuccess, VenueFetchFailure]


@dataclass
class AggregatedVenueData:
    symbol: str
    timestamp: int  # ms epoch
    results: dict[str, VenueFetchResult] = field(default_factory=dict)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results.values() if r.success)

    @property
    def failure_count(self) -> int:
        return len(self.results) - self.success_count

    def failures(self) -> list[VenueFetchFailure]:
        return [r for r in self.results.values() if isinstance(r, VenueFetchFailure)]


class VenueAggregator:
    """Fans a symbol out to every venue client concurrently; waits for all, each under its own timeout."""

    def __init__(self, clients: Sequence[VenueClient], timeout_sec: float = VENUE_TIMEOUT_SEC) -> None:
        ids = [c.venue_id for c in clients]
        if len(set(ids)) != len(ids):
            raise ValueError(f"duplicate venue clients: {ids}")
        self._clients: dict[str, VenueClient] = {c.venue_id: c for c in clients}
        self.timeout_sec = timeout_sec

    @property
    def venues(self) -> list[str]:
        return list(self._clients)

    @property
    def clients(self) -> list[VenueClient]:
        return list(self._clients.values())

    async def aclose(self) -> None:
        for client in self._clients.values():
            await client.aclose()

    async def fetch_all(self, symbol: str) -> AggregatedVenueData:
        """Fetch orderbook + 24h volume for symbol from every venue."""
        return await self._gather(symbol, list(self._clients.values()))

    async def fetch_venues(self, symbol: str, venues: Sequence[str]) -> AggregatedVenueData:
        """Like fetch_all, restricted to the named venues (unknown ids are ignored)."""
        wanted = set(venues)
        clients = [c for vid, c in self._clients.items() if vid in wanted]
        return await self._gather(symbol, clients)

    async def _gather(self, symbol: str, clients: list[VenueClient]) -> AggregatedVenueData:
        started = time.monotonic()
        outcomes = await asyncio.gather(*(self._fetch_one(c, symbol) for c in clients))
        data = AggregatedVenueData(
            symbol=symbol,
            timestamp=int(time.time() * 1000),
            results={r.venue: r for r in sorted(outcomes, key=lambda r: venue_rank(r.venue))},
        )
        log.info(
            "aggregation_done",
            symbol=symbol,
            venues=len(clients),
            ok=data.success_count,
            failed=data.failure_count,
            elapsed_ms=int((time.monotonic() - started) * 1000),
        )
        return data

    async def _fetch_one(self, client: VenueClient, symbol: str) -> VenueFetchResult:
        venue = client.venue_id
        try:
            native = client.native_symbol(symbol)
        except UnsupportedSymbolError as e:
            log.debug("venue_symbol_unmapped", venue=venue, symbol=symbol)
            return VenueFetchFailure(venue=venue, status=e.status, error=str(e))

        try:
            orderbook, volume = await asyncio.wait_for(
                asyncio.gather(
                    client.fetch_orderbook(symbol),
                    client.fetch_volume_24h(symbol),
                    return_exceptions=True,
                ),
                timeout=self.timeout_sec,
            )
        except asyncio.TimeoutError:
            log.warning("venue_fetch_failed", venue=venue, symbol=symbol, status="timeout")
            return VenueFetchFailure(
                venue=venue, status="timeout", error=f"Timeout fetching from {venue}"
            )

        if isinstance(orderbook, BaseException):
            return self._failure(venue, symbol, orderbook)

        if isinstance(volume, BaseException):
            if isinstance(volume, VenueTimeoutError):
                return self._failure(venue, symbol, volume)
            if not isinstance(volume, VenueError):
                raise volume
            # Depth is usable without volume; volume_pct becomes unknown
            log.warning("venue_volume_unavailable", venue=venue, symbol=symbol, error=str(volume))
            volume = None

        log.info(
            "venue_fetch_ok",
            venue=venue,
            symbol=symbol,
            bids=len(orderbook.bids),
            asks=len(orderbook.asks),
        )
        return VenueFetchSuccess(
            venue=venue,
            symbol=symbol,
            native_symbol=native,
            orderbook=orderbook,
            volume_24h=volume,
        )

    def _failure(self, venue: str, symbol: str, exc: BaseException) -> VenueFetchFailure:
        if not isinstance(exc, VenueError):
            raise exc
        if exc.status == "unavailable":
            log.debug("venue_symbol_unlisted", venue=venue, symbol=symbol, error=str(exc))
        else:
            log.warning("venue_fetch_failed", venue=venue, symbol=symbol, status=exc.status, error=str(exc))
        return VenueFetchFailure(venue=venue, status=exc.status, error=str(exc))
