"""Venue clients (Binance, Coinbase, Kraken), aggregator and health checks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tokenimpact.venues.aggregator import (
    AggregatedVenueData,
    VenueAggregator,
    VenueFetchFailure,
    VenueFetchResult,
    VenueFetchSuccess,
)
from tokenimpact.venues.base import VenueClient
from tokenimpact.venues.binance import BinanceClient
from tokenimpact.venues.coinbase import CoinbaseClient
from tokenimpact.venues.kraken import KrakenClient

if TYPE_CHECKING:
    from tokenimpact.config.settings import Settings

# Order is venue priority
CLIENT_CLASSES: dict[str, type[VenueClient]] = {
    "binance": BinanceClient,
    "coinbase": CoinbaseClient,
    "kraken": KrakenClient,
}


def create_clients(settings: Settings | None = None, venues: list[str] | None = None) -> list[VenueClient]:
    """Build one client per venue (all by default) from settings."""
    selected = [v for v in CLIENT_CLASSES if venues is None or v in venues]
    clients: list[VenueClient] = []
    for venue in selected:
        cls = CLIENT_CLASSES[venue]
        kwargs: dict = {}
        if settings is not None:
            kwargs = dict(
                base_url=settings.venue_base_url(venue),
                request_timeout_sec=settings.request_timeout_sec,
                max_retries=settings.max_retries,
                base_delay_sec=settings.retry_base_delay_sec,
                depth_limit=settings.depth_limit,
            )
            if cls is KrakenClient:
                kwargs["min_request_interval_sec"] = settings.kraken_min_interval_sec
        clients.append(cls(**kwargs))
    return clients


def create_aggregator(settings: Settings | None = None) -> VenueAggregator:
    timeout = settings.venue_timeout_sec if settings is not None else 5.0
    venues = settings.enabled_venues if settings is not None else None
    return VenueAggregator(create_clients(settings, venues), timeout_sec=timeout)


__all__ = [
    "AggregatedVenueData",
    "BinanceClient",
    "CLIENT_CLASSES",
    "CoinbaseClient",
    "KrakenClient",
    "VenueAggregator",
    "VenueClient",
    "VenueFetchFailure",
    "VenueFetchResult",
    "VenueFetchSuccess",
    "create_aggregator",
    "create_clients",
]
