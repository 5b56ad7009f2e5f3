"""Shared fixtures."""

import pytest

from mock_venues import binance_handler, coinbase_handler, kraken_handler, make_clients
from tokenimpact.venues import VenueAggregator


@pytest.fixture
def healthy_aggregator():
    """Three venues quoting BTC-USDT with different depth."""
    return VenueAggregator(
        make_clients(
            binance=binance_handler([["100", "5"]], [["101", "1"], ["102", "10"]], volume="500"),
            coinbase=coinbase_handler([["100", "5", 1]], [["100.5", "10", 1]], volume="800"),
            kraken=kraken_handler([["99.5", "5", 0]], [["101.5", "10", 0]], volume="400"),
        ),
        timeout_sec=1.0,
    )
