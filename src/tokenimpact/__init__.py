"""Token Impact - multi-venue orderbook price impact quotes."""

__version__ = "0.1.0"
