"""Orderbook walking and price impact."""

from tokenimpact.orderbook.impact import compute_impact, mid_price, volume_pct

__all__ = ["compute_impact", "mid_price", "volume_pct"]
