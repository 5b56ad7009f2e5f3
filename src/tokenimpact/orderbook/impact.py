"""Price impact calculator - walk one venue's book for a (side, quantity). Pure, no I/O."""

from __future__ import annotations

from tokenimpact.models import OrderBookSnapshot, PriceImpactResult, Side


def mid_price(orderbook: OrderBookSnapshot) -> float:
    """(best_bid + best_ask) / 2, or 0 unless both sides have a non-zero best price."""
    bb, ba = orderbook.best_bid or 0.0, orderbook.best_ask or 0.0
    if bb > 0 and ba > 0:
        return (bb + ba) / 2.0
    return 0.0


def volume_pct(quantity: float, volume_24h: float | None) -> float | None:
    """Order size as percent of 24h volume. None when volume is unknown or not positive."""
    if volume_24h is None or volume_24h <= 0:
        return None
    return quantity / volume_24h * 100.0


def compute_impact(
    side: Side,
    quantity: float,
    orderbook: OrderBookSnapshot,
    volume_24h: float | None = None,
) -> PriceImpactResult:
    """
    Walk the book from the best level outward until quantity is filled or the side runs out.
    BUY consumes asks (lowest first), SELL consumes bids (highest first).
    price_impact = (avg_fill - mid) / mid * 100 for both sides, so a SELL below mid is negative.
    """
    if side not in ("BUY", "SELL"):
        raise ValueError(f"side must be BUY or SELL, got {side!r}")
    if quantity < 0:
        raise ValueError(f"quantity must be non-negative, got {quantity}")

    best_bid = orderbook.best_bid or 0.0
    best_ask = orderbook.best_ask or 0.0
    mid = mid_price(orderbook)

    if quantity == 0:
        return PriceImpactResult(
            avg_fill_price=mid,
            total_cost=0.0,
            price_impact=0.0,
            mid_price=mid,
            best_bid=best_bid,
            best_ask=best_ask,
            volume_pct=volume_pct(0.0, volume_24h),
            depth_consumed=0,
            fillable=True,
            shortfall=0.0,
        )

    levels = orderbook.asks if side == "BUY" else orderbook.bids
    if not levels or mid == 0:
        # Nothing to walk, or no mid to measure against
        return PriceImpactResult(
            best_bid=best_bid,
            best_ask=best_ask,
            volume_pct=None,
            fillable=False,
            shortfall=quantity,
        )

    remaining = quantity
    total_cost = 0.0
    depth = 0
    for level in levels:
        if remaining <= 0:
            break
        if level.quantity == 0:
            continue
        depth += 1
        filled = min(remaining, level.quantity)
        total_cost += level.price * filled
        remaining -= filled

    filled_qty = quantity - remaining
    avg_fill = total_cost / filled_qty if filled_qty > 0 else 0.0
    impact = (avg_fill - mid) / mid * 100.0 if filled_qty > 0 else 0.0

    return PriceImpactResult(
        avg_fill_price=avg_fill,
        total_cost=total_cost,
        price_impact=impact,
        mid_price=mid,
        best_bid=best_bid,
        best_ask=best_ask,
        volume_pct=volume_pct(quantity, volume_24h),
        depth_consumed=depth,
        fillable=remaining == 0,
        shortfall=remaining,
    )
