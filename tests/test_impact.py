"""Price impact calculator unit tests."""

import pytest

from tokenimpact.models import OrderBookSnapshot
from tokenimpact.orderbook.impact import compute_impact, mid_price, volume_pct


def _book(bids, asks):
    return OrderBookSnapshot.from_pairs("binance", "BTC-USD", bids, asks)


def test_buy_single_level():
    ob = _book([(100, 5)], [(101, 100)])
    r = compute_impact("BUY", 1, ob)
    assert r.avg_fill_price == 101
    assert r.mid_price == 100.5
    assert r.total_cost == 101
    assert r.price_impact == pytest.approx(0.4975, abs=1e-3)
    assert r.depth_consumed == 1
    assert r.fillable is True
    assert r.shortfall == 0


def test_buy_walks_multiple_levels():
    ob = _book([(99, 10)], [(100, 1), (101, 2), (102, 5)])
    r = compute_impact("BUY", 3, ob)
    assert r.total_cost == 100 + 2 * 101
    assert r.avg_fill_price == pytest.approx(302 / 3)
    assert r.avg_fill_price > r.best_ask
    assert r.depth_consumed == 2
    assert r.fillable


def test_buy_exceeds_depth():
    ob = _book([(99, 1)], [(100, 5), (101, 5)])
    r = compute_impact("BUY", 15, ob)
    assert r.fillable is False
    assert r.shortfall == 5
    assert r.depth_consumed == 2
    assert r.total_cost == 1005
    assert r.avg_fill_price == pytest.approx(100.5)


def test_sell_walks_bids_and_impact_is_negative():
    ob = _book([(100, 1), (99, 1), (98, 10)], [(101, 1)])
    r = compute_impact("SELL", 2, ob)
    assert r.total_cost == 199
    assert r.avg_fill_price == 99.5
    assert r.avg_fill_price <= r.best_bid
    assert r.price_impact < 0
    assert r.depth_consumed == 2


def test_sell_single_level_fills_at_best_bid():
    ob = _book([(100, 5)], [(101, 5)])
    r = compute_impact("SELL", 2, ob)
    assert r.avg_fill_price == r.best_bid == 100


def test_zero_quantity():
    ob = _book([(100, 5)], [(102, 5)])
    r = compute_impact("BUY", 0, ob, volume_24h=1000)
    assert r.total_cost == 0
    assert r.price_impact == 0
    assert r.fillable is True
    assert r.depth_consumed == 0
    assert r.shortfall == 0
    assert r.avg_fill_price == 101
    assert r.volume_pct == 0


def test_empty_side_is_unfillable():
    ob = _book([(100, 5)], [])
    r = compute_impact("BUY", 1, ob)
    assert r.fillable is False
    assert r.shortfall == 1
    assert r.depth_consumed == 0
    assert r.total_cost == 0
    assert r.best_bid == 100
    assert r.best_ask == 0
    assert r.volume_pct is None


def test_one_sided_book_has_no_mid():
    # Asks exist but no bids: no mid to measure impact against
    ob = _book([], [(100, 5)])
    assert mid_price(ob) == 0
    r = compute_impact("BUY", 1, ob, volume_24h=100)
    assert r.fillable is False
    assert r.shortfall == 1
    assert r.volume_pct is None


def test_volume_pct():
    ob = _book([(100, 5)], [(101, 5)])
    assert compute_impact("BUY", 2, ob, volume_24h=400).volume_pct == pytest.approx(0.5)
    assert compute_impact("BUY", 2, ob).volume_pct is None
    assert compute_impact("BUY", 2, ob, volume_24h=0).volume_pct is None
    assert volume_pct(1, -5) is None


def test_fillable_iff_no_shortfall():
    ob = _book([(100, 1), (99, 1)], [(101, 1), (102, 1)])
    for qty in (0.5, 1, 2, 2.5, 10):
        for side in ("BUY", "SELL"):
            r = compute_impact(side, qty, ob)
            assert r.fillable == (r.shortfall == 0)
            assert r.depth_consumed <= 2


def test_invalid_inputs_raise():
    ob = _book([(100, 1)], [(101, 1)])
    with pytest.raises(ValueError):
        compute_impact("HOLD", 1, ob)
    with pytest.raises(ValueError):
        compute_impact("BUY", -1, ob)


def test_snapshot_rejects_misordered_levels():
    with pytest.raises(ValueError):
        _book([(99, 1), (100, 1)], [(101, 1)])
    with pytest.raises(ValueError):
        _book([(100, 1)], [(102, 1), (101, 1)])



def test_snapshot_rejects_non_finite_levels():
    with pytest.raises(ValueError):
        _book([(float("inf"), 1)], [(101, 1)])
    with pytest.raises(ValueError):
        _book([(100, 1)], [(101, float("nan"))])

def test_snapshot_drops_zero_quantity_levels():
    ob = _book([(100, 0), (99, 1)], [(101, 0), (102, 3)])
    assert ob.best_bid == 99
    assert ob.best_ask == 102


def test_staleness_boundary():
    ob = OrderBookSnapshot.from_pairs("kraken", "BTC-USD", [(1, 1)], [(2, 1)], captured_at=1_000)
    assert not ob.is_stale(now=6_000)
    assert ob.is_stale(now=6_001)
