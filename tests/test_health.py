"""Venue health grading tests."""

import asyncio

from mock_venues import binance_handler, coinbase_handler, failing_handler, make_clients
from tokenimpact.venues.health import VenueHealth, check_health, overall_status


def test_overall_status():
    ok = VenueHealth(status="ok", latency=10)
    slow = VenueHealth(status="degraded", latency=900)
    down = VenueHealth(status="offline", latency=5)
    assert overall_status({"a": ok, "b": ok}) == "ok"
    assert overall_status({"a": ok, "b": slow}) == "degraded"
    assert overall_status({"a": ok, "b": down}) == "degraded"
    assert overall_status({"a": down, "b": down}) == "offline"
    assert overall_status({}) == "offline"


def test_check_health_pings_every_venue():
    clients = make_clients(binance=binance_handler([], []), coinbase=failing_handler(503))
    report = asyncio.run(check_health(clients))
    assert report.venues["binance"].status == "ok"
    assert report.venues["coinbase"].status == "offline"
    assert report.status == "degraded"
    assert report.timestamp > 0


def test_slow_ping_is_degraded():
    clients = make_clients(coinbase=coinbase_handler([], []))
    report = asyncio.run(check_health(clients, degraded_threshold_ms=-1))
    assert report.venues["coinbase"].status == "degraded"
