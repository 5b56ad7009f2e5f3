"""Venue client tests against mocked HTTP transports."""

import asyncio

import httpx
import pytest

from tokenimpact.venues import BinanceClient, CoinbaseClient, KrakenClient
from tokenimpact.venues.exceptions import (
    MalformedResponseError,
    RateLimitError,
    UnsupportedSymbolError,
    VenueHTTPError,
    VenueTimeoutError,
)


def _client(cls, handler, **kwargs):
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    if cls is KrakenClient:
        kwargs.setdefault("min_request_interval_sec", 0)
    return cls(http_client=http, base_delay_sec=0, **kwargs)


def _run(coro):
    return asyncio.run(coro)


BINANCE_DEPTH = {
    "lastUpdateId": 1,
    "bids": [["100.00", "2.0"], ["99.50", "0.00000000"], ["99.00", "3.0"]],
    "asks": [["101.00", "1.5"], ["102.00", "4.0"]],
}


def test_binance_orderbook_and_volume():
    seen = []

    def handler(request):
        seen.append(request)
        if request.url.path == "/api/v3/depth":
            return httpx.Response(200, json=BINANCE_DEPTH)
        if request.url.path == "/api/v3/ticker/24hr":
            return httpx.Response(200, json={"symbol": "BTCUSDT", "volume": "12345.6"})
        return httpx.Response(404)

    client = _client(BinanceClient, handler)
    ob = _run(client.fetch_orderbook("BTC-USDT"))
    assert ob.venue == "binance"
    assert ob.symbol == "BTC-USDT"
    assert [lv.price for lv in ob.bids] == [100.0, 99.0]
    assert ob.best_ask == 101.0
    assert _run(client.fetch_volume_24h("BTC-USDT")) == 12345.6
    assert seen[0].url.params["symbol"] == "BTCUSDT"
    assert seen[0].url.params["limit"] == "500"


def test_binance_retries_rate_limit_then_succeeds():
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            return httpx.Response(429)
        return httpx.Response(200, json=BINANCE_DEPTH)

    client = _client(BinanceClient, handler)
    ob = _run(client.fetch_orderbook("BTC-USDT"))
    assert ob.best_bid == 100.0
    assert len(calls) == 3


def test_binance_rate_limit_exhausts_retries():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(418)

    client = _client(BinanceClient, handler, max_retries=3)
    with pytest.raises(RateLimitError):
        _run(client.fetch_orderbook("BTC-USDT"))
    assert len(calls) == 3


def test_binance_invalid_symbol_is_unsupported():
    def handler(request):
        return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

    client = _client(BinanceClient, handler)
    with pytest.raises(UnsupportedSymbolError) as exc:
        _run(client.fetch_orderbook("WIF-EUR"))
    assert exc.value.status == "unavailable"


def test_binance_400_with_non_object_body_is_http_error():
    def handler(request):
        return httpx.Response(400, json=[{"code": -1121}])

    client = _client(BinanceClient, handler)
    with pytest.raises(VenueHTTPError) as exc:
        _run(client.fetch_orderbook("BTC-USDT"))
    assert exc.value.status_code == 400
    assert exc.value.status == "error"


def test_server_error_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503)

    client = _client(BinanceClient, handler)
    with pytest.raises(VenueHTTPError) as exc:
        _run(client.fetch_orderbook("BTC-USDT"))
    assert exc.value.status_code == 503
    assert exc.value.status == "error"
    assert len(calls) == 1


def test_transport_timeout_maps_to_timeout_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    client = _client(BinanceClient, handler)
    with pytest.raises(VenueTimeoutError) as exc:
        _run(client.fetch_orderbook("BTC-USDT"))
    assert exc.value.status == "timeout"


def test_malformed_payloads():
    def bad_json(request):
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(MalformedResponseError):
        _run(_client(BinanceClient, bad_json).fetch_orderbook("BTC-USDT"))

    def missing_asks(request):
        return httpx.Response(200, json={"bids": []})

    with pytest.raises(MalformedResponseError):
        _run(_client(BinanceClient, missing_asks).fetch_orderbook("BTC-USDT"))

    def negative_volume(request):
        return httpx.Response(200, json={"volume": "-1"})

    with pytest.raises(MalformedResponseError):
        _run(_client(BinanceClient, negative_volume).fetch_volume_24h("BTC-USDT"))

    for raw in ("NaN", "Infinity"):

        def non_finite_volume(request, raw=raw):
            return httpx.Response(200, json={"volume": raw})

        with pytest.raises(MalformedResponseError):
            _run(_client(BinanceClient, non_finite_volume).fetch_volume_24h("BTC-USDT"))

    def infinite_price(request):
        return httpx.Response(200, json={"bids": [["inf", "1.0"]], "asks": [["101.00", "1.0"]]})

    with pytest.raises(MalformedResponseError):
        _run(_client(BinanceClient, infinite_price).fetch_orderbook("BTC-USDT"))


def test_unmappable_symbol_never_hits_network():
    def handler(request):
        raise AssertionError("no request expected")

    client = _client(BinanceClient, handler)
    with pytest.raises(UnsupportedSymbolError):
        client.native_symbol("BTC-XYZ")
    assert _run(client.is_supported("BTC-XYZ")) is False


def test_is_supported_probes_ticker():
    def handler(request):
        if request.url.params.get("symbol") == "BTCUSDT":
            return httpx.Response(200, json={"volume": "1"})
        return httpx.Response(400, json={"code": -1121})

    client = _client(BinanceClient, handler)
    assert _run(client.is_supported("BTC-USDT")) is True
    assert _run(client.is_supported("WIF-EUR")) is False


def test_coinbase_book_and_stats():
    seen = []

    def handler(request):
        seen.append(request)
        if request.url.path == "/products/ETH-USD/book":
            return httpx.Response(
                200,
                json={"bids": [["3000.1", "1.2", 3]], "asks": [["3000.5", "0.8", 1], ["3001", "2", 2]]},
            )
        if request.url.path == "/products/ETH-USD/stats":
            return httpx.Response(200, json={"open": "2900", "volume": "5000.25"})
        return httpx.Response(404, json={"message": "NotFound"})

    client = _client(CoinbaseClient, handler)
    ob = _run(client.fetch_orderbook("ETH-USD"))
    assert ob.best_bid == 3000.1
    assert [lv.quantity for lv in ob.asks] == [0.8, 2.0]
    assert seen[0].url.params["level"] == "2"
    assert _run(client.fetch_volume_24h("ETH-USD")) == 5000.25


def test_coinbase_404_is_unsupported():
    def handler(request):
        return httpx.Response(404, json={"message": "NotFound"})

    client = _client(CoinbaseClient, handler)
    with pytest.raises(UnsupportedSymbolError):
        _run(client.fetch_orderbook("PEPE-GBP"))


def test_kraken_depth_keyed_by_legacy_pair():
    seen = []

    def handler(request):
        seen.append(request)
        if request.url.path == "/0/public/Depth":
            return httpx.Response(
                200,
                json={
                    "error": [],
                    "result": {
                        "XXBTZUSD": {
                            "bids": [["50000.0", "1.0", 1700000000]],
                            "asks": [["50010.0", "0.5", 1700000000], ["50020.0", "2.0", 1700000001]],
                        }
                    },
                },
            )
        return httpx.Response(
            200,
            json={"error": [], "result": {"XXBTZUSD": {"v": ["100.5", "2500.75"]}}},
        )

    client = _client(KrakenClient, handler)
    ob = _run(client.fetch_orderbook("BTC-USD"))
    assert ob.symbol == "BTC-USD"
    assert ob.best_bid == 50000.0
    assert ob.best_ask == 50010.0
    assert seen[0].url.params["pair"] == "XBTUSD"
    assert _run(client.fetch_volume_24h("BTC-USD")) == 2500.75


def test_kraken_error_bodies():
    def unknown(request):
        return httpx.Response(200, json={"error": ["EQuery:Unknown asset pair"]})

    with pytest.raises(UnsupportedSymbolError):
        _run(_client(KrakenClient, unknown).fetch_orderbook("SOL-GBP"))

    calls = []

    def limited(request):
        calls.append(request)
        return httpx.Response(200, json={"error": ["EAPI:Rate limit exceeded"]})

    with pytest.raises(RateLimitError):
        _run(_client(KrakenClient, limited, max_retries=2).fetch_orderbook("BTC-USD"))
    assert len(calls) == 2

    def other(request):
        return httpx.Response(200, json={"error": ["EGeneral:Internal error"]})

    with pytest.raises(VenueHTTPError):
        _run(_client(KrakenClient, other).fetch_orderbook("BTC-USD"))

    def empty(request):
        return httpx.Response(200, json={"error": [], "result": {}})

    with pytest.raises(MalformedResponseError):
        _run(_client(KrakenClient, empty).fetch_orderbook("BTC-USD"))


def test_ping():
    def handler(request):
        assert request.url.path == "/api/v3/ping"
        return httpx.Response(200, json={})

    _run(_client(BinanceClient, handler).ping())
