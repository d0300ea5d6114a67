"""Tests for the Geoapify maps service (httpx mock transport, mocked Redis)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "api"))

from unittest.mock import AsyncMock

import httpx
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from services.maps import (
    GEOCODE_CACHE_TTL, GEOAPIFY_ROUTING_URL, GeoapifyProvider, MapsError, _parse_lat_lng,
)

POINTS = {
    "Tverskaya 1, Moscow": (55.7575, 37.6136),
    "Nevsky 10, Saint Petersburg": (59.9365, 30.3155),
}


def _feature(**props) -> dict:
    return {"type": "Feature", "properties": props}


def _geoapify(route_distance=700_000, routes=True, calls=None):
    """Mock transport answering geocode, routing, reverse and autocomplete."""
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        path = request.url.path
        params = request.url.params
        assert params["apiKey"] == "test-key"
        if path == "/v1/geocode/search":
            point = POINTS.get(params["text"])
            features = [_feature(lat=point[0], lon=point[1])] if point else []
            return httpx.Response(200, json={"features": features})
        if path == "/v1/routing":
            features = [_feature(distance=route_distance, time=30000)] if routes else []
            return httpx.Response(200, json={"features": features})
        if path == "/v1/geocode/reverse":
            return httpx.Response(200, json={"features": [_feature(formatted="Tverskaya 1, Moscow")]})
        if path == "/v1/geocode/autocomplete":
            return httpx.Response(200, json={"features": [
                _feature(formatted="Tverskaya 1, Moscow"),
                _feature(formatted="Tverskaya 1, Moscow"),
                _feature(formatted="Tverskaya 12, Moscow"),
            ]})
        return httpx.Response(404, json={"error": "not found"})
    return handler


def _provider(handler, redis=None) -> GeoapifyProvider:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeoapifyProvider("test-key", http, redis)


def _empty_redis() -> AsyncMock:
    redis = AsyncMock()
    redis.hgetall.return_value = {}
    return redis


def test_parse_lat_lng():
    assert _parse_lat_lng("55.75, 37.61") == (55.75, 37.61)
    assert _parse_lat_lng("Tverskaya 1, Moscow") is None
    assert _parse_lat_lng("95, 10") is None
    assert _parse_lat_lng("") is None


@pytest.mark.asyncio
async def test_route_distance_in_meters():
    calls = []
    provider = _provider(_geoapify(route_distance=705_300.5, calls=calls))

    distance = await provider.route_distance("Tverskaya 1, Moscow", "Nevsky 10, Saint Petersburg")

    assert distance == 705_300.5
    routing = [c for c in calls if str(c.url).startswith(GEOAPIFY_ROUTING_URL)]
    assert routing[0].url.params["waypoints"] == "55.7575,37.6136|59.9365,30.3155"
    assert routing[0].url.params["mode"] == "drive"


@pytest.mark.asyncio
async def test_unknown_address_means_no_route():
    provider = _provider(_geoapify())
    assert await provider.route_distance("Nowhere 0", "Nevsky 10, Saint Petersburg") is None


@pytest.mark.asyncio
async def test_no_route_features():
    provider = _provider(_geoapify(routes=False))
    assert await provider.route_distance("Tverskaya 1, Moscow", "Nevsky 10, Saint Petersburg") is None


@pytest.mark.asyncio
async def test_coordinates_skip_geocoding():
    calls = []
    provider = _provider(_geoapify(calls=calls))

    await provider.route_distance("55.1,37.2", "55.3,37.4")

    assert [c.url.path for c in calls] == ["/v1/routing"]


@pytest.mark.asyncio
async def test_http_error_status_raises():
    provider = _provider(lambda request: httpx.Response(500, text="down"))
    with pytest.raises(MapsError):
        await provider.route_distance("Tverskaya 1, Moscow", "Nevsky 10, Saint Petersburg")


@pytest.mark.asyncio
async def test_transport_error_raises():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(MapsError):
        await _provider(handler).geocode("Tverskaya 1, Moscow")


@pytest.mark.asyncio
async def test_non_numeric_distance_raises():
    provider = _provider(_geoapify(route_distance="far"))
    with pytest.raises(MapsError):
        await provider.route_distance("Tverskaya 1, Moscow", "Nevsky 10, Saint Petersburg")


@pytest.mark.asyncio
async def test_geocode_result_cached():
    redis = _empty_redis()
    provider = _provider(_geoapify(), redis)

    point = await provider.geocode("Tverskaya 1, Moscow")

    assert point == (55.7575, 37.6136)
    redis.hset.assert_called_once()
    redis.expire.assert_called_once()
    assert redis.expire.call_args.args[1] == GEOCODE_CACHE_TTL


@pytest.mark.asyncio
async def test_geocode_cache_hit_skips_http():
    calls = []
    redis = AsyncMock()
    redis.hgetall.return_value = {"lat": "1.5", "lng": "2.5"}
    provider = _provider(_geoapify(calls=calls), redis)

    assert await provider.geocode("Anything at all") == (1.5, 2.5)
    assert calls == []


@pytest.mark.asyncio
async def test_geocode_cache_failure_is_not_fatal():
    redis = AsyncMock()
    redis.hgetall.side_effect = RedisConnectionError("redis down")
    redis.hset.side_effect = RedisConnectionError("redis down")
    provider = _provider(_geoapify(), redis)

    assert await provider.geocode("Tverskaya 1, Moscow") == (55.7575, 37.6136)


@pytest.mark.asyncio
async def test_reverse_geocode():
    provider = _provider(_geoapify())
    assert await provider.reverse_geocode(55.7575, 37.6136) == "Tverskaya 1, Moscow"


@pytest.mark.asyncio
async def test_suggest_deduplicates():
    provider = _provider(_geoapify())
    assert await provider.suggest("Tvers") == ["Tverskaya 1, Moscow", "Tverskaya 12, Moscow"]


@pytest.mark.asyncio
async def test_suggest_short_text():
    calls = []
    provider = _provider(_geoapify(calls=calls))
    assert await provider.suggest(" Tv ") == []
    assert calls == []


@pytest.mark.asyncio
async def test_suggest_failure_returns_empty():
    provider = _provider(lambda request: httpx.Response(503, text="busy"))
    assert await provider.suggest("Tverskaya") == []
