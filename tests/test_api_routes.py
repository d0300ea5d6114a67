"""Tests for the web frontend API routes (FastAPI TestClient, mocked collaborators)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "api"))

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from dependencies import SESSION_COOKIE, get_backend, get_maps, get_session_store
from main import app
from services.delivery_api import DeliveryApi
from services.maps import MapsError
from services.notifications import (
    MSG_BACKEND_UNAVAILABLE, MSG_CUSTOMER_INVALID, MSG_QUOTE_REQUIRED, MSG_ROUTE_FAILED, MSG_TRACK_INVALID,
)
from services.quote_session import QuoteSessionStore

ROUTE = {"from": "Tverskaya 1, Moscow", "to": "Nevsky 10, Saint Petersburg", "size": "m", "speed": "fast"}


@pytest.fixture
def provider():
    provider = AsyncMock()
    provider.route_distance.return_value = 50_000.0
    provider.suggest.return_value = ["Tverskaya 1, Moscow"]
    provider.reverse_geocode.return_value = "Tverskaya 1, Moscow"
    return provider


@pytest.fixture
def backend():
    backend = AsyncMock()
    backend.create_delivery.return_value = {"id": 9001}
    backend.get_delivery_info.return_value = {"status": "IN_TRANSIT"}
    return backend


@pytest.fixture
def client(provider, backend):
    store = QuoteSessionStore(provider)
    app.dependency_overrides[get_session_store] = lambda: store
    app.dependency_overrides[get_backend] = lambda: backend
    app.dependency_overrides[get_maps] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_catalog(client):
    body = client.get("/api/catalog").json()
    assert [s["value"] for s in body["sizes"]] == ["xs", "s", "m", "l", "xl"]
    assert {"value": "m", "label": "Medium box", "rate": 20.0, "min": 300} in body["sizes"]
    assert [s["value"] for s in body["speeds"]] == ["regular", "fast"]
    assert body["default_size"] == "xs"


def test_calculate_quote(client):
    resp = client.post("/api/quote", json=ROUTE, headers={"X-Session-Id": "v1"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["state"] == "READY"
    assert body["quote"] == {
        "from": "Tverskaya 1, Moscow", "to": "Nevsky 10, Saint Petersburg", "size": "m",
        "distance": 50.0, "duration": 2, "rate": 20.0, "total": 1150, "speed": "fast",
    }
    assert body["toasts"] == []

    current = client.get("/api/quote", headers={"X-Session-Id": "v1"}).json()
    assert current["quote"]["total"] == 1150


def test_sessions_are_separate(client):
    client.post("/api/quote", json=ROUTE, headers={"X-Session-Id": "v1"})
    other = client.get("/api/quote", headers={"X-Session-Id": "v2"}).json()
    assert other["state"] == "EMPTY"
    assert other["quote"] is None


def test_visitors_without_header_get_own_sessions(client):
    first = client.post("/api/quote", json=ROUTE)
    assert first.json()["state"] == "READY"
    assert SESSION_COOKIE in first.cookies

    # the same browser keeps its cookie and sees its quote
    assert client.get("/api/quote").json()["quote"]["total"] == 1150

    stranger = TestClient(app).get("/api/quote").json()
    assert stranger["state"] == "EMPTY"
    assert stranger["quote"] is None


def test_header_takes_precedence_over_cookie(client):
    client.post("/api/quote", json=ROUTE)
    body = client.get("/api/quote", headers={"X-Session-Id": "bot-42"}).json()
    assert body["quote"] is None


def test_incomplete_route(client, provider):
    body = client.post("/api/quote", json={**ROUTE, "to": ""}).json()
    assert body["state"] == "EMPTY"
    assert body["quote"] is None
    assert body["toasts"] == []
    provider.route_distance.assert_not_called()


def test_route_failure_toast(client, provider):
    provider.route_distance.side_effect = MapsError("down")
    body = client.post("/api/quote", json=ROUTE).json()
    assert body["state"] == "EMPTY"
    assert body["quote"] is None
    assert body["toasts"] == [{"level": "error", "message": MSG_ROUTE_FAILED}]


def test_order_requires_quote(client, backend):
    body = client.post("/api/orders", json={"name": "Ann", "phone": "1"}).json()
    assert body["order_id"] is None
    assert body["toasts"] == [{"level": "error", "message": MSG_QUOTE_REQUIRED}]
    backend.create_delivery.assert_not_called()


def test_order_flow(client, backend):
    headers = {"X-Session-Id": "v1"}
    client.post("/api/quote", json=ROUTE, headers=headers)

    bad = client.post("/api/orders", json={"name": "Ann", "phone": " "}, headers=headers).json()
    assert bad["toasts"][0]["message"] == MSG_CUSTOMER_INVALID

    body = client.post(
        "/api/orders", json={"name": "Ann", "phone": "+7 900", "comment": "call first"}, headers=headers,
    ).json()
    assert body["order_id"] == 9001
    assert body["toasts"][0]["level"] == "success"

    payload = backend.create_delivery.call_args.args[0]
    assert payload["calculation"]["total"] == 1150
    assert payload["customer"]["comment"] == "call first"

    session = client.get("/api/quote", headers=headers).json()
    assert session["state"] == "READY"
    assert session["order_id"] == 9001


def test_order_backend_error(client, backend):
    backend.create_delivery.return_value = {"error": "Service area not covered"}
    client.post("/api/quote", json=ROUTE)
    body = client.post("/api/orders", json={"name": "Ann", "phone": "1"}).json()
    assert body["order_id"] is None
    assert body["toasts"] == [{"level": "error", "message": "Service area not covered"}]


def test_track(client, backend):
    body = client.get("/api/track", params={"number": "17"}).json()
    assert body["info"] == {"status": "IN_TRANSIT"}
    backend.get_delivery_info.assert_awaited_once_with(17)


def test_track_invalid(client, backend):
    body = client.get("/api/track", params={"number": "abc"}).json()
    assert body["info"] is None
    assert body["toasts"] == [{"level": "error", "message": MSG_TRACK_INVALID}]
    backend.get_delivery_info.assert_not_called()


def test_geo_suggest(client):
    body = client.get("/api/geo/suggest", params={"text": "Tvers"}).json()
    assert body["suggestions"] == ["Tverskaya 1, Moscow"]


def test_geo_reverse(client):
    body = client.get("/api/geo/reverse", params={"lat": 55.75, "lng": 37.61}).json()
    assert body["address"] == "Tverskaya 1, Moscow"


def test_geo_reverse_validates_coordinates(client):
    assert client.get("/api/geo/reverse", params={"lat": 123, "lng": 0}).status_code == 422


def test_geo_without_provider(client):
    app.dependency_overrides[get_maps] = lambda: None
    assert client.get("/api/geo/suggest", params={"text": "Tvers"}).json()["suggestions"] == []
    assert client.get("/api/geo/reverse", params={"lat": 1, "lng": 1}).status_code == 503


@pytest.mark.parametrize("error_value", [None, {"code": 500}, ""])
def test_unusable_backend_error_degrades_to_toast(client, error_value):
    def handler(request):
        return httpx.Response(200, json={"error": error_value})

    real_backend = DeliveryApi("http://backend.test/api", httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    app.dependency_overrides[get_backend] = lambda: real_backend
    client.post("/api/quote", json=ROUTE)

    order = client.post("/api/orders", json={"name": "Ann", "phone": "1"})
    assert order.status_code == 200
    assert order.json()["toasts"] == [{"level": "error", "message": MSG_BACKEND_UNAVAILABLE}]

    track = client.get("/api/track", params={"number": "5"})
    assert track.status_code == 200
    assert track.json()["info"] is None
    assert track.json()["toasts"] == [{"level": "error", "message": MSG_BACKEND_UNAVAILABLE}]
