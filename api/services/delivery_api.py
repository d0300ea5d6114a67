"""
Delivery Backend client — order creation and shipment tracking.

The backend answers {"error": "..."} on failure, whatever the HTTP status.
This client keeps that contract: every call returns a dict, and transport
problems are folded into the same {"error": ...} shape. The error value
is always a non-empty string.
"""

import logging
from typing import Any

import httpx

from config import settings
from services.notifications import MSG_BACKEND_UNAVAILABLE

logger = logging.getLogger(__name__)


def is_error(response: dict) -> bool:
    return "error" in response


def _error_text(value: Any) -> str:
    """Backend error value as a toast message; null, empty or structured values become the generic one."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return MSG_BACKEND_UNAVAILABLE
    text = str(value).strip()
    return text or MSG_BACKEND_UNAVAILABLE


class DeliveryApi:
    def __init__(self, base_url: str, http: httpx.AsyncClient):
        self.base_url = base_url.rstrip("/")
        self.http = http

    async def _call(self, method: str, endpoint: str, **kwargs: Any) -> dict:
        url = f"{self.base_url}{endpoint}"
        try:
            resp = await self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Delivery API %s %s failed: %s", method, endpoint, e)
            return {"error": MSG_BACKEND_UNAVAILABLE}

        try:
            data = resp.json()
        except ValueError:
            logger.warning(
                "Delivery API %s %s returned non-JSON (status=%s): %s",
                method, endpoint, resp.status_code, resp.text[:200],
            )
            return {"error": MSG_BACKEND_UNAVAILABLE}

        if not isinstance(data, dict):
            logger.warning("Delivery API %s %s returned %s", method, endpoint, type(data).__name__)
            return {"error": MSG_BACKEND_UNAVAILABLE}

        if is_error(data):
            logger.info("Delivery API %s %s error: %r", method, endpoint, data["error"])
            return {**data, "error": _error_text(data["error"])}
        if resp.status_code >= 400:
            logger.warning(
                "Delivery API %s %s status=%s without error field",
                method, endpoint, resp.status_code,
            )
            return {"error": MSG_BACKEND_UNAVAILABLE}
        return data

    async def create_delivery(self, payload: dict) -> dict:
        """POST the order payload; {"id": ...} or {"error": ...}."""
        return await self._call("POST", "/deliveries", json=payload)

    async def get_delivery_info(self, delivery_id: int) -> dict:
        """Tracking fields for a shipment, or {"error": ...}."""
        return await self._call("GET", f"/deliveries/{delivery_id}")


_http: httpx.AsyncClient | None = None
_client: DeliveryApi | None = None


def get_delivery_api() -> DeliveryApi:
    global _http, _client
    if _client is None:
        _http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC)
        _client = DeliveryApi(settings.DELIVERY_API_URL, _http)
    return _client


async def close_delivery_api() -> None:
    global _http, _client
    if _http is not None:
        await _http.aclose()
    _http = _client = None
