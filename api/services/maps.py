"""
Geoapify Maps Service — Route distance, reverse geocoding and address suggestions.

Route distance is the only input the pricing policy needs:
  1. Geocode both addresses (Redis cache, 30-day TTL)
  2. Ask the routing API for a driving route between them
  3. Return its length in meters, or None when there is no route
"""

import hashlib
import logging

import httpx
import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config import settings

logger = logging.getLogger(__name__)

GEOAPIFY_GEOCODE_URL = "https://api.geoapify.com/v1/geocode/search"
GEOAPIFY_REVERSE_URL = "https://api.geoapify.com/v1/geocode/reverse"
GEOAPIFY_AUTOCOMPLETE_URL = "https://api.geoapify.com/v1/geocode/autocomplete"
GEOAPIFY_ROUTING_URL = "https://api.geoapify.com/v1/routing"

GEOCODE_CACHE_TTL = 30 * 24 * 3600   # 30 days
MIN_SUGGEST_LENGTH = 3


class MapsError(Exception):
    """The mapping provider failed or answered with something unusable."""


def _address_hash(address: str) -> str:
    """Normalize and hash an address for cache key."""
    normalized = " ".join(address.strip().lower().split())
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def _parse_lat_lng(text: str) -> tuple[float, float] | None:
    """Parse a 'lat,lng' pair typed or pasted instead of an address."""
    if not text or "," not in text:
        return None
    parts = text.strip().split(",", 1)
    try:
        lat, lng = float(parts[0].strip()), float(parts[1].strip())
    except ValueError:
        return None
    if -90 <= lat <= 90 and -180 <= lng <= 180:
        return lat, lng
    return None


class GeoapifyProvider:
    """Route Distance Provider backed by the Geoapify HTTP APIs."""

    def __init__(
        self,
        api_key: str,
        http: httpx.AsyncClient,
        redis: aioredis.Redis | None = None,
    ):
        self.api_key = api_key
        self.http = http
        self.redis = redis

    async def _get_json(self, url: str, params: dict) -> dict:
        try:
            resp = await self.http.get(url, params={**params, "apiKey": self.api_key})
        except httpx.HTTPError as e:
            raise MapsError(f"Geoapify request failed: {e}") from e
        if resp.status_code != 200:
            raise MapsError(f"Geoapify answered {resp.status_code}: {resp.text[:200]}")
        try:
            data = resp.json()
        except ValueError as e:
            raise MapsError("Geoapify returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise MapsError("Geoapify returned an unexpected payload")
        return data

    # ── Cache ───────────────────────────────────────────────

    async def _cache_get(self, key: str) -> dict | None:
        if self.redis is None:
            return None
        try:
            cached = await self.redis.hgetall(key)
        except RedisError as e:
            logger.warning("Geocode cache read failed: %s", e)
            return None
        if cached and "lat" in cached:
            return cached
        return None

    async def _cache_put(self, key: str, point: tuple[float, float]) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.hset(key, mapping={"lat": str(point[0]), "lng": str(point[1])})
            await self.redis.expire(key, GEOCODE_CACHE_TTL)
        except RedisError as e:
            logger.warning("Geocode cache write failed: %s", e)

    # ── Geocoding ───────────────────────────────────────────

    async def geocode(self, address: str) -> tuple[float, float] | None:
        """Resolve an address to (lat, lng), or None when nothing matches."""
        coords = _parse_lat_lng(address)
        if coords is not None:
            return coords

        cache_key = f"geo:{_address_hash(address)}"
        cached = await self._cache_get(cache_key)
        if cached:
            return float(cached["lat"]), float(cached["lng"])

        data = await self._get_json(GEOAPIFY_GEOCODE_URL, {"text": address.strip(), "limit": 1})
        features = data.get("features") or []
        if not features:
            logger.info("Geocode miss for '%s'", address[:60])
            return None

        props = features[0].get("properties") or {}
        lat, lon = props.get("lat"), props.get("lon")
        if lat is None or lon is None:
            return None

        point = (float(lat), float(lon))
        await self._cache_put(cache_key, point)
        return point

    async def reverse_geocode(self, lat: float, lng: float) -> str | None:
        """Nearest street address for a coordinate, used to prefill 'from'."""
        data = await self._get_json(GEOAPIFY_REVERSE_URL, {"lat": lat, "lon": lng, "limit": 1})
        features = data.get("features") or []
        if not features:
            return None
        props = features[0].get("properties") or {}
        return props.get("formatted") or props.get("address_line1")

    async def suggest(self, text: str, limit: int = 5) -> list[str]:
        """Address autocomplete. Suggestions are best-effort: failures yield []."""
        text = text.strip()
        if len(text) < MIN_SUGGEST_LENGTH:
            return []
        try:
            data = await self._get_json(GEOAPIFY_AUTOCOMPLETE_URL, {"text": text, "limit": limit})
        except MapsError as e:
            logger.warning("Address suggestions unavailable: %s", e)
            return []

        suggestions = []
        for feature in data.get("features") or []:
            formatted = (feature.get("properties") or {}).get("formatted")
            if formatted and formatted not in suggestions:
                suggestions.append(formatted)
        return suggestions[:limit]

    # ── Routing ─────────────────────────────────────────────

    async def route_distance(self, origin: str, destination: str) -> float | None:
        """
        Driving distance between two addresses.

        Returns:
            Distance in meters, or None when an address cannot be found
            or no route connects them.

        Raises:
            MapsError: transport failure or malformed provider response
        """
        start = await self.geocode(origin)
        end = await self.geocode(destination)
        if start is None or end is None:
            return None

        data = await self._get_json(
            GEOAPIFY_ROUTING_URL,
            {
                "waypoints": f"{start[0]},{start[1]}|{end[0]},{end[1]}",
                "mode": "drive",
            },
        )
        features = data.get("features") or []
        if not features:
            return None

        distance_m = (features[0].get("properties") or {}).get("distance")
        if not isinstance(distance_m, (int, float)) or isinstance(distance_m, bool):
            raise MapsError(f"Geoapify route has no numeric distance: {distance_m!r}")
        return float(distance_m)


# ── Shared instance ────────────────────────────────────────

_http: httpx.AsyncClient | None = None
_redis: aioredis.Redis | None = None
_provider: GeoapifyProvider | None = None


def get_provider() -> GeoapifyProvider | None:
    """Process-wide provider, or None when no API key is configured."""
    global _http, _redis, _provider
    if not settings.GEOAPIFY_API_KEY:
        return None
    if _provider is None:
        _http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SEC)
        _redis = aioredis.from_url(settings.REDIS_URL, decode_responses=True)
        _provider = GeoapifyProvider(settings.GEOAPIFY_API_KEY, _http, _redis)
    return _provider


async def close_provider() -> None:
    global _http, _redis, _provider
    if _http is not None:
        await _http.aclose()
    if _redis is not None:
        await _redis.aclose()
    _http = _redis = _provider = None
