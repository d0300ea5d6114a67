"""Address helpers for the route form: autocomplete and 'from' prefill."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from dependencies import get_maps
from schemas import ReverseGeocodeResponse, SuggestResponse
from services.maps import GeoapifyProvider, MapsError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/suggest", response_model=SuggestResponse)
async def suggest(
    text: str = Query(""),
    limit: int = Query(5, ge=1, le=10),
    maps: GeoapifyProvider | None = Depends(get_maps),
):
    """Address suggestions while the user types."""
    if maps is None:
        return SuggestResponse(suggestions=[])
    return SuggestResponse(suggestions=await maps.suggest(text, limit))


@router.get("/reverse", response_model=ReverseGeocodeResponse)
async def reverse(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    maps: GeoapifyProvider | None = Depends(get_maps),
):
    """Nearest address for the browser's geolocation."""
    if maps is None:
        raise HTTPException(status_code=503, detail="Maps provider is not configured")
    try:
        address = await maps.reverse_geocode(lat, lng)
    except MapsError as e:
        logger.warning("Reverse geocode failed for %s,%s: %s", lat, lng, e)
        return ReverseGeocodeResponse(address=None)
    return ReverseGeocodeResponse(address=address)
