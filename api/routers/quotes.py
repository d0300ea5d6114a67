"""Route catalog and price quote endpoints."""

from fastapi import APIRouter, Depends

from dependencies import get_quote_session
from schemas import (
    CatalogResponse, QuoteResponse, RouteRequest, SizeTierResponse,
    SpeedTierResponse,
)
from services.notifications import ToastCollector
from services.pricing import DELIVERY_SIZES, DELIVERY_SPEEDS
from services.quote_session import QuoteSession

router = APIRouter()


@router.get("/catalog", response_model=CatalogResponse)
async def get_catalog():
    """Size and speed options for the route form."""
    return CatalogResponse(
        sizes=[
            SizeTierResponse(value=s.value, label=s.label, rate=s.rate, min=s.min)
            for s in DELIVERY_SIZES
        ],
        speeds=[SpeedTierResponse(value=s.value, label=s.label) for s in DELIVERY_SPEEDS],
    )


@router.post("/quote", response_model=QuoteResponse)
async def calculate_quote(
    route: RouteRequest,
    session: QuoteSession = Depends(get_quote_session),
):
    """Drop the current quote and calculate a new one for the route."""
    notifier = ToastCollector()
    await session.request_calculation(route, notifier)
    return QuoteResponse(
        state=session.state,
        quote=session.quote,
        order_id=session.order_id,
        toasts=notifier.as_dicts(),
    )


@router.get("/quote", response_model=QuoteResponse)
async def get_quote(session: QuoteSession = Depends(get_quote_session)):
    """Current quote session state."""
    return QuoteResponse(
        state=session.state,
        quote=session.quote,
        order_id=session.order_id,
    )
