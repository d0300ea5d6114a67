"""Order submission and shipment tracking endpoints."""

from fastapi import APIRouter, Depends, Query

from dependencies import get_backend, get_quote_session
from schemas import CustomerFields, OrderResponse, TrackingResponse
from services.delivery_api import DeliveryApi
from services.notifications import ToastCollector
from services.ordering import track_shipment
from services.quote_session import QuoteSession

router = APIRouter()


@router.post("/orders", response_model=OrderResponse)
async def create_order(
    customer: CustomerFields,
    session: QuoteSession = Depends(get_quote_session),
    backend: DeliveryApi = Depends(get_backend),
):
    """Place an order for the visitor's current quote."""
    notifier = ToastCollector()
    result = await session.submit(customer, backend, notifier)
    return OrderResponse(order_id=result.order_id, toasts=notifier.as_dicts())


@router.get("/track", response_model=TrackingResponse)
async def track(
    number: str = Query(""),
    backend: DeliveryApi = Depends(get_backend),
):
    """Look up a shipment by its number."""
    notifier = ToastCollector()
    result = await track_shipment(number, backend, notifier)
    return TrackingResponse(info=result.info, toasts=notifier.as_dicts())
