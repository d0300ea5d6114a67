"""
Order submission and shipment tracking.

Both operations validate locally first; nothing reaches the delivery
backend unless the input is usable.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from schemas import CustomerFields, OrderPayload, Quote
from services.delivery_api import DeliveryApi, is_error
from services.notifications import (
    MSG_BACKEND_UNAVAILABLE, MSG_CUSTOMER_INVALID, MSG_ORDER_PLACED, MSG_QUOTE_REQUIRED,
    MSG_TRACK_EMPTY, MSG_TRACK_FOUND, MSG_TRACK_INVALID, Notifier,
)

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


@dataclass
class SubmissionResult:
    order_id: Any = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class TrackingResult:
    info: dict | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


# ── Order Submission ───────────────────────────────────────

def build_order_payload(
    quote: Quote | None,
    customer: CustomerFields,
    now: datetime | None = None,
) -> OrderPayload | None:
    """Trimmed customer fields plus the quote, or None if name/phone are missing."""
    if quote is None:
        return None
    name = (customer.name or "").strip()
    phone = (customer.phone or "").strip()
    comment = (customer.comment or "").strip()
    if not name or not phone:
        return None

    return OrderPayload(
        customer=CustomerFields(name=name, phone=phone, comment=comment),
        calculation=quote,
        created_at=now or datetime.now(timezone.utc),
    )


async def submit_order(
    quote: Quote | None,
    customer: CustomerFields,
    backend: DeliveryApi,
    notifier: Notifier,
) -> SubmissionResult:
    if quote is None:
        notifier.error(MSG_QUOTE_REQUIRED)
        return SubmissionResult(error=MSG_QUOTE_REQUIRED)

    payload = build_order_payload(quote, customer)
    if payload is None:
        notifier.error(MSG_CUSTOMER_INVALID)
        return SubmissionResult(error=MSG_CUSTOMER_INVALID)

    response = await backend.create_delivery(payload.to_wire())
    if is_error(response):
        notifier.error(response["error"])
        return SubmissionResult(error=response["error"])

    order_id = response.get("id")
    if order_id is None:
        logger.warning("Delivery backend accepted the order without an id: %r", response)
        notifier.error(MSG_BACKEND_UNAVAILABLE)
        return SubmissionResult(error=MSG_BACKEND_UNAVAILABLE)

    logger.info("Order created: id=%s total=%s", order_id, quote.total)
    notifier.success(MSG_ORDER_PLACED)
    return SubmissionResult(order_id=order_id)


# ── Tracking ───────────────────────────────────────────────

def parse_tracking_number(raw: str) -> int | None:
    """Positive whole shipment number from user input, or None."""
    text = raw.strip()
    if not _NUMBER_RE.match(text):
        return None
    try:
        value = float(text)
    except (OverflowError, ValueError):
        return None
    if not math.isfinite(value) or value <= 0 or not value.is_integer():
        return None
    return int(value)


async def track_shipment(
    raw: str | None,
    backend: DeliveryApi,
    notifier: Notifier,
) -> TrackingResult:
    text = (raw or "").strip()
    if not text:
        notifier.error(MSG_TRACK_EMPTY)
        return TrackingResult(error=MSG_TRACK_EMPTY)

    number = parse_tracking_number(text)
    if number is None:
        notifier.error(MSG_TRACK_INVALID)
        return TrackingResult(error=MSG_TRACK_INVALID)

    response = await backend.get_delivery_info(number)
    if is_error(response):
        notifier.error(response["error"])
        return TrackingResult(error=response["error"])

    notifier.success(MSG_TRACK_FOUND)
    return TrackingResult(info=response)
