"""
Quote Session — holds the last computed quote for one visitor.

State machine:
  EMPTY → CALCULATING → READY(quote)
                      → FAILED → EMPTY (after the error toast)

Every calculation request drops the current quote before anything else,
so a reader never sees a quote for inputs that have since changed.
Lookups are tagged with a generation number; a result that comes back
after a newer request was issued is discarded.
"""

import logging
from collections import OrderedDict
from typing import Any, Protocol

from schemas import CustomerFields, Quote, RouteRequest, SessionState
from services.delivery_api import DeliveryApi
from services.notifications import MSG_ROUTE_FAILED, Notifier
from services.ordering import SubmissionResult, submit_order
from services.pricing import DEFAULT_SPEED, calculate_price, get_size_tier, get_speed_tier

logger = logging.getLogger(__name__)

MAX_SESSIONS = 10_000


class RouteDistanceProvider(Protocol):
    async def route_distance(self, origin: str, destination: str) -> float | None: ...


def build_quote(route: RouteRequest, distance_m: float | None) -> Quote | None:
    """Price a resolved route. None means the route cannot be quoted."""
    if distance_m is None:
        return None
    size = get_size_tier(route.size)
    if size is None:
        return None

    # unknown speed ids are priced and recorded as the default speed
    speed = get_speed_tier(route.speed) or get_speed_tier(DEFAULT_SPEED)

    km = distance_m / 1000
    price = calculate_price(km, size, speed)
    return Quote(
        from_address=route.from_address,
        to_address=route.to_address,
        size=route.size,
        distance_km=round(km, 1),
        duration_days=price.duration_days,
        rate=size.rate,
        total=price.total,
        speed=speed.value,
    )


class QuoteSession:
    def __init__(self, provider: RouteDistanceProvider | None):
        self.provider = provider
        self.state = SessionState.EMPTY
        self.quote: Quote | None = None
        self.order_id: Any = None
        self._generation = 0

    def _fail(self, notifier: Notifier) -> None:
        self.quote = None
        self.state = SessionState.FAILED
        notifier.error(MSG_ROUTE_FAILED)
        self.state = SessionState.EMPTY

    async def request_calculation(self, route: RouteRequest, notifier: Notifier) -> Quote | None:
        """
        Calculate a fresh quote for the route.

        Returns the new quote, or None when the request was a no-op,
        failed, or was superseded by a newer request while in flight.
        """
        self.quote = None
        self._generation += 1
        generation = self._generation

        if self.provider is None or not route.is_complete():
            self.state = SessionState.EMPTY
            return None

        self.state = SessionState.CALCULATING
        try:
            distance_m = await self.provider.route_distance(
                route.from_address.strip(), route.to_address.strip(),
            )
        except Exception as e:
            if generation != self._generation:
                logger.debug("Discarding failed lookup #%d (current #%d)", generation, self._generation)
                return None
            logger.warning("Route lookup failed: %s", e)
            self._fail(notifier)
            return None

        if generation != self._generation:
            logger.debug("Discarding superseded lookup #%d (current #%d)", generation, self._generation)
            return None

        try:
            quote = build_quote(route, distance_m)
        except Exception as e:
            logger.warning("Could not price route (distance=%r): %s", distance_m, e)
            quote = None

        if quote is None:
            self._fail(notifier)
            return None

        self.quote = quote
        self.state = SessionState.READY
        return quote

    async def submit(
        self,
        customer: CustomerFields,
        backend: DeliveryApi,
        notifier: Notifier,
    ) -> SubmissionResult:
        """Place an order for the current quote. Session state is unchanged."""
        result = await submit_order(self.quote, customer, backend, notifier)
        if result.order_id is not None:
            self.order_id = result.order_id
        return result


class QuoteSessionStore:
    """One QuoteSession per visitor, oldest evicted past MAX_SESSIONS."""

    def __init__(self, provider: RouteDistanceProvider | None, max_sessions: int = MAX_SESSIONS):
        self.provider = provider
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, QuoteSession] = OrderedDict()

    def get(self, session_id: str) -> QuoteSession:
        session = self._sessions.get(session_id)
        if session is None:
            session = QuoteSession(self.provider)
            self._sessions[session_id] = session
            while len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
        else:
            self._sessions.move_to_end(session_id)
        return session

    def __len__(self) -> int:
        return len(self._sessions)
