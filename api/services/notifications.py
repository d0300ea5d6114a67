"""
Notification Service — Toasts shown to the customer.

Operations never talk to the page directly; they get a notifier and call
success()/error() on it. The web routers hand in a ToastCollector and
return the collected toasts in the response body.
"""

from dataclasses import dataclass, field
from typing import Literal, Protocol


# ── Messages ───────────────────────────────────────────────

MSG_ROUTE_FAILED = "Could not build the route. Check the addresses and the selected options."
MSG_QUOTE_REQUIRED = "Calculate the price first to place an order."
MSG_CUSTOMER_INVALID = "Enter your name and a valid phone number."
MSG_ORDER_PLACED = "Your order has been placed!"
MSG_TRACK_EMPTY = "Enter the shipment number."
MSG_TRACK_INVALID = "Enter a valid shipment number."
MSG_TRACK_FOUND = "Shipment details received!"
MSG_BACKEND_UNAVAILABLE = "Delivery service is unavailable. Please try again later."


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


@dataclass
class Toast:
    level: Literal["success", "error"]
    message: str


@dataclass
class ToastCollector:
    """Notifier that records toasts for the caller to render."""

    toasts: list[Toast] = field(default_factory=list)

    def success(self, message: str) -> None:
        self.toasts.append(Toast("success", message))

    def error(self, message: str) -> None:
        self.toasts.append(Toast("error", message))

    @property
    def errors(self) -> list[str]:
        return [t.message for t in self.toasts if t.level == "error"]

    def as_dicts(self) -> list[dict]:
        return [{"level": t.level, "message": t.message} for t in self.toasts]
