"""Pydantic schemas for API request/response models."""

from __future__ import annotations
from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field

from services.pricing import DEFAULT_SIZE, DEFAULT_SPEED


# ── Enums ──────────────────────────────────────────────────

class SessionState(str, Enum):
    EMPTY = "EMPTY"
    CALCULATING = "CALCULATING"
    READY = "READY"
    FAILED = "FAILED"


# ── Catalog Schemas ────────────────────────────────────────

class SizeTierResponse(BaseModel):
    value: str
    label: str
    rate: float
    min: int


class SpeedTierResponse(BaseModel):
    value: str
    label: str


class CatalogResponse(BaseModel):
    sizes: list[SizeTierResponse]
    speeds: list[SpeedTierResponse]
    default_size: str = DEFAULT_SIZE
    default_speed: str = DEFAULT_SPEED


# ── Quote Schemas ──────────────────────────────────────────

class RouteRequest(BaseModel):
    from_address: str = Field("", alias="from")
    to_address: str = Field("", alias="to")
    size: str = DEFAULT_SIZE
    speed: str = DEFAULT_SPEED

    class Config:
        populate_by_name = True

    def is_complete(self) -> bool:
        """All four route fields are filled in."""
        return all(
            (value or "").strip()
            for value in (self.from_address, self.to_address, self.size, self.speed)
        )


class Quote(BaseModel):
    from_address: str = Field(alias="from")
    to_address: str = Field(alias="to")
    size: str
    distance_km: float = Field(alias="distance")
    duration_days: int = Field(alias="duration", ge=1, le=30)
    rate: float
    total: int = Field(gt=0)
    speed: str

    class Config:
        populate_by_name = True


class ToastResponse(BaseModel):
    level: Literal["success", "error"]
    message: str


class QuoteResponse(BaseModel):
    state: SessionState
    quote: Quote | None = None
    order_id: Any = None
    toasts: list[ToastResponse] = []


# ── Order Schemas ──────────────────────────────────────────

class CustomerFields(BaseModel):
    name: str | None = ""
    phone: str | None = ""
    comment: str | None = ""


class OrderPayload(BaseModel):
    customer: CustomerFields
    calculation: Quote
    created_at: datetime = Field(alias="createdAt")

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict:
        """JSON body for the delivery backend."""
        body = self.model_dump(mode="json", by_alias=True)
        body["createdAt"] = (
            self.created_at.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        )
        return body


class OrderResponse(BaseModel):
    order_id: Any = None
    toasts: list[ToastResponse] = []


# ── Tracking Schemas ───────────────────────────────────────

class TrackingResponse(BaseModel):
    info: dict[str, Any] | None = None
    toasts: list[ToastResponse] = []


# ── Geo Schemas ────────────────────────────────────────────

class SuggestResponse(BaseModel):
    suggestions: list[str]


class ReverseGeocodeResponse(BaseModel):
    address: str | None = None
