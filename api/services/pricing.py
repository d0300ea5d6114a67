"""
Pricing Policy — turns a route distance and the selected options into a quote.

Rules:
  1. Base total: distance × size rate, never below the size minimum
  2. Base duration: one day plus one day per started 80 km, capped at 30
  3. Fast delivery: +15% on the total, −30% on the duration

Every step rounds up, in the order above.
"""

import math
from dataclasses import dataclass


# ── Constants ──────────────────────────────────────────────

KM_PER_TRANSIT_DAY = 80
MAX_DURATION_DAYS = 30

FAST_PRICE_MULTIPLIER = 1.15
FAST_DURATION_DISCOUNT = 0.30

FAST = "fast"
REGULAR = "regular"


# ── Data classes ───────────────────────────────────────────

@dataclass(frozen=True)
class SizeTier:
    value: str
    label: str
    rate: float   # per km
    min: int      # minimum chargeable total


@dataclass(frozen=True)
class SpeedTier:
    value: str
    label: str


@dataclass(frozen=True)
class PriceQuote:
    total: int
    duration_days: int


class InvalidDistanceError(ValueError):
    """Distance is negative, NaN or infinite."""


# ── Catalog ────────────────────────────────────────────────

DELIVERY_SIZES: tuple[SizeTier, ...] = (
    SizeTier("xs", "Documents / envelope", rate=12, min=250),
    SizeTier("s", "Small box", rate=15, min=300),
    SizeTier("m", "Medium box", rate=20, min=300),
    SizeTier("l", "Large box", rate=28, min=450),
    SizeTier("xl", "Oversized cargo", rate=40, min=700),
)

DELIVERY_SPEEDS: tuple[SpeedTier, ...] = (
    SpeedTier(REGULAR, "Regular"),
    SpeedTier(FAST, "Fast"),
)

DEFAULT_SIZE = "xs"
DEFAULT_SPEED = REGULAR


def get_size_tier(value: str | None) -> SizeTier | None:
    """Look up a size tier by id."""
    return next((s for s in DELIVERY_SIZES if s.value == value), None)


def get_speed_tier(value: str | None) -> SpeedTier | None:
    """Look up a speed tier by id."""
    return next((s for s in DELIVERY_SPEEDS if s.value == value), None)


# ── Core Functions ─────────────────────────────────────────

def calculate_price(
    distance_km: float,
    size: SizeTier,
    speed: SpeedTier | str = REGULAR,
) -> PriceQuote:
    """
    Calculate total price and delivery duration for a route.

    Args:
        distance_km: Route length in kilometres (>= 0, finite)
        size: Size tier with its per-km rate and minimum total
        speed: Speed tier or its id; only "fast" changes the result

    Returns:
        PriceQuote with integer total and duration in days

    Raises:
        InvalidDistanceError: distance is negative or not finite
    """
    if not math.isfinite(distance_km) or distance_km < 0:
        raise InvalidDistanceError(f"Invalid route distance: {distance_km!r}")

    speed_value = speed.value if isinstance(speed, SpeedTier) else speed

    total = max(size.min, math.ceil(distance_km * size.rate))
    duration = min(MAX_DURATION_DAYS, 1 + math.ceil(distance_km / KM_PER_TRANSIT_DAY))

    if speed_value == FAST:
        total = math.ceil(total * FAST_PRICE_MULTIPLIER)
        # discount is taken from the already rounded base duration
        duration = math.ceil(duration - duration * FAST_DURATION_DISCOUNT)

    return PriceQuote(total=int(total), duration_days=int(duration))
