"""
Pricing Engine - Evaluation Cost Breakdown

Pure functions: no I/O and no shared mutable state, so the storefront
cart and the checkout flow always compute identical prices.

Per property:  base price (city) + proximity fee (zone) + rush fee
Per order:     subtotal - bulk discount (4+ properties) + surge fee (once)
"""

from __future__ import annotations

import math
from typing import Final, Iterable, Union

from core.orders.schema import OrderPricing, PriceBreakdown, ProximityZone


# =============================================================================
# Pricing Tables
# =============================================================================

# Admin-configurable city base prices
CITY_PRICING: Final[dict[str, dict]] = {
    "kamloops": {"name": "Kamloops", "base_price": 18.0},
    "vancouver": {"name": "Vancouver", "base_price": 28.0},
    "toronto": {"name": "Toronto", "base_price": 30.0},
}

# Unknown cities are priced as this one
DEFAULT_CITY: Final[str] = "vancouver"

PROXIMITY_FEES: Final[dict[ProximityZone, float]] = {
    ProximityZone.A: 0.0,
    ProximityZone.B: 3.0,
    ProximityZone.C: 6.0,
    ProximityZone.D: 9.0,
}

PROXIMITY_ZONE_DESCRIPTIONS: Final[dict[ProximityZone, str]] = {
    ProximityZone.A: "0-5 km",
    ProximityZone.B: "5-10 km",
    ProximityZone.C: "10-15 km",
    ProximityZone.D: ">15 km",
}

RUSH_FEE: Final[float] = 7.0
SURGE_FEE: Final[float] = 5.0
BULK_DISCOUNT_THRESHOLD: Final[int] = 4
BULK_DISCOUNT_PERCENTAGE: Final[float] = 0.10

EARTH_RADIUS_KM: Final[float] = 6371.0


def _money(value: float) -> float:
    return round(value, 2)


# =============================================================================
# Lookups
# =============================================================================


def parse_zone(zone: Union[ProximityZone, str]) -> ProximityZone:
    """
    Coerce a zone letter or enum to ProximityZone.

    Raises:
        ValueError: If the value is not one of A, B, C, D
    """
    if isinstance(zone, ProximityZone):
        return zone
    try:
        return ProximityZone(str(zone).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown proximity zone: {zone!r}") from None


def get_city_base_price(city: str) -> float:
    """Base price for a city; unknown cities use the default city."""
    key = (city or "").strip().lower()
    entry = CITY_PRICING.get(key) or CITY_PRICING[DEFAULT_CITY]
    return entry["base_price"]


def get_proximity_fee(zone: Union[ProximityZone, str]) -> float:
    """Surcharge for a proximity zone."""
    return PROXIMITY_FEES[parse_zone(zone)]


# =============================================================================
# Price Calculation
# =============================================================================


def price_property(
    city: str,
    proximity_zone: Union[ProximityZone, str],
    rush_booking: bool = False,
) -> PriceBreakdown:
    """
    Price the evaluation of a single property.

    Args:
        city: City identifier (case-insensitive)
        proximity_zone: Distance tier A-D
        rush_booking: Whether the customer asked for a rush visit

    Returns:
        PriceBreakdown with total = base + proximity + rush
    """
    base_price = get_city_base_price(city)
    proximity_fee = get_proximity_fee(proximity_zone)
    rush_fee = RUSH_FEE if rush_booking else 0.0

    return PriceBreakdown(
        base_price=base_price,
        proximity_fee=proximity_fee,
        rush_fee=rush_fee,
        total=_money(base_price + proximity_fee + rush_fee),
    )


def is_bulk_eligible(property_count: int) -> bool:
    """Check if an order qualifies for the bulk discount."""
    return property_count >= BULK_DISCOUNT_THRESHOLD


def price_order(
    property_prices: Iterable[PriceBreakdown],
    surge_active: bool = False,
) -> OrderPricing:
    """
    Price a whole order from its per-property breakdowns.

    The surge fee is charged once per order, not per property.
    """
    prices = list(property_prices)
    subtotal = _money(sum(p.total for p in prices))

    discount = _money(subtotal * BULK_DISCOUNT_PERCENTAGE) if is_bulk_eligible(len(prices)) else 0.0
    discount = min(discount, subtotal)

    surge_fee = SURGE_FEE if surge_active else 0.0
    total = max(0.0, _money(subtotal - discount + surge_fee))

    return OrderPricing(
        subtotal=subtotal,
        discount=discount,
        surge_fee=surge_fee,
        total=total,
    )


# =============================================================================
# Distance Helpers
# =============================================================================


def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points in kilometres (haversine)."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def zone_for_distance(distance_km: float) -> ProximityZone:
    """Map a distance to its proximity zone."""
    if distance_km < 0:
        raise ValueError("distance must be non-negative")
    if distance_km > 15:
        return ProximityZone.D
    if distance_km > 10:
        return ProximityZone.C
    if distance_km > 5:
        return ProximityZone.B
    return ProximityZone.A
