"""
Tests for the Pricing Engine

Tests covering:
1. Per-property breakdown (city base + proximity fee + rush fee)
2. Unknown city fallback and zone parsing
3. Order totals: bulk discount at 4+ properties, surge fee once per order
4. Distance helpers (haversine, distance -> zone)
"""

from __future__ import annotations

import pytest

from core.orders.pricing import (
    BULK_DISCOUNT_THRESHOLD,
    CITY_PRICING,
    PROXIMITY_FEES,
    RUSH_FEE,
    SURGE_FEE,
    calculate_distance,
    get_city_base_price,
    is_bulk_eligible,
    parse_zone,
    price_order,
    price_property,
    zone_for_distance,
)
from core.orders.schema import PriceBreakdown, ProximityZone


def flat_price(total: float) -> PriceBreakdown:
    return PriceBreakdown(base_price=total, proximity_fee=0.0, rush_fee=0.0, total=total)


# =============================================================================
# Property Pricing
# =============================================================================


class TestPriceProperty:
    """Tests for price_property."""

    def test_toronto_zone_c_rush(self):
        breakdown = price_property("toronto", "C", rush_booking=True)

        assert breakdown.base_price == 30
        assert breakdown.proximity_fee == 6
        assert breakdown.rush_fee == 7
        assert breakdown.total == 43

    @pytest.mark.parametrize("city", sorted(CITY_PRICING))
    @pytest.mark.parametrize("zone", list(ProximityZone))
    @pytest.mark.parametrize("rush", [False, True])
    def test_total_is_sum_of_parts(self, city, zone, rush):
        breakdown = price_property(city, zone, rush_booking=rush)

        assert breakdown.total == breakdown.base_price + breakdown.proximity_fee + breakdown.rush_fee
        assert breakdown.base_price == CITY_PRICING[city]["base_price"]
        assert breakdown.proximity_fee == PROXIMITY_FEES[zone]
        assert breakdown.rush_fee == (RUSH_FEE if rush else 0)

    def test_no_rush_fee_by_default(self):
        assert price_property("kamloops", ProximityZone.D).rush_fee == 0

    def test_city_is_case_insensitive(self):
        assert price_property("Toronto", "a").base_price == 30

    def test_unknown_city_uses_vancouver(self):
        assert get_city_base_price("calgary") == 28
        assert price_property("", "A").total == 28

    def test_unknown_zone_rejected(self):
        with pytest.raises(ValueError, match="proximity zone"):
            price_property("vancouver", "E")

    def test_parse_zone_accepts_enum_and_letter(self):
        assert parse_zone(ProximityZone.B) is ProximityZone.B
        assert parse_zone(" d ") is ProximityZone.D


# =============================================================================
# Order Pricing
# =============================================================================


class TestPriceOrder:
    """Tests for price_order."""

    def test_five_properties_get_ten_percent_off(self):
        quote = price_order([flat_price(30)] * 5)

        assert quote.subtotal == 150
        assert quote.discount == 15.00
        assert quote.total == 135.00

    @pytest.mark.parametrize("count", [0, 1, 2, 3])
    def test_no_discount_below_threshold(self, count):
        quote = price_order([flat_price(28)] * count)

        assert quote.discount == 0
        assert quote.total == quote.subtotal

    @pytest.mark.parametrize("count", [4, 6, 10])
    def test_discount_exactly_ten_percent_from_threshold(self, count):
        quote = price_order([flat_price(33)] * count)

        assert quote.discount == round(quote.subtotal * 0.10, 2)
        assert quote.discount <= quote.subtotal
        assert quote.total >= 0

    def test_threshold_is_four(self):
        assert BULK_DISCOUNT_THRESHOLD == 4
        assert not is_bulk_eligible(3)
        assert is_bulk_eligible(4)

    def test_surge_fee_charged_once(self):
        quote = price_order([flat_price(28)] * 2, surge_active=True)

        assert quote.surge_fee == SURGE_FEE
        assert quote.total == 56 + SURGE_FEE

    def test_empty_order_is_free(self):
        quote = price_order([])

        assert quote.subtotal == 0
        assert quote.total == 0

    def test_mixed_breakdowns(self):
        prices = [
            price_property("kamloops", "A"),
            price_property("vancouver", "B", rush_booking=True),
            price_property("toronto", "D"),
            price_property("toronto", "C"),
        ]
        quote = price_order(prices)

        # 18 + 38 + 39 + 36
        assert quote.subtotal == 131
        assert quote.discount == 13.1
        assert quote.total == 117.9


# =============================================================================
# Distance Helpers
# =============================================================================


class TestDistance:
    """Tests for haversine distance and zone mapping."""

    def test_same_point_is_zero(self):
        assert calculate_distance(49.28, -123.12, 49.28, -123.12) == 0

    def test_vancouver_to_kamloops(self):
        distance = calculate_distance(49.2827, -123.1207, 50.6745, -120.3273)
        assert 240 < distance < 270

    @pytest.mark.parametrize(
        "km, zone",
        [
            (0, ProximityZone.A),
            (5, ProximityZone.A),
            (5.1, ProximityZone.B),
            (10, ProximityZone.B),
            (12, ProximityZone.C),
            (15, ProximityZone.C),
            (15.01, ProximityZone.D),
            (80, ProximityZone.D),
        ],
    )
    def test_zone_for_distance(self, km, zone):
        assert zone_for_distance(km) is zone

    def test_negative_distance_rejected(self):
        with pytest.raises(ValueError):
            zone_for_distance(-1)
