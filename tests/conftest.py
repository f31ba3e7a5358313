"""
Shared fixtures: an isolated engine per test, wired on an inline bus.
"""

from __future__ import annotations

import random
from datetime import datetime
from types import SimpleNamespace

import pytest

from core.orders.events import EventBus, ImmediateTransport
from core.orders.evaluators import EvaluatorDirectory
from core.orders.notifications import NotificationStore
from core.orders.repository import OrderRepository, reset_order_repository
from core.orders.sales import SalesLedger
from core.orders.schema import LandlordInfo, Property, ProximityZone
from core.orders.service import reset_evaluation_service
from core.orders.store import OrderStore
from core.orders.users import UserDirectory


# Monday, 2 March 2026, 09:00
FIXED_NOW = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture(autouse=True)
def reset_singletons():
    yield
    reset_order_repository()
    reset_evaluation_service()


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def landlord():
    return LandlordInfo(name="Jane Landlord", phone="604-555-0101", email="jane@example.com")


@pytest.fixture
def make_property(landlord):
    """Factory for valid properties; override any field by keyword."""

    def _make(
        address: str = "1200 Robson Street, Vancouver, BC",
        city: str = "vancouver",
        proximity_zone: ProximityZone = ProximityZone.A,
        rush_booking: bool = False,
        landlord_info=landlord,
    ) -> Property:
        return Property(
            address=address,
            city=city,
            proximity_zone=proximity_zone,
            rush_booking=rush_booking,
            landlord_info=landlord_info,
        )

    return _make


@pytest.fixture
def engine(clock):
    """Order engine components sharing one inline bus."""
    bus = EventBus(ImmediateTransport())
    repository = OrderRepository()
    notifications = NotificationStore(bus)
    evaluators = EvaluatorDirectory(rng=random.Random(7))
    sales = SalesLedger(bus)
    store = OrderStore(repository, notifications, bus, evaluators, sales, clock=clock)
    users = UserDirectory(bus, notifications, order_store=store)
    return SimpleNamespace(
        bus=bus,
        repository=repository,
        notifications=notifications,
        evaluators=evaluators,
        sales=sales,
        store=store,
        users=users,
    )
