"""
Tests for the Event Bus

Tests covering:
1. Fan-out to every subscriber of a channel
2. Unsubscribe (idempotent, safe during delivery)
3. Failing subscribers are isolated and logged
4. Asyncio transport defers delivery and keeps publish order
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from core.orders.events import AsyncioTransport, Channel, EventBus, ImmediateTransport


@pytest.fixture
def bus():
    return EventBus(ImmediateTransport())


# =============================================================================
# Subscribe / Publish
# =============================================================================


class TestPublish:
    """Tests for publish and subscribe."""

    def test_every_subscriber_receives_payload(self, bus):
        first, second = [], []
        bus.subscribe(Channel.ORDERS, first.append)
        bus.subscribe("orders", second.append)

        delivered = bus.publish(Channel.ORDERS, {"type": "ORDER_CREATED"})

        assert delivered == 2
        assert first == second == [{"type": "ORDER_CREATED"}]

    def test_channels_are_independent(self, bus):
        admin = []
        bus.subscribe(Channel.ADMIN, admin.append)

        bus.publish(Channel.ORDERS, {"type": "ORDER_CREATED"})

        assert admin == []

    def test_publish_without_subscribers(self, bus):
        assert bus.publish(Channel.SALES, {}) == 0

    def test_unknown_channel_rejected(self, bus):
        with pytest.raises(ValueError, match="Unknown channel"):
            bus.subscribe("payments", print)

    def test_subscriber_count_and_clear(self, bus):
        bus.subscribe(Channel.USERS, print)
        bus.subscribe(Channel.USERS, print)

        assert bus.subscriber_count("users") == 2
        bus.clear()
        assert bus.subscriber_count(Channel.USERS) == 0

    def test_default_transport_is_asyncio(self):
        assert isinstance(EventBus().transport, AsyncioTransport)


# =============================================================================
# Unsubscribe
# =============================================================================


class TestUnsubscribe:
    """Tests for unsubscribe."""

    def test_unsubscribe_stops_delivery(self, bus):
        received = []
        unsubscribe = bus.subscribe(Channel.ORDERS, received.append)

        unsubscribe()
        bus.publish(Channel.ORDERS, 1)

        assert received == []

    def test_unsubscribe_twice_is_harmless(self, bus):
        unsubscribe = bus.subscribe(Channel.ORDERS, print)

        unsubscribe()
        unsubscribe()

        assert bus.subscriber_count(Channel.ORDERS) == 0

    def test_unsubscribe_during_delivery_skips_nobody(self, bus):
        received = []
        unsubscribers = {}

        def first(payload):
            received.append("first")
            unsubscribers["first"]()
            unsubscribers["second"]()

        unsubscribers["first"] = bus.subscribe(Channel.ORDERS, first)
        unsubscribers["second"] = bus.subscribe(Channel.ORDERS, lambda p: received.append("second"))
        bus.subscribe(Channel.ORDERS, lambda p: received.append("third"))

        bus.publish(Channel.ORDERS, {})

        assert received == ["first", "second", "third"]
        assert bus.subscriber_count(Channel.ORDERS) == 1


# =============================================================================
# Failure Isolation
# =============================================================================


class TestFailureIsolation:
    """Tests for handler failure isolation."""

    def test_failing_handler_does_not_block_others(self, bus, caplog):
        received = []

        def broken(payload):
            raise RuntimeError("dashboard crashed")

        bus.subscribe(Channel.ADMIN, broken)
        bus.subscribe(Channel.ADMIN, received.append)

        with caplog.at_level(logging.ERROR, logger="core.orders.events"):
            delivered = bus.publish(Channel.ADMIN, {"type": "ORDER_UPDATED"})

        assert delivered == 2
        assert received == [{"type": "ORDER_UPDATED"}]
        assert "Subscriber on channel admin failed" in caplog.text

    def test_async_handler_without_loop_is_dropped(self, bus, caplog):
        async def handler(payload):
            pass

        bus.subscribe(Channel.SALES, handler)

        with caplog.at_level(logging.WARNING, logger="core.orders.events"):
            bus.publish(Channel.SALES, {})

        assert "no running event loop" in caplog.text


# =============================================================================
# Asyncio Transport
# =============================================================================


class TestAsyncioTransport:
    """Tests for deferred delivery on the running loop."""

    @pytest.mark.asyncio
    async def test_delivery_is_deferred(self):
        bus = EventBus(AsyncioTransport())
        received = []
        bus.subscribe(Channel.ORDERS, received.append)

        bus.publish(Channel.ORDERS, 1)
        assert received == []

        await asyncio.sleep(0)
        assert received == [1]

    @pytest.mark.asyncio
    async def test_publish_order_preserved(self):
        bus = EventBus(AsyncioTransport())
        received = []
        bus.subscribe(Channel.ORDERS, received.append)

        for i in range(5):
            bus.publish(Channel.ORDERS, i)
        await asyncio.sleep(0)

        assert received == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_coroutine_handler_scheduled(self):
        bus = EventBus(AsyncioTransport())
        received = []

        async def handler(payload):
            received.append(payload)

        bus.subscribe(Channel.NOTIFICATIONS, handler)
        bus.publish(Channel.NOTIFICATIONS, "hello")

        for _ in range(3):
            await asyncio.sleep(0)

        assert received == ["hello"]

    def test_inline_without_running_loop(self):
        bus = EventBus(AsyncioTransport())
        received = []
        bus.subscribe(Channel.ORDERS, received.append)

        bus.publish(Channel.ORDERS, 1)

        assert received == [1]
