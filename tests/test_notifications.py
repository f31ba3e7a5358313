"""
Tests for the Notification Store

Tests covering:
1. Most-recent-first ordering and the per-user cap
2. mark_read idempotence and unknown ids
3. mark_all_read leaves zero unread
4. clear_all and published events
"""

from __future__ import annotations

import pytest

from core.orders.events import Channel, EventBus, ImmediateTransport
from core.orders.notifications import DEFAULT_MAX_NOTIFICATIONS, NotificationStore
from core.orders.schema import NotificationDraft, NotificationType


@pytest.fixture
def bus():
    return EventBus(ImmediateTransport())


@pytest.fixture
def store(bus):
    return NotificationStore(bus)


@pytest.fixture
def events(bus):
    received = []
    bus.subscribe(Channel.NOTIFICATIONS, received.append)
    return received


# =============================================================================
# Append
# =============================================================================


class TestAppend:
    """Tests for appending notifications."""

    def test_new_notification_is_unread(self, store):
        notification = store.append("USR-1", "Order Placed", "Thanks!")

        assert notification.read is False
        assert notification.type == NotificationType.INFO
        assert store.unread_count("USR-1") == 1

    def test_most_recent_first(self, store):
        store.append("USR-1", "First", "1")
        store.append("USR-1", "Second", "2")
        store.append("USR-1", "Third", "3")

        titles = [n.title for n in store.get_notifications("USR-1")]
        assert titles == ["Third", "Second", "First"]

    def test_users_are_isolated(self, store):
        store.append("USR-1", "Mine", "x")

        assert store.get_notifications("USR-2") == []
        assert store.unread_count("USR-2") == 0

    def test_cap_drops_oldest(self, bus):
        store = NotificationStore(bus, max_per_user=3)
        for i in range(5):
            store.append("USR-1", f"N{i}", "x")

        titles = [n.title for n in store.get_notifications("USR-1")]
        assert titles == ["N4", "N3", "N2"]

    def test_default_cap_is_fifty(self, store):
        for i in range(DEFAULT_MAX_NOTIFICATIONS + 10):
            store.append("USR-1", f"N{i}", "x")

        assert DEFAULT_MAX_NOTIFICATIONS == 50
        assert len(store.get_notifications("USR-1")) == 50

    def test_invalid_cap_rejected(self, bus):
        with pytest.raises(ValueError):
            NotificationStore(bus, max_per_user=0)

    def test_append_draft(self, store):
        draft = NotificationDraft("Viewing Scheduled", "Tomorrow", NotificationType.SUCCESS, "/dashboard")
        notification = store.append_draft("USR-1", draft)

        assert notification.title == "Viewing Scheduled"
        assert notification.type == NotificationType.SUCCESS
        assert notification.url == "/dashboard"

    def test_append_publishes(self, store, events):
        notification = store.append("USR-1", "Hello", "World")

        assert len(events) == 1
        assert events[0]["type"] == "NOTIFICATION_CREATED"
        assert events[0]["user_id"] == "USR-1"
        assert events[0]["notification"]["id"] == notification.id

    def test_returned_copies_do_not_leak(self, store):
        store.append("USR-1", "Hello", "World")
        store.get_notifications("USR-1")[0].read = True

        assert store.unread_count("USR-1") == 1


# =============================================================================
# Read State
# =============================================================================


class TestReadState:
    """Tests for mark_read and mark_all_read."""

    def test_mark_read_is_idempotent(self, store):
        notification = store.append("USR-1", "Hello", "World")
        store.append("USR-1", "Other", "x")

        assert store.mark_read("USR-1", notification.id) is True
        once = [n.read for n in store.get_notifications("USR-1")]
        assert store.mark_read("USR-1", notification.id) is True
        twice = [n.read for n in store.get_notifications("USR-1")]

        assert once == twice == [False, True]

    def test_mark_read_unknown_id_returns_false(self, store):
        store.append("USR-1", "Hello", "World")

        assert store.mark_read("USR-1", "NTF-MISSING") is False
        assert store.mark_read("USR-NOBODY", "NTF-MISSING") is False
        assert store.unread_count("USR-1") == 1

    def test_mark_read_other_users_notification(self, store):
        notification = store.append("USR-1", "Hello", "World")

        assert store.mark_read("USR-2", notification.id) is False
        assert store.unread_count("USR-1") == 1

    @pytest.mark.parametrize("count", [1, 4, 20])
    def test_mark_all_read_leaves_none_unread(self, store, count):
        for i in range(count):
            store.append("USR-1", f"N{i}", "x")
        store.mark_read("USR-1", store.get_notifications("USR-1")[0].id)

        changed = store.mark_all_read("USR-1")

        assert changed == count - 1
        assert store.unread_count("USR-1") == 0
        assert all(n.read for n in store.get_notifications("USR-1"))

    def test_mark_all_read_for_unknown_user(self, store):
        assert store.mark_all_read("USR-NOBODY") == 0


# =============================================================================
# Clear
# =============================================================================


class TestClearAll:
    """Tests for clear_all."""

    def test_clear_all_empties_list(self, store, events):
        store.append("USR-1", "A", "x")
        store.append("USR-1", "B", "x")

        removed = store.clear_all("USR-1")

        assert removed == 2
        assert store.get_notifications("USR-1") == []
        assert events[-1] == {"type": "NOTIFICATIONS_CLEARED", "user_id": "USR-1", "removed": 2}

    def test_clear_all_keeps_other_users(self, store):
        store.append("USR-1", "A", "x")
        store.append("USR-2", "B", "x")

        store.clear_all("USR-1")

        assert len(store.get_notifications("USR-2")) == 1
