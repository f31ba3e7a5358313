"""
Notification Store - Per-user notification log

Notifications are created only as side effects of order and user changes.
The list for each user is most-recent-first and capped; the unread count is
always derived, never stored.
"""

from __future__ import annotations

import copy
import logging
from typing import Final, Optional

from core.orders.events import Channel, EventBus
from core.orders.schema import Notification, NotificationDraft, NotificationType

logger = logging.getLogger(__name__)


DEFAULT_MAX_NOTIFICATIONS: Final[int] = 50


class NotificationStore:
    """
    Append-only notification log keyed by user id.

    Every append publishes NOTIFICATION_CREATED on the notifications channel.
    """

    def __init__(self, bus: EventBus, max_per_user: int = DEFAULT_MAX_NOTIFICATIONS):
        if max_per_user < 1:
            raise ValueError("max_per_user must be at least 1")
        self._bus = bus
        self._max_per_user = max_per_user
        self._by_user: dict[str, list[Notification]] = {}

    def append(
        self,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        url: Optional[str] = None,
    ) -> Notification:
        """
        Create an unread notification at the head of the user's list.

        Returns:
            Copy of the stored notification
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            url=url,
        )
        items = self._by_user.setdefault(user_id, [])
        items.insert(0, notification)
        del items[self._max_per_user:]

        self._bus.publish(
            Channel.NOTIFICATIONS,
            {
                "type": "NOTIFICATION_CREATED",
                "user_id": user_id,
                "notification": notification.to_dict(),
            },
        )
        return copy.copy(notification)

    def append_draft(self, user_id: str, draft: NotificationDraft) -> Notification:
        return self.append(user_id, draft.title, draft.message, draft.type, draft.url)

    def get_notifications(self, user_id: str) -> list[Notification]:
        """All notifications of a user, most recent first."""
        return [copy.copy(n) for n in self._by_user.get(user_id, [])]

    def unread_count(self, user_id: str) -> int:
        return sum(1 for n in self._by_user.get(user_id, []) if not n.read)

    def mark_read(self, user_id: str, notification_id: str) -> bool:
        """
        Mark one notification as read.

        Returns:
            True if the notification exists for this user, False otherwise
        """
        for notification in self._by_user.get(user_id, []):
            if notification.id == notification_id:
                notification.read = True
                return True
        return False

    def mark_all_read(self, user_id: str) -> int:
        """Mark every notification of a user as read; returns how many changed."""
        changed = 0
        for notification in self._by_user.get(user_id, []):
            if not notification.read:
                notification.read = True
                changed += 1
        return changed

    def clear_all(self, user_id: str) -> int:
        """Remove every notification of a user; returns how many were removed."""
        removed = len(self._by_user.pop(user_id, []))
        self._bus.publish(
            Channel.NOTIFICATIONS,
            {"type": "NOTIFICATIONS_CLEARED", "user_id": user_id, "removed": removed},
        )
        logger.debug("Cleared %d notifications for user %s", removed, user_id)
        return removed
