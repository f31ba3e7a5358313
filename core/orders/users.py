"""
User Directory - Tenants and administrators

Unlike order reads, user mutations are strict: an unknown id raises
UserNotFoundError and a taken email raises DuplicateEmailError.
Emails are compared case-insensitively.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import TYPE_CHECKING, Final, Optional, Union

from core.orders.errors import DuplicateEmailError, UserNotFoundError
from core.orders.events import Channel, EventBus
from core.orders.notifications import NotificationStore
from core.orders.schema import NotificationType, User, UserRole

if TYPE_CHECKING:
    from core.orders.store import OrderStore

logger = logging.getLogger(__name__)


DEMO_USERS: Final[tuple[tuple[str, str, UserRole], ...]] = (
    ("Demo Tenant", "tenant@example.com", UserRole.TENANT),
    ("Demo Admin", "admin@example.com", UserRole.ADMIN),
)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _parse_role(role: Union[UserRole, str]) -> UserRole:
    return role if isinstance(role, UserRole) else UserRole(str(role).lower())


class UserDirectory:
    """
    In-memory user collection.

    Deleting a user cascades to their orders (through the order store) and
    their notifications.
    """

    def __init__(
        self,
        bus: EventBus,
        notifications: NotificationStore,
        order_store: Optional["OrderStore"] = None,
    ):
        self._bus = bus
        self._notifications = notifications
        self._order_store = order_store
        self._users: dict[str, User] = {}

    # =========================================================================
    # Reads
    # =========================================================================

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        user = self._users.get(user_id)
        return copy.copy(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[User]:
        wanted = _normalize_email(email)
        for user in self._users.values():
            if user.email == wanted:
                return copy.copy(user)
        return None

    def get_all_users(self) -> list[User]:
        return [copy.copy(u) for u in self._users.values()]

    def count(self, role: Optional[UserRole] = None) -> int:
        if role is None:
            return len(self._users)
        return sum(1 for u in self._users.values() if u.role == role)

    # =========================================================================
    # Mutations
    # =========================================================================

    def create_user(
        self,
        name: str,
        email: str,
        role: Union[UserRole, str] = UserRole.TENANT,
    ) -> User:
        """
        Add a user.

        Raises:
            ValueError: If name or email is blank, or the role is unknown
            DuplicateEmailError: If the email is already registered
        """
        name = (name or "").strip()
        email = _normalize_email(email or "")
        if not name or not email:
            raise ValueError("User name and email are required")
        self._ensure_email_free(email)

        user = User(name=name, email=email, role=_parse_role(role))
        self._users[user.id] = user

        logger.info("Created %s user %s", user.role.value, user.id)
        self._publish("USER_CREATED", user)
        return copy.copy(user)

    def register(self, name: str, email: str) -> User:
        """Sign up a tenant and greet them with a welcome notification."""
        user = self.create_user(name, email, UserRole.TENANT)
        self._notifications.append(
            user.id,
            "Welcome to Proofly",
            f"Hi {user.name}, add a property to book your first evaluation.",
            NotificationType.INFO,
            "/dashboard",
        )
        return user

    def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Union[UserRole, str]] = None,
    ) -> User:
        """
        Change any of name, email or role.

        Nothing changes unless every supplied field is valid.

        Raises:
            UserNotFoundError: If the user does not exist
            ValueError: If name or email is blank, or the role is unknown
            DuplicateEmailError: If the new email belongs to another user
        """
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        new_name = user.name if name is None else name.strip()
        new_email = user.email if email is None else _normalize_email(email)
        if not new_name or not new_email:
            raise ValueError("User name and email are required")
        if new_email != user.email:
            self._ensure_email_free(new_email)
        new_role = user.role if role is None else _parse_role(role)

        user.name = new_name
        user.email = new_email
        user.role = new_role
        user.updated_at = datetime.utcnow()

        self._publish("USER_UPDATED", user)
        return copy.copy(user)

    def delete_user(self, user_id: str) -> int:
        """
        Remove a user with their orders and notifications.

        Returns:
            Number of orders deleted with the user

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = self._users.pop(user_id, None)
        if user is None:
            raise UserNotFoundError(user_id)

        deleted_orders = 0
        if self._order_store is not None:
            deleted_orders = self._order_store.delete_orders_for_user(user_id)
        self._notifications.clear_all(user_id)

        logger.info("Deleted user %s (%d orders)", user_id, deleted_orders)
        self._bus.publish(
            Channel.USERS,
            {"type": "USER_DELETED", "user_id": user_id, "deleted_orders": deleted_orders},
        )
        return deleted_orders

    def seed_demo_users(self) -> list[User]:
        """Create the demo tenant and admin accounts if missing."""
        seeded = []
        for name, email, role in DEMO_USERS:
            existing = self.get_user_by_email(email)
            seeded.append(existing or self.create_user(name, email, role))
        return seeded

    # =========================================================================
    # Internals
    # =========================================================================

    def _ensure_email_free(self, email: str) -> None:
        if any(u.email == email for u in self._users.values()):
            raise DuplicateEmailError(email)

    def _publish(self, event_type: str, user: User) -> None:
        self._bus.publish(
            Channel.USERS,
            {"type": event_type, "user_id": user.id, "user": user.to_dict()},
        )
