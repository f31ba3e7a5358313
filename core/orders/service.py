"""
Evaluation Service - Async façade over the order engine

What the web layer and demo scripts talk to. Each operation waits out the
configured simulated latency, then performs one synchronous store
mutation; nothing suspends mid-mutation.

Advances on the same order are serialised with a per-order lock, so two
concurrent callers each move the order by exactly one step.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from core.orders import pricing
from core.orders.errors import OperationDiscardedError, OrderAlreadyCompleteError
from core.orders.events import Channel, EventBus, Handler, Unsubscribe
from core.orders.evaluators import EvaluatorDirectory
from core.orders.lifecycle import AdvanceAlreadyComplete, AdvanceNotFound
from core.orders.notifications import NotificationStore
from core.orders.repository import OrderRepository, get_order_repository
from core.orders.sales import SalesLedger
from core.orders.schema import (
    AgentContact,
    Evaluator,
    Notification,
    Order,
    OrderPricing,
    OrderStatus,
    PriceBreakdown,
    Property,
    ProximityZone,
    Report,
    SalesDataPoint,
    Transaction,
    User,
    UserRole,
)
from core.orders.store import OrderStore
from core.orders.users import UserDirectory
from utils.config import Config

logger = logging.getLogger(__name__)


# =============================================================================
# Discardable Operations
# =============================================================================


class PendingOperation:
    """
    Handle on a mutation running as a task.

    discard() only withdraws interest in the result: the mutation still
    completes, commits and publishes. Awaiting a discarded operation raises
    OperationDiscardedError.
    """

    def __init__(self, task: "asyncio.Task[Any]"):
        self._task = task
        self._discarded = False
        task.add_done_callback(self._on_done)

    @property
    def discarded(self) -> bool:
        return self._discarded

    @property
    def done(self) -> bool:
        return self._task.done()

    def discard(self) -> None:
        self._discarded = True

    def _on_done(self, task: "asyncio.Task[Any]") -> None:
        if self._discarded and not task.cancelled() and task.exception() is not None:
            logger.warning("Discarded operation failed: %s", task.exception())

    async def result(self) -> Any:
        value = await self._task
        if self._discarded:
            raise OperationDiscardedError("Operation result was discarded")
        return value

    def __await__(self):
        return self.result().__await__()


# =============================================================================
# Service
# =============================================================================


class EvaluationService:
    """
    Async entry point for orders, notifications, users and admin data.

    Usage:
        service = build_default_service(Config.load())
        order = await service.create_order(user_id, properties)
        order = await service.advance_order_step(order.id)
    """

    def __init__(
        self,
        store: OrderStore,
        users: UserDirectory,
        notifications: NotificationStore,
        evaluators: EvaluatorDirectory,
        sales: SalesLedger,
        bus: EventBus,
        latency_ms: int = 0,
    ):
        self.store = store
        self.users = users
        self.notifications = notifications
        self.evaluators = evaluators
        self.sales = sales
        self.bus = bus
        self.latency_ms = max(0, latency_ms)
        self._advance_locks: dict[str, asyncio.Lock] = {}

    async def _delay(self) -> None:
        if self.latency_ms:
            await asyncio.sleep(self.latency_ms / 1000)

    def submit(self, operation: Awaitable[Any]) -> PendingOperation:
        """Run a service call as a task the caller may later discard."""
        return PendingOperation(asyncio.ensure_future(operation))

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(
        self,
        user_id: str,
        properties: Sequence[Union[Property, dict]],
        total_price: Optional[float] = None,
        discount: Optional[float] = None,
        agent_contact: Optional[AgentContact] = None,
        rush_booking: bool = False,
        surge_active: bool = False,
    ) -> Order:
        await self._delay()
        items = [p if isinstance(p, Property) else Property.from_dict(p) for p in properties]
        return self.store.create_order(
            user_id,
            items,
            total_price=total_price,
            discount=discount,
            agent_contact=agent_contact,
            rush_booking=rush_booking,
            surge_active=surge_active,
        )

    async def get_orders(self, user_id: Optional[str] = None) -> list[Order]:
        await self._delay()
        return self.store.get_orders(user_id)

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        await self._delay()
        return self.store.get_order(order_id)

    async def update_order_status(
        self, order_id: str, status: Union[OrderStatus, str]
    ) -> Optional[Order]:
        await self._delay()
        return self.store.update_status(order_id, status)

    async def advance_order_step(self, order_id: str) -> Optional[Order]:
        """
        Advance an order by one step.

        Returns:
            The updated order, or None if the order does not exist

        Raises:
            OrderAlreadyCompleteError: If the order is already at Report Ready
        """
        lock = self._advance_locks.setdefault(order_id, asyncio.Lock())
        async with lock:
            await self._delay()
            result = self.store.advance_step(order_id)

        if isinstance(result, AdvanceNotFound):
            self._release_lock(order_id)
            return None
        if isinstance(result, AdvanceAlreadyComplete):
            self._release_lock(order_id)
            raise OrderAlreadyCompleteError(order_id)
        if result.order.is_complete:
            self._release_lock(order_id)
        return result.order

    def _release_lock(self, order_id: str) -> None:
        # A finished or deleted order never advances again
        self._advance_locks.pop(order_id, None)

    async def run_to_completion(self, order_id: str, interval: float = 0) -> Optional[Order]:
        """Advance an order until its report is ready (demo simulation)."""
        order = await self.get_order_by_id(order_id)
        while order is not None and not order.is_complete:
            if interval:
                await asyncio.sleep(interval)
            order = await self.advance_order_step(order_id)
        return order

    async def create_report(
        self,
        order_id: str,
        comments: str,
        image_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> Report:
        await self._delay()
        return self.store.create_report(order_id, comments, image_url, video_url)

    async def get_report_for_order(self, order_id: str) -> Optional[Report]:
        await self._delay()
        return self.store.get_report_for_order(order_id)

    # =========================================================================
    # Subscriptions
    # =========================================================================

    def subscribe_to_orders(self, handler: Handler, user_id: Optional[str] = None) -> Unsubscribe:
        """Order feed; with user_id only that user's orders are delivered."""
        if user_id is None:
            return self.bus.subscribe(Channel.ORDERS, handler)

        def filtered(event: dict) -> Any:
            if event.get("user_id") == user_id:
                return handler(event)
            return None

        return self.bus.subscribe(Channel.ORDERS, filtered)

    def subscribe_to_admin_updates(self, handler: Handler) -> Unsubscribe:
        return self.bus.subscribe(Channel.ADMIN, handler)

    def subscribe_to_sales_updates(self, handler: Handler) -> Unsubscribe:
        return self.bus.subscribe(Channel.SALES, handler)

    def subscribe_to_user_updates(self, handler: Handler) -> Unsubscribe:
        return self.bus.subscribe(Channel.USERS, handler)

    def subscribe_to_notifications(self, handler: Handler) -> Unsubscribe:
        return self.bus.subscribe(Channel.NOTIFICATIONS, handler)

    # =========================================================================
    # Notifications
    # =========================================================================

    async def get_notifications(self, user_id: str) -> list[Notification]:
        await self._delay()
        return self.notifications.get_notifications(user_id)

    def get_unread_count(self, user_id: str) -> int:
        return self.notifications.unread_count(user_id)

    async def mark_notification_as_read(self, user_id: str, notification_id: str) -> bool:
        await self._delay()
        return self.notifications.mark_read(user_id, notification_id)

    async def mark_all_notifications_as_read(self, user_id: str) -> int:
        await self._delay()
        return self.notifications.mark_all_read(user_id)

    async def clear_notifications(self, user_id: str) -> int:
        await self._delay()
        return self.notifications.clear_all(user_id)

    # =========================================================================
    # Pricing (pure, no latency)
    # =========================================================================

    def price_property(
        self,
        city: str,
        proximity_zone: Union[ProximityZone, str],
        rush_booking: bool = False,
    ) -> PriceBreakdown:
        return pricing.price_property(city, proximity_zone, rush_booking)

    def price_order(
        self, property_prices: Sequence[PriceBreakdown], surge_active: bool = False
    ) -> OrderPricing:
        return pricing.price_order(property_prices, surge_active)

    # =========================================================================
    # Users
    # =========================================================================

    async def get_all_users(self) -> list[User]:
        await self._delay()
        return self.users.get_all_users()

    async def get_user_by_id(self, user_id: str) -> Optional[User]:
        await self._delay()
        return self.users.get_user_by_id(user_id)

    async def create_user(
        self, name: str, email: str, role: Union[UserRole, str] = UserRole.TENANT
    ) -> User:
        await self._delay()
        return self.users.create_user(name, email, role)

    async def register_user(self, name: str, email: str) -> User:
        await self._delay()
        return self.users.register(name, email)

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Union[UserRole, str]] = None,
    ) -> User:
        await self._delay()
        return self.users.update_user(user_id, name=name, email=email, role=role)

    async def delete_user(self, user_id: str) -> int:
        await self._delay()
        order_ids = [o.id for o in self.store.get_orders(user_id)]
        deleted_orders = self.users.delete_user(user_id)
        for order_id in order_ids:
            self._release_lock(order_id)
        return deleted_orders

    # =========================================================================
    # Admin
    # =========================================================================

    async def get_all_evaluators(self) -> list[Evaluator]:
        await self._delay()
        return self.evaluators.list_all()

    async def get_sales_data(self) -> list[SalesDataPoint]:
        await self._delay()
        return self.sales.snapshot()

    async def get_transactions(self) -> list[Transaction]:
        await self._delay()
        return self.store.get_transactions()

    async def get_admin_metrics(self) -> dict:
        await self._delay()
        orders = self.store.get_orders()
        completed = sum(1 for o in orders if o.status == OrderStatus.REPORT_READY)
        return {
            "tenant_count": self.users.count(UserRole.TENANT),
            "order_count": len(orders),
            "pending_order_count": len(orders) - completed,
            "completed_order_count": completed,
            "total_revenue": self.sales.total(),
        }


# =============================================================================
# Wiring
# =============================================================================


def build_default_service(
    config: Optional[Config] = None,
    bus: Optional[EventBus] = None,
    repository: Optional[OrderRepository] = None,
    clock: Optional[Callable[[], Any]] = None,
) -> EvaluationService:
    """Construct the whole engine once, sharing one bus and one repository."""
    config = config or Config.load()
    bus = bus or EventBus()
    repository = repository or OrderRepository(config.orders_persist_path)

    rng = random.Random(config.evaluator_seed) if config.evaluator_seed is not None else None
    evaluators = EvaluatorDirectory(rng=rng)
    notifications = NotificationStore(bus, max_per_user=config.max_notifications)
    sales = SalesLedger(bus)
    store = OrderStore(repository, notifications, bus, evaluators, sales, clock=clock)
    users = UserDirectory(bus, notifications, order_store=store)
    users.seed_demo_users()

    logger.info(
        "Evaluation service ready (latency %dms, %d evaluators)",
        config.simulated_latency_ms,
        evaluators.count(),
    )
    return EvaluationService(
        store,
        users,
        notifications,
        evaluators,
        sales,
        bus,
        latency_ms=config.simulated_latency_ms,
    )


_service_instance: Optional[EvaluationService] = None


def get_evaluation_service() -> EvaluationService:
    """Get the process-wide evaluation service."""
    global _service_instance
    if _service_instance is None:
        config = Config.load()
        _service_instance = build_default_service(
            config, repository=get_order_repository(config.orders_persist_path)
        )
    return _service_instance


def reset_evaluation_service() -> None:
    """Drop the singleton (tests)."""
    global _service_instance
    _service_instance = None
