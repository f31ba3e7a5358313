"""
Order Store - The only writer of orders

Every mutation follows the same sequence:
1. Validate input (nothing is touched on failure)
2. Compute the new order (pricing / state machine)
3. Commit it to the repository
4. Append the derived notifications
5. Publish on the orders and admin channels

Publishing last means a subscriber that re-reads the store never sees a
stale order.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence, Union

from core.orders import pricing
from core.orders.errors import OrderAlreadyCompleteError, OrderNotFoundError
from core.orders.events import Channel, EventBus
from core.orders.evaluators import EvaluatorDirectory
from core.orders.lifecycle import (
    AdvanceAlreadyComplete,
    AdvanceNotFound,
    AdvanceResult,
    AdvanceSuccess,
    OrderLifecycleStateMachine,
    Transition,
    order_url,
)
from core.orders.notifications import NotificationStore
from core.orders.repository import OrderRepository
from core.orders.sales import SalesLedger
from core.orders.schema import (
    AgentContact,
    NotificationType,
    Order,
    OrderStatus,
    Property,
    Report,
    Transaction,
)
from core.orders.validation import validate_order_properties, validate_report

logger = logging.getLogger(__name__)


# Caller-supplied totals further than this from the recomputed ones are replaced
PRICE_TOLERANCE = 0.005


def order_event(event_type: str, order: Order) -> dict:
    """Payload published for every order mutation."""
    return {
        "type": event_type,
        "order_id": order.id,
        "user_id": order.user_id,
        "new_status": order.status.value,
        "new_step": order.current_step.value,
        "property_index": order.current_property_index,
        "order": order.to_dict(),
    }


class OrderStore:
    """
    Authoritative order collection.

    Usage:
        store = OrderStore(repository, notifications, bus, evaluators, sales)
        order = store.create_order(user_id, properties)
        result = store.advance_step(order.id)
    """

    def __init__(
        self,
        repository: OrderRepository,
        notifications: NotificationStore,
        bus: EventBus,
        evaluators: EvaluatorDirectory,
        sales: SalesLedger,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._repository = repository
        self._notifications = notifications
        self._bus = bus
        self._evaluators = evaluators
        self._sales = sales
        self._clock = clock or datetime.utcnow
        self._machine = OrderLifecycleStateMachine(evaluators, clock=self._clock)

    @property
    def state_machine(self) -> OrderLifecycleStateMachine:
        return self._machine

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(
        self,
        user_id: str,
        properties: Sequence[Property],
        total_price: Optional[float] = None,
        discount: Optional[float] = None,
        agent_contact: Optional[AgentContact] = None,
        rush_booking: bool = False,
        surge_active: bool = False,
    ) -> Order:
        """
        Create an order at PENDING_MATCH.

        Prices are recomputed from the pricing engine; caller-supplied totals
        that disagree are logged and replaced.

        Raises:
            OrderValidationError: If any property lacks an address or
                landlord name, email or phone (nothing is stored)
        """
        validate_order_properties(properties).raise_for_errors()

        priced: list[Property] = []
        for prop in properties:
            breakdown = pricing.price_property(
                prop.city,
                prop.proximity_zone,
                rush_booking=rush_booking or prop.rush_booking,
            )
            priced.append(
                Property(
                    id=prop.id,
                    address=prop.address,
                    description=prop.description,
                    city=prop.city,
                    proximity_zone=prop.proximity_zone,
                    rush_booking=rush_booking or prop.rush_booking,
                    landlord_info=prop.landlord_info,
                    price=breakdown,
                )
            )

        quote = pricing.price_order([p.price for p in priced], surge_active=surge_active)
        self._check_quote("total_price", total_price, quote.total)
        self._check_quote("discount", discount, quote.discount)

        now = self._clock()
        order = Order(
            user_id=user_id,
            properties=priced,
            total_price=quote.total,
            discount=quote.discount,
            surge_fee=quote.surge_fee,
            agent_contact=agent_contact,
            created_at=now,
            updated_at=now,
        )
        stored = self._repository.add(order)
        self._sales.record(stored.total_price, when=now)

        self._notifications.append(
            user_id,
            "Order Placed",
            f"Your order for {len(priced)} "
            f"{'property' if len(priced) == 1 else 'properties'} has been received. "
            "We are finding an evaluator near you.",
            NotificationType.SUCCESS,
            order_url(stored),
        )

        logger.info(
            "Created order %s for user %s (%d properties, total %.2f)",
            stored.id,
            user_id,
            len(priced),
            stored.total_price,
        )
        self._publish("ORDER_CREATED", stored)
        return stored

    def _check_quote(self, label: str, supplied: Optional[float], computed: float) -> None:
        if supplied is not None and abs(supplied - computed) > PRICE_TOLERANCE:
            logger.warning(
                "Supplied %s %.2f does not match computed %.2f; using computed value",
                label,
                supplied,
                computed,
            )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_orders(self, user_id: Optional[str] = None) -> list[Order]:
        """Orders of one user, or every order when user_id is omitted."""
        if user_id is None:
            return self._repository.list_all()
        return self._repository.list_by_user(user_id)

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._repository.get(order_id)

    def get_report_for_order(self, order_id: str) -> Optional[Report]:
        return self._repository.get_report(order_id)

    def get_transactions(self) -> list[Transaction]:
        """Orders as payments, newest first."""
        orders = sorted(self._repository.list_all(), key=lambda o: o.created_at, reverse=True)
        return [
            Transaction(
                id=o.id,
                amount=o.total_price,
                status="completed" if o.status == OrderStatus.REPORT_READY else "pending",
                description=(
                    f"Evaluation of {len(o.properties)} "
                    f"{'property' if len(o.properties) == 1 else 'properties'}"
                ),
                date=o.created_at,
            )
            for o in orders
        ]

    # =========================================================================
    # Lifecycle Mutations
    # =========================================================================

    def advance_step(self, order_id: str) -> AdvanceResult:
        """Advance an order by exactly one lifecycle step."""
        order = self._repository.get(order_id)
        if order is None:
            return AdvanceNotFound(order_id=order_id)

        try:
            transition = self._machine.advance(order)
        except OrderAlreadyCompleteError:
            logger.warning("Advance requested for completed order %s", order_id)
            return AdvanceAlreadyComplete(order_id=order_id)

        stored = self._commit(transition, "ORDER_STEP_UPDATE")
        return AdvanceSuccess(
            order=stored,
            previous_step=transition.previous_state.step,
            notifications=transition.notifications,
        )

    def update_status(self, order_id: str, status: Union[OrderStatus, str]) -> Optional[Order]:
        """
        Set the coarse status directly (administrative action).

        Returns:
            The updated order, or None if the order does not exist

        Raises:
            InvalidTransitionError: If the status would move backwards
        """
        order = self._repository.get(order_id)
        if order is None:
            return None

        transition = self._machine.transition_to_status(order, status)
        if not transition.changed:
            return order
        return self._commit(transition, "ORDER_UPDATED")

    def create_report(
        self,
        order_id: str,
        comments: str,
        image_url: Optional[str] = None,
        video_url: Optional[str] = None,
    ) -> Report:
        """
        Attach the evaluation report and force the order to Report Ready.

        Raises:
            ReportValidationError: If comments are empty
            OrderNotFoundError: If the order does not exist
        """
        validate_report(comments, image_url, video_url)

        order = self._repository.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        report = Report(
            order_id=order_id,
            comments=comments.strip(),
            image_url=image_url or None,
            video_url=video_url or None,
            created_at=self._clock(),
        )
        self._repository.save_report(report)

        transition = self._machine.transition_to_status(order, OrderStatus.REPORT_READY)
        if transition.changed:
            self._commit(transition, "ORDER_UPDATED")

        self._notifications.append(
            order.user_id,
            "Evaluation Report Ready",
            "Your evaluator has uploaded the report for your order.",
            NotificationType.SUCCESS,
            order_url(order),
        )
        logger.info("Report %s created for order %s", report.id, order_id)
        self._bus.publish(
            Channel.ADMIN,
            {"type": "REPORT_CREATED", "order_id": order_id, "report": report.to_dict()},
        )
        return report

    def delete_orders_for_user(self, user_id: str) -> int:
        """Cascade of user deletion: remove every order of a user."""
        deleted = self._repository.delete_by_user(user_id)
        for order_id in deleted:
            self._bus.publish(
                Channel.ADMIN,
                {"type": "ORDER_DELETED", "order_id": order_id, "user_id": user_id},
            )
        if deleted:
            logger.info("Deleted %d orders of user %s", len(deleted), user_id)
        return len(deleted)

    # =========================================================================
    # Internals
    # =========================================================================

    def _commit(self, transition: Transition, event_type: str) -> Order:
        stored = self._repository.save(transition.order)

        for draft in transition.notifications:
            self._notifications.append_draft(stored.user_id, draft)

        if transition.evaluator_assigned is not None:
            logger.info(
                "Assigned evaluator %s to order %s",
                transition.evaluator_assigned.id,
                stored.id,
            )
        logger.info(
            "Order %s: %s -> %s (property %d, status %s)",
            stored.id,
            transition.previous_state.step.value,
            stored.current_step.value,
            stored.current_property_index,
            stored.status.value,
        )
        self._publish(event_type, stored)
        return stored

    def _publish(self, event_type: str, order: Order) -> None:
        payload = order_event(event_type, order)
        self._bus.publish(Channel.ORDERS, payload)
        self._bus.publish(Channel.ADMIN, payload)
