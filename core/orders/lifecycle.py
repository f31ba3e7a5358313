"""
Order Lifecycle State Machine

Advances an order by exactly one step per call and produces the
notifications a customer expects to see for that transition.

Forward order (per order):

    PENDING_MATCH
      -> OUTREACH_INITIATED -> OUTREACH_SCHEDULING -> OUTREACH_SCHEDULED
      -> EN_ROUTE -> ARRIVED -> EVALUATING -> COMPLETED
      -> (OUTREACH_INITIATED for the next property | REPORT_READY)

One matching step plus seven steps per property: an order with N
properties reaches REPORT_READY after exactly 1 + 7N advances.

The machine never touches a store. It returns a Transition holding a new
Order object plus notification drafts; the order store commits the order,
appends the notifications and then publishes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Optional, Union

from core.orders.errors import InvalidTransitionError, OrderAlreadyCompleteError
from core.orders.evaluators import EvaluatorDirectory
from core.orders.schema import (
    PROPERTY_CYCLE,
    STATUSES_REQUIRING_EVALUATOR,
    Evaluator,
    LifecycleState,
    NotificationDraft,
    NotificationType,
    Order,
    OrderStatus,
    OrderStep,
)


# Hour of day at which scheduled viewings are booked
VIEWING_HOUR = 10

STEPS_PER_PROPERTY = len(PROPERTY_CYCLE)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class Transition:
    """A committed-to-be lifecycle change produced by the state machine."""

    order: Order
    previous_state: LifecycleState
    notifications: tuple[NotificationDraft, ...] = ()
    evaluator_assigned: Optional[Evaluator] = None

    @property
    def changed(self) -> bool:
        return self.order.state != self.previous_state


@dataclass(frozen=True)
class AdvanceSuccess:
    """Returned when an order moved forward by one step."""

    order: Order
    previous_step: OrderStep
    notifications: tuple[NotificationDraft, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AdvanceAlreadyComplete:
    """Returned when the order is already at REPORT_READY."""

    order_id: str
    reason: str = "Order is already complete"


@dataclass(frozen=True)
class AdvanceNotFound:
    """Returned when no order has the requested id."""

    order_id: str
    reason: str = "Order not found"


AdvanceResult = Union[AdvanceSuccess, AdvanceAlreadyComplete, AdvanceNotFound]


# =============================================================================
# Pure Helpers
# =============================================================================


def next_state(state: LifecycleState, property_count: int) -> LifecycleState:
    """
    The state that follows `state` for an order with `property_count` properties.

    Raises:
        ValueError: If the state is terminal or the order has no properties
    """
    if property_count < 1:
        raise ValueError("An order must have at least one property")
    if state.is_terminal:
        raise ValueError("REPORT_READY has no successor")

    if state.step == OrderStep.PENDING_MATCH:
        return LifecycleState(OrderStep.OUTREACH_INITIATED, 0)

    if state.step == OrderStep.COMPLETED:
        if state.property_index < property_count - 1:
            return LifecycleState(OrderStep.OUTREACH_INITIATED, state.property_index + 1)
        return LifecycleState(OrderStep.REPORT_READY, state.property_index)

    position = PROPERTY_CYCLE.index(state.step)
    return LifecycleState(PROPERTY_CYCLE[position + 1], state.property_index)


def advances_to_complete(property_count: int) -> int:
    """Number of advance calls from PENDING_MATCH to REPORT_READY."""
    return 1 + STEPS_PER_PROPERTY * property_count


def expected_property_index(advances: int, property_count: int) -> int:
    """Property pointer after `advances` calls from PENDING_MATCH (advances >= 1)."""
    return min((advances - 1) // STEPS_PER_PROPERTY, property_count - 1)


def format_viewing_time(now: datetime) -> str:
    """Human-readable viewing slot on the day after `now`."""
    slot = (now + timedelta(days=1)).replace(hour=VIEWING_HOUR, minute=0, second=0, microsecond=0)
    return slot.strftime("%A, %B %d at %I:%M %p")


def order_url(order: Order) -> str:
    return f"/dashboard?order={order.id}"


def describe_step(order: Order) -> str:
    """Tracker message for the order's current step."""
    prop = order.current_property
    address = prop.short_address if prop else ""
    step = order.current_step

    if step == OrderStep.PENDING_MATCH:
        return "Finding an evaluator near you..."
    if step == OrderStep.OUTREACH_INITIATED:
        return f"Contacting the landlord of {address}..."
    if step == OrderStep.OUTREACH_SCHEDULING:
        return f"Scheduling a viewing at {address}..."
    if step == OrderStep.OUTREACH_SCHEDULED:
        return f"Viewing scheduled at {address}."
    if step == OrderStep.EN_ROUTE:
        return f"Evaluator en route to {address}..."
    if step == OrderStep.ARRIVED:
        return f"Evaluator has arrived at {address}..."
    if step == OrderStep.EVALUATING:
        return f"Evaluating property at {address}..."
    if step == OrderStep.COMPLETED:
        return f"Evaluation completed for {address}."
    return "Your evaluation report is ready!"


# =============================================================================
# State Machine
# =============================================================================


class OrderLifecycleStateMachine:
    """
    Transition function for order lifecycles.

    Usage:
        machine = OrderLifecycleStateMachine(EvaluatorDirectory())
        transition = machine.advance(order)
        store.commit(transition)
    """

    def __init__(
        self,
        evaluators: EvaluatorDirectory,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._evaluators = evaluators
        self._clock = clock or datetime.utcnow

    def advance(self, order: Order) -> Transition:
        """
        Move an order forward by exactly one step.

        Raises:
            OrderAlreadyCompleteError: If the order is at REPORT_READY
        """
        if order.is_complete:
            raise OrderAlreadyCompleteError(order.id)

        new_state = next_state(order.state, len(order.properties))
        return self._build(order, new_state)

    def transition_to_status(self, order: Order, status: Union[OrderStatus, str]) -> Transition:
        """
        Jump an order directly to a coarse status (administrative action).

        Applies the same evaluator-assignment rule and emits the same
        notifications as advancing into the target step.

        Raises:
            InvalidTransitionError: If the target status is behind the current one
        """
        target = status if isinstance(status, OrderStatus) else OrderStatus(status)
        current = order.status

        if target == current:
            unchanged = order.with_state(order.state, updated_at=order.updated_at)
            return Transition(order=unchanged, previous_state=order.state)

        if target.rank < current.rank:
            raise InvalidTransitionError(
                order.id,
                f"Order {order.id} cannot move from {current.value} back to {target.value}",
            )

        index = order.current_property_index
        if target == OrderStatus.EVALUATOR_ASSIGNED:
            new_state = LifecycleState(OrderStep.OUTREACH_INITIATED, index)
        elif target == OrderStatus.IN_PROGRESS:
            new_state = LifecycleState(OrderStep.EN_ROUTE, index)
        else:
            new_state = LifecycleState(OrderStep.REPORT_READY, order.last_property_index)

        return self._build(order, new_state)

    # =========================================================================
    # Internals
    # =========================================================================

    def _build(self, order: Order, new_state: LifecycleState) -> Transition:
        assigned: Optional[Evaluator] = None
        if new_state.status in STATUSES_REQUIRING_EVALUATOR and order.evaluator is None:
            assigned = self._evaluators.pick_random()

        updated = order.with_state(
            new_state,
            evaluator=order.evaluator or assigned,
            updated_at=self._clock(),
        )
        drafts = self._notifications_for(updated, order.state)

        return Transition(
            order=updated,
            previous_state=order.state,
            notifications=tuple(drafts),
            evaluator_assigned=assigned,
        )

    def _notifications_for(self, order: Order, previous: LifecycleState) -> list[NotificationDraft]:
        url = order_url(order)
        prop = order.current_property
        address = prop.short_address if prop else "your property"
        evaluator_name = order.evaluator.name if order.evaluator else "Your evaluator"
        drafts: list[NotificationDraft] = []

        if previous.step == OrderStep.PENDING_MATCH:
            drafts.append(
                NotificationDraft(
                    title="Evaluator Assigned",
                    message=f"{evaluator_name} has been assigned to your order.",
                    type=NotificationType.SUCCESS,
                    url=url,
                )
            )

        step = order.current_step
        if step == OrderStep.OUTREACH_INITIATED:
            if previous.step == OrderStep.COMPLETED:
                drafts.append(
                    NotificationDraft(
                        title="Starting Next Property",
                        message=(
                            f"Moving on to property {order.current_property_index + 1} "
                            f"of {len(order.properties)}: {address}."
                        ),
                        url=url,
                    )
                )
            else:
                drafts.append(
                    NotificationDraft(
                        title="Outreach Initiated",
                        message=f"We are contacting the landlord of {address} to arrange a viewing.",
                        url=url,
                    )
                )
        elif step == OrderStep.OUTREACH_SCHEDULING:
            drafts.append(
                NotificationDraft(
                    title="Scheduling In Progress",
                    message=f"We are agreeing a viewing time with the landlord of {address}.",
                    url=url,
                )
            )
        elif step == OrderStep.OUTREACH_SCHEDULED:
            drafts.append(
                NotificationDraft(
                    title="Viewing Scheduled",
                    message=f"Viewing at {address} booked for {format_viewing_time(self._clock())}.",
                    type=NotificationType.SUCCESS,
                    url=url,
                )
            )
        elif step == OrderStep.EN_ROUTE:
            drafts.append(
                NotificationDraft(
                    title="Evaluator En Route",
                    message=f"{evaluator_name} is on the way to {address}.",
                    url=url,
                )
            )
        elif step == OrderStep.ARRIVED:
            drafts.append(
                NotificationDraft(
                    title="Evaluator Arrived",
                    message=f"{evaluator_name} has arrived at {address}.",
                    url=url,
                )
            )
        elif step == OrderStep.EVALUATING:
            drafts.append(
                NotificationDraft(
                    title="Evaluation In Progress",
                    message=f"{evaluator_name} is evaluating {address}.",
                    url=url,
                )
            )
        elif step == OrderStep.COMPLETED:
            drafts.append(
                NotificationDraft(
                    title="Property Evaluated",
                    message=f"The evaluation of {address} is complete.",
                    type=NotificationType.SUCCESS,
                    url=url,
                )
            )
        elif step == OrderStep.REPORT_READY:
            drafts.append(
                NotificationDraft(
                    title="Evaluation Complete",
                    message=f"All {len(order.properties)} properties have been evaluated. Your report is ready.",
                    type=NotificationType.SUCCESS,
                    url=url,
                )
            )

        return drafts
