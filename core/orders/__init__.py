"""
Proofly - Order Lifecycle Engine

Customers submit properties for on-site evaluation; an evaluator is
matched and walks each property through outreach, visit and evaluation
until the report is ready.

Principles:
1. One writer: only the order store changes orders
2. Validate first: rejected input never mutates anything
3. Publish last: events go out after the change is committed
4. Status is derived from the lifecycle state, never stored
"""

from core.orders.schema import (
    ProximityZone,
    OrderStep,
    OrderStatus,
    NotificationType,
    UserRole,
    STATUS_ORDER,
    PROPERTY_CYCLE,
    LifecycleState,
    LandlordInfo,
    PriceBreakdown,
    OrderPricing,
    Property,
    AgentContact,
    Evaluator,
    Order,
    Report,
    Notification,
    NotificationDraft,
    User,
    SalesDataPoint,
    Transaction,
    project_status,
)
from core.orders.errors import (
    OrderEngineError,
    OrderValidationError,
    ReportValidationError,
    OrderNotFoundError,
    InvalidTransitionError,
    OrderAlreadyCompleteError,
    UserNotFoundError,
    DuplicateEmailError,
    OperationDiscardedError,
)
from core.orders.pricing import (
    price_property,
    price_order,
    calculate_distance,
    zone_for_distance,
)
from core.orders.validation import (
    validate_order_properties,
    validate_report,
    OrderValidationResult,
)
from core.orders.events import (
    Channel,
    EventBus,
    EventTransport,
    ImmediateTransport,
    AsyncioTransport,
)
from core.orders.notifications import NotificationStore
from core.orders.evaluators import EvaluatorDirectory, DEFAULT_EVALUATORS
from core.orders.lifecycle import (
    OrderLifecycleStateMachine,
    Transition,
    AdvanceSuccess,
    AdvanceAlreadyComplete,
    AdvanceNotFound,
    AdvanceResult,
    advances_to_complete,
)
from core.orders.repository import (
    OrderRepository,
    get_order_repository,
    reset_order_repository,
)
from core.orders.sales import SalesLedger
from core.orders.store import OrderStore
from core.orders.users import UserDirectory
from core.orders.service import (
    EvaluationService,
    PendingOperation,
    build_default_service,
    get_evaluation_service,
    reset_evaluation_service,
)

__all__ = [
    # Schema
    "ProximityZone",
    "OrderStep",
    "OrderStatus",
    "NotificationType",
    "UserRole",
    "STATUS_ORDER",
    "PROPERTY_CYCLE",
    "LifecycleState",
    "LandlordInfo",
    "PriceBreakdown",
    "OrderPricing",
    "Property",
    "AgentContact",
    "Evaluator",
    "Order",
    "Report",
    "Notification",
    "NotificationDraft",
    "User",
    "SalesDataPoint",
    "Transaction",
    "project_status",
    # Errors
    "OrderEngineError",
    "OrderValidationError",
    "ReportValidationError",
    "OrderNotFoundError",
    "InvalidTransitionError",
    "OrderAlreadyCompleteError",
    "UserNotFoundError",
    "DuplicateEmailError",
    "OperationDiscardedError",
    # Pricing
    "price_property",
    "price_order",
    "calculate_distance",
    "zone_for_distance",
    # Validation
    "validate_order_properties",
    "validate_report",
    "OrderValidationResult",
    # Events
    "Channel",
    "EventBus",
    "EventTransport",
    "ImmediateTransport",
    "AsyncioTransport",
    # Components
    "NotificationStore",
    "EvaluatorDirectory",
    "DEFAULT_EVALUATORS",
    "OrderLifecycleStateMachine",
    "Transition",
    "AdvanceSuccess",
    "AdvanceAlreadyComplete",
    "AdvanceNotFound",
    "AdvanceResult",
    "advances_to_complete",
    "OrderRepository",
    "get_order_repository",
    "reset_order_repository",
    "SalesLedger",
    "OrderStore",
    "UserDirectory",
    # Service
    "EvaluationService",
    "PendingOperation",
    "build_default_service",
    "get_evaluation_service",
    "reset_evaluation_service",
]
