"""
Proofly - Core Business Logic

Property evaluation marketplace backend:
1. Pricing (city base price, proximity fee, rush, bulk discount, surge)
2. Order lifecycle (evaluator match, per-property outreach and visit)
3. Notifications and in-process event channels
4. Users, sales ledger and admin metrics
"""

from .orders import (
    Order,
    OrderStatus,
    OrderStep,
    Property,
    LandlordInfo,
    ProximityZone,
    Report,
    OrderStore,
    OrderLifecycleStateMachine,
    EvaluatorDirectory,
    NotificationStore,
    EventBus,
    EvaluationService,
    build_default_service,
    price_property,
    price_order,
)

__all__ = [
    "Order",
    "OrderStatus",
    "OrderStep",
    "Property",
    "LandlordInfo",
    "ProximityZone",
    "Report",
    "OrderStore",
    "OrderLifecycleStateMachine",
    "EvaluatorDirectory",
    "NotificationStore",
    "EventBus",
    "EvaluationService",
    "build_default_service",
    "price_property",
    "price_order",
]
