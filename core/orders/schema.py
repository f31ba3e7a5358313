"""
Order Engine Schema - Orders, Properties, Evaluators and Notifications

Defines the canonical data model for property evaluation orders.

Principles:
- The lifecycle state of an order is a single value (step + property index)
- The coarse, user-facing status is derived from that state, never stored
- Properties keep their list order: it is the visit sequence
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Final, Optional


# =============================================================================
# Enums
# =============================================================================


class ProximityZone(Enum):
    """Distance-based pricing tier from the evaluator's reference point."""

    A = "A"  # 0-5 km
    B = "B"  # 5-10 km
    C = "C"  # 10-15 km
    D = "D"  # >15 km


class OrderStep(Enum):
    """Fine-grained lifecycle phase of an order."""

    PENDING_MATCH = "PENDING_MATCH"
    OUTREACH_INITIATED = "OUTREACH_INITIATED"
    OUTREACH_SCHEDULING = "OUTREACH_SCHEDULING"
    OUTREACH_SCHEDULED = "OUTREACH_SCHEDULED"
    EN_ROUTE = "EN_ROUTE"
    ARRIVED = "ARRIVED"
    EVALUATING = "EVALUATING"
    COMPLETED = "COMPLETED"
    REPORT_READY = "REPORT_READY"


class OrderStatus(Enum):
    """Coarse, user-facing status of an order (strictly ordered)."""

    PENDING = "Pending"
    EVALUATOR_ASSIGNED = "Evaluator Assigned"
    IN_PROGRESS = "In Progress"
    REPORT_READY = "Report Ready"

    @property
    def rank(self) -> int:
        """Position of the status in the forward order."""
        return STATUS_ORDER.index(self)


class NotificationType(Enum):
    """Severity tag of a notification."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class UserRole(Enum):
    """Role of a marketplace user."""

    TENANT = "tenant"
    ADMIN = "admin"


# =============================================================================
# Constants
# =============================================================================

STATUS_ORDER: Final[tuple[OrderStatus, ...]] = (
    OrderStatus.PENDING,
    OrderStatus.EVALUATOR_ASSIGNED,
    OrderStatus.IN_PROGRESS,
    OrderStatus.REPORT_READY,
)

# Steps of the per-property cycle, in visit order
PROPERTY_CYCLE: Final[tuple[OrderStep, ...]] = (
    OrderStep.OUTREACH_INITIATED,
    OrderStep.OUTREACH_SCHEDULING,
    OrderStep.OUTREACH_SCHEDULED,
    OrderStep.EN_ROUTE,
    OrderStep.ARRIVED,
    OrderStep.EVALUATING,
    OrderStep.COMPLETED,
)

OUTREACH_STEPS: Final[frozenset[OrderStep]] = frozenset(
    {
        OrderStep.OUTREACH_INITIATED,
        OrderStep.OUTREACH_SCHEDULING,
        OrderStep.OUTREACH_SCHEDULED,
    }
)

# Statuses that only make sense once an evaluator is attached
STATUSES_REQUIRING_EVALUATOR: Final[frozenset[OrderStatus]] = frozenset(
    {
        OrderStatus.EVALUATOR_ASSIGNED,
        OrderStatus.IN_PROGRESS,
        OrderStatus.REPORT_READY,
    }
)


def generate_order_id() -> str:
    """Generate a unique order ID."""
    return f"ORD-{uuid.uuid4().hex[:12].upper()}"


def generate_property_id() -> str:
    """Generate a unique property ID."""
    return f"PROP-{uuid.uuid4().hex[:12].upper()}"


def generate_notification_id() -> str:
    """Generate a unique notification ID."""
    return f"NTF-{uuid.uuid4().hex[:12].upper()}"


def generate_report_id() -> str:
    """Generate a unique report ID."""
    return f"RPT-{uuid.uuid4().hex[:12].upper()}"


def generate_user_id() -> str:
    """Generate a unique user ID."""
    return f"USR-{uuid.uuid4().hex[:12].upper()}"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


# =============================================================================
# Status Projection
# =============================================================================


def project_status(step: OrderStep, property_index: int = 0) -> OrderStatus:
    """
    Derive the coarse status from the lifecycle state.

    Outreach on the first property reads as "Evaluator Assigned". Once the
    first visit has started, restarting the cycle for a later property
    stays "In Progress" so the status never moves backwards.
    """
    if step == OrderStep.PENDING_MATCH:
        return OrderStatus.PENDING
    if step == OrderStep.REPORT_READY:
        return OrderStatus.REPORT_READY
    if step in OUTREACH_STEPS and property_index == 0:
        return OrderStatus.EVALUATOR_ASSIGNED
    return OrderStatus.IN_PROGRESS


@dataclass(frozen=True)
class LifecycleState:
    """Single lifecycle value of an order: current step and property pointer."""

    step: OrderStep = OrderStep.PENDING_MATCH
    property_index: int = 0

    @property
    def status(self) -> OrderStatus:
        return project_status(self.step, self.property_index)

    @property
    def is_terminal(self) -> bool:
        return self.step == OrderStep.REPORT_READY

    def to_dict(self) -> dict:
        return {
            "step": self.step.value,
            "property_index": self.property_index,
            "status": self.status.value,
        }


# =============================================================================
# Property
# =============================================================================


@dataclass(frozen=True)
class LandlordInfo:
    """Contact details of the landlord for one property."""

    name: str
    phone: str
    email: Optional[str] = None
    company: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "company": self.company,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LandlordInfo":
        return cls(
            name=data.get("name", ""),
            phone=data.get("phone", ""),
            email=data.get("email"),
            company=data.get("company"),
        )


@dataclass(frozen=True)
class PriceBreakdown:
    """Cost of evaluating a single property."""

    base_price: float
    proximity_fee: float
    rush_fee: float
    total: float

    def to_dict(self) -> dict:
        return {
            "base_price": self.base_price,
            "proximity_fee": self.proximity_fee,
            "rush_fee": self.rush_fee,
            "total": self.total,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PriceBreakdown":
        return cls(
            base_price=float(data["base_price"]),
            proximity_fee=float(data["proximity_fee"]),
            rush_fee=float(data["rush_fee"]),
            total=float(data["total"]),
        )


@dataclass(frozen=True)
class OrderPricing:
    """Cost of a whole order."""

    subtotal: float
    discount: float
    surge_fee: float
    total: float

    def to_dict(self) -> dict:
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "surge_fee": self.surge_fee,
            "total": self.total,
        }


@dataclass
class Property:
    """A property submitted for evaluation."""

    address: str
    city: str = "vancouver"
    proximity_zone: ProximityZone = ProximityZone.A
    description: str = ""
    rush_booking: bool = False
    landlord_info: Optional[LandlordInfo] = None
    price: Optional[PriceBreakdown] = None
    id: str = field(default_factory=generate_property_id)

    @property
    def short_address(self) -> str:
        """First line of the address (up to the first comma)."""
        return self.address.split(",")[0].strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "address": self.address,
            "description": self.description,
            "city": self.city,
            "proximity_zone": self.proximity_zone.value,
            "rush_booking": self.rush_booking,
            "price": self.price.to_dict() if self.price else None,
            "landlord_info": self.landlord_info.to_dict() if self.landlord_info else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        landlord = data.get("landlord_info")
        price = data.get("price")
        return cls(
            id=data.get("id") or generate_property_id(),
            address=data.get("address", ""),
            description=data.get("description", ""),
            city=data.get("city", "vancouver"),
            proximity_zone=ProximityZone(str(data.get("proximity_zone", "A")).upper()),
            rush_booking=bool(data.get("rush_booking", False)),
            price=PriceBreakdown.from_dict(price) if price else None,
            landlord_info=LandlordInfo.from_dict(landlord) if landlord else None,
        )


@dataclass(frozen=True)
class AgentContact:
    """Single landlord/agent summary for an order."""

    name: str
    phone: str
    email: str
    last_contacted_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "last_contacted_at": _iso(self.last_contacted_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AgentContact":
        return cls(
            name=data["name"],
            phone=data["phone"],
            email=data["email"],
            last_contacted_at=_parse_dt(data.get("last_contacted_at")),
        )


# =============================================================================
# Evaluator
# =============================================================================


@dataclass(frozen=True)
class Evaluator:
    """An on-site property evaluator. Immutable after seeding."""

    id: str
    name: str
    rating: float
    evaluations_completed: int
    bio: str
    avatar_url: Optional[str] = None

    def __post_init__(self):
        if not 0 <= self.rating <= 5:
            raise ValueError("rating must be between 0 and 5")
        object.__setattr__(self, "rating", round(self.rating, 1))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "evaluations_completed": self.evaluations_completed,
            "bio": self.bio,
            "avatar_url": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Evaluator":
        return cls(
            id=data["id"],
            name=data["name"],
            rating=float(data["rating"]),
            evaluations_completed=int(data["evaluations_completed"]),
            bio=data.get("bio", ""),
            avatar_url=data.get("avatar_url"),
        )


# =============================================================================
# Order
# =============================================================================


@dataclass
class Order:
    """
    A customer's request to evaluate one or more properties.

    `status`, `current_step` and `current_property_index` are read-only
    views over `state`; only the order store replaces `state`.
    """

    user_id: str
    properties: list[Property]
    total_price: float
    discount: float
    surge_fee: float = 0.0
    state: LifecycleState = field(default_factory=LifecycleState)
    evaluator: Optional[Evaluator] = None
    agent_contact: Optional[AgentContact] = None
    id: str = field(default_factory=generate_order_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def status(self) -> OrderStatus:
        return self.state.status

    @property
    def current_step(self) -> OrderStep:
        return self.state.step

    @property
    def current_property_index(self) -> int:
        return self.state.property_index

    @property
    def current_property(self) -> Optional[Property]:
        if not self.properties:
            return None
        return self.properties[self.state.property_index]

    @property
    def last_property_index(self) -> int:
        return max(0, len(self.properties) - 1)

    @property
    def is_complete(self) -> bool:
        return self.state.is_terminal

    def with_state(self, state: LifecycleState, **changes: Any) -> "Order":
        """Return a new Order carrying `state` (and any other field changes)."""
        return replace(
            self,
            state=state,
            properties=list(self.properties),
            updated_at=changes.pop("updated_at", datetime.utcnow()),
            **changes,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "properties": [p.to_dict() for p in self.properties],
            "total_price": self.total_price,
            "discount": self.discount,
            "surge_fee": self.surge_fee,
            "status": self.status.value,
            "current_step": self.current_step.value,
            "current_property_index": self.current_property_index,
            "evaluator": self.evaluator.to_dict() if self.evaluator else None,
            "agent_contact": self.agent_contact.to_dict() if self.agent_contact else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        evaluator = data.get("evaluator")
        contact = data.get("agent_contact")
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            properties=[Property.from_dict(p) for p in data.get("properties", [])],
            total_price=float(data["total_price"]),
            discount=float(data["discount"]),
            surge_fee=float(data.get("surge_fee", 0.0)),
            state=LifecycleState(
                step=OrderStep(data["current_step"]),
                property_index=int(data.get("current_property_index", 0)),
            ),
            evaluator=Evaluator.from_dict(evaluator) if evaluator else None,
            agent_contact=AgentContact.from_dict(contact) if contact else None,
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(data.get("updated_at") or data["created_at"]),
        )


# =============================================================================
# Report
# =============================================================================


@dataclass(frozen=True)
class Report:
    """Evaluation report delivered for an order."""

    order_id: str
    comments: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    id: str = field(default_factory=generate_report_id)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "comments": self.comments,
            "image_url": self.image_url,
            "video_url": self.video_url,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Report":
        return cls(
            id=data["id"],
            order_id=data["order_id"],
            comments=data["comments"],
            image_url=data.get("image_url"),
            video_url=data.get("video_url"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


# =============================================================================
# Notification
# =============================================================================


@dataclass
class Notification:
    """User-facing notification. Only `read` ever changes after creation."""

    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    url: Optional[str] = None
    read: bool = False
    id: str = field(default_factory=generate_notification_id)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "url": self.url,
            "read": self.read,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class NotificationDraft:
    """Notification content produced by a transition, before it is stored."""

    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    url: Optional[str] = None


# =============================================================================
# Users and Sales
# =============================================================================


@dataclass
class User:
    """Marketplace user (tenant or administrator)."""

    name: str
    email: str
    role: UserRole = UserRole.TENANT
    id: str = field(default_factory=generate_user_id)
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class SalesDataPoint:
    """Accumulated revenue for one day of the week."""

    day: str
    revenue: float = 0.0

    def to_dict(self) -> dict:
        return {"day": self.day, "revenue": self.revenue}


@dataclass(frozen=True)
class Transaction:
    """Admin view of an order as a payment."""

    id: str
    amount: float
    status: str  # completed | pending
    description: str
    date: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount,
            "status": self.status,
            "description": self.description,
            "date": self.date.isoformat(),
        }
