"""
Order Engine Errors

Read accessors return None for unknown ids. Mutation paths raise the
typed errors below so callers never assume progress that did not happen.
"""

from __future__ import annotations

from typing import Optional


class OrderEngineError(Exception):
    """Base class for all order engine errors."""

    pass


class OrderValidationError(OrderEngineError, ValueError):
    """Raised when order input is rejected before any mutation."""

    subject = "Order"

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"{self.subject} rejected: {'; '.join(errors)}")


class ReportValidationError(OrderValidationError):
    """Raised when a report submission is rejected."""

    subject = "Report"


class OrderNotFoundError(OrderEngineError, LookupError):
    """Raised by mutation paths when the order id is unknown."""

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class InvalidTransitionError(OrderEngineError):
    """Raised when a lifecycle change would skip backwards or is not allowed."""

    def __init__(self, order_id: str, message: Optional[str] = None):
        self.order_id = order_id
        super().__init__(message or f"Invalid transition for order {order_id}")


class OrderAlreadyCompleteError(InvalidTransitionError):
    """Raised when advancing an order whose report is already ready."""

    def __init__(self, order_id: str):
        super().__init__(order_id, f"Order {order_id} is already complete")


class UserNotFoundError(OrderEngineError, LookupError):
    """Raised by user mutations when the user id is unknown."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class DuplicateEmailError(OrderEngineError, ValueError):
    """Raised when an email address is already registered."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A user with email {email} already exists")


class OperationDiscardedError(OrderEngineError):
    """Raised when awaiting an operation whose result was discarded."""

    pass
