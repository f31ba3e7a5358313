"""
Order Repository - Storage for Orders and Reports

In-memory storage with optional JSON file persistence.
Constructed once per process (see get_order_repository) or once per test,
and handed to the order store explicitly.
Production should use a persistent database.
"""

from __future__ import annotations

import copy
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from core.orders.schema import Order, Report

logger = logging.getLogger(__name__)


# =============================================================================
# Repository
# =============================================================================


class OrderRepository:
    """
    Repository for storing and retrieving orders and their reports.

    Orders are kept in insertion order. Reads hand out copies so only the
    order store, through save(), can change what is stored.
    """

    def __init__(self, persist_path: Optional[str] = None):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
        """
        self._orders: dict[str, Order] = {}
        self._reports: dict[str, Report] = {}
        self._persist_path = Path(persist_path) if persist_path else None

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "orders": [order.to_dict() for order in self._orders.values()],
            "reports": [report.to_dict() for report in self._reports.values()],
            "saved_at": datetime.utcnow().isoformat(),
        }

        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2))

    def _load_from_file(self) -> None:
        """Load data from file."""
        if not self._persist_path or not self._persist_path.exists():
            return

        try:
            data = json.loads(self._persist_path.read_text())
            for order_data in data.get("orders", []):
                order = Order.from_dict(order_data)
                self._orders[order.id] = order
            for report_data in data.get("reports", []):
                report = Report.from_dict(report_data)
                self._reports[report.order_id] = report
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            # Start fresh rather than refuse to boot
            logger.warning("Could not load order repository data: %s", e)

    # =========================================================================
    # Orders
    # =========================================================================

    def add(self, order: Order) -> Order:
        """
        Store a new order.

        Raises:
            ValueError: If the order id already exists
        """
        if order.id in self._orders:
            raise ValueError(f"Order {order.id} already exists")
        self._orders[order.id] = copy.deepcopy(order)
        self._save_to_file()
        return copy.deepcopy(order)

    def save(self, order: Order) -> Order:
        """
        Replace a stored order with a new version.

        Raises:
            KeyError: If the order does not exist
        """
        if order.id not in self._orders:
            raise KeyError(order.id)
        self._orders[order.id] = copy.deepcopy(order)
        self._save_to_file()
        return copy.deepcopy(order)

    def get(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return copy.deepcopy(order) if order else None

    def list_all(self) -> list[Order]:
        return [copy.deepcopy(o) for o in self._orders.values()]

    def list_by_user(self, user_id: str) -> list[Order]:
        return [copy.deepcopy(o) for o in self._orders.values() if o.user_id == user_id]

    def delete_by_user(self, user_id: str) -> list[str]:
        """
        Delete every order (and report) of a user.

        Returns:
            Ids of the deleted orders
        """
        doomed = [oid for oid, o in self._orders.items() if o.user_id == user_id]
        for oid in doomed:
            del self._orders[oid]
            self._reports.pop(oid, None)
        if doomed:
            self._save_to_file()
        return doomed

    def count(self) -> int:
        return len(self._orders)

    # =========================================================================
    # Reports
    # =========================================================================

    def save_report(self, report: Report) -> Report:
        """Store the report of an order (one per order; later replaces earlier)."""
        self._reports[report.order_id] = report
        self._save_to_file()
        return report

    def get_report(self, order_id: str) -> Optional[Report]:
        return self._reports.get(order_id)


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[OrderRepository] = None


def get_order_repository(persist_path: Optional[str] = None) -> OrderRepository:
    """
    Get the order repository singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)

    Returns:
        OrderRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = OrderRepository(persist_path)
    return _repository_instance


def reset_order_repository() -> None:
    """Drop the singleton (tests)."""
    global _repository_instance
    _repository_instance = None
