"""
Sales Ledger - Revenue per day of week

One row per weekday. Rows only ever grow: every created order adds its
total to the row of the day it was placed.
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import Final, Optional

from core.orders.events import Channel, EventBus
from core.orders.schema import SalesDataPoint


WEEKDAYS: Final[tuple[str, ...]] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class SalesLedger:
    """Accumulated revenue series published on the sales channel."""

    def __init__(self, bus: EventBus):
        self._bus = bus
        self._rows = [SalesDataPoint(day=day) for day in WEEKDAYS]

    def record(self, amount: float, when: Optional[datetime] = None) -> SalesDataPoint:
        """
        Add revenue to the weekday row of `when` (default: now).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError("Revenue amount must be non-negative")

        when = when or datetime.utcnow()
        row = self._rows[when.weekday()]
        row.revenue = round(row.revenue + amount, 2)

        self._bus.publish(
            Channel.SALES,
            {"type": "SALES_UPDATED", "day": row.day, "series": [r.to_dict() for r in self._rows]},
        )
        return copy.copy(row)

    def snapshot(self) -> list[SalesDataPoint]:
        return [copy.copy(r) for r in self._rows]

    def total(self) -> float:
        return round(sum(r.revenue for r in self._rows), 2)
