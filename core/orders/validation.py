"""
Order Validation - Input checks for order creation and report submission

Validation runs before any mutation. Error messages are written in plain
English for customer-facing display.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Optional, Sequence

from core.orders.errors import OrderValidationError, ReportValidationError
from core.orders.schema import Property


# Landlord fields every property needs before an order can be placed
REQUIRED_LANDLORD_FIELDS: Final[tuple[str, ...]] = ("name", "email", "phone")


# =============================================================================
# Validation Result
# =============================================================================


@dataclass(frozen=True)
class OrderValidationResult:
    """Outcome of validating the properties of a new order."""

    valid: bool
    errors: tuple[str, ...]
    missing_landlord_fields: dict[str, tuple[str, ...]]

    def raise_for_errors(self) -> None:
        """Raise OrderValidationError when any check failed."""
        if not self.valid:
            raise OrderValidationError(list(self.errors))

    def to_dict(self) -> dict:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "missing_landlord_fields": {
                pid: list(fields) for pid, fields in self.missing_landlord_fields.items()
            },
        }


# =============================================================================
# Validation Functions
# =============================================================================


def _missing_landlord_fields(prop: Property) -> tuple[str, ...]:
    info = prop.landlord_info
    if info is None:
        return REQUIRED_LANDLORD_FIELDS
    return tuple(
        name
        for name in REQUIRED_LANDLORD_FIELDS
        if not str(getattr(info, name) or "").strip()
    )


def validate_order_properties(properties: Sequence[Property]) -> OrderValidationResult:
    """
    Validate the properties of an order before it is created.

    Every property needs an address and landlord name, email and phone.
    """
    errors: list[str] = []
    missing: dict[str, tuple[str, ...]] = {}

    if not properties:
        errors.append("Please add at least one property to evaluate")

    for position, prop in enumerate(properties, start=1):
        label = prop.short_address or f"property #{position}"

        if not prop.address or not prop.address.strip():
            errors.append(f"Please provide the address of property #{position}")

        fields = _missing_landlord_fields(prop)
        if fields:
            missing[prop.id] = fields
            errors.append(
                f"Please provide the landlord {', '.join(fields)} for {label}"
            )

    return OrderValidationResult(
        valid=not errors,
        errors=tuple(errors),
        missing_landlord_fields=missing,
    )


def validate_report(
    comments: str,
    image_url: Optional[str] = None,
    video_url: Optional[str] = None,
) -> None:
    """
    Validate a report submission.

    Raises:
        ReportValidationError: If the comments are empty or a URL is malformed
    """
    errors: list[str] = []
    if not comments or not comments.strip():
        errors.append("Please add evaluation comments to the report")

    for label, url in (("image", image_url), ("video", video_url)):
        if url and not url.strip().lower().startswith(("http://", "https://", "/")):
            errors.append(f"The {label} link must be a web address")

    if errors:
        raise ReportValidationError(errors)
