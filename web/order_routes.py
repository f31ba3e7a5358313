"""
Order Routes - Customer-facing order and pricing API

Routes:
- POST /api/orders                      - Place an order
- GET  /api/orders                      - List orders (all, or ?user_id=)
- GET  /api/orders/{id}                 - Order detail
- POST /api/orders/{id}/advance         - Advance one lifecycle step
- GET  /api/orders/{id}/report          - Evaluation report
- GET  /api/orders/{id}/report.pdf      - Evaluation report as PDF
- POST /api/pricing/property            - Price one property
- POST /api/pricing/order               - Price a set of properties
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse
from pydantic import BaseModel

from core.orders import pricing
from core.orders.errors import OrderAlreadyCompleteError, OrderValidationError
from core.orders.lifecycle import describe_step
from core.orders.schema import AgentContact, LandlordInfo, Property
from core.orders.service import EvaluationService
from reporting.report_pdf import EvaluationReportGenerator, ReportSuccess
from web.dependencies import get_report_generator, get_service


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api", tags=["orders"])


# =============================================================================
# Request Models
# =============================================================================


class LandlordInput(BaseModel):
    """Landlord contact details for one property."""
    name: str = ""
    phone: str = ""
    email: Optional[str] = None
    company: Optional[str] = None


class PropertyInput(BaseModel):
    """A property to be evaluated."""
    address: str
    city: str = pricing.DEFAULT_CITY
    proximity_zone: str = "A"
    description: str = ""
    rush_booking: bool = False
    landlord_info: Optional[LandlordInput] = None

    def to_property(self) -> Property:
        landlord = None
        if self.landlord_info is not None:
            landlord = LandlordInfo(
                name=self.landlord_info.name,
                phone=self.landlord_info.phone,
                email=self.landlord_info.email,
                company=self.landlord_info.company,
            )
        return Property(
            address=self.address,
            city=self.city.lower(),
            proximity_zone=pricing.parse_zone(self.proximity_zone),
            description=self.description,
            rush_booking=self.rush_booking,
            landlord_info=landlord,
        )


class AgentContactInput(BaseModel):
    name: str
    phone: str
    email: str


class CreateOrderRequest(BaseModel):
    """Request body for placing an order."""
    user_id: str
    properties: List[PropertyInput]
    total_price: Optional[float] = None
    discount: Optional[float] = None
    agent_contact: Optional[AgentContactInput] = None
    rush_booking: bool = False
    surge_active: bool = False


class PricePropertyRequest(BaseModel):
    city: str = pricing.DEFAULT_CITY
    proximity_zone: str = "A"
    rush_booking: bool = False


class PriceOrderRequest(BaseModel):
    properties: List[PricePropertyRequest]
    surge_active: bool = False


# =============================================================================
# Helpers
# =============================================================================


def order_response(order) -> dict:
    data = order.to_dict()
    data["step_message"] = describe_step(order)
    return data


def _unprocessable(message: str, errors: Optional[list] = None) -> HTTPException:
    return HTTPException(status_code=422, detail={"message": message, "errors": errors or [message]})


# =============================================================================
# Orders
# =============================================================================


@router.post("/orders", status_code=201)
async def create_order(
    request_data: CreateOrderRequest,
    service: EvaluationService = Depends(get_service),
):
    """
    Place an order.

    Every property needs an address and landlord name, email and phone;
    otherwise nothing is stored and 422 lists what is missing.
    """
    try:
        properties = [p.to_property() for p in request_data.properties]
    except ValueError as e:
        raise _unprocessable(str(e))

    contact = None
    if request_data.agent_contact is not None:
        contact = AgentContact(
            name=request_data.agent_contact.name,
            phone=request_data.agent_contact.phone,
            email=request_data.agent_contact.email,
        )

    try:
        order = await service.create_order(
            request_data.user_id,
            properties,
            total_price=request_data.total_price,
            discount=request_data.discount,
            agent_contact=contact,
            rush_booking=request_data.rush_booking,
            surge_active=request_data.surge_active,
        )
    except OrderValidationError as e:
        raise _unprocessable(str(e), e.errors)

    return order_response(order)


@router.get("/orders")
async def list_orders(
    user_id: Optional[str] = Query(None, description="Only orders of this user"),
    service: EvaluationService = Depends(get_service),
):
    orders = await service.get_orders(user_id)
    return {"orders": [order_response(o) for o in orders], "count": len(orders)}


@router.get("/orders/{order_id}")
async def get_order(order_id: str, service: EvaluationService = Depends(get_service)):
    order = await service.get_order_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_response(order)


@router.post("/orders/{order_id}/advance")
async def advance_order(order_id: str, service: EvaluationService = Depends(get_service)):
    """Move an order forward by one step (simulation / evaluator app)."""
    try:
        order = await service.advance_order_step(order_id)
    except OrderAlreadyCompleteError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_response(order)


@router.get("/orders/{order_id}/report")
async def get_report(order_id: str, service: EvaluationService = Depends(get_service)):
    report = await service.get_report_for_order(order_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report.to_dict()


@router.get("/orders/{order_id}/report.pdf")
async def download_report(
    order_id: str,
    service: EvaluationService = Depends(get_service),
    generator: EvaluationReportGenerator = Depends(get_report_generator),
):
    order = await service.get_order_by_id(order_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")

    result = generator.generate_report(order, await service.get_report_for_order(order_id))
    if not isinstance(result, ReportSuccess):
        raise HTTPException(status_code=404, detail=result.message)

    return FileResponse(result.path, media_type="application/pdf", filename=result.path.name)


# =============================================================================
# Pricing
# =============================================================================


@router.post("/pricing/property")
async def price_property(
    request_data: PricePropertyRequest,
    service: EvaluationService = Depends(get_service),
):
    try:
        breakdown = service.price_property(
            request_data.city, request_data.proximity_zone, request_data.rush_booking
        )
    except ValueError as e:
        raise _unprocessable(str(e))
    return breakdown.to_dict()


@router.post("/pricing/order")
async def price_order(
    request_data: PriceOrderRequest,
    service: EvaluationService = Depends(get_service),
):
    try:
        breakdowns = [
            service.price_property(p.city, p.proximity_zone, p.rush_booking)
            for p in request_data.properties
        ]
    except ValueError as e:
        raise _unprocessable(str(e))

    quote = service.price_order(breakdowns, request_data.surge_active)
    return {
        "properties": [b.to_dict() for b in breakdowns],
        "bulk_discount_applied": pricing.is_bulk_eligible(len(breakdowns)),
        **quote.to_dict(),
    }
