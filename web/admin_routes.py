"""
Admin Routes - Order management, users and dashboard data

No authentication is enforced here; deployments put these routes behind
their own gateway.

Routes:
- POST   /api/admin/orders/{id}/status   - Set coarse status
- POST   /api/admin/orders/{id}/report   - Upload evaluation report
- GET    /api/admin/metrics              - Dashboard counters
- GET    /api/admin/sales                - Revenue per weekday
- GET    /api/admin/transactions         - Orders as payments
- GET    /api/admin/evaluators           - Evaluator pool
- GET    /api/admin/users                - List users
- POST   /api/admin/users                - Create user
- GET    /api/admin/users/{id}           - User detail
- PATCH  /api/admin/users/{id}           - Update user
- DELETE /api/admin/users/{id}           - Delete user (cascades orders)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from core.orders.errors import (
    DuplicateEmailError,
    InvalidTransitionError,
    OrderNotFoundError,
    ReportValidationError,
    UserNotFoundError,
)
from core.orders.service import EvaluationService
from web.dependencies import get_service
from web.order_routes import order_response


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/api/admin", tags=["admin"])


class StatusUpdateRequest(BaseModel):
    status: str


class ReportRequest(BaseModel):
    comments: str
    image_url: Optional[str] = None
    video_url: Optional[str] = None


class CreateUserRequest(BaseModel):
    name: str
    email: str
    role: str = "tenant"


class UpdateUserRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


# =============================================================================
# Orders
# =============================================================================


@router.post("/orders/{order_id}/status")
async def update_order_status(
    order_id: str,
    request_data: StatusUpdateRequest,
    service: EvaluationService = Depends(get_service),
):
    """Set the coarse status. Moving backwards is refused with 409."""
    try:
        order = await service.update_order_status(order_id, request_data.status)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Invalid status: {request_data.status}")

    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order_response(order)


@router.post("/orders/{order_id}/report", status_code=201)
async def upload_report(
    order_id: str,
    request_data: ReportRequest,
    service: EvaluationService = Depends(get_service),
):
    try:
        report = await service.create_report(
            order_id,
            request_data.comments,
            image_url=request_data.image_url,
            video_url=request_data.video_url,
        )
    except ReportValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "errors": e.errors})
    except OrderNotFoundError:
        raise HTTPException(status_code=404, detail="Order not found")
    return report.to_dict()


# =============================================================================
# Dashboard
# =============================================================================


@router.get("/metrics")
async def metrics(service: EvaluationService = Depends(get_service)):
    return await service.get_admin_metrics()


@router.get("/sales")
async def sales(service: EvaluationService = Depends(get_service)):
    series = await service.get_sales_data()
    return {"series": [row.to_dict() for row in series]}


@router.get("/transactions")
async def transactions(service: EvaluationService = Depends(get_service)):
    items = await service.get_transactions()
    return {"transactions": [t.to_dict() for t in items]}


@router.get("/evaluators")
async def evaluators(service: EvaluationService = Depends(get_service)):
    items = await service.get_all_evaluators()
    return {"evaluators": [e.to_dict() for e in items]}


# =============================================================================
# Users
# =============================================================================


@router.get("/users")
async def list_users(service: EvaluationService = Depends(get_service)):
    users = await service.get_all_users()
    return {"users": [u.to_dict() for u in users]}


@router.post("/users", status_code=201)
async def create_user(
    request_data: CreateUserRequest,
    service: EvaluationService = Depends(get_service),
):
    try:
        user = await service.create_user(request_data.name, request_data.email, request_data.role)
    except DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return user.to_dict()


@router.get("/users/{user_id}")
async def get_user(user_id: str, service: EvaluationService = Depends(get_service)):
    user = await service.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user.to_dict()


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    request_data: UpdateUserRequest,
    service: EvaluationService = Depends(get_service),
):
    try:
        user = await service.update_user(
            user_id,
            name=request_data.name,
            email=request_data.email,
            role=request_data.role,
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    except DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return user.to_dict()


@router.delete("/users/{user_id}")
async def delete_user(user_id: str, service: EvaluationService = Depends(get_service)):
    try:
        deleted_orders = await service.delete_user(user_id)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="User not found")
    return {"deleted": True, "deleted_orders": deleted_orders}
