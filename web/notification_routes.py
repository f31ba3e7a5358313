"""
Notification Routes

Routes:
- GET    /api/notifications/{user_id}                     - List with unread count
- POST   /api/notifications/{user_id}/{id}/read           - Mark one as read
- POST   /api/notifications/{user_id}/read-all            - Mark all as read
- DELETE /api/notifications/{user_id}                     - Clear all
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.orders.service import EvaluationService
from web.dependencies import get_service


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("/{user_id}")
async def list_notifications(user_id: str, service: EvaluationService = Depends(get_service)):
    notifications = await service.get_notifications(user_id)
    return {
        "notifications": [n.to_dict() for n in notifications],
        "unread_count": service.get_unread_count(user_id),
    }


@router.post("/{user_id}/read-all")
async def mark_all_read(user_id: str, service: EvaluationService = Depends(get_service)):
    updated = await service.mark_all_notifications_as_read(user_id)
    return {"updated": updated, "unread_count": service.get_unread_count(user_id)}


@router.post("/{user_id}/{notification_id}/read")
async def mark_read(
    user_id: str,
    notification_id: str,
    service: EvaluationService = Depends(get_service),
):
    """Unknown ids are not an error: the response just reports found=false."""
    found = await service.mark_notification_as_read(user_id, notification_id)
    return {"found": found, "unread_count": service.get_unread_count(user_id)}


@router.delete("/{user_id}")
async def clear_notifications(user_id: str, service: EvaluationService = Depends(get_service)):
    removed = await service.clear_notifications(user_id)
    return {"removed": removed}
