from fastapi import APIRouter, Depends
from typing import Any, Dict, List

from hr_loans.core.auth_dependencies import get_current_user
from hr_loans.helpers.response_builder import build_notification_response
from hr_loans.services.notification_service import NotificationService, notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


def get_notification_service() -> NotificationService:
    return notification_service


# Returns the latest notifications of the current user
@router.get("/")
async def get_my_notifications(
    current_user: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> List[Dict[str, Any]]:
    notifications = await service.feed(current_user["id"])
    return [build_notification_response(n) for n in notifications]


# Marks every unread notification of the current user as read
@router.put("/read-all")
async def mark_all_read(
    current_user: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    updated = await service.mark_all_read(current_user["id"])
    return {"message": "All marked as read", "updated": updated}


# Marks one notification as read; only its recipient may do so
@router.put("/{notification_id}/read")
async def mark_notification_read(
    notification_id: str,
    current_user: Dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service),
) -> Dict[str, Any]:
    notification = await service.mark_read(current_user["id"], notification_id)
    return {"message": "Notification marked as read", "notification": build_notification_response(notification)}
