from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_current_user
from app.models.user import User
from app.schemas.notification import NotificationListResponse, NotificationResponse
from app.schemas.response import MessageResponse, SuccessResponse
from app.services import notification_service

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def list_notifications_endpoint(
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = Query(False),
    user: User = Depends(get_current_user),
):
    notifications, unread = await notification_service.list_notifications(user, limit=limit, unread_only=unread_only)
    data = NotificationListResponse(
        notifications=[NotificationResponse.from_model(n) for n in notifications],
        unread_count=unread,
        total=len(notifications),
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/count", response_model=SuccessResponse)
async def unread_count_endpoint(user: User = Depends(get_current_user)):
    return SuccessResponse(data={"unread_count": await notification_service.unread_count(user)})


@router.put("/read-all", response_model=SuccessResponse)
async def mark_all_read_endpoint(user: User = Depends(get_current_user)):
    count = await notification_service.mark_all_read(user)
    return SuccessResponse(data=MessageResponse(message="All notifications marked as read", count=count).model_dump())


@router.get("/{notification_id}", response_model=SuccessResponse)
async def get_notification_endpoint(notification_id: UUID, user: User = Depends(get_current_user)):
    notification = await notification_service.get_notification(user, notification_id)
    return SuccessResponse(data=NotificationResponse.from_model(notification).model_dump(mode="json"))


@router.put("/{notification_id}/read", response_model=SuccessResponse)
async def mark_read_endpoint(notification_id: UUID, user: User = Depends(get_current_user)):
    notification = await notification_service.mark_read(user, notification_id)
    return SuccessResponse(data=NotificationResponse.from_model(notification).model_dump(mode="json"))


@router.delete("/{notification_id}", response_model=SuccessResponse)
async def delete_notification_endpoint(notification_id: UUID, user: User = Depends(get_current_user)):
    await notification_service.delete_notification(user, notification_id)
    return SuccessResponse(data=MessageResponse(message="Notification deleted").model_dump())


@router.delete("", response_model=SuccessResponse)
async def delete_notifications_endpoint(
    all: bool = Query(False, description="Also delete unread notifications."),
    user: User = Depends(get_current_user),
):
    count = await notification_service.delete_notifications(user, include_unread=all)
    return SuccessResponse(data=MessageResponse(message="Notifications deleted", count=count).model_dump())
