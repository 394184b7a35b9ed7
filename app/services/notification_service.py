from typing import List, Tuple
from uuid import UUID

from app.core.errors import NotFound
from app.models.notification import Notification
from app.models.user import User


async def unread_count(user: User) -> int:
    return await Notification.filter(user_id=user.id, is_read=False).count()


async def list_notifications(user: User, limit: int = 50, unread_only: bool = False) -> Tuple[List[Notification], int]:
    """Newest notifications first, plus the user's total unread count."""
    query = Notification.filter(user_id=user.id)
    if unread_only:
        query = query.filter(is_read=False)
    notifications = await query.order_by("-created_at").limit(limit)
    return notifications, await unread_count(user)


async def get_notification(user: User, notification_id: UUID) -> Notification:
    notification = await Notification.get_or_none(id=notification_id, user_id=user.id)
    if not notification:
        raise NotFound("Notification not found")
    return notification


async def mark_read(user: User, notification_id: UUID) -> Notification:
    """Idempotent: marking an already-read notification succeeds again."""
    notification = await get_notification(user, notification_id)
    if not notification.is_read:
        notification.is_read = True
        await notification.save(update_fields=["is_read"])
    return notification


async def mark_all_read(user: User) -> int:
    return await Notification.filter(user_id=user.id, is_read=False).update(is_read=True)


async def delete_notification(user: User, notification_id: UUID) -> None:
    deleted = await Notification.filter(id=notification_id, user_id=user.id).delete()
    if not deleted:
        raise NotFound("Notification not found")


async def delete_notifications(user: User, include_unread: bool = False) -> int:
    """Deletes read notifications, or every notification with ``include_unread``."""
    query = Notification.filter(user_id=user.id)
    if not include_unread:
        query = query.filter(is_read=True)
    return await query.delete()
