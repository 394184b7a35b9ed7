from typing import Any
from uuid import UUID

from app.models.notification import Notification


class NotificationType:
    NEW_ORDER = "new_order"
    ORDER_UPDATE = "order_update"
    LOW_STOCK = "low_stock"
    PAYMENT_SUCCESS = "payment_success"
    PAYMENT_RECEIVED = "payment_received"
    REFUND_PROCESSED = "refund_processed"
    PICKUP_SCHEDULED = "pickup_scheduled"
    PICKUP_UPDATE = "pickup_update"


async def create_notification(
    user_id: UUID,
    type: str,
    title: str,
    message: str,
    conn: Any = None
) -> Notification:
    """
    Creates a notification record for ``user_id`` using the provided database connection.

    With 'conn' the notification commits or rolls back together with the change it describes.
    """
    return await Notification.create(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        is_read=False,
        using_db=conn
    )
