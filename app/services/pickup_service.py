import logging
from datetime import datetime, timezone
from typing import List, Optional, Union
from uuid import UUID

from tortoise.transactions import in_transaction

from app.core.errors import Conflict, Forbidden, InvalidStateTransition, NotFound, ValidationError
from app.events.notification_utility import NotificationType, create_notification
from app.models.order import Order, OrderStatus, Pickup, PickupStatus
from app.models.user import User, UserRole
from app.services.order_service import order_ref

log = logging.getLogger("pickup_service")


def _parse_status(value: Union[str, PickupStatus]) -> PickupStatus:
    try:
        return PickupStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in PickupStatus)
        raise ValidationError(f"Invalid status. Valid values: {valid}")


async def _get_pickup(pickup_id: UUID) -> Pickup:
    pickup = await Pickup.get_or_none(id=pickup_id).prefetch_related("order__truck")
    if not pickup:
        raise NotFound("Pickup not found")
    return pickup


async def list_pickups(user: User) -> List[Pickup]:
    """Owners see pickups for their trucks, everyone else their own."""
    if user.role == UserRole.TRUCK_OWNER:
        query = Pickup.filter(order__truck__owner__id=user.id)
    else:
        query = Pickup.filter(order__user__id=user.id)
    return await query.order_by("scheduled_time").prefetch_related("order__truck")


async def get_pickup(user: User, pickup_id: UUID) -> Pickup:
    pickup = await _get_pickup(pickup_id)
    if user.id not in (pickup.order.user_id, pickup.order.truck.owner_id):
        raise Forbidden("Access denied")
    return pickup


async def schedule_pickup(
    user: User,
    order_id: UUID,
    scheduled_time: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Pickup:
    order = await Order.get_or_none(id=order_id).prefetch_related("truck")
    if not order:
        raise NotFound("Order not found")
    if order.user_id != user.id:
        raise Forbidden("You can only schedule pickup for your own orders")
    if order.status in (OrderStatus.CANCELLED, OrderStatus.COMPLETED):
        raise ValidationError("Cannot schedule pickup for cancelled or completed orders")
    if await Pickup.filter(order_id=order.id).exists():
        raise Conflict("Pickup already scheduled for this order")

    when = scheduled_time or order.scheduled_pickup_time or order.estimated_earliest_pickup
    async with in_transaction() as conn:
        pickup = await Pickup.create(
            order_id=order.id,
            status=PickupStatus.SCHEDULED,
            scheduled_time=when,
            notes=notes,
            using_db=conn
        )
        await create_notification(
            user_id=order.truck.owner_id,
            type=NotificationType.PICKUP_SCHEDULED,
            title="Pickup Scheduled",
            message=f"Pickup scheduled for Order #{order_ref(order)} at {when:%Y-%m-%d %H:%M} UTC",
            conn=conn
        )
    log.info(f"Pickup {pickup.id} scheduled for order {order.id}")
    return await _get_pickup(pickup.id)


async def update_pickup(
    user: User,
    pickup_id: UUID,
    status: Optional[Union[str, PickupStatus]] = None,
    scheduled_time: Optional[datetime] = None,
    notes: Optional[str] = None,
) -> Pickup:
    """Reschedules or moves a pickup along its status table; the other party is notified of status changes."""
    pickup = await get_pickup(user, pickup_id)
    if status is None and scheduled_time is None and notes is None:
        raise ValidationError("No update data provided")

    new_status = _parse_status(status) if status is not None else None
    async with in_transaction() as conn:
        if new_status is not None:
            if not pickup.status.can_transition_to(new_status):
                raise InvalidStateTransition(
                    f"Cannot change pickup status from {pickup.status.value} to {new_status.value}"
                )
            pickup.status = new_status
            if new_status == PickupStatus.PICKED_UP:
                pickup.completed_at = datetime.now(timezone.utc)
        if scheduled_time is not None:
            pickup.scheduled_time = scheduled_time
        if notes is not None:
            pickup.notes = notes
        await pickup.save(using_db=conn)

        if new_status is not None:
            order = pickup.order
            recipient = order.truck.owner_id if user.id == order.user_id else order.user_id
            await create_notification(
                user_id=recipient,
                type=NotificationType.PICKUP_UPDATE,
                title="Pickup Status Update",
                message=f"Pickup for Order #{order_ref(order)} is now: {new_status.value.upper()}",
                conn=conn
            )
    return pickup


async def cancel_pickup(user: User, pickup_id: UUID) -> Pickup:
    pickup = await _get_pickup(pickup_id)
    if pickup.order.user_id != user.id:
        raise Forbidden("You can only cancel your own pickups")
    if pickup.status == PickupStatus.PICKED_UP:
        raise InvalidStateTransition("Pickup already completed")
    if pickup.status == PickupStatus.CANCELLED:
        return pickup

    pickup.status = PickupStatus.CANCELLED
    await pickup.save(update_fields=["status"])
    return pickup
