import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, List, Optional, Tuple, Union
from uuid import UUID

from tortoise.transactions import in_transaction

from app.core.config import CURRENCY, PICKUP_LEAD_MINUTES
from app.core.errors import (
    EmptyCart,
    Forbidden,
    InsufficientStock,
    InvalidStateTransition,
    ItemUnavailable,
    NotFound,
    ValidationError,
)
from app.events.notification_utility import NotificationType, create_notification
from app.models.cart import CartItem
from app.models.order import Order, OrderItem, OrderStatus, Pickup
from app.models.truck import MenuItemStatus, Truck, TruckOrderStatus
from app.models.user import User, UserRole
from app.services import cart_service, inventory_service

log = logging.getLogger("order_service")


def order_ref(order: Order) -> str:
    """Short, human-friendly order reference used in notification text."""
    return str(order.id)[:8]


def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid order status. Valid values: {valid}")


async def _load_order(order_id: UUID) -> Order:
    return await Order.get(id=order_id).prefetch_related("truck", "items__menu_item")


async def checkout(user: User, truck_id: UUID, scheduled_pickup_time: Optional[datetime] = None) -> Order:
    """
    Converts the user's cart lines for one truck into an order.

    Order creation, order lines, stock reservation and cart cleanup happen in one
    transaction with the inventory rows locked: any failure leaves cart and stock untouched.
    """
    truck = await Truck.get_or_none(id=truck_id)
    if not truck:
        raise NotFound("Truck not found")
    if truck.order_status != TruckOrderStatus.AVAILABLE:
        raise ValidationError(f"{truck.name} is not accepting orders right now.")

    async with in_transaction() as conn:
        cart_items = await (
            CartItem.filter(user_id=user.id, menu_item__truck__id=truck.id)
            .select_related("menu_item")
            .using_db(conn)
        )
        if not cart_items:
            raise EmptyCart("No items from this truck in cart")

        # 1. Lock stock and re-check every line before writing anything
        inventories = await inventory_service.lock_inventories([ci.menu_item_id for ci in cart_items], conn)
        for ci in cart_items:
            if ci.menu_item.status != MenuItemStatus.AVAILABLE:
                raise ItemUnavailable(f"'{ci.menu_item.name}' is not available")
            inv = inventories.get(ci.menu_item_id)
            available = inv.quantity if inv else 0
            if ci.quantity > available:
                raise InsufficientStock(
                    f"Insufficient stock for '{ci.menu_item.name}'. Requested: {ci.quantity}, Available: {available}"
                )

        # 2. Total uses the prices captured when the lines were added
        total = sum((ci.price * ci.quantity for ci in cart_items), Decimal("0"))

        # 3. Create the Order header
        order = await Order.create(
            user_id=user.id,
            truck_id=truck.id,
            status=OrderStatus.PENDING,
            total_price=total,
            scheduled_pickup_time=scheduled_pickup_time,
            estimated_earliest_pickup=datetime.now(timezone.utc) + timedelta(minutes=PICKUP_LEAD_MINUTES),
            using_db=conn
        )

        # 4. Snapshot each line and reserve its stock
        for ci in cart_items:
            await OrderItem.create(
                order=order,
                menu_item_id=ci.menu_item_id,
                quantity=ci.quantity,
                price=ci.price,
                using_db=conn
            )
            await inventory_service.reserve(ci.menu_item_id, ci.quantity, conn)

        # 5. Clear only the consumed lines
        await cart_service.clear_consumed(user, [ci.menu_item_id for ci in cart_items], conn)

        await create_notification(
            user_id=truck.owner_id,
            type=NotificationType.NEW_ORDER,
            title="New Order Received",
            message=f"Order #{order_ref(order)} from {user.name} - Total: {CURRENCY} {total:.2f}",
            conn=conn
        )

    log.info(f"Order {order.id} placed by user {user.id} at truck {truck.id} for {total:.2f}")
    return await _load_order(order.id)


async def apply_transition(order: Order, new_status: OrderStatus, conn: Any) -> OrderStatus:
    """
    Moves a locked order to ``new_status`` following the transition table.
    Cancellation returns every order line's quantity to the ledger.
    Returns the previous status.
    """
    if not order.status.can_transition_to(new_status):
        raise InvalidStateTransition(
            f"Cannot change order status from {order.status.value} to {new_status.value}"
        )

    if new_status == OrderStatus.CANCELLED:
        lines = await OrderItem.filter(order_id=order.id).using_db(conn)
        for line in sorted(lines, key=lambda item: str(item.menu_item_id)):
            await inventory_service.release(line.menu_item_id, line.quantity, conn)

    old_status = order.status
    order.status = new_status
    await order.save(update_fields=["status", "updated_at"], using_db=conn)
    return old_status


async def transition_order_status(order_id: UUID, new_status: Union[str, OrderStatus], actor: User) -> Order:
    """
    Drives the order lifecycle. The truck owner may make any legal transition;
    the customer who placed the order may only cancel it while it is pending.
    The other party is notified of every change.
    """
    status = parse_status(new_status)

    async with in_transaction() as conn:
        order = await Order.filter(id=order_id).select_for_update().using_db(conn).first()
        if not order:
            raise NotFound("Order not found")
        truck = await Truck.get(id=order.truck_id).using_db(conn)

        is_owner = truck.owner_id == actor.id
        if not is_owner:
            if order.user_id != actor.id or status != OrderStatus.CANCELLED:
                raise Forbidden("Only truck owner can update order status")
            if order.status != OrderStatus.PENDING:
                raise InvalidStateTransition("Only pending orders can be cancelled")

        old_status = await apply_transition(order, status, conn)

        if is_owner:
            await create_notification(
                user_id=order.user_id,
                type=NotificationType.ORDER_UPDATE,
                title="Order Status Update",
                message=f"Your order #{order_ref(order)} from {truck.name} is now: {status.value.upper()}",
                conn=conn
            )
        else:
            await create_notification(
                user_id=truck.owner_id,
                type=NotificationType.ORDER_UPDATE,
                title="Order Cancelled",
                message=f"Order #{order_ref(order)} was cancelled by the customer",
                conn=conn
            )

    log.info(f"Order {order.id} moved {old_status.value} -> {status.value} by {actor.id}")
    return await _load_order(order.id)


async def cancel_order(order_id: UUID, actor: User) -> Order:
    return await transition_order_status(order_id, OrderStatus.CANCELLED, actor)


# ----------- Read side -----------

async def list_orders(user: User, view: Optional[str] = None) -> List[Order]:
    """The user's own orders, or with ``view='truck'`` the orders of an owner's trucks."""
    if view == "truck":
        if user.role != UserRole.TRUCK_OWNER:
            raise Forbidden("Only truck owners can view truck orders")
        query = Order.filter(truck__owner__id=user.id).prefetch_related("truck", "user")
    else:
        query = Order.filter(user_id=user.id).prefetch_related("truck")
    return await query.order_by("-created_at")


async def _get_accessible_order(order_id: UUID, user: User) -> Tuple[Order, bool]:
    order = await Order.get_or_none(id=order_id).prefetch_related("truck", "items__menu_item")
    if not order:
        raise NotFound("Order not found")
    is_owner = order.truck.owner_id == user.id
    if order.user_id != user.id and not is_owner:
        raise Forbidden("Access denied")
    return order, is_owner


async def get_order_detail(order_id: UUID, user: User) -> Tuple[Order, Optional[Pickup], Optional[User]]:
    """Order with its lines and pickup; the customer is included when the owner is viewing."""
    order, is_owner = await _get_accessible_order(order_id, user)
    pickup = await Pickup.get_or_none(order_id=order.id)
    customer = await User.get_or_none(id=order.user_id) if is_owner else None
    return order, pickup, customer


async def get_order_items(order_id: UUID, user: User) -> List[OrderItem]:
    order, _ = await _get_accessible_order(order_id, user)
    return list(order.items)
