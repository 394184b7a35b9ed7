"""
Simulated payment boundary. The gateway always succeeds; a successful payment
drives the order from pending to confirmed through the order lifecycle.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID

from tortoise.transactions import in_transaction

from app.core.config import CURRENCY
from app.core.errors import Conflict, Forbidden, NotFound, PaymentFailed, ValidationError
from app.events.notification_utility import NotificationType, create_notification
from app.models.order import Order, OrderStatus, PaymentStatus
from app.models.truck import Truck
from app.models.user import User
from app.services.order_service import apply_transition, order_ref

log = logging.getLogger("payment_service")


class PaymentMethod(str, Enum):
    CARD = "card"
    CASH = "cash"
    WALLET = "wallet"


@dataclass
class CardDetails:
    number: Optional[str] = None
    holder_name: Optional[str] = None
    expiry_date: Optional[str] = None
    cvv: Optional[str] = None


@dataclass
class PaymentResult:
    order_id: UUID
    amount: Decimal
    method: PaymentMethod
    status: PaymentStatus
    processed_at: datetime


@dataclass
class RefundResult:
    order_id: UUID
    amount: Decimal
    reason: str
    processed_at: datetime


def validate_card(card: Optional[CardDetails]) -> None:
    if not card or not (card.number and card.holder_name and card.expiry_date and card.cvv):
        raise ValidationError("Card details are required")
    digits = card.number.replace(" ", "")
    if not digits.isdigit() or not 13 <= len(digits) <= 19:
        raise ValidationError("Invalid card number")
    if not card.cvv.isdigit() or not 3 <= len(card.cvv) <= 4:
        raise ValidationError("Invalid CVV")


def _charge(order: Order, method: PaymentMethod) -> bool:
    # No real gateway is integrated
    return True


async def process_payment(
    user: User,
    order_id: UUID,
    method: PaymentMethod,
    card: Optional[CardDetails] = None,
) -> PaymentResult:
    if method == PaymentMethod.CARD:
        validate_card(card)

    async with in_transaction() as conn:
        order = await Order.filter(id=order_id).select_for_update().using_db(conn).first()
        if not order:
            raise NotFound("Order not found")
        if order.user_id != user.id:
            raise Forbidden("You can only pay for your own orders")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Cannot pay for cancelled orders")
        if order.status != OrderStatus.PENDING:
            raise Conflict("Order has already been paid")

        if not _charge(order, method):
            raise PaymentFailed("Payment could not be processed")
        await apply_transition(order, OrderStatus.CONFIRMED, conn)

        truck = await Truck.get(id=order.truck_id).using_db(conn)
        amount = f"{CURRENCY} {order.total_price:.2f}"
        await create_notification(
            user_id=user.id,
            type=NotificationType.PAYMENT_SUCCESS,
            title="Payment Successful",
            message=f"Payment of {amount} for Order #{order_ref(order)} was successful",
            conn=conn
        )
        await create_notification(
            user_id=truck.owner_id,
            type=NotificationType.PAYMENT_RECEIVED,
            title="Payment Received",
            message=f"Payment received for Order #{order_ref(order)} - {amount}",
            conn=conn
        )

    log.info(f"Payment for order {order.id} via {method.value} succeeded")
    return PaymentResult(
        order_id=order.id,
        amount=order.total_price,
        method=method,
        status=PaymentStatus.COMPLETED,
        processed_at=datetime.now(timezone.utc),
    )


async def get_payment_status(user: User, order_id: UUID) -> Order:
    order = await Order.get_or_none(id=order_id).prefetch_related("truck")
    if not order:
        raise NotFound("Order not found")
    if user.id not in (order.user_id, order.truck.owner_id):
        raise Forbidden("Access denied")
    return order


async def refund(owner: User, order_id: UUID, reason: Optional[str] = None) -> RefundResult:
    """
    Owner-issued refund: the order is cancelled first (releasing its stock),
    then the customer is told about the refund.
    """
    async with in_transaction() as conn:
        order = await Order.filter(id=order_id).select_for_update().using_db(conn).first()
        if not order:
            raise NotFound("Order not found")
        truck = await Truck.get(id=order.truck_id).using_db(conn)
        if truck.owner_id != owner.id:
            raise Forbidden("Only truck owner can issue refunds")

        await apply_transition(order, OrderStatus.CANCELLED, conn)

        message = f"Refund of {CURRENCY} {order.total_price:.2f} for Order #{order_ref(order)} has been processed."
        if reason:
            message += f" Reason: {reason}"
        await create_notification(
            user_id=order.user_id,
            type=NotificationType.REFUND_PROCESSED,
            title="Refund Processed",
            message=message,
            conn=conn
        )

    log.info(f"Order {order.id} refunded by owner {owner.id}")
    return RefundResult(
        order_id=order.id,
        amount=order.total_price,
        reason=reason or "No reason provided",
        processed_at=datetime.now(timezone.utc),
    )
