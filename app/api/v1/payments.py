from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_current_user, require_roles
from app.models.order import PaymentStatus
from app.models.user import User, UserRole
from app.schemas.payment import (
    PaymentRequest,
    PaymentResponse,
    PaymentStatusResponse,
    RefundRequest,
    RefundResponse,
)
from app.schemas.response import SuccessResponse
from app.services import payment_service
from app.services.payment_service import CardDetails

router = APIRouter()


@router.post("", response_model=SuccessResponse)
async def process_payment_endpoint(payload: PaymentRequest, user: User = Depends(get_current_user)):
    """Pays for a pending order, which confirms it. Card payments need full card details."""
    card = CardDetails(
        number=payload.card_number,
        holder_name=payload.card_holder_name,
        expiry_date=payload.expiry_date,
        cvv=payload.cvv,
    )
    result = await payment_service.process_payment(user, payload.order_id, payload.payment_method, card)
    data = PaymentResponse(
        order_id=result.order_id,
        amount=result.amount,
        method=result.method,
        status=result.status,
        processed_at=result.processed_at,
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/{order_id}", response_model=SuccessResponse)
async def payment_status_endpoint(order_id: UUID, user: User = Depends(get_current_user)):
    order = await payment_service.get_payment_status(user, order_id)
    data = PaymentStatusResponse(
        order_id=order.id,
        amount=order.total_price,
        status=PaymentStatus.for_order(order.status),
        order_status=order.status,
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.post("/{order_id}/refund", response_model=SuccessResponse)
async def refund_endpoint(
    order_id: UUID,
    payload: RefundRequest,
    owner: User = Depends(require_roles(UserRole.TRUCK_OWNER)),
):
    result = await payment_service.refund(owner, order_id, payload.reason)
    data = RefundResponse(
        order_id=result.order_id,
        amount=result.amount,
        reason=result.reason,
        processed_at=result.processed_at,
    ).model_dump(mode="json")
    return SuccessResponse(data=data)
