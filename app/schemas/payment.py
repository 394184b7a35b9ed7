import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.order import OrderStatus, PaymentStatus
from app.schemas.response import Money
from app.services.payment_service import PaymentMethod


class PaymentRequest(BaseModel):
    order_id: uuid.UUID
    payment_method: PaymentMethod
    card_number: Optional[str] = None
    card_holder_name: Optional[str] = None
    expiry_date: Optional[str] = Field(None, description="MM/YY")
    cvv: Optional[str] = None


class PaymentResponse(BaseModel):
    order_id: uuid.UUID
    amount: Money
    method: PaymentMethod
    status: PaymentStatus
    processed_at: datetime


class PaymentStatusResponse(BaseModel):
    order_id: uuid.UUID
    amount: Money
    status: PaymentStatus
    order_status: OrderStatus


class RefundRequest(BaseModel):
    reason: Optional[str] = None


class RefundResponse(BaseModel):
    order_id: uuid.UUID
    amount: Money
    reason: str
    processed_at: datetime
