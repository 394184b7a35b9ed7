import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.order import Order, OrderItem, OrderStatus, Pickup, PickupStatus
from app.models.user import User
from app.schemas.response import Money


class CheckoutRequest(BaseModel):
    """Schema for turning the cart lines of one truck into an order."""
    truck_id: uuid.UUID
    scheduled_pickup_time: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status."""
    status: str = Field(..., description="pending, confirmed, preparing, ready, completed or cancelled.")


class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    category: str
    quantity: int
    price: Money
    line_total: Money

    @classmethod
    def from_model(cls, line: OrderItem) -> "OrderItemResponse":
        return cls(
            id=line.id,
            menu_item_id=line.menu_item.id,
            name=line.menu_item.name,
            category=line.menu_item.category,
            quantity=line.quantity,
            price=line.price,
            line_total=line.price * line.quantity,
        )


class OrderResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    truck_id: uuid.UUID
    truck_name: str
    status: OrderStatus
    total_price: Money
    scheduled_pickup_time: Optional[datetime] = None
    estimated_earliest_pickup: datetime
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, order: Order, **extra) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            truck_id=order.truck.id,
            truck_name=order.truck.name,
            status=order.status,
            total_price=order.total_price,
            scheduled_pickup_time=order.scheduled_pickup_time,
            estimated_earliest_pickup=order.estimated_earliest_pickup,
            created_at=order.created_at,
            updated_at=order.updated_at,
            **extra,
        )


class OwnerOrderResponse(OrderResponse):
    """Order row in the truck owner's dashboard."""
    customer_name: str
    customer_email: str


class PickupResponse(BaseModel):
    id: uuid.UUID
    order_id: uuid.UUID
    status: PickupStatus
    scheduled_time: datetime
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_model(cls, pickup: Pickup) -> "PickupResponse":
        return cls(
            id=pickup.id,
            order_id=pickup.order_id,
            status=pickup.status,
            scheduled_time=pickup.scheduled_time,
            notes=pickup.notes,
            completed_at=pickup.completed_at,
            created_at=pickup.created_at,
        )


class CustomerInfo(BaseModel):
    id: uuid.UUID
    name: str
    email: str

    @classmethod
    def from_model(cls, user: User) -> "CustomerInfo":
        return cls(id=user.id, name=user.name, email=user.email)


class OrderDetailResponse(OrderResponse):
    """Schema for fetching detailed order information."""
    items: List[OrderItemResponse]
    pickup: Optional[PickupResponse] = None
    customer: Optional[CustomerInfo] = None


class PickupCreateRequest(BaseModel):
    order_id: uuid.UUID
    scheduled_time: Optional[datetime] = None
    notes: Optional[str] = None


class PickupUpdateRequest(BaseModel):
    status: Optional[str] = Field(None, description="scheduled, ready, picked_up or cancelled.")
    scheduled_time: Optional[datetime] = None
    notes: Optional[str] = None
