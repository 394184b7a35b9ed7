import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_current_user
from app.core.errors import AppError
from app.models.user import User
from app.schemas.order import (
    CheckoutRequest,
    CustomerInfo,
    OrderDetailResponse,
    OrderItemResponse,
    OrderResponse,
    OrderStatusUpdate,
    OwnerOrderResponse,
    PickupResponse,
)
from app.schemas.response import SuccessResponse
from app.services import order_service

router = APIRouter()
log = logging.getLogger("uvicorn")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def checkout_endpoint(payload: CheckoutRequest, user: User = Depends(get_current_user)):
    """
    Places an order for every cart line of one truck. Stock is reserved and the
    consumed lines leave the cart in the same transaction.
    """
    try:
        order = await order_service.checkout(
            user=user,
            truck_id=payload.truck_id,
            scheduled_pickup_time=payload.scheduled_pickup_time,
        )
        log.info(f"Order {order.id} placed successfully for user {user.id}.")
        items = [OrderItemResponse.from_model(line) for line in order.items]
        data = OrderDetailResponse.from_model(order, items=items).model_dump(mode="json")
        return SuccessResponse(data=data)
    except AppError as e:
        log.error(f"Checkout rejected for user {user.id}: {e.message}")
        raise
    except Exception as e:
        log.error(f"Error placing order: {e}")
        raise HTTPException(status_code=500, detail="Server failed to place order.")


@router.get("", response_model=SuccessResponse)
async def list_orders_endpoint(
    view: Optional[str] = Query(None, description="'truck' lists orders placed at the caller's trucks."),
    user: User = Depends(get_current_user),
):
    orders = await order_service.list_orders(user, view)
    if view == "truck":
        data = [
            OwnerOrderResponse.from_model(o, customer_name=o.user.name, customer_email=o.user.email).model_dump(mode="json")
            for o in orders
        ]
    else:
        data = [OrderResponse.from_model(o).model_dump(mode="json") for o in orders]
    return SuccessResponse(data=data)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: UUID, user: User = Depends(get_current_user)):
    """Fetches details for a specific order."""
    try:
        order, pickup, customer = await order_service.get_order_detail(order_id, user)
        data = OrderDetailResponse.from_model(
            order,
            items=[OrderItemResponse.from_model(line) for line in order.items],
            pickup=PickupResponse.from_model(pickup) if pickup else None,
            customer=CustomerInfo.from_model(customer) if customer else None,
        ).model_dump(mode="json")
        return SuccessResponse(data=data)
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error fetching order {order_id}: {e}")
        raise HTTPException(status_code=500, detail="Server failed to fetch order details.")


@router.get("/{order_id}/items", response_model=SuccessResponse)
async def get_order_items_endpoint(order_id: UUID, user: User = Depends(get_current_user)):
    lines = await order_service.get_order_items(order_id, user)
    return SuccessResponse(data=[OrderItemResponse.from_model(line).model_dump(mode="json") for line in lines])


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: UUID, payload: OrderStatusUpdate, user: User = Depends(get_current_user)):
    """
    Moves the order along its lifecycle (e.g. 'confirmed', 'preparing', 'ready').
    Cancelling returns the reserved stock.
    """
    try:
        order = await order_service.transition_order_status(order_id, payload.status, actor=user)
        log.info(f"Order {order_id} moved to {order.status.value} by {user.id}")
        return SuccessResponse(data=OrderResponse.from_model(order).model_dump(mode="json"))
    except AppError as e:
        log.error(f"Status update rejected for order {order_id}: {e.message}")
        raise
    except Exception as e:
        log.error(f"Error updating order status: {e}")
        raise HTTPException(status_code=500, detail="Server failed to update order status.")


@router.post("/{order_id}/cancel", response_model=SuccessResponse)
async def cancel_order_endpoint(order_id: UUID, user: User = Depends(get_current_user)):
    """Cancels the order and returns its quantities to inventory."""
    try:
        order = await order_service.cancel_order(order_id, actor=user)
        return SuccessResponse(data=OrderResponse.from_model(order).model_dump(mode="json"))
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error cancelling order: {e}")
        raise HTTPException(status_code=500, detail="Server failed to cancel order.")
