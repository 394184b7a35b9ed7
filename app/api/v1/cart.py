import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.api.deps import get_current_user
from app.core.errors import AppError
from app.models.user import User
from app.schemas.cart import CartAddRequest, CartItemResponse, CartResponse, CartUpdateRequest
from app.schemas.response import MessageResponse, SuccessResponse
from app.services import cart_service

log = logging.getLogger("uvicorn")

router = APIRouter()


@router.get("", response_model=SuccessResponse)
async def get_cart_endpoint(user: User = Depends(get_current_user)):
    """The caller's cart, grouped by truck with subtotals."""
    cart_items = await cart_service.list_for_user(user)
    return SuccessResponse(data=CartResponse.from_items(cart_items).model_dump(mode="json"))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_to_cart_endpoint(payload: CartAddRequest, response: Response, user: User = Depends(get_current_user)):
    """
    Adds an item to the cart. Adding an item already in the cart increases
    its quantity and answers 200 instead of 201.
    """
    try:
        cart_item, created = await cart_service.add_or_increment(user, payload.menu_item_id, payload.quantity)
        if not created:
            response.status_code = status.HTTP_200_OK
        return SuccessResponse(data=CartItemResponse.from_model(cart_item).model_dump(mode="json"))
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error adding {payload.menu_item_id} to cart of {user.id}: {e}")
        raise HTTPException(status_code=500, detail="Server failed to add item to cart.")


@router.put("/{cart_item_id}", response_model=SuccessResponse)
async def update_cart_item_endpoint(
    cart_item_id: UUID, payload: CartUpdateRequest, user: User = Depends(get_current_user)
):
    cart_item = await cart_service.set_quantity(user, cart_item_id, payload.quantity)
    return SuccessResponse(data=CartItemResponse.from_model(cart_item).model_dump(mode="json"))


@router.delete("/{cart_item_id}", response_model=SuccessResponse)
async def remove_cart_item_endpoint(cart_item_id: UUID, user: User = Depends(get_current_user)):
    await cart_service.remove(user, cart_item_id)
    return SuccessResponse(data=MessageResponse(message="Item removed from cart").model_dump())


@router.delete("", response_model=SuccessResponse)
async def clear_cart_endpoint(user: User = Depends(get_current_user)):
    count = await cart_service.clear(user)
    return SuccessResponse(data=MessageResponse(message="Cart cleared", count=count).model_dump())
