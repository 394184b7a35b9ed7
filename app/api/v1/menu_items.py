import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import require_roles
from app.models.user import User, UserRole
from app.schemas.response import MessageResponse, SuccessResponse
from app.schemas.truck import (
    MenuItemCreateRequest,
    MenuItemDetailResponse,
    MenuItemResponse,
    MenuItemUpdateRequest,
    StockLevel,
)
from app.services import truck_service

log = logging.getLogger("uvicorn")

router = APIRouter()
owner_only = require_roles(UserRole.TRUCK_OWNER)


@router.get("", response_model=SuccessResponse)
async def list_menu_items_endpoint(
    truck_id: Optional[UUID] = Query(None),
    category: Optional[str] = Query(None),
    available_only: bool = Query(False),
):
    items = await truck_service.list_menu_items(truck_id=truck_id, category=category, available_only=available_only)
    return SuccessResponse(data=[MenuItemResponse.from_model(item).model_dump(mode="json") for item in items])


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(menu_item_id: UUID):
    item, inventory = await truck_service.get_menu_item(menu_item_id)
    base = MenuItemResponse.from_model(item).model_dump()
    data = MenuItemDetailResponse(
        **base,
        truck_name=item.truck.name,
        inventory=StockLevel.from_model(inventory) if inventory else None,
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_menu_item_endpoint(payload: MenuItemCreateRequest, owner: User = Depends(owner_only)):
    """
    Adds a new menu item and its initial inventory to one of the owner's trucks.
    An item created with no stock starts out unavailable.
    """
    item, inventory = await truck_service.create_menu_item(
        owner,
        payload.truck_id,
        name=payload.name,
        price=payload.price,
        category=payload.category,
        description=payload.description,
        initial_quantity=payload.initial_quantity,
        low_stock_threshold=payload.low_stock_threshold,
    )
    await item.fetch_related("truck")
    base = MenuItemResponse.from_model(item).model_dump()
    data = MenuItemDetailResponse(
        **base, truck_name=item.truck.name, inventory=StockLevel.from_model(inventory)
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.put("/{menu_item_id}", response_model=SuccessResponse)
async def update_menu_item_endpoint(
    menu_item_id: UUID, payload: MenuItemUpdateRequest, owner: User = Depends(owner_only)
):
    item = await truck_service.update_menu_item(
        owner,
        menu_item_id,
        name=payload.name,
        description=payload.description,
        price=payload.price,
        category=payload.category,
        status=payload.status,
    )
    return SuccessResponse(data=MenuItemResponse.from_model(item).model_dump(mode="json"))


@router.delete("/{menu_item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(menu_item_id: UUID, owner: User = Depends(owner_only)):
    await truck_service.delete_menu_item(owner, menu_item_id)
    log.info(f"Menu item {menu_item_id} deleted by owner {owner.id}")
    return SuccessResponse(data=MessageResponse(message="Menu item deleted").model_dump())
