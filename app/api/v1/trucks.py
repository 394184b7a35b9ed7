import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.api.deps import require_roles
from app.models.user import User, UserRole
from app.schemas.response import SuccessResponse
from app.schemas.truck import (
    MenuItemResponse,
    TruckDetailResponse,
    TruckOrderStatusUpdate,
    TruckResponse,
    TruckUpdateRequest,
)
from app.services import truck_service

log = logging.getLogger("uvicorn")

router = APIRouter()
owner_only = require_roles(UserRole.TRUCK_OWNER)


@router.get("", response_model=SuccessResponse)
async def list_trucks_endpoint():
    trucks = await truck_service.list_trucks()
    return SuccessResponse(data=[TruckResponse.from_model(t).model_dump(mode="json") for t in trucks])


@router.get("/mine", response_model=SuccessResponse)
async def my_trucks_endpoint(owner: User = Depends(owner_only)):
    trucks = await truck_service.list_owner_trucks(owner)
    return SuccessResponse(data=[TruckResponse.from_model(t).model_dump(mode="json") for t in trucks])


@router.get("/{truck_id}", response_model=SuccessResponse)
async def get_truck_endpoint(truck_id: UUID):
    """Truck details with the items that can be ordered now."""
    truck, menu = await truck_service.get_truck_with_menu(truck_id)
    base = TruckResponse.from_model(truck).model_dump()
    data = TruckDetailResponse(
        **base, menu=[MenuItemResponse.from_model(item) for item in menu]
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/{truck_id}/menu", response_model=SuccessResponse)
async def get_truck_menu_endpoint(truck_id: UUID, category: Optional[str] = Query(None)):
    """Every item of the truck, sold-out ones last."""
    items = await truck_service.get_truck_menu(truck_id, category)
    return SuccessResponse(data=[MenuItemResponse.from_model(item).model_dump(mode="json") for item in items])


@router.put("/{truck_id}", response_model=SuccessResponse)
async def update_truck_endpoint(truck_id: UUID, payload: TruckUpdateRequest, owner: User = Depends(owner_only)):
    truck = await truck_service.update_truck(
        owner, truck_id, name=payload.name, logo=payload.logo, truck_status=payload.truck_status
    )
    log.info(f"Truck {truck.id} updated by owner {owner.id}")
    return SuccessResponse(data=TruckResponse.from_model(truck).model_dump(mode="json"))


@router.put("/{truck_id}/order-status", response_model=SuccessResponse)
async def set_order_status_endpoint(
    truck_id: UUID, payload: TruckOrderStatusUpdate, owner: User = Depends(owner_only)
):
    """Opens or closes the truck for new orders."""
    truck = await truck_service.set_order_status(owner, truck_id, payload.order_status)
    log.info(f"Truck {truck.id} order status set to {truck.order_status.value}")
    return SuccessResponse(data=TruckResponse.from_model(truck).model_dump(mode="json"))
