import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import require_roles
from app.core.errors import AppError
from app.models.user import User, UserRole
from app.schemas.inventory import (
    InventoryListResponse,
    InventoryResponse,
    InventoryStats,
    InventoryUpdateRequest,
    RestockRequest,
    RestockResponse,
    TruckInventoryResponse,
)
from app.schemas.response import SuccessResponse
from app.services import inventory_service

log = logging.getLogger("uvicorn")

router = APIRouter()
owner_only = require_roles(UserRole.TRUCK_OWNER)


@router.get("", response_model=SuccessResponse)
async def list_inventory_endpoint(owner: User = Depends(owner_only)):
    """Stock across all of the owner's trucks, with low and out-of-stock counts."""
    records = await inventory_service.list_owner_inventory(owner)
    data = InventoryListResponse(
        inventory=[InventoryResponse.from_model(inv) for inv in records],
        stats=InventoryStats.from_records(records),
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.get("/alerts/low-stock", response_model=SuccessResponse)
async def low_stock_endpoint(owner: User = Depends(owner_only)):
    records = await inventory_service.list_low_stock(owner)
    return SuccessResponse(data=[InventoryResponse.from_model(inv).model_dump(mode="json") for inv in records])


@router.get("/truck/{truck_id}", response_model=SuccessResponse)
async def truck_inventory_endpoint(truck_id: UUID, owner: User = Depends(owner_only)):
    truck, records = await inventory_service.get_truck_inventory(owner, truck_id)
    data = TruckInventoryResponse(
        truck_id=truck.id,
        truck_name=truck.name,
        inventory=[InventoryResponse.from_model(inv) for inv in records],
    ).model_dump(mode="json")
    return SuccessResponse(data=data)


@router.post("/restock", response_model=SuccessResponse)
async def bulk_restock_endpoint(payload: RestockRequest, owner: User = Depends(owner_only)):
    """Sets absolute stock for several items at once; items the owner does not own are skipped."""
    try:
        records = await inventory_service.bulk_restock(
            owner, [(item.menu_item_id, item.quantity) for item in payload.items]
        )
        data = RestockResponse(
            message=f"Restocked {len(records)} item(s)",
            items=[InventoryResponse.from_model(inv) for inv in records],
        ).model_dump(mode="json")
        return SuccessResponse(data=data)
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error restocking inventory: {e}")
        raise HTTPException(status_code=500, detail="Server failed to restock inventory.")


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_inventory_stock(menu_item_id: UUID, owner: User = Depends(owner_only)):
    """Fetches the available stock for a specific menu item."""
    inventory = await inventory_service.get_item_inventory(owner, menu_item_id)
    return SuccessResponse(data=InventoryResponse.from_model(inventory).model_dump(mode="json"))


@router.put("/{menu_item_id}", response_model=SuccessResponse)
async def update_inventory_endpoint(
    menu_item_id: UUID, payload: InventoryUpdateRequest, owner: User = Depends(owner_only)
):
    try:
        inventory = await inventory_service.update_item_inventory(
            owner,
            menu_item_id,
            quantity=payload.quantity,
            adjustment=payload.adjustment,
            low_stock_threshold=payload.low_stock_threshold,
        )
        return SuccessResponse(data=InventoryResponse.from_model(inventory).model_dump(mode="json"))
    except AppError:
        raise
    except Exception as e:
        log.error(f"Error updating inventory for {menu_item_id}: {e}")
        raise HTTPException(status_code=500, detail="Server failed to update inventory.")
