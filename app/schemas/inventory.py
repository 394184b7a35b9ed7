import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.models.inventory import Inventory
from app.models.truck import MenuItemStatus
from app.schemas.response import Money


class InventoryResponse(BaseModel):
    """Stock level of one menu item, with warning flags."""
    menu_item_id: uuid.UUID
    name: str
    category: str
    price: Money
    item_status: MenuItemStatus
    truck_id: uuid.UUID
    truck_name: str
    quantity: int
    low_stock_threshold: int
    low_stock: bool
    out_of_stock: bool
    last_restocked: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, inventory: Inventory) -> "InventoryResponse":
        item = inventory.menu_item
        return cls(
            menu_item_id=item.id,
            name=item.name,
            category=item.category,
            price=item.price,
            item_status=item.status,
            truck_id=item.truck.id,
            truck_name=item.truck.name,
            quantity=inventory.quantity,
            low_stock_threshold=inventory.low_stock_threshold,
            low_stock=inventory.low_stock,
            out_of_stock=inventory.out_of_stock,
            last_restocked=inventory.last_restocked,
            updated_at=inventory.updated_at,
        )


class InventoryStats(BaseModel):
    total_items: int
    low_stock_items: int
    out_of_stock_items: int

    @classmethod
    def from_records(cls, records: List[Inventory]) -> "InventoryStats":
        return cls(
            total_items=len(records),
            low_stock_items=sum(1 for inv in records if inv.low_stock and not inv.out_of_stock),
            out_of_stock_items=sum(1 for inv in records if inv.out_of_stock),
        )


class InventoryListResponse(BaseModel):
    inventory: List[InventoryResponse]
    stats: InventoryStats


class TruckInventoryResponse(BaseModel):
    truck_id: uuid.UUID
    truck_name: str
    inventory: List[InventoryResponse]


class InventoryUpdateRequest(BaseModel):
    quantity: Optional[int] = Field(None, description="Absolute stock level (clamped at 0).")
    adjustment: Optional[int] = Field(None, description="Relative change, e.g. -3 or +20. Wins over quantity.")
    low_stock_threshold: Optional[int] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_not_empty(self):
        if self.quantity is None and self.adjustment is None and self.low_stock_threshold is None:
            raise ValueError("Provide quantity, adjustment or low_stock_threshold")
        return self


class RestockItem(BaseModel):
    menu_item_id: uuid.UUID
    quantity: int = Field(..., ge=0)


class RestockRequest(BaseModel):
    items: List[RestockItem] = Field(..., min_length=1)


class RestockResponse(BaseModel):
    message: str
    items: List[InventoryResponse]
