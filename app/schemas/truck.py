import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from app.models.inventory import Inventory
from app.models.truck import MenuItem, MenuItemStatus, Truck, TruckOrderStatus, TruckStatus
from app.schemas.response import Money


class TruckResponse(BaseModel):
    id: uuid.UUID
    name: str
    logo: Optional[str] = None
    owner_id: uuid.UUID
    truck_status: TruckStatus
    order_status: TruckOrderStatus
    created_at: datetime

    @classmethod
    def from_model(cls, truck: Truck) -> "TruckResponse":
        return cls(
            id=truck.id,
            name=truck.name,
            logo=truck.logo,
            owner_id=truck.owner_id,
            truck_status=truck.truck_status,
            order_status=truck.order_status,
            created_at=truck.created_at,
        )


class MenuItemResponse(BaseModel):
    id: uuid.UUID
    truck_id: uuid.UUID
    name: str
    description: Optional[str] = None
    price: Money
    category: str
    status: MenuItemStatus

    @classmethod
    def from_model(cls, item: MenuItem) -> "MenuItemResponse":
        return cls(
            id=item.id,
            truck_id=item.truck_id,
            name=item.name,
            description=item.description,
            price=item.price,
            category=item.category,
            status=item.status,
        )


class TruckDetailResponse(TruckResponse):
    """Truck with the items that can be ordered now."""
    menu: List[MenuItemResponse]


class StockLevel(BaseModel):
    quantity: int
    low_stock_threshold: int
    low_stock: bool
    out_of_stock: bool
    last_restocked: Optional[datetime] = None

    @classmethod
    def from_model(cls, inventory: Inventory) -> "StockLevel":
        return cls(
            quantity=inventory.quantity,
            low_stock_threshold=inventory.low_stock_threshold,
            low_stock=inventory.low_stock,
            out_of_stock=inventory.out_of_stock,
            last_restocked=inventory.last_restocked,
        )


class MenuItemDetailResponse(MenuItemResponse):
    truck_name: str
    inventory: Optional[StockLevel] = None


class TruckUpdateRequest(BaseModel):
    name: Optional[str] = None
    logo: Optional[str] = Field(None, description="URL of the truck logo.")
    truck_status: Optional[TruckStatus] = None


class TruckOrderStatusUpdate(BaseModel):
    order_status: TruckOrderStatus = Field(..., description="available, unavailable or busy.")


class MenuItemCreateRequest(BaseModel):
    truck_id: uuid.UUID
    name: str = Field(..., min_length=1, description="Name of the menu item (e.g., Koshary Box).")
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Selling price of the item.")
    category: str = Field("main", min_length=1)
    initial_quantity: int = Field(0, ge=0, description="Initial available stock quantity.")
    low_stock_threshold: int = Field(DEFAULT_LOW_STOCK_THRESHOLD, ge=0, description="Stock level that triggers a warning.")


class MenuItemUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    category: Optional[str] = Field(None, min_length=1)
    status: Optional[MenuItemStatus] = None


class ListedMenuItemResponse(MenuItemResponse):
    """Menu item shown outside its truck page, so it carries the truck name."""
    truck_name: str
    order_count: Optional[int] = None

    @classmethod
    def from_model(cls, item: MenuItem, **extra) -> "ListedMenuItemResponse":
        base = MenuItemResponse.from_model(item).model_dump()
        return cls(**base, truck_name=item.truck.name, **extra)


class SearchResponse(BaseModel):
    query: str
    trucks: List[TruckResponse]
    menu_items: List[ListedMenuItemResponse]
    total_results: int
