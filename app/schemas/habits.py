from typing import List, Optional


from pydantic import BaseModel

from app.models.order import OrderItem
from app.models.truck import MenuItemStatus, Truck
from app.schemas.order import OrderItemResponse, OrderResponse
from app.schemas.response import Money
from app.schemas.truck import ListedMenuItemResponse, TruckResponse


class RankedItemResponse(ListedMenuItemResponse):
    """A menu item with how much of it the customer has ordered."""
    total_ordered: int


class FavouriteTruckResponse(TruckResponse):
    order_count: int
    total_spent: Money

    @classmethod
    def from_model(cls, truck: Truck, **extra) -> "FavouriteTruckResponse":
        base = TruckResponse.from_model(truck).model_dump()
        return cls(**base, **extra)


class HabitsResponse(BaseModel):
    favourite_items: List[RankedItemResponse]
    favourite_trucks: List[FavouriteTruckResponse]
    you_might_like: List[ListedMenuItemResponse]
    category_recommendations: List[ListedMenuItemResponse]
    favourite_category: Optional[str] = None
    has_history: bool
    message: str


class ReorderLineResponse(OrderItemResponse):
    """Past order line with the item's current availability."""
    status: MenuItemStatus

    @classmethod
    def from_model(cls, line: OrderItem) -> "ReorderLineResponse":
        base = OrderItemResponse.from_model(line).model_dump()
        return cls(**base, status=line.menu_item.status)


class LastOrderResponse(OrderResponse):
    items: List[ReorderLineResponse]


class QuickReorderResponse(BaseModel):
    last_order: Optional[LastOrderResponse] = None
    frequent_items: List[RankedItemResponse]


class HistoryStats(BaseModel):
    total_orders: int
    total_spent: Money
    avg_order_value: Money


class Pagination(BaseModel):
    page: int
    limit: int
    total_count: int
    total_pages: int


class HistoryOrderResponse(OrderResponse):
    items: List[OrderItemResponse]


class OrderHistoryResponse(BaseModel):
    stats: HistoryStats
    orders: List[HistoryOrderResponse]
    pagination: Pagination
