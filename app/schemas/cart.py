import uuid
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, Field

from app.models.cart import CartItem
from app.schemas.response import Money


class CartAddRequest(BaseModel):
    menu_item_id: uuid.UUID
    quantity: int = Field(1, ge=1)


class CartUpdateRequest(BaseModel):
    quantity: int = Field(..., ge=1, description="New quantity (minimum 1).")


class CartItemResponse(BaseModel):
    id: uuid.UUID
    menu_item_id: uuid.UUID
    name: str
    category: str
    truck_id: uuid.UUID
    truck_name: str
    quantity: int
    price: Money
    line_total: Money

    @classmethod
    def from_model(cls, cart_item: CartItem) -> "CartItemResponse":
        item = cart_item.menu_item
        return cls(
            id=cart_item.id,
            menu_item_id=item.id,
            name=item.name,
            category=item.category,
            truck_id=item.truck.id,
            truck_name=item.truck.name,
            quantity=cart_item.quantity,
            price=cart_item.price,
            line_total=cart_item.price * cart_item.quantity,
        )


class CartTruckGroup(BaseModel):
    truck_id: uuid.UUID
    truck_name: str
    items: List[CartItemResponse]
    subtotal: Money


class CartResponse(BaseModel):
    items: List[CartItemResponse]
    grouped_by_truck: List[CartTruckGroup]
    total_items: int
    total_quantity: int
    total_price: Money

    @classmethod
    def from_items(cls, cart_items: List[CartItem]) -> "CartResponse":
        """Builds the cart view, grouping lines by truck in first-seen order."""
        lines = [CartItemResponse.from_model(ci) for ci in cart_items]
        groups: Dict[uuid.UUID, CartTruckGroup] = {}
        for line in lines:
            group = groups.get(line.truck_id)
            if group is None:
                group = groups[line.truck_id] = CartTruckGroup(
                    truck_id=line.truck_id, truck_name=line.truck_name, items=[], subtotal=Decimal("0")
                )
            group.items.append(line)
            group.subtotal += line.line_total
        return cls(
            items=lines,
            grouped_by_truck=list(groups.values()),
            total_items=len(lines),
            total_quantity=sum(line.quantity for line in lines),
            total_price=sum((line.line_total for line in lines), Decimal("0")),
        )
