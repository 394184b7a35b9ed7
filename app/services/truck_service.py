import logging
from decimal import Decimal
from typing import List, Optional, Tuple
from uuid import UUID

from tortoise.expressions import Q
from tortoise.functions import Count, Lower
from tortoise.transactions import in_transaction

from app.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from app.core.errors import Conflict, Forbidden, NotFound, ValidationError
from app.models.inventory import Inventory
from app.models.order import OrderItem
from app.models.truck import MenuItem, MenuItemStatus, Truck, TruckOrderStatus, TruckStatus
from app.models.user import User

log = logging.getLogger("truck_service")


async def name_taken(name: str, exclude_id: Optional[UUID] = None) -> bool:
    query = Truck.annotate(name_lower=Lower("name")).filter(name_lower=name.strip().lower())
    if exclude_id:
        query = query.exclude(id=exclude_id)
    return await query.exists()


async def _get_owned_truck(owner: User, truck_id: UUID) -> Truck:
    truck = await Truck.get_or_none(id=truck_id)
    if not truck:
        raise NotFound("Truck not found")
    if truck.owner_id != owner.id:
        raise Forbidden("You can only manage your own trucks")
    return truck


# ----------- Browsing -----------

def _public_items():
    """Available items on trucks that are currently out serving."""
    return MenuItem.filter(status=MenuItemStatus.AVAILABLE, truck__truck_status=TruckStatus.AVAILABLE)


async def list_trucks() -> List[Truck]:
    return await Truck.filter(truck_status=TruckStatus.AVAILABLE).order_by("name")


async def get_truck_with_menu(truck_id: UUID) -> Tuple[Truck, List[MenuItem]]:
    """Truck details with the items that can be ordered right now."""
    truck = await Truck.get_or_none(id=truck_id)
    if not truck:
        raise NotFound("Truck not found")
    menu = await MenuItem.filter(truck_id=truck.id, status=MenuItemStatus.AVAILABLE).order_by("category", "name")
    return truck, menu


async def get_truck_menu(truck_id: UUID, category: Optional[str] = None) -> List[MenuItem]:
    """
    The whole menu of a truck, sold-out items included so customers can see
    them. Available items come first, then by category and name.
    """
    if not await Truck.filter(id=truck_id).exists():
        raise NotFound("Truck not found")
    query = MenuItem.filter(truck_id=truck_id)
    if category:
        query = query.annotate(category_lower=Lower("category")).filter(category_lower=category.strip().lower())
    items = await query.order_by("category", "name")
    return sorted(items, key=lambda item: item.status != MenuItemStatus.AVAILABLE)


async def list_categories() -> List[str]:
    return await (
        MenuItem.filter(status=MenuItemStatus.AVAILABLE)
        .distinct()
        .order_by("category")
        .values_list("category", flat=True)
    )


async def search(term: str) -> Tuple[List[Truck], List[MenuItem]]:
    """Case-insensitive match on truck names and on item name, description or category."""
    term = (term or "").strip()
    if len(term) < 2:
        raise ValidationError("Search query must be at least 2 characters")

    trucks = await Truck.filter(name__icontains=term, truck_status=TruckStatus.AVAILABLE).order_by("name")
    items = await (
        _public_items()
        .filter(Q(name__icontains=term) | Q(description__icontains=term) | Q(category__icontains=term))
        .order_by("name")
        .prefetch_related("truck")
    )
    return trucks, items


async def popular_items(limit: int = 10, exclude_ids: Optional[List[UUID]] = None) -> List[MenuItem]:
    """Most frequently ordered items across all customers, each annotated with ``order_count``."""
    query = _public_items()
    if exclude_ids:
        query = query.exclude(id__in=exclude_ids)
    return await (
        query.annotate(order_count=Count("order_items"))
        .filter(order_count__gt=0)
        .order_by("-order_count", "name")
        .limit(limit)
        .prefetch_related("truck")
    )


async def list_menu_items(
    truck_id: Optional[UUID] = None,
    category: Optional[str] = None,
    available_only: bool = False,
) -> List[MenuItem]:
    query = MenuItem.all()
    if truck_id:
        query = query.filter(truck_id=truck_id)
    if category:
        query = query.annotate(category_lower=Lower("category")).filter(category_lower=category.strip().lower())
    if available_only:
        query = query.filter(status=MenuItemStatus.AVAILABLE)
    return await query.order_by("name").prefetch_related("truck")


async def get_menu_item(menu_item_id: UUID) -> Tuple[MenuItem, Optional[Inventory]]:
    menu_item = await MenuItem.get_or_none(id=menu_item_id).prefetch_related("truck")
    if not menu_item:
        raise NotFound("Menu item not found")
    inventory = await Inventory.get_or_none(menu_item_id=menu_item.id)
    return menu_item, inventory


# ----------- Owner management -----------

async def list_owner_trucks(owner: User) -> List[Truck]:
    return await Truck.filter(owner_id=owner.id).order_by("name")


async def set_order_status(owner: User, truck_id: UUID, order_status: TruckOrderStatus) -> Truck:
    """Opens or closes a truck for new orders."""
    truck = await _get_owned_truck(owner, truck_id)
    truck.order_status = order_status
    await truck.save(update_fields=["order_status"])
    return truck


async def update_truck(
    owner: User,
    truck_id: UUID,
    name: Optional[str] = None,
    logo: Optional[str] = None,
    truck_status: Optional[TruckStatus] = None,
) -> Truck:
    truck = await _get_owned_truck(owner, truck_id)
    update_fields = []
    if name is not None:
        if not name.strip():
            raise ValidationError("Truck name is required")
        if await name_taken(name, exclude_id=truck.id):
            raise Conflict("Truck name already exists")
        truck.name = name.strip()
        update_fields.append("name")
    if logo is not None:
        truck.logo = logo
        update_fields.append("logo")
    if truck_status is not None:
        truck.truck_status = truck_status
        update_fields.append("truck_status")
    if not update_fields:
        raise ValidationError("No data provided")
    await truck.save(update_fields=update_fields)
    return truck


async def create_menu_item(
    owner: User,
    truck_id: UUID,
    name: str,
    price: Decimal,
    category: str = "main",
    description: Optional[str] = None,
    initial_quantity: int = 0,
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
) -> Tuple[MenuItem, Inventory]:
    """Adds an item to the owner's truck together with its inventory record."""
    truck = await _get_owned_truck(owner, truck_id)
    if price <= 0:
        raise ValidationError("Price must be positive")

    quantity = max(0, initial_quantity)
    async with in_transaction() as conn:
        menu_item = await MenuItem.create(
            truck=truck,
            name=name.strip(),
            description=description,
            price=price,
            category=category.strip() or "main",
            status=MenuItemStatus.AVAILABLE if quantity > 0 else MenuItemStatus.UNAVAILABLE,
            using_db=conn
        )
        inventory = await Inventory.create(
            menu_item=menu_item,
            quantity=quantity,
            low_stock_threshold=max(0, low_stock_threshold),
            using_db=conn
        )
    log.info(f"Menu item {menu_item.id} added to truck {truck.id} with {quantity} in stock")
    return menu_item, inventory


async def update_menu_item(
    owner: User,
    menu_item_id: UUID,
    name: Optional[str] = None,
    description: Optional[str] = None,
    price: Optional[Decimal] = None,
    category: Optional[str] = None,
    status: Optional[MenuItemStatus] = None,
) -> MenuItem:
    """Edits an item. Price changes do not affect lines already in carts."""
    menu_item = await MenuItem.get_or_none(id=menu_item_id).prefetch_related("truck")
    if not menu_item:
        raise NotFound("Menu item not found")
    if menu_item.truck.owner_id != owner.id:
        raise Forbidden("You can only update items on your own trucks")

    update_fields = []
    if name is not None:
        menu_item.name = name.strip()
        update_fields.append("name")
    if description is not None:
        menu_item.description = description
        update_fields.append("description")
    if price is not None:
        if price <= 0:
            raise ValidationError("Price must be positive")
        menu_item.price = price
        update_fields.append("price")
    if category is not None:
        menu_item.category = category.strip()
        update_fields.append("category")
    if status is not None:
        if status == MenuItemStatus.AVAILABLE:
            inventory = await Inventory.get_or_none(menu_item_id=menu_item.id)
            if not inventory or inventory.quantity == 0:
                raise ValidationError("Cannot make an item available while it is out of stock")
        menu_item.status = status
        update_fields.append("status")
    if not update_fields:
        raise ValidationError("No data provided")
    # Status is only written when asked for; the ledger owns stock-driven flips
    await menu_item.save(update_fields=update_fields)
    return menu_item


async def delete_menu_item(owner: User, menu_item_id: UUID) -> None:
    menu_item = await MenuItem.get_or_none(id=menu_item_id).prefetch_related("truck")
    if not menu_item:
        raise NotFound("Menu item not found")
    if menu_item.truck.owner_id != owner.id:
        raise Forbidden("You can only delete items on your own trucks")
    if await OrderItem.filter(menu_item_id=menu_item.id).exists():
        raise Conflict("Item appears in existing orders; mark it unavailable instead")
    await menu_item.delete()
