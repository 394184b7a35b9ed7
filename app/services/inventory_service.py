"""
Inventory ledger: per-item stock counts and low-stock thresholds.

Every mutation runs inside the caller's transaction, locks the inventory row and
re-evaluates the owning menu item's availability before returning, so
``quantity == 0`` always implies the item is unavailable.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from tortoise.transactions import in_transaction

from app.core.config import DEFAULT_LOW_STOCK_THRESHOLD
from app.core.errors import Forbidden, NotFound, ValidationError
from app.events.notification_utility import NotificationType, create_notification
from app.models.inventory import Inventory
from app.models.truck import MenuItem, MenuItemStatus, Truck
from app.models.user import User

log = logging.getLogger("inventory_service")


# ----------- Ledger primitives (transaction supplied by caller) -----------

async def lock_inventories(menu_item_ids: Iterable[UUID], conn: Any) -> Dict[UUID, Inventory]:
    """Locks the inventory rows of the given items, always in menu item id order."""
    ordered_ids = sorted(set(menu_item_ids), key=str)
    locked = await (
        Inventory.filter(menu_item_id__in=ordered_ids)
        .order_by("menu_item_id")
        .select_for_update()
        .using_db(conn)
    )
    return {inv.menu_item_id: inv for inv in locked}


async def _lock_inventory(menu_item_id: UUID, conn: Any, create: bool = False) -> Inventory:
    inventory = await Inventory.filter(menu_item_id=menu_item_id).select_for_update().using_db(conn).first()
    if inventory:
        return inventory
    if not create:
        raise NotFound(f"No inventory record for menu item {menu_item_id}.")
    return await Inventory.create(
        menu_item_id=menu_item_id,
        quantity=0,
        low_stock_threshold=DEFAULT_LOW_STOCK_THRESHOLD,
        using_db=conn,
    )


async def _sync_item_status(inventory: Inventory, conn: Any) -> None:
    """Flips the menu item to unavailable at zero stock and back once restocked."""
    if inventory.quantity == 0:
        await MenuItem.filter(id=inventory.menu_item_id, status=MenuItemStatus.AVAILABLE).using_db(conn).update(
            status=MenuItemStatus.UNAVAILABLE
        )
    else:
        await MenuItem.filter(id=inventory.menu_item_id, status=MenuItemStatus.UNAVAILABLE).using_db(conn).update(
            status=MenuItemStatus.AVAILABLE
        )


async def _store(inventory: Inventory, conn: Any, restocked: bool = False) -> Inventory:
    update_fields = ["quantity", "updated_at"]
    if restocked:
        inventory.last_restocked = datetime.now(timezone.utc)
        update_fields.append("last_restocked")
    await inventory.save(update_fields=update_fields, using_db=conn)
    await _sync_item_status(inventory, conn)
    return inventory


async def check_for_low_stock(inventory: Inventory, previous_qty: int, conn: Any) -> None:
    """Alerts the truck owner when stock crosses down to (or below) the threshold."""
    threshold = inventory.low_stock_threshold
    if not (previous_qty > threshold >= inventory.quantity):
        return

    menu_item = await MenuItem.get(id=inventory.menu_item_id).select_related("truck").using_db(conn)
    log.warning(f"Low stock for item {menu_item.name} ({inventory.menu_item_id}): {inventory.quantity} left")
    await create_notification(
        user_id=menu_item.truck.owner_id,
        type=NotificationType.LOW_STOCK,
        title="Low Stock Warning",
        message=f"'{menu_item.name}' is running low: {inventory.quantity} left (threshold {threshold}).",
        conn=conn,
    )


async def reserve(menu_item_id: UUID, quantity: int, conn: Any) -> Inventory:
    """Decrements stock for an order line. Clamps at zero instead of failing."""
    if quantity <= 0:
        raise ValidationError("Reserve quantity must be positive.")
    inventory = await _lock_inventory(menu_item_id, conn)
    previous_qty = inventory.quantity
    inventory.quantity = max(0, previous_qty - quantity)
    await _store(inventory, conn)
    await check_for_low_stock(inventory, previous_qty, conn)
    return inventory


async def release(menu_item_id: UUID, quantity: int, conn: Any) -> Inventory:
    """Returns stock to the ledger, e.g. when an order is cancelled."""
    if quantity <= 0:
        raise ValidationError("Release quantity must be positive.")
    inventory = await _lock_inventory(menu_item_id, conn)
    inventory.quantity += quantity
    return await _store(inventory, conn)


async def set_quantity(menu_item_id: UUID, quantity: int, conn: Any) -> Inventory:
    inventory = await _lock_inventory(menu_item_id, conn, create=True)
    inventory.quantity = max(0, quantity)
    return await _store(inventory, conn, restocked=True)


async def adjust(menu_item_id: UUID, delta: int, conn: Any) -> Inventory:
    inventory = await _lock_inventory(menu_item_id, conn, create=True)
    inventory.quantity = max(0, inventory.quantity + delta)
    return await _store(inventory, conn, restocked=True)


# ----------- Owner-facing operations -----------

async def _get_owned_item(owner: User, menu_item_id: UUID) -> MenuItem:
    menu_item = await MenuItem.get_or_none(id=menu_item_id).select_related("truck")
    if not menu_item:
        raise NotFound("Item not found")
    if menu_item.truck.owner_id != owner.id:
        raise Forbidden("Access denied")
    return menu_item


async def _load(inventory_ids: List[UUID]) -> List[Inventory]:
    return await Inventory.filter(id__in=inventory_ids).prefetch_related("menu_item__truck")


async def list_owner_inventory(owner: User) -> List[Inventory]:
    """All inventory for the owner's trucks, ordered by truck then item name."""
    records = await Inventory.filter(menu_item__truck__owner__id=owner.id).prefetch_related("menu_item__truck")
    return sorted(records, key=lambda inv: (inv.menu_item.truck.name, inv.menu_item.name))


async def get_truck_inventory(owner: User, truck_id: UUID) -> Tuple[Truck, List[Inventory]]:
    truck = await Truck.get_or_none(id=truck_id)
    if not truck:
        raise NotFound("Truck not found")
    if truck.owner_id != owner.id:
        raise Forbidden("Access denied")
    records = await Inventory.filter(menu_item__truck__id=truck_id).prefetch_related("menu_item__truck")
    return truck, sorted(records, key=lambda inv: inv.menu_item.name)


async def get_item_inventory(owner: User, menu_item_id: UUID) -> Inventory:
    menu_item = await _get_owned_item(owner, menu_item_id)
    inventory = await Inventory.get_or_none(menu_item_id=menu_item.id).prefetch_related("menu_item__truck")
    if not inventory:
        raise NotFound("No inventory record exists for this item")
    return inventory


async def update_item_inventory(
    owner: User,
    menu_item_id: UUID,
    quantity: Optional[int] = None,
    adjustment: Optional[int] = None,
    low_stock_threshold: Optional[int] = None,
) -> Inventory:
    """
    Owner restock. A relative ``adjustment`` wins over an absolute ``quantity``;
    the threshold can be changed on its own.
    """
    if quantity is None and adjustment is None and low_stock_threshold is None:
        raise ValidationError("Provide quantity, adjustment or low_stock_threshold.")
    menu_item = await _get_owned_item(owner, menu_item_id)

    async with in_transaction() as conn:
        if adjustment is not None:
            inventory = await adjust(menu_item.id, adjustment, conn)
        elif quantity is not None:
            inventory = await set_quantity(menu_item.id, quantity, conn)
        else:
            inventory = await _lock_inventory(menu_item.id, conn, create=True)

        if low_stock_threshold is not None:
            inventory.low_stock_threshold = max(0, low_stock_threshold)
            await inventory.save(update_fields=["low_stock_threshold", "updated_at"], using_db=conn)

    log.info(f"Inventory for item {menu_item.id} set to {inventory.quantity} by owner {owner.id}")
    return (await _load([inventory.id]))[0]


async def bulk_restock(owner: User, items: List[Tuple[UUID, int]]) -> List[Inventory]:
    """
    Sets absolute quantities for several items in one transaction.
    Items that do not exist or belong to another owner are skipped.
    """
    requested = {menu_item_id: quantity for menu_item_id, quantity in items}
    owned = await MenuItem.filter(id__in=list(requested), truck__owner__id=owner.id)
    owned_ids = sorted((m.id for m in owned), key=str)

    skipped = set(requested) - set(owned_ids)
    if skipped:
        log.info(f"Bulk restock by {owner.id} skipped {len(skipped)} item(s) not owned or missing")

    restocked_ids = []
    async with in_transaction() as conn:
        for menu_item_id in owned_ids:
            inventory = await set_quantity(menu_item_id, requested[menu_item_id], conn)
            restocked_ids.append(inventory.id)

    return await _load(restocked_ids)


async def list_low_stock(owner: User) -> List[Inventory]:
    records = await list_owner_inventory(owner)
    return sorted((inv for inv in records if inv.low_stock), key=lambda inv: inv.quantity)
