"""
Cart store. Cart lines are not reservations: stock is checked here and again at
checkout, and nothing in this module writes to the inventory ledger.
"""
import logging
from typing import Any, List, Tuple
from uuid import UUID

from tortoise.exceptions import IntegrityError
from tortoise.expressions import F

from app.core.errors import Conflict, InsufficientStock, ItemUnavailable, NotFound, ValidationError
from app.models.cart import CartItem
from app.models.inventory import Inventory
from app.models.truck import MenuItem, MenuItemStatus
from app.models.user import User

log = logging.getLogger("cart_service")


async def _available_qty(menu_item_id: UUID) -> int:
    inventory = await Inventory.get_or_none(menu_item_id=menu_item_id)
    return inventory.quantity if inventory else 0


async def _load(cart_item_id: UUID) -> CartItem:
    return await CartItem.get(id=cart_item_id).prefetch_related("menu_item__truck")


async def add_or_increment(user: User, menu_item_id: UUID, quantity: int = 1) -> Tuple[CartItem, bool]:
    """
    Adds ``quantity`` of an item to the user's cart, summing into an existing line.
    Returns the line and whether it was newly created.
    """
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1.")

    menu_item = await MenuItem.get_or_none(id=menu_item_id)
    if not menu_item:
        raise NotFound("Menu item not found")
    if menu_item.status != MenuItemStatus.AVAILABLE:
        raise ItemUnavailable(f"'{menu_item.name}' is not available")
    if quantity > await _available_qty(menu_item.id):
        raise InsufficientStock(f"Not enough '{menu_item.name}' in stock")

    existing = await CartItem.get_or_none(user_id=user.id, menu_item_id=menu_item.id)
    if existing:
        # Atomic increment
        await CartItem.filter(id=existing.id).update(quantity=F("quantity") + quantity)
        return await _load(existing.id), False

    try:
        cart_item = await CartItem.create(
            user_id=user.id,
            menu_item_id=menu_item.id,
            quantity=quantity,
            price=menu_item.price, # Frozen until checkout
        )
    except IntegrityError:
        raise Conflict("Cart was modified concurrently, please retry.")
    log.info(f"User {user.id} added {quantity} x {menu_item.id} to cart")
    return await _load(cart_item.id), True


async def set_quantity(user: User, cart_item_id: UUID, quantity: int) -> CartItem:
    if quantity < 1:
        raise ValidationError("Valid quantity is required (minimum 1)")

    cart_item = await CartItem.get_or_none(id=cart_item_id, user_id=user.id)
    if not cart_item:
        raise NotFound("Cart item not found")
    if quantity > await _available_qty(cart_item.menu_item_id):
        raise InsufficientStock("Not enough items in stock")

    cart_item.quantity = quantity
    await cart_item.save(update_fields=["quantity"])
    return await _load(cart_item.id)


async def remove(user: User, cart_item_id: UUID) -> None:
    deleted = await CartItem.filter(id=cart_item_id, user_id=user.id).delete()
    if not deleted:
        raise NotFound("Cart item not found")


async def list_for_user(user: User) -> List[CartItem]:
    return await CartItem.filter(user_id=user.id).order_by("created_at").prefetch_related("menu_item__truck")


async def clear(user: User) -> int:
    return await CartItem.filter(user_id=user.id).delete()


async def clear_consumed(user: User, menu_item_ids: List[UUID], conn: Any) -> int:
    """Deletes only the given lines; lines for other trucks stay in the cart."""
    return await CartItem.filter(user_id=user.id, menu_item_id__in=menu_item_ids).using_db(conn).delete()
