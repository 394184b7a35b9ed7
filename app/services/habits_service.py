"""
Per-customer ordering habits. Everything here is read-only and derived from
past orders; cancelled orders never count towards a habit.
"""
import logging
import math
from collections import Counter
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from tortoise.functions import Count, Sum

from app.core.errors import ValidationError
from app.models.order import Order, OrderItem, OrderStatus
from app.models.truck import MenuItem, MenuItemStatus, Truck, TruckStatus
from app.models.user import User
from app.services import truck_service

log = logging.getLogger("habits_service")

CENT = Decimal("0.01")


def _money(value: Any) -> Decimal:
    # SQLite hands back aggregated decimals as floats
    return Decimal(str(value or 0)).quantize(CENT)


def _user_lines(user: User):
    return OrderItem.filter(order__user__id=user.id, order__status__not=OrderStatus.CANCELLED)


async def _ranked_items(query, limit: int) -> List[Tuple[MenuItem, Dict[str, int]]]:
    """Groups order lines by menu item, most units first, and loads the items."""
    rows = await (
        query.annotate(total_ordered=Sum("quantity"), order_count=Count("id"))
        .group_by("menu_item_id")
        .order_by("-total_ordered")
        .limit(limit)
        .values("menu_item_id", "total_ordered", "order_count")
    )
    items = await MenuItem.filter(id__in=[row["menu_item_id"] for row in rows]).prefetch_related("truck")
    by_id = {item.id: item for item in items}
    return [
        (by_id[row["menu_item_id"]], {"total_ordered": int(row["total_ordered"]), "order_count": int(row["order_count"])})
        for row in rows
        if row["menu_item_id"] in by_id
    ]


async def top_items(user: User, limit: int = 10) -> List[Tuple[MenuItem, Dict[str, int]]]:
    if limit < 1:
        raise ValidationError("Limit must be at least 1")
    return await _ranked_items(_user_lines(user), limit)


async def favourite_items(user: User, limit: int = 5) -> List[Tuple[MenuItem, Dict[str, int]]]:
    """Most ordered items that are still on sale."""
    return await _ranked_items(_user_lines(user).filter(menu_item__status=MenuItemStatus.AVAILABLE), limit)


async def favourite_trucks(user: User, limit: int = 3) -> List[Tuple[Truck, Dict[str, Any]]]:
    rows = await (
        Order.filter(user_id=user.id, status__not=OrderStatus.CANCELLED)
        .annotate(order_count=Count("id"), total_spent=Sum("total_price"))
        .group_by("truck_id")
        .order_by("-order_count")
        .limit(limit)
        .values("truck_id", "order_count", "total_spent")
    )
    trucks = {truck.id: truck for truck in await Truck.filter(id__in=[row["truck_id"] for row in rows])}
    return [
        (trucks[row["truck_id"]], {"order_count": int(row["order_count"]), "total_spent": _money(row["total_spent"])})
        for row in rows
        if row["truck_id"] in trucks
    ]


async def favourite_category(user: User) -> Optional[str]:
    categories = await _user_lines(user).values_list("menu_item__category", flat=True)
    if not categories:
        return None
    return Counter(categories).most_common(1)[0][0]


async def category_recommendations(category: str, exclude_ids: List[Any], limit: int = 3) -> List[MenuItem]:
    """Items from a category the customer likes that they have not tried yet."""
    query = MenuItem.filter(
        category=category,
        status=MenuItemStatus.AVAILABLE,
        truck__truck_status=TruckStatus.AVAILABLE,
    )
    if exclude_ids:
        query = query.exclude(id__in=exclude_ids)
    return await query.order_by("name").limit(limit).prefetch_related("truck")


async def get_habits(user: User) -> Dict[str, Any]:
    favourites = await favourite_items(user)
    ordered_ids = [item.id for item, _ in favourites]
    category = await favourite_category(user)

    you_might_like = await truck_service.popular_items(limit=5, exclude_ids=ordered_ids)
    recommendations = await category_recommendations(category, ordered_ids) if category else []

    log.info(f"Habits computed for user {user.id}: {len(favourites)} favourites")
    return {
        "favourite_items": favourites,
        "favourite_trucks": await favourite_trucks(user),
        "you_might_like": you_might_like,
        "category_recommendations": recommendations,
        "favourite_category": category,
        "has_history": bool(favourites),
    }


async def quick_reorder(user: User) -> Tuple[Optional[Order], List[Tuple[MenuItem, Dict[str, int]]]]:
    """The latest non-cancelled order with its lines, plus the three most ordered items."""
    last_order = await (
        Order.filter(user_id=user.id, status__not=OrderStatus.CANCELLED)
        .order_by("-created_at")
        .prefetch_related("truck", "items__menu_item")
        .first()
    )
    return last_order, await top_items(user, limit=3)


async def order_history(user: User, page: int = 1, limit: int = 10) -> Dict[str, Any]:
    if page < 1 or limit < 1:
        raise ValidationError("Page and limit must be at least 1")

    totals = await Order.filter(
        user_id=user.id, status__not=OrderStatus.CANCELLED
    ).values_list("total_price", flat=True)
    total_spent = sum((_money(t) for t in totals), Decimal("0"))
    avg_order_value = (total_spent / len(totals)).quantize(CENT) if totals else Decimal("0")

    total_count = await Order.filter(user_id=user.id).count()
    orders = await (
        Order.filter(user_id=user.id)
        .order_by("-created_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("truck", "items__menu_item")
    )
    return {
        "stats": {
            "total_orders": len(totals),
            "total_spent": total_spent.quantize(CENT),
            "avg_order_value": avg_order_value,
        },
        "orders": orders,
        "pagination": {
            "page": page,
            "limit": limit,
            "total_count": total_count,
            "total_pages": math.ceil(total_count / limit),
        },
    }
