from typing import Dict, List, Optional
from uuid import UUID

from app.core.errors import Conflict, NotFound, ValidationError
from app.models.order import Order
from app.models.truck import Truck
from app.models.user import User, UserRole
from app.services.truck_service import name_taken


async def get_stats() -> Dict[str, int]:
    return {
        "total_users": await User.all().count(),
        "total_trucks": await Truck.all().count(),
        "total_orders": await Order.all().count(),
    }


async def list_users() -> List[User]:
    return await User.all().order_by("-created_at")


async def set_user_role(user_id: UUID, role: UserRole) -> User:
    user = await User.get_or_none(id=user_id)
    if not user:
        raise NotFound("User not found")
    user.role = role
    await user.save(update_fields=["role"])
    return user


async def list_trucks() -> List[Truck]:
    return await Truck.all().order_by("-created_at").prefetch_related("owner")


async def create_truck(name: str, owner_id: UUID, logo: Optional[str] = None) -> Truck:
    """Creates a truck for an owner; a customer assigned a truck becomes a truck owner."""
    if not name.strip():
        raise ValidationError("Truck name is required")
    owner = await User.get_or_none(id=owner_id)
    if not owner:
        raise NotFound("Owner not found")
    if await name_taken(name):
        raise Conflict("Truck name already exists")

    if owner.role == UserRole.CUSTOMER:
        owner.role = UserRole.TRUCK_OWNER
        await owner.save(update_fields=["role"])

    truck = await Truck.create(name=name.strip(), owner=owner, logo=logo)
    await truck.fetch_related("owner")
    return truck


async def delete_truck(truck_id: UUID) -> None:
    deleted = await Truck.filter(id=truck_id).delete()
    if not deleted:
        raise NotFound("Truck not found")
