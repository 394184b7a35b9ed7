# scripts/seed_data.py
import asyncio
from decimal import Decimal

from app.core.db import close_db, init_db
from app.core.security import hash_password
from app.models.inventory import Inventory
from app.models.truck import MenuItem, MenuItemStatus, Truck
from app.models.user import User, UserRole

DEMO_PASSWORD = "password123"

MENU = [
    # (name, category, price, quantity)
    ("Koshary Box", "main", "65.00", 40),
    ("Hawawshi", "main", "55.00", 25),
    ("Feteer Meshaltet", "dessert", "45.00", 15),
    ("Sugarcane Juice", "drinks", "20.00", 60),
]


async def _user(email: str, name: str, role: UserRole) -> User:
    user, created = await User.get_or_create(
        email=email,
        defaults={"name": name, "password_hash": hash_password(DEMO_PASSWORD), "role": role},
    )
    print(f"{role.value}: {user.email} ({'created' if created else 'exists'})")
    return user


async def seed():
    await _user("admin@example.com", "Admin", UserRole.ADMIN)
    owner = await _user("owner@example.com", "Truck Owner", UserRole.TRUCK_OWNER)
    await _user("customer@example.com", "Demo Customer", UserRole.CUSTOMER)

    truck, _ = await Truck.get_or_create(name="Demo Truck", defaults={"owner": owner})
    print("Truck:", truck.id)

    for name, category, price, quantity in MENU:
        item, _ = await MenuItem.get_or_create(
            truck=truck,
            name=name,
            defaults={"category": category, "price": Decimal(price), "status": MenuItemStatus.AVAILABLE},
        )
        inventory, _ = await Inventory.get_or_create(menu_item=item, defaults={"quantity": quantity})
        # Reset stock on re-runs
        inventory.quantity = quantity
        await inventory.save()
        if item.status != MenuItemStatus.AVAILABLE:
            item.status = MenuItemStatus.AVAILABLE
            await item.save(update_fields=["status"])
        print(f"Menu item: {item.name} {item.id} stock={quantity}")

    print("Seed complete.")


async def main():
    await init_db()
    await seed()
    await close_db()

if __name__ == "__main__":
    asyncio.run(main())
