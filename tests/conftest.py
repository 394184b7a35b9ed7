import itertools
from decimal import Decimal

import httpx
import pytest
import pytest_asyncio

from app.core.db import close_db, init_db
from app.core.security import hash_password
from app.main import app
from app.models.inventory import Inventory
from app.models.truck import MenuItem, MenuItemStatus, Truck
from app.models.user import User, UserRole
from app.services import auth_service

PASSWORD = "secret-pass"


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database per test."""
    await init_db("sqlite://:memory:")
    yield
    await close_db()


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    async def factory(role=UserRole.CUSTOMER, name=None, email=None):
        n = next(counter)
        return await User.create(
            name=name or f"User {n}",
            email=email or f"user{n}@example.com",
            password_hash=hash_password(PASSWORD),
            role=role,
        )
    return factory


@pytest_asyncio.fixture
async def owner(make_user):
    return await make_user(role=UserRole.TRUCK_OWNER, name="Owner", email="owner@example.com")


@pytest_asyncio.fixture
async def customer(make_user):
    return await make_user(name="Customer", email="customer@example.com")


@pytest_asyncio.fixture
async def truck(owner):
    return await Truck.create(name="Koshary Express", owner=owner)


@pytest.fixture
def make_item(truck):
    async def factory(name="Koshary Box", price="10.00", quantity=10, threshold=2, on_truck=None, category="main"):
        item = await MenuItem.create(
            truck=on_truck or truck,
            name=name,
            category=category,
            price=Decimal(price),
            status=MenuItemStatus.AVAILABLE if quantity > 0 else MenuItemStatus.UNAVAILABLE,
        )
        await Inventory.create(menu_item=item, quantity=quantity, low_stock_threshold=threshold)
        return item
    return factory


@pytest_asyncio.fixture
async def client(db):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(db):
    async def factory(user):
        _, session = await auth_service.login(user.email, PASSWORD)
        return {"Authorization": f"Bearer {session.token}"}
    return factory
