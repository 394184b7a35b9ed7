import pytest
from tortoise.transactions import in_transaction

from app.core.errors import Forbidden, NotFound, ValidationError
from app.models.inventory import Inventory
from app.models.notification import Notification
from app.models.truck import MenuItem, MenuItemStatus, Truck
from app.models.user import UserRole
from app.services import inventory_service


async def _stock(item):
    return (await Inventory.get(menu_item_id=item.id)).quantity


async def _status(item):
    return (await MenuItem.get(id=item.id)).status


@pytest.mark.asyncio
async def test_reserve_decrements_and_marks_sold_out(make_item):
    item = await make_item(quantity=3)

    async with in_transaction() as conn:
        inventory = await inventory_service.reserve(item.id, 3, conn)

    assert inventory.quantity == 0
    assert await _stock(item) == 0
    assert await _status(item) == MenuItemStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_reserve_clamps_at_zero(make_item):
    item = await make_item(quantity=2)

    async with in_transaction() as conn:
        await inventory_service.reserve(item.id, 5, conn)

    assert await _stock(item) == 0


@pytest.mark.asyncio
async def test_reserve_rejects_non_positive_quantity(make_item):
    item = await make_item(quantity=2)

    with pytest.raises(ValidationError):
        async with in_transaction() as conn:
            await inventory_service.reserve(item.id, 0, conn)


@pytest.mark.asyncio
async def test_release_restores_stock_and_availability(make_item):
    item = await make_item(quantity=1)
    async with in_transaction() as conn:
        await inventory_service.reserve(item.id, 1, conn)
    assert await _status(item) == MenuItemStatus.UNAVAILABLE

    async with in_transaction() as conn:
        await inventory_service.release(item.id, 4, conn)

    assert await _stock(item) == 4
    assert await _status(item) == MenuItemStatus.AVAILABLE


@pytest.mark.asyncio
async def test_reserve_without_inventory_record(truck):
    item = await MenuItem.create(truck=truck, name="Ghost", price="5.00")

    with pytest.raises(NotFound):
        async with in_transaction() as conn:
            await inventory_service.reserve(item.id, 1, conn)


@pytest.mark.asyncio
async def test_low_stock_alert_fires_once_on_crossing(make_item, owner):
    item = await make_item(quantity=5, threshold=2)

    async with in_transaction() as conn:
        await inventory_service.reserve(item.id, 2, conn)  # 5 -> 3, still above threshold
    assert await Notification.filter(user_id=owner.id, type="low_stock").count() == 0

    async with in_transaction() as conn:
        await inventory_service.reserve(item.id, 1, conn)  # 3 -> 2, crosses
    async with in_transaction() as conn:
        await inventory_service.reserve(item.id, 1, conn)  # 2 -> 1, already low

    alerts = await Notification.filter(user_id=owner.id, type="low_stock")
    assert len(alerts) == 1
    assert "Koshary Box" in alerts[0].message


@pytest.mark.asyncio
async def test_update_item_inventory_adjustment_wins(make_item, owner):
    item = await make_item(quantity=10)

    inventory = await inventory_service.update_item_inventory(owner, item.id, quantity=50, adjustment=-3)

    assert inventory.quantity == 7
    assert inventory.last_restocked is not None


@pytest.mark.asyncio
async def test_update_item_inventory_absolute_and_threshold(make_item, owner):
    item = await make_item(quantity=0)
    assert await _status(item) == MenuItemStatus.UNAVAILABLE

    inventory = await inventory_service.update_item_inventory(owner, item.id, quantity=12, low_stock_threshold=4)

    assert inventory.quantity == 12
    assert inventory.low_stock_threshold == 4
    assert await _status(item) == MenuItemStatus.AVAILABLE


@pytest.mark.asyncio
async def test_update_item_inventory_clamps_negative(make_item, owner):
    item = await make_item(quantity=3)

    inventory = await inventory_service.update_item_inventory(owner, item.id, adjustment=-10)

    assert inventory.quantity == 0
    assert await _status(item) == MenuItemStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_update_item_inventory_requires_ownership(make_item, make_user):
    item = await make_item()
    other_owner = await make_user(role=UserRole.TRUCK_OWNER)

    with pytest.raises(Forbidden):
        await inventory_service.update_item_inventory(other_owner, item.id, quantity=5)


@pytest.mark.asyncio
async def test_bulk_restock_skips_foreign_items(make_item, make_user, owner):
    mine = await make_item(name="Hawawshi", quantity=1)
    other_owner = await make_user(role=UserRole.TRUCK_OWNER)
    other_truck = await Truck.create(name="Other Truck", owner=other_owner)
    theirs = await make_item(name="Falafel", quantity=1, on_truck=other_truck)

    restocked = await inventory_service.bulk_restock(owner, [(mine.id, 30), (theirs.id, 30)])

    assert [inv.menu_item_id for inv in restocked] == [mine.id]
    assert await _stock(mine) == 30
    assert await _stock(theirs) == 1


@pytest.mark.asyncio
async def test_owner_listings(make_item, owner):
    await make_item(name="Zalabya", quantity=1, threshold=2)
    await make_item(name="Aish Baladi", quantity=40, threshold=2)

    records = await inventory_service.list_owner_inventory(owner)
    low = await inventory_service.list_low_stock(owner)

    assert [inv.menu_item.name for inv in records] == ["Aish Baladi", "Zalabya"]
    assert [inv.menu_item.name for inv in low] == ["Zalabya"]
