import uuid
from unittest.mock import MagicMock, patch

import pytest

from app.core.errors import NotFound, ValidationError
from app.models.truck import MenuItem, MenuItemStatus, Truck, TruckStatus
from app.services import cart_service, inventory_service, order_service, truck_service


class _StaleRead:
    """Awaitable query result holding a row that was loaded before a concurrent write."""

    def __init__(self, obj):
        self.obj = obj

    def prefetch_related(self, *args):
        return self

    def __await__(self):
        async def _resolve():
            return self.obj
        return _resolve().__await__()


async def _order(customer, item, quantity=1):
    await cart_service.add_or_increment(customer, item.id, quantity)
    return await order_service.checkout(customer, item.truck_id)


# --- public browsing ---

@pytest.mark.asyncio
async def test_list_trucks_hides_trucks_that_are_not_serving(owner, truck):
    parked = await Truck.create(name="Parked Truck", owner=owner, truck_status=TruckStatus.UNAVAILABLE)

    trucks = await truck_service.list_trucks()

    assert [t.id for t in trucks] == [truck.id]
    assert parked.id not in [t.id for t in trucks]


@pytest.mark.asyncio
async def test_truck_detail_menu_only_lists_available_items(truck, make_item):
    box = await make_item(name="Koshary Box", quantity=5)
    await make_item(name="Sold Out Soup", quantity=0)

    found, menu = await truck_service.get_truck_with_menu(truck.id)

    assert found.id == truck.id
    assert [item.id for item in menu] == [box.id]


@pytest.mark.asyncio
async def test_truck_menu_lists_sold_out_items_last(truck, make_item):
    await make_item(name="Apple Pie", quantity=0, category="dessert")
    await make_item(name="Zucchini Wrap", quantity=3, category="main")
    await make_item(name="Baklava", quantity=2, category="dessert")

    menu = await truck_service.get_truck_menu(truck.id)
    assert [item.name for item in menu] == ["Baklava", "Zucchini Wrap", "Apple Pie"]

    desserts = await truck_service.get_truck_menu(truck.id, category="DESSERT")
    assert [item.name for item in desserts] == ["Baklava", "Apple Pie"]


@pytest.mark.asyncio
async def test_truck_menu_unknown_truck(db):
    with pytest.raises(NotFound):
        await truck_service.get_truck_menu(uuid.uuid4())


@pytest.mark.asyncio
async def test_list_categories_is_distinct_and_skips_unavailable(make_item):
    await make_item(name="Koshary Box", category="main")
    await make_item(name="Falafel Wrap", category="main")
    await make_item(name="Mango Juice", category="drinks")
    await make_item(name="Om Ali", quantity=0, category="dessert")

    assert await truck_service.list_categories() == ["drinks", "main"]


@pytest.mark.asyncio
async def test_search_matches_trucks_and_items(owner, truck, make_item):
    wrap = await make_item(name="Falafel Wrap")
    juice = await make_item(name="Mango Juice", category="drinks")
    juice.description = "Fresh pressed, with a hint of lime"
    await juice.save()
    await make_item(name="Lime Sorbet", quantity=0, category="dessert")

    trucks, items = await truck_service.search("  KOSHARY ")
    assert [t.id for t in trucks] == [truck.id]
    assert items == []

    trucks, items = await truck_service.search("lime")
    assert trucks == []
    assert [item.id for item in items] == [juice.id]
    assert items[0].truck.name == "Koshary Express"

    _, items = await truck_service.search("wrap")
    assert [item.id for item in items] == [wrap.id]


@pytest.mark.asyncio
async def test_search_skips_items_of_parked_trucks(owner, make_item):
    parked = await Truck.create(name="Parked Truck", owner=owner, truck_status=TruckStatus.UNAVAILABLE)
    await make_item(name="Hidden Wrap", on_truck=parked)

    trucks, items = await truck_service.search("wrap")

    assert trucks == []
    assert items == []


@pytest.mark.asyncio
async def test_search_requires_two_characters(db):
    with pytest.raises(ValidationError):
        await truck_service.search("a")
    with pytest.raises(ValidationError):
        await truck_service.search("   ")


@pytest.mark.asyncio
async def test_popular_items_ranked_by_order_count(customer, make_user, make_item):
    box = await make_item(name="Koshary Box", quantity=20)
    wrap = await make_item(name="Falafel Wrap", quantity=20)
    await make_item(name="Never Ordered", quantity=20)
    other = await make_user()

    await _order(customer, box)
    await _order(other, box)
    await _order(customer, wrap, quantity=5)

    popular = await truck_service.popular_items()

    assert [(item.id, item.order_count) for item in popular] == [(box.id, 2), (wrap.id, 1)]

    popular = await truck_service.popular_items(exclude_ids=[box.id])
    assert [item.id for item in popular] == [wrap.id]


# --- owner menu edits ---

@pytest.mark.asyncio
async def test_update_menu_item_leaves_status_alone_on_stale_read(owner, make_item):
    item = await make_item(quantity=3)
    stale = await MenuItem.get(id=item.id).prefetch_related("truck")
    assert stale.status == MenuItemStatus.AVAILABLE

    # Stock runs out after the owner's edit form was loaded
    await inventory_service.update_item_inventory(owner, item.id, quantity=0)
    assert (await MenuItem.get(id=item.id)).status == MenuItemStatus.UNAVAILABLE

    with patch.object(MenuItem, "get_or_none", MagicMock(return_value=_StaleRead(stale))):
        await truck_service.update_menu_item(owner, item.id, name="Renamed Box")

    fresh = await MenuItem.get(id=item.id)
    assert fresh.name == "Renamed Box"
    assert fresh.status == MenuItemStatus.UNAVAILABLE


@pytest.mark.asyncio
async def test_update_menu_item_requires_data(owner, make_item):
    item = await make_item()

    with pytest.raises(ValidationError):
        await truck_service.update_menu_item(owner, item.id)


@pytest.mark.asyncio
async def test_cannot_mark_sold_out_item_available(owner, make_item):
    item = await make_item(quantity=0)

    with pytest.raises(ValidationError):
        await truck_service.update_menu_item(owner, item.id, status=MenuItemStatus.AVAILABLE)
