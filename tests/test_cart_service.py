import asyncio
from decimal import Decimal

import pytest

from app.core.errors import InsufficientStock, ItemUnavailable, NotFound, ValidationError
from app.models.cart import CartItem
from app.models.inventory import Inventory
from app.models.truck import MenuItemStatus, Truck
from app.services import cart_service


@pytest.mark.asyncio
async def test_add_creates_line_with_captured_price(customer, make_item):
    item = await make_item(price="12.50", quantity=5)

    line, created = await cart_service.add_or_increment(customer, item.id, 2)

    assert created is True
    assert line.quantity == 2
    assert line.price == Decimal("12.50")
    assert line.menu_item.truck.name == "Koshary Express"


@pytest.mark.asyncio
async def test_add_twice_sums_into_one_line(customer, make_item):
    item = await make_item(quantity=10)

    await cart_service.add_or_increment(customer, item.id, 2)
    line, created = await cart_service.add_or_increment(customer, item.id, 3)

    assert created is False
    assert line.quantity == 5
    assert await CartItem.filter(user_id=customer.id).count() == 1


@pytest.mark.asyncio
async def test_concurrent_adds_both_count(customer, make_item):
    item = await make_item(quantity=10)
    await cart_service.add_or_increment(customer, item.id, 1)

    await asyncio.gather(
        cart_service.add_or_increment(customer, item.id, 2),
        cart_service.add_or_increment(customer, item.id, 3),
    )

    line = await CartItem.get(user_id=customer.id, menu_item_id=item.id)
    assert line.quantity == 6


@pytest.mark.asyncio
async def test_add_does_not_touch_inventory(customer, make_item):
    item = await make_item(quantity=4)

    await cart_service.add_or_increment(customer, item.id, 4)

    assert (await Inventory.get(menu_item_id=item.id)).quantity == 4


@pytest.mark.asyncio
async def test_price_change_does_not_reprice_existing_line(customer, make_item):
    item = await make_item(price="10.00")
    await cart_service.add_or_increment(customer, item.id, 1)

    item.price = Decimal("15.00")
    await item.save()
    line, _ = await cart_service.add_or_increment(customer, item.id, 1)

    assert line.price == Decimal("10.00")


@pytest.mark.asyncio
async def test_add_rejections(customer, make_item):
    item = await make_item(quantity=3)
    sold_out = await make_item(name="Sold Out", quantity=0)

    with pytest.raises(ValidationError):
        await cart_service.add_or_increment(customer, item.id, 0)
    with pytest.raises(InsufficientStock):
        await cart_service.add_or_increment(customer, item.id, 4)
    with pytest.raises(ItemUnavailable):
        await cart_service.add_or_increment(customer, sold_out.id, 1)


@pytest.mark.asyncio
async def test_add_unknown_item(customer, make_item):
    item = await make_item()
    await item.delete()

    with pytest.raises(NotFound):
        await cart_service.add_or_increment(customer, item.id, 1)


@pytest.mark.asyncio
async def test_unavailable_item_with_stock_is_rejected(customer, make_item):
    item = await make_item(quantity=5)
    item.status = MenuItemStatus.UNAVAILABLE
    await item.save()

    with pytest.raises(ItemUnavailable):
        await cart_service.add_or_increment(customer, item.id, 1)


@pytest.mark.asyncio
async def test_set_quantity(customer, make_item):
    item = await make_item(quantity=5)
    line, _ = await cart_service.add_or_increment(customer, item.id, 1)

    updated = await cart_service.set_quantity(customer, line.id, 4)
    assert updated.quantity == 4

    with pytest.raises(ValidationError):
        await cart_service.set_quantity(customer, line.id, 0)
    with pytest.raises(InsufficientStock):
        await cart_service.set_quantity(customer, line.id, 6)


@pytest.mark.asyncio
async def test_lines_are_private_to_their_owner(customer, make_user, make_item):
    item = await make_item()
    line, _ = await cart_service.add_or_increment(customer, item.id, 1)
    stranger = await make_user()

    with pytest.raises(NotFound):
        await cart_service.set_quantity(stranger, line.id, 2)
    with pytest.raises(NotFound):
        await cart_service.remove(stranger, line.id)


@pytest.mark.asyncio
async def test_remove_and_clear(customer, owner, make_item):
    first = await make_item(name="A")
    other_truck = await Truck.create(name="Feteer Wagon", owner=owner)
    second = await make_item(name="B", on_truck=other_truck)
    line, _ = await cart_service.add_or_increment(customer, first.id, 1)
    await cart_service.add_or_increment(customer, second.id, 1)

    await cart_service.remove(customer, line.id)
    remaining = await cart_service.list_for_user(customer)
    assert [ci.menu_item.name for ci in remaining] == ["B"]

    assert await cart_service.clear(customer) == 1
    assert await cart_service.list_for_user(customer) == []
