import pytest

from app.core.errors import NotFound
from app.events.notification_utility import NotificationType, create_notification
from app.services import notification_service


async def _notify(user, title="Hello"):
    return await create_notification(
        user_id=user.id, type=NotificationType.ORDER_UPDATE, title=title, message=f"{title} message"
    )


@pytest.mark.asyncio
async def test_list_and_unread_count(customer):
    await _notify(customer, "First")
    second = await _notify(customer, "Second")
    await notification_service.mark_read(customer, second.id)

    notifications, unread = await notification_service.list_notifications(customer)
    only_unread, _ = await notification_service.list_notifications(customer, unread_only=True)

    assert len(notifications) == 2
    assert unread == 1
    assert [n.title for n in only_unread] == ["First"]
    assert await notification_service.unread_count(customer) == 1


@pytest.mark.asyncio
async def test_mark_read_twice_succeeds(customer):
    note = await _notify(customer)

    first = await notification_service.mark_read(customer, note.id)
    second = await notification_service.mark_read(customer, note.id)

    assert first.is_read and second.is_read


@pytest.mark.asyncio
async def test_notifications_are_private(customer, owner):
    note = await _notify(customer)

    with pytest.raises(NotFound):
        await notification_service.get_notification(owner, note.id)
    with pytest.raises(NotFound):
        await notification_service.mark_read(owner, note.id)
    with pytest.raises(NotFound):
        await notification_service.delete_notification(owner, note.id)


@pytest.mark.asyncio
async def test_mark_all_and_delete(customer):
    await _notify(customer, "A")
    await _notify(customer, "B")
    unread = await _notify(customer, "C")

    # Only read notifications go by default
    assert await notification_service.delete_notifications(customer) == 0
    assert await notification_service.mark_all_read(customer) == 3
    await notification_service.delete_notification(customer, unread.id)
    assert await notification_service.delete_notifications(customer) == 2

    await _notify(customer, "D")
    assert await notification_service.delete_notifications(customer, include_unread=True) == 1
