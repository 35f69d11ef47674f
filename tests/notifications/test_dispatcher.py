import pytest

from application.services.notification_service import NotificationDispatcher
from domain.common.exceptions import NotificationForbiddenException, NotificationNotFoundException
from domain.notification import templates
from domain.notification.entity import NotificationType
from infrastructure.repositories.notification_repository import InMemoryNotificationRepository


@pytest.fixture
def dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(InMemoryNotificationRepository())


async def _seed(dispatcher, user_id="u1", count=3):
    return [
        await dispatcher.notify(user_id, NotificationType.SYSTEM, f"t{i}", f"m{i}")
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_list_is_newest_first_and_limited(dispatcher):
    created = await _seed(dispatcher, count=5)
    listed = await dispatcher.list("u1", limit=3)
    assert [n.id for n in listed] == [n.id for n in reversed(created)][:3]
    assert await dispatcher.list("someone-else") == []


@pytest.mark.asyncio
async def test_mark_all_read_reports_count_then_nothing_unread(dispatcher):
    await _seed(dispatcher, count=4)
    await _seed(dispatcher, user_id="u2", count=2)

    assert await dispatcher.unread_count("u1") == 4
    assert await dispatcher.mark_all_read("u1") == 4
    assert await dispatcher.unread_count("u1") == 0
    assert await dispatcher.mark_all_read("u1") == 0
    assert await dispatcher.unread_count("u2") == 2


@pytest.mark.asyncio
async def test_mark_read_single(dispatcher):
    first, second = await _seed(dispatcher, count=2)
    updated = await dispatcher.mark_read(first.id, user_id="u1")
    assert updated.read
    assert await dispatcher.unread_count("u1") == 1


@pytest.mark.asyncio
async def test_mark_read_checks_ownership(dispatcher):
    (notification,) = await _seed(dispatcher, count=1)
    with pytest.raises(NotificationForbiddenException):
        await dispatcher.mark_read(notification.id, user_id="intruder")
    with pytest.raises(NotificationNotFoundException):
        await dispatcher.mark_read("notif_missing", user_id="u1")


@pytest.mark.asyncio
async def test_delete_only_own_notifications(dispatcher):
    (notification,) = await _seed(dispatcher, count=1)
    assert not await dispatcher.delete(notification.id, user_id="intruder")
    assert await dispatcher.delete(notification.id, user_id="u1")
    assert await dispatcher.list("u1") == []
    assert not await dispatcher.delete(notification.id)


@pytest.mark.asyncio
async def test_notify_template_merges_extra_data(dispatcher):
    template = templates.order_shipped("ORD-000000000001", "TRK1")
    saved = await dispatcher.notify_template("u1", template, extra={"orderId": "ord_1"})
    assert saved.type is NotificationType.ORDER_SHIPPED
    assert saved.data == {"orderNumber": "ORD-000000000001", "trackingNumber": "TRK1", "orderId": "ord_1"}
    assert not saved.read


def test_template_messages():
    assert templates.order_confirmed("N1", 30).message == "Your order #N1 for $30.00 has been confirmed."
    assert templates.order_shipped("N1").message == "Your order #N1 is on its way!"
    assert templates.order_delivered("N1").title == "Order Delivered"
    assert templates.order_cancelled("N1").type is NotificationType.ORDER_CANCELLED
    assert templates.payment_failed("N1").message == "Payment for order #N1 failed. Please try again."
    assert templates.refund_processed("N1", None).message == "Your refund of N/A for order #N1 has been processed."
