import pytest

from domain.notification.entity import NotificationType

from conftest import ADMIN, ANN, auth_header


async def _seed(container, user_id=ANN.id, count=3):
    return [
        await container.notifications.notify(user_id, NotificationType.PROMO, f"Sale {i}", "Everything must go")
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_requires_authentication(client):
    assert (await client.get("/api/v1/notifications")).status_code == 401


@pytest.mark.asyncio
async def test_list_and_unread_count(client, running_container):
    await _seed(running_container)
    await _seed(running_container, user_id=ADMIN.id, count=1)

    data = (await client.get("/api/v1/notifications", params={"limit": 2}, headers=auth_header(ANN))).json()["data"]
    assert [n["title"] for n in data["notifications"]] == ["Sale 2", "Sale 1"]
    assert data["unreadCount"] == 3
    assert data["notifications"][0]["read"] is False

    count = (await client.get("/api/v1/notifications/unread-count", headers=auth_header(ANN))).json()["data"]
    assert count == {"count": 3}


@pytest.mark.asyncio
async def test_mark_read_and_mark_all(client, running_container):
    first, *_ = await _seed(running_container)
    ann = auth_header(ANN)

    resp = await client.patch(f"/api/v1/notifications/{first.id}/read", headers=ann)
    assert resp.status_code == 200
    assert resp.json()["data"]["notification"]["read"] is True

    resp = await client.post("/api/v1/notifications/mark-all-read", headers=ann)
    assert resp.json()["data"] == {"count": 2}
    count = (await client.get("/api/v1/notifications/unread-count", headers=ann)).json()["data"]
    assert count == {"count": 0}


@pytest.mark.asyncio
async def test_cannot_touch_other_users_notifications(client, running_container):
    (note,) = await _seed(running_container, count=1)
    admin = auth_header(ADMIN)

    assert (await client.patch(f"/api/v1/notifications/{note.id}/read", headers=admin)).status_code == 403
    assert (await client.delete(f"/api/v1/notifications/{note.id}", headers=admin)).status_code == 404
    assert (await client.patch("/api/v1/notifications/notif_missing/read", headers=admin)).status_code == 404


@pytest.mark.asyncio
async def test_delete(client, running_container):
    (note,) = await _seed(running_container, count=1)
    ann = auth_header(ANN)

    resp = await client.delete(f"/api/v1/notifications/{note.id}", headers=ann)
    assert resp.status_code == 200
    assert resp.json()["data"] == {"deleted": True}
    assert (await client.get("/api/v1/notifications/unread-count", headers=ann)).json()["data"] == {"count": 0}
