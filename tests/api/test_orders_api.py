import pytest

from conftest import ADMIN, ANN, auth_header, order_payload


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["data"] == {"status": "healthy"}


@pytest.mark.asyncio
async def test_create_order_returns_order_and_mock_payment(client):
    resp = await client.post("/api/v1/orders", json=order_payload())
    assert resp.status_code == 201
    body = resp.json()
    assert body["code"] == 0
    order, payment = body["data"]["order"], body["data"]["payment"]

    assert order["id"].startswith("ord_")
    assert order["orderNumber"].startswith("ORD-")
    assert order["status"] == "processing"
    assert order["total"] == 3000
    assert order["items"] == [{"productId": "p1", "name": "Widget", "price": 1500, "quantity": 2}]
    assert order["createdAt"].endswith("Z")

    assert payment["isMock"] is True
    assert payment["url"] == "mock://payment"
    assert payment["sessionId"].startswith("mock_sess_")
    assert payment["payload"]["orderId"] == order["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        order_payload(items=[]),
        order_payload(total=None),
        order_payload(customerName=None),
        order_payload(customerEmail=""),
        order_payload(items=[{"productId": "p1", "name": "Widget"}]),
        order_payload(total="lots"),
    ],
)
async def test_create_order_validation_errors_are_400(client, payload):
    resp = await client.post("/api/v1/orders", json=payload)
    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "ValidationError"


@pytest.mark.asyncio
async def test_get_and_list_orders(client):
    created = (await client.post("/api/v1/orders", json=order_payload())).json()["data"]["order"]
    await client.post("/api/v1/orders", json=order_payload(customerEmail="bob@x.com"))

    resp = await client.get(f"/api/v1/orders/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["data"]["order"]["customerEmail"] == "ann@x.com"

    everyone = (await client.get("/api/v1/orders")).json()["data"]["orders"]
    anns = (await client.get("/api/v1/orders", params={"email": "ann@x.com"})).json()["data"]["orders"]
    assert len(everyone) == 2
    assert [o["id"] for o in anns] == [created["id"]]


@pytest.mark.asyncio
async def test_unknown_order_is_404(client):
    resp = await client.get("/api/v1/orders/ord_missing")
    assert resp.status_code == 404
    resp = await client.patch("/api/v1/orders/ord_missing/status", json={"status": "completed"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_patch_status(client):
    created = (await client.post("/api/v1/orders", json=order_payload())).json()["data"]["order"]

    resp = await client.patch(
        f"/api/v1/orders/{created['id']}/status",
        json={"status": "completed", "transactionId": "TX1"},
    )
    assert resp.status_code == 200
    order = resp.json()["data"]["order"]
    assert order["status"] == "completed"
    assert order["transactionId"] == "TX1"

    for bad in ("shipped", "refunded", None):
        resp = await client.patch(f"/api/v1/orders/{created['id']}/status", json={"status": bad})
        assert resp.status_code == 400


@pytest.mark.asyncio
async def test_admin_requires_admin_role(client):
    assert (await client.get("/api/v1/admin/stats")).status_code == 401
    assert (await client.get("/api/v1/admin/stats", headers=auth_header(ANN))).status_code == 403
    bad = {"Authorization": "Bearer not-a-jwt"}
    assert (await client.get("/api/v1/admin/stats", headers=bad)).status_code == 401


@pytest.mark.asyncio
async def test_admin_ship_order_notifies_customer(client, running_container, email_sender):
    created = (await client.post("/api/v1/orders", json=order_payload())).json()["data"]["order"]
    admin = auth_header(ADMIN)

    resp = await client.patch(
        f"/api/v1/admin/orders/{created['id']}/status",
        json={"status": "shipped", "trackingNumber": "TRK123"},
        headers=admin,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["order"]["status"] == "shipped"

    resp = await client.patch(
        f"/api/v1/admin/orders/{created['id']}/status", json={"status": "completed"}, headers=admin
    )
    assert resp.status_code == 400

    await running_container.queue.join()
    assert email_sender.subjects()[-1] == f"Your order is on its way! - #{created['orderNumber']}"

    resp = await client.get("/api/v1/notifications", headers=auth_header(ANN))
    data = resp.json()["data"]
    assert data["unreadCount"] == 2
    assert [n["type"] for n in data["notifications"]] == ["order_shipped", "order_confirmed"]


@pytest.mark.asyncio
async def test_admin_listing_and_stats(client):
    for _ in range(3):
        await client.post("/api/v1/orders", json=order_payload())
    admin = auth_header(ADMIN)

    page = (await client.get("/api/v1/admin/orders", params={"page": 1, "size": 2}, headers=admin)).json()["data"]
    assert page["total"] == 3
    assert page["pages"] == 2
    assert len(page["items"]) == 2

    stats = (await client.get("/api/v1/admin/stats", headers=admin)).json()["data"]
    assert stats == {
        "totalRevenue": 9000,
        "ordersToday": 3,
        "pendingOrders": 0,
        "openOrders": 3,
        "totalOrders": 3,
    }
