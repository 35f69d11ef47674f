from urllib.parse import urlencode

import pytest

from core.settings import payment_settings
from infrastructure.external.payments.signature import sign

from conftest import ADMIN, ANN, WEBHOOK_SECRET, auth_header, order_payload


SIGNATURE_HEADER = payment_settings.webhook.signature_header


async def _create(client):
    return (await client.post("/api/v1/orders", json=order_payload())).json()["data"]["order"]


def _signed(payload, secret=WEBHOOK_SECRET):
    return {SIGNATURE_HEADER: sign(payload, secret)}


@pytest.mark.asyncio
async def test_signed_mock_webhook_completes_order(client):
    order = await _create(client)
    payload = {"orderId": order["id"], "status": "success"}

    resp = await client.post("/api/v1/webhooks/mock", json=payload, headers=_signed(payload))
    assert resp.status_code == 200
    ack = resp.json()["data"]
    assert ack == {"accepted": True, "duplicate": False, "orderId": order["id"], "status": "completed"}


@pytest.mark.asyncio
async def test_rejected_webhooks_still_return_200(client):
    order = await _create(client)
    payload = {"orderId": order["id"], "status": "success"}

    forged = await client.post("/api/v1/webhooks/mock", json=payload, headers=_signed(payload, "nope"))
    unsigned = await client.post("/api/v1/webhooks/mock", json=payload)
    garbage = await client.post(
        "/api/v1/webhooks/mock",
        content=b"not json",
        headers={"Content-Type": "application/json", SIGNATURE_HEADER: "00"},
    )

    for resp in (forged, unsigned, garbage):
        assert resp.status_code == 200
        assert resp.json()["data"]["accepted"] is False

    current = (await client.get(f"/api/v1/orders/{order['id']}")).json()["data"]["order"]
    assert current["status"] == "processing"


@pytest.mark.asyncio
async def test_unknown_provider_is_404(client):
    resp = await client.post("/api/v1/webhooks/paypal", json={})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_form_encoded_tranzila_failure(client, running_container, email_sender):
    order = await _create(client)
    fields = {"order_id": order["id"], "Response": "004", "index": "41"}

    resp = await client.post(
        "/api/v1/webhooks/tranzila",
        content=urlencode(fields),
        headers={"Content-Type": "application/x-www-form-urlencoded", **_signed(fields)},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "failed"

    replay = await client.post(
        "/api/v1/webhooks/tranzila",
        content=urlencode(fields),
        headers={"Content-Type": "application/x-www-form-urlencoded", **_signed(fields)},
    )
    assert replay.json()["data"]["duplicate"] is True

    await running_container.queue.join()
    assert email_sender.subjects().count(f"Payment Failed - Order #{order['orderNumber']}") == 1

    notes = (await client.get("/api/v1/notifications", headers=auth_header(ANN))).json()["data"]
    assert notes["notifications"][0]["type"] == "payment_failed"
    assert notes["notifications"][0]["data"]["reason"] == "Transaction refused"


@pytest.mark.asyncio
async def test_refund_webhook(client):
    order = await _create(client)
    payload = {"order_id": order["id"], "Response": "000", "sum": "3000", "refund_index": "r1"}

    resp = await client.post("/api/v1/webhooks/tranzila/refund", json=payload, headers=_signed(payload))
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "cancelled"


@pytest.mark.asyncio
async def test_ip_allowlist(client, monkeypatch):
    order = await _create(client)
    payload = {"orderId": order["id"], "status": "success"}
    monkeypatch.setattr(payment_settings.webhook, "ip_allowlist", ["10.0.0.0/8"])

    resp = await client.post("/api/v1/webhooks/mock", json=payload, headers=_signed(payload))
    assert resp.status_code == 200
    assert resp.json()["data"]["accepted"] is False


@pytest.mark.asyncio
async def test_webhook_logs_require_admin(client):
    assert (await client.get("/api/v1/webhooks/logs")).status_code == 401
    assert (await client.get("/api/v1/webhooks/logs", headers=auth_header(ANN))).status_code == 403
    assert (await client.get("/api/v1/webhooks/logs", headers=auth_header(ADMIN))).status_code == 200


@pytest.mark.asyncio
async def test_webhook_logs_record_outcomes_newest_first(client):
    order = await _create(client)
    declined = {"order_id": order["id"], "Response": "004", "index": "8", "ccno": "4580000000001234"}
    await client.post("/api/v1/webhooks/tranzila", json=declined, headers=_signed(declined))
    await client.post("/api/v1/webhooks/tranzila", json=declined, headers=_signed(declined, "nope"))

    resp = await client.get("/api/v1/webhooks/logs", params={"limit": 500}, headers=auth_header(ADMIN))
    data = resp.json()["data"]

    assert data["total"] == 2
    rejected, failed = data["logs"]
    assert rejected["event"] == "signature_invalid" and rejected["status"] == "error"
    assert failed["event"] == "payment_failed"
    assert failed["orderId"] == order["id"]
    assert failed["source"] == "tranzila"
    assert failed["message"] == f"Transaction refused - Order {order['orderNumber']} -> failed"
    assert failed["payload"]["responseCode"] == "004"
    assert failed["payload"]["maskedCard"] == "****1234"
    assert "4580000000001234" not in str(failed["payload"])
    assert failed["id"].startswith("wh_")
    assert failed["timestamp"].endswith("Z")
