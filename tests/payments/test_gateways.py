from decimal import Decimal

import pytest

from application.dtos.payments import CreateSession
from core.settings import PaymentSettings, TranzilaSettings
from infrastructure.external.payments import TRANZILA_NOTIFY_PATH, build_payment_gateway
from infrastructure.external.payments.mock_client import MOCK_PAYMENT_URL, MockGateway
from infrastructure.external.payments.tranzila_client import TranzilaGateway, to_minor_units


def _req(amount="30.00") -> CreateSession:
    return CreateSession(
        order_id="ord_1",
        amount=Decimal(amount),
        description="Order ORD-000000000001",
        customer_name="Ann",
        customer_email="ann@x.com",
        success_url="http://shop/checkout/success?orderId=ord_1",
        cancel_url="http://shop/checkout/cancel?orderId=ord_1",
    )


@pytest.mark.parametrize(
    "tranzila",
    [
        TranzilaSettings(),
        TranzilaSettings(supplier="shop1", terminal="term1"),
        TranzilaSettings(supplier="your_supplier_id", terminal="term1", password="pw"),
        TranzilaSettings(supplier="shop1", terminal="term1", password="changeme"),
    ],
)
def test_incomplete_credentials_select_mock(tranzila):
    gateway = build_payment_gateway(PaymentSettings(tranzila=tranzila), public_api_url="https://api.shop")
    assert isinstance(gateway, MockGateway)
    assert gateway.is_mock


def test_complete_credentials_select_tranzila():
    config = PaymentSettings(tranzila=TranzilaSettings(supplier="shop1", terminal="term1", password="pw1"))
    gateway = build_payment_gateway(config, public_api_url="https://api.shop/")
    assert isinstance(gateway, TranzilaGateway)
    assert not gateway.is_mock
    assert gateway.notify_url == f"https://api.shop{TRANZILA_NOTIFY_PATH}"


@pytest.mark.asyncio
async def test_mock_session():
    session = await MockGateway().create_session(_req("30.00"))
    assert session.is_mock
    assert session.url == MOCK_PAYMENT_URL
    assert session.session_id.startswith("mock_sess_")
    assert session.payload == {"orderId": "ord_1", "amount": "30.00", "mock": "true"}


@pytest.mark.asyncio
async def test_tranzila_session_payload():
    config = TranzilaSettings(supplier="shop1", terminal="term1", password="pw1")
    gateway = TranzilaGateway(config, notify_url="https://api.shop/api/v1/webhooks/tranzila")
    session = await gateway.create_session(_req("30.00"))

    assert not session.is_mock
    assert session.url == "https://direct.tranzila.com/shop1/iframe.php"
    payload = session.payload
    assert payload["supplier"] == "shop1"
    assert payload["terminal"] == "term1"
    assert payload["TranzilaPW"] == "pw1"
    assert payload["sum"] == "3000"
    assert payload["currency"] == "1"
    assert payload["order_id"] == "ord_1"
    assert payload["contact"] == "Ann"
    assert payload["email"] == "ann@x.com"
    assert payload["pdesc"] == "Order ORD-000000000001"
    assert payload["success_url_address"].endswith("/checkout/success?orderId=ord_1")
    assert payload["fail_url_address"].endswith("/checkout/cancel?orderId=ord_1")
    assert payload["notify_url_address"] == "https://api.shop/api/v1/webhooks/tranzila"


@pytest.mark.asyncio
async def test_session_ids_are_unique():
    gateway = MockGateway()
    ids = {(await gateway.create_session(_req())).session_id for _ in range(500)}
    assert len(ids) == 500


@pytest.mark.parametrize(
    "amount, expected",
    [
        ("30", 3000),
        ("0.125", 13),
        ("10.005", 1001),
        ("0.124", 12),
        ("2.5", 250),
        ("0", 0),
    ],
)
def test_to_minor_units_rounds_half_up(amount, expected):
    assert to_minor_units(Decimal(amount)) == expected
