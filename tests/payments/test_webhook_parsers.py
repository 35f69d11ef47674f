import pytest

from application.dtos.payments import WebhookKind, WebhookOutcome
from infrastructure.external.payments.base import WebhookPayloadError
from infrastructure.external.payments.webhooks import (
    MockWebhookParser,
    TranzilaWebhookParser,
    default_webhook_parsers,
)


tranzila = TranzilaWebhookParser()
mock = MockWebhookParser()


def test_default_parsers_cover_known_providers():
    assert set(default_webhook_parsers()) == {"tranzila", "mock"}


def test_tranzila_approved_uses_confirmation_code():
    event = tranzila.parse({"order_id": "ord_1", "Response": "000", "ConfirmationCode": "C77", "index": "12"})
    assert event.outcome is WebhookOutcome.SUCCESS
    assert event.transaction_id == "C77"
    assert event.reason is None
    assert event.dedup_key == "tranzila:payment:ord_1:12"


def test_tranzila_approved_falls_back_to_index():
    event = tranzila.parse({"order_id": "ord_1", "Response": "000", "index": "12"})
    assert event.transaction_id == "12"


def test_tranzila_cancelled_code():
    event = tranzila.parse({"order_id": "ord_1", "Response": "036"})
    assert event.outcome is WebhookOutcome.CANCELLED
    assert event.transaction_id is None
    assert event.dedup_key == "tranzila:payment:ord_1:noindex:036"


@pytest.mark.parametrize("code", ["001", "004", "033", "999", None])
def test_tranzila_other_codes_fail_with_reason(code):
    fields = {"order_id": "ord_1"}
    if code is not None:
        fields["Response"] = code
    event = tranzila.parse(fields)
    assert event.outcome is WebhookOutcome.FAILED
    assert event.reason


def test_tranzila_missing_order_id():
    with pytest.raises(WebhookPayloadError):
        tranzila.parse({"Response": "000"})


def test_tranzila_refund():
    event = tranzila.parse(
        {"order_id": "ord_1", "Response": "000", "sum": "1500", "refund_index": "r1"},
        WebhookKind.REFUND,
    )
    assert event.kind is WebhookKind.REFUND
    assert event.outcome is WebhookOutcome.SUCCESS
    assert event.amount == 1500
    assert str(event.amount_major) == "15"
    assert event.dedup_key == "tranzila:refund:ord_1:r1"


def test_tranzila_refund_declined():
    event = tranzila.parse({"order_id": "ord_1", "Response": "004"}, WebhookKind.REFUND)
    assert event.outcome is WebhookOutcome.FAILED
    assert event.amount is None


@pytest.mark.parametrize(
    "status, outcome",
    [
        ("success", WebhookOutcome.SUCCESS),
        ("failed", WebhookOutcome.FAILED),
        ("cancelled", WebhookOutcome.CANCELLED),
    ],
)
def test_mock_statuses(status, outcome):
    event = mock.parse({"orderId": "ord_1", "status": status})
    assert event.outcome is outcome
    if outcome is WebhookOutcome.SUCCESS:
        assert event.transaction_id.startswith("MOCK_")
    else:
        assert event.transaction_id is None


@pytest.mark.parametrize(
    "fields",
    [{}, {"orderId": "ord_1"}, {"status": "success"}, {"orderId": "ord_1", "status": "refunded"}],
)
def test_mock_invalid_payloads(fields):
    with pytest.raises(WebhookPayloadError):
        mock.parse(fields)
