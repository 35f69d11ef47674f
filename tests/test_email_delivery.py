from decimal import Decimal

import httpx
import pytest

from application.ports.email import EmailMessage
from application.utils import email_templates
from core.config import EmailSettings
from infrastructure.external import email as email_factory
from infrastructure.external.email import build_transport_sender, get_email_sender
from infrastructure.external.email.celery_sender import CeleryEmailSender
from infrastructure.external.email.console import ConsoleEmailSender
from infrastructure.external.email.http_client import EmailDeliveryError, HttpEmailSender

from conftest import RecordingEmailSender


FRONTEND = "http://shop"
MESSAGE = EmailMessage(to="ann@x.com", subject="Hi", html="<p>Hi</p>", text="Hi")


def test_confirmation_template_lists_items_and_total():
    msg = email_templates.order_confirmation(
        "ann@x.com",
        "Ann",
        "ORD-1",
        [{"name": "Widget", "quantity": 2, "price": Decimal("15")}],
        Decimal("30"),
        FRONTEND,
    )
    assert msg.subject == "Order Confirmed - #ORD-1"
    assert "- Widget x2: $15.00" in msg.text
    assert "Total: $30.00" in msg.text
    assert "http://shop/orders/ORD-1" in msg.html


def test_confirmation_template_escapes_html():
    msg = email_templates.order_confirmation(
        "ann@x.com", "<b>Ann</b>", "ORD-1", [{"name": "<script>", "quantity": 1, "price": 1}], 1, FRONTEND
    )
    assert "<script>" not in msg.html
    assert "&lt;b&gt;Ann&lt;/b&gt;" in msg.html


def test_other_template_subjects():
    assert email_templates.order_shipped("a@x", "A", "N1", FRONTEND).subject == "Your order is on its way! - #N1"
    assert email_templates.order_delivered("a@x", "A", "N1", FRONTEND).subject == "Order delivered! - #N1"
    failed = email_templates.payment_failed("a@x", "A", "N1", "Card expired", FRONTEND)
    assert failed.subject == "Payment Failed - Order #N1"
    refund = email_templates.refund_confirmation("a@x", "A", "N1", Decimal("15"), FRONTEND)
    assert refund.subject == "Refund Processed - Order #N1"
    assert "₪15.00" in refund.text


def test_sender_factory():
    assert isinstance(get_email_sender(EmailSettings()), ConsoleEmailSender)
    assert isinstance(get_email_sender(EmailSettings(backend="celery")), CeleryEmailSender)
    assert isinstance(
        get_email_sender(EmailSettings(backend="http", api_url="https://esp.test/send")), HttpEmailSender
    )
    assert isinstance(build_transport_sender(EmailSettings(backend="celery")), ConsoleEmailSender)
    with pytest.raises(ValueError):
        get_email_sender(EmailSettings(backend="pigeon"))


@pytest.mark.asyncio
async def test_http_sender_retries_server_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(503 if len(calls) == 1 else 202)

    config = EmailSettings(backend="http", api_url="https://esp.test/send", api_key="k1", max_retries=2)
    sender = HttpEmailSender(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    await sender.send(MESSAGE)
    await sender.aclose()

    assert len(calls) == 2
    assert calls[-1].headers["Authorization"] == "Bearer k1"


@pytest.mark.asyncio
async def test_http_sender_does_not_retry_client_errors():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(422)

    config = EmailSettings(backend="http", api_url="https://esp.test/send", max_retries=3)
    sender = HttpEmailSender(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    with pytest.raises(EmailDeliveryError) as exc_info:
        await sender.send(MESSAGE)
    await sender.aclose()

    assert exc_info.value.status_code == 422
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_celery_sender_runs_task_eagerly(monkeypatch):
    recorder = RecordingEmailSender()
    monkeypatch.setattr(email_factory, "build_transport_sender", lambda config=None: recorder)

    await CeleryEmailSender().send(MESSAGE)

    assert [m.subject for m in recorder.sent] == ["Hi"]


@pytest.mark.asyncio
async def test_email_task_resolves_engine_app_from_worker_thread():
    import asyncio

    from infrastructure.tasks import celery_app
    from infrastructure.tasks.tasks.email import send_email

    def _resolve():
        return send_email.app.main, send_email.app.conf.task_always_eager

    assert await asyncio.to_thread(_resolve) == (celery_app.main, True)
