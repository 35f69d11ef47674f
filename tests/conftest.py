"""Pytest bootstrap configuration.

Ensure mandatory environment variables are set before test collection
and module imports that depend on application settings.
"""
import os

# Mandatory secret key for settings validation
os.environ.setdefault("SECRET_KEY", "test-secret-key")
# Celery 任务在测试中同步执行
os.environ.setdefault("ENVIRONMENT", "testing")

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from application.ports.email import EmailMessage
from application.ports.identity import UserRef
from core.config import settings
from core.settings import PaymentSettings, TranzilaSettings, WebhookSettings
from infrastructure.identity.user_directory import InMemoryUserDirectory


WEBHOOK_SECRET = "whsec_test"

ANN = UserRef(id="user_ann", email="ann@x.com", name="Ann", role="user")
ADMIN = UserRef(id="user_admin", email="admin@x.com", name="Admin", role="admin")


class RecordingEmailSender:
    """记录所有发出的邮件；fail_times > 0 时前几次发送抛异常"""

    def __init__(self, fail_times: int = 0) -> None:
        self.sent: list[EmailMessage] = []
        self.attempts = 0
        self.fail_times = fail_times

    async def send(self, message: EmailMessage) -> None:
        self.attempts += 1
        if self.attempts <= self.fail_times:
            raise ConnectionError("smtp unavailable")
        self.sent.append(message)

    def subjects(self) -> list[str]:
        return [m.subject for m in self.sent]


def make_token(user: UserRef, secret: str | None = None) -> str:
    return jwt.encode(
        {"sub": user.id, "email": user.email, "role": user.role},
        secret or settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


def auth_header(user: UserRef) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user)}"}


def order_payload(**overrides):
    payload = {
        "items": [{"productId": "p1", "name": "Widget", "price": 1500, "quantity": 2}],
        "total": 3000,
        "customerName": "Ann",
        "customerEmail": "ann@x.com",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def email_sender() -> RecordingEmailSender:
    return RecordingEmailSender()


@pytest.fixture
def users() -> InMemoryUserDirectory:
    return InMemoryUserDirectory([ANN, ADMIN])


@pytest.fixture
def mock_payment_settings() -> PaymentSettings:
    return PaymentSettings(
        tranzila=TranzilaSettings(),
        webhook=WebhookSettings(secret=WEBHOOK_SECRET),
    )


@pytest.fixture
def tranzila_payment_settings() -> PaymentSettings:
    return PaymentSettings(
        tranzila=TranzilaSettings(supplier="shop1", terminal="term1", password="pw1"),
        webhook=WebhookSettings(secret=WEBHOOK_SECRET),
    )


@pytest.fixture
def container(users, email_sender, mock_payment_settings):
    from api.container import build_container

    return build_container(
        settings,
        mock_payment_settings,
        users=users,
        email_sender=email_sender,
    )


@pytest_asyncio.fixture
async def running_container(container):
    await container.start()
    try:
        yield container
    finally:
        await container.shutdown()


@pytest_asyncio.fixture
async def client(running_container):
    """ASGITransport 不触发 lifespan，这里手动注入 container 并启动 worker"""
    from main import app

    app.state.container = running_container
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    del app.state.container
