"""
Payment gateway ports (application/ports).

Application depends on these Protocols; infrastructure implements adapters
(Tranzila iframe, mock) and the per-provider webhook parsers.
"""
from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from application.dtos.payments import (
    CreateSession,
    PaymentSession,
    WebhookEvent,
    WebhookKind,
    WebhookLogEntry,
)


@runtime_checkable
class PaymentGateway(Protocol):
    """Builds a payment session for an order.

    Session creation is local payload construction only; confirmation
    arrives asynchronously through a webhook.
    """

    provider: str
    is_mock: bool

    async def create_session(self, req: CreateSession) -> PaymentSession: ...


class WebhookParser(Protocol):
    """Turns a provider's raw callback fields into a WebhookEvent."""

    provider: str

    def parse(self, fields: Mapping[str, Any], kind: WebhookKind = WebhookKind.PAYMENT) -> WebhookEvent: ...


class SignatureVerifier(Protocol):
    def verify(self, payload: Mapping[str, Any], signature: str | None) -> bool: ...


class WebhookDedupStore(Protocol):
    """回调幂等：claim 成功（首次出现）返回 True"""

    async def claim(self, key: str) -> bool: ...

    async def release(self, key: str) -> None: ...


class WebhookLog(Protocol):
    """回调审计日志：只保留最近 capacity 条，新记录在前"""

    async def record(self, entry: WebhookLogEntry) -> None: ...

    async def recent(self, limit: int = 50) -> list[WebhookLogEntry]: ...

    async def count(self) -> int: ...


__all__ = ["PaymentGateway", "WebhookParser", "SignatureVerifier", "WebhookDedupStore", "WebhookLog"]
