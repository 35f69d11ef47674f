"""
Base payment gateway implementing shared concerns: session ids, logging.

Concrete providers subclass and implement provider-specific payload building.
Session creation is local; no network I/O happens at checkout time.
"""
from __future__ import annotations

import secrets
import time

from core.logging_config import get_logger
from application.dtos.payments import CreateSession, PaymentSession
from application.ports.payment_gateway import PaymentGateway


logger = get_logger(__name__)


class WebhookPayloadError(ValueError):
    """回调载荷缺少必要字段或取值非法"""


class BaseGateway(PaymentGateway):
    provider: str = "base"
    is_mock: bool = False
    session_prefix: str = "sess"

    def new_session_id(self) -> str:
        return f"{self.session_prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"

    async def create_session(self, req: CreateSession) -> PaymentSession:  # type: ignore[override]
        raise NotImplementedError

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
