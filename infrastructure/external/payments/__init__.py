"""
Factory for payment gateway clients.

The variant is decided once at startup from configuration completeness
alone: full, non-placeholder Tranzila credentials select the real gateway,
anything else silently downgrades to the mock gateway.
"""
from __future__ import annotations

from typing import Optional

from core.config import settings
from core.logging_config import get_logger
from core.settings import PaymentSettings, payment_settings
from application.ports.payment_gateway import PaymentGateway


logger = get_logger(__name__)

TRANZILA_NOTIFY_PATH = "/api/v1/webhooks/tranzila"


def build_payment_gateway(
    config: Optional[PaymentSettings] = None,
    public_api_url: Optional[str] = None,
) -> PaymentGateway:
    config = config or payment_settings
    if config.tranzila.is_complete():
        from .tranzila_client import TranzilaGateway
        base = (public_api_url or settings.PUBLIC_API_URL).rstrip("/")
        gateway: PaymentGateway = TranzilaGateway(config.tranzila, notify_url=f"{base}{TRANZILA_NOTIFY_PATH}")
    else:
        from .mock_client import MockGateway
        gateway = MockGateway()
    logger.info("payment_gateway_selected", provider=gateway.provider, is_mock=gateway.is_mock)
    return gateway
