"""
Tranzila hosted-iframe gateway.

Builds the iframe URL and the form fields the client posts to Tranzila.
Amounts arrive in major units and leave in agorot (minor units).
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from application.dtos.payments import CreateSession, PaymentSession
from core.settings import TranzilaSettings, payment_settings
from infrastructure.external.payments.base import BaseGateway


def to_minor_units(amount: Decimal) -> int:
    """主单位 -> 最小单位：×100 后四舍五入（round-half-up，非银行家舍入）"""
    return int((Decimal(str(amount)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class TranzilaGateway(BaseGateway):
    provider = "tranzila"
    is_mock = False

    def __init__(self, config: Optional[TranzilaSettings] = None, notify_url: Optional[str] = None) -> None:
        self.config = config or payment_settings.tranzila
        self.notify_url = notify_url

    @property
    def iframe_url(self) -> str:
        # sandbox 与生产共用同一 direct 域名
        return f"{self.config.base_url.rstrip('/')}/{self.config.supplier}/iframe.php"

    async def create_session(self, req: CreateSession) -> PaymentSession:  # type: ignore[override]
        payload: dict[str, str] = {
            "supplier": self.config.supplier or "",
            "terminal": self.config.terminal or "",
            "TranzilaPW": self.config.password or "",
            "sum": str(to_minor_units(req.amount)),
            "currency": self.config.currency,
            "lang": self.config.lang,
            "pdesc": req.description,
            "contact": req.customer_name,
            "email": req.customer_email,
            "order_id": req.order_id,
            "success_url_address": req.success_url,
            "fail_url_address": req.cancel_url,
        }
        if self.notify_url:
            payload["notify_url_address"] = self.notify_url

        session = PaymentSession(
            session_id=self.new_session_id(),
            url=self.iframe_url,
            payload=payload,
            is_mock=False,
        )
        self._log("tranzila_session_built", order_id=req.order_id, sum=payload["sum"], session_id=session.session_id)
        return session
