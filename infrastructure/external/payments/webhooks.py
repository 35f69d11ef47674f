"""
Provider-specific webhook parsers: raw callback fields -> WebhookEvent.
"""
from __future__ import annotations

import time
from typing import Any, Mapping, Optional

from application.dtos.payments import WebhookEvent, WebhookKind, WebhookOutcome
from infrastructure.external.payments.base import WebhookPayloadError
from shared.codes.payment_codes import (
    TRANZILA_APPROVED,
    TRANZILA_CANCELLED,
    describe_tranzila_response,
)


def _str(fields: Mapping[str, Any], key: str) -> Optional[str]:
    value = fields.get(key)
    if value is None or value == "":
        return None
    return str(value)


def _int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


class TranzilaWebhookParser:
    """Tranzila notify 回调：Response=000 为成功，036 为用户取消，其余为失败"""

    provider = "tranzila"

    def parse(self, fields: Mapping[str, Any], kind: WebhookKind = WebhookKind.PAYMENT) -> WebhookEvent:
        order_id = _str(fields, "order_id")
        if not order_id:
            raise WebhookPayloadError("Missing order_id")

        code = _str(fields, "Response")
        is_success, message = describe_tranzila_response(code)

        if kind is WebhookKind.REFUND:
            # 退款回调只认 000
            return WebhookEvent(
                provider=self.provider,
                kind=kind,
                order_id=order_id,
                outcome=WebhookOutcome.SUCCESS if code == TRANZILA_APPROVED else WebhookOutcome.FAILED,
                transaction_id=_str(fields, "ConfirmationCode"),
                response_code=code,
                reason=None if code == TRANZILA_APPROVED else message,
                amount=_int(_str(fields, "sum")),
                reference=_str(fields, "refund_index") or _str(fields, "index"),
            )

        if is_success:
            outcome = WebhookOutcome.SUCCESS
        elif code == TRANZILA_CANCELLED:
            outcome = WebhookOutcome.CANCELLED
        else:
            outcome = WebhookOutcome.FAILED

        index = _str(fields, "index")
        return WebhookEvent(
            provider=self.provider,
            kind=kind,
            order_id=order_id,
            outcome=outcome,
            transaction_id=(_str(fields, "ConfirmationCode") or index) if is_success else None,
            response_code=code,
            reason=None if is_success else message,
            amount=_int(_str(fields, "sum")),
            reference=index,
        )


class MockWebhookParser:
    """开发用回调：{orderId, status: success|failed|cancelled}"""

    provider = "mock"

    _OUTCOMES = {o.value: o for o in WebhookOutcome}

    def parse(self, fields: Mapping[str, Any], kind: WebhookKind = WebhookKind.PAYMENT) -> WebhookEvent:
        order_id = _str(fields, "orderId")
        status = _str(fields, "status")
        if not order_id or not status:
            raise WebhookPayloadError("Missing orderId or status")
        outcome = self._OUTCOMES.get(status)
        if outcome is None:
            raise WebhookPayloadError("Invalid status. Use: success, failed, cancelled")

        success = outcome is WebhookOutcome.SUCCESS
        return WebhookEvent(
            provider=self.provider,
            kind=kind,
            order_id=order_id,
            outcome=outcome,
            transaction_id=f"MOCK_{int(time.time() * 1000)}" if success else None,
            reason=None if success else "Payment was declined",
            reference=_str(fields, "eventId") or status,
        )


def default_webhook_parsers() -> dict[str, Any]:
    parsers = (TranzilaWebhookParser(), MockWebhookParser())
    return {p.provider: p for p in parsers}
