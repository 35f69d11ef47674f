"""
Payment DTOs (Pydantic v2) used at application boundaries.

Amounts handed to a gateway are in major units (Decimal); everything the
order ledger sees stays in minor units.
"""
from __future__ import annotations

import secrets
import time
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.types import condecimal

from application.dto import DTOBase, UtcDatetime


class CreateSession(BaseModel):
    order_id: str
    amount: condecimal(ge=0)  # type: ignore[valid-type]
    description: str
    customer_name: str
    customer_email: str
    success_url: str
    cancel_url: str


class PaymentSession(DTOBase):
    """支付会话描述：客户端据此跳转/嵌入网关页面"""
    session_id: str
    url: str
    payload: dict[str, Any] = Field(default_factory=dict)
    is_mock: bool = False


class WebhookKind(str, Enum):
    PAYMENT = "payment"
    REFUND = "refund"


class WebhookOutcome(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WebhookEvent(BaseModel):
    """已解析的网关回调（仅在一次回调处理期间存在）"""
    provider: str
    kind: WebhookKind = WebhookKind.PAYMENT
    order_id: str
    outcome: WebhookOutcome
    transaction_id: Optional[str] = None
    response_code: Optional[str] = None
    reason: Optional[str] = None
    # 退款金额（分），仅退款回调
    amount: Optional[int] = None
    # 网关侧的回调序号，用于幂等键
    reference: Optional[str] = None

    @property
    def dedup_key(self) -> str:
        # 无 index 时按结果码区分，否则拒付后的成功重试会被当成重复
        reference = self.reference or f"noindex:{self.response_code or self.outcome.value}"
        return f"{self.provider}:{self.kind.value}:{self.order_id}:{reference}"

    @property
    def amount_major(self) -> Optional[Decimal]:
        if self.amount is None:
            return None
        return Decimal(self.amount) / 100


class WebhookAck(DTOBase):
    """回调应答：网关只关心 200，accepted 仅供排查"""
    accepted: bool
    duplicate: bool = False
    order_id: Optional[str] = None
    status: Optional[str] = None


def _webhook_log_id() -> str:
    return f"wh_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


class WebhookLogEntry(DTOBase):
    """回调审计记录：最近的若干条保存在内存环形缓冲里，供管理端排查"""
    id: str = Field(default_factory=_webhook_log_id)
    source: str
    event: str
    order_id: Optional[str] = None
    status: Literal["success", "error"]
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: UtcDatetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class WebhookLogListDTO(DTOBase):
    logs: list[WebhookLogEntry]
    total: int
