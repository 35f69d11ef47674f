"""
Outbound side-effect queue port.

Producers (OrderService) only enqueue; a dedicated worker consumes jobs,
retries and logs failures. Nothing on the request path awaits delivery.
"""
from __future__ import annotations

import uuid
from typing import Any, Protocol

from pydantic import BaseModel, Field

from domain.order.transitions import EffectKind


class SideEffectJob(BaseModel):
    """一条副作用任务：kind 决定由邮件还是站内通知处理，name 为模板名"""

    id: str = Field(default_factory=lambda: f"job_{uuid.uuid4().hex[:12]}")
    kind: EffectKind
    name: str
    # 订单快照 + 模板参数（tracking_number / reason / refund_amount ...）
    context: dict[str, Any] = Field(default_factory=dict)


class SideEffectQueue(Protocol):
    def enqueue(self, job: SideEffectJob) -> bool:
        """非阻塞入队；队列已满时返回 False"""
        ...


__all__ = ["SideEffectJob", "SideEffectQueue"]
