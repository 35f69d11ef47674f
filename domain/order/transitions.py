"""
订单状态流转引擎

引擎是"宽松"的映射器：不拒绝任何流转（例如 delivered -> pending 在账本层面也是允许的），
只负责给出目标状态需要触发的副作用。合法取值的白名单在 API 边界校验。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from domain.common.exceptions import InvalidOrderStatusException
from .entity import OrderStatus


# 顾客/通用接口允许提交的状态
API_ALLOWED_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.COMPLETED,
    OrderStatus.FAILED,
    OrderStatus.CANCELLED,
})

# 管理端允许提交的状态
ADMIN_ALLOWED_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})

# 从 pending/processing 可到达的终态
TERMINAL_STATUSES = frozenset({
    OrderStatus.COMPLETED,
    OrderStatus.FAILED,
    OrderStatus.CANCELLED,
})


class TransitionOrigin(str, Enum):
    API = "api"
    ADMIN = "admin"
    WEBHOOK = "webhook"
    REFUND_WEBHOOK = "refund_webhook"


class EffectKind(str, Enum):
    EMAIL = "email"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class SideEffect:
    """一条待投递的副作用：邮件模板名或站内通知类型"""
    kind: EffectKind
    name: str


@dataclass(frozen=True)
class TransitionPlan:
    target: OrderStatus
    origin: TransitionOrigin
    effects: tuple[SideEffect, ...] = field(default_factory=tuple)

    def has(self, kind: EffectKind, name: str) -> bool:
        return SideEffect(kind, name) in self.effects


_EMAIL = EffectKind.EMAIL
_NOTIFY = EffectKind.NOTIFICATION

# 目标状态 -> 副作用；completed/failed 仅持久化状态，不附带副作用（网关回调另见下表）
_STATUS_EFFECTS: dict[OrderStatus, tuple[SideEffect, ...]] = {
    OrderStatus.SHIPPED: (
        SideEffect(_EMAIL, "order_shipped"),
        SideEffect(_NOTIFY, "order_shipped"),
    ),
    OrderStatus.DELIVERED: (
        SideEffect(_EMAIL, "order_delivered"),
        SideEffect(_NOTIFY, "order_delivered"),
    ),
    OrderStatus.CANCELLED: (
        SideEffect(_NOTIFY, "order_cancelled"),
    ),
}

# 网关回调附加的副作用（按回调来源 + 目标状态）
_WEBHOOK_EFFECTS: dict[tuple[TransitionOrigin, OrderStatus], tuple[SideEffect, ...]] = {
    (TransitionOrigin.WEBHOOK, OrderStatus.COMPLETED): (
        SideEffect(_EMAIL, "order_confirmation"),
        SideEffect(_NOTIFY, "payment_received"),
    ),
    (TransitionOrigin.WEBHOOK, OrderStatus.FAILED): (
        SideEffect(_EMAIL, "payment_failed"),
        SideEffect(_NOTIFY, "payment_failed"),
    ),
    (TransitionOrigin.REFUND_WEBHOOK, OrderStatus.CANCELLED): (
        SideEffect(_EMAIL, "refund_confirmation"),
        SideEffect(_NOTIFY, "refund_processed"),
    ),
}


class StatusTransitionEngine:
    """根据目标状态（以及触发来源）规划副作用"""

    def plan(
        self,
        target: OrderStatus,
        origin: TransitionOrigin = TransitionOrigin.API,
    ) -> TransitionPlan:
        target = OrderStatus(target)
        if origin is TransitionOrigin.REFUND_WEBHOOK:
            # 退款回调用"退款完成"通知替换普通的取消通知
            effects = _WEBHOOK_EFFECTS.get((origin, target), ())
        else:
            effects = _STATUS_EFFECTS.get(target, ()) + _WEBHOOK_EFFECTS.get((origin, target), ())
        return TransitionPlan(target=target, origin=origin, effects=effects)

    @staticmethod
    def is_terminal(status: OrderStatus) -> bool:
        return OrderStatus(status) in TERMINAL_STATUSES


def parse_status(value: object, allowed: Iterable[OrderStatus]) -> OrderStatus:
    """API 边界校验：不在白名单内的取值直接拒绝，不会进入引擎"""
    allowed_values = {s.value for s in allowed}
    raw = value.value if isinstance(value, OrderStatus) else value
    if not isinstance(raw, str) or raw not in allowed_values:
        raise InvalidOrderStatusException(value, allowed_values)
    return OrderStatus(raw)
