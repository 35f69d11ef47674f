"""
站内通知领域实体
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class NotificationType(str, Enum):
    """业务事件类型（封闭枚举）"""
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_FAILED = "payment_failed"
    PRICE_DROP = "price_drop"
    BACK_IN_STOCK = "back_in_stock"
    GROUP_INVITE = "group_invite"
    GROUP_UPDATE = "group_update"
    PROMO = "promo"
    SYSTEM = "system"


@dataclass
class Notification:
    id: str
    user_id: str
    type: NotificationType
    title: str
    message: str
    data: Optional[dict[str, Any]] = None
    read: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def mark_read(self) -> bool:
        """标记已读；返回本次是否从未读变为已读"""
        if self.read:
            return False
        self.read = True
        return True

    def snapshot(self) -> "Notification":
        return replace(self, data=dict(self.data) if self.data is not None else None)


def generate_notification_id() -> str:
    return f"notif_{uuid.uuid4().hex[:8]}"
