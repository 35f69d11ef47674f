"""
订单领域实体 - 订单聚合根
"""
from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class OrderStatus(str, Enum):
    """订单状态枚举"""
    PENDING = "pending"           # 已创建，待支付
    PROCESSING = "processing"     # 已创建支付会话 / 处理中
    SHIPPED = "shipped"           # 已发货
    DELIVERED = "delivered"       # 已送达
    COMPLETED = "completed"       # 支付完成（终态）
    FAILED = "failed"             # 支付失败（终态）
    CANCELLED = "cancelled"       # 已取消（终态）


@dataclass(frozen=True)
class OrderItem:
    """订单行：价格以最小货币单位（分）表示"""
    product_id: str
    name: str
    price: int
    quantity: int

    @property
    def subtotal(self) -> int:
        return self.price * self.quantity


@dataclass
class Order:
    """
    订单聚合根

    业务规则：
    1. total 以调用方提交的值为准，不在服务端按明细重新计算
    2. 订单只追加不删除
    3. 状态变更由调用方（状态流转引擎）决定合法性，实体本身不做限制
    """

    id: str
    order_number: str
    items: list[OrderItem]
    total: int
    customer_name: str
    customer_email: str
    status: OrderStatus = OrderStatus.PENDING
    payment_session_id: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def items_total(self) -> int:
        """按明细计算的金额，仅供对账参考"""
        return sum(item.subtotal for item in self.items)

    @property
    def total_major(self) -> float:
        return self.total / 100

    def attach_payment_session(self, session_id: str) -> None:
        """绑定支付会话：订单随即进入 processing"""
        self.payment_session_id = session_id
        self.status = OrderStatus.PROCESSING
        self.updated_at = datetime.now(timezone.utc)

    def set_status(self, status: OrderStatus, transaction_id: Optional[str] = None) -> None:
        """无条件覆盖状态；仅在提供时覆盖交易号"""
        self.status = OrderStatus(status)
        self.updated_at = datetime.now(timezone.utc)
        if transaction_id:
            self.transaction_id = transaction_id

    def snapshot(self) -> "Order":
        """返回与仓储内部状态隔离的副本"""
        return replace(self, items=list(self.items))


def generate_order_id() -> str:
    """ord_<epoch-ms>_<8位随机hex>：时间戳 + 随机后缀，不依赖共享计数器"""
    return f"ord_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class _MonotonicMicros:
    """进程内严格递增的微秒时钟，用于生成"看起来单调"的订单号"""

    def __init__(self) -> None:
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            now = time.time_ns() // 1000
            self._last = max(now, self._last + 1)
            return self._last


_order_number_clock = _MonotonicMicros()


def generate_order_number() -> str:
    """ORD-<微秒时间戳>：进程内唯一且数值递增，重启后不保证唯一"""
    return f"ORD-{_order_number_clock.next()}"
