"""
订单仓储实现 - 进程内存账本

所有写操作在同一把 asyncio.Lock 下完成（单写者），对外只返回快照，
调用方修改返回值不会影响账本内部状态。
"""
import asyncio
from datetime import datetime, timezone
from typing import Dict, List, Optional

from core.logging_config import get_logger
from domain.order.entity import (
    Order,
    OrderItem,
    OrderStatus,
    generate_order_id,
    generate_order_number,
)
from domain.order.repository import OrderRepository


logger = get_logger(__name__)


class InMemoryOrderRepository(OrderRepository):
    """订单仓储的内存实现（易失，进程重启后清空）"""

    def __init__(self) -> None:
        self._orders: Dict[str, Order] = {}
        self._lock = asyncio.Lock()

    async def insert(
        self,
        items: List[OrderItem],
        total: int,
        customer_name: str,
        customer_email: str,
    ) -> Order:
        now = datetime.now(timezone.utc)
        order = Order(
            id=generate_order_id(),
            order_number=generate_order_number(),
            items=list(items),
            total=total,
            customer_name=customer_name,
            customer_email=customer_email,
            status=OrderStatus.PENDING,
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            self._orders[order.id] = order
        return order.snapshot()

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        order = self._orders.get(order_id)
        return order.snapshot() if order else None

    async def list(self, customer_email: Optional[str] = None) -> List[Order]:
        orders = [o.snapshot() for o in self._orders.values()]
        if customer_email:
            return [o for o in orders if o.customer_email == customer_email]
        return sorted(orders, key=lambda o: (o.created_at, o.order_number), reverse=True)

    async def attach_payment_session(self, order_id: str, session_id: str) -> Optional[Order]:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            order.attach_payment_session(session_id)
            return order.snapshot()

    async def set_status(
        self,
        order_id: str,
        status: OrderStatus,
        transaction_id: Optional[str] = None,
    ) -> Optional[Order]:
        async with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            previous = order.status
            order.set_status(status, transaction_id)
            logger.debug(
                "order_status_written",
                order_id=order_id,
                previous=previous.value,
                status=order.status.value,
            )
            return order.snapshot()
