"""
订单仓储接口 - 定义订单账本的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional, List

from .entity import Order, OrderItem, OrderStatus


class OrderRepository(ABC):
    """订单仓储抽象接口 - 只定义能做什么，不管怎么做

    账本是一个"哑"存储：不校验状态取值，也不判断状态流转是否合法。
    """

    @abstractmethod
    async def insert(
        self,
        items: List[OrderItem],
        total: int,
        customer_name: str,
        customer_email: str,
    ) -> Order:
        """生成新的 id/订单号，以 pending 状态入账"""
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """根据ID获取订单"""
        pass

    @abstractmethod
    async def list(self, customer_email: Optional[str] = None) -> List[Order]:
        """获取订单列表；不过滤时按创建时间倒序"""
        pass

    @abstractmethod
    async def attach_payment_session(self, order_id: str, session_id: str) -> Optional[Order]:
        """绑定支付会话，并将状态置为 processing"""
        pass

    @abstractmethod
    async def set_status(
        self,
        order_id: str,
        status: OrderStatus,
        transaction_id: Optional[str] = None,
    ) -> Optional[Order]:
        """无条件覆盖订单状态与更新时间"""
        pass
