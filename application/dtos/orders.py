"""
Order DTOs (Pydantic v2). Money is always in minor units (cents) here.
"""
from __future__ import annotations

from typing import Optional

from pydantic import Field

from application.dto import DTOBase, UtcDatetime
from domain.order.entity import Order, OrderItem


class OrderItemDTO(DTOBase):
    product_id: str
    name: str
    price: int = Field(..., description="单价（分）")
    quantity: int = Field(..., ge=1)

    def to_entity(self) -> OrderItem:
        return OrderItem(
            product_id=self.product_id,
            name=self.name,
            price=self.price,
            quantity=self.quantity,
        )

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemDTO":
        return cls(product_id=item.product_id, name=item.name, price=item.price, quantity=item.quantity)


class CreateOrderDTO(DTOBase):
    """下单请求。字段是否为空由 OrderService 校验，以便返回具体缺失字段。"""
    items: Optional[list[OrderItemDTO]] = None
    total: Optional[int] = Field(None, description="订单总额（分），以调用方提交为准")
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None


class UpdateOrderStatusDTO(DTOBase):
    status: Optional[str] = None
    transaction_id: Optional[str] = None


class AdminUpdateOrderStatusDTO(UpdateOrderStatusDTO):
    tracking_number: Optional[str] = None


class OrderDTO(DTOBase):
    id: str
    order_number: str
    status: str
    total: int
    items: list[OrderItemDTO]
    customer_name: str
    customer_email: str
    payment_session_id: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDTO":
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            total=order.total,
            items=[OrderItemDTO.from_entity(i) for i in order.items],
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            payment_session_id=order.payment_session_id,
            transaction_id=order.transaction_id,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class CreatedOrderDTO(DTOBase):
    """下单响应中的订单摘要"""
    id: str
    order_number: str
    status: str
    total: int
    items: list[OrderItemDTO]
    created_at: UtcDatetime

    @classmethod
    def from_entity(cls, order: Order) -> "CreatedOrderDTO":
        return cls(
            id=order.id,
            order_number=order.order_number,
            status=order.status.value,
            total=order.total,
            items=[OrderItemDTO.from_entity(i) for i in order.items],
            created_at=order.created_at,
        )


class OrderStatsDTO(DTOBase):
    total_revenue: int
    orders_today: int
    pending_orders: int
    open_orders: int
    total_orders: int
