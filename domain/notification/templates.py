"""
通知文案模板：纯字符串格式化，不产生副作用。

每个函数返回 NotificationTemplate（type/title/message/data），
由 NotificationDispatcher 负责落库。金额参数均为主货币单位。
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .entity import NotificationType


@dataclass(frozen=True)
class NotificationTemplate:
    type: NotificationType
    title: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)


def _money(amount: float) -> str:
    return f"${amount:.2f}"


def order_confirmed(order_number: str, total: float) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.ORDER_CONFIRMED,
        "Order Confirmed",
        f"Your order #{order_number} for {_money(total)} has been confirmed.",
        {"orderNumber": order_number},
    )


def payment_received(order_number: str) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.ORDER_CONFIRMED,
        "Payment Received! 🎉",
        f"Your payment for order #{order_number} was successful. We're processing your order now.",
        {"orderNumber": order_number},
    )


def order_shipped(order_number: str, tracking_number: Optional[str] = None) -> NotificationTemplate:
    tracking = f" Tracking: {tracking_number}" if tracking_number else ""
    return NotificationTemplate(
        NotificationType.ORDER_SHIPPED,
        "Order Shipped",
        f"Your order #{order_number} is on its way!{tracking}",
        {"orderNumber": order_number, "trackingNumber": tracking_number},
    )


def order_delivered(order_number: str) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.ORDER_DELIVERED,
        "Order Delivered",
        f"Your order #{order_number} has been delivered. Enjoy!",
        {"orderNumber": order_number},
    )


def order_cancelled(order_number: str) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.ORDER_CANCELLED,
        "Order Cancelled",
        f"Your order #{order_number} has been cancelled.",
        {"orderNumber": order_number},
    )


def payment_failed(order_number: str, reason: Optional[str] = None) -> NotificationTemplate:
    if reason:
        message = f"Your payment for order #{order_number} was not successful: {reason}"
    else:
        message = f"Payment for order #{order_number} failed. Please try again."
    data: dict[str, Any] = {"orderNumber": order_number}
    if reason:
        data["reason"] = reason
    return NotificationTemplate(NotificationType.PAYMENT_FAILED, "Payment Failed", message, data)


def refund_processed(order_number: str, amount: Optional[float]) -> NotificationTemplate:
    shown = f"₪{amount:.2f}" if amount is not None else "N/A"
    return NotificationTemplate(
        NotificationType.ORDER_CANCELLED,
        "Refund Processed",
        f"Your refund of {shown} for order #{order_number} has been processed.",
        {"orderNumber": order_number, "amount": f"{amount:.2f}" if amount is not None else None},
    )


def price_drop(product_name: str, product_id: str, new_price: float) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.PRICE_DROP,
        "Price Drop Alert",
        f"{product_name} is now {_money(new_price)}!",
        {"productId": product_id, "productName": product_name, "newPrice": new_price},
    )


def back_in_stock(product_name: str, product_id: str) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.BACK_IN_STOCK,
        "Back in Stock",
        f"{product_name} is back in stock!",
        {"productId": product_id, "productName": product_name},
    )


def group_invite(group_name: str, group_id: str, inviter_name: str) -> NotificationTemplate:
    return NotificationTemplate(
        NotificationType.GROUP_INVITE,
        "Group Invite",
        f'{inviter_name} invited you to join "{group_name}"',
        {"groupId": group_id, "groupName": group_name, "inviterName": inviter_name},
    )


def promo(title: str, message: str, promo_code: Optional[str] = None) -> NotificationTemplate:
    return NotificationTemplate(NotificationType.PROMO, title, message, {"promoCode": promo_code})
