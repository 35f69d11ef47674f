"""
副作用执行器：由后台 worker 调用，把 SideEffectJob 落实为邮件或站内通知。

执行器本身不做重试；抛出的异常交给 worker（tenacity）重试并最终记录。
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Mapping

from application.ports.email import EmailMessage, EmailSender
from application.ports.identity import UserDirectory
from application.ports.side_effects import SideEffectJob
from application.services.notification_service import NotificationDispatcher
from application.utils import email_templates
from core.logging_config import get_logger
from domain.notification import templates as notification_templates
from domain.notification.templates import NotificationTemplate
from domain.order.entity import Order
from domain.order.transitions import EffectKind

logger = get_logger(__name__)


def _major(minor: Any) -> Decimal:
    return Decimal(int(minor)) / 100


def order_context(order: Order, **extra: Any) -> dict[str, Any]:
    """副作用任务携带的订单快照（金额为分）"""
    ctx: dict[str, Any] = {
        "order_id": order.id,
        "order_number": order.order_number,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "total": order.total,
        "items": [{"name": i.name, "quantity": i.quantity, "price": i.price} for i in order.items],
    }
    ctx.update({k: v for k, v in extra.items() if v is not None})
    return ctx


class UnknownSideEffectError(ValueError):
    pass


class SideEffectExecutor:
    def __init__(
        self,
        notifications: NotificationDispatcher,
        users: UserDirectory,
        email_sender: EmailSender,
        frontend_url: str,
    ) -> None:
        self.notifications = notifications
        self.users = users
        self.email_sender = email_sender
        self.frontend_url = frontend_url.rstrip("/")

    async def aclose(self) -> None:
        aclose = getattr(self.email_sender, "aclose", None)
        if aclose is not None:
            await aclose()

    async def __call__(self, job: SideEffectJob) -> None:
        if job.kind is EffectKind.EMAIL:
            await self.send_email(job.name, job.context)
        else:
            await self.create_notification(job.name, job.context)

    # ---- email ----
    def render_email(self, name: str, ctx: Mapping[str, Any]) -> EmailMessage:
        to, customer, number = ctx["customer_email"], ctx["customer_name"], ctx["order_number"]
        if name == "order_confirmation":
            items = [
                {"name": i["name"], "quantity": i["quantity"], "price": _major(i["price"])}
                for i in ctx.get("items", [])
            ]
            return email_templates.order_confirmation(
                to, customer, number, items, _major(ctx["total"]), self.frontend_url
            )
        if name == "order_shipped":
            return email_templates.order_shipped(
                to, customer, number, self.frontend_url, ctx.get("tracking_number")
            )
        if name == "order_delivered":
            return email_templates.order_delivered(to, customer, number, self.frontend_url)
        if name == "payment_failed":
            reason = ctx.get("reason") or "Payment was declined"
            return email_templates.payment_failed(to, customer, number, reason, self.frontend_url)
        if name == "refund_confirmation":
            amount = _major(ctx.get("refund_amount", ctx["total"]))
            return email_templates.refund_confirmation(to, customer, number, amount, self.frontend_url)
        raise UnknownSideEffectError(f"unknown email template: {name}")

    async def send_email(self, name: str, ctx: Mapping[str, Any]) -> None:
        message = self.render_email(name, ctx)
        await self.email_sender.send(message)
        logger.info("email_sent", template=name, order_id=ctx.get("order_id"), to=message.to)

    # ---- in-app notification ----
    def render_notification(self, name: str, ctx: Mapping[str, Any]) -> NotificationTemplate:
        number = ctx["order_number"]
        builders: dict[str, Callable[[], NotificationTemplate]] = {
            "order_confirmed": lambda: notification_templates.order_confirmed(number, float(_major(ctx["total"]))),
            "payment_received": lambda: notification_templates.payment_received(number),
            "order_shipped": lambda: notification_templates.order_shipped(number, ctx.get("tracking_number")),
            "order_delivered": lambda: notification_templates.order_delivered(number),
            "order_cancelled": lambda: notification_templates.order_cancelled(number),
            "payment_failed": lambda: notification_templates.payment_failed(number, ctx.get("reason")),
            "refund_processed": lambda: notification_templates.refund_processed(
                number,
                float(_major(ctx["refund_amount"])) if ctx.get("refund_amount") is not None else None,
            ),
        }
        builder = builders.get(name)
        if builder is None:
            raise UnknownSideEffectError(f"unknown notification template: {name}")
        return builder()

    async def create_notification(self, name: str, ctx: Mapping[str, Any]) -> None:
        template = self.render_notification(name, ctx)
        user = await self.users.get_user_by_email(ctx["customer_email"])
        if user is None:
            # 顾客没有账号：静默跳过，邮件照常发送
            logger.debug("notification_skipped_no_account", template=name, order_id=ctx.get("order_id"))
            return
        await self.notifications.notify_template(user.id, template, extra={"orderId": ctx.get("order_id")})
