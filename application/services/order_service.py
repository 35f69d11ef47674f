"""
Application service orchestrating the order lifecycle.

OrderService composes the order ledger (repository), the payment gateway
selected at startup, the webhook verifier and the status transition engine.
Side effects (emails, in-app notifications) are only *enqueued* here; the
primary ledger write always commits first and nothing on the request path
awaits their delivery.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional

from application.dtos.orders import CreateOrderDTO, OrderStatsDTO
from application.dtos.payments import (
    CreateSession,
    PaymentSession,
    WebhookEvent,
    WebhookKind,
    WebhookLogEntry,
    WebhookOutcome,
)
from application.ports.payment_gateway import (
    PaymentGateway,
    SignatureVerifier,
    WebhookDedupStore,
    WebhookLog,
    WebhookParser,
)
from application.ports.side_effects import SideEffectJob, SideEffectQueue
from application.services.side_effects import order_context
from core.logging_config import get_logger
from domain.common.exceptions import (
    OrderNotFoundException,
    OrderValidationException,
    UnsupportedProviderException,
)
from domain.order.entity import Order, OrderStatus
from domain.order.repository import OrderRepository
from domain.order.transitions import (
    ADMIN_ALLOWED_STATUSES,
    API_ALLOWED_STATUSES,
    EffectKind,
    SideEffect,
    StatusTransitionEngine,
    TransitionOrigin,
    parse_status,
)


logger = get_logger(__name__)


# 下单成功后的副作用（与状态流转无关）
_ORDER_CREATED_EFFECTS = (
    SideEffect(EffectKind.EMAIL, "order_confirmation"),
    SideEffect(EffectKind.NOTIFICATION, "order_confirmed"),
)

_OUTCOME_TO_STATUS = {
    WebhookOutcome.SUCCESS: OrderStatus.COMPLETED,
    WebhookOutcome.FAILED: OrderStatus.FAILED,
    WebhookOutcome.CANCELLED: OrderStatus.CANCELLED,
}


def _audit_details(event: WebhookEvent, fields: Mapping[str, Any]) -> dict[str, Any]:
    """审计日志只保留解析后的摘要；卡号仅留后四位"""
    details: dict[str, Any] = {
        "responseCode": event.response_code,
        "transactionId": event.transaction_id,
        "reference": event.reference,
        "reason": event.reason,
        "amount": event.amount,
    }
    ccno = fields.get("ccno")
    if ccno:
        details["maskedCard"] = f"****{str(ccno)[-4:]}"
    return {k: v for k, v in details.items() if v is not None}


@dataclass
class WebhookResult:
    """回调处理结果。accepted=False 表示被拒绝（签名/载荷/订单），不暴露具体原因"""
    accepted: bool
    order: Optional[Order] = None
    duplicate: bool = False


class OrderService:
    def __init__(
        self,
        orders: OrderRepository,
        gateway: PaymentGateway,
        verifier: SignatureVerifier,
        side_effects: SideEffectQueue,
        dedup: WebhookDedupStore,
        webhook_parsers: Optional[Mapping[str, WebhookParser]] = None,
        engine: Optional[StatusTransitionEngine] = None,
        frontend_url: str = "http://localhost:5173",
        webhook_log: Optional[WebhookLog] = None,
    ) -> None:
        self.orders = orders
        self.gateway = gateway
        self.verifier = verifier
        self.side_effects = side_effects
        self.dedup = dedup
        self.webhook_parsers = dict(webhook_parsers or {})
        self.engine = engine or StatusTransitionEngine()
        self.frontend_url = frontend_url.rstrip("/")
        self.webhook_log = webhook_log

    # ---------------------------------------------------------------- create
    @staticmethod
    def _validate(req: CreateOrderDTO) -> None:
        if not req.items:
            raise OrderValidationException("items", "Order must contain at least one item")
        if not req.total:
            raise OrderValidationException("total")
        if not req.customer_name:
            raise OrderValidationException("customerName")
        if not req.customer_email:
            raise OrderValidationException("customerEmail")

    async def create_order(self, req: CreateOrderDTO) -> tuple[Order, PaymentSession]:
        self._validate(req)
        order = await self.orders.insert(
            items=[item.to_entity() for item in req.items or []],
            total=int(req.total or 0),
            customer_name=req.customer_name or "",
            customer_email=req.customer_email or "",
        )
        logger.info("order_created", order_id=order.id, order_number=order.order_number, total=order.total)

        session = await self.gateway.create_session(
            CreateSession(
                order_id=order.id,
                amount=Decimal(order.total) / 100,
                description=f"Order {order.order_number}",
                customer_name=order.customer_name,
                customer_email=order.customer_email,
                success_url=f"{self.frontend_url}/checkout/success?orderId={order.id}",
                cancel_url=f"{self.frontend_url}/checkout/cancel?orderId={order.id}",
            )
        )
        attached = await self.orders.attach_payment_session(order.id, session.session_id)
        if attached is not None:
            order = attached
        logger.info(
            "payment_session_created",
            order_id=order.id,
            provider=self.gateway.provider,
            session_id=session.session_id,
            is_mock=session.is_mock,
        )

        self._enqueue_all(_ORDER_CREATED_EFFECTS, order_context(order))
        return order, session

    # ----------------------------------------------------------------- query
    async def get_order(self, order_id: str) -> Order:
        order = await self.orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return order

    async def list_orders(self, email: Optional[str] = None) -> list[Order]:
        return await self.orders.list(customer_email=email or None)

    async def admin_list_orders(
        self,
        status: Optional[str] = None,
        page: int = 1,
        size: int = 50,
    ) -> tuple[list[Order], int]:
        """按创建时间倒序分页；status 为空或 all 时不过滤"""
        orders = await self.orders.list()
        if status and status != "all":
            orders = [o for o in orders if o.status.value == status]
        total = len(orders)
        start = (max(page, 1) - 1) * size
        return orders[start:start + size], total

    async def stats(self) -> OrderStatsDTO:
        orders = await self.orders.list()
        today = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
        return OrderStatsDTO(
            total_revenue=sum(o.total for o in orders),
            orders_today=sum(1 for o in orders if o.created_at >= today),
            pending_orders=sum(1 for o in orders if o.status is OrderStatus.PENDING),
            open_orders=sum(1 for o in orders if not self.engine.is_terminal(o.status)),
            total_orders=len(orders),
        )

    # ----------------------------------------------------------- transitions
    async def set_status(
        self,
        order_id: str,
        status: Any,
        transaction_id: Optional[str] = None,
    ) -> Order:
        """顾客/通用接口：状态需在 API 白名单内"""
        target = parse_status(status, API_ALLOWED_STATUSES)
        return await self._transition(order_id, target, TransitionOrigin.API, transaction_id=transaction_id)

    async def admin_set_status(
        self,
        order_id: str,
        status: Any,
        transaction_id: Optional[str] = None,
        tracking_number: Optional[str] = None,
    ) -> Order:
        target = parse_status(status, ADMIN_ALLOWED_STATUSES)
        return await self._transition(
            order_id,
            target,
            TransitionOrigin.ADMIN,
            transaction_id=transaction_id,
            tracking_number=tracking_number,
        )

    async def _transition(
        self,
        order_id: str,
        target: OrderStatus,
        origin: TransitionOrigin,
        transaction_id: Optional[str] = None,
        **context: Any,
    ) -> Order:
        plan = self.engine.plan(target, origin)
        order = await self.orders.set_status(order_id, plan.target, transaction_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        logger.info(
            "order_status_changed",
            order_id=order.id,
            status=order.status.value,
            origin=origin.value,
            effects=[f"{e.kind.value}:{e.name}" for e in plan.effects],
        )
        self._enqueue_all(plan.effects, order_context(order, **context))
        return order

    # -------------------------------------------------------------- webhooks
    async def apply_webhook(
        self,
        provider: str,
        payload: Mapping[str, Any],
        signature: Optional[str],
        kind: WebhookKind = WebhookKind.PAYMENT,
    ) -> WebhookResult:
        parser = self.webhook_parsers.get(provider)
        if parser is None:
            raise UnsupportedProviderException(provider)

        if not self.verifier.verify(payload, signature):
            logger.warning("webhook_rejected", provider=provider, kind=kind.value)
            await self._audit(provider, "signature_invalid", "error", "Signature verification failed")
            return WebhookResult(accepted=False)

        try:
            event = parser.parse(payload, kind)
        except ValueError as exc:
            logger.warning("webhook_invalid_payload", provider=provider, kind=kind.value, error=str(exc))
            await self._audit(provider, "validation_error", "error", str(exc))
            return WebhookResult(accepted=False)

        details = _audit_details(event, payload)
        if not await self.dedup.claim(event.dedup_key):
            logger.info("webhook_duplicate", provider=provider, order_id=event.order_id, key=event.dedup_key)
            await self._audit(
                provider, "duplicate", "success", f"Duplicate webhook ignored: {event.dedup_key}",
                order_id=event.order_id, payload=details,
            )
            return WebhookResult(accepted=True, order=await self.orders.get_by_id(event.order_id), duplicate=True)

        try:
            order = await self._apply_event(event)
        except OrderNotFoundException:
            await self.dedup.release(event.dedup_key)
            logger.warning("webhook_order_not_found", provider=provider, order_id=event.order_id)
            await self._audit(
                provider, "order_not_found", "error", f"Order not found: {event.order_id}",
                order_id=event.order_id, payload=details,
            )
            return WebhookResult(accepted=False)
        except Exception as exc:
            await self.dedup.release(event.dedup_key)
            await self._audit(
                provider, "processing_error", "error", str(exc) or type(exc).__name__,
                order_id=event.order_id, payload=details,
            )
            raise

        succeeded = event.outcome is WebhookOutcome.SUCCESS
        summary = event.reason or ("Refund approved" if event.kind is WebhookKind.REFUND else "Transaction approved")
        await self._audit(
            provider,
            f"{event.kind.value}_{event.outcome.value}",
            "success" if succeeded else "error",
            f"{summary} - Order {order.order_number} -> {order.status.value}",
            order_id=order.id,
            payload=details,
        )
        return WebhookResult(accepted=True, order=order)

    async def webhook_logs(self, limit: int = 50) -> tuple[list[WebhookLogEntry], int]:
        if self.webhook_log is None:
            return [], 0
        return await self.webhook_log.recent(limit), await self.webhook_log.count()

    async def _audit(
        self,
        source: str,
        event: str,
        status: str,
        message: str,
        order_id: Optional[str] = None,
        payload: Optional[dict[str, Any]] = None,
    ) -> None:
        if self.webhook_log is None:
            return
        await self.webhook_log.record(
            WebhookLogEntry(
                source=source,
                event=event,
                order_id=order_id,
                status=status,
                message=message,
                payload=payload or {},
            )
        )

    async def _apply_event(self, event: WebhookEvent) -> Order:
        if event.kind is WebhookKind.REFUND:
            if event.outcome is not WebhookOutcome.SUCCESS:
                order = await self.get_order(event.order_id)
                logger.warning(
                    "refund_failed",
                    order_id=order.id,
                    response_code=event.response_code,
                    reason=event.reason,
                )
                return order
            return await self._transition(
                event.order_id,
                OrderStatus.CANCELLED,
                TransitionOrigin.REFUND_WEBHOOK,
                refund_amount=event.amount,
            )

        target = _OUTCOME_TO_STATUS[event.outcome]
        logger.info(
            "webhook_payment_outcome",
            provider=event.provider,
            order_id=event.order_id,
            outcome=event.outcome.value,
            response_code=event.response_code,
        )
        return await self._transition(
            event.order_id,
            target,
            TransitionOrigin.WEBHOOK,
            transaction_id=event.transaction_id if event.outcome is WebhookOutcome.SUCCESS else None,
            reason=event.reason,
        )

    # ------------------------------------------------------------ internals
    def _enqueue_all(self, effects: Iterable[SideEffect], context: dict[str, Any]) -> None:
        for effect in effects:
            job = SideEffectJob(kind=effect.kind, name=effect.name, context=dict(context))
            if not self.side_effects.enqueue(job):
                logger.error("side_effect_dropped", job_id=job.id, kind=effect.kind.value, name=effect.name)
