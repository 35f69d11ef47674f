"""
组合根：在应用启动时一次性装配仓储、网关、队列与应用服务。

FastAPI lifespan 调用 build_container() 并挂到 app.state.container，
路由通过 api.dependencies 取用；测试可直接构造自己的 Container。
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from application.ports.email import EmailSender
from application.ports.payment_gateway import PaymentGateway
from application.services.notification_service import NotificationDispatcher
from application.services.order_service import OrderService
from application.services.side_effects import SideEffectExecutor
from core.config import Settings, settings as app_settings
from core.settings import PaymentSettings, payment_settings as app_payment_settings
from infrastructure.cache.webhook_dedup import (
    InMemoryWebhookDedupStore,
    RedisWebhookDedupStore,
    build_webhook_dedup_store,
)
from infrastructure.external.email import get_email_sender
from infrastructure.external.payments import build_payment_gateway
from infrastructure.external.payments.signature import WebhookVerifier
from infrastructure.external.payments.webhooks import default_webhook_parsers
from infrastructure.identity.user_directory import InMemoryUserDirectory
from infrastructure.repositories.notification_repository import InMemoryNotificationRepository
from infrastructure.repositories.order_repository import InMemoryOrderRepository
from infrastructure.repositories.webhook_log_repository import InMemoryWebhookLog
from infrastructure.side_effects.inmemory import InMemorySideEffectQueue, SideEffectWorker


@dataclass
class Container:
    orders: OrderService
    notifications: NotificationDispatcher
    users: InMemoryUserDirectory
    gateway: PaymentGateway
    verifier: WebhookVerifier
    queue: InMemorySideEffectQueue
    worker: SideEffectWorker
    executor: SideEffectExecutor
    dedup: InMemoryWebhookDedupStore | RedisWebhookDedupStore
    webhook_log: InMemoryWebhookLog

    async def start(self) -> None:
        self.worker.start()

    async def shutdown(self) -> None:
        await self.worker.stop()
        await self.dedup.aclose()
        await self.executor.aclose()


def build_container(
    settings: Optional[Settings] = None,
    payment_settings: Optional[PaymentSettings] = None,
    *,
    users: Optional[InMemoryUserDirectory] = None,
    email_sender: Optional[EmailSender] = None,
    gateway: Optional[PaymentGateway] = None,
) -> Container:
    settings = settings or app_settings
    payment_settings = payment_settings or app_payment_settings

    users = users or InMemoryUserDirectory()
    notifications = NotificationDispatcher(InMemoryNotificationRepository())
    gateway = gateway or build_payment_gateway(payment_settings, public_api_url=settings.PUBLIC_API_URL)
    verifier = WebhookVerifier(payment_settings.webhook.secret)
    dedup = build_webhook_dedup_store(settings.redis, payment_settings.webhook.dedup_ttl_seconds)
    webhook_log = InMemoryWebhookLog(payment_settings.webhook.log_capacity)

    queue = InMemorySideEffectQueue(settings.side_effects.queue_max_size)
    executor = SideEffectExecutor(
        notifications=notifications,
        users=users,
        email_sender=email_sender or get_email_sender(settings.email),
        frontend_url=settings.FRONTEND_URL,
    )
    worker = SideEffectWorker(queue, executor, settings.side_effects)

    orders = OrderService(
        orders=InMemoryOrderRepository(),
        gateway=gateway,
        verifier=verifier,
        side_effects=queue,
        dedup=dedup,
        webhook_parsers=default_webhook_parsers(),
        frontend_url=settings.FRONTEND_URL,
        webhook_log=webhook_log,
    )
    return Container(
        orders=orders,
        notifications=notifications,
        users=users,
        gateway=gateway,
        verifier=verifier,
        queue=queue,
        worker=worker,
        executor=executor,
        dedup=dedup,
        webhook_log=webhook_log,
    )
