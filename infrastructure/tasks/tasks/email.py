"""Email related Celery tasks"""
from __future__ import annotations

import asyncio
from typing import Any

from ..config.celery import celery_app
from ..utils.base_task import BaseTask
from application.ports.email import EmailMessage
from core.logging_config import get_logger

logger = get_logger(__name__)


async def _deliver(message: EmailMessage) -> None:
    from infrastructure.external.email import build_transport_sender

    sender = build_transport_sender()
    try:
        await sender.send(message)
    finally:
        aclose = getattr(sender, "aclose", None)
        if aclose is not None:
            await aclose()


# 绑定到 celery_app：调度发生在 to_thread 的工作线程里，那里的 current_app 不是本应用
@celery_app.task(
    name="emails.send",
    bind=True,
    base=BaseTask,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    retry_kwargs={"max_retries": 5},
)
def send_email(self, message: dict[str, Any]) -> None:
    """Deliver a rendered order email through the configured transport."""
    msg = EmailMessage.model_validate(message)
    logger.info("send_email", to=msg.to, subject=msg.subject, attempt=self.request.retries)
    asyncio.run(_deliver(msg))
