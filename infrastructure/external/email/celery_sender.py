"""
Celery-backed email sender: hands the rendered message to the `emails.send`
task. In development/testing the Celery app runs eagerly, so the task body
executes inline on a worker thread.
"""
from __future__ import annotations

import asyncio

from application.ports.email import EmailMessage, EmailSender
from core.logging_config import get_logger


logger = get_logger(__name__)


class CeleryEmailSender(EmailSender):
    async def send(self, message: EmailMessage) -> None:  # type: ignore[override]
        from infrastructure.tasks.utils.dispatcher import TaskDispatcher

        # apply_async 可能阻塞在 broker 连接上，放到线程里执行
        task_id = await asyncio.to_thread(TaskDispatcher().send_email, message.model_dump())
        logger.info("email_task_enqueued", to=message.to, subject=message.subject, task_id=task_id)
