"""
Celery 应用配置：目前只承载 emails.send 一个任务。

broker/backend 复用 REDIS__URL；开发与测试环境以 eager 模式同步执行。
"""
from __future__ import annotations

import os

from celery import Celery
from kombu import Queue

from core.config import settings
from core.logging_config import get_logger


CELERY_IMPORTS = (
    "infrastructure.tasks.tasks",
)


celery_app = Celery("order_engine")

celery_app.conf.update(
    broker_url=settings.redis.url or os.getenv("CELERY_BROKER_URL"),
    result_backend=settings.redis.url or os.getenv("CELERY_RESULT_BACKEND"),
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # 任务执行完成后再 ack，worker 崩溃时消息可被重新投递
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_track_started=True,
    result_expires=3600,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_default_retry_delay=5,
    task_queues=(
        Queue("high"),
        Queue("default"),
        Queue("low"),
    ),
    # 交易类邮件走 high 队列
    task_routes={
        "emails.*": {"queue": "high"},
    },
    # 单封邮件投递超过 60s 视为卡死；ESP 限速时在 worker 侧节流
    task_annotations={
        "emails.send": {"rate_limit": "30/s", "time_limit": 60, "soft_time_limit": 45},
    },
)

celery_app.conf.imports = CELERY_IMPORTS

if settings.is_eager_environment:
    celery_app.conf.task_always_eager = True
    celery_app.conf.task_eager_propagates = True

celery_app.autodiscover_tasks(packages=CELERY_IMPORTS)


logger = get_logger(__name__)


@celery_app.on_after_configure.connect
def _log_configuration(sender, **kwargs):
    logger.info("celery_configured", broker=sender.conf.broker_url, result_backend=sender.conf.result_backend)
