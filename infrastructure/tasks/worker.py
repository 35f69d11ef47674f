"""Celery worker 入口：只在 EMAIL__BACKEND=celery 时需要单独运行。

    python -m infrastructure.tasks.worker
"""
from __future__ import annotations

import os

from core.logging_config import configure_logging
from .config.celery import celery_app


def main() -> None:
    configure_logging()
    queues = ",".join(q.name for q in celery_app.conf.task_queues)
    celery_app.worker_main(
        argv=[
            "worker",
            "--loglevel=INFO",
            "--hostname=order-engine@%h",
            f"--queues={queues}",
            f"--concurrency={os.getenv('CELERY_CONCURRENCY', '2')}",
        ]
    )


if __name__ == "__main__":
    main()
