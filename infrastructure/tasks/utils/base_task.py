"""Common base task for Celery jobs"""
from __future__ import annotations

from typing import Any

from celery import Task
from core.logging_config import get_logger

logger = get_logger(__name__)

# 邮件正文等大字段不进日志
_SUMMARY_KEYS = ("to", "subject")


def _summarize(kwargs: dict[str, Any] | None) -> dict[str, Any]:
    summary: dict[str, Any] = {}
    for key, value in (kwargs or {}).items():
        if isinstance(value, dict):
            summary[key] = {k: value.get(k) for k in _SUMMARY_KEYS if k in value}
        else:
            summary[key] = value
    return summary


class BaseTask(Task):
    """Unified structured logging for failure, retry and success."""

    def on_failure(self, exc, task_id, args, kwargs, einfo):  # type: ignore[override]
        logger.error(
            "celery_task_failure",
            task_id=task_id,
            task_name=self.name,
            kwargs=_summarize(kwargs),
            exc=str(exc),
        )
        super().on_failure(exc, task_id, args, kwargs, einfo)

    def on_retry(self, exc, task_id, args, kwargs, einfo):  # type: ignore[override]
        logger.warning(
            "celery_task_retry",
            task_id=task_id,
            task_name=self.name,
            kwargs=_summarize(kwargs),
            retries=self.request.retries,
            exc=str(exc),
        )
        super().on_retry(exc, task_id, args, kwargs, einfo)

    def on_success(self, retval, task_id, args, kwargs):  # type: ignore[override]
        logger.info(
            "celery_task_success",
            task_id=task_id,
            task_name=self.name,
        )
        super().on_success(retval, task_id, args, kwargs)
