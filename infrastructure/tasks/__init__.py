"""Celery 异步任务：邮件投递（EMAIL__BACKEND=celery 时启用）"""
from .config.celery import celery_app
from .utils.dispatcher import TaskDispatcher

__all__ = ["celery_app", "TaskDispatcher"]
