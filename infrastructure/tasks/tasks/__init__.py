"""按领域划分的任务模块；导入即向 Celery 注册"""
from . import email  # noqa: F401

__all__ = ["email"]
