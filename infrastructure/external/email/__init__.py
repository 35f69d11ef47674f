"""
Factory for email senders.
"""
from __future__ import annotations

from typing import Optional

from application.ports.email import EmailSender
from core.config import EmailSettings, settings


def build_transport_sender(config: Optional[EmailSettings] = None) -> EmailSender:
    """真正投递邮件的后端：配置了 ESP 地址走 HTTP，否则输出到日志"""
    config = config or settings.email
    if config.api_url:
        from .http_client import HttpEmailSender
        return HttpEmailSender(config)
    from .console import ConsoleEmailSender
    return ConsoleEmailSender(config.sender)


def get_email_sender(config: Optional[EmailSettings] = None) -> EmailSender:
    config = config or settings.email
    name = (config.backend or "console").lower()
    if name == "celery":
        from .celery_sender import CeleryEmailSender
        return CeleryEmailSender()
    if name == "http":
        from .http_client import HttpEmailSender
        return HttpEmailSender(config)
    if name == "console":
        from .console import ConsoleEmailSender
        return ConsoleEmailSender(config.sender)
    raise ValueError(f"Unsupported email backend: {name}")
