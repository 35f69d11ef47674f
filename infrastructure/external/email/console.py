"""
Console email sender: writes the message to the structured log.

Default backend for development; nothing leaves the process.
"""
from __future__ import annotations

import re

from application.ports.email import EmailMessage, EmailSender
from core.logging_config import get_logger


logger = get_logger(__name__)

_TAG = re.compile(r"<[^>]*>")


class ConsoleEmailSender(EmailSender):
    def __init__(self, sender: str = "") -> None:
        self.sender = sender

    async def send(self, message: EmailMessage) -> None:  # type: ignore[override]
        body = message.text or _TAG.sub("", message.html)
        logger.info(
            "email_console_delivery",
            sender=self.sender,
            to=message.to,
            subject=message.subject,
            body=body,
        )
