"""
Outbound email port.
"""
from __future__ import annotations

from typing import Optional, Protocol

from pydantic import BaseModel


class EmailMessage(BaseModel):
    to: str
    subject: str
    html: str
    text: Optional[str] = None


class EmailSender(Protocol):
    """发送邮件；失败时抛异常，由调用方（副作用 worker）负责重试与记录"""

    async def send(self, message: EmailMessage) -> None: ...


__all__ = ["EmailMessage", "EmailSender"]
