"""
Notification DTOs
"""
from __future__ import annotations

from typing import Any, Optional

from application.dto import DTOBase, UtcDatetime
from domain.notification.entity import Notification


class NotificationDTO(DTOBase):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    data: Optional[dict[str, Any]] = None
    read: bool
    created_at: UtcDatetime

    @classmethod
    def from_entity(cls, n: Notification) -> "NotificationDTO":
        return cls(
            id=n.id,
            user_id=n.user_id,
            type=n.type.value,
            title=n.title,
            message=n.message,
            data=n.data,
            read=n.read,
            created_at=n.created_at,
        )
