"""
站内通知应用服务 - NotificationDispatcher

负责按用户记录通知、查询与已读状态维护；模板文案见 domain.notification.templates。
"""
from __future__ import annotations

from typing import Any, List, Optional

from core.logging_config import get_logger
from domain.common.exceptions import NotificationForbiddenException, NotificationNotFoundException
from domain.notification.entity import Notification, NotificationType, generate_notification_id
from domain.notification.repository import NotificationRepository
from domain.notification.templates import NotificationTemplate

logger = get_logger(__name__)


class NotificationDispatcher:
    def __init__(self, repository: NotificationRepository) -> None:
        self.repository = repository

    async def notify(
        self,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            id=generate_notification_id(),
            user_id=user_id,
            type=NotificationType(type),
            title=title,
            message=message,
            data=data,
        )
        saved = await self.repository.add(notification)
        logger.info("notification_created", notification_id=saved.id, user_id=user_id, type=saved.type.value)
        return saved

    async def notify_template(
        self,
        user_id: str,
        template: NotificationTemplate,
        extra: Optional[dict[str, Any]] = None,
    ) -> Notification:
        data = dict(template.data)
        if extra:
            data.update(extra)
        return await self.notify(user_id, template.type, template.title, template.message, data)

    async def list(self, user_id: str, limit: int = 50) -> List[Notification]:
        return await self.repository.list_by_user(user_id, limit=max(0, limit))

    async def unread_count(self, user_id: str) -> int:
        return await self.repository.count_unread(user_id)

    async def get_owned(self, notification_id: str, user_id: str) -> Notification:
        notification = await self.repository.get_by_id(notification_id)
        if notification is None:
            raise NotificationNotFoundException(notification_id)
        if notification.user_id != user_id:
            raise NotificationForbiddenException()
        return notification

    async def mark_read(self, notification_id: str, user_id: Optional[str] = None) -> Notification:
        """标记已读。提供 user_id 时校验归属"""
        if user_id is not None:
            await self.get_owned(notification_id, user_id)
        notification = await self.repository.mark_read(notification_id)
        if notification is None:
            raise NotificationNotFoundException(notification_id)
        return notification

    async def mark_all_read(self, user_id: str) -> int:
        count = await self.repository.mark_all_read(user_id)
        logger.info("notifications_marked_read", user_id=user_id, count=count)
        return count

    async def delete(self, notification_id: str, user_id: Optional[str] = None) -> bool:
        """删除通知；user_id 不匹配时视同不存在"""
        if user_id is not None:
            notification = await self.repository.get_by_id(notification_id)
            if notification is None or notification.user_id != user_id:
                return False
        return await self.repository.delete(notification_id)
