"""
通知仓储接口
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from .entity import Notification


class NotificationRepository(ABC):
    """通知仓储抽象接口：按用户维护有序（最新在前）的通知列表"""

    @abstractmethod
    async def add(self, notification: Notification) -> Notification:
        """保存通知并放到该用户列表的最前面"""
        pass

    @abstractmethod
    async def get_by_id(self, notification_id: str) -> Optional[Notification]:
        pass

    @abstractmethod
    async def list_by_user(self, user_id: str, limit: int = 50) -> List[Notification]:
        """最近的 limit 条通知，最新在前"""
        pass

    @abstractmethod
    async def count_unread(self, user_id: str) -> int:
        pass

    @abstractmethod
    async def mark_read(self, notification_id: str) -> Optional[Notification]:
        pass

    @abstractmethod
    async def mark_all_read(self, user_id: str) -> int:
        """返回本次从未读变为已读的数量"""
        pass

    @abstractmethod
    async def delete(self, notification_id: str) -> bool:
        """删除通知，同时从用户列表中移除"""
        pass
