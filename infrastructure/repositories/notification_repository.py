"""
通知仓储实现 - 进程内存存储

维护两份结构：id -> Notification 的平铺映射，以及每个用户最新在前的 id 列表。
"""
import asyncio
from collections import defaultdict
from typing import Dict, List, Optional

from domain.notification.entity import Notification
from domain.notification.repository import NotificationRepository


class InMemoryNotificationRepository(NotificationRepository):
    def __init__(self) -> None:
        self._by_id: Dict[str, Notification] = {}
        self._by_user: Dict[str, List[str]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def add(self, notification: Notification) -> Notification:
        async with self._lock:
            self._by_id[notification.id] = notification
            self._by_user[notification.user_id].insert(0, notification.id)
        return notification.snapshot()

    async def get_by_id(self, notification_id: str) -> Optional[Notification]:
        n = self._by_id.get(notification_id)
        return n.snapshot() if n else None

    async def list_by_user(self, user_id: str, limit: int = 50) -> List[Notification]:
        ids = self._by_user.get(user_id, [])[:limit]
        return [self._by_id[i].snapshot() for i in ids if i in self._by_id]

    async def count_unread(self, user_id: str) -> int:
        ids = self._by_user.get(user_id, [])
        return sum(1 for i in ids if i in self._by_id and not self._by_id[i].read)

    async def mark_read(self, notification_id: str) -> Optional[Notification]:
        async with self._lock:
            n = self._by_id.get(notification_id)
            if n is None:
                return None
            n.mark_read()
            return n.snapshot()

    async def mark_all_read(self, user_id: str) -> int:
        async with self._lock:
            flipped = 0
            for i in self._by_user.get(user_id, []):
                n = self._by_id.get(i)
                if n is not None and n.mark_read():
                    flipped += 1
            return flipped

    async def delete(self, notification_id: str) -> bool:
        async with self._lock:
            n = self._by_id.pop(notification_id, None)
            if n is None:
                return False
            ids = self._by_user.get(n.user_id)
            if ids and notification_id in ids:
                ids.remove(notification_id)
            return True
