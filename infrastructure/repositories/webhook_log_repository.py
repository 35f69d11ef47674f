"""网关回调审计日志（进程内环形缓冲）"""
from __future__ import annotations

import asyncio
from collections import deque
from itertools import islice

from application.dtos.payments import WebhookLogEntry


class InMemoryWebhookLog:
    def __init__(self, capacity: int = 1000) -> None:
        # 新记录在左侧；超出容量时自动丢弃最旧的
        self._entries: deque[WebhookLogEntry] = deque(maxlen=max(capacity, 1))
        self._lock = asyncio.Lock()

    async def record(self, entry: WebhookLogEntry) -> None:
        async with self._lock:
            self._entries.appendleft(entry)

    async def recent(self, limit: int = 50) -> list[WebhookLogEntry]:
        async with self._lock:
            return [e.model_copy(deep=True) for e in islice(self._entries, max(limit, 0))]

    async def count(self) -> int:
        return len(self._entries)
