"""网关回调幂等键存储：内存实现 + Redis（SET NX EX）实现"""
from __future__ import annotations

import asyncio
import time
from typing import Dict

from redis import asyncio as aioredis

from core.config import RedisSettings
from core.logging_config import get_logger


logger = get_logger(__name__)


class InMemoryWebhookDedupStore:
    """进程内实现：key -> 过期时间（monotonic）"""

    def __init__(self, ttl_seconds: int = 7 * 24 * 3600) -> None:
        self._ttl = ttl_seconds
        self._seen: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    def _purge(self, now: float) -> None:
        expired = [k for k, exp in self._seen.items() if exp <= now]
        for k in expired:
            del self._seen[k]

    async def claim(self, key: str) -> bool:
        async with self._lock:
            now = time.monotonic()
            self._purge(now)
            if key in self._seen:
                return False
            self._seen[key] = now + self._ttl
            return True

    async def release(self, key: str) -> None:
        async with self._lock:
            self._seen.pop(key, None)

    async def aclose(self) -> None:
        return None


class RedisWebhookDedupStore:
    """多进程部署时使用；依赖 Redis 的 SET NX 原子性"""

    def __init__(self, client: aioredis.Redis, namespace: str = "", ttl_seconds: int = 7 * 24 * 3600) -> None:
        self._client = client
        self._namespace = namespace.strip(":")
        self._ttl = ttl_seconds

    def _format_key(self, key: str) -> str:
        base = f"webhook:{key}"
        if not self._namespace:
            return base
        return f"{self._namespace}:{base}"

    async def claim(self, key: str) -> bool:
        ok = await self._client.set(self._format_key(key), "1", ex=self._ttl, nx=True)
        return bool(ok)

    async def release(self, key: str) -> None:
        await self._client.delete(self._format_key(key))

    async def aclose(self) -> None:
        await self._client.aclose()


def build_webhook_dedup_store(
    redis_settings: RedisSettings,
    ttl_seconds: int,
) -> InMemoryWebhookDedupStore | RedisWebhookDedupStore:
    """配置了 REDIS__URL 时使用 Redis，否则退回进程内实现"""
    if not redis_settings.url:
        logger.info("webhook_dedup_store_selected", backend="memory")
        return InMemoryWebhookDedupStore(ttl_seconds)

    client = aioredis.from_url(
        redis_settings.url,
        encoding="utf-8",
        decode_responses=True,
        max_connections=redis_settings.max_connections,
    )
    logger.info("webhook_dedup_store_selected", backend="redis")
    return RedisWebhookDedupStore(client, namespace=redis_settings.namespace, ttl_seconds=ttl_seconds)
