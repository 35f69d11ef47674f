"""缓存层对外暴露的接口"""
from .webhook_dedup import (
    InMemoryWebhookDedupStore,
    RedisWebhookDedupStore,
    build_webhook_dedup_store,
)

__all__ = [
    "InMemoryWebhookDedupStore",
    "RedisWebhookDedupStore",
    "build_webhook_dedup_store",
]
