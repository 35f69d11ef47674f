"""
Webhook signature verification (HMAC-SHA256 over canonical JSON).

The canonical form is the payload serialised as compact JSON with sorted
keys, UTF-8 encoded. Signatures are lowercase hex digests.
"""
from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Mapping, Optional


def canonicalize(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(dict(payload), sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sign(payload: Mapping[str, Any], secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), canonicalize(payload), hashlib.sha256).hexdigest()


class WebhookVerifier:
    """Verify(payload, signature, secret) -> bool；任何异常输入都返回 False，从不抛出"""

    def __init__(self, secret: Optional[str] = None) -> None:
        self.secret = secret

    def verify(
        self,
        payload: Mapping[str, Any],
        signature: Optional[str],
        secret: Optional[str] = None,
    ) -> bool:
        key = secret if secret is not None else self.secret
        if not key or not signature or not isinstance(signature, str):
            return False
        try:
            expected = sign(payload, key)
        except (TypeError, ValueError):
            return False
        # compare_digest 对长度不同的输入直接返回 False，比较时间与前缀匹配长度无关
        return hmac.compare_digest(
            expected.encode("ascii"),
            signature.encode("utf-8", "surrogateescape"),
        )
