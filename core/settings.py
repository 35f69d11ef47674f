"""
Payment-related settings using pydantic-settings v2 with nested env keys.

Kept apart from core.config.Settings so gateway credentials can be rotated
(and reloaded in tests) without touching the application settings.
"""
from __future__ import annotations

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field


# Values shipped in sample .env files; treated the same as "not configured"
PLACEHOLDER_CREDENTIALS = {
    "your_supplier_id",
    "your_terminal_id",
    "your_terminal",
    "your_password",
    "changeme",
}


class TranzilaSettings(BaseModel):
    supplier: Optional[str] = None
    terminal: Optional[str] = None
    password: Optional[str] = None
    sandbox: bool = False
    currency: str = "1"  # 1 = ILS
    lang: str = "il"
    base_url: str = "https://direct.tranzila.com"

    def is_complete(self) -> bool:
        """True when every credential is present and none is a placeholder."""
        values = (self.supplier, self.terminal, self.password)
        if not all(values):
            return False
        return not any(v.strip().lower() in PLACEHOLDER_CREDENTIALS for v in values)


class WebhookSettings(BaseModel):
    secret: Optional[str] = None
    signature_header: str = "X-Webhook-Signature"
    dedup_ttl_seconds: int = 7 * 24 * 3600
    ip_allowlist: list[str] | None = None  # Optional IPs/CIDRs allowed to post webhooks
    log_capacity: int = 1000  # 回调审计日志保留条数


class PaymentSettings(BaseSettings):
    tranzila: TranzilaSettings = Field(default_factory=TranzilaSettings)
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAYMENT__",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()
