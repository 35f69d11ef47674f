"""
HTTP email sender for JSON ESP APIs (POST {from, to, subject, html, text}).

Transport errors and 5xx responses are retried with exponential backoff;
4xx responses fail immediately.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from application.ports.email import EmailMessage, EmailSender
from core.config import EmailSettings
from core.logging_config import get_logger


logger = get_logger(__name__)


class EmailDeliveryError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class RetryableEmailDeliveryError(EmailDeliveryError):
    pass


class HttpEmailSender(EmailSender):
    def __init__(self, config: EmailSettings, client: Optional[httpx.AsyncClient] = None) -> None:
        if not config.api_url:
            raise ValueError("EMAIL__API_URL 未配置，无法使用 http 邮件后端")
        self.config = config
        self._client = client

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        yield self._client

    async def aclose(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    async def _post(self, message: EmailMessage) -> None:
        body = {
            "from": self.config.sender,
            "to": message.to,
            "subject": message.subject,
            "html": message.html,
            "text": message.text,
        }
        async with self.client() as client:
            resp = await client.post(str(self.config.api_url), json=body, headers=self._headers())
        if resp.status_code >= 500:
            raise RetryableEmailDeliveryError(f"ESP server error: {resp.status_code}", resp.status_code)
        if resp.status_code >= 400:
            raise EmailDeliveryError(f"ESP rejected message: {resp.status_code}", resp.status_code)

    async def send(self, message: EmailMessage) -> None:  # type: ignore[override]
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(int(self.config.max_retries) + 1),
            wait=wait_exponential(multiplier=0.2, min=0.1, max=2.0),
            retry=retry_if_exception_type(
                (httpx.TimeoutException, httpx.TransportError, RetryableEmailDeliveryError)
            ),
            reraise=True,
        ):
            with attempt:
                await self._post(message)
        logger.info("email_http_delivery", to=message.to, subject=message.subject)
