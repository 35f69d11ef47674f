"""
支付网关回调路由

签名校验完成后始终返回 200（接受/拒绝只在内部记录），避免网关重试风暴。
请求体支持 JSON 与 application/x-www-form-urlencoded。
"""
from __future__ import annotations

import ipaddress
from typing import Any
from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies import get_current_admin, get_order_service
from application.dtos.payments import WebhookAck, WebhookKind, WebhookLogListDTO
from application.services.order_service import OrderService
from core.logging_config import get_logger
from core.response import success_response
from core.settings import payment_settings


router = APIRouter(prefix="/webhooks", tags=["支付回调"])
logger = get_logger(__name__)


async def _read_fields(request: Request) -> dict[str, Any]:
    content_type = (request.headers.get("content-type") or "").lower()
    body = await request.body()
    if not body:
        return {}
    if "application/x-www-form-urlencoded" in content_type:
        return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))
    try:
        data = await request.json()
    except ValueError:
        logger.warning("webhook_body_not_json", content_type=content_type)
        return {}
    return data if isinstance(data, dict) else {}


def _ip_permitted(remote_ip: str | None) -> bool:
    allowlist = payment_settings.webhook.ip_allowlist or []
    if not allowlist:
        return True
    if not remote_ip:
        return False
    try:
        rip = ipaddress.ip_address(remote_ip)
    except ValueError:
        return False
    for entry in allowlist:
        if "/" in entry:
            try:
                if rip in ipaddress.ip_network(entry, strict=False):
                    return True
            except ValueError:
                logger.warning("webhook_allowlist_entry_invalid", entry=entry)
        elif remote_ip == entry:
            return True
    return False


async def _handle(provider: str, kind: WebhookKind, request: Request, service: OrderService):
    remote_ip = getattr(request.state, "client_ip", None) or (request.client.host if request.client else None)
    if not _ip_permitted(remote_ip):
        logger.warning("webhook_ip_not_allowed", provider=provider, remote_ip=remote_ip)
        return success_response(data=WebhookAck(accepted=False), message="Webhook received")

    fields = await _read_fields(request)
    signature = request.headers.get(payment_settings.webhook.signature_header)
    result = await service.apply_webhook(provider, fields, signature, kind=kind)

    ack = WebhookAck(
        accepted=result.accepted,
        duplicate=result.duplicate,
        order_id=result.order.id if result.order else None,
        status=result.order.status.value if result.order else None,
    )
    return success_response(data=ack, message="Webhook received")


@router.get("/logs", summary="最近的回调审计日志", dependencies=[Depends(get_current_admin)])
async def webhook_logs(
    limit: int = Query(50, ge=1, description="超过 200 按 200 处理"),
    service: OrderService = Depends(get_order_service),
):
    logs, total = await service.webhook_logs(min(limit, 200))
    return success_response(data=WebhookLogListDTO(logs=logs, total=total))


@router.post("/{provider}/refund", summary="网关退款回调")
async def refund_webhook(provider: str, request: Request, service: OrderService = Depends(get_order_service)):
    return await _handle(provider, WebhookKind.REFUND, request, service)


@router.post("/{provider}", summary="网关支付回调")
async def payment_webhook(provider: str, request: Request, service: OrderService = Depends(get_order_service)):
    return await _handle(provider, WebhookKind.PAYMENT, request, service)
