"""领域层业务异常定义，供领域与基础设施使用。

核心（core）层仅负责全局映射与异常处理，尽量避免领域层反向依赖核心层。
"""
from __future__ import annotations

from typing import Iterable, Optional
from shared.codes import BusinessCode
from shared.codes.payment_codes import PaymentCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class OrderValidationException(BusinessException):
    """下单请求缺少必填字段或字段非法"""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(
            code=BusinessCode.PARAM_MISSING,
            message=message or f"Missing required field: {field}",
            error_type="ValidationError",
            details={"field": field},
            field=field,
        )


class InvalidOrderStatusException(BusinessException):
    def __init__(self, status: object, allowed: Iterable[str]):
        super().__init__(
            code=BusinessCode.INVALID_STATUS,
            message="Invalid status",
            error_type="ValidationError",
            details={"status": str(status), "allowed": sorted(allowed)},
            field="status",
        )


class OrderNotFoundException(BusinessException):
    def __init__(self, order_id: Optional[str] = None):
        details = {"order_id": order_id} if order_id else None
        super().__init__(
            code=BusinessCode.ORDER_NOT_FOUND,
            message="Order not found",
            error_type="OrderNotFound",
            details=details,
        )


class NotificationNotFoundException(BusinessException):
    def __init__(self, notification_id: Optional[str] = None):
        details = {"notification_id": notification_id} if notification_id else None
        super().__init__(
            code=BusinessCode.NOTIFICATION_NOT_FOUND,
            message="Notification not found",
            error_type="NotificationNotFound",
            details=details,
        )


class NotificationForbiddenException(BusinessException):
    def __init__(self):
        super().__init__(
            code=BusinessCode.FORBIDDEN,
            message="Forbidden",
            error_type="Forbidden",
        )


class UnsupportedProviderException(BusinessException):
    def __init__(self, provider: str):
        super().__init__(
            code=PaymentCode.UNSUPPORTED_PROVIDER,
            message=f"Unsupported payment provider: {provider}",
            error_type="UnsupportedProvider",
            details={"provider": provider},
        )
