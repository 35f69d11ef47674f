"""
业务状态码（各层共享）

响应体中的 code 字段取自这里；HTTP 状态码的映射见 core.exceptions。
支付网关相关的码与 Tranzila 响应码表放在 shared.codes.payment_codes。
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    SUCCESS = 0

    # 请求参数（1xxxx）
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_TYPE_ERROR = 10002
    PARAM_VALIDATION_ERROR = 10003
    INVALID_STATUS = 10004  # 订单状态不在允许的取值内

    # 业务（2xxxx）
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006
    ORDER_NOT_FOUND = 20010
    NOTIFICATION_NOT_FOUND = 20020

    # 认证与授权（3xxxx）
    PERMISSION_ERROR = 30000
    UNAUTHORIZED = 30001
    FORBIDDEN = 30002
    TOKEN_INVALID = 30003
    TOKEN_EXPIRED = 30004

    # 系统（4xxxx）
    SYSTEM_ERROR = 40000
    NETWORK_ERROR = 40002
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
