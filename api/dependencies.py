"""
API依赖项 - 服务注入与认证授权

认证由外部身份服务负责签发 JWT，这里只做校验并读取 sub/email/role 声明。
"""
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from api.container import Container
from application.services.notification_service import NotificationDispatcher
from application.services.order_service import OrderService
from core.config import settings
from core.exceptions import ForbiddenException, TokenExpiredException, UnauthorizedException
from core.logging_config import get_logger


logger = get_logger(__name__)

# HTTP Bearer for direct API calls
http_bearer = HTTPBearer(
    scheme_name="Bearer",
    description="JWT Bearer token issued by the identity service",
    auto_error=False,
)


class CurrentUser(BaseModel):
    id: str
    email: Optional[str] = None
    role: str = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_order_service(container: Container = Depends(get_container)) -> OrderService:
    return container.orders


def get_notification_dispatcher(container: Container = Depends(get_container)) -> NotificationDispatcher:
    return container.notifications


async def get_token(
    bearer_token: Optional[HTTPAuthorizationCredentials] = Depends(http_bearer),
) -> str:
    if bearer_token and bearer_token.credentials:
        return bearer_token.credentials
    raise UnauthorizedException("Authentication required")


def decode_access_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredException()
    except jwt.PyJWTError as e:
        logger.warning("invalid_access_token", error=str(e))
        raise UnauthorizedException("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise UnauthorizedException("Invalid token")
    return CurrentUser(id=str(user_id), email=payload.get("email"), role=payload.get("role") or "user")


async def get_current_user(token: str = Depends(get_token)) -> CurrentUser:
    """获取当前登录用户"""
    return decode_access_token(token)


async def get_current_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """获取当前管理员用户"""
    if not current_user.is_admin:
        raise ForbiddenException()
    return current_user
