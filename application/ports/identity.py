"""
Identity port: the user/auth subsystem is an external collaborator.

The order engine only needs to resolve a customer email to an account id
so in-app notifications can be attached to it.
"""
from __future__ import annotations

from typing import Optional, Protocol

from pydantic import BaseModel


class UserRef(BaseModel):
    id: str
    email: str
    name: Optional[str] = None
    role: str = "user"


class UserDirectory(Protocol):
    async def get_user_by_email(self, email: str) -> Optional[UserRef]: ...


__all__ = ["UserRef", "UserDirectory"]
