"""
UserDirectory adapter backed by a process-local map.

The real identity service is an external collaborator; this adapter is
what the composition root wires in until one is available, and what the
tests seed with accounts.
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from application.ports.identity import UserDirectory, UserRef


class InMemoryUserDirectory(UserDirectory):
    def __init__(self, users: Optional[Iterable[UserRef]] = None) -> None:
        self._by_email: Dict[str, UserRef] = {}
        for user in users or ():
            self.register(user)

    @staticmethod
    def _key(email: str) -> str:
        return email.strip().lower()

    def register(self, user: UserRef) -> UserRef:
        self._by_email[self._key(user.email)] = user
        return user

    async def get_user_by_email(self, email: str) -> Optional[UserRef]:
        if not email:
            return None
        return self._by_email.get(self._key(email))
