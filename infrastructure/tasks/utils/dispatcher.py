"""Small dispatching helpers to decouple Celery from callers."""
from __future__ import annotations

from typing import Any, Dict


class TaskDispatcher:
    """Internal facade used by infrastructure adapters to schedule tasks."""

    def send_email(self, message: Dict[str, Any]) -> str:
        """Schedule `emails.send`; honours eager mode in development/testing."""
        from ..tasks.email import send_email

        result = send_email.apply_async(kwargs={"message": message})
        return result.id
