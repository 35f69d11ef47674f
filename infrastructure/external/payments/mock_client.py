"""
Mock gateway used whenever real credentials are absent.
"""
from __future__ import annotations

from application.dtos.payments import CreateSession, PaymentSession
from infrastructure.external.payments.base import BaseGateway


MOCK_PAYMENT_URL = "mock://payment"


class MockGateway(BaseGateway):
    provider = "mock"
    is_mock = True
    session_prefix = "mock_sess"

    async def create_session(self, req: CreateSession) -> PaymentSession:  # type: ignore[override]
        session = PaymentSession(
            session_id=self.new_session_id(),
            url=MOCK_PAYMENT_URL,
            payload={
                "orderId": req.order_id,
                "amount": str(req.amount),
                "mock": "true",
            },
            is_mock=True,
        )
        self._log("mock_session_built", order_id=req.order_id, session_id=session.session_id)
        return session
