"""Configurable fake payment service for development and testing."""

from uuid import uuid4

from checkout.auth import AuthSession
from checkout.errors import ExternalServiceError
from checkout.payments.port import CheckoutItem, PaymentService, validate_checkout


class FakePaymentService(PaymentService):
    def __init__(self, base_url: str = "https://checkout.example.test/pay") -> None:
        self.base_url = base_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment provider unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment provider unavailable") -> None:
        """Configure service behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    async def create_checkout(
        self,
        pay_type: str,
        items: list[CheckoutItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        session: AuthSession,
    ) -> str:
        validate_checkout(pay_type, items, success_url, cancel_url)
        self.calls.append(
            {
                "method": "create_checkout",
                "pay_type": pay_type,
                "items": [item.to_dict() for item in items],
                "metadata": dict(metadata),
                "success_url": success_url,
                "cancel_url": cancel_url,
                "user_id": session.user_id,
            }
        )
        if not self.should_succeed:
            raise ExternalServiceError(self.failure_reason, status=502)
        return f"{self.base_url}/cs_test_{uuid4().hex[:16]}"
