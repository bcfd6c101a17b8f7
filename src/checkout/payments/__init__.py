"""Payment service factory.

Provides get_payment_service() / set_payment_service() to swap implementations:
- FakePaymentService for development and testing (default)
- HttpPaymentService when PAYMENT_ADAPTER=http
"""

from checkout.config import load_settings
from checkout.payments.port import PaymentService

_current_payment_service: PaymentService | None = None


def get_payment_service() -> PaymentService:
    global _current_payment_service
    if _current_payment_service is None:
        settings = load_settings()
        if settings.payment_adapter == "fake":
            from checkout.payments.fake_adapter import FakePaymentService

            _current_payment_service = FakePaymentService()
        elif settings.payment_adapter == "http":
            if not settings.payment_service_url:
                raise ValueError("PAYMENT_ADAPTER=http requires PAYMENT_SERVICE_URL")
            from checkout.payments.http_adapter import HttpPaymentService

            _current_payment_service = HttpPaymentService(settings.payment_service_url, api_key=settings.service_api_key)
        else:
            raise ValueError(f"Unknown payment adapter: {settings.payment_adapter}")
    return _current_payment_service


def set_payment_service(service: PaymentService) -> None:
    """Override the active payment service (useful for tests)."""
    global _current_payment_service
    _current_payment_service = service


def reset_payment_service() -> None:
    global _current_payment_service
    _current_payment_service = None
