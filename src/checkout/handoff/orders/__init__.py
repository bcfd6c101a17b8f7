"""Order validation service factory.

Provides get_order_service() / set_order_service() to swap implementations:
- FakeOrderService for development and testing (default)
- HttpOrderService when ORDER_SERVICE_ADAPTER=http
"""

from checkout.config import load_settings
from checkout.handoff.orders.port import OrderValidationService

_current_order_service: OrderValidationService | None = None


def get_order_service() -> OrderValidationService:
    global _current_order_service
    if _current_order_service is None:
        settings = load_settings()
        if settings.order_service_adapter == "fake":
            from checkout.handoff.orders.fake_adapter import FakeOrderService
            from checkout.reconciliation.registry import get_registry

            _current_order_service = FakeOrderService(registry=get_registry())
        elif settings.order_service_adapter == "http":
            if not settings.order_service_url:
                raise ValueError("ORDER_SERVICE_ADAPTER=http requires ORDER_SERVICE_URL")
            from checkout.handoff.orders.http_adapter import HttpOrderService

            _current_order_service = HttpOrderService(settings.order_service_url, api_key=settings.service_api_key)
        else:
            raise ValueError(f"Unknown order service adapter: {settings.order_service_adapter}")
    return _current_order_service


def set_order_service(service: OrderValidationService) -> None:
    """Override the active order service (useful for tests)."""
    global _current_order_service
    _current_order_service = service


def reset_order_service() -> None:
    global _current_order_service
    _current_order_service = None
