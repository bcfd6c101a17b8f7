"""Remote cart factory.

Provides get_remote_cart() / set_remote_cart() to swap implementations:
- ProteanRemoteCart, rows persisted through the checkout domain (default)
- FakeRemoteCart for development and testing (REMOTE_CART_ADAPTER=fake)
"""

from checkout.cart.remote.port import RemoteCartService
from checkout.config import load_settings

_current_remote_cart: RemoteCartService | None = None


def get_remote_cart() -> RemoteCartService:
    """Return the configured remote cart service."""
    global _current_remote_cart
    if _current_remote_cart is None:
        adapter = load_settings().remote_cart_adapter
        if adapter == "protean":
            from checkout.cart.remote.protean_adapter import ProteanRemoteCart

            _current_remote_cart = ProteanRemoteCart()
        elif adapter == "fake":
            from checkout.cart.remote.fake_adapter import FakeRemoteCart

            _current_remote_cart = FakeRemoteCart()
        else:
            raise ValueError(f"Unknown remote cart adapter: {adapter}")
    return _current_remote_cart


def set_remote_cart(service: RemoteCartService) -> None:
    """Override the active remote cart (useful for tests)."""
    global _current_remote_cart
    _current_remote_cart = service


def reset_remote_cart() -> None:
    global _current_remote_cart
    _current_remote_cart = None
