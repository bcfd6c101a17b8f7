"""Checkout API package."""

from checkout.api.errors import register_error_handlers
from checkout.api.routes import router

__all__ = ["register_error_handlers", "router"]
