"""Payment checkout port (abstract interface).

Creates a hosted checkout at the payment provider and returns the URL to
redirect the user to. The request is validated locally first so a malformed
checkout never reaches the provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from urllib.parse import urlparse

from protean.exceptions import ValidationError

from checkout.auth import AuthSession

PAY_TYPES = frozenset(
    {"order", "video", "program", "professor_subscription", "event_ticket", "platform_subscription"}
)
MAX_ITEMS = 100
MAX_QUANTITY = 1000


@dataclass(frozen=True)
class CheckoutItem:
    id: str
    name: str
    price: Decimal
    quantity: int
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": float(self.price),
            "quantity": self.quantity,
            "metadata": dict(self.metadata),
        }


def _is_url(value: str) -> bool:
    parsed = urlparse(value or "")
    return bool(parsed.scheme and parsed.netloc)


def validate_checkout(pay_type: str, items: list[CheckoutItem], success_url: str, cancel_url: str) -> None:
    """Raise ValidationError unless the checkout request is well formed."""
    errors: dict[str, list[str]] = {}
    if pay_type not in PAY_TYPES:
        errors["payment_type"] = ["Invalid payment_type"]

    if not items:
        errors["items"] = ["items array cannot be empty"]
    elif len(items) > MAX_ITEMS:
        errors["items"] = [f"items array cannot exceed {MAX_ITEMS} items"]
    for index, item in enumerate(items):
        if not item.id:
            errors.setdefault("items", []).append(f"Item {index}: id is required and must be a string")
        if not item.name:
            errors.setdefault("items", []).append(f"Item {index}: name is required and must be a string")
        if item.price < 0:
            errors.setdefault("items", []).append(f"Item {index}: price must be a non-negative number")
        if not 1 <= item.quantity <= MAX_QUANTITY:
            errors.setdefault("items", []).append(f"Item {index}: quantity must be between 1 and {MAX_QUANTITY}")

    if not _is_url(success_url):
        errors["success_url"] = ["success_url must be a valid URL"]
    if not _is_url(cancel_url):
        errors["cancel_url"] = ["cancel_url must be a valid URL"]

    if errors:
        raise ValidationError(errors)


class PaymentService(ABC):
    @abstractmethod
    async def create_checkout(
        self,
        pay_type: str,
        items: list[CheckoutItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
        session: AuthSession,
    ) -> str:
        """Create a hosted checkout and return its URL.

        Raises ValidationError, AuthError or ExternalServiceError.
        """
        ...
