"""Order validation service port.

The order service re-prices the cart server side, checks stock, creates the
pending order and one placeholder attendee record per ticket unit. It is an
external collaborator; the checkout engine only builds the request and reads
the validated result.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from checkout.attendees.allocator import AttendeeSlot
from checkout.auth import AuthSession
from checkout.cart.items import ProductRef, TicketTypeRef


@dataclass(frozen=True)
class ContactInfo:
    name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    notes: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class ProductOrderItem:
    product: ProductRef
    quantity: int
    selected_size: str | None = None

    def to_dict(self) -> dict[str, Any]:
        item = {"product_id": self.product.id, "quantity": self.quantity}
        if self.selected_size:
            item["selected_size"] = self.selected_size
        return item


@dataclass(frozen=True)
class TicketOrderItem:
    ticket_type: TicketTypeRef
    quantity: int

    def to_dict(self) -> dict[str, Any]:
        return {"event_ticket_type_id": self.ticket_type.id, "quantity": self.quantity}


@dataclass(frozen=True)
class OrderRequest:
    product_items: tuple[ProductOrderItem, ...]
    ticket_items: tuple[TicketOrderItem, ...]
    shipping_info: ContactInfo
    attendees_by_ticket_type: dict[str, list[AttendeeSlot]] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return {
            "items": [item.to_dict() for item in (*self.product_items, *self.ticket_items)],
            "shipping_info": self.shipping_info.to_dict(),
            "attendees": {
                ticket_type_id: [slot.to_dict() for slot in slots]
                for ticket_type_id, slots in self.attendees_by_ticket_type.items()
            },
        }


@dataclass(frozen=True)
class ValidatedItem:
    product_name: str
    quantity: int
    unit_price: Decimal
    product_id: str | None = None
    event_ticket_type_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def target_id(self) -> str:
        return self.product_id or self.event_ticket_type_id or ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidatedItem":
        return cls(
            product_name=str(data.get("product_name", "")),
            quantity=int(data["quantity"]),
            unit_price=Decimal(str(data["unit_price"])),
            product_id=data.get("product_id"),
            event_ticket_type_id=data.get("event_ticket_type_id"),
            details=dict(data.get("details") or {}),
        )


@dataclass(frozen=True)
class ValidatedOrder:
    order_id: str
    total_amount: Decimal
    validated_items: tuple[ValidatedItem, ...]


class OrderValidationService(ABC):
    @abstractmethod
    async def validate_and_create_order(self, request: OrderRequest, session: AuthSession) -> ValidatedOrder:
        """Validate, price and create the pending order.

        Raises ValidationError with per-field reasons, AuthError when the
        session is rejected, ExternalServiceError for anything else.
        """
        ...
