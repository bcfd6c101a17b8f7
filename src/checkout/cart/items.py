"""Cart line types — merchandise lines, event ticket lines and their keys.

Lines carry denormalized copies of the product or ticket type they refer to,
so the cart can be priced and rendered without another lookup. Everything
here is immutable: mutations build new values.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, NamedTuple


class LineKind(Enum):
    PRODUCT = "product"
    TICKET = "ticket"


class LineKey(NamedTuple):
    """Identity of a cart line: (kind, product or ticket type id, variant)."""

    kind: LineKind
    ref_id: str
    variant: str | None = None

    def __str__(self) -> str:
        if self.kind is LineKind.PRODUCT and self.variant:
            return f"{self.kind.value}:{self.ref_id}:{self.variant}"
        return f"{self.kind.value}:{self.ref_id}"

    @classmethod
    def parse(cls, value: str) -> "LineKey":
        """Parse ``product:<id>[:<variant>]`` or ``ticket:<id>``."""
        kind, _, rest = value.partition(":")
        if not rest:
            raise ValueError(f"Malformed line key: {value!r}")
        try:
            line_kind = LineKind(kind)
        except ValueError:
            raise ValueError(f"Malformed line key: {value!r}") from None
        if line_kind is LineKind.TICKET:
            return cls(line_kind, rest)
        ref_id, _, variant = rest.partition(":")
        return cls(line_kind, ref_id, variant or None)

    @classmethod
    def product(cls, product_id: str, variant: str | None = None) -> "LineKey":
        return cls(LineKind.PRODUCT, product_id, variant or None)

    @classmethod
    def ticket(cls, ticket_type_id: str) -> "LineKey":
        return cls(LineKind.TICKET, ticket_type_id)


@dataclass(frozen=True)
class TicketCategory:
    """One priced category of a multi-category event pass."""

    name: str
    price: float
    member_price: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "price": self.price, "member_price": self.member_price}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TicketCategory":
        return cls(
            name=str(data["name"]),
            price=float(data.get("price", 0)),
            member_price=float(data.get("member_price") or 0),
        )


@dataclass(frozen=True)
class ProductRef:
    id: str
    name: str
    price: float
    member_price: float = 0.0
    category: str = "merchandise"
    ticket_categories: tuple[TicketCategory, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "member_price": self.member_price,
            "category": self.category,
            "ticket_categories": [c.to_dict() for c in self.ticket_categories],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProductRef":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            price=float(data.get("price", 0)),
            member_price=float(data.get("member_price") or 0),
            category=str(data.get("category") or "merchandise"),
            ticket_categories=tuple(TicketCategory.from_dict(c) for c in data.get("ticket_categories") or ()),
        )


@dataclass(frozen=True)
class TicketTypeRef:
    """An event ticket category with its event and prices denormalized."""

    id: str
    event_id: str
    event_title: str
    category_name: str
    price: float
    member_price: float = 0.0
    event_start: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.event_title} - {self.category_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "event_title": self.event_title,
            "category_name": self.category_name,
            "price": self.price,
            "member_price": self.member_price,
            "event_start": self.event_start,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TicketTypeRef":
        return cls(
            id=str(data["id"]),
            event_id=str(data.get("event_id", "")),
            event_title=str(data.get("event_title", "")),
            category_name=str(data.get("category_name", "")),
            price=float(data.get("price", 0)),
            member_price=float(data.get("member_price") or 0),
            event_start=data.get("event_start"),
        )


@dataclass(frozen=True)
class LineItem:
    """Merchandise line."""

    product: ProductRef
    quantity: int
    selected_variant: str | None = None
    server_row_id: str | None = None

    @property
    def key(self) -> LineKey:
        return LineKey.product(self.product.id, self.selected_variant)

    def with_quantity(self, quantity: int) -> "LineItem":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "selected_variant": self.selected_variant,
            "server_row_id": self.server_row_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LineItem":
        return cls(
            product=ProductRef.from_dict(data["product"]),
            quantity=int(data["quantity"]),
            selected_variant=data.get("selected_variant") or None,
            server_row_id=data.get("server_row_id"),
        )


@dataclass(frozen=True)
class TicketLineItem:
    """N units of one event ticket category."""

    ticket_type: TicketTypeRef
    quantity: int
    server_row_id: str | None = None

    @property
    def key(self) -> LineKey:
        return LineKey.ticket(self.ticket_type.id)

    def with_quantity(self, quantity: int) -> "TicketLineItem":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ticket_type": self.ticket_type.to_dict(),
            "quantity": self.quantity,
            "server_row_id": self.server_row_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TicketLineItem":
        return cls(
            ticket_type=TicketTypeRef.from_dict(data["ticket_type"]),
            quantity=int(data["quantity"]),
            server_row_id=data.get("server_row_id"),
        )
