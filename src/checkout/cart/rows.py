"""Authenticated cart rows — the server-side mirror of a signed-in user's cart.

One row per (user, product, variant) and one per (user, event ticket type).
The referenced product or ticket type is stored denormalized as JSON so the
cart can be rebuilt without joining the catalogue.
"""

import json
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from checkout.cart.items import LineItem, ProductRef, TicketLineItem, TicketTypeRef
from checkout.domain import checkout


@checkout.aggregate
class CartProductRow:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    selected_variant = String(max_length=120)
    quantity = Integer(required=True, min_value=1)
    product = Text(required=True)  # JSON: ProductRef
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id, item: LineItem):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            product_id=item.product.id,
            selected_variant=item.selected_variant,
            quantity=item.quantity,
            product=json.dumps(item.product.to_dict()),
            created_at=now,
            updated_at=now,
        )

    def matches(self, product_id, variant) -> bool:
        return str(self.product_id) == str(product_id) and (self.selected_variant or None) == (variant or None)

    def set_quantity(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Cart rows must hold at least one unit"]})
        self.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def to_line(self) -> LineItem:
        return LineItem(
            product=ProductRef.from_dict(json.loads(self.product)),
            quantity=self.quantity,
            selected_variant=self.selected_variant or None,
            server_row_id=str(self.id),
        )


@checkout.aggregate
class CartTicketRow:
    user_id = Identifier(required=True)
    event_ticket_type_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    ticket_type = Text(required=True)  # JSON: TicketTypeRef
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, user_id, item: TicketLineItem):
        now = datetime.now(UTC)
        return cls(
            user_id=user_id,
            event_ticket_type_id=item.ticket_type.id,
            quantity=item.quantity,
            ticket_type=json.dumps(item.ticket_type.to_dict()),
            created_at=now,
            updated_at=now,
        )

    def set_quantity(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Cart rows must hold at least one unit"]})
        self.quantity = quantity
        self.updated_at = datetime.now(UTC)

    def to_line(self) -> TicketLineItem:
        return TicketLineItem(
            ticket_type=TicketTypeRef.from_dict(json.loads(self.ticket_type)),
            quantity=self.quantity,
            server_row_id=str(self.id),
        )
