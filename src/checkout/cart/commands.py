"""Cart mutations as commands.

Each command computes the next snapshot from the current one and raises
``ValidationError`` for requests that can never succeed, before the store
applies anything or touches a backend.
"""

from dataclasses import dataclass

from protean.exceptions import ValidationError

from checkout.cart.items import LineItem, LineKey, TicketLineItem
from checkout.cart.snapshot import CartSnapshot


def _require_line(snapshot: CartSnapshot, key: LineKey):
    entry = snapshot.find(key)
    if entry is None:
        raise ValidationError({"line_key": [f"No cart line with key {key}"]})
    return entry


@dataclass(frozen=True)
class AddLine:
    """Add units of a product or ticket type; quantities sum on an existing key."""

    entry: LineItem | TicketLineItem

    @property
    def key(self) -> LineKey:
        return self.entry.key

    def apply(self, snapshot: CartSnapshot) -> CartSnapshot:
        if self.entry.quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        existing = snapshot.find(self.key)
        if existing is None:
            return snapshot.put(self.entry)
        return snapshot.put(existing.with_quantity(existing.quantity + self.entry.quantity))


@dataclass(frozen=True)
class RemoveLine:
    key: LineKey

    def apply(self, snapshot: CartSnapshot) -> CartSnapshot:
        _require_line(snapshot, self.key)
        return snapshot.without(self.key)


@dataclass(frozen=True)
class SetQuantity:
    """Set a line's quantity; zero or less removes the line."""

    key: LineKey
    quantity: int

    def apply(self, snapshot: CartSnapshot) -> CartSnapshot:
        existing = _require_line(snapshot, self.key)
        if self.quantity <= 0:
            return snapshot.without(self.key)
        return snapshot.put(existing.with_quantity(self.quantity))


@dataclass(frozen=True)
class ClearCart:
    def apply(self, snapshot: CartSnapshot) -> CartSnapshot:
        return CartSnapshot()


CartCommand = AddLine | RemoveLine | SetQuantity | ClearCart
