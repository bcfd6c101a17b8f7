"""Immutable cart snapshot.

A snapshot is the whole cart at one point in time. The store swaps snapshots
rather than editing them, which makes "restore the previous snapshot" the
complete rollback story for a failed remote write.
"""

import json
from dataclasses import dataclass
from typing import Any

from checkout.cart.items import LineItem, LineKey, LineKind, TicketLineItem


@dataclass(frozen=True)
class CartSnapshot:
    lines: tuple[LineItem, ...] = ()
    tickets: tuple[TicketLineItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.lines and not self.tickets

    @property
    def has_products(self) -> bool:
        return bool(self.lines)

    @property
    def has_tickets(self) -> bool:
        return bool(self.tickets)

    @property
    def ticket_quantity(self) -> int:
        return sum(ticket.quantity for ticket in self.tickets)

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines) + self.ticket_quantity

    def find(self, key: LineKey) -> LineItem | TicketLineItem | None:
        entries = self.lines if key.kind is LineKind.PRODUCT else self.tickets
        return next((entry for entry in entries if entry.key == key), None)

    def put(self, entry: LineItem | TicketLineItem) -> "CartSnapshot":
        """Replace the line with the same key in place, or append it."""
        if isinstance(entry, LineItem):
            return CartSnapshot(lines=_put(self.lines, entry), tickets=self.tickets)
        return CartSnapshot(lines=self.lines, tickets=_put(self.tickets, entry))

    def without(self, key: LineKey) -> "CartSnapshot":
        if key.kind is LineKind.PRODUCT:
            return CartSnapshot(lines=tuple(e for e in self.lines if e.key != key), tickets=self.tickets)
        return CartSnapshot(lines=self.lines, tickets=tuple(e for e in self.tickets if e.key != key))

    def to_dict(self) -> dict[str, Any]:
        return {
            "lines": [line.to_dict() for line in self.lines],
            "tickets": [ticket.to_dict() for ticket in self.tickets],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartSnapshot":
        return cls(
            lines=tuple(LineItem.from_dict(item) for item in data.get("lines") or ()),
            tickets=tuple(TicketLineItem.from_dict(item) for item in data.get("tickets") or ()),
        )

    @classmethod
    def from_json(cls, raw: str | None) -> "CartSnapshot":
        if not raw:
            return cls()
        return cls.from_dict(json.loads(raw))


def _put(entries: tuple, entry) -> tuple:
    for index, existing in enumerate(entries):
        if existing.key == entry.key:
            return entries[:index] + (entry,) + entries[index + 1 :]
    return entries + (entry,)
