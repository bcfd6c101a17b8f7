"""Attendee slot allocation for ticket lines.

Slots are laid out flat: for each ticket line in cart order, ``quantity``
consecutive slots. ``group`` and the reconciler walk the exact same order.
Each slot carries a correlation id that travels with the order so the
server-created placeholder for that ticket unit can be matched back to it.
"""

from dataclasses import dataclass, field, replace
from uuid import uuid4

from protean.exceptions import ValidationError

from checkout.cart.items import TicketLineItem


def _correlation_id() -> str:
    return uuid4().hex


@dataclass(frozen=True)
class AttendeeSlot:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    correlation_id: str = field(default_factory=_correlation_id)

    @property
    def is_named(self) -> bool:
        return bool(self.first_name.strip()) and bool(self.last_name.strip())

    def update(self, **fields) -> "AttendeeSlot":
        unknown = set(fields) - {"first_name", "last_name", "email", "phone"}
        if unknown:
            raise ValidationError({name: ["Unknown attendee field"] for name in sorted(unknown)})
        return replace(self, **{k: (v or "") for k, v in fields.items()})

    def to_dict(self) -> dict:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "correlation_id": self.correlation_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendeeSlot":
        return cls(
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            correlation_id=data.get("correlation_id") or _correlation_id(),
        )


def required_slots(tickets) -> int:
    return sum(ticket.quantity for ticket in tickets)


def flatten(tickets: tuple[TicketLineItem, ...] | list[TicketLineItem]) -> list[AttendeeSlot]:
    """One empty slot per ticket unit, in ticket line order."""
    return [AttendeeSlot() for _ in range(required_slots(tickets))]


def reflatten(previous: list[AttendeeSlot], tickets) -> list[AttendeeSlot]:
    """Resize ``previous`` to match ``tickets``, keeping entries by index.

    Data is preserved positionally, so shrinking an earlier ticket line shifts
    later attendees onto the wrong ticket type.
    """
    count = required_slots(tickets)
    kept = list(previous[:count])
    return kept + [AttendeeSlot() for _ in range(count - len(kept))]


def group(slots: list[AttendeeSlot], tickets) -> dict[str, list[AttendeeSlot]]:
    """Split flat slots into ``{ticket_type_id: [slots]}`` by walking the tickets."""
    if len(slots) != required_slots(tickets):
        raise ValidationError(
            {"attendees": [f"Expected {required_slots(tickets)} attendees, got {len(slots)}"]}
        )

    grouped: dict[str, list[AttendeeSlot]] = {}
    offset = 0
    for ticket in tickets:
        grouped.setdefault(ticket.ticket_type.id, []).extend(slots[offset : offset + ticket.quantity])
        offset += ticket.quantity
    return grouped


def slot_from_profile(full_name: str | None, email: str | None, base: AttendeeSlot | None = None) -> AttendeeSlot:
    """Fill a slot from the signed-in user's profile ("use my info")."""
    first, _, rest = (full_name or "").strip().partition(" ")
    slot = base or AttendeeSlot()
    return replace(slot, first_name=first, last_name=rest.strip(), email=email or "")
