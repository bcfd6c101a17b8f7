"""Durable handoff record bridging the payment redirect.

Stored as separate JSON entries under a per-user namespace so each piece can
be read or cleared on its own. The format is not versioned.
"""

import json
from dataclasses import dataclass, field

from checkout.attendees.allocator import AttendeeSlot
from checkout.cart.items import TicketLineItem
from checkout.errors import RemoteReadError, RemoteWriteError
from checkout.storage.port import KeyValueStore
from checkout.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_ID = "pendingOrderId"
EVENT_TICKETS = "pendingEventTickets"
ATTENDEES = "pendingAttendees"
BOUND_ATTENDEES = "pendingBoundAttendees"

ALL_KEYS = (ORDER_ID, EVENT_TICKETS, ATTENDEES, BOUND_ATTENDEES)


@dataclass(frozen=True)
class PendingCheckout:
    order_id: str
    tickets: tuple[TicketLineItem, ...] = ()
    attendees: tuple[AttendeeSlot, ...] = ()
    bound_correlation_ids: frozenset[str] = field(default_factory=frozenset)

    @property
    def ticket_type_ids(self) -> list[str]:
        return [ticket.ticket_type.id for ticket in self.tickets]

    @property
    def unbound_slots(self) -> list[AttendeeSlot]:
        return [slot for slot in self.attendees if slot.correlation_id not in self.bound_correlation_ids]


class PendingCheckoutStore:
    """The order id entry is written last and marks the record as complete."""

    def __init__(self, store: KeyValueStore, namespace: str = "handoff") -> None:
        self.store = store
        self.namespace = namespace

    def _key(self, user_id: str, name: str) -> str:
        return f"{self.namespace}:{user_id}:{name}"

    async def save(self, user_id: str, pending: PendingCheckout) -> None:
        entries = {
            EVENT_TICKETS: [ticket.to_dict() for ticket in pending.tickets],
            ATTENDEES: [slot.to_dict() for slot in pending.attendees],
            BOUND_ATTENDEES: sorted(pending.bound_correlation_ids),
            ORDER_ID: pending.order_id,
        }
        try:
            # Hide any earlier record until this one is complete.
            await self.store.delete(self._key(user_id, ORDER_ID))
            for name, value in entries.items():
                await self.store.set(self._key(user_id, name), json.dumps(value))
        except RemoteWriteError:
            logger.warning("pending_checkout_save_failed", user_id=user_id, order_id=pending.order_id)
            await self._discard_partial(user_id)
            raise

    async def load(self, user_id: str) -> PendingCheckout | None:
        order_id = await self.store.get(self._key(user_id, ORDER_ID))
        if order_id is None:
            return None
        tickets = await self.store.get(self._key(user_id, EVENT_TICKETS))
        attendees = await self.store.get(self._key(user_id, ATTENDEES))
        bound = await self.store.get(self._key(user_id, BOUND_ATTENDEES))
        try:
            return PendingCheckout(
                order_id=json.loads(order_id),
                tickets=tuple(TicketLineItem.from_dict(t) for t in json.loads(tickets or "[]")),
                attendees=tuple(AttendeeSlot.from_dict(a) for a in json.loads(attendees or "[]")),
                bound_correlation_ids=frozenset(json.loads(bound or "[]")),
            )
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("pending_checkout_corrupt", user_id=user_id, error=str(exc))
            raise RemoteReadError(f"Pending checkout for {user_id} is unreadable") from exc

    async def mark_bound(self, user_id: str, correlation_ids) -> None:
        await self.store.set(self._key(user_id, BOUND_ATTENDEES), json.dumps(sorted(correlation_ids)))

    async def delete(self, user_id: str) -> None:
        await self.store.delete(*(self._key(user_id, name) for name in ALL_KEYS))

    async def _discard_partial(self, user_id: str) -> None:
        try:
            await self.delete(user_id)
        except RemoteWriteError as exc:
            # Without the order id entry the leftovers are never read back.
            logger.warning("pending_checkout_cleanup_failed", user_id=user_id, error=exc.message)
