"""Placeholder registry over the EventAttendee aggregate."""

from datetime import datetime

from protean import current_domain

from checkout.attendees.allocator import AttendeeSlot
from checkout.errors import RemoteReadError, RemoteWriteError
from checkout.reconciliation.attendee import EventAttendee
from checkout.reconciliation.registry.port import Placeholder, PlaceholderRegistry
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


def _to_placeholder(record: EventAttendee) -> Placeholder:
    return Placeholder(
        id=str(record.id),
        event_ticket_type_id=str(record.event_ticket_type_id),
        created_at=record.created_at,
        order_id=str(record.order_id) if record.order_id else None,
        correlation_id=record.correlation_id,
    )


class ProteanPlaceholderRegistry(PlaceholderRegistry):
    async def create(
        self,
        user_id: str,
        order_id: str | None,
        ticket_type_id: str,
        correlation_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Placeholder:
        record = EventAttendee.placeholder(
            user_id=user_id,
            event_ticket_type_id=ticket_type_id,
            order_id=order_id,
            correlation_id=correlation_id,
            created_at=created_at,
        )
        try:
            current_domain.repository_for(EventAttendee).add(record)
        except Exception as exc:
            raise RemoteWriteError(f"Could not create attendee record: {exc}") from exc
        return _to_placeholder(record)

    async def fetch_unassigned(self, user_id: str, ticket_type_ids: list[str]) -> list[Placeholder]:
        wanted = {str(t) for t in ticket_type_ids}
        try:
            repo = current_domain.repository_for(EventAttendee)
            records = repo._dao.query.filter(user_id=str(user_id)).all().items
        except Exception as exc:
            logger.warning("placeholder_fetch_failed", user_id=user_id, error=str(exc))
            raise RemoteReadError(f"Could not load attendee records: {exc}") from exc

        unassigned = [
            record
            for record in records
            if str(record.event_ticket_type_id) in wanted and record.attendee_first_name is None
        ]
        unassigned.sort(key=lambda record: (record.created_at is None, record.created_at))
        return [_to_placeholder(record) for record in unassigned]

    async def assign(self, placeholder_id: str, slot: AttendeeSlot) -> None:
        try:
            repo = current_domain.repository_for(EventAttendee)
            record = repo.get(placeholder_id)
            record.assign(slot.first_name, slot.last_name, slot.email, slot.phone)
            repo.add(record)
        except Exception as exc:
            logger.warning("placeholder_assign_failed", placeholder_id=placeholder_id, error=str(exc))
            raise RemoteWriteError(f"Could not assign attendee: {exc}") from exc
