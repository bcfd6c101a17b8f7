"""Placeholder registry port.

Access to the server-side placeholder attendee records, shared by every
session of the same user.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from checkout.attendees.allocator import AttendeeSlot


@dataclass(frozen=True)
class Placeholder:
    id: str
    event_ticket_type_id: str
    created_at: datetime | None
    order_id: str | None = None
    correlation_id: str | None = None


class PlaceholderRegistry(ABC):
    @abstractmethod
    async def create(
        self,
        user_id: str,
        order_id: str | None,
        ticket_type_id: str,
        correlation_id: str | None = None,
        created_at: datetime | None = None,
    ) -> Placeholder: ...

    @abstractmethod
    async def fetch_unassigned(self, user_id: str, ticket_type_ids: list[str]) -> list[Placeholder]:
        """Unassigned placeholders of the given types, oldest first. Raises RemoteReadError."""
        ...

    @abstractmethod
    async def assign(self, placeholder_id: str, slot: AttendeeSlot) -> None:
        """Write the slot's details onto the placeholder. Raises RemoteWriteError."""
        ...
