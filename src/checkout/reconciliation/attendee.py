"""Placeholder attendee records.

The order service creates one record per purchased ticket unit with the
attendee fields left empty. After the payment redirect the reconciler fills
them from the attendee details collected in the wizard.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.aggregate
class EventAttendee:
    user_id = Identifier(required=True)
    order_id = Identifier()
    event_ticket_type_id = Identifier(required=True)
    correlation_id = String(max_length=64)
    created_at = DateTime()
    assigned_at = DateTime()
    attendee_first_name = String(max_length=100)
    attendee_last_name = String(max_length=100)
    attendee_email = String(max_length=255)
    attendee_phone = String(max_length=50)

    @classmethod
    def placeholder(cls, user_id, event_ticket_type_id, order_id=None, correlation_id=None, created_at=None):
        """Unassigned record for one ticket unit."""
        return cls(
            user_id=user_id,
            order_id=order_id,
            event_ticket_type_id=event_ticket_type_id,
            correlation_id=correlation_id,
            created_at=created_at or datetime.now(UTC),
        )

    @property
    def is_assigned(self) -> bool:
        return self.attendee_first_name is not None

    def assign(self, first_name, last_name, email=None, phone=None):
        if not (first_name or "").strip():
            raise ValidationError({"attendee_first_name": ["Attendee first name is required"]})
        self.attendee_first_name = first_name
        self.attendee_last_name = last_name or None
        self.attendee_email = email or None
        self.attendee_phone = phone or None
        self.assigned_at = datetime.now(UTC)
