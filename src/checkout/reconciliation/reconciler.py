"""AttendeeReconciler — binds collected attendees to purchased tickets.

Runs after the payment redirect. For every pending ticket type the
placeholders that carry a correlation id are matched to the slot with the
same id; any left over (records created without one) are paired with the
remaining slots of that type by creation order. Each assignment is its own
write, so a run can partly succeed; the ids bound so far are saved with the
handoff record and a re-run only works on what is left.
"""

from dataclasses import dataclass, field
from enum import Enum

from checkout.attendees.allocator import AttendeeSlot, group
from checkout.errors import RemoteWriteError
from checkout.handoff.pending import PendingCheckout, PendingCheckoutStore
from checkout.reconciliation.registry.port import Placeholder, PlaceholderRegistry
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class ReconciliationOutcome(Enum):
    MISSING = "missing"
    COMPLETED = "completed"
    PARTIAL = "partial"


@dataclass(frozen=True)
class ReconciliationResult:
    outcome: ReconciliationOutcome
    order_id: str | None = None
    assigned: int = 0
    unresolved_placeholders: tuple[str, ...] = ()
    unresolved_slots: tuple[str, ...] = ()
    next_view: str = "cart"


@dataclass
class _Binding:
    placeholder: Placeholder
    slot: AttendeeSlot


@dataclass
class _TypePlan:
    bindings: list[_Binding] = field(default_factory=list)
    spare_placeholders: list[Placeholder] = field(default_factory=list)
    spare_slots: list[AttendeeSlot] = field(default_factory=list)


def plan_bindings(slots: list[AttendeeSlot], placeholders: list[Placeholder]) -> _TypePlan:
    """Pair one ticket type's slots with its unassigned placeholders.

    ``slots`` are in allocation order and ``placeholders`` oldest first.
    """
    plan = _TypePlan()
    by_correlation = {slot.correlation_id: slot for slot in slots}
    used: set[str] = set()
    positional: list[Placeholder] = []

    for placeholder in placeholders:
        if not placeholder.correlation_id:
            positional.append(placeholder)
            continue
        slot = by_correlation.get(placeholder.correlation_id)
        # A correlation id from another checkout marks a ticket that is not ours.
        if slot is not None and slot.correlation_id not in used:
            used.add(slot.correlation_id)
            plan.bindings.append(_Binding(placeholder, slot))

    remaining = [slot for slot in slots if slot.correlation_id not in used]
    for placeholder, slot in zip(positional, remaining):
        plan.bindings.append(_Binding(placeholder, slot))
    plan.spare_placeholders = positional[len(remaining) :]
    plan.spare_slots = remaining[len(positional) :]
    return plan


class AttendeeReconciler:
    def __init__(self, pending: PendingCheckoutStore, registry: PlaceholderRegistry) -> None:
        self.pending = pending
        self.registry = registry

    async def run(self, user_id: str) -> ReconciliationResult:
        pending = await self.pending.load(user_id)
        if pending is None:
            logger.info("reconcile_nothing_pending", user_id=user_id)
            return ReconciliationResult(outcome=ReconciliationOutcome.MISSING, next_view="cart")

        placeholders = await self.registry.fetch_unassigned(user_id, pending.ticket_type_ids)

        bound = set(pending.bound_correlation_ids)
        assigned = 0
        unresolved_placeholders: list[str] = []
        unresolved_slots: list[str] = []

        for ticket_type_id, slots in self._unbound_slots_by_type(pending).items():
            candidates = [p for p in placeholders if p.event_ticket_type_id == ticket_type_id]
            plan = plan_bindings(slots, candidates)

            for binding in plan.bindings:
                try:
                    await self.registry.assign(binding.placeholder.id, binding.slot)
                except RemoteWriteError as exc:
                    logger.warning(
                        "attendee_assign_failed",
                        user_id=user_id,
                        placeholder_id=binding.placeholder.id,
                        error=exc.message,
                    )
                    unresolved_placeholders.append(binding.placeholder.id)
                    unresolved_slots.append(binding.slot.correlation_id)
                    continue
                bound.add(binding.slot.correlation_id)
                assigned += 1

            unresolved_placeholders.extend(p.id for p in plan.spare_placeholders)
            unresolved_slots.extend(slot.correlation_id for slot in plan.spare_slots)

        if not unresolved_slots:
            await self.pending.delete(user_id)
            logger.info("reconcile_completed", user_id=user_id, order_id=pending.order_id, assigned=assigned)
            return ReconciliationResult(
                outcome=ReconciliationOutcome.COMPLETED,
                order_id=pending.order_id,
                assigned=assigned,
                unresolved_placeholders=tuple(unresolved_placeholders),
                next_view="tickets",
            )

        await self.pending.mark_bound(user_id, bound)
        logger.warning(
            "reconcile_partial",
            user_id=user_id,
            order_id=pending.order_id,
            assigned=assigned,
            unresolved=len(unresolved_slots),
        )
        return ReconciliationResult(
            outcome=ReconciliationOutcome.PARTIAL,
            order_id=pending.order_id,
            assigned=assigned,
            unresolved_placeholders=tuple(unresolved_placeholders),
            unresolved_slots=tuple(unresolved_slots),
            next_view="cart",
        )

    @staticmethod
    def _unbound_slots_by_type(pending: PendingCheckout) -> dict[str, list[AttendeeSlot]]:
        grouped = group(list(pending.attendees), pending.tickets)
        return {
            ticket_type_id: [s for s in slots if s.correlation_id not in pending.bound_correlation_ids]
            for ticket_type_id, slots in grouped.items()
        }
