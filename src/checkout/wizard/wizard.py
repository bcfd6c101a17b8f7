"""CheckoutWizard — Cart, Attendees, Contact, then submit.

The Attendees step only exists while the cart holds tickets. Forward moves
validate the current step; a failed move keeps the step, records the reasons
in ``last_error`` and raises ``ValidationError``. Moving back never validates.
"""

from dataclasses import replace
from enum import Enum

from protean.exceptions import ValidationError

from checkout.attendees.allocator import AttendeeSlot, reflatten, slot_from_profile
from checkout.auth import AuthSession
from checkout.cart.store import CartStore
from checkout.errors import CheckoutError
from checkout.handoff.handoff import HandoffResult, OrderHandoff
from checkout.handoff.orders.port import ContactInfo
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class WizardStep(Enum):
    CART = "cart"
    ATTENDEES = "attendees"
    CONTACT = "contact"


class CheckoutWizard:
    def __init__(self, cart: CartStore, handoff: OrderHandoff, profile: AuthSession | None = None) -> None:
        self.cart = cart
        self.handoff = handoff
        self.step = WizardStep.CART
        self.attendees: list[AttendeeSlot] = []
        self.contact = ContactInfo(
            name=(profile.full_name or "") if profile else "",
            email=(profile.email or "") if profile else "",
        )
        self.profile = profile
        self.last_error: dict[str, list[str]] | None = None
        self.result: HandoffResult | None = None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def advance(self) -> WizardStep:
        snapshot = self.cart.snapshot
        if self.step is WizardStep.CART:
            if snapshot.is_empty:
                self._fail({"cart": ["Your cart is empty"]})
            if snapshot.has_tickets:
                self.refresh()
                self._move(WizardStep.ATTENDEES)
            else:
                self._move(WizardStep.CONTACT)
        elif self.step is WizardStep.ATTENDEES:
            self.refresh()
            self._require_named_attendees()
            self._move(WizardStep.CONTACT)
        else:
            self._fail({"step": ["Contact is the last step, submit the order instead"]})
        return self.step

    def back(self) -> WizardStep:
        if self.step is WizardStep.CONTACT:
            self._move(WizardStep.ATTENDEES if self.cart.snapshot.has_tickets else WizardStep.CART)
        elif self.step is WizardStep.ATTENDEES:
            self._move(WizardStep.CART)
        return self.step

    def refresh(self) -> list[AttendeeSlot]:
        """Resize the attendee slots to the cart's current ticket quantities."""
        self.attendees = reflatten(self.attendees, self.cart.snapshot.tickets)
        return self.attendees

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------
    def update_attendee(self, index: int, **fields) -> AttendeeSlot:
        self._check_index(index)
        self.attendees[index] = self.attendees[index].update(**fields)
        return self.attendees[index]

    def use_profile_for(self, index: int, full_name: str | None = None, email: str | None = None) -> AttendeeSlot:
        """Copy the signed-in user's name and email into a slot."""
        self._check_index(index)
        if full_name is None and self.profile is not None:
            full_name, email = self.profile.full_name, self.profile.email
        self.attendees[index] = slot_from_profile(full_name, email, base=self.attendees[index])
        return self.attendees[index]

    def set_contact(self, **fields) -> ContactInfo:
        self.contact = replace(self.contact, **{k: v or "" for k, v in fields.items()})
        return self.contact

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------
    async def submit(self) -> HandoffResult:
        if self.step is not WizardStep.CONTACT:
            self._fail({"step": ["Complete the previous steps first"]})

        snapshot = self.cart.snapshot
        errors: dict[str, list[str]] = {}
        if not self.contact.name.strip():
            errors["name"] = ["Name is required"]
        if not self.contact.email.strip():
            errors["email"] = ["Email is required"]
        if snapshot.has_products and not self.contact.address.strip():
            errors["address"] = ["Address is required for merchandise"]
        if errors:
            self._fail(errors)

        self.refresh()
        if snapshot.has_tickets:
            self._require_named_attendees()

        try:
            self.result = await self.handoff.submit(snapshot, self.contact, list(self.attendees))
        except ValidationError as exc:
            self.last_error = exc.messages
            raise
        except CheckoutError as exc:
            logger.warning("checkout_submit_failed", error=exc.message, error_type=type(exc).__name__)
            self.last_error = {"submit": [exc.message]}
            raise

        self.last_error = None
        self.attendees = []
        self.step = WizardStep.CART
        return self.result

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _move(self, step: WizardStep) -> None:
        self.step = step
        self.last_error = None

    def _fail(self, messages: dict[str, list[str]]) -> None:
        self.last_error = messages
        raise ValidationError(messages)

    def _require_named_attendees(self) -> None:
        missing = [index for index, slot in enumerate(self.attendees) if not slot.is_named]
        if missing:
            self._fail(
                {
                    "attendees": [
                        f"Attendee {index + 1} needs a first and last name" for index in missing
                    ]
                }
            )

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.attendees):
            raise ValidationError({"index": [f"No attendee slot at position {index}"]})
