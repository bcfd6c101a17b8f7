"""Checkout bounded context — cart synchronization, pricing and ticket checkout.

Keeps a shopping cart consistent across guest and authenticated sessions,
drives the checkout wizard, hands the order off to the payment provider and,
once the buyer returns, binds attendee identities to the ticket records the
order system created.
"""

from protean.domain import Domain

from checkout.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

checkout = Domain(name="checkout")
