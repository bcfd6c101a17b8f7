"""OrderHandoff — turns a priced cart into an order and a payment redirect.

Steps run strictly in order and stop at the first failure:

1. a live auth session, refreshed when it is about to expire;
2. the order request, with attendees grouped per ticket type;
3. server-side validation and order creation;
4. the hosted payment checkout for the validated items;
5. the durable handoff record;
6. clearing the cart.

Nothing before step 5 touches the cart, so a failed submit can simply be
retried. Once the handoff record exists the cart must not survive: if the
remote clear fails, the local cart is forgotten anyway.
"""

from dataclasses import dataclass
from decimal import Decimal

from checkout.attendees.allocator import AttendeeSlot, group
from checkout.auth import AuthProvider, ensure_fresh_session
from checkout.cart.snapshot import CartSnapshot
from checkout.cart.store import CartStore
from checkout.config import Settings
from checkout.errors import RemoteWriteError
from checkout.handoff.orders.port import (
    ContactInfo,
    OrderRequest,
    OrderValidationService,
    ProductOrderItem,
    TicketOrderItem,
    ValidatedOrder,
)
from checkout.handoff.pending import PendingCheckout, PendingCheckoutStore
from checkout.payments.port import CheckoutItem, PaymentService
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class HandoffResult:
    order_id: str
    checkout_url: str
    total_amount: Decimal


def build_order_request(
    snapshot: CartSnapshot, contact: ContactInfo, attendees: list[AttendeeSlot]
) -> OrderRequest:
    return OrderRequest(
        product_items=tuple(
            ProductOrderItem(product=line.product, quantity=line.quantity, selected_size=line.selected_variant)
            for line in snapshot.lines
        ),
        ticket_items=tuple(
            TicketOrderItem(ticket_type=ticket.ticket_type, quantity=ticket.quantity) for ticket in snapshot.tickets
        ),
        shipping_info=contact,
        attendees_by_ticket_type=group(attendees, snapshot.tickets) if snapshot.tickets else {},
    )


def build_checkout_items(order: ValidatedOrder) -> list[CheckoutItem]:
    return [
        CheckoutItem(
            id=item.target_id,
            name=item.product_name,
            price=item.unit_price,
            quantity=item.quantity,
            metadata={"order_id": order.order_id},
        )
        for item in order.validated_items
    ]


class OrderHandoff:
    def __init__(
        self,
        cart: CartStore,
        auth: AuthProvider,
        orders: OrderValidationService,
        payments: PaymentService,
        pending: PendingCheckoutStore,
        settings: Settings,
    ) -> None:
        self.cart = cart
        self.auth = auth
        self.orders = orders
        self.payments = payments
        self.pending = pending
        self.settings = settings

    async def submit(
        self, snapshot: CartSnapshot, contact: ContactInfo, attendees: list[AttendeeSlot]
    ) -> HandoffResult:
        session = await ensure_fresh_session(self.auth, self.settings.session_refresh_window_seconds)

        request = build_order_request(snapshot, contact, attendees)
        order = await self.orders.validate_and_create_order(request, session)
        logger.info("order_created", user_id=session.user_id, order_id=order.order_id, total=str(order.total_amount))

        checkout_url = await self.payments.create_checkout(
            pay_type="order",
            items=build_checkout_items(order),
            metadata={"order_id": order.order_id, "target_id": order.order_id},
            success_url=self.settings.success_url,
            cancel_url=self.settings.cancel_url,
            session=session,
        )

        await self.pending.save(
            session.user_id,
            PendingCheckout(order_id=order.order_id, tickets=snapshot.tickets, attendees=tuple(attendees)),
        )

        try:
            await self.cart.clear()
        except RemoteWriteError as exc:
            logger.error("cart_clear_after_handoff_failed", user_id=session.user_id, error=exc.message)
            self.cart.forget()

        logger.info("handoff_complete", user_id=session.user_id, order_id=order.order_id)
        return HandoffResult(order_id=order.order_id, checkout_url=checkout_url, total_amount=order.total_amount)
