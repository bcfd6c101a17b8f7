from decimal import Decimal

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from checkout.attendees.allocator import flatten
from checkout.cart.items import TicketLineItem
from checkout.errors import ExternalServiceError
from checkout.handoff.orders.port import ContactInfo, OrderRequest, ProductOrderItem, TicketOrderItem
from checkout.reconciliation.attendee import EventAttendee

CONTACT = ContactInfo(name="Ana", email="ana@example.com", address="Rua 1")


class TestOrderValidation:
    async def test_empty_order(self, orders, auth):
        request = OrderRequest(product_items=(), ticket_items=(), shipping_info=CONTACT)
        with pytest.raises(ValidationError) as exc_info:
            await orders.validate_and_create_order(request, await auth.current_session())
        assert "items" in exc_info.value.messages

    async def test_address_required_for_products(self, orders, auth, shoes):
        request = OrderRequest(
            product_items=(ProductOrderItem(shoes, 1),),
            ticket_items=(),
            shipping_info=ContactInfo(name="Ana", email="ana@example.com"),
        )
        with pytest.raises(ValidationError) as exc_info:
            await orders.validate_and_create_order(request, await auth.current_session())
        assert "address" in exc_info.value.messages

    async def test_bad_email(self, orders, auth, ticket_x):
        request = OrderRequest(
            product_items=(),
            ticket_items=(TicketOrderItem(ticket_x, 1),),
            shipping_info=ContactInfo(name="Ana", email="not-an-email"),
        )
        with pytest.raises(ValidationError):
            await orders.validate_and_create_order(request, await auth.current_session())

    async def test_insufficient_stock(self, orders, auth, shoes):
        orders.set_stock("prod-shoes", 1)
        request = OrderRequest(product_items=(ProductOrderItem(shoes, 2),), ticket_items=(), shipping_info=CONTACT)
        with pytest.raises(ValidationError) as exc_info:
            await orders.validate_and_create_order(request, await auth.current_session())
        assert exc_info.value.messages == {
            "items": ["Insufficient stock for product Dance Shoes. Only 1 available."]
        }
        assert orders.stock["prod-shoes"] == 1
        assert orders.orders == {}

    async def test_configured_rejection(self, orders, auth, ticket_x):
        orders.configure(should_succeed=False, failure_reason="Failed to create order")
        request = OrderRequest(
            product_items=(), ticket_items=(TicketOrderItem(ticket_x, 1),), shipping_info=CONTACT
        )
        with pytest.raises(ExternalServiceError) as exc_info:
            await orders.validate_and_create_order(request, await auth.current_session())
        assert exc_info.value.message == "Failed to create order"


class TestOrderCreation:
    async def test_non_member_prices(self, orders, auth, shoes, ticket_x):
        request = OrderRequest(
            product_items=(ProductOrderItem(shoes, 2),),
            ticket_items=(TicketOrderItem(ticket_x, 1),),
            shipping_info=CONTACT,
        )
        order = await orders.validate_and_create_order(request, await auth.current_session())
        assert order.total_amount == Decimal("130.00")
        assert [item.target_id for item in order.validated_items] == ["prod-shoes", "tt-x"]
        assert order.validated_items[1].details == {"event_ticket": True}

    async def test_pass_category_price_and_size_detail(self, orders, member_auth, festival_pass):
        request = OrderRequest(
            product_items=(ProductOrderItem(festival_pass, 1, "Full Pass"),),
            ticket_items=(),
            shipping_info=CONTACT,
        )
        order = await orders.validate_and_create_order(request, await member_auth.current_session())
        assert order.validated_items[0].unit_price == Decimal("100.00")
        assert order.validated_items[0].details == {"size": "Full Pass"}

    async def test_stock_is_reserved(self, orders, auth, shoes):
        orders.set_stock("prod-shoes", 5)
        request = OrderRequest(product_items=(ProductOrderItem(shoes, 2),), ticket_items=(), shipping_info=CONTACT)
        await orders.validate_and_create_order(request, await auth.current_session())
        assert orders.stock["prod-shoes"] == 3

    async def test_one_placeholder_per_ticket_unit_with_correlation_ids(self, orders, auth, ticket_x, ticket_y):
        tickets = (TicketLineItem(ticket_x, 2), TicketLineItem(ticket_y, 1))
        slots = flatten(tickets)
        request = OrderRequest(
            product_items=(),
            ticket_items=(TicketOrderItem(ticket_x, 2), TicketOrderItem(ticket_y, 1)),
            shipping_info=CONTACT,
            attendees_by_ticket_type={"tt-x": slots[:2], "tt-y": slots[2:]},
        )
        order = await orders.validate_and_create_order(request, await auth.current_session())

        records = current_domain.repository_for(EventAttendee)._dao.query.filter(user_id="user-1").all().items
        assert len(records) == 3
        assert {r.correlation_id for r in records} == {slot.correlation_id for slot in slots}
        assert {str(r.order_id) for r in records} == {order.order_id}
        assert all(not r.is_assigned for r in records)
