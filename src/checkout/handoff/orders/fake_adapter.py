"""Configurable fake order service for development and testing.

Applies the same checks as the real order service: items present, contact
name and email, an address when merchandise ships, stock, and member pricing.
Placeholder attendee records are created through the registry, one per
ticket unit, carrying the correlation id of the slot collected for it.
"""

from datetime import UTC, datetime
from decimal import Decimal
from uuid import uuid4

from protean.exceptions import ValidationError

from checkout.auth import AuthSession
from checkout.errors import ExternalServiceError
from checkout.handoff.orders.port import OrderRequest, OrderValidationService, ValidatedItem, ValidatedOrder
from checkout.pricing.engine import effective_price, product_prices, to_money
from checkout.reconciliation.registry.port import PlaceholderRegistry


class FakeOrderService(OrderValidationService):
    def __init__(self, registry: PlaceholderRegistry | None = None) -> None:
        self.registry = registry
        self.stock: dict[str, int] = {}
        self.should_succeed: bool = True
        self.failure_reason: str = "Failed to create order"
        self.calls: list[dict] = []
        self.orders: dict[str, ValidatedOrder] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Failed to create order") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def set_stock(self, product_id: str, available: int) -> None:
        self.stock[product_id] = available

    async def validate_and_create_order(self, request: OrderRequest, session: AuthSession) -> ValidatedOrder:
        self.calls.append({"method": "validate_and_create_order", "user_id": session.user_id, **request.to_payload()})

        errors = self._validate(request)
        if errors:
            raise ValidationError(errors)
        if not self.should_succeed:
            raise ExternalServiceError(self.failure_reason, status=400)

        is_member = session.is_member()
        items: list[ValidatedItem] = []
        for item in request.product_items:
            base, member = product_prices(item.product, item.selected_size)
            items.append(
                ValidatedItem(
                    product_id=item.product.id,
                    product_name=item.product.name,
                    quantity=item.quantity,
                    unit_price=effective_price(base, member, is_member),
                    details={"size": item.selected_size} if item.selected_size else {},
                )
            )
        for item in request.ticket_items:
            ticket_type = item.ticket_type
            items.append(
                ValidatedItem(
                    event_ticket_type_id=ticket_type.id,
                    product_name=ticket_type.display_name,
                    quantity=item.quantity,
                    unit_price=effective_price(ticket_type.price, ticket_type.member_price, is_member),
                    details={"event_ticket": True},
                )
            )

        order_id = f"order_{uuid4().hex[:12]}"
        total = sum((to_money(item.unit_price * item.quantity) for item in items), Decimal("0.00"))
        order = ValidatedOrder(order_id=order_id, total_amount=total, validated_items=tuple(items))
        self.orders[order_id] = order

        for product_item in request.product_items:
            if product_item.product.id in self.stock:
                self.stock[product_item.product.id] -= product_item.quantity

        if self.registry is not None:
            await self._create_placeholders(request, session.user_id, order_id)
        return order

    def _validate(self, request: OrderRequest) -> dict[str, list[str]]:
        errors: dict[str, list[str]] = {}
        if not request.product_items and not request.ticket_items:
            errors.setdefault("items", []).append("items must contain at least 1 items")
        for item in (*request.product_items, *request.ticket_items):
            if not 1 <= item.quantity <= 1000:
                errors.setdefault("items", []).append("quantity must be between 1 and 1000")
        for item in request.product_items:
            available = self.stock.get(item.product.id)
            if available is not None and available < item.quantity:
                errors.setdefault("items", []).append(
                    f"Insufficient stock for product {item.product.name}. Only {available} available."
                )
        contact = request.shipping_info
        if not contact.name.strip():
            errors.setdefault("name", []).append("name is required")
        if not contact.email.strip():
            errors.setdefault("email", []).append("email is required")
        elif "@" not in contact.email:
            errors.setdefault("email", []).append("email must be a valid email address")
        if request.product_items and not contact.address.strip():
            errors.setdefault("address", []).append("address is required")
        return errors

    async def _create_placeholders(self, request: OrderRequest, user_id: str, order_id: str) -> None:
        for item in request.ticket_items:
            slots = request.attendees_by_ticket_type.get(item.ticket_type.id, [])
            for unit in range(item.quantity):
                correlation_id = slots[unit].correlation_id if unit < len(slots) else None
                await self.registry.create(
                    user_id=user_id,
                    order_id=order_id,
                    ticket_type_id=item.ticket_type.id,
                    correlation_id=correlation_id,
                    created_at=datetime.now(UTC),
                )
