"""Tiered member pricing.

Prices are computed from the denormalized refs carried on each line. Members
get the member price only when one is set and it is actually lower than the
base price. Amounts are Decimals rounded half-up to cents per line, and the
cart total is the exact sum of the displayed line totals.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from checkout.cart.items import LineItem, LineKey, ProductRef, TicketLineItem
from checkout.cart.snapshot import CartSnapshot

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Convert a float/int/str amount to a two-place Decimal."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def effective_price(base, member, is_member: bool) -> Decimal:
    base_amount = to_money(base)
    member_amount = to_money(member or 0)
    if is_member and ZERO < member_amount < base_amount:
        return member_amount
    return base_amount


def product_prices(product: ProductRef, variant: str | None) -> tuple[Decimal, Decimal]:
    """(base, member) for a product, resolving pass categories by variant name."""
    if variant and product.ticket_categories:
        category = next((c for c in product.ticket_categories if c.name == variant), None)
        if category is not None:
            return to_money(category.price), to_money(category.member_price)
    return to_money(product.price), to_money(product.member_price)


@dataclass(frozen=True)
class LinePricing:
    key: LineKey
    unit_price: Decimal
    unit_effective_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return (self.unit_effective_price * self.quantity).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def line_original_total(self) -> Decimal:
        return (self.unit_price * self.quantity).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def line_savings(self) -> Decimal:
        return self.line_original_total - self.line_total


@dataclass(frozen=True)
class CartPricing:
    lines: tuple[LinePricing, ...]
    total: Decimal
    original_total: Decimal
    savings: Decimal

    def for_key(self, key: LineKey) -> LinePricing | None:
        return next((line for line in self.lines if line.key == key), None)


def price_line(entry: LineItem | TicketLineItem, is_member: bool) -> LinePricing:
    if isinstance(entry, LineItem):
        base, member = product_prices(entry.product, entry.selected_variant)
    else:
        base, member = to_money(entry.ticket_type.price), to_money(entry.ticket_type.member_price)
    return LinePricing(
        key=entry.key,
        unit_price=base,
        unit_effective_price=effective_price(base, member, is_member),
        quantity=entry.quantity,
    )


def price_cart(snapshot: CartSnapshot, is_member: bool) -> CartPricing:
    lines = tuple(price_line(entry, is_member) for entry in (*snapshot.lines, *snapshot.tickets))
    total = sum((line.line_total for line in lines), ZERO)
    original_total = sum((line.line_original_total for line in lines), ZERO)
    return CartPricing(
        lines=lines,
        total=total,
        original_total=original_total,
        savings=original_total - total,
    )
