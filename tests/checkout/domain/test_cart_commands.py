import pytest
from protean.exceptions import ValidationError

from checkout.cart.commands import AddLine, ClearCart, RemoveLine, SetQuantity
from checkout.cart.items import LineItem, LineKey, TicketLineItem
from checkout.cart.snapshot import CartSnapshot


@pytest.fixture()
def snapshot(product_a, ticket_x):
    return CartSnapshot().put(LineItem(product_a, 2)).put(TicketLineItem(ticket_x, 1))


class TestAddLine:
    def test_adds_new_line(self, shoes, snapshot):
        after = AddLine(LineItem(shoes, 1)).apply(snapshot)
        assert after.find(LineKey.product("prod-shoes")).quantity == 1

    def test_sums_quantity_on_existing_key(self, product_a, snapshot):
        after = AddLine(LineItem(product_a, 3)).apply(snapshot)
        assert after.find(LineKey.product("prod-a")).quantity == 5
        assert len(after.lines) == 1

    def test_other_variant_is_separate_line(self, product_a, snapshot):
        after = AddLine(LineItem(product_a, 1, "XL")).apply(snapshot)
        assert len(after.lines) == 2

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_rejects_quantity_below_one(self, product_a, snapshot, quantity):
        with pytest.raises(ValidationError) as exc_info:
            AddLine(LineItem(product_a, quantity)).apply(snapshot)
        assert "quantity" in exc_info.value.messages


class TestRemoveLine:
    def test_removes_line(self, snapshot):
        after = RemoveLine(LineKey.ticket("tt-x")).apply(snapshot)
        assert not after.has_tickets

    def test_unknown_key_is_rejected(self, snapshot):
        with pytest.raises(ValidationError) as exc_info:
            RemoveLine(LineKey.product("nope")).apply(snapshot)
        assert "line_key" in exc_info.value.messages


class TestSetQuantity:
    def test_sets_absolute_quantity(self, snapshot):
        after = SetQuantity(LineKey.product("prod-a"), 7).apply(snapshot)
        assert after.find(LineKey.product("prod-a")).quantity == 7

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_zero_or_less_removes_line(self, snapshot, quantity):
        after = SetQuantity(LineKey.product("prod-a"), quantity).apply(snapshot)
        assert not after.has_products

    def test_unknown_key_is_rejected(self, snapshot):
        with pytest.raises(ValidationError):
            SetQuantity(LineKey.ticket("missing"), 2).apply(snapshot)


class TestClearCart:
    def test_clear_empties_cart(self, snapshot):
        assert ClearCart().apply(snapshot).is_empty
