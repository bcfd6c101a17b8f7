from decimal import Decimal

import pytest
from protean.exceptions import ValidationError

from checkout.payments.port import CheckoutItem, validate_checkout

OK_URL = "https://academy.example.com/my-purchases?payment=success"
CANCEL_URL = "https://academy.example.com/my-purchases?payment=cancelled"


def _item(**kwargs):
    defaults = {"id": "prod-a", "name": "ProductA", "price": Decimal("20.00"), "quantity": 1}
    return CheckoutItem(**{**defaults, **kwargs})


class TestValidateCheckout:
    def test_valid_request_passes(self):
        validate_checkout("order", [_item()], OK_URL, CANCEL_URL)

    def test_unknown_pay_type(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkout("donation", [_item()], OK_URL, CANCEL_URL)
        assert "payment_type" in exc_info.value.messages

    def test_items_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkout("order", [], OK_URL, CANCEL_URL)
        assert "items" in exc_info.value.messages

    def test_too_many_items(self):
        with pytest.raises(ValidationError):
            validate_checkout("order", [_item(id=f"p{i}") for i in range(101)], OK_URL, CANCEL_URL)

    @pytest.mark.parametrize("quantity", [0, 1001])
    def test_quantity_bounds(self, quantity):
        with pytest.raises(ValidationError):
            validate_checkout("order", [_item(quantity=quantity)], OK_URL, CANCEL_URL)

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            validate_checkout("order", [_item(price=Decimal("-1"))], OK_URL, CANCEL_URL)

    def test_free_item_is_allowed(self):
        validate_checkout("event_ticket", [_item(price=Decimal("0"))], OK_URL, CANCEL_URL)

    def test_urls_must_be_absolute(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_checkout("order", [_item()], "/my-purchases", "not a url")
        assert set(exc_info.value.messages) == {"success_url", "cancel_url"}
