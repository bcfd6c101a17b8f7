"""BDD tests for rolling back a rejected cart write."""

from pytest_bdd import given, parsers, scenarios, then, when

from checkout.cart.items import LineKey
from checkout.errors import RemoteWriteError

scenarios("features/failed_quantity_update.feature")


@given("the remote cart is rejecting writes")
def _(remote_cart):
    remote_cart.configure(failing={"upsert_product", "upsert_ticket", "delete_product", "delete_ticket", "clear"})


@when(parsers.cfparse('they set the quantity of "{name}" to {quantity:d}'))
def _(session, catalogue, run, error, name, quantity):
    try:
        run(session.cart.set_quantity(LineKey.product(catalogue[name].id), quantity))
    except RemoteWriteError as exc:
        error["exc"] = exc


@then(parsers.cfparse('the remote cart still holds {quantity:d} of "{name}"'))
def _(remote_cart, catalogue, quantity, name):
    line = remote_cart.snapshot_for("user-1").find(LineKey.product(catalogue[name].id))
    assert line.quantity == quantity
