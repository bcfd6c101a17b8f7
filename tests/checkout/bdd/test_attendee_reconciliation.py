"""BDD tests for binding attendees to placeholder records after payment."""

from datetime import UTC, datetime, timedelta

from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

from checkout.handoff.orders.fake_adapter import FakeOrderService
from checkout.handoff.pending import PendingCheckoutStore
from checkout.reconciliation.attendee import EventAttendee

scenarios("features/attendee_reconciliation.feature")


@given("the order service records placeholders without correlation ids")
def _(services):
    services.orders = FakeOrderService()


@when(parsers.cfparse('they check out "{names}" for {quantity:d} of "{name}"'), target_fixture="order_id")
def _(session, catalogue, run, names, quantity, name):
    wizard = session.wizard
    run(session.cart.add_line(catalogue[name], quantity))
    wizard.advance()
    for index, full_name in enumerate(names.split(", ")):
        first_name, last_name = full_name.split(" ", 1)
        wizard.update_attendee(index, first_name=first_name, last_name=last_name)
    wizard.advance()
    wizard.set_contact(name="Ana Lima", email="ana@example.com")
    return run(wizard.submit()).order_id


@when(parsers.cfparse('the order service creates {count:d} placeholders for "{name}" in shuffled order'))
def _(registry, catalogue, run, order_id, count, name):
    start = datetime.now(UTC)
    # Inserted out of order; only created_at decides the binding order.
    for offset in reversed(range(count)):
        run(
            registry.create(
                user_id="user-1",
                order_id=order_id,
                ticket_type_id=catalogue[name].id,
                created_at=start + timedelta(minutes=offset),
            )
        )


@when("they return from payment", target_fixture="result")
def _(session, run):
    return run(session.reconcile())


@then(parsers.cfparse('the reconciliation outcome is "{outcome}"'))
def _(result, outcome):
    assert result.outcome.value == outcome


@then(parsers.cfparse('the placeholders in creation order hold "{names}"'))
def _(order_id, names):
    records = current_domain.repository_for(EventAttendee)._dao.query.filter(order_id=order_id).all().items
    records.sort(key=lambda record: record.created_at)
    assert [record.attendee_first_name for record in records] == names.split(", ")


@then("no checkout is pending")
def _(kv, run):
    assert run(PendingCheckoutStore(kv).load("user-1")) is None
    assert not [key for key in kv.data if key.startswith("handoff:user-1:")]
