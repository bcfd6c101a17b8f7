"""BDD tests for collecting attendees in the checkout wizard."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/attendee_allocation.feature")


@when("they continue from the cart")
@when("they continue from the attendee step")
def _(session, error):
    try:
        session.wizard.advance()
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse('they name attendee {position:d} "{full_name}"'))
def _(session, position, full_name):
    first_name, last_name = full_name.split(" ", 1)
    session.wizard.update_attendee(position - 1, first_name=first_name, last_name=last_name)


@then(parsers.cfparse('the wizard is on the "{step}" step'))
def _(session, step):
    assert session.wizard.step.value == step


@then(parsers.cfparse("the attendee step shows {count:d} slots"))
def _(session, count):
    assert len(session.wizard.attendees) == count


@then(parsers.cfparse('the validation message is "{message}"'))
def _(session, error, message):
    assert error["exc"].messages == {"attendees": [message]}
    assert session.wizard.last_error == {"attendees": [message]}
