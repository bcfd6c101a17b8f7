"""Shared BDD fixtures and step definitions for checkout journeys."""

import asyncio
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when

from checkout.auth import StaticAuthProvider
from checkout.cart.items import LineKey, TicketTypeRef
from checkout.errors import CheckoutError
from checkout.session import CheckoutSession


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@pytest.fixture()
def run():
    """Drive a coroutine to completion from a synchronous step."""
    loop = asyncio.new_event_loop()
    yield loop.run_until_complete
    loop.close()


@pytest.fixture()
def catalogue(product_a, shoes, ticket_x, ticket_y):
    return {
        "ProductA": product_a,
        "Dance Shoes": shoes,
        "Spring Gala General": ticket_x,
        "Spring Gala VIP": ticket_y,
    }


def line_key(ref) -> LineKey:
    if isinstance(ref, TicketTypeRef):
        return LineKey.ticket(ref.id)
    return LineKey.product(ref.id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a guest session", target_fixture="session")
def guest_session(services, run):
    return run(CheckoutSession.open_guest(services, "guest-1").start())


@given("a signed-in non-member", target_fixture="session")
def signed_in_non_member(services, make_session, run):
    profile = make_session("user-1")
    return run(CheckoutSession.open_authenticated(services, StaticAuthProvider(profile), profile).start())


@given("a signed-in member", target_fixture="session")
def signed_in_member(services, make_session, run):
    profile = make_session("member-1", member=True)
    return run(CheckoutSession.open_authenticated(services, StaticAuthProvider(profile), profile).start())


@given(parsers.cfparse('they have {quantity:d} of "{name}" in the cart'))
def cart_holds(session, catalogue, run, quantity, name):
    run(session.cart.add_line(catalogue[name], quantity))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('they add {quantity:d} of "{name}"'))
def add_to_cart(session, catalogue, run, error, quantity, name):
    try:
        run(session.cart.add_line(catalogue[name], quantity))
    except (ValidationError, CheckoutError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart total is "{total}"'))
def cart_total(session, total):
    assert session.pricing().total == Decimal(total)


@then(parsers.cfparse('the savings are "{savings}"'))
def cart_savings(session, savings):
    assert session.pricing().savings == Decimal(savings)


@then("the cart is empty")
def cart_is_empty(session):
    assert session.cart.snapshot.is_empty


@then(parsers.cfparse('the quantity of "{name}" shown is {quantity:d}'))
def shown_quantity(session, catalogue, name, quantity):
    assert session.cart.snapshot.find(line_key(catalogue[name])).quantity == quantity


@then(parsers.cfparse('the error "{message}" is shown'))
def error_shown(error, message):
    assert error["exc"] is not None
    assert error["exc"].message == message
