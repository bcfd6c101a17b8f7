from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture

from checkout.auth import AuthSession, StaticAuthProvider
from checkout.cart.items import ProductRef, TicketCategory, TicketTypeRef
from checkout.cart.remote.fake_adapter import FakeRemoteCart
from checkout.config import Settings
from checkout.handoff.orders.fake_adapter import FakeOrderService
from checkout.payments.fake_adapter import FakePaymentService
from checkout.reconciliation.registry.protean_adapter import ProteanPlaceholderRegistry
from checkout.session import CheckoutServices
from checkout.storage.memory_adapter import InMemoryKeyValueStore


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Catalogue refs
# ---------------------------------------------------------------------------
@pytest.fixture()
def product_a():
    return ProductRef(id="prod-a", name="ProductA", price=20, member_price=15)


@pytest.fixture()
def shoes():
    return ProductRef(id="prod-shoes", name="Dance Shoes", price=50, member_price=45)


@pytest.fixture()
def festival_pass():
    return ProductRef(
        id="prod-pass",
        name="Festival Pass",
        price=100,
        member_price=90,
        category="event_pass",
        ticket_categories=(
            TicketCategory(name="Full Pass", price=120, member_price=100),
            TicketCategory(name="Party Pass", price=60, member_price=0),
        ),
    )


@pytest.fixture()
def ticket_x():
    return TicketTypeRef(
        id="tt-x",
        event_id="evt-gala",
        event_title="Spring Gala",
        category_name="General",
        price=30,
        member_price=27,
    )


@pytest.fixture()
def ticket_y():
    return TicketTypeRef(
        id="tt-y",
        event_id="evt-gala",
        event_title="Spring Gala",
        category_name="VIP",
        price=80,
        member_price=70,
    )


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture()
def remote_cart():
    return FakeRemoteCart()


@pytest.fixture()
def registry():
    return ProteanPlaceholderRegistry()


@pytest.fixture()
def orders(registry):
    return FakeOrderService(registry=registry)


@pytest.fixture()
def payments():
    return FakePaymentService()


@pytest.fixture()
def settings():
    return Settings(public_url="https://academy.example.com")


@pytest.fixture()
def services(settings, kv, remote_cart, orders, payments, registry):
    return CheckoutServices(
        settings=settings,
        store=kv,
        remote_cart=remote_cart,
        orders=orders,
        payments=payments,
        registry=registry,
    )


def make_auth_session(user_id="user-1", member=False, expires_in=3600, **kwargs):
    now = datetime.now(UTC)
    return AuthSession(
        user_id=user_id,
        access_token=f"token-{user_id}",
        expires_at=now + timedelta(seconds=expires_in),
        subscription_status="active" if member else None,
        subscription_expires_at=now + timedelta(days=30) if member else None,
        full_name=kwargs.get("full_name", "Ana Maria Souza"),
        email=kwargs.get("email", "ana@example.com"),
    )


@pytest.fixture()
def auth():
    return StaticAuthProvider(make_auth_session())


@pytest.fixture()
def member_auth():
    return StaticAuthProvider(make_auth_session(user_id="member-1", member=True))


@pytest.fixture()
def make_session():
    return make_auth_session
