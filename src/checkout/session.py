"""Per-visitor checkout session.

A session is built explicitly from its collaborators and lives from page
load (or sign-in) to sign-out. The cart backend is fixed when the session
opens: guests keep their cart in the key/value store, signed-in users in
remote rows. Signing in therefore opens a new session and retires the guest
one, carrying the guest cart across according to the identity transition
policy.
"""

from dataclasses import dataclass
from uuid import uuid4

from checkout.auth import AuthProvider, AuthSession, StaticAuthProvider
from checkout.cart.backends import EphemeralBackend, RemoteBackend
from checkout.cart.remote import get_remote_cart
from checkout.cart.remote.port import RemoteCartService
from checkout.cart.store import CartStore, MergeResult
from checkout.config import IdentityTransition, Settings, load_settings
from checkout.errors import AuthError, RemoteWriteError
from checkout.handoff.handoff import OrderHandoff
from checkout.handoff.orders import get_order_service
from checkout.handoff.orders.port import OrderValidationService
from checkout.handoff.pending import PendingCheckoutStore
from checkout.payments import get_payment_service
from checkout.payments.port import PaymentService
from checkout.pricing.engine import CartPricing, price_cart
from checkout.reconciliation.reconciler import AttendeeReconciler, ReconciliationResult
from checkout.reconciliation.registry import get_registry
from checkout.reconciliation.registry.port import PlaceholderRegistry
from checkout.storage import get_store
from checkout.storage.port import KeyValueStore
from checkout.utils.logging import get_logger
from checkout.wizard.wizard import CheckoutWizard

logger = get_logger(__name__)


@dataclass
class CheckoutServices:
    """Collaborators shared by every session."""

    settings: Settings
    store: KeyValueStore
    remote_cart: RemoteCartService
    orders: OrderValidationService
    payments: PaymentService
    registry: PlaceholderRegistry


def build_services(settings: Settings | None = None) -> CheckoutServices:
    """Wire the configured adapters."""
    return CheckoutServices(
        settings=settings or load_settings(),
        store=get_store(),
        remote_cart=get_remote_cart(),
        orders=get_order_service(),
        payments=get_payment_service(),
        registry=get_registry(),
    )


class CheckoutSession:
    def __init__(
        self,
        services: CheckoutServices,
        cart: CartStore,
        auth: AuthProvider,
        session_id: str | None = None,
        guest_id: str | None = None,
        profile: AuthSession | None = None,
    ) -> None:
        self.services = services
        self.session_id = session_id or uuid4().hex
        self.guest_id = guest_id
        self.profile = profile
        self.auth = auth
        self.cart = cart
        pending = PendingCheckoutStore(services.store)
        self.handoff = OrderHandoff(
            cart=cart,
            auth=auth,
            orders=services.orders,
            payments=services.payments,
            pending=pending,
            settings=services.settings,
        )
        self.wizard = CheckoutWizard(cart, self.handoff, profile=profile)
        self.reconciler = AttendeeReconciler(pending, services.registry)
        self.last_merge: MergeResult | None = None
        self.logger = logger.bind(session_id=self.session_id, user_id=self.user_id)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def open_guest(cls, services: CheckoutServices, guest_id: str | None = None) -> "CheckoutSession":
        guest_id = guest_id or uuid4().hex
        cart = CartStore(EphemeralBackend(services.store, guest_id))
        return cls(services, cart, auth=StaticAuthProvider(), guest_id=guest_id)

    @classmethod
    def open_authenticated(
        cls,
        services: CheckoutServices,
        auth: AuthProvider,
        profile: AuthSession,
        session_id: str | None = None,
    ) -> "CheckoutSession":
        cart = CartStore(RemoteBackend(services.remote_cart, profile.user_id))
        return cls(services, cart, auth=auth, session_id=session_id, profile=profile)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def user_id(self) -> str | None:
        return self.profile.user_id if self.profile else None

    @property
    def is_authenticated(self) -> bool:
        return self.profile is not None

    @property
    def is_member(self) -> bool:
        return self.profile.is_member() if self.profile else False

    @property
    def closed(self) -> bool:
        return self.cart.disposed

    async def start(self) -> "CheckoutSession":
        await self.cart.load()
        self.logger.info("checkout_session_started", authenticated=self.is_authenticated)
        return self

    async def sign_in(self, auth: AuthProvider) -> "CheckoutSession":
        """Open the signed-in session that replaces this guest session."""
        if self.is_authenticated:
            raise AuthError("Session is already signed in")
        profile = await auth.current_session()
        if profile is None:
            raise AuthError("Sign in to continue")

        successor = CheckoutSession.open_authenticated(self.services, auth, profile, session_id=self.session_id)
        await successor.start()

        guest_cart = self.cart.snapshot
        policy = self.services.settings.identity_transition
        if policy is IdentityTransition.MERGE and not guest_cart.is_empty:
            successor.last_merge = await successor.cart.adopt(guest_cart)
            await self._retain_unmerged(successor.last_merge)
        elif not guest_cart.is_empty:
            self.logger.info("guest_cart_discarded", items=guest_cart.item_count)
            await self._retain_unmerged(MergeResult())

        self.close()
        successor.logger.info("checkout_session_signed_in", policy=policy.value)
        return successor

    def close(self) -> None:
        """Dispose the session (sign-out or replacement)."""
        if not self.cart.disposed:
            self.cart.dispose()
            self.logger.info("checkout_session_closed")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def pricing(self) -> CartPricing:
        return price_cart(self.cart.snapshot, self.is_member)

    async def reconcile(self) -> ReconciliationResult:
        if self.user_id is None:
            raise AuthError("Sign in to continue")
        return await self.reconciler.run(self.user_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    async def _retain_unmerged(self, merge: MergeResult) -> None:
        """Leave only the lines that failed to merge in the guest cart."""
        try:
            if merge.complete:
                await self.cart.clear()
            else:
                for key in merge.merged:
                    await self.cart.remove_line(key)
        except RemoteWriteError as exc:
            self.logger.warning("guest_cart_trim_failed", error=exc.message)
