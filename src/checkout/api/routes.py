"""FastAPI endpoints for checkout sessions, carts and the checkout wizard."""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException

from checkout.api.registry import SessionRegistry, get_session_registry
from checkout.api.schemas import (
    AddProductRequest,
    AddTicketRequest,
    AttendeeRequest,
    AttendeeResponse,
    CartLineResponse,
    CartResponse,
    ContactRequest,
    ContactResponse,
    OpenSessionRequest,
    ReconcileResponse,
    SessionResponse,
    SetQuantityRequest,
    SignInRequest,
    SignInResponse,
    SubmitResponse,
    WizardResponse,
)
from checkout.auth import AuthSession, StaticAuthProvider
from checkout.cart.items import LineItem, LineKey, ProductRef, TicketTypeRef
from checkout.session import CheckoutSession
from checkout.wizard.wizard import WizardStep

router = APIRouter(prefix="/sessions", tags=["checkout"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _session(session_id: str, registry: SessionRegistry) -> CheckoutSession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    return session


def _line_key(value: str) -> LineKey:
    try:
        return LineKey.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _session_response(session: CheckoutSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        authenticated=session.is_authenticated,
        user_id=session.user_id,
        is_member=session.is_member,
    )


def _cart_response(session: CheckoutSession) -> CartResponse:
    snapshot = session.cart.snapshot
    pricing = session.pricing()
    lines = []
    for entry in (*snapshot.lines, *snapshot.tickets):
        priced = pricing.for_key(entry.key)
        if isinstance(entry, LineItem):
            name, variant = entry.product.name, entry.selected_variant
        else:
            name, variant = entry.ticket_type.display_name, None
        lines.append(
            CartLineResponse(
                key=str(entry.key),
                kind=entry.key.kind.value,
                name=name,
                variant=variant,
                quantity=entry.quantity,
                unit_price=str(priced.unit_price),
                unit_effective_price=str(priced.unit_effective_price),
                line_total=str(priced.line_total),
                line_savings=str(priced.line_savings),
            )
        )
    return CartResponse(
        lines=lines,
        item_count=snapshot.item_count,
        total=str(pricing.total),
        original_total=str(pricing.original_total),
        savings=str(pricing.savings),
    )


def _wizard_response(session: CheckoutSession) -> WizardResponse:
    wizard = session.wizard
    return WizardResponse(
        step=wizard.step.value,
        attendees=[AttendeeResponse(**slot.to_dict()) for slot in wizard.attendees],
        contact=ContactResponse(**wizard.contact.to_dict()),
        last_error=wizard.last_error,
    )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------
@router.post("", status_code=201, response_model=SessionResponse)
async def open_session(
    body: OpenSessionRequest | None = None,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    guest_id = body.guest_id if body else None
    session = CheckoutSession.open_guest(registry.services, guest_id=guest_id)
    await session.start()
    registry.add(session)
    return _session_response(session)


@router.post("/{session_id}/sign-in", response_model=SignInResponse)
async def sign_in(
    session_id: str,
    body: SignInRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> SignInResponse:
    guest = _session(session_id, registry)
    auth = StaticAuthProvider(
        AuthSession(
            user_id=body.user_id,
            access_token=body.access_token,
            expires_at=datetime.now(UTC) + timedelta(seconds=body.expires_in_seconds),
            subscription_status=body.subscription_status,
            subscription_expires_at=body.subscription_expires_at,
            full_name=body.full_name,
            email=body.email,
        )
    )
    session = await guest.sign_in(auth)
    registry.add(session)
    merge = session.last_merge
    return SignInResponse(
        **_session_response(session).model_dump(),
        merged=[str(key) for key in merge.merged] if merge else [],
        failed=[str(key) for key in merge.failed] if merge else [],
    )


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> None:
    session = registry.remove(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Session {session_id} not found")
    session.close()


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
@router.get("/{session_id}/cart", response_model=CartResponse)
async def get_cart(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> CartResponse:
    return _cart_response(_session(session_id, registry))


@router.post("/{session_id}/cart/products", response_model=CartResponse)
async def add_product(
    session_id: str,
    body: AddProductRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CartResponse:
    session = _session(session_id, registry)
    await session.cart.add_line(ProductRef.from_dict(body.product.model_dump()), body.quantity, body.variant)
    return _cart_response(session)


@router.post("/{session_id}/cart/tickets", response_model=CartResponse)
async def add_ticket(
    session_id: str,
    body: AddTicketRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CartResponse:
    session = _session(session_id, registry)
    await session.cart.add_line(TicketTypeRef.from_dict(body.ticket_type.model_dump()), body.quantity)
    return _cart_response(session)


@router.put("/{session_id}/cart/lines/{line_key}", response_model=CartResponse)
async def set_quantity(
    session_id: str,
    line_key: str,
    body: SetQuantityRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CartResponse:
    session = _session(session_id, registry)
    await session.cart.set_quantity(_line_key(line_key), body.quantity)
    return _cart_response(session)


@router.delete("/{session_id}/cart/lines/{line_key}", response_model=CartResponse)
async def remove_line(
    session_id: str,
    line_key: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> CartResponse:
    session = _session(session_id, registry)
    await session.cart.remove_line(_line_key(line_key))
    return _cart_response(session)


@router.delete("/{session_id}/cart", response_model=CartResponse)
async def clear_cart(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> CartResponse:
    session = _session(session_id, registry)
    await session.cart.clear()
    return _cart_response(session)


# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------
@router.get("/{session_id}/wizard", response_model=WizardResponse)
async def get_wizard(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> WizardResponse:
    session = _session(session_id, registry)
    if session.wizard.step is WizardStep.ATTENDEES:
        session.wizard.refresh()
    return _wizard_response(session)


@router.post("/{session_id}/wizard/advance", response_model=WizardResponse)
async def advance(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> WizardResponse:
    session = _session(session_id, registry)
    session.wizard.advance()
    return _wizard_response(session)


@router.post("/{session_id}/wizard/back", response_model=WizardResponse)
async def back(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> WizardResponse:
    session = _session(session_id, registry)
    session.wizard.back()
    return _wizard_response(session)


@router.put("/{session_id}/wizard/attendees/{index}", response_model=WizardResponse)
async def update_attendee(
    session_id: str,
    index: int,
    body: AttendeeRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> WizardResponse:
    session = _session(session_id, registry)
    if body.use_my_info:
        session.wizard.use_profile_for(index)
    else:
        session.wizard.update_attendee(index, **body.model_dump(exclude={"use_my_info"}, exclude_unset=True))
    return _wizard_response(session)


@router.put("/{session_id}/wizard/contact", response_model=WizardResponse)
async def set_contact(
    session_id: str,
    body: ContactRequest,
    registry: SessionRegistry = Depends(get_session_registry),
) -> WizardResponse:
    session = _session(session_id, registry)
    session.wizard.set_contact(**body.model_dump(exclude_unset=True))
    return _wizard_response(session)


@router.post("/{session_id}/wizard/submit", response_model=SubmitResponse)
async def submit(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> SubmitResponse:
    session = _session(session_id, registry)
    result = await session.wizard.submit()
    return SubmitResponse(
        order_id=result.order_id,
        checkout_url=result.checkout_url,
        total_amount=str(result.total_amount),
    )


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------
@router.post("/{session_id}/reconcile", response_model=ReconcileResponse)
async def reconcile(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> ReconcileResponse:
    session = _session(session_id, registry)
    result = await session.reconcile()
    return ReconcileResponse(
        outcome=result.outcome.value,
        order_id=result.order_id,
        assigned=result.assigned,
        unresolved_placeholders=list(result.unresolved_placeholders),
        unresolved_slots=list(result.unresolved_slots),
        next_view=result.next_view,
    )
