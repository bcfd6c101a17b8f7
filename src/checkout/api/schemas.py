"""Pydantic request/response schemas for the checkout API."""

from __future__ import annotations

from pydantic import AwareDatetime, BaseModel, Field

# --- Request Schemas ---


class OpenSessionRequest(BaseModel):
    guest_id: str | None = Field(None, max_length=64)


class SignInRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "0b6f7c1e-2f8e-4f41-9d7e-2a0c5f0d9a11",
                    "access_token": "eyJhbGciOi...",
                    "expires_in_seconds": 3600,
                    "subscription_status": "active",
                    "full_name": "Ana Maria Souza",
                    "email": "ana@example.com",
                }
            ]
        }
    }

    user_id: str = Field(..., max_length=64)
    access_token: str
    expires_in_seconds: int = Field(3600, ge=0)
    subscription_status: str | None = None
    subscription_expires_at: AwareDatetime | None = None
    full_name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=254)


class TicketCategorySchema(BaseModel):
    name: str
    price: float = Field(..., ge=0)
    member_price: float = Field(0, ge=0)


class ProductSchema(BaseModel):
    id: str
    name: str
    price: float = Field(..., ge=0)
    member_price: float = Field(0, ge=0)
    category: str = "merchandise"
    ticket_categories: list[TicketCategorySchema] = []


class TicketTypeSchema(BaseModel):
    id: str
    event_id: str
    event_title: str
    category_name: str
    price: float = Field(..., ge=0)
    member_price: float = Field(0, ge=0)
    event_start: str | None = None


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product": {"id": "prod-001", "name": "Academy T-Shirt", "price": 20, "member_price": 15},
                    "quantity": 2,
                    "variant": "M",
                }
            ]
        }
    }

    product: ProductSchema
    quantity: int = 1
    variant: str | None = Field(None, max_length=120)


class AddTicketRequest(BaseModel):
    ticket_type: TicketTypeSchema
    quantity: int = 1


class SetQuantityRequest(BaseModel):
    quantity: int


class AttendeeRequest(BaseModel):
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    email: str | None = Field(None, max_length=255)
    phone: str | None = Field(None, max_length=50)
    use_my_info: bool = False


class ContactRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=50)
    address: str | None = Field(None, max_length=500)
    notes: str | None = Field(None, max_length=1000)


# --- Response Schemas ---


class SessionResponse(BaseModel):
    session_id: str
    authenticated: bool
    user_id: str | None = None
    is_member: bool = False


class SignInResponse(SessionResponse):
    merged: list[str] = []
    failed: list[str] = []


class CartLineResponse(BaseModel):
    key: str
    kind: str
    name: str
    quantity: int
    unit_price: str
    unit_effective_price: str
    line_total: str
    line_savings: str
    variant: str | None = None


class CartResponse(BaseModel):
    lines: list[CartLineResponse]
    item_count: int
    total: str
    original_total: str
    savings: str


class AttendeeResponse(BaseModel):
    first_name: str
    last_name: str
    email: str
    phone: str
    correlation_id: str


class ContactResponse(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    notes: str


class WizardResponse(BaseModel):
    step: str
    attendees: list[AttendeeResponse]
    contact: ContactResponse
    last_error: dict[str, list[str]] | None = None


class SubmitResponse(BaseModel):
    order_id: str
    checkout_url: str
    total_amount: str


class ReconcileResponse(BaseModel):
    outcome: str
    order_id: str | None = None
    assigned: int
    unresolved_placeholders: list[str]
    unresolved_slots: list[str]
    next_view: str
