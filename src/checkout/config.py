"""Environment-driven settings for the checkout engine."""

import os
from dataclasses import dataclass
from enum import Enum


class IdentityTransition(Enum):
    """What happens to the guest cart when the visitor signs in."""

    MERGE = "merge"
    DISCARD = "discard"


@dataclass(frozen=True)
class Settings:
    public_url: str = "http://localhost:5173"
    storage: str = "memory"
    redis_url: str | None = None
    remote_cart_adapter: str = "protean"
    order_service_adapter: str = "fake"
    order_service_url: str | None = None
    payment_adapter: str = "fake"
    payment_service_url: str | None = None
    service_api_key: str | None = None
    session_refresh_window_seconds: int = 60
    identity_transition: IdentityTransition = IdentityTransition.MERGE
    handoff_ttl_seconds: int = 7 * 24 * 60 * 60
    session_idle_seconds: int = 30 * 60

    @property
    def success_url(self) -> str:
        return f"{self.public_url.rstrip('/')}/my-purchases?payment=success&session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.public_url.rstrip('/')}/my-purchases?payment=cancelled"


def load_settings() -> Settings:
    """Read settings from the environment."""
    transition = os.getenv("IDENTITY_TRANSITION", IdentityTransition.MERGE.value).strip().lower()
    try:
        identity_transition = IdentityTransition(transition)
    except ValueError:
        raise ValueError(f"Unknown identity transition policy: {transition}") from None

    return Settings(
        public_url=os.getenv("CHECKOUT_PUBLIC_URL", "http://localhost:5173"),
        storage=os.getenv("CHECKOUT_STORAGE", "memory").lower(),
        redis_url=os.getenv("REDIS_URL"),
        remote_cart_adapter=os.getenv("REMOTE_CART_ADAPTER", "protean").lower(),
        order_service_adapter=os.getenv("ORDER_SERVICE_ADAPTER", "fake").lower(),
        order_service_url=os.getenv("ORDER_SERVICE_URL"),
        payment_adapter=os.getenv("PAYMENT_ADAPTER", "fake").lower(),
        payment_service_url=os.getenv("PAYMENT_SERVICE_URL"),
        service_api_key=os.getenv("SERVICE_API_KEY"),
        session_refresh_window_seconds=int(os.getenv("SESSION_REFRESH_WINDOW_SECONDS", "60")),
        identity_transition=identity_transition,
        handoff_ttl_seconds=int(os.getenv("HANDOFF_TTL_SECONDS", str(7 * 24 * 60 * 60))),
        session_idle_seconds=int(os.getenv("SESSION_IDLE_SECONDS", str(30 * 60))),
    )
