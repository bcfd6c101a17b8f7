"""Authentication collaborator.

Sign-in itself lives elsewhere; the checkout engine only needs the current
session, the ability to refresh it, and whether the user is a member.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from checkout.errors import AuthError
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


def _as_utc(value: datetime) -> datetime:
    """Timestamps without an offset are taken to be UTC."""
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


@dataclass(frozen=True)
class AuthSession:
    user_id: str
    access_token: str
    expires_at: datetime
    subscription_status: str | None = None
    subscription_expires_at: datetime | None = None
    full_name: str | None = None
    email: str | None = None

    def is_member(self, now: datetime | None = None) -> bool:
        """Active platform subscription that has not expired."""
        now = now or datetime.now(UTC)
        if self.subscription_status != "active":
            return False
        return self.subscription_expires_at is None or _as_utc(self.subscription_expires_at) > _as_utc(now)

    def expires_within(self, seconds: int, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        return _as_utc(self.expires_at) - _as_utc(now) < timedelta(seconds=seconds)


class AuthProvider(ABC):
    @abstractmethod
    async def current_session(self) -> AuthSession | None: ...

    @abstractmethod
    async def refresh(self, session: AuthSession) -> AuthSession:
        """Return a renewed session. Raises AuthError when renewal is refused."""
        ...


class StaticAuthProvider(AuthProvider):
    """Holds one session in memory; refreshing issues a new token."""

    def __init__(self, session: AuthSession | None = None, session_ttl: timedelta = timedelta(hours=1)) -> None:
        self.session = session
        self.session_ttl = session_ttl
        self.refresh_fails = False
        self.refresh_count = 0

    async def current_session(self) -> AuthSession | None:
        return self.session

    async def refresh(self, session: AuthSession) -> AuthSession:
        if self.refresh_fails:
            raise AuthError("Session expired, please sign in again")
        self.refresh_count += 1
        self.session = replace(
            session,
            access_token=f"token_{uuid4().hex[:16]}",
            expires_at=datetime.now(UTC) + self.session_ttl,
        )
        return self.session

    def sign_out(self) -> None:
        self.session = None


async def ensure_fresh_session(provider: AuthProvider, window_seconds: int = 60) -> AuthSession:
    """Current session, refreshed first when it expires within the window."""
    session = await provider.current_session()
    if session is None:
        raise AuthError("Sign in to continue")
    if session.expires_within(window_seconds):
        logger.info("auth_session_refresh", user_id=session.user_id)
        session = await provider.refresh(session)
    return session
