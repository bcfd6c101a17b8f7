"""In-process registry of open checkout sessions.

Sessions that go unused for longer than the idle window are closed and
dropped the next time the registry is touched.
"""

import time
from collections.abc import Callable

from checkout.session import CheckoutServices, CheckoutSession, build_services
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


class SessionRegistry:
    def __init__(
        self,
        services: CheckoutServices | None = None,
        idle_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._services = services
        self._idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: dict[str, CheckoutSession] = {}
        self._last_seen: dict[str, float] = {}

    @property
    def services(self) -> CheckoutServices:
        if self._services is None:
            self._services = build_services()
        return self._services

    @property
    def idle_seconds(self) -> float:
        if self._idle_seconds is None:
            self._idle_seconds = self.services.settings.session_idle_seconds
        return self._idle_seconds

    def add(self, session: CheckoutSession) -> CheckoutSession:
        self.prune()
        self._sessions[session.session_id] = session
        self._last_seen[session.session_id] = self._clock()
        return session

    def get(self, session_id: str) -> CheckoutSession | None:
        self.prune()
        session = self._sessions.get(session_id)
        if session is not None:
            self._last_seen[session_id] = self._clock()
        return session

    def remove(self, session_id: str) -> CheckoutSession | None:
        self._last_seen.pop(session_id, None)
        return self._sessions.pop(session_id, None)

    def prune(self) -> int:
        """Close and drop sessions that are idle or already closed."""
        cutoff = self._clock() - self.idle_seconds
        stale = [
            session_id
            for session_id, session in self._sessions.items()
            if session.closed or self._last_seen[session_id] <= cutoff
        ]
        for session_id in stale:
            self.remove(session_id).close()
        if stale:
            logger.info("checkout_sessions_pruned", count=len(stale), remaining=len(self._sessions))
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)


_current_registry: SessionRegistry | None = None


def get_session_registry() -> SessionRegistry:
    global _current_registry
    if _current_registry is None:
        _current_registry = SessionRegistry()
    return _current_registry


def set_session_registry(registry: SessionRegistry) -> None:
    """Override the active registry (useful for tests)."""
    global _current_registry
    _current_registry = registry


def reset_session_registry() -> None:
    global _current_registry
    _current_registry = None
