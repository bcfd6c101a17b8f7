"""Error taxonomy for the checkout engine.

``ValidationError`` blocks a transition before anything touches the network.
The remaining errors come from collaborators:

- ``RemoteWriteError``: a remote write failed after the optimistic local change
  was applied; the caller restores the pre-mutation snapshot.
- ``RemoteReadError``: a remote read failed; callers keep their current state.
- ``AuthError``: no session, or the session expired.
- ``ExternalServiceError``: the order or payment service rejected the request.
"""

from protean.exceptions import ValidationError

__all__ = [
    "AuthError",
    "CheckoutError",
    "ExternalServiceError",
    "RemoteReadError",
    "RemoteWriteError",
    "ValidationError",
]


class CheckoutError(Exception):
    """Base class for collaborator failures surfaced by the checkout engine."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class RemoteWriteError(CheckoutError):
    pass


class RemoteReadError(CheckoutError):
    pass


class AuthError(CheckoutError):
    """The action requires a signed-in user with a live session."""


class ExternalServiceError(CheckoutError):
    """Opaque rejection from the order or payment service, shown verbatim."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
