"""Remote cart port (abstract interface).

Authenticated carts are mirrored as per-user rows keyed by
(user, product, variant) and (user, event ticket type). Upserts set the
quantity absolutely, so concurrent sessions of one user resolve as last
write wins.
"""

from abc import ABC, abstractmethod

from checkout.cart.items import LineItem, TicketLineItem
from checkout.cart.snapshot import CartSnapshot


class RemoteCartService(ABC):
    """Abstract per-user cart row store."""

    @abstractmethod
    async def fetch(self, user_id: str) -> CartSnapshot:
        """Return the user's cart in row creation order. Raises RemoteReadError."""
        ...

    @abstractmethod
    async def upsert_product(self, user_id: str, item: LineItem) -> str:
        """Write the row for the item's (product, variant) and return its id."""
        ...

    @abstractmethod
    async def delete_product(self, user_id: str, product_id: str, variant: str | None) -> None: ...

    @abstractmethod
    async def upsert_ticket(self, user_id: str, item: TicketLineItem) -> str:
        """Write the row for the item's ticket type and return its id."""
        ...

    @abstractmethod
    async def delete_ticket(self, user_id: str, ticket_type_id: str) -> None: ...

    @abstractmethod
    async def clear(self, user_id: str) -> None: ...
