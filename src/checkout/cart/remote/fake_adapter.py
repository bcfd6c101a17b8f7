"""Configurable in-memory remote cart for development and testing.

Every call is recorded; individual operations can be switched to fail so the
optimistic rollback path can be exercised without a real backend.
"""

from dataclasses import replace
from uuid import uuid4

from checkout.cart.items import LineItem, LineKey, TicketLineItem
from checkout.cart.remote.port import RemoteCartService
from checkout.cart.snapshot import CartSnapshot
from checkout.errors import RemoteReadError, RemoteWriteError


class FakeRemoteCart(RemoteCartService):
    def __init__(self) -> None:
        self.rows: dict[str, dict[LineKey, LineItem | TicketLineItem]] = {}
        self.failing: set[str] = set()
        self.failure_reason: str = "Remote cart unavailable"
        self.calls: list[dict] = []

    def configure(self, failing: set[str] | None = None, failure_reason: str = "Remote cart unavailable") -> None:
        """Make the named operations (e.g. {"upsert_product", "fetch"}) fail."""
        self.failing = set(failing or ())
        self.failure_reason = failure_reason

    def snapshot_for(self, user_id: str) -> CartSnapshot:
        """Current server-side state, bypassing failure injection."""
        rows = self.rows.get(user_id, {})
        return CartSnapshot(
            lines=tuple(e for e in rows.values() if isinstance(e, LineItem)),
            tickets=tuple(e for e in rows.values() if isinstance(e, TicketLineItem)),
        )

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append({"method": method, **kwargs})
        if method in self.failing:
            if method == "fetch":
                raise RemoteReadError(self.failure_reason)
            raise RemoteWriteError(self.failure_reason)

    def _upsert(self, user_id: str, entry):
        rows = self.rows.setdefault(user_id, {})
        existing = rows.get(entry.key)
        row_id = existing.server_row_id if existing is not None else f"row_{uuid4().hex[:12]}"
        rows[entry.key] = replace(entry, server_row_id=row_id)
        return row_id

    async def fetch(self, user_id: str) -> CartSnapshot:
        self._record("fetch", user_id=user_id)
        return self.snapshot_for(user_id)

    async def upsert_product(self, user_id: str, item: LineItem) -> str:
        self._record("upsert_product", user_id=user_id, key=str(item.key), quantity=item.quantity)
        return self._upsert(user_id, item)

    async def delete_product(self, user_id: str, product_id: str, variant: str | None) -> None:
        key = LineKey.product(product_id, variant)
        self._record("delete_product", user_id=user_id, key=str(key))
        self.rows.get(user_id, {}).pop(key, None)

    async def upsert_ticket(self, user_id: str, item: TicketLineItem) -> str:
        self._record("upsert_ticket", user_id=user_id, key=str(item.key), quantity=item.quantity)
        return self._upsert(user_id, item)

    async def delete_ticket(self, user_id: str, ticket_type_id: str) -> None:
        key = LineKey.ticket(ticket_type_id)
        self._record("delete_ticket", user_id=user_id, key=str(key))
        self.rows.get(user_id, {}).pop(key, None)

    async def clear(self, user_id: str) -> None:
        self._record("clear", user_id=user_id)
        self.rows.pop(user_id, None)
