"""Cart persistence backends.

A store gets exactly one backend for its whole life, chosen when the session
opens: guests persist the serialized snapshot to the key/value store, signed-in
users persist individual rows through the remote cart service.
"""

from abc import ABC, abstractmethod
from dataclasses import replace

from checkout.cart.commands import AddLine, CartCommand, ClearCart, RemoveLine, SetQuantity
from checkout.cart.items import LineItem, LineKind
from checkout.cart.remote.port import RemoteCartService
from checkout.cart.snapshot import CartSnapshot
from checkout.errors import RemoteReadError
from checkout.storage.port import KeyValueStore


class CartBackend(ABC):
    @abstractmethod
    async def load(self) -> CartSnapshot:
        """Return the persisted cart. Raises RemoteReadError."""
        ...

    @abstractmethod
    async def persist(self, command: CartCommand, before: CartSnapshot, after: CartSnapshot) -> CartSnapshot:
        """Persist the effect of ``command`` and return the confirmed snapshot.

        Raises RemoteWriteError when nothing could be written.
        """
        ...


class EphemeralBackend(CartBackend):
    """Guest cart, stored whole as JSON under ``cart:<guest_id>``."""

    def __init__(self, store: KeyValueStore, guest_id: str) -> None:
        self.store = store
        self.guest_id = guest_id

    @property
    def storage_key(self) -> str:
        return f"cart:{self.guest_id}"

    async def load(self) -> CartSnapshot:
        raw = await self.store.get(self.storage_key)
        try:
            return CartSnapshot.from_json(raw)
        except (ValueError, KeyError, TypeError) as exc:
            raise RemoteReadError(f"Stored cart {self.storage_key} is unreadable: {exc}") from exc

    async def persist(self, command: CartCommand, before: CartSnapshot, after: CartSnapshot) -> CartSnapshot:
        if after.is_empty:
            await self.store.delete(self.storage_key)
        else:
            await self.store.set(self.storage_key, after.to_json())
        return after


class RemoteBackend(CartBackend):
    """Signed-in cart, one remote row per line."""

    def __init__(self, service: RemoteCartService, user_id: str) -> None:
        self.service = service
        self.user_id = user_id

    async def load(self) -> CartSnapshot:
        return await self.service.fetch(self.user_id)

    async def persist(self, command: CartCommand, before: CartSnapshot, after: CartSnapshot) -> CartSnapshot:
        if isinstance(command, ClearCart):
            await self.service.clear(self.user_id)
            return after

        if isinstance(command, (AddLine, SetQuantity)) and after.find(command.key) is not None:
            entry = after.find(command.key)
            if isinstance(entry, LineItem):
                row_id = await self.service.upsert_product(self.user_id, entry)
            else:
                row_id = await self.service.upsert_ticket(self.user_id, entry)
            return after.put(replace(entry, server_row_id=row_id))

        if isinstance(command, (RemoveLine, SetQuantity)):
            key = command.key
            if key.kind is LineKind.PRODUCT:
                await self.service.delete_product(self.user_id, key.ref_id, key.variant)
            else:
                await self.service.delete_ticket(self.user_id, key.ref_id)
            return after

        raise TypeError(f"Unsupported cart command: {command!r}")
