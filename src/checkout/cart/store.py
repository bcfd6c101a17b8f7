"""CartStore — the session's cart, applied optimistically.

Every mutation runs as a command: the store captures the snapshot it is about
to replace, shows the command's result immediately, then waits for the
backend. If the backend write fails the captured snapshot comes back and the
error propagates to the caller; nothing is retried.
"""

from dataclasses import dataclass, field, replace

from checkout.cart.backends import CartBackend
from checkout.cart.commands import AddLine, CartCommand, ClearCart, RemoveLine, SetQuantity
from checkout.cart.items import LineItem, LineKey, ProductRef, TicketLineItem, TicketTypeRef
from checkout.cart.snapshot import CartSnapshot
from checkout.errors import AuthError, RemoteReadError, RemoteWriteError
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class MergeResult:
    """Outcome of adopting a guest cart into a signed-in cart."""

    merged: list[LineKey] = field(default_factory=list)
    failed: list[LineKey] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed


class CartStore:
    def __init__(self, backend: CartBackend) -> None:
        self.backend = backend
        self._snapshot = CartSnapshot()
        self._generation = 0
        self._disposed = False
        self.loaded = False

    @property
    def snapshot(self) -> CartSnapshot:
        return self._snapshot

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def load(self) -> CartSnapshot:
        """Refresh from the backend.

        A failed read keeps whatever is currently shown. A result that arrives
        after disposal, or after a local mutation started, is ignored.
        """
        self._ensure_open()
        generation = self._generation
        try:
            loaded = await self.backend.load()
        except RemoteReadError as exc:
            logger.warning("cart_load_failed", error=exc.message)
            return self._snapshot

        if self._disposed or generation != self._generation:
            logger.debug("cart_load_discarded", generation=generation)
            return self._snapshot

        self._snapshot = loaded
        self.loaded = True
        return self._snapshot

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def add_line(
        self,
        ref: ProductRef | TicketTypeRef,
        quantity: int = 1,
        variant: str | None = None,
    ) -> CartSnapshot:
        if isinstance(ref, TicketTypeRef):
            entry = TicketLineItem(ticket_type=ref, quantity=quantity)
        else:
            entry = LineItem(product=ref, quantity=quantity, selected_variant=variant or None)
        return await self._execute(AddLine(entry))

    async def remove_line(self, key: LineKey) -> CartSnapshot:
        return await self._execute(RemoveLine(key))

    async def set_quantity(self, key: LineKey, quantity: int) -> CartSnapshot:
        return await self._execute(SetQuantity(key, quantity))

    async def clear(self) -> CartSnapshot:
        return await self._execute(ClearCart())

    async def adopt(self, guest: CartSnapshot) -> MergeResult:
        """Add every line of a guest cart to this one, one write per line.

        Quantities sum on matching keys. A line whose write fails is reported
        in ``failed`` and the lines already merged stay merged.
        """
        result = MergeResult()
        for entry in (*guest.lines, *guest.tickets):
            command = AddLine(replace(entry, server_row_id=None))
            try:
                await self._execute(command)
            except RemoteWriteError as exc:
                logger.warning("cart_merge_line_failed", line_key=str(entry.key), error=exc.message)
                result.failed.append(entry.key)
            else:
                result.merged.append(entry.key)
        logger.info("cart_merged", merged=len(result.merged), failed=len(result.failed))
        return result

    def forget(self) -> None:
        """Drop the local snapshot without writing to the backend."""
        self._generation += 1
        self._snapshot = CartSnapshot()

    def dispose(self) -> None:
        """Close the store. In-flight results are ignored from now on."""
        self._disposed = True
        self._generation += 1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ensure_open(self) -> None:
        if self._disposed:
            raise AuthError("session closed")

    async def _execute(self, command: CartCommand) -> CartSnapshot:
        self._ensure_open()
        before = self._snapshot
        after = command.apply(before)

        self._generation += 1
        generation = self._generation
        self._snapshot = after

        try:
            confirmed = await self.backend.persist(command, before, after)
        except RemoteWriteError as exc:
            logger.warning(
                "cart_write_failed",
                command=type(command).__name__,
                line_key=str(getattr(command, "key", "")) or None,
                error=exc.message,
            )
            if not self._disposed:
                self._restore(command, before, generation)
            raise

        if self._disposed:
            return self._snapshot
        if generation == self._generation:
            self._snapshot = confirmed
        elif hasattr(command, "key"):
            # A later mutation is showing; only carry the confirmed row id over.
            self._adopt_row_id(command.key, confirmed)
        return self._snapshot

    def _restore(self, command: CartCommand, before: CartSnapshot, generation: int) -> None:
        if generation == self._generation or not hasattr(command, "key"):
            self._snapshot = before
            return
        # Later mutations are already showing: restore just this line from the
        # captured snapshot.
        previous = before.find(command.key)
        if previous is None:
            self._snapshot = self._snapshot.without(command.key)
        else:
            self._snapshot = self._snapshot.put(previous)

    def _adopt_row_id(self, key: LineKey, confirmed: CartSnapshot) -> None:
        current = self._snapshot.find(key)
        persisted = confirmed.find(key)
        if current is not None and persisted is not None and persisted.server_row_id:
            self._snapshot = self._snapshot.put(replace(current, server_row_id=persisted.server_row_id))

