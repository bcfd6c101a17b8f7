"""Remote cart backed by the checkout domain's repositories.

Runs inside whatever domain context is active (the API middleware pushes one
per request; tests push one per session). Provider failures are surfaced as
RemoteReadError / RemoteWriteError so the cart store can roll back.
"""

from protean import current_domain

from checkout.cart.items import LineItem, TicketLineItem
from checkout.cart.remote.port import RemoteCartService
from checkout.cart.rows import CartProductRow, CartTicketRow
from checkout.cart.snapshot import CartSnapshot
from checkout.errors import RemoteReadError, RemoteWriteError
from checkout.utils.logging import get_logger

logger = get_logger(__name__)


def _rows_for(aggregate_cls, user_id: str) -> list:
    repo = current_domain.repository_for(aggregate_cls)
    rows = repo._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(rows, key=lambda row: (row.created_at is None, row.created_at))


class ProteanRemoteCart(RemoteCartService):
    async def fetch(self, user_id: str) -> CartSnapshot:
        try:
            products = _rows_for(CartProductRow, user_id)
            tickets = _rows_for(CartTicketRow, user_id)
        except Exception as exc:
            logger.warning("remote_cart_fetch_failed", user_id=user_id, error=str(exc))
            raise RemoteReadError(f"Could not load cart: {exc}") from exc

        return CartSnapshot(
            lines=tuple(row.to_line() for row in products),
            tickets=tuple(row.to_line() for row in tickets),
        )

    async def upsert_product(self, user_id: str, item: LineItem) -> str:
        try:
            repo = current_domain.repository_for(CartProductRow)
            existing = next(
                (
                    row
                    for row in _rows_for(CartProductRow, user_id)
                    if row.matches(item.product.id, item.selected_variant)
                ),
                None,
            )
            if existing is None:
                row = CartProductRow.create(user_id, item)
            else:
                row = existing
                row.set_quantity(item.quantity)
            repo.add(row)
        except Exception as exc:
            logger.warning("remote_cart_write_failed", user_id=user_id, op="upsert_product", error=str(exc))
            raise RemoteWriteError(f"Could not save cart item: {exc}") from exc
        return str(row.id)

    async def delete_product(self, user_id: str, product_id: str, variant: str | None) -> None:
        try:
            repo = current_domain.repository_for(CartProductRow)
            for row in _rows_for(CartProductRow, user_id):
                if row.matches(product_id, variant):
                    repo._dao.delete(row)
        except Exception as exc:
            logger.warning("remote_cart_write_failed", user_id=user_id, op="delete_product", error=str(exc))
            raise RemoteWriteError(f"Could not remove cart item: {exc}") from exc

    async def upsert_ticket(self, user_id: str, item: TicketLineItem) -> str:
        try:
            repo = current_domain.repository_for(CartTicketRow)
            existing = next(
                (
                    row
                    for row in _rows_for(CartTicketRow, user_id)
                    if str(row.event_ticket_type_id) == str(item.ticket_type.id)
                ),
                None,
            )
            if existing is None:
                row = CartTicketRow.create(user_id, item)
            else:
                row = existing
                row.set_quantity(item.quantity)
            repo.add(row)
        except Exception as exc:
            logger.warning("remote_cart_write_failed", user_id=user_id, op="upsert_ticket", error=str(exc))
            raise RemoteWriteError(f"Could not save ticket: {exc}") from exc
        return str(row.id)

    async def delete_ticket(self, user_id: str, ticket_type_id: str) -> None:
        try:
            repo = current_domain.repository_for(CartTicketRow)
            for row in _rows_for(CartTicketRow, user_id):
                if str(row.event_ticket_type_id) == str(ticket_type_id):
                    repo._dao.delete(row)
        except Exception as exc:
            logger.warning("remote_cart_write_failed", user_id=user_id, op="delete_ticket", error=str(exc))
            raise RemoteWriteError(f"Could not remove ticket: {exc}") from exc

    async def clear(self, user_id: str) -> None:
        try:
            for aggregate_cls in (CartProductRow, CartTicketRow):
                repo = current_domain.repository_for(aggregate_cls)
                for row in _rows_for(aggregate_cls, user_id):
                    repo._dao.delete(row)
        except Exception as exc:
            logger.warning("remote_cart_write_failed", user_id=user_id, op="clear", error=str(exc))
            raise RemoteWriteError(f"Could not clear cart: {exc}") from exc

