import json

import pytest

from checkout.attendees.allocator import flatten
from checkout.cart.items import TicketLineItem
from checkout.errors import RemoteReadError, RemoteWriteError
from checkout.handoff.pending import PendingCheckout, PendingCheckoutStore
from checkout.storage.memory_adapter import InMemoryKeyValueStore


class RecordingStore(InMemoryKeyValueStore):
    """Keeps the order of writes and can refuse writes for one entry name."""

    def __init__(self, fail_on=None):
        super().__init__()
        self.fail_on = fail_on
        self.writes = []

    async def set(self, key, value):
        if self.fail_on and key.endswith(self.fail_on):
            raise RemoteWriteError("storage full")
        self.writes.append(key)
        await super().set(key, value)


class TestPendingCheckoutStore:
    async def test_entries_are_stored_separately_per_user(self, kv, ticket_x):
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 2),)
        await store.save("user-1", PendingCheckout("order-1", tickets, tuple(flatten(tickets))))

        assert json.loads(kv.data["handoff:user-1:pendingOrderId"]) == "order-1"
        assert len(json.loads(kv.data["handoff:user-1:pendingEventTickets"])) == 1
        assert len(json.loads(kv.data["handoff:user-1:pendingAttendees"])) == 2
        assert json.loads(kv.data["handoff:user-1:pendingBoundAttendees"]) == []

    async def test_load_restores_record(self, kv, ticket_x):
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 2),)
        record = PendingCheckout("order-1", tickets, tuple(flatten(tickets)))
        await store.save("user-1", record)
        assert await store.load("user-1") == record

    async def test_no_order_id_means_nothing_pending(self, kv):
        kv.data["handoff:user-1:pendingAttendees"] = "[]"
        assert await PendingCheckoutStore(kv).load("user-1") is None

    async def test_mark_bound(self, kv, ticket_x):
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 2),)
        slots = tuple(flatten(tickets))
        await store.save("user-1", PendingCheckout("order-1", tickets, slots))

        await store.mark_bound("user-1", {slots[0].correlation_id})

        loaded = await store.load("user-1")
        assert loaded.unbound_slots == [slots[1]]

    async def test_delete_removes_every_entry(self, kv, ticket_x):
        store = PendingCheckoutStore(kv)
        await store.save("user-1", PendingCheckout("order-1"))
        await store.save("user-2", PendingCheckout("order-2"))
        await store.delete("user-1")
        assert all(not key.startswith("handoff:user-1:") for key in kv.data)
        assert await store.load("user-2") is not None


class TestPartialWrites:
    async def test_order_id_is_written_last(self, ticket_x):
        kv = RecordingStore()
        tickets = (TicketLineItem(ticket_x, 1),)
        await PendingCheckoutStore(kv).save("user-1", PendingCheckout("order-1", tickets, tuple(flatten(tickets))))
        assert kv.writes[-1] == "handoff:user-1:pendingOrderId"

    async def test_failed_save_leaves_nothing_pending(self, ticket_x):
        kv = RecordingStore(fail_on="pendingEventTickets")
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 2),)

        with pytest.raises(RemoteWriteError):
            await store.save("user-1", PendingCheckout("order-1", tickets, tuple(flatten(tickets))))

        assert all(not key.startswith("handoff:user-1:") for key in kv.data)
        assert await store.load("user-1") is None

    async def test_failed_rewrite_hides_earlier_record(self, ticket_x):
        kv = RecordingStore()
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 1),)
        await store.save("user-1", PendingCheckout("order-1", tickets, tuple(flatten(tickets))))

        kv.fail_on = "pendingAttendees"
        with pytest.raises(RemoteWriteError):
            await store.save("user-1", PendingCheckout("order-2", tickets, tuple(flatten(tickets))))

        assert await store.load("user-1") is None


class TestUnreadableEntries:
    async def test_corrupt_entry_reads_as_remote_read_error(self, kv, ticket_x):
        store = PendingCheckoutStore(kv)
        tickets = (TicketLineItem(ticket_x, 1),)
        await store.save("user-1", PendingCheckout("order-1", tickets, tuple(flatten(tickets))))
        kv.data["handoff:user-1:pendingAttendees"] = "{not json"

        with pytest.raises(RemoteReadError):
            await store.load("user-1")

    async def test_entry_with_wrong_shape_reads_as_remote_read_error(self, kv):
        kv.data["handoff:user-1:pendingOrderId"] = json.dumps("order-1")
        kv.data["handoff:user-1:pendingEventTickets"] = json.dumps([{"quantity": 1}])

        with pytest.raises(RemoteReadError):
            await PendingCheckoutStore(kv).load("user-1")
