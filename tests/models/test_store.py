"""Unit tests for QuoteStore.

Covers revision/listener behavior, structural ordering checks, cascade
removal, and the restore operations used by undo.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from models.catalog import Customer
from models.errors import InvalidReferenceError, InvalidStateError
from models.quote import Processing, RoomSpec
from models.store import QuoteStore, new_id

NOW = datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc)


def create_store(with_customer: bool = True) -> QuoteStore:
    store = QuoteStore()
    store.create_quote("quote-1", "Q-000001", NOW, NOW + timedelta(days=30))
    if with_customer:
        store.select_customer(Customer(id="cust_a", name="Acme Builders"))
    return store


def make_processing(product_id: str, processing_id: str = "pr_install") -> Processing:
    return Processing(
        id=new_id("proc"),
        product_id=product_id,
        processing_id=processing_id,
        kind="Hardware",
        label="Install",
        surcharge=Decimal("20.00"),
    )


@pytest.fixture
def store():
    return create_store()


@pytest.fixture
def populated(store, small_catalog):
    """Store with one room holding one cabinet carrying one processing."""
    room = store.create_room(RoomSpec(room_type="Kitchen", style_id="style_a"))
    product = store.add_product(room.id, small_catalog.get_product("p_base"), 2)
    processing = store.add_processing(product.id, make_processing(product.id))
    return store, room, product, processing


class TestNewId:
    def test_prefix_and_uniqueness(self):
        first, second = new_id("room"), new_id("room")
        assert first.startswith("room_")
        assert len(first) == len("room_") + 12
        assert first != second


class TestRevisionAndListeners:
    def test_every_mutation_bumps_revision(self):
        store = QuoteStore()
        assert store.revision == 0
        store.create_quote("q", "Q-1", NOW, NOW)
        assert store.revision == 1
        store.set_notes("hello")
        assert store.revision == 2

    def test_listener_receives_changes(self):
        store = QuoteStore()
        changes = []
        store.subscribe(changes.append)

        store.create_quote("q", "Q-1", NOW, NOW)
        store.select_customer(Customer(id="c", name="C"))

        assert [(c.action, c.entity) for c in changes] == [
            ("created", "quote"),
            ("selected", "customer"),
        ]
        assert changes[-1].revision == 2

    def test_unsubscribe(self):
        store = QuoteStore()
        changes = []
        store.subscribe(changes.append)
        store.unsubscribe(changes.append)
        store.create_quote("q", "Q-1", NOW, NOW)
        assert changes == []

    def test_rejected_mutation_keeps_revision(self, store):
        revision = store.revision
        with pytest.raises(InvalidReferenceError):
            store.remove_room("room_missing")
        assert store.revision == revision


class TestOrdering:
    def test_snapshot_without_quote_raises(self):
        with pytest.raises(InvalidStateError):
            QuoteStore().snapshot()

    def test_room_requires_customer(self):
        store = create_store(with_customer=False)
        with pytest.raises(InvalidStateError, match="customer must be selected"):
            store.create_room(RoomSpec(room_type="Kitchen", style_id="style_a"))

    def test_customer_can_only_be_set_once(self, store):
        with pytest.raises(InvalidStateError, match="already selected"):
            store.select_customer(Customer(id="cust_b", name="Beta Homes"))
        assert store.snapshot().customer.id == "cust_a"

    def test_product_requires_existing_room(self, store, small_catalog):
        with pytest.raises(InvalidReferenceError):
            store.add_product("room_missing", small_catalog.get_product("p_base"))

    def test_processing_must_belong_to_product(self, populated):
        store, _, product, _ = populated
        with pytest.raises(InvalidStateError):
            store.add_processing(product.id, make_processing("prod_other"))


class TestCopies:
    def test_snapshot_is_a_deep_copy(self, populated):
        store, room, _, _ = populated
        snapshot = store.snapshot()
        snapshot.rooms[0].products.clear()
        assert len(store.get_room(room.id).products) == 1


class TestCascadeRemoval:
    def test_removing_room_removes_products_and_processings(self, populated):
        store, room, product, _ = populated

        removed, index = store.remove_room(room.id)

        assert index == 0
        assert removed.products[0].processings
        assert store.snapshot().find_product(product.id) is None
        with pytest.raises(InvalidReferenceError):
            store.get_product(product.id)

    def test_removing_product_removes_processings(self, populated):
        store, room, product, processing = populated

        removed, _ = store.remove_product(product.id)

        assert removed.processings[0].id == processing.id
        assert store.get_room(room.id).products == []

    def test_remove_processing_by_definition_id(self, populated):
        store, _, product, processing = populated
        removed, index = store.remove_processing(product.id, "pr_install")
        assert removed.id == processing.id
        assert index == 0
        assert store.get_product(product.id).processings == []


class TestRestore:
    def test_restore_room_at_index(self, store):
        first = store.create_room(RoomSpec(room_type="Kitchen", style_id="style_a"))
        second = store.create_room(RoomSpec(room_type="Bath", style_id="style_a"))
        room, index = store.remove_room(first.id)

        store.restore_room(room, index)

        assert [r.id for r in store.snapshot().rooms] == [first.id, second.id]

    def test_restore_existing_room_rejected(self, populated):
        store, room, _, _ = populated
        with pytest.raises(InvalidStateError):
            store.restore_room(store.get_room(room.id), 0)

    def test_restore_product_and_processing(self, populated):
        store, _, product, processing = populated
        removed_proc, proc_index = store.remove_processing(product.id, processing.id)
        removed_product, product_index = store.remove_product(product.id)

        store.restore_product(removed_product, product_index)
        assert store.get_product(product.id).processings == []
        store.restore_processing(removed_proc, proc_index)

        assert store.get_product(product.id).processings[0].id == processing.id


class TestSetQuantity:
    def test_updates_quantity_and_surcharges(self, populated):
        store, _, product, processing = populated

        previous = store.set_quantity(product.id, 3, {processing.id: Decimal("60.00")})

        updated = store.get_product(product.id)
        assert previous == 2
        assert updated.quantity == 3
        assert updated.processings[0].surcharge == Decimal("60.00")

    def test_rejects_quantity_below_one(self, populated):
        store, _, product, _ = populated
        with pytest.raises(ValueError):
            store.set_quantity(product.id, 0)

    def test_rejects_unknown_processing_surcharge(self, populated):
        store, _, product, _ = populated
        with pytest.raises(ValueError, match="Unknown processings"):
            store.set_quantity(product.id, 3, {"proc_other": Decimal("1")})
        assert store.get_product(product.id).quantity == 2


class TestFeesAndNotes:
    def test_add_and_remove_fee(self, store):
        fee = store.add_fee("Delivery", Decimal("150.00"))
        removed, index = store.remove_fee(fee.id)
        assert removed.label == "Delivery"
        assert index == 0
        assert store.snapshot().fees == []

    def test_set_notes_returns_previous(self, store):
        assert store.set_notes("first") == ""
        assert store.set_notes("second") == "first"
