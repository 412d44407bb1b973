"""Integration tests for the cart session service.

Uses in-memory fakes; the save queue runs jobs inline unless a test is
about the queue itself.
"""

import json

from fairbag.application.cart_service import CartService
from fairbag.application.save_queue import SaveQueue
from fairbag.domain.model.value_objects import Money
from fairbag.infrastructure.persistence.local_repository import (
    CART_STORAGE_KEY,
    LocalCartRepository,
)
from fairbag.infrastructure.persistence.remote_repository import (
    CARTS_TABLE,
    RemoteCartRepository,
)
from tests.fakes import FakeKeyValueStore, FakeRemoteStore, InlineSaveQueue, make_product, make_vendor


def _setup(store: FakeKeyValueStore | None = None, load: bool = True):
    store = store or FakeKeyValueStore()
    queue = InlineSaveQueue()
    service = CartService(LocalCartRepository(store), queue)
    if load:
        service.load()
    return service, store, queue


def _stored_items(store: FakeKeyValueStore) -> list[dict]:
    return json.loads(store.data[CART_STORAGE_KEY])


class TestMutationsPersist:

    def test_add_is_saved(self):
        service, store, queue = _setup()
        service.add_item(make_product("mug"), make_vendor(), 2)
        assert queue.submitted == ["cart"]
        assert _stored_items(store)[0]["quantity"] == 2

    def test_every_mutation_schedules_a_save(self):
        service, _, queue = _setup()
        mug, vendor = make_product("mug"), make_vendor()
        service.add_item(mug, vendor)
        service.update_quantity("mug", "v1", 3)
        service.remove_item("mug", "v1")
        service.clear_cart()
        service.clear_vendor_cart("v1")
        assert len(queue.submitted) == 5

    def test_reload_restores_cart(self):
        service, store, _ = _setup()
        service.add_item(make_product("mug", "12.50"), make_vendor(), 2)
        reloaded, _, _ = _setup(store)
        assert reloaded.get_cart_total() == Money.of("25.00")
        assert reloaded.items[0].vendor_name == "Clay & Co"

    def test_no_save_before_load(self):
        store = FakeKeyValueStore({CART_STORAGE_KEY: "[]"})
        service, _, queue = _setup(store, load=False)
        service.add_item(make_product("mug"), make_vendor())
        assert queue.submitted == []
        assert store.data[CART_STORAGE_KEY] == "[]"
        assert service.is_loaded is False


class TestCorruptCache:

    def test_corrupt_json_resets_to_empty(self):
        store = FakeKeyValueStore({CART_STORAGE_KEY: "{not json"})
        service, _, _ = _setup(store)
        assert service.items == []
        assert CART_STORAGE_KEY not in store.data

    def test_wrong_shape_resets_to_empty(self):
        store = FakeKeyValueStore({CART_STORAGE_KEY: json.dumps({"items": []})})
        service, _, _ = _setup(store)
        assert service.items == []
        assert CART_STORAGE_KEY not in store.data

    def test_unreadable_item_resets_to_empty(self):
        store = FakeKeyValueStore({CART_STORAGE_KEY: json.dumps([{"product": {"id": "x"}}])})
        service, _, _ = _setup(store)
        assert service.items == []

    def test_unreadable_cache_starts_empty(self):
        store = FakeKeyValueStore({CART_STORAGE_KEY: "[]"})
        store.fail_reads = True
        service, _, _ = _setup(store)
        assert service.items == []
        assert service.is_loaded


class TestQueries:

    def test_grouped_view_and_totals(self):
        service, _, _ = _setup()
        v1, v2 = make_vendor("v1", "Clay & Co"), make_vendor("v2", "Wool Works")
        service.add_item(make_product("mug", "10.00"), v1, 1)
        service.add_item(make_product("scarf", "30.00", "v2"), v2, 1)
        service.add_item(make_product("bowl", "15.00"), v1, 2)
        groups = service.grouped_by_vendor()
        assert [g.vendor_name for g in groups] == ["Clay & Co", "Wool Works"]
        assert service.get_vendor_total("v1") == Money.of("40.00")
        assert service.get_cart_total() == Money.of("70.00")
        assert service.get_cart_item_count() == 4

    def test_take_item_removes_exact_variant(self):
        service, _, _ = _setup()
        service.add_item(make_product("mug"), make_vendor(), 2)
        taken = service.take_item("mug", "v1")
        assert taken.quantity == 2
        assert service.items == []
        assert service.take_item("mug", "v1") is None

    def test_customer_zip(self):
        service, _, _ = _setup()
        service.set_customer_zip("97209")
        assert service.customer_zip == "97209"
        service.set_customer_zip("")
        assert service.customer_zip is None


class TestRemoteBackend:

    def _remote_setup(self):
        remote, local = FakeRemoteStore(), FakeKeyValueStore()
        repo = RemoteCartRepository(remote, "user-alice", fallback=LocalCartRepository(local))
        service = CartService(repo, InlineSaveQueue())
        service.load()
        return service, remote, local

    def test_one_row_per_vendor(self):
        service, remote, _ = self._remote_setup()
        service.add_item(make_product("mug"), make_vendor("v1", "Clay & Co"))
        service.add_item(make_product("scarf", vendor_id="v2"), make_vendor("v2", "Wool Works"))
        rows = remote.tables[CARTS_TABLE]
        assert sorted(r["vendor_id"] for r in rows) == ["v1", "v2"]

    def test_emptied_vendor_row_is_deleted(self):
        service, remote, _ = self._remote_setup()
        service.add_item(make_product("mug"), make_vendor("v1", "Clay & Co"))
        service.add_item(make_product("scarf", vendor_id="v2"), make_vendor("v2", "Wool Works"))
        service.clear_vendor_cart("v1")
        assert [r["vendor_id"] for r in remote.tables[CARTS_TABLE]] == ["v2"]

    def test_failed_remote_write_falls_back_to_local(self):
        service, remote, local = self._remote_setup()
        remote.fail_writes = True
        service.add_item(make_product("mug"), make_vendor())
        assert service.get_cart_item_count() == 1
        assert _stored_items(local)[0]["product"]["id"] == "mug"

    def test_failed_remote_read_loads_local(self):
        remote, local = FakeRemoteStore(), FakeKeyValueStore()
        local_repo = LocalCartRepository(local)
        seed = CartService(local_repo, InlineSaveQueue())
        seed.load()
        seed.add_item(make_product("mug"), make_vendor(), 3)

        remote.fail_reads = True
        service = CartService(RemoteCartRepository(remote, "user-alice", local_repo), InlineSaveQueue())
        service.load()
        assert service.get_cart_item_count() == 3

    def test_row_without_vendor_is_skipped(self):
        service, remote, _ = self._remote_setup()
        service.add_item(make_product("mug"), make_vendor("v1", "Clay & Co"), 2)
        good = remote.tables[CARTS_TABLE][0]
        remote.tables[CARTS_TABLE].append(
            {"customer_id": "user-alice", "vendor_name": "Nobody", "items": good["items"]}
        )

        reloaded = CartService(
            RemoteCartRepository(remote, "user-alice", fallback=LocalCartRepository(FakeKeyValueStore())),
            InlineSaveQueue(),
        )
        reloaded.load()
        assert reloaded.get_cart_item_count() == 2

        reloaded.add_item(make_product("bowl"), make_vendor("v1", "Clay & Co"))
        assert reloaded.get_cart_item_count() == 3


class TestWithBackgroundQueue:

    def test_burst_of_edits_lands_as_latest_state(self):
        store = FakeKeyValueStore()
        queue = SaveQueue()
        service = CartService(LocalCartRepository(store), queue)
        service.load()
        mug, vendor = make_product("mug"), make_vendor()
        for _ in range(20):
            service.add_item(mug, vendor)
        assert queue.flush(timeout=5)
        queue.close(timeout=5)
        assert _stored_items(store)[0]["quantity"] == 20
