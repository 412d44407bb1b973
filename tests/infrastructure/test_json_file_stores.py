"""Tests for the JSON-file storage adapters."""

import json
import threading
from datetime import datetime, timedelta, timezone

import pytest

from fairbag.domain.exceptions import PersistenceUnavailableError
from fairbag.domain.model.cart import Cart
from fairbag.domain.model.order import Order, PaymentMethod, ShippingStatus
from fairbag.infrastructure.persistence.json_catalog_repository import JsonCatalogRepository
from fairbag.infrastructure.persistence.json_file_stores import (
    JsonFileKeyValueStore,
    JsonFileRemoteStore,
)
from fairbag.infrastructure.persistence.remote_order_repository import RemoteOrderRepository
from tests.fakes import ALICE, make_product, make_vendor


class TestJsonFileKeyValueStore:

    def test_set_get_remove(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "cache.json")
        assert store.get("k") is None
        store.set("k", "[1, 2]")
        assert JsonFileKeyValueStore(tmp_path / "cache.json").get("k") == "[1, 2]"
        store.remove("k")
        store.remove("never-there")
        assert store.get("k") is None

    def test_corrupt_document_is_moved_aside(self, tmp_path):
        path = tmp_path / "cache.json"
        store = JsonFileKeyValueStore(path)
        path.write_text("{oops", encoding="utf-8")
        assert store.get("k") is None
        assert (tmp_path / "cache.json.corrupt").read_text(encoding="utf-8") == "{oops"
        store.set("k", "v")
        assert store.get("k") == "v"

    def test_no_temp_file_left_behind(self, tmp_path):
        store = JsonFileKeyValueStore(tmp_path / "cache.json")
        store.set("k", "v")
        assert [p.name for p in tmp_path.iterdir()] == ["cache.json"]


class TestJsonFileRemoteStore:

    def test_unreadable_file_raises(self, tmp_path):
        path = tmp_path / "remote.json"
        remote = JsonFileRemoteStore(path)
        path.write_text("{oops", encoding="utf-8")
        with pytest.raises(PersistenceUnavailableError):
            remote.select("t", {})

    def test_instances_on_one_file_do_not_lose_writes(self, tmp_path):
        path = tmp_path / "remote.json"
        cart_side, order_side = JsonFileRemoteStore(path), JsonFileRemoteStore(path)
        errors = []

        def upsert_carts():
            try:
                for n in range(40):
                    cart_side.upsert("carts", {"customer_id": "a", "vendor_id": f"v{n}"}, ("customer_id", "vendor_id"))
            except Exception as exc:
                errors.append(exc)

        worker = threading.Thread(target=upsert_carts)
        worker.start()
        for _ in range(40):
            order_side.insert("orders", {"total": "1.00"})
        worker.join(10)

        assert errors == []
        assert len(order_side.select("orders", {})) == 40
        assert len(cart_side.select("carts", {})) == 40

    def test_upsert_by_composite_key(self, tmp_path):
        remote = JsonFileRemoteStore(tmp_path / "remote.json")
        remote.upsert("carts", {"customer_id": "a", "vendor_id": "v1", "n": 1}, ("customer_id", "vendor_id"))
        remote.upsert("carts", {"customer_id": "a", "vendor_id": "v1", "n": 2}, ("customer_id", "vendor_id"))
        remote.upsert("carts", {"customer_id": "a", "vendor_id": "v2", "n": 3}, ("customer_id", "vendor_id"))
        rows = remote.select("carts", {"customer_id": "a"})
        assert sorted((r["vendor_id"], r["n"]) for r in rows) == [("v1", 2), ("v2", 3)]

    def test_delete_by_filter(self, tmp_path):
        remote = JsonFileRemoteStore(tmp_path / "remote.json")
        remote.insert("t", {"owner": "a"})
        remote.insert("t", {"owner": "b"})
        remote.delete("t", {"owner": "a"})
        assert [r["owner"] for r in remote.select("t", {})] == ["b"]

    def test_insert_returns_record_with_id(self, tmp_path):
        remote = JsonFileRemoteStore(tmp_path / "remote.json")
        stored = remote.insert("t", {"name": "x"})
        assert stored["id"]
        assert stored["created_at"]
        assert remote.select("t", {"id": stored["id"]})[0]["name"] == "x"

    def test_select_sorted(self, tmp_path):
        remote = JsonFileRemoteStore(tmp_path / "remote.json")
        for stamp in ("2024-01-02", "2024-01-03", "2024-01-01"):
            remote.insert("t", {"created_at": stamp})
        rows = remote.select("t", {}, order_by="created_at", descending=True)
        assert [r["created_at"] for r in rows] == ["2024-01-03", "2024-01-02", "2024-01-01"]


class TestRemoteOrderRepository:

    def _order(self, pickup_code=None, now=None) -> Order:
        cart = Cart()
        cart.add_item(make_product("mug", "10.00"), make_vendor(), 1)
        cart.add_item(make_product("bowl", "15.00"), make_vendor(), 2)
        return Order.create(
            ALICE, cart.group_for("v1"), PaymentMethod.EXTERNAL_WEBSITE,
            pickup_code=pickup_code, now=now,
        )

    def test_add_assigns_id_and_order_number(self, tmp_path):
        repo = RemoteOrderRepository(JsonFileRemoteStore(tmp_path / "remote.json"))
        order = repo.add(self._order(now=datetime(2024, 6, 1, tzinfo=timezone.utc)))
        assert order.id
        assert order.order_number.startswith("ORD-20240601-")
        assert len(order.order_number) == len("ORD-20240601-") + 6

    def test_round_trip(self, tmp_path):
        repo = RemoteOrderRepository(JsonFileRemoteStore(tmp_path / "remote.json"))
        order = repo.add(self._order(pickup_code="012345"))
        order.mark_pickup_ready()
        repo.save(order)

        loaded = repo.get_by_id(order.id)
        assert loaded.total == order.total
        assert loaded.items == order.items
        assert loaded.shipping_status == ShippingStatus.PICKUP_READY
        assert loaded.pickup_confirmation_code == "012345"
        assert loaded.pickup_code_generated_at == order.pickup_code_generated_at

    def test_amounts_stored_as_strings(self, tmp_path):
        path = tmp_path / "remote.json"
        repo = RemoteOrderRepository(JsonFileRemoteStore(path))
        repo.add(self._order())
        row = json.loads(path.read_text(encoding="utf-8"))["orders"][0]
        assert row["total"] == "43.20"
        assert row["items"][0]["price"] == "10.00"

    def test_lists_newest_first(self, tmp_path):
        repo = RemoteOrderRepository(JsonFileRemoteStore(tmp_path / "remote.json"))
        t0 = datetime(2024, 6, 1, tzinfo=timezone.utc)
        older = repo.add(self._order(now=t0))
        newer = repo.add(self._order(now=t0 + timedelta(days=1)))
        assert [o.id for o in repo.list_for_customer("user-alice")] == [newer.id, older.id]
        assert [o.id for o in repo.list_for_vendor("v1")] == [newer.id, older.id]

    def test_missing_order(self, tmp_path):
        repo = RemoteOrderRepository(JsonFileRemoteStore(tmp_path / "remote.json"))
        assert repo.get_by_id("nope") is None


class TestJsonCatalogRepository:

    def test_reads_products_and_vendors(self, tmp_path):
        (tmp_path / "products.json").write_text(
            json.dumps([{"id": "mug", "name": "Mug", "price": "12.50", "vendor_id": "v1"}]),
            encoding="utf-8",
        )
        (tmp_path / "vendors.json").write_text(
            json.dumps([
                {
                    "id": "v1",
                    "name": "Clay & Co",
                    "zip_code": "97209",
                    "shipping": {"flat_per_order": "5", "allow_local_pickup": True, "pickup_radius_miles": 30},
                }
            ]),
            encoding="utf-8",
        )
        catalog = JsonCatalogRepository(tmp_path / "products.json", tmp_path / "vendors.json")
        assert str(catalog.get_product("mug").price) == "$12.50"
        vendor = catalog.get_vendor("v1")
        assert vendor.shipping.allow_local_pickup is True
        assert vendor.shipping.pickup_radius_miles == 30.0
        assert vendor.shipping.flat_per_item is None
        assert catalog.get_vendor("v2") is None
        assert len(catalog.list_products()) == 1

    def test_missing_files_mean_empty_catalog(self, tmp_path):
        catalog = JsonCatalogRepository(tmp_path / "p.json", tmp_path / "v.json")
        assert catalog.list_products() == []
