"""
Document store tests.

Verifies:
- Missing file is created with every collection
- Corrupt file yields an empty document and is preserved as <file>.corrupt
- Missing collections are filled in, unknown keys survive a write
- transaction() discards mutations when the block raises
- Write failures are swallowed by default and raise StorageError in strict mode
- SQL backend round-trips the document and bumps versions
"""

import json
import logging

import pytest

from herb.services.document_store import (
    COLLECTIONS,
    JsonFileStore,
    StorageError,
    default_document,
)


LOGGER = logging.getLogger("herb.tests")


class TestJsonFileStore:
    def test_ensure_initialized_creates_all_collections(self, tmp_path):
        path = tmp_path / "nested" / "data.json"
        store = JsonFileStore(str(path), logger=LOGGER)
        store.ensure_initialized()

        on_disk = json.loads(path.read_text(encoding="utf-8"))
        assert set(on_disk) == set(COLLECTIONS)
        assert all(on_disk[name] == [] for name in COLLECTIONS)

    def test_missing_file_reads_as_default(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "absent.json"), logger=LOGGER)
        assert store.read() == default_document()

    def test_corrupt_file_is_quarantined(self, tmp_path, caplog):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        store = JsonFileStore(str(path), logger=LOGGER)

        with caplog.at_level(logging.ERROR, logger="herb.tests"):
            document = store.read()

        assert document == default_document()
        assert (tmp_path / "data.json.corrupt").read_text(encoding="utf-8") == "{not json"
        assert "Error reading data file" in caplog.text

    def test_non_object_document_is_quarantined(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        store = JsonFileStore(str(path), logger=LOGGER)

        assert store.read() == default_document()
        assert (tmp_path / "data.json.corrupt").exists()

    def test_missing_collections_are_filled_in(self, tmp_path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"products": [{"id": "p1"}], "settings": {"theme": "dark"}}), encoding="utf-8")
        store = JsonFileStore(str(path), logger=LOGGER)

        document = store.read()
        assert document["products"] == [{"id": "p1"}]
        assert document["orders"] == []
        assert document["settings"] == {"theme": "dark"}

    def test_write_then_read_preserves_unknown_keys(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "data.json"), logger=LOGGER)
        with store.transaction() as document:
            document["settings"] = {"currency": "LKR"}
            document["products"].append({"id": "p1", "product_name": "Gin"})

        reread = store.read()
        assert reread["settings"] == {"currency": "LKR"}
        assert reread["products"] == [{"id": "p1", "product_name": "Gin"}]

    def test_transaction_discards_on_exception(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "data.json"), logger=LOGGER)
        store.ensure_initialized()

        with pytest.raises(RuntimeError):
            with store.transaction() as document:
                document["products"].append({"id": "p1"})
                raise RuntimeError("boom")

        assert store.read()["products"] == []

    def test_unserializable_write_keeps_previous_file(self, tmp_path):
        path = tmp_path / "data.json"
        store = JsonFileStore(str(path), logger=LOGGER)
        with store.transaction() as document:
            document["products"].append({"id": "p1"})

        with store.transaction() as document:
            document["products"].append({"id": "p2", "bad": object()})

        assert [p["id"] for p in store.read()["products"]] == ["p1"]

    def test_strict_mode_raises_storage_error(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "data.json"), logger=LOGGER, strict_writes=True)
        with pytest.raises(StorageError):
            with store.transaction() as document:
                document["products"].append({"bad": object()})


class TestStrictWritesOverHttp:
    def test_write_failure_is_500_in_strict_mode(self, app_factory, monkeypatch):
        app = app_factory(STORE_STRICT_WRITES=True)
        store = app.extensions["herb_store"]

        def failing_dump(document):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_dump", failing_dump)
        resp = app.test_client().post("/api/products", json={"product_name": "Gin"})

        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Failed to save data"}

    def test_write_failure_is_swallowed_by_default(self, app_factory, monkeypatch):
        app = app_factory()
        store = app.extensions["herb_store"]

        def failing_dump(document):
            raise OSError("disk full")

        monkeypatch.setattr(store, "_dump", failing_dump)

        resp = app.test_client().post("/api/products", json={"product_name": "Gin"})

        assert resp.status_code == 200
        assert resp.get_json()["product_name"] == "Gin"
        assert app.test_client().get("/api/products").get_json() == []


class TestSqlDocumentStore:
    def test_round_trip_and_version_bump(self, app_factory, tmp_path):
        from herb.extensions import db
        from herb.models import DocumentCollection

        app = app_factory(
            STORE_BACKEND="sql",
            SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'herb.sqlite3'}",
        )
        client = app.test_client()

        created = client.post("/api/products", json={"product_name": "Gin", "stock_quantity": 5}).get_json()
        client.put(f"/api/products/{created['id']}", json={"stock_quantity": 7})

        assert client.get(f"/api/products/{created['id']}").get_json()["stock_quantity"] == 7

        with app.app_context():
            row = db.session.get(DocumentCollection, "products")
            assert row.version == 2
            assert len(row.items) == 1
            described = app.extensions["herb_store"].describe()
            assert described["backend"] == "sql"

    def test_read_failure_does_not_wipe_rows(self, app_factory, tmp_path, monkeypatch):
        from sqlalchemy.exc import OperationalError

        app = app_factory(
            STORE_BACKEND="sql",
            SQLALCHEMY_DATABASE_URI=f"sqlite:///{tmp_path / 'herb.sqlite3'}",
        )
        client = app.test_client()
        created = client.post("/api/products", json={"product_name": "Gin"}).get_json()
        store = app.extensions["herb_store"]

        def failing_load(model):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(store, "_load_rows", failing_load)
        resp = client.post("/api/customers", json={"name": "Shop"})
        assert resp.status_code == 500
        assert resp.get_json() == {"message": "Failed to load data"}

        monkeypatch.undo()
        assert [p["id"] for p in client.get("/api/products").get_json()] == [created["id"]]
        assert client.get("/api/customers").get_json() == []
