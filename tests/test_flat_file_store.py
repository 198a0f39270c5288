"""Tests for portal.services.flat_file_store: CRUD, tolerant reads, concurrency."""

import json
import threading
import uuid

import pytest

from portal.core.exceptions import NotFoundError
from portal.services.flat_file_store import FlatFileStore, lock_for


@pytest.fixture()
def store(tmp_path):
    return FlatFileStore(str(tmp_path / "records.json"), resource="Record")


class TestReads:
    def test_missing_file_is_created_empty(self, tmp_path, store):
        assert store.read_all() == []
        assert json.loads((tmp_path / "records.json").read_text()) == []

    def test_invalid_json_reads_as_empty(self, tmp_path, store):
        (tmp_path / "records.json").write_text("{not json")
        assert store.read_all() == []

    def test_non_array_payload_reads_as_empty(self, tmp_path, store):
        (tmp_path / "records.json").write_text('{"id": "x"}')
        assert store.read_all() == []

    def test_non_object_elements_are_skipped(self, tmp_path, store):
        (tmp_path / "records.json").write_text(json.dumps([{"id": "a"}, "x", 3, [1], None]))
        assert store.read_all() == [{"id": "a"}]

    def test_next_write_replaces_corrupt_file(self, tmp_path, store):
        (tmp_path / "records.json").write_text("garbage")
        store.create({"title": "A"})
        assert len(json.loads((tmp_path / "records.json").read_text())) == 1

    def test_get_unknown_raises(self, store):
        with pytest.raises(NotFoundError):
            store.get("nope")


class TestWrites:
    def test_create_adds_id_and_timestamps(self, store):
        record = store.create({"title": "A"})
        uuid.UUID(record["id"])
        assert record["created_at"] == record["updated_at"]
        assert record["created_at"].endswith("Z")
        assert store.read_all() == [record]

    def test_custom_timestamp_keys(self, tmp_path):
        store = FlatFileStore(str(tmp_path / "specs.json"), resource="Spec",
                              created_key="createdAt", updated_key="updatedAt")
        record = store.create({"title": "A"})
        assert "createdAt" in record and "updatedAt" in record
        assert "created_at" not in record

    def test_file_is_indented_utf8(self, tmp_path, store):
        store.create({"title": "Échéancier"})
        text = (tmp_path / "records.json").read_text(encoding="utf-8")
        assert "Échéancier" in text
        assert "\n  {" in text

    def test_update_merges_and_keeps_id(self, store):
        record = store.create({"title": "A", "status": "draft"})
        updated = store.update(record["id"], {"status": "review", "id": "other"})
        assert updated["id"] == record["id"]
        assert updated["title"] == "A"
        assert updated["status"] == "review"
        assert updated["created_at"] == record["created_at"]

    def test_update_unknown_leaves_file_untouched(self, tmp_path, store):
        store.create({"title": "A"})
        before = (tmp_path / "records.json").read_bytes()
        with pytest.raises(NotFoundError):
            store.update("missing", {"title": "B"})
        assert (tmp_path / "records.json").read_bytes() == before

    def test_delete_removes_record(self, store):
        keep = store.create({"title": "keep"})
        gone = store.create({"title": "gone"})
        store.delete(gone["id"])
        assert [r["id"] for r in store.read_all()] == [keep["id"]]
        with pytest.raises(NotFoundError):
            store.delete(gone["id"])

    def test_no_temp_files_left_behind(self, tmp_path, store):
        store.create({"title": "A"})
        assert [p.name for p in tmp_path.iterdir()] == ["records.json"]


class TestConcurrency:
    def test_stores_on_same_path_share_a_lock(self, tmp_path):
        path = str(tmp_path / "shared.json")
        assert FlatFileStore(path, resource="A")._lock is FlatFileStore(path, resource="B")._lock
        assert lock_for(path) is lock_for(str(tmp_path / "." / "shared.json"))

    def test_concurrent_creates_all_survive(self, tmp_path):
        path = str(tmp_path / "race.json")
        workers, per_worker = 8, 10
        barrier = threading.Barrier(workers)
        errors = []

        def worker(n):
            store = FlatFileStore(path, resource="Race")
            barrier.wait()
            try:
                for i in range(per_worker):
                    store.create({"title": f"{n}-{i}"})
            except Exception as exc:  # surfaced through the assertion below
                errors.append(exc)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        records = FlatFileStore(path, resource="Race").read_all()
        assert len(records) == workers * per_worker
        assert len({r["id"] for r in records}) == workers * per_worker
