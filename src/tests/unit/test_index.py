"""Tests for telestore.core.index module."""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from pydantic import ValidationError

from telestore.core.errors import IndexFormatError
from telestore.core.index import IndexStore
from telestore.core.types import IndexRecord


def make_record(message_id: int = 1, size: int = 10, mod_time: int = 1700000000):
    return IndexRecord(
        file_id=f"file-{message_id}",
        message_id=message_id,
        size=size,
        mod_time=mod_time,
    )


class TestIndexStore:
    """Tests for IndexStore lookups and mutations."""

    def test_get_missing_returns_none(self):
        assert IndexStore().get("nope.txt") is None

    def test_update_inserts_and_overwrites(self):
        store = IndexStore()
        store.update("a.txt", make_record(1))
        store.update("a.txt", make_record(2, size=99))

        record = store.get("a.txt")
        assert record is not None
        assert record.message_id == 2
        assert record.size == 99
        assert len(store) == 1

    def test_remove_present(self):
        store = IndexStore()
        store.update("a.txt", make_record(1))

        removed = store.remove("a.txt")

        assert removed == make_record(1)
        assert "a.txt" not in store

    def test_remove_missing_is_noop(self):
        """Removing an unknown key neither errors nor changes the store."""
        store = IndexStore({"a.txt": make_record(1)})

        assert store.remove("missing.txt") is None
        assert store.keys() == ["a.txt"]

    def test_modify_applies_change_to_current_record(self):
        store = IndexStore({"a.txt": make_record(1, size=3)})

        updated = store.modify("a.txt", lambda record: record.with_size(7))

        assert updated.size == 7
        assert store.get("a.txt") == updated

    def test_modify_missing_returns_none(self):
        """A missing key is left missing and the change is never called."""
        store = IndexStore()
        calls = []

        assert store.modify("a.txt", calls.append) is None
        assert calls == []
        assert "a.txt" not in store

    def test_snapshot_is_a_copy(self):
        """Mutating a snapshot does not reach the store."""
        store = IndexStore({"a.txt": make_record(1)})

        snapshot = store.snapshot()
        snapshot.pop("a.txt")

        assert "a.txt" in store

    def test_concurrent_updates_from_threads(self):
        """Updates from many threads all land in the mapping."""
        store = IndexStore()

        def _write(worker: int) -> None:
            for i in range(100):
                store.update(f"w{worker}/{i}.bin", make_record(worker * 1000 + i))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(_write, range(8)))

        assert len(store) == 800


class TestIndexSerialization:
    """Tests for the persisted index document."""

    def test_round_trip(self):
        store = IndexStore(
            {
                "a/b.txt": make_record(1, size=0),
                "a/c/d.txt": make_record(2, size=2048),
                "e.txt": make_record(3, mod_time=0),
            }
        )

        restored = IndexStore.deserialize(store.serialize())

        assert restored.snapshot() == store.snapshot()

    def test_serialized_shape(self):
        """The document is {"files": {path: record}} with the record's four fields."""
        store = IndexStore({"docs/a.txt": make_record(7, size=5, mod_time=42)})

        document = json.loads(store.serialize())

        assert document == {
            "files": {
                "docs/a.txt": {
                    "file_id": "file-7",
                    "message_id": 7,
                    "size": 5,
                    "mod_time": 42,
                }
            }
        }

    def test_empty_store_serializes_empty_files(self):
        assert json.loads(IndexStore().serialize()) == {"files": {}}

    def test_missing_files_key_is_empty_index(self):
        assert len(IndexStore.deserialize(b"{}")) == 0

    @pytest.mark.parametrize(
        "data",
        [
            b"not json",
            b'{"files": []}',
            b'{"files": {"a": {"file_id": "x"}}}',
            b'{"files": {"a": {"file_id": "x", "message_id": 1, "size": -1, "mod_time": 0}}}',
        ],
    )
    def test_invalid_document_raises(self, data):
        with pytest.raises(IndexFormatError):
            IndexStore.deserialize(data)


class TestIndexRecord:
    """Tests for IndexRecord helpers."""

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            make_record(size=-5)

    def test_record_is_frozen(self):
        record = make_record()
        with pytest.raises(ValidationError):
            record.size = 3

    def test_with_size_refreshes_file_id(self):
        record = make_record(4, size=1)

        updated = record.with_size(50, file_id="new-file")

        assert updated.size == 50
        assert updated.file_id == "new-file"
        assert updated.message_id == 4
        assert updated.mod_time == record.mod_time

    def test_with_size_keeps_file_id_when_not_given(self):
        assert make_record(4).with_size(8).file_id == "file-4"

    def test_modified_at_is_utc(self):
        record = make_record(mod_time=0)

        assert record.modified_at.year == 1970
        assert record.modified_at.utcoffset() is not None
