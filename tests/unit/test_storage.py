"""
Unit tests for the SQLite adapter and storage manager.
"""

import pytest

from clearhouse.core.ledger import Bid, ListedItem
from clearhouse.core.storage import AuctionSnapshot, SQLiteAdapter, StorageManager
from clearhouse.crypto import item_id


@pytest.fixture
def adapter(tmp_path):
    return SQLiteAdapter(tmp_path / "kv.db")


class TestSQLiteAdapter:
    """Tests for the bucketed key-value store."""

    def test_put_get(self, adapter):
        adapter.put(b"k", b"v", bucket="b1")
        assert adapter.get(b"k", bucket="b1") == b"v"
        assert adapter.get(b"k", bucket="b2") is None

    def test_overwrite(self, adapter):
        adapter.put(b"k", b"v1")
        adapter.put(b"k", b"v2")
        assert adapter.get(b"k") == b"v2"
        assert adapter.count() == 1

    def test_delete(self, adapter):
        adapter.put(b"k", b"v")
        assert adapter.delete(b"k")
        assert not adapter.delete(b"k")
        assert adapter.get(b"k") is None

    def test_items_in_insertion_order(self, adapter):
        for key in (b"c", b"a", b"b"):
            adapter.put(key, key.upper(), bucket="letters")
        assert adapter.items("letters") == [(b"c", b"C"), (b"a", b"A"), (b"b", b"B")]

    def test_clear_bucket(self, adapter):
        adapter.put(b"k", b"v", bucket="gone")
        adapter.put(b"k", b"v", bucket="kept")
        adapter.clear_bucket("gone")
        assert adapter.count("gone") == 0
        assert adapter.count("kept") == 1

    def test_meta(self, adapter):
        assert adapter.get_meta("round") is None
        adapter.set_meta("round", "3")
        assert adapter.get_meta("round") == "3"

    def test_replace_buckets(self, adapter):
        adapter.put(b"old", b"x", bucket="b")
        adapter.replace_buckets({"b": [(b"new", b"y")]}, meta={"m": "1"})
        assert adapter.items("b") == [(b"new", b"y")]
        assert adapter.get_meta("m") == "1"

    def test_replace_buckets_is_atomic(self, adapter):
        adapter.put(b"keep", b"x", bucket="a")
        adapter.put(b"keep", b"x", bucket="b")

        # Duplicate keys violate the primary key half-way through
        with pytest.raises(Exception):
            adapter.replace_buckets({
                "a": [(b"new", b"y")],
                "b": [(b"dup", b"1"), (b"dup", b"2")],
            })

        assert adapter.items("a") == [(b"keep", b"x")]
        assert adapter.items("b") == [(b"keep", b"x")]


class TestStorageManager:
    """Tests for snapshot persistence."""

    def test_empty(self, tmp_path):
        storage = StorageManager(tmp_path)
        assert not storage.has_state()
        assert storage.load_state() == AuctionSnapshot()

    def test_roundtrip(self, tmp_path):
        lamp = item_id("lamp")
        snapshot = AuctionSnapshot(
            round_open=True,
            round_number=4,
            catalog={lamp: ("seller", ListedItem("lamp", 3))},
            bids={lamp: Bid("bob", 9)},
            interests={"bob": [lamp], "carol": [lamp]},
            holds={"bob": 9, "carol": 4},
            winnings={"bob": ["chair", "desk"]},
        )

        StorageManager(tmp_path).save_state(snapshot)
        loaded = StorageManager(tmp_path).load_state()

        assert loaded == snapshot

    def test_save_replaces_previous(self, tmp_path):
        storage = StorageManager(tmp_path)
        storage.save_state(AuctionSnapshot(round_number=1, holds={"bob": 9}))
        storage.save_state(AuctionSnapshot(round_number=2))

        loaded = storage.load_state()
        assert loaded.round_number == 2
        assert loaded.holds == {}
