"""Unit tests for the write-once ancillary access store."""

import json

from hypercards.core.access_store import AncillaryAccessStore, access_key


class TestAncillaryAccessStore:
    """Tests for AncillaryAccessStore."""

    def test_key_format(self):
        assert access_key("abc123") == "ancillary_access_abc123"

    def test_record_and_get(self, temp_dir):
        store = AncillaryAccessStore(temp_dir / "access.json")
        grant = {"session": "santa", "expires_at": "2025-12-26T00:00:00Z"}

        assert store.record("abc123", grant) is True
        assert store.get("abc123") == grant
        assert store.has("abc123")

    def test_persisted_under_derived_key(self, temp_dir):
        path = temp_dir / "access.json"
        AncillaryAccessStore(path).record("abc123", {"token": "t"})

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"ancillary_access_abc123": {"token": "t"}}

    def test_write_once(self, temp_dir):
        store = AncillaryAccessStore(temp_dir / "access.json")
        store.record("abc123", {"token": "first"})

        assert store.record("abc123", {"token": "second"}) is False
        assert store.get("abc123") == {"token": "first"}

    def test_separate_jobs(self, temp_dir):
        store = AncillaryAccessStore(temp_dir / "access.json")
        store.record("a", 1)
        store.record("b", 2)

        reopened = AncillaryAccessStore(temp_dir / "access.json")
        assert reopened.get("a") == 1
        assert reopened.get("b") == 2

    def test_missing_file(self, temp_dir):
        store = AncillaryAccessStore(temp_dir / "missing" / "access.json")
        assert store.get("abc123") is None
        assert not store.has("abc123")

    def test_corrupt_file_reads_empty(self, temp_dir):
        path = temp_dir / "access.json"
        path.write_text("{not json", encoding="utf-8")
        store = AncillaryAccessStore(path)

        assert store.get("abc123") is None
        assert store.record("abc123", "grant") is True
        assert store.get("abc123") == "grant"

    def test_non_object_file_reads_empty(self, temp_dir):
        path = temp_dir / "access.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        assert AncillaryAccessStore(path).get("abc123") is None

    def test_creates_parent_directory(self, temp_dir):
        path = temp_dir / "nested" / "dir" / "access.json"
        AncillaryAccessStore(path).record("abc123", True)
        assert path.exists()
