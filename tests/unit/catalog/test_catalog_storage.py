"""Tests for catalog.storage."""

import json

import pytest

from catalog.storage import JsonFileStore, KeyValueStore, MemoryStore


class TestKeyValueStore:
    def test_interface_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            KeyValueStore()

    def test_partial_implementation_is_rejected(self):
        class ReadOnlyStore(KeyValueStore):
            def get(self, key):
                return None

        with pytest.raises(TypeError):
            ReadOnlyStore()


class TestMemoryStore:
    def test_set_get_delete(self):
        store = MemoryStore()

        store.set("account", "alice")
        assert store.get("account") == "alice"

        store.delete("account")
        assert store.get("account") is None

    def test_delete_missing_key_is_noop(self):
        MemoryStore().delete("missing")

    def test_clear(self):
        store = MemoryStore({"a": "1", "b": "2"})

        store.clear()

        assert store.data == {}


class TestJsonFileStore:
    """Tests for JsonFileStore."""

    def test_values_survive_reload(self, tmp_path):
        """Test that a new store instance reads what the previous one wrote."""
        path = tmp_path / "state" / "session.json"
        JsonFileStore(path).set("credential", "tok")

        assert JsonFileStore(path).get("credential") == "tok"
        assert json.loads(path.read_text()) == {"credential": "tok"}

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonFileStore(tmp_path / "nothing.json")

        assert store.get("account") is None

    def test_corrupt_file_is_treated_as_empty(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")

        store = JsonFileStore(path)

        assert store.get("account") is None
        store.set("account", "alice")
        assert json.loads(path.read_text()) == {"account": "alice"}

    def test_delete(self, tmp_path):
        path = tmp_path / "session.json"
        store = JsonFileStore(path)
        store.set("a", "1")
        store.set("b", "2")

        store.delete("a")

        assert json.loads(path.read_text()) == {"b": "2"}

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "session.json"
        store = JsonFileStore(path)
        store.set("a", "1")

        store.clear()

        assert not path.exists()
        assert store.get("a") is None

    def test_clear_without_file(self, tmp_path):
        JsonFileStore(tmp_path / "session.json").clear()

    def test_no_temporary_files_left_behind(self, tmp_path):
        store = JsonFileStore(tmp_path / "session.json")
        store.set("a", "1")
        store.set("b", "2")

        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]
