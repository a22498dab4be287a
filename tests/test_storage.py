"""Tests for the key-value stores."""

import json
import os

import pytest

from pocketvault.errors import EncodingError
from pocketvault.storage import FileKeyValueStore, MemoryKeyValueStore


class TestMemoryStore:

    def test_get_set_remove(self, memory_store):
        assert memory_store.get("k") is None
        memory_store.set("k", "v")
        assert memory_store.get("k") == "v"
        memory_store.remove("k")
        assert memory_store.get("k") is None

    def test_remove_missing_is_noop(self, memory_store):
        memory_store.remove("missing")

    def test_update_writes_every_key(self, memory_store):
        memory_store.set("a", "old")
        memory_store.update({"a": "1", "b": "2"})
        assert (memory_store.get("a"), memory_store.get("b")) == ("1", "2")


class TestFileStore:

    def test_missing_file_reads_empty(self, file_store):
        assert not file_store.exists()
        assert file_store.get("vault_data") is None
        assert file_store.get_file_info() is None

    def test_persists_across_instances(self, file_store):
        file_store.set("vault_data", '{"data": "00"}')
        file_store.set("auto_lock_timeout", "10")

        reopened = FileKeyValueStore(file_store.filename)
        assert reopened.get("vault_data") == '{"data": "00"}'
        assert reopened.get("auto_lock_timeout") == "10"

    def test_remove(self, file_store):
        file_store.set("a", "1")
        file_store.set("b", "2")
        file_store.remove("a")
        file_store.remove("never-set")

        with open(file_store.filename, encoding="utf-8") as f:
            assert json.load(f) == {"b": "2"}

    def test_update_is_a_single_replace(self, file_store, monkeypatch):
        file_store.set("a", "old")
        replaced = []
        real_replace = os.replace

        def counting_replace(src, dst):
            replaced.append(dst)
            real_replace(src, dst)

        monkeypatch.setattr(os, "replace", counting_replace)
        file_store.update({"a": "1", "b": "2"})

        assert replaced == [file_store.filename]
        with open(file_store.filename, encoding="utf-8") as f:
            assert json.load(f) == {"a": "1", "b": "2"}

    def test_failed_update_keeps_previous_contents(self, file_store, monkeypatch):
        file_store.set("a", "old")

        def failing_replace(src, dst):
            raise OSError("No space left on device")

        monkeypatch.setattr(os, "replace", failing_replace)
        with pytest.raises(OSError):
            file_store.update({"a": "1", "b": "2"})
        monkeypatch.undo()

        assert file_store.get("a") == "old"
        assert file_store.get("b") is None
        assert os.listdir(os.path.dirname(file_store.filename)) == ["vault.json"]

    def test_no_temp_files_left_behind(self, file_store):
        file_store.set("a", "1")
        directory = os.path.dirname(file_store.filename)
        assert os.listdir(directory) == ["vault.json"]

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")
    def test_owner_only_permissions(self, file_store):
        file_store.set("a", "1")
        assert file_store.get_file_info()["permissions"] == "600"
        assert oct(os.stat(os.path.dirname(file_store.filename)).st_mode)[-3:] == "700"

    @pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"a": 1}'])
    def test_corrupt_file(self, file_store, content):
        os.makedirs(os.path.dirname(file_store.filename))
        with open(file_store.filename, "w", encoding="utf-8") as f:
            f.write(content)

        with pytest.raises(EncodingError):
            file_store.get("a")
