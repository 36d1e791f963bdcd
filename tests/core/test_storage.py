"""
Tests for key-value storage backends.
"""

import json
from pathlib import Path

import pytest

from appgram.core.storage import FileStorage, MemoryStorage


@pytest.mark.unit
class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"

        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_remove_missing_key(self):
        """Test that removing an absent key is a no-op."""
        MemoryStorage().remove_item("missing")


@pytest.mark.unit
class TestFileStorage:
    """Tests for FileStorage."""

    def test_missing_file_reads_as_empty(self, tmp_path: Path):
        assert FileStorage(tmp_path / "store.json").get_item("k") is None

    def test_persists_across_instances(self, tmp_path: Path):
        """Test that values written by one instance are read by another."""
        path = tmp_path / "nested" / "store.json"
        FileStorage(path).set_item("appgram_fingerprint", "abc-123")

        assert FileStorage(path).get_item("appgram_fingerprint") == "abc-123"
        assert json.loads(path.read_text()) == {"appgram_fingerprint": "abc-123"}

    def test_remove_item(self, tmp_path: Path):
        path = tmp_path / "store.json"
        storage = FileStorage(path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        storage.remove_item("a")

        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"

    def test_non_object_document_reads_as_empty(self, tmp_path: Path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]")
        assert FileStorage(path).get_item("k") is None

    def test_corrupt_document_raises(self, tmp_path: Path):
        """Test that unreadable JSON propagates; callers decide how to degrade."""
        path = tmp_path / "store.json"
        path.write_text("{not json")
        with pytest.raises(json.JSONDecodeError):
            FileStorage(path).get_item("k")

    def test_expands_user_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("HOME", str(tmp_path))
        storage = FileStorage("~/.appgram/storage.json")
        assert storage.path == tmp_path / ".appgram" / "storage.json"
