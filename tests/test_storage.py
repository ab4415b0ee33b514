"""Tests for loklagbo/storage.py"""

import json
from pathlib import Path
from unittest.mock import patch

from loklagbo.storage import FileStorage, MemoryStorage, StorageResult, open_storage


class TestStorageResult:
    """Tests for StorageResult."""

    def test_default_is_ok(self):
        assert StorageResult().ok
        assert StorageResult(value="x").value == "x"

    def test_failed(self):
        result = StorageResult.failed("nope")
        assert not result.ok
        assert result.value is None
        assert result.error == "nope"


class TestMemoryStorage:
    """Tests for in-memory storage."""

    def test_missing_key_reads_none(self, memory_storage):
        result = memory_storage.get_item("users")
        assert result.ok
        assert result.value is None

    def test_set_then_get(self, memory_storage):
        assert memory_storage.set_item("k", "v").ok
        assert memory_storage.get_item("k").value == "v"

    def test_remove_missing_key_succeeds(self, memory_storage):
        assert memory_storage.remove_item("nothing").ok

    def test_remove(self, memory_storage):
        memory_storage.set_item("k", "v")
        memory_storage.remove_item("k")
        assert memory_storage.get_item("k").value is None

    def test_quota_rejects_write_and_keeps_old_value(self):
        storage = MemoryStorage(quota_bytes=30)
        assert storage.set_item("k", "small").ok
        result = storage.set_item("k", "x" * 100)
        assert not result.ok
        assert "quota" in result.error
        assert storage.get_item("k").value == "small"


class TestFileStorage:
    """Tests for file-backed storage."""

    def test_missing_file_is_empty(self, file_storage):
        result = file_storage.get_item("users")
        assert result.ok
        assert result.value is None

    def test_set_writes_json_object(self, file_storage):
        assert file_storage.set_item("currentUser", "a@b.com").ok
        with open(file_storage.file_path) as f:
            assert json.load(f) == {"currentUser": "a@b.com"}

    def test_keys_are_independent(self, file_storage):
        file_storage.set_item("users", "{}")
        file_storage.set_item("currentUser", "a@b.com")
        assert file_storage.get_item("users").value == "{}"
        assert file_storage.get_item("currentUser").value == "a@b.com"

    def test_remove_item(self, file_storage):
        file_storage.set_item("currentUser", "a@b.com")
        assert file_storage.remove_item("currentUser").ok
        assert file_storage.get_item("currentUser").value is None

    def test_remove_missing_does_not_create_file(self, file_storage):
        assert file_storage.remove_item("currentUser").ok
        assert not file_storage.file_path.exists()

    def test_invalid_json_is_failure(self, file_storage, capsys):
        file_storage.file_path.parent.mkdir(parents=True, exist_ok=True)
        file_storage.file_path.write_text("not valid json")
        result = file_storage.get_item("users")
        assert not result.ok
        assert "Warning" in capsys.readouterr().out

    def test_unreadable_file_is_not_overwritten(self, file_storage):
        file_storage.file_path.parent.mkdir(parents=True, exist_ok=True)
        file_storage.file_path.write_text("[1, 2, 3]")
        assert not file_storage.set_item("users", "{}").ok
        assert file_storage.file_path.read_text() == "[1, 2, 3]"

    def test_non_string_values_dropped(self, file_storage):
        file_storage.file_path.parent.mkdir(parents=True, exist_ok=True)
        file_storage.file_path.write_text(json.dumps({"users": {"a": 1}, "currentUser": "a@b.com"}))
        assert file_storage.get_item("users").value is None
        assert file_storage.get_item("currentUser").value == "a@b.com"

    def test_quota_exceeded(self, test_config):
        storage = FileStorage(test_config.storage_file, quota_bytes=20)
        result = storage.set_item("users", "x" * 50)
        assert not result.ok
        assert not test_config.storage_file.exists()

    def test_write_error_is_failure(self, temp_dir):
        """A path whose parent is a regular file cannot be written."""
        blocker = temp_dir / "blocker"
        blocker.write_text("")
        storage = FileStorage(blocker / "storage.json")
        result = storage.set_item("users", "{}")
        assert not result.ok

    def test_no_temp_files_left(self, file_storage):
        file_storage.set_item("users", "{}")
        assert list(file_storage.file_path.parent.glob("*.tmp")) == []


class TestOpenStorage:
    """Tests for open_storage."""

    def test_uses_config_path_and_quota(self, test_config):
        storage = open_storage(test_config)
        assert isinstance(storage, FileStorage)
        assert storage.file_path == test_config.storage_file
        assert storage.quota_bytes == test_config.storage_quota_bytes


class TestUnencodableValues:
    """Values that cannot be written as UTF-8 fail instead of raising."""

    def test_memory_storage_rejects_lone_surrogate(self, memory_storage):
        result = memory_storage.set_item("currentUser", "\ud800@b.com")
        assert not result.ok
        assert memory_storage.get_item("currentUser").value is None

    def test_memory_storage_with_quota(self):
        storage = MemoryStorage(quota_bytes=1000)
        assert not storage.set_item("currentUser", "\ud800@b.com").ok

    def test_file_storage_rejects_lone_surrogate(self, file_storage):
        file_storage.set_item("users", "{}")
        result = file_storage.set_item("currentUser", "\ud800@b.com")
        assert not result.ok
        assert file_storage.get_item("currentUser").value is None
        assert file_storage.get_item("users").value == "{}"

    def test_surrogate_already_in_file_does_not_raise(self, test_config):
        """An escaped lone surrogate in the file cannot be written back out."""
        test_config.storage_file.parent.mkdir(parents=True, exist_ok=True)
        test_config.storage_file.write_text('{"currentUser": "\\ud800@b.com"}')
        storage = FileStorage(test_config.storage_file, quota_bytes=1000)
        result = storage.set_item("users", "{}")
        assert not result.ok
        assert list(test_config.storage_file.parent.glob("*.tmp")) == []


class TestUnreachableFile:
    """Errors while checking for the file are storage failures."""

    def test_exists_error_is_failure(self, file_storage):
        with patch.object(Path, "exists", side_effect=PermissionError("denied")):
            assert not file_storage.get_item("users").ok
            assert not file_storage.set_item("users", "{}").ok
            assert not file_storage.remove_item("users").ok
