"""String key/value storage backing the user directory and session pointer.

Mirrors the browser storage contract: every value is a string, a missing key
reads as ``None``, and access can fail (disabled storage, quota, unreadable
file). Failures are returned as ``StorageResult`` values, never raised.
"""

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from loklagbo.config import Config
from loklagbo.utils import atomic_write_json


@dataclass(frozen=True)
class StorageResult:
    """Outcome of a single storage access."""

    value: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """True when the access succeeded."""
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> "StorageResult":
        """Build a failed result carrying an error message."""
        return cls(value=None, error=error)


class Storage(Protocol):
    """Protocol for string key/value storage backends."""

    def get_item(self, key: str) -> StorageResult:
        """Read a value; ``value`` is None when the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> StorageResult:
        """Write a value."""
        ...

    def remove_item(self, key: str) -> StorageResult:
        """Delete a key; removing a missing key succeeds."""
        ...


def _encoded_size(data: dict[str, str]) -> int:
    return len(json.dumps(data, ensure_ascii=False).encode("utf-8", errors="surrogatepass"))


def _unencodable(key: str, value: str) -> str | None:
    """Return an error message if key or value cannot be stored as UTF-8."""
    try:
        key.encode("utf-8")
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        return f"value not encodable: {e.reason}"
    return None


class MemoryStorage:
    """In-process storage with the same contract as FileStorage."""

    def __init__(self, quota_bytes: int = 0):
        self.quota_bytes = quota_bytes
        self._items: dict[str, str] = {}

    def get_item(self, key: str) -> StorageResult:
        return StorageResult(value=self._items.get(key))

    def set_item(self, key: str, value: str) -> StorageResult:
        error = _unencodable(key, value)
        if error is not None:
            return StorageResult.failed(error)
        candidate = {**self._items, key: value}
        if self.quota_bytes and _encoded_size(candidate) > self.quota_bytes:
            return StorageResult.failed(f"quota of {self.quota_bytes} bytes exceeded")
        self._items = candidate
        return StorageResult()

    def remove_item(self, key: str) -> StorageResult:
        self._items.pop(key, None)
        return StorageResult()


class FileStorage:
    """Persists string key/value pairs to a single JSON file.

    Provides atomic writes using temp file + rename pattern. Read-modify-write
    cycles are serialized within this process only; another process writing
    the same file can still win a race (last write wins).
    """

    def __init__(self, file_path: Path, quota_bytes: int = 0):
        """Initialize the storage.

        Args:
            file_path: Path to the storage JSON file.
            quota_bytes: Maximum encoded size of the whole file, 0 for no limit.
        """
        self.file_path = file_path
        self.quota_bytes = quota_bytes
        self._lock = threading.Lock()

    def _load(self) -> tuple[dict[str, str] | None, str | None]:
        """Load all items from file, returning (items, error)."""
        try:
            if not self.file_path.exists():
                return {}, None
            with open(self.file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            print(f"Warning: Storage file has invalid JSON: {e}")
            return None, f"invalid JSON: {e}"
        except UnicodeDecodeError as e:
            print(f"Warning: Storage file has encoding issues: {e}")
            return None, f"encoding error: {e}"
        except OSError as e:
            print(f"Warning: Cannot read storage file: {e}")
            return None, f"read failed: {e}"

        # Validate structure
        if not isinstance(data, dict):
            print("Warning: Storage file has invalid structure (expected dict)")
            return None, "invalid structure"
        # Only string values are storage items; anything else is dropped
        return {k: v for k, v in data.items() if isinstance(v, str)}, None

    def _save(self, items: dict[str, str]) -> str | None:
        """Save items atomically, returning an error message on failure."""
        if self.quota_bytes and _encoded_size(items) > self.quota_bytes:
            print(f"Warning: Storage quota of {self.quota_bytes} bytes exceeded")
            return f"quota of {self.quota_bytes} bytes exceeded"
        try:
            atomic_write_json(items, self.file_path)
        except (OSError, ValueError) as e:
            print(f"Warning: Cannot write storage file: {e}")
            return f"write failed: {e}"
        return None

    def get_item(self, key: str) -> StorageResult:
        with self._lock:
            items, error = self._load()
        if error is not None:
            return StorageResult.failed(error)
        return StorageResult(value=items.get(key))

    def set_item(self, key: str, value: str) -> StorageResult:
        error = _unencodable(key, value)
        if error is not None:
            print(f"Warning: Cannot write storage file: {error}")
            return StorageResult.failed(error)
        with self._lock:
            items, error = self._load()
            if error is not None:
                # Refuse to overwrite a file we could not read
                return StorageResult.failed(error)
            items[key] = value
            error = self._save(items)
        if error is not None:
            return StorageResult.failed(error)
        return StorageResult()

    def remove_item(self, key: str) -> StorageResult:
        with self._lock:
            items, error = self._load()
            if error is not None:
                return StorageResult.failed(error)
            if key not in items:
                return StorageResult()
            del items[key]
            error = self._save(items)
        if error is not None:
            return StorageResult.failed(error)
        return StorageResult()


def open_storage(config: Config) -> FileStorage:
    """Build the file-backed storage described by config."""
    return FileStorage(config.storage_file, quota_bytes=config.storage_quota_bytes)
