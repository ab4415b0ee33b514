"""Shared test fixtures and configuration."""

import tempfile
from dataclasses import dataclass
from pathlib import Path

import pytest

from loklagbo.pages import App
from loklagbo.record_store import RecordStore
from loklagbo.session import SessionManager
from loklagbo.storage import FileStorage, MemoryStorage, StorageResult


@dataclass(frozen=True)
class TestConfig:
    """Test configuration matching the real Config interface."""

    project_root: Path = Path("/tmp/test_project")
    storage_file: Path = Path("/tmp/test_project/local_storage.json")
    users_key: str = "users"
    session_key: str = "currentUser"
    storage_quota_bytes: int = 0
    home_page: str = "index.html"
    login_page: str = "login.html"
    dashboard_page: str = "dashboard.html"


class FailingStorage:
    """Storage whose every access fails, like disabled browser storage."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.inner = MemoryStorage()

    def get_item(self, key: str) -> StorageResult:
        if self.fail_reads:
            return StorageResult.failed("storage disabled")
        return self.inner.get_item(key)

    def set_item(self, key: str, value: str) -> StorageResult:
        if self.fail_writes:
            return StorageResult.failed("storage disabled")
        return self.inner.set_item(key, value)

    def remove_item(self, key: str) -> StorageResult:
        if self.fail_writes:
            return StorageResult.failed("storage disabled")
        return self.inner.remove_item(key)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config(temp_dir: Path) -> TestConfig:
    """Create a test configuration with temporary paths."""
    return TestConfig(
        project_root=temp_dir,
        storage_file=temp_dir / "local_storage.json",
    )


@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Empty in-memory storage."""
    return MemoryStorage()


@pytest.fixture
def file_storage(test_config: TestConfig) -> FileStorage:
    """File storage in a temporary directory."""
    return FileStorage(test_config.storage_file)


@pytest.fixture
def store(memory_storage: MemoryStorage) -> RecordStore:
    """Record store over in-memory storage."""
    return RecordStore(memory_storage)


@pytest.fixture
def session(memory_storage: MemoryStorage) -> SessionManager:
    """Session manager sharing storage with the store fixture."""
    return SessionManager(memory_storage)


@pytest.fixture
def app(test_config: TestConfig) -> App:
    """Application handle over file storage in a temporary directory."""
    return App.init(config=test_config)


@pytest.fixture
def failing_storage() -> FailingStorage:
    """Storage where reads and writes fail; flip the flags to fail only one side."""
    return FailingStorage()
