"""Centralized configuration for the identity layer.

All environment variables and paths are defined here. Use get_config() to access
configuration values - it loads dotenv once and caches the result.
"""

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_USERS_KEY = "users"
DEFAULT_SESSION_KEY = "currentUser"


def _parse_int_env(name: str, default: int) -> int:
    """Parse an integer environment variable with fallback to default.

    Args:
        name: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_key_env(name: str, default: str) -> str:
    """Read a storage key name, falling back to default when blank."""
    value = os.getenv(name, "").strip()
    return value or default


def _get_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve().parent
    while current != current.parent:
        if (current / "pyproject.toml").exists():
            return current
        current = current.parent
    # Fallback to parent of loklagbo/
    return Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class Config:
    """Immutable configuration container."""

    # Paths (anchored to project root unless overridden)
    project_root: Path
    storage_file: Path

    # Persisted state layout
    users_key: str
    session_key: str
    storage_quota_bytes: int  # 0 means unlimited

    # Navigation targets
    home_page: str
    login_page: str
    dashboard_page: str


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and return configuration. Cached after first call."""
    project_root = _get_project_root()

    # Single load_dotenv call for entire application
    load_dotenv(project_root / ".env")

    storage_env = os.getenv("LOKLAGBO_STORAGE_FILE", "").strip()
    storage_file = Path(storage_env) if storage_env else project_root / "local_storage.json"

    quota = _parse_int_env("LOKLAGBO_STORAGE_QUOTA_BYTES", 0)
    if quota < 0:
        quota = 0

    return Config(
        # Paths
        project_root=project_root,
        storage_file=storage_file,

        # Persisted state layout
        users_key=_parse_key_env("LOKLAGBO_USERS_KEY", DEFAULT_USERS_KEY),
        session_key=_parse_key_env("LOKLAGBO_SESSION_KEY", DEFAULT_SESSION_KEY),
        storage_quota_bytes=quota,

        # Navigation targets
        home_page=os.getenv("LOKLAGBO_HOME_PAGE", "index.html"),
        login_page=os.getenv("LOKLAGBO_LOGIN_PAGE", "login.html"),
        dashboard_page=os.getenv("LOKLAGBO_DASHBOARD_PAGE", "dashboard.html"),
    )
