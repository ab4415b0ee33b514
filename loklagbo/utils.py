"""Shared utility functions."""

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any

# Simple, permissive email check: local@domain.tld with a 2+ char TLD
_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$", re.IGNORECASE)


def atomic_write_json(data: Any, file_path: Path) -> None:
    """Write JSON data atomically using temp file + rename.

    Ensures data durability with fsync and cross-platform atomic rename.

    Args:
        data: JSON-serializable data to write.
        file_path: Target file path.
    """
    dir_path = file_path.parent
    dir_path.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(suffix=".tmp", dir=dir_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, file_path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def normalize_email(email: Any) -> str:
    """Normalize email address for consistent storage and lookup.

    Lowercases the email to handle case-insensitive matching. ``None`` is
    treated as an empty address and other non-strings are converted with
    ``str()`` first, so form values of any shape can be passed in.

    Args:
        email: Email address to normalize.

    Returns:
        Normalized (lowercase, stripped) email address.
    """
    if email is None:
        return ""
    return str(email).strip().lower()


def is_valid_email(email: Any) -> bool:
    """Basic email format validation."""
    if not isinstance(email, str):
        return False
    try:
        email.encode("utf-8")
    except UnicodeEncodeError:
        return False
    return bool(_EMAIL_PATTERN.match(email))


def first_name(name: str) -> str:
    """First word of a display name, or "there" for a blank name."""
    parts = (name or "").split()
    return parts[0] if parts else "there"
