"""User directory persistence.

The directory lives under a single storage key as a JSON object mapping
normalized email to ``{"role": ..., "name": ...}``. The stored value is
untrusted: it may be stale, hand-edited, or written by an older version, so
every read and every write goes through ``sanitize``.
"""

import json
from typing import Any

from loklagbo.config import DEFAULT_USERS_KEY
from loklagbo.models import (
    VALID_ROLES,
    CreateResult,
    CreateStatus,
    UserDirectory,
    UserRecord,
)
from loklagbo.storage import Storage
from loklagbo.utils import is_valid_email, normalize_email


def _plain_fields(value: Any) -> dict[str, Any] | None:
    """Return the field mapping of a directory value, or None if it has no known shape.

    Only exact ``dict`` instances (what JSON parsing produces) and
    ``UserRecord`` values are accepted; dict subclasses and other mapping
    types are rejected.
    """
    if isinstance(value, UserRecord):
        return value.to_dict()
    if type(value) is dict:
        return value
    return None


def _sanitize_entry(key: Any, value: Any) -> tuple[str, UserRecord] | None:
    email = normalize_email(key)
    if not is_valid_email(email):
        return None

    fields = _plain_fields(value)
    if fields is None:
        return None

    role = fields.get("role")
    role = role.strip().lower() if isinstance(role, str) else ""
    if role not in VALID_ROLES:
        return None

    name = fields.get("name")
    if not isinstance(name, str):
        name = ""
    return email, UserRecord(role=role, name=name)


def sanitize(raw: Any) -> UserDirectory:
    """Convert an untrusted value into a directory of well-formed records.

    Returns an empty directory unless ``raw`` is a plain dict. Entries with an
    invalid email key, a non-dict value or a role outside VALID_ROLES are
    dropped. Keys are re-normalized; when two keys normalize to the same
    email the later one in iteration order wins.

    Never raises.
    """
    if type(raw) is not dict:
        return {}

    clean: UserDirectory = {}
    try:
        items = list(raw.items())
    except Exception:
        return {}

    for key, value in items:
        try:
            entry = _sanitize_entry(key, value)
        except Exception:
            # Hostile key or value (e.g. __str__ that raises): drop the entry
            continue
        if entry is None:
            continue
        email, record = entry
        clean[email] = record
    return clean


class RecordStore:
    """Validated access to the persisted user directory."""

    def __init__(self, storage: Storage, key: str = DEFAULT_USERS_KEY):
        """Initialize the record store.

        Args:
            storage: Backing key/value storage.
            key: Storage key holding the JSON-encoded directory.
        """
        self.storage = storage
        self.key = key

    def load(self) -> UserDirectory:
        """Read the persisted directory.

        Missing data, unparseable JSON and storage failures all yield an
        empty directory.
        """
        result = self.storage.get_item(self.key)
        if not result.ok or not result.value:
            return {}
        try:
            parsed = json.loads(result.value)
        except (ValueError, RecursionError) as e:
            print(f"Warning: Stored '{self.key}' has invalid JSON: {e}")
            return {}

        directory = sanitize(parsed)
        if type(parsed) is not dict:
            print(f"Warning: Stored '{self.key}' has invalid structure (expected object), ignoring")
        elif len(directory) < len(parsed):
            print(f"Warning: Discarded {len(parsed) - len(directory)} malformed user entries")
        return directory

    def save(self, directory: UserDirectory) -> bool:
        """Sanitize and persist the directory.

        A failed write is reported and otherwise ignored: the caller's
        in-memory directory stays usable but nothing is persisted.

        Returns:
            True if the directory was written, False otherwise.
        """
        safe = sanitize(directory)
        payload = json.dumps({email: record.to_dict() for email, record in safe.items()})
        result = self.storage.set_item(self.key, payload)
        if not result.ok:
            print(f"Warning: User directory not persisted: {result.error}")
            return False
        return True

    def exists(self, email: str) -> bool:
        """Check whether a user is registered under the (normalized) email."""
        return normalize_email(email) in self.load()

    def get(self, email: str) -> UserRecord | None:
        """Look up a user by email, or None if not registered."""
        return self.load().get(normalize_email(email))

    def create(self, email: str, role: str, name: str) -> CreateResult:
        """Register a new user.

        Args:
            email: Email address (will be normalized).
            role: "hirer" or "worker" (case and surrounding whitespace ignored).
            name: Display name; non-strings are stored as "".

        Returns:
            CreateResult with status INVALID_EMAIL, ALREADY_EXISTS or CREATED.
            A CREATED result with ``persisted=False`` means storage refused
            the write.

        Raises:
            ValueError: If role is not one of VALID_ROLES.
        """
        normalized = normalize_email(email)
        if not is_valid_email(normalized):
            return CreateResult(status=CreateStatus.INVALID_EMAIL, email=normalized)

        role_key = role.strip().lower() if isinstance(role, str) else ""
        if role_key not in VALID_ROLES:
            raise ValueError(f"Invalid role: {role!r}")

        # Check-then-insert is not atomic across processes; last save wins
        directory = self.load()
        if normalized in directory:
            return CreateResult(status=CreateStatus.ALREADY_EXISTS, email=normalized)

        record = UserRecord(role=role_key, name=name if isinstance(name, str) else "")
        directory[normalized] = record
        persisted = self.save(directory)
        return CreateResult(
            status=CreateStatus.CREATED,
            email=normalized,
            record=record,
            persisted=persisted,
        )
