"""Current-user session tracking.

At most one identity is logged in at a time, stored as a normalized email
under a single storage key. The pointer is only trusted once ``resolve``
has joined it against the user directory.
"""

from loklagbo.config import DEFAULT_SESSION_KEY
from loklagbo.models import UserRecord
from loklagbo.record_store import RecordStore
from loklagbo.storage import Storage
from loklagbo.utils import normalize_email


class SessionManager:
    """Tracks the logged-in user."""

    def __init__(self, storage: Storage, key: str = DEFAULT_SESSION_KEY):
        self.storage = storage
        self.key = key

    def login(self, email: str) -> None:
        """Mark email as the current user.

        Existence is not checked here; callers verify with the RecordStore
        first. An empty email logs out instead of storing a blank pointer.
        """
        normalized = normalize_email(email)
        if not normalized:
            self.logout()
            return
        result = self.storage.set_item(self.key, normalized)
        if not result.ok:
            print(f"Warning: Session not persisted: {result.error}")

    def current(self) -> str | None:
        """Return the persisted email pointer, or None if logged out or unreadable."""
        result = self.storage.get_item(self.key)
        if not result.ok:
            return None
        return normalize_email(result.value) or None

    def logout(self) -> None:
        """Clear the current user."""
        result = self.storage.remove_item(self.key)
        if not result.ok:
            print(f"Warning: Could not clear session: {result.error}")

    def resolve(self, store: RecordStore) -> UserRecord | None:
        """Return the current user's record.

        A blank pointer, or one to an email with no directory entry, is
        dangling: the session is cleared and None is returned.
        """
        result = self.storage.get_item(self.key)
        if not result.ok or result.value is None:
            return None
        email = normalize_email(result.value)
        record = store.get(email) if email else None
        if record is None:
            self.logout()
        return record
