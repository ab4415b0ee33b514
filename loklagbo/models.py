"""User directory data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

Role = Literal["hirer", "worker"]

VALID_ROLES: frozenset[str] = frozenset({"hirer", "worker"})


@dataclass(frozen=True)
class UserRecord:
    """A directory entry. The normalized email is the directory key, not a field."""

    role: Role
    name: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"role": self.role, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Create UserRecord from an already-validated dictionary."""
        return cls(role=data["role"], name=data.get("name", ""))


# Mapping from normalized email to its record
UserDirectory = dict[str, UserRecord]


class CreateStatus(Enum):
    """Outcome of a signup attempt."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    INVALID_EMAIL = "invalid_email"


@dataclass(frozen=True)
class CreateResult:
    """Result of RecordStore.create.

    ``persisted`` is False when the record was accepted but the write to
    storage failed; the record is still returned for use during this call.
    """

    status: CreateStatus
    email: str
    record: UserRecord | None = None
    persisted: bool = False

    @property
    def ok(self) -> bool:
        """True when the user was created."""
        return self.status is CreateStatus.CREATED
