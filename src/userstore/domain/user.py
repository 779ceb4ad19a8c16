"""
Domain representation of a user.

`User` is the application-level entity. It knows nothing about tables or
sessions; the persistence adapter converts it to and from `UserRecord`.
"""
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any
from uuid import UUID


@dataclass
class User:
    """
    Application user.

    `id`, `created_at` and `updated_at` are generated by storage and stay
    `None` until the user has been created.
    """
    name: str
    email: str
    password_hash: str
    is_active: bool = True
    role: str = "user"
    id: UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __repr__(self) -> str:
        # never print the password hash
        return f"<User(id={self.id!r}, name={self.name!r}, email={self.email!r}, role={self.role!r})>"


@dataclass(frozen=True)
class UserPatch:
    """
    Explicit partial update.

    `None` means "leave unchanged". Any other value, including "" and False,
    is written as-is.
    """
    name: str | None = None
    email: str | None = None
    password_hash: str | None = None
    is_active: bool | None = None
    role: str | None = None

    def changes(self) -> dict[str, Any]:
        """Return only the supplied fields as a column -> value mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def is_empty(self) -> bool:
        return not self.changes()
