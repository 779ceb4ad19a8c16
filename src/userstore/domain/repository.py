"""Port for user persistence, consumed by the application layer."""

from typing import Protocol
from uuid import UUID

from .user import User, UserPatch


class UserRepositoryPort(Protocol):
    """
    User repository contract.

    Every operation raises only the domain errors from
    `userstore.exceptions` (NotFoundError, InvalidArgumentError,
    DuplicateEntryError, StorageError).
    """

    async def find_by_id(self, user_id: UUID, *, timeout: float | None = None) -> User:
        """Return the live user with this id."""

    async def find_by_email(self, email: str, *, timeout: float | None = None) -> User:
        """Return the live user with this email."""

    async def create(self, user: User, *, timeout: float | None = None) -> User:
        """Insert `user` and back-fill its id and timestamps in place."""

    async def update(self, user: User, *, timeout: float | None = None) -> None:
        """Write the non-empty fields of `user`, matched by `user.id`."""

    async def apply_patch(self, user_id: UUID, patch: UserPatch, *, timeout: float | None = None) -> None:
        """Write exactly the supplied fields of `patch`."""

    async def delete(self, user_id: UUID, *, timeout: float | None = None) -> None:
        """Remove (or soft-delete, depending on configuration) the user."""
