"""
User repository: the persistence adapter behind `UserRepositoryPort`.

Converts between the domain `User` and the `UserRecord` row via
`userstore.mappers`, and builds every operation on the `BaseRepository`
primitives so error translation and deadlines are applied uniformly.

| Operation             | Primitive        | Zero rows     |
| --------------------- | ---------------- | ------------- |
| `find_by_id`          | `get_one`        | NotFoundError |
| `find_by_email`       | `get_one`        | NotFoundError |
| `create`              | `insert`         | n/a           |
| `update/apply_patch`  | `update_where`   | NotFoundError |
| `delete` (hard)       | `delete_where`   | NotFoundError |
| `delete` (soft)       | `update_where`   | NotFoundError |
"""

from typing import Any, Literal
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession

from userstore.domain.user import User, UserPatch
from userstore.exceptions.base import InvalidArgumentError
from userstore.mappers.user_mapper import patch_from_user, to_domain, to_record
from userstore.models.user import UserRecord
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

DeleteMode = Literal["hard", "soft"]


class UserRepository(BaseRepository[UserRecord]):
    """
    Repository for User entity operations.

    Only live rows (`deleted_at IS NULL`) are visible to reads and writes. In
    hard-delete mode no row ever has `deleted_at` set, so the filter is a no-op.
    """

    def __init__(self, db: AsyncSession, *, delete_mode: DeleteMode = "hard", timeout: float | None = None):
        """
        Args:
            db: The async database session; the caller owns its transaction.
            delete_mode: "hard" removes rows, "soft" stamps `deleted_at`.
            timeout: default deadline in seconds per operation.
        """
        if delete_mode not in ("hard", "soft"):
            raise ValueError(f"delete_mode must be 'hard' or 'soft', got {delete_mode!r}")
        super().__init__(UserRecord, db, timeout=timeout)
        self.delete_mode = delete_mode

    @staticmethod
    def _live():
        return UserRecord.deleted_at.is_(None)

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def find_by_id(self, user_id: UUID, *, timeout: float | None = None) -> User:
        """
        Return the live user with `user_id`.

        Raises:
            NotFoundError: no live user has this id
            StorageError: any other storage failure
        """
        record = await self.get_one(UserRecord.id == user_id, self._live(), timeout=timeout)
        logger.debug("repo.find_by_id.success", extra={"id": str(user_id)})
        return to_domain(record)

    async def find_by_email(self, email: str, *, timeout: float | None = None) -> User:
        """
        Return the live user with `email`. The match is exact; emails are
        stored as given.
        """
        record = await self.get_one(UserRecord.email == email, self._live(), timeout=timeout)
        logger.debug("repo.find_by_email.success", extra={"id": str(record.id)})
        return to_domain(record)

    async def count(self, *criteria: Any, timeout: float | None = None, **filters: Any) -> int:
        """Count live users matching `criteria` and equality `filters`."""
        return await super().count(self._live(), *criteria, timeout=timeout, **filters)

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(self, user: User, *, timeout: float | None = None) -> User:
        """
        Insert `user` and back-fill its `id`, `created_at` and `updated_at`.

        The same object is returned. It is left untouched when the insert fails.

        Raises:
            DuplicateEntryError: the id or email is already taken by a live user
            StorageError: any other storage failure
        """
        logger.info("repo.create.start", extra={"model": "User", "role": user.role})

        record = await self.insert(to_record(user), timeout=timeout)

        user.id = record.id
        user.created_at = record.created_at
        user.updated_at = record.updated_at

        logger.info("repo.create.success", extra={"model": "User", "id": str(user.id)})
        return user

    # =================================================================================================================
    # Update
    # =================================================================================================================

    async def update(self, user: User, *, timeout: float | None = None) -> None:
        """
        Write the supplied fields of `user`, matched by `user.id`.

        Text fields that are empty strings are treated as "not supplied".
        Booleans are not: `is_active` is always written, so a partial `User`
        left at `is_active=False` deactivates the row. Use `apply_patch` to
        control exactly which fields change.

        Raises:
            InvalidArgumentError: `user.id` is not set (no storage call is made)
            NotFoundError: no live user has this id
            DuplicateEntryError: the new email is taken by another live user
            StorageError: any other storage failure
        """
        if user.id is None:
            raise InvalidArgumentError("Cannot update a user without an id", fields=["id"])

        await self.apply_patch(user.id, patch_from_user(user), timeout=timeout)

    async def apply_patch(self, user_id: UUID, patch: UserPatch, *, timeout: float | None = None) -> None:
        """
        Write exactly the non-None fields of `patch` to the live user `user_id`.

        `updated_at` is always advanced by the database, so an update that
        changes no column still matches (and counts) the row.
        """
        if user_id is None:
            raise InvalidArgumentError("Cannot update a user without an id", fields=["id"])

        if patch.is_empty():
            # nothing to write; the row is still matched so a missing id is reported
            logger.info("repo.update.empty_patch", extra={"model": "User", "id": str(user_id)})

        values = {**patch.changes(), "updated_at": func.now()}
        logger.debug("repo.update.start", extra={"id": str(user_id), "fields": sorted(patch.changes())})

        rowcount = await self.update_where(values, UserRecord.id == user_id, self._live(), timeout=timeout)
        self._require_rows(rowcount, "update", user_id)

        logger.info("repo.update.success", extra={"model": "User", "id": str(user_id)})

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def delete(self, user_id: UUID, *, timeout: float | None = None) -> None:
        """
        Delete the live user `user_id`.

        Hard mode removes the row. Soft mode stamps `deleted_at`, after which
        the user is invisible and its email may be reused.

        Raises:
            NotFoundError: no live user has this id
            StorageError: any other storage failure
        """
        if self.delete_mode == "soft":
            rowcount = await self.update_where(
                {"deleted_at": func.now(), "updated_at": func.now()},
                UserRecord.id == user_id,
                self._live(),
                timeout=timeout,
            )
        else:
            rowcount = await self.delete_where(UserRecord.id == user_id, timeout=timeout)

        self._require_rows(rowcount, "delete", user_id)
        logger.info("repo.delete.success", extra={"model": "User", "id": str(user_id), "mode": self.delete_mode})
