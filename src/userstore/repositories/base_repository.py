"""
Base repository providing the storage primitives the entity repositories build on.

Each primitive issues exactly one statement against the injected AsyncSession:

| Primitive                      | Statement                     | Returns           |
| ------------------------------ | ----------------------------- | ----------------- |
| `get_one(*criteria)`           | SELECT ... WHERE (one row)    | model instance    |
| `insert(entity)`               | INSERT (flush + refresh)      | model instance    |
| `update_where(values, *crit)`  | UPDATE ... SET ... WHERE      | rows affected     |
| `delete_where(*criteria)`      | DELETE ... WHERE              | rows affected     |
| `count(*criteria, **filters)`  | SELECT COUNT(*) ... WHERE     | int               |

Failures are classified and re-raised as domain errors by
`storage_error_handler`, so nothing driver-specific escapes this layer.
The repository never commits: transaction scope belongs to the caller. Writes
run inside a SAVEPOINT so a failed statement does not discard the caller's
other pending work.
"""
from userstore.exceptions.base import InvalidArgumentError, NotFoundError
from userstore.exceptions.mapper import storage_error_handler

import asyncio
import time
from contextlib import asynccontextmanager
from typing import TypeVar, Generic, Type, Any, AsyncIterator
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, inspect
import logging

from userstore.database.base import Base

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository over one SQLAlchemy model.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession, *, timeout: float | None = None):
        """
        Args:
            model: The SQLAlchemy model class (not an instance), used to build queries.
            db: The async session, injected by the caller. The repository owns no engine.
            timeout: default deadline in seconds for each primitive; None means no deadline.
        """
        self.model = model
        self.db = db
        self.timeout = timeout

    @asynccontextmanager
    async def _guard(self, operation: str, timeout: float | None) -> AsyncIterator[None]:
        """Deadline + error translation around a single storage call."""
        deadline = timeout if timeout is not None else self.timeout
        async with storage_error_handler(self.model.__name__, operation):
            async with asyncio.timeout(deadline):
                yield

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def get_one(self, *criteria: Any, timeout: float | None = None) -> ModelType:
        """
        Fetch exactly one row matching `criteria`.

        Raises:
            NotFoundError: no row matched (the engine's NoResultFound signal).
            StorageError: any other failure, including more than one match.
        """
        async with self._guard("get_one", timeout):
            # populate_existing: refresh instances already in the identity map,
            # so values written by bulk UPDATEs are not served stale
            result = await self.db.execute(
                select(self.model).where(*criteria).execution_options(populate_existing=True)
            )
            entity = result.scalar_one()

        logger.debug("repo.get_one.success", extra={"model": self.model.__name__})
        return entity

    async def count(self, *criteria: Any, timeout: float | None = None, **filters: Any) -> int:
        """
        Count rows matching `criteria` and equality `filters`.

        Filter names must be mapped columns; anything else (unknown names,
        class attributes such as `metadata`) raises InvalidArgumentError.
        """
        columns = inspect(self.model).columns.keys()
        unknown = [field for field in filters if field not in columns]
        if unknown:
            raise InvalidArgumentError(f"{self.model.__name__} has no field(s): {', '.join(sorted(unknown))}",
                                       fields=sorted(unknown))

        query = select(func.count()).select_from(self.model).where(*criteria)
        for field, value in filters.items():
            query = query.where(getattr(self.model, field) == value)

        async with self._guard("count", timeout):
            result = await self.db.execute(query)
            return result.scalar_one()

    # =================================================================================================================
    # Write
    # =================================================================================================================

    async def insert(self, entity: ModelType, *, timeout: float | None = None) -> ModelType:
        """
        INSERT `entity` and reload it so database-generated columns
        (ids, timestamps) are populated.

        Raises:
            DuplicateEntryError: a unique constraint was violated.
            StorageError: any other failure.
        """
        logger.debug("repo.insert.start", extra={"model": self.model.__name__, "operation": "insert"})
        start = time.perf_counter()

        async with self._guard("insert", timeout):
            async with self.db.begin_nested():
                self.db.add(entity)
                await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.insert.success",
            extra={
                "model": self.model.__name__,
                "operation": "insert",
                "id": str(getattr(entity, "id", None)),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def update_where(self, values: dict[str, Any], *criteria: Any, timeout: float | None = None) -> int:
        """
        UPDATE the rows matching `criteria` with `values`.

        Returns:
            The number of rows the engine reports as affected.
        """
        if not values:
            raise InvalidArgumentError(f"No values supplied to update {self.model.__name__}")

        stmt = (
            update(self.model)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        async with self._guard("update", timeout):
            async with self.db.begin_nested():
                result = await self.db.execute(stmt)

        logger.debug("repo.update.done", extra={"model": self.model.__name__, "rowcount": result.rowcount})
        return result.rowcount

    async def delete_where(self, *criteria: Any, timeout: float | None = None) -> int:
        """
        DELETE the rows matching `criteria`.

        Returns:
            The number of rows deleted.
        """
        stmt = delete(self.model).where(*criteria).execution_options(synchronize_session="evaluate")

        async with self._guard("delete", timeout):
            async with self.db.begin_nested():
                result = await self.db.execute(stmt)

        logger.debug("repo.delete.done", extra={"model": self.model.__name__, "rowcount": result.rowcount})
        return result.rowcount

    # =================================================================================================================
    # Helpers
    # =================================================================================================================

    def _require_rows(self, rowcount: int, operation: str, entity_id: Any) -> None:
        """Zero rows affected is reported as NotFoundError."""
        if rowcount == 0:
            logger.info(
                f"repo.{operation}.not_found",
                extra={"model": self.model.__name__, "operation": operation, "id": str(entity_id)},
            )
            raise NotFoundError(f"{self.model.__name__} with ID {entity_id} not found")
