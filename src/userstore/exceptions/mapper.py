import re
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError

from .integrity_classifier import classify_storage_error, FailureKind
from .base import DuplicateEntryError, NotFoundError, RepositoryError, StorageError

logger = logging.getLogger(__name__)

# -----------------------
# Column extraction helpers
# -----------------------

def _extract_columns_postgres(msg: str) -> list[str] | None:
    # 'DETAIL:  Key (email)=(a@x.com) already exists.'
    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]
    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # 'UNIQUE constraint failed: users.email'
    m = re.search(r'UNIQUE constraint failed: (?P<cols>[^\n]+)', msg, flags=re.IGNORECASE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols").strip())]
    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # "Duplicate entry 'a@x.com' for key 'users.uq_users_email_live'"
    m = re.search(r"Duplicate entry .* for key '?(?P<key>[^']+)'?", msg, flags=re.IGNORECASE)
    if m:
        return [m.group("key").split('.')[-1]]
    return None


def extract_columns(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of the offending column names from the DB message.
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols
    return None


# -----------------------
# Mapper
# -----------------------

def raise_mapped_storage_error(exc: BaseException, model_name: str | None = None,
                               operation: str | None = None) -> None:
    """
    Translate a raw storage exception into a domain error and raise it,
    chained to the original.
    """
    failure = classify_storage_error(exc)
    model_part = model_name or "Record"
    context = {"model": model_part, "operation": operation}

    if failure.kind is FailureKind.NOT_FOUND:
        logger.info("mapper.not_found", extra=context)
        raise NotFoundError(f"{model_part} not found") from exc

    if failure.kind is FailureKind.UNIQUE_VIOLATION:
        columns = extract_columns(exc) if isinstance(exc, IntegrityError) else None
        # Duplicates are an expected client-level outcome: INFO, no stack trace
        logger.info(
            "mapper.duplicate_detected",
            extra={**context, "fields": columns, "constraint": failure.constraint_name},
        )
        if columns:
            message = f"{model_part} already exists for field(s): {', '.join(columns)}"
        elif failure.constraint_name:
            message = f"{model_part} already exists (constraint: {failure.constraint_name})"
        else:
            message = f"{model_part} already exists (unique constraint)"
        raise DuplicateEntryError(message, fields=columns, constraint=failure.constraint_name) from exc

    if isinstance(exc, TimeoutError):
        logger.warning("mapper.deadline_exceeded", extra=context)
        raise StorageError(f"{model_part} {operation or 'operation'} exceeded its deadline", cause=exc) from exc

    # Unexpected: keep the stack trace for diagnostics, return a non-leaking message
    logger.error("mapper.storage_failure", extra={**context, "error_type": type(exc).__name__}, exc_info=exc)
    raise StorageError(f"Failed to {operation or 'operate on'} {model_part}",
                       cause=exc, constraint=failure.constraint_name) from exc


# -----------------------
# Async context manager to DRY error handling in repositories
# -----------------------
@asynccontextmanager
async def storage_error_handler(model_name: str | None = None,
                                operation: str | None = None) -> AsyncIterator[None]:
    """
    Usage:
        async with storage_error_handler(self.model.__name__, "create"):
            ... storage calls ...

    Domain errors raised inside the block pass through. Task cancellation
    propagates untouched. Every other exception is classified and re-raised
    as a domain error.
    """
    try:
        yield
    except RepositoryError:
        raise
    except asyncio.CancelledError:
        logger.info("repo.cancelled", extra={"model": model_name, "operation": operation})
        raise
    except Exception as exc:
        raise_mapped_storage_error(exc, model_name, operation)
