"""
Domain errors raised by the user store.

These are the only exceptions callers of the repository ever see; raw
driver/SQLAlchemy errors are classified and translated before they get here.
"""

from typing import Iterable


class RepositoryError(Exception):
    """
    Base exception for repository errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['email'])
    - constraint: optional DB constraint name (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'not_found')
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base


class NotFoundError(RepositoryError):
    """No live record matched, or a write affected zero rows."""

    def __init__(self, message: str = "Not found", *, fields: Iterable[str] | None = None,
                 error_code: str = "not_found"):
        super().__init__(message, fields=fields, error_code=error_code)


class InvalidArgumentError(NotFoundError):
    """
    The call could not identify a record (e.g. update without an id).

    Subclasses NotFoundError so callers handling "not found" keep working,
    while the distinct code lets them tell the two apart.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="invalid_argument")


class DuplicateEntryError(RepositoryError):
    """A unique constraint (id or email) was violated."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None, constraint: str | None = None):
        super().__init__(message, fields=fields, constraint=constraint, error_code="duplicate")


class StorageError(RepositoryError):
    """
    Any other storage failure. The original exception is kept on `cause`
    (and chained as `__cause__` by the raiser) for diagnostics.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None, constraint: str | None = None):
        super().__init__(message, constraint=constraint, error_code="storage_error")
        self.cause = cause


__all__ = [
    "RepositoryError",
    "NotFoundError",
    "InvalidArgumentError",
    "DuplicateEntryError",
    "StorageError",
]
