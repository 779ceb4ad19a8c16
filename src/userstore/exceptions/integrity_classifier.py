"""
Classify raw storage failures into the three signals the repository cares about.

The classifier is the only place that knows about driver-specific error
shapes (PostgreSQL SQLSTATE codes, SQLite/MySQL messages, SQLAlchemy's
NoResultFound). Everything it returns is engine-neutral:

| Signal             | Recognised from                                                     |
| ------------------ | ------------------------------------------------------------------- |
| `NOT_FOUND`        | `sqlalchemy.exc.NoResultFound`                                      |
| `UNIQUE_VIOLATION` | SQLSTATE 23505, MySQL errno 1062, or a generic duplicate message    |
|                    | ORM identity conflict (new instance reuses a loaded primary key)    |
| `OTHER`            | anything else                                                       |

Mapping the signal to a domain error happens in `mapper.py`.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError, NoResultFound
from sqlalchemy.orm.exc import FlushError

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    UNIQUE_VIOLATION = "unique_violation"
    OTHER = "other"


@dataclass(frozen=True)
class StorageFailure:
    kind: FailureKind
    constraint_name: str | None = None


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


# https://dev.mysql.com/doc/mysql-errors/8.0/en/server-error-reference.html
MYSQL_DUPLICATE_ENTRY = 1062

_DUPLICATE_KEYWORDS = [
    "unique constraint",
    "unique failed",
    "unique violation",
    "duplicate key",
    "duplicate entry",
    "already exists",
]


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _sqlstate(orig) -> str | None:
    # psycopg2 exposes `pgcode`, psycopg 3 `sqlstate`; SQLAlchemy's asyncpg adapter sets both
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def _constraint_name(orig) -> str | None:
    diag = getattr(orig, "diag", None)
    if diag is not None and getattr(diag, "constraint_name", None):
        return diag.constraint_name
    # asyncpg keeps its own exception (with constraint_name) as the cause
    return getattr(orig, "constraint_name", None) or getattr(
        getattr(orig, "__cause__", None), "constraint_name", None
    )


def _classify_from_sqlstate(orig) -> StorageFailure | None:
    """
    Classify a PostgreSQL driver error by its SQLSTATE code.
    Returns None when the driver error carries no code.
    """
    code = _sqlstate(orig)
    if not code:
        return None

    constraint_name = _constraint_name(orig)

    if code == PostgresErrorCodes.UNIQUE_VIOLATION:
        logger.debug("Postgres unique violation diagnostic",
                     extra={"pgcode": code, "constraint_name": constraint_name})
        return StorageFailure(FailureKind.UNIQUE_VIOLATION, constraint_name)

    # Other integrity codes (not-null, FK, check) are not part of the domain vocabulary.
    logger.info("Postgres integrity error is not a unique violation",
                extra={"pgcode": code, "constraint_name": constraint_name})
    return StorageFailure(FailureKind.OTHER, constraint_name)


def _classify_from_generic_message(orig) -> StorageFailure:
    """
    Fallback for drivers without SQLSTATE (SQLite, MySQL).
    """
    args = getattr(orig, "args", None) or ()
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return StorageFailure(FailureKind.UNIQUE_VIOLATION)

    msg = str(orig) if orig is not None else ""
    if _match_any(msg.lower(), _DUPLICATE_KEYWORDS):
        return StorageFailure(FailureKind.UNIQUE_VIOLATION)

    # Unknown integrity message: warn so it surfaces, raw text only at DEBUG
    logger.warning("Unrecognised integrity error message", extra={"message_snippet": msg[:200]})
    logger.debug("Unrecognised integrity raw message", extra={"raw": msg})
    return StorageFailure(FailureKind.OTHER)


def classify_storage_error(exc: BaseException) -> StorageFailure:
    """
    Classify any exception raised by a storage call.

    Returns:
        A StorageFailure with the kind and, where the engine reports it,
        the violated constraint's name.
    """
    if isinstance(exc, NoResultFound):
        return StorageFailure(FailureKind.NOT_FOUND)

    if isinstance(exc, IntegrityError):
        orig = exc.orig
        # Prefer the engine's error code over message parsing
        failure = _classify_from_sqlstate(orig)
        if failure is not None:
            return failure
        return _classify_from_generic_message(orig if orig is not None else exc)

    # Adding a new instance whose primary key is already loaded in the session
    # fails in the ORM before any INSERT reaches the engine
    if isinstance(exc, FlushError) and "conflicts with persistent instance" in str(exc):
        return StorageFailure(FailureKind.UNIQUE_VIOLATION)

    return StorageFailure(FailureKind.OTHER)
