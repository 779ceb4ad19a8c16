# src/userstore/core/logging/filters.py
"""
Logging filters.

Correlation id
--------------
A correlation id ties together the log lines produced by one logical unit of
work (a request handled by the embedding application, a job, a CLI command).
It is kept in a `contextvars.ContextVar`, so it follows the current asyncio
task across `await` points and never leaks between concurrent tasks.

    token = set_correlation_id("job-42")
    try:
        await repo.create(user)       # every log line carries correlation_id="job-42"
    finally:
        reset_correlation_id(token)

`CorrelationIdFilter` guarantees each record has a `correlation_id`
attribute, so format strings referencing `%(correlation_id)s` never fail.
The sentinel "-" marks records logged outside any unit of work.

Redaction
---------
`RedactFilter` masks record attributes whose name is sensitive (passwords,
password hashes, tokens). Repository code never passes these in `extra`, but
the filter catches accidental ones before any handler writes them.
"""

import logging
from logging import LogRecord
import contextvars

_correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

REDACTED = "***REDACTED***"


def set_correlation_id(correlation_id: str | None) -> contextvars.Token:
    """
    Set the correlation id for the current context.

    Returns:
        token: pass it to reset_correlation_id() to restore the previous value
    """
    return _correlation_id_ctx.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _correlation_id_ctx.reset(token)


def get_correlation_id() -> str | None:
    return _correlation_id_ctx.get()


class CorrelationIdFilter(logging.Filter):
    """
    Ensure every LogRecord has `correlation_id`.

    Precedence: a value passed explicitly via `extra`, then the contextvar,
    then "-". Never drops a record.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = (
            getattr(record, "correlation_id", None) or get_correlation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    """Mask sensitive attributes attached to a record."""

    SENSITIVE = {
        "password",
        "password_hash",
        "secret",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "database_url",
    }

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = REDACTED
        return True
