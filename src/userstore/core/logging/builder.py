# src/userstore/core/logging/builder.py
"""
Logging builder: turn Settings into a dictConfig mapping and apply it.

    setup_logging(get_settings())

| Component  | Entries                                                        |
| ---------- | -------------------------------------------------------------- |
| formatters | "standard" (ColorFormatter in text mode), "json"               |
| filters    | "correlation_id", "redact"                                     |
| handlers   | "console" always; "file" + "error_file" when writing to        |
|            | LOG_DIR, otherwise "error_console"                             |
| loggers    | root, "sqlalchemy.engine" (WARNING unless ENABLE_SQL_LOGGING)  |

| LOG_TO_STDOUT | LOG_DIR set | Handlers                         |
| ------------- | ----------- | -------------------------------- |
| true          | any         | console + error_console          |
| false         | no          | console + error_console          |
| false         | yes         | console + file + error_file      |
"""

from pathlib import Path
import logging
import logging.config

from userstore.config.settings import Settings
from userstore.utils.logging import get_project_name

from .formatters import JsonFormatter, ColorFormatter
from .filters import CorrelationIdFilter, RedactFilter
from .handlers import (
    get_console_handler,
    get_file_handler,
    get_error_file_handler,
    get_error_console_handler,
)


def _writes_files(settings: Settings) -> bool:
    return (not settings.LOG_TO_STDOUT) and bool(settings.LOG_DIR)


def make_dict_config(settings: Settings) -> dict:
    """
    Build the dictConfig mapping for `settings`. Pure: nothing is applied.
    """
    formatters = {
        "standard": {
            "()": ColorFormatter if settings.LOG_FORMAT == "text" else logging.Formatter,
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(correlation_id)s | %(message)s",
        },
        "json": {
            "()": JsonFormatter,
            "env": settings.ENV,
            "service": get_project_name(default="user-store"),
        },
    }

    filters = {
        "correlation_id": {"()": CorrelationIdFilter},
        "redact": {"()": RedactFilter},
    }

    handlers: dict[str, dict] = {"console": get_console_handler(settings)}

    if _writes_files(settings):
        handlers["file"] = get_file_handler(settings)
        handlers["error_file"] = get_error_file_handler(settings)
    else:
        handlers["error_console"] = get_error_console_handler(settings)

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "filters": filters,
        "handlers": handlers,
        "loggers": {
            "": {
                "handlers": list(handlers.keys()),
                "level": settings.LOG_LEVEL,
                "propagate": True,
            },
            # SQL statements may carry bound values (emails, hashes)
            "sqlalchemy.engine": {
                "level": "DEBUG" if settings.ENABLE_SQL_LOGGING else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }


def setup_logging(settings: Settings) -> None:
    """
    Apply the logging configuration for `settings`.

    Creates LOG_DIR when file logging is enabled, applies dictConfig, and adds
    a CorrelationIdFilter on the root logger so `%(correlation_id)s` is always
    resolvable.
    """
    if _writes_files(settings):
        Path(settings.LOG_DIR).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(make_dict_config(settings))
    logging.getLogger().addFilter(CorrelationIdFilter())
