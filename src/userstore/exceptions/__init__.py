# userstore/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # Domain errors (NotFoundError, DuplicateEntryError, StorageError, ...)
# │   ├── integrity_classifier.py    # Driver-level failures -> not_found / unique_violation / other
# │   └── mapper.py                  # Classified failures -> domain errors, storage_error_handler()

from .base import (
    RepositoryError,
    NotFoundError,
    InvalidArgumentError,
    DuplicateEntryError,
    StorageError,
)

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "InvalidArgumentError",
    "DuplicateEntryError",
    "StorageError",
]
