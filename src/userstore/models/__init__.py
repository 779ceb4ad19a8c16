"""
Storage models of the user store.

Import them from here so every model is registered on `Base.metadata`:

    from userstore.models import UserRecord
"""

from .user import UserRecord

__all__ = [
    "UserRecord",
]
